import base64
import pytest
import json

import jwt

from app.models import UserSessions


@pytest.mark.auth
class TestAuthSignup:
    """Test suite for user signup functionality."""

    def test_signup_success(self, client, test_user_data):
        """Test successful user signup."""
        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )
        if response.status_code != 201:
            print(f"\nDEBUG ERROR: {response.data}")

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['status'] == 'success'
        assert data['user']['email'] == test_user_data['email']
        assert data['user']['userType'] == test_user_data['userType']
        assert data['user']['isVerified'] is False

    def test_signup_missing_email(self, client, test_user_data):
        """Test signup with missing email."""
        test_user_data.pop('email')
        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['status'] == 'error'
        assert 'email' in data['message']

    def test_signup_missing_password(self, client, test_user_data):
        """Test signup with missing password."""
        test_user_data.pop('password')
        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['status'] == 'error'

    def test_signup_rejects_non_text_name(self, client, test_user_data):
        test_user_data['name'] = 5
        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'name must be text'

    def test_signup_unknown_user_type(self, client, test_user_data):
        test_user_data['userType'] = 99
        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'Unknown user type'

    def test_signup_duplicate_email(self, client, test_user_data):
        """Test signup with duplicate email."""
        client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['message'] == 'User already exists with this email'

    def test_signup_disabled_by_settings(self, client, auth_headers, test_user_data):
        """Registration can be switched off from the admin settings."""
        client.put(
            '/api/admin/settings',
            data=json.dumps({'registrationEnabled': False}),
            content_type='application/json',
            headers=auth_headers
        )

        response = client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        assert response.status_code == 403


@pytest.mark.auth
class TestAuthLogin:
    """Test suite for user login functionality."""

    def test_login_success(self, client, test_user_data):
        """Test successful login."""
        client.post(
            '/api/auth/signup',
            data=json.dumps(test_user_data),
            content_type='application/json'
        )

        login_data = {
            "email": test_user_data['email'],
            "password": test_user_data['password']
        }
        response = client.post(
            '/api/auth/login',
            data=json.dumps(login_data),
            content_type='application/json'
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'success'
        assert 'token' in data
        assert data['user']['email'] == test_user_data['email']

    def test_login_missing_email(self, client):
        """Test login with missing email."""
        response = client.post(
            '/api/auth/login',
            data=json.dumps({"password": "password123"}),
            content_type='application/json'
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['message'] == 'Email and password required'

    def test_login_unknown_user(self, client):
        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "nobody@example.com", "password": "password123"}),
            content_type='application/json'
        )

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'User not found'

    def test_login_wrong_password(self, client, customer):
        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": customer.email, "password": "wrong-password"}),
            content_type='application/json'
        )

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Invalid password'

    def test_login_inactive_account(self, client, db, customer):
        customer.is_active = False
        db.session.commit()

        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "customer@example.com", "password": "customerpass"}),
            content_type='application/json'
        )

        assert response.status_code == 403

    def test_login_rejects_non_text_password(self, client, customer):
        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": customer.email, "password": 12345678}),
            content_type='application/json'
        )

        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'Email and password must be text'

    def test_maintenance_mode_admits_only_super_admin(self, client, auth_headers, customer):
        client.put(
            '/api/admin/settings',
            data=json.dumps({"maintenanceMode": True}),
            content_type='application/json',
            headers=auth_headers
        )

        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "customer@example.com", "password": "customerpass"}),
            content_type='application/json'
        )
        assert response.status_code == 403
        assert json.loads(response.data)['message'] == 'The system is under maintenance'

        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "admin@brandspace-test.com", "password": "password123"}),
            content_type='application/json'
        )
        assert response.status_code == 200

    def test_login_creates_session(self, client, db, auth_headers, admin_user):
        """Each login is tracked as a server-side session."""
        sessions = db.session.query(UserSessions).filter_by(user_id=admin_user.id).all()
        assert len(sessions) == 1
        assert sessions[0].revoked_at is None


@pytest.mark.auth
class TestAuthSession:
    """Token-protected endpoints."""

    def test_me_requires_token(self, client):
        response = client.get('/api/auth/me')

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Authorization token is missing'

    def test_me_rejects_garbage_token(self, client):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})

        assert response.status_code == 401

    def test_me_rejects_expired_token(self, client, app, monkeypatch):
        monkeypatch.setitem(app.config, 'JWT_EXPIRES_HOURS', -1)
        login = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "admin@brandspace-test.com", "password": "password123"}),
            content_type='application/json'
        )
        assert login.status_code == 200
        token = json.loads(login.data)['token']

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Invalid or expired token'

    def test_me_rejects_token_signed_with_other_key(self, client, auth_headers):
        token = auth_headers['Authorization'].split(' ', 1)[1]
        claims = jwt.decode(token, options={"verify_signature": False})
        forged = jwt.encode(claims, 'another-secret-key-not-used-by-this-server', algorithm='HS256')

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {forged}'})

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Invalid or expired token'

    def test_me_rejects_edited_payload(self, client, auth_headers):
        token = auth_headers['Authorization'].split(' ', 1)[1]
        header, _, signature = token.split('.')
        claims = jwt.decode(token, options={"verify_signature": False})
        claims['sub'] = '999'
        body = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b'=').decode()

        response = client.get(
            '/api/auth/me',
            headers={'Authorization': f'Bearer {header}.{body}.{signature}'}
        )

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Invalid or expired token'

    def test_me_returns_current_user(self, client, auth_headers):
        response = client.get('/api/auth/me', headers=auth_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['user']['email'] == 'admin@brandspace-test.com'
        assert data['user']['userType'] == 1

    def test_logout_revokes_token(self, client, auth_headers):
        response = client.post('/api/auth/logout', headers=auth_headers)
        assert response.status_code == 200

        response = client.get('/api/auth/me', headers=auth_headers)
        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Session has been revoked'

    def test_change_password(self, client, auth_headers):
        response = client.post(
            '/api/auth/change-password',
            data=json.dumps({"current_password": "password123", "new_password": "newpassword456"}),
            content_type='application/json',
            headers=auth_headers
        )
        assert response.status_code == 200

        response = client.post(
            '/api/auth/login',
            data=json.dumps({"email": "admin@brandspace-test.com", "password": "newpassword456"}),
            content_type='application/json'
        )
        assert response.status_code == 200

    def test_change_password_too_short(self, client, auth_headers):
        response = client.post(
            '/api/auth/change-password',
            data=json.dumps({"current_password": "password123", "new_password": "short"}),
            content_type='application/json',
            headers=auth_headers
        )

        assert response.status_code == 400

    def test_change_password_wrong_current(self, client, auth_headers):
        response = client.post(
            '/api/auth/change-password',
            data=json.dumps({"current_password": "nope-nope", "new_password": "newpassword456"}),
            content_type='application/json',
            headers=auth_headers
        )

        assert response.status_code == 401

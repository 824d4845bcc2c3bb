import pytest
import json


@pytest.mark.users
class TestUsers:
    """Test suite for the user management endpoints."""

    def _payload(self, **overrides):
        payload = {
            "user_name": "Omar Admin",
            "email": "omar@example.com",
            "phone": "0555555555",
            "password": "secret123",
            "user_type": 2,
            "user_position": 2,
        }
        payload.update(overrides)
        return payload

    def test_list_requires_token(self, client):
        response = client.get("/api/users")

        assert response.status_code == 401

    def test_list_users(self, client, auth_headers, customer):
        response = client.get("/api/users", headers=auth_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["count"] == 2
        emails = [u["email"] for u in data["users"]]
        assert "customer@example.com" in emails
        assert all("password_hash" not in u for u in data["users"])

    def test_list_users_search_and_type(self, client, auth_headers, customer):
        response = client.get("/api/users?search=sara", headers=auth_headers)
        data = json.loads(response.data)
        assert [u["email"] for u in data["users"]] == ["customer@example.com"]

        response = client.get("/api/users?type=1", headers=auth_headers)
        data = json.loads(response.data)
        assert data["count"] == 1
        assert data["users"][0]["type"]["type_en_name"] == "Super Admin"

    def test_create_user(self, client, auth_headers):
        response = client.post(
            "/api/users",
            data=json.dumps(self._payload()),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["message"] == "User created successfully"
        assert data["user"]["is_active"] is True
        assert data["user"]["position"]["position_en_name"] == "Manager"

    def test_created_user_can_log_in(self, client, auth_headers):
        client.post(
            "/api/users",
            data=json.dumps(self._payload()),
            content_type="application/json",
            headers=auth_headers,
        )

        response = client.post(
            "/api/auth/login",
            json={"email": "omar@example.com", "password": "secret123"},
        )
        assert response.status_code == 200

    def test_create_user_missing_password(self, client, auth_headers):
        payload = self._payload()
        payload.pop("password")
        response = client.post(
            "/api/users",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "Please fill in all required fields"

    def test_create_user_duplicate_email(self, client, auth_headers, customer):
        response = client.post(
            "/api/users",
            data=json.dumps(self._payload(email="customer@example.com")),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "Email already exists"

    def test_create_user_bad_email(self, client, auth_headers):
        response = client.post(
            "/api/users",
            data=json.dumps(self._payload(email="not-an-email")),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_update_user_keeps_password_when_blank(self, client, auth_headers, customer):
        payload = self._payload(
            user_name="Sara Updated", email="customer@example.com", password="", user_type=4
        )
        response = client.put(
            f"/api/users/{customer.id}",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert json.loads(response.data)["user"]["user_name"] == "Sara Updated"

        response = client.post(
            "/api/auth/login",
            json={"email": "customer@example.com", "password": "customerpass"},
        )
        assert response.status_code == 200

    def test_get_missing_user(self, client, auth_headers):
        response = client.get("/api/users/9999", headers=auth_headers)

        assert response.status_code == 404

    def test_delete_user(self, client, auth_headers, customer):
        response = client.delete(f"/api/users/{customer.id}", headers=auth_headers)
        assert response.status_code == 200

        response = client.get(f"/api/users/{customer.id}", headers=auth_headers)
        assert response.status_code == 404

    def test_user_stats(self, client, auth_headers, customer):
        response = client.get("/api/users/stats", headers=auth_headers)

        assert response.status_code == 200
        stats = json.loads(response.data)["stats"]
        assert stats["total"] == 2
        assert stats["active"] == 2
        assert stats["by_type"] == {"Super Admin": 1, "Customer": 1}

    def test_export_users_csv(self, client, auth_headers, customer):
        response = client.get("/api/users?format=csv", headers=auth_headers)

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        body = response.data.decode("utf-8")
        assert body.splitlines()[0].startswith("ID,Name,Email")
        assert "customer@example.com" in body

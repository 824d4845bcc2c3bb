import pytest
import json

from app.models import Notifications
from app.services.email_service import email_service


@pytest.fixture
def notifications(db, customer, admin_user):
    rows = [
        Notifications(user_id=customer.id, title="Welcome", message="Hello Sara", type="general"),
        Notifications(user_id=customer.id, title="Maintenance", message="Downtime tonight", type="system"),
        Notifications(user_id=admin_user.id, title="New booking", message="Unit A1 booked", type="booking", is_read=True),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.mark.notifications
class TestNotifications:
    """Test suite for notification endpoints."""

    def test_create_notification(self, client, auth_headers, customer):
        payload = {"user_id": customer.id, "title": "Hi", "message": "Your unit is ready", "type": "booking"}
        response = client.post(
            "/api/notifications",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 201
        notification = json.loads(response.data)["notification"]
        assert notification["is_read"] is False
        assert notification["user"]["email"] == "customer@example.com"

    def test_create_notification_missing_fields(self, client, auth_headers):
        response = client.post(
            "/api/notifications",
            data=json.dumps({"title": "Hi"}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "Please fill required fields"

    def test_update_resets_read_flag(self, client, auth_headers, notifications, admin_user):
        read = notifications[2]
        payload = {"user_id": admin_user.id, "title": "Booking updated", "message": "Unit A1", "type": "booking"}
        response = client.put(
            f"/api/notifications/{read.id}",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert json.loads(response.data)["notification"]["is_read"] is False

    def test_list_filters(self, client, auth_headers, notifications, customer):
        response = client.get("/api/notifications?type=system", headers=auth_headers)
        assert json.loads(response.data)["count"] == 1

        response = client.get(f"/api/notifications?user_id={customer.id}", headers=auth_headers)
        assert json.loads(response.data)["count"] == 2

        response = client.get("/api/notifications?search=downtime", headers=auth_headers)
        assert json.loads(response.data)["count"] == 1

    def test_stats(self, client, auth_headers, notifications):
        response = client.get("/api/notifications/stats", headers=auth_headers)

        stats = json.loads(response.data)["stats"]
        assert stats == {"total": 3, "unread": 2, "system": 1}

    def test_mark_read(self, client, auth_headers, notifications):
        response = client.post(f"/api/notifications/{notifications[0].id}/read", headers=auth_headers)

        assert response.status_code == 200
        assert json.loads(response.data)["notification"]["is_read"] is True

    def test_mark_all_read_for_user(self, client, auth_headers, notifications, customer):
        response = client.post(
            "/api/notifications/read-all",
            data=json.dumps({"user_id": customer.id}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert json.loads(response.data)["updated"] == 2

        response = client.get("/api/notifications/stats", headers=auth_headers)
        assert json.loads(response.data)["stats"]["unread"] == 0

    def test_delete_notification(self, client, auth_headers, notifications):
        response = client.delete(f"/api/notifications/{notifications[0].id}", headers=auth_headers)
        assert response.status_code == 200

        response = client.get(f"/api/notifications/{notifications[0].id}", headers=auth_headers)
        assert response.status_code == 404


@pytest.mark.notifications
class TestTestEmail:
    """Sending a test email through Resend."""

    def test_requires_email(self, client, auth_headers):
        response = client.post(
            "/api/notifications/test-email",
            data=json.dumps({}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_disabled_service_reports_failure(self, client, auth_headers):
        response = client.post(
            "/api/notifications/test-email",
            data=json.dumps({"email": "ops@example.com"}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 502
        assert json.loads(response.data)["details"] == "Email service is disabled"

    def test_sends_through_service(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(
            email_service,
            "send_test_email",
            lambda to_email: {"success": True, "message": "Email sent successfully", "email_id": "em_42"},
        )
        response = client.post(
            "/api/notifications/test-email",
            data=json.dumps({"email": "ops@example.com"}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert json.loads(response.data)["email_id"] == "em_42"

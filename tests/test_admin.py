import pytest
import json
from decimal import Decimal

from app.models import Payments, utcnow


@pytest.fixture
def completed_payment(db, booking, customer):
    payment = Payments(
        booking_id=booking.id,
        user_id=customer.id,
        amount=Decimal("12000.00"),
        payment_type="monthly_rent",
        payment_method="bank_transfer",
        payment_status="completed",
        paid_at=utcnow(),
    )
    db.session.add(payment)
    db.session.commit()
    return payment


@pytest.mark.admin
class TestAdminAccess:
    def test_customer_is_forbidden(self, client, customer_headers):
        response = client.get("/api/admin/settings", headers=customer_headers)

        assert response.status_code == 403
        assert json.loads(response.data)["message"] == "Admin access required"

    def test_missing_token(self, client):
        response = client.get("/api/admin/reports/summary")

        assert response.status_code == 401


@pytest.mark.admin
class TestAdminReports:
    """Summary, monthly figures and exports."""

    def test_summary(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/reports/summary", headers=auth_headers)

        assert response.status_code == 200
        summary = json.loads(response.data)["summary"]
        assert summary["totalUsers"] == 2
        assert summary["totalRevenue"] == 12000.0
        assert summary["bookingsToday"] == 1
        assert set(summary["growth"]) == {"users", "malls", "shops", "revenue"}

    def test_summary_rejects_inverted_range(self, client, auth_headers):
        response = client.get(
            "/api/admin/reports/summary?from=2026-05-01&to=2026-04-01", headers=auth_headers
        )

        assert response.status_code == 400

    def test_monthly(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/reports/monthly?months=3", headers=auth_headers)

        monthly = json.loads(response.data)["monthly"]
        assert len(monthly) == 3
        assert monthly[-1]["month"] == utcnow().strftime("%Y-%m")
        assert monthly[-1]["revenue"] == 12000.0
        assert monthly[0]["revenue"] == 0.0

    def test_monthly_bounds(self, client, auth_headers):
        response = client.get("/api/admin/reports/monthly?months=30", headers=auth_headers)

        assert response.status_code == 400

    def test_export_csv(self, client, auth_headers, completed_payment):
        response = client.post(
            "/api/admin/reports/export",
            data=json.dumps({"format": "csv", "months": 2}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        lines = response.data.decode("utf-8").splitlines()
        assert lines[0] == "month,users,malls,shops,revenue"
        assert len(lines) == 3

    def test_export_excel(self, client, auth_headers, completed_payment):
        response = client.post(
            "/api/admin/reports/export",
            data=json.dumps({"format": "excel", "sections": ["summary", "payments"]}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.data[:2] == b"PK"
        assert "Brandspace_Report_" in response.headers["Content-Disposition"]

    def test_export_unknown_section(self, client, auth_headers):
        response = client.post(
            "/api/admin/reports/export",
            data=json.dumps({"sections": ["summary", "secrets"]}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400


@pytest.mark.admin
class TestAdminAnalytics:
    """Growth, revenue and performance charts."""

    def test_summary(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/analytics/summary?range=3months", headers=auth_headers)

        assert response.status_code == 200
        data = json.loads(response.data)["data"]
        assert data["totalUsers"] == 2
        assert data["monthlyRevenue"] == 12000.0
        assert data["occupancyRate"] == 0

    def test_bad_range(self, client, auth_headers):
        response = client.get("/api/admin/analytics/summary?range=2years", headers=auth_headers)

        assert response.status_code == 400

    def test_user_growth(self, client, auth_headers, customer):
        response = client.get("/api/admin/analytics/user-growth", headers=auth_headers)

        data = json.loads(response.data)["data"]
        assert len(data) == 6
        assert data[-1]["users"] == 2
        assert data[-1]["newUsers"] == 2
        assert data[-1]["activeUsers"] == 2

    def test_revenue(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/analytics/revenue?range=12months", headers=auth_headers)

        data = json.loads(response.data)["data"]
        assert len(data) == 12
        assert data[-1] == {"month": utcnow().strftime("%Y-%m"), "revenue": 12000.0, "payments": 1}

    def test_mall_performance(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/analytics/mall-performance", headers=auth_headers)

        data = json.loads(response.data)["data"]
        assert data[0]["name"] == "Test Mall"
        assert data[0]["shops"] == 1
        assert data[0]["revenue"] == 12000.0

    def test_category_breakdown(self, client, auth_headers, completed_payment):
        response = client.get("/api/admin/analytics/category-breakdown", headers=auth_headers)

        data = json.loads(response.data)["data"]
        assert len(data) == 5
        retail = data[0]
        assert retail["name"] == "Retail"
        assert retail["value"] == 100.0
        assert retail["revenue"] == 12000.0
        assert all(c["shops"] == 0 for c in data[1:])


@pytest.mark.admin
class TestAdminSettings:
    def test_get_defaults(self, client, auth_headers):
        response = client.get("/api/admin/settings", headers=auth_headers)

        settings = json.loads(response.data)["settings"]
        assert settings["siteName"] == "Brandspace Admin"
        assert settings["maxFileSize"] == 10

    def test_update_and_reset(self, client, auth_headers):
        response = client.put(
            "/api/admin/settings",
            data=json.dumps({"siteName": "Brandspace KSA", "theme": "dark"}),
            content_type="application/json",
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert json.loads(response.data)["message"] == "Settings saved successfully"

        settings = json.loads(client.get("/api/admin/settings", headers=auth_headers).data)["settings"]
        assert settings["siteName"] == "Brandspace KSA"
        assert settings["theme"] == "dark"
        assert settings["language"] == "en"

        response = client.post("/api/admin/settings/reset", headers=auth_headers)
        assert json.loads(response.data)["settings"]["siteName"] == "Brandspace Admin"

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"maxFileSize": 500}, "maxFileSize"),
            ({"theme": "neon"}, "theme"),
            ({"adminEmail": "nope"}, "adminEmail"),
            ({"colour": "blue"}, "colour"),
        ],
    )
    def test_update_rejects_bad_values(self, client, auth_headers, payload, field):
        response = client.put(
            "/api/admin/settings",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["field"] == field


@pytest.mark.admin
class TestAdminSecurity:
    def test_login_events_recorded(self, client, auth_headers):
        client.post("/api/auth/login", json={"email": "admin@brandspace-test.com", "password": "bad"})

        response = client.get("/api/admin/security/events?type=failed_login", headers=auth_headers)
        events = json.loads(response.data)["events"]
        assert len(events) == 1
        assert events[0]["status"] == "failed"
        assert events[0]["user"] == "admin@brandspace-test.com"

    def test_events_bad_type(self, client, auth_headers):
        response = client.get("/api/admin/security/events?type=hack", headers=auth_headers)

        assert response.status_code == 400

    def test_metrics(self, client, auth_headers):
        client.post("/api/auth/login", json={"email": "admin@brandspace-test.com", "password": "bad"})

        response = client.get("/api/admin/security/metrics", headers=auth_headers)
        metrics = json.loads(response.data)["metrics"]
        assert metrics == {
            "loginAttempts": 2,
            "failedAttempts": 1,
            "activeSessions": 1,
            "passwordChanges": 0,
        }

    def test_audit_logging_off(self, client, auth_headers):
        response = client.put(
            "/api/admin/security/settings",
            data=json.dumps({"auditLogging": False}),
            content_type="application/json",
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert json.loads(response.data)["settings"]["auditLogging"] is False

        client.post("/api/auth/login", json={"email": "admin@brandspace-test.com", "password": "bad"})
        response = client.get("/api/admin/security/events?type=failed_login", headers=auth_headers)
        assert json.loads(response.data)["events"] == []

    def test_sessions_and_revoke(self, client, auth_headers, customer_headers):
        response = client.get("/api/admin/security/sessions", headers=auth_headers)
        sessions = json.loads(response.data)["sessions"]
        assert len(sessions) == 2

        current = [s for s in sessions if s["current"]]
        assert current[0]["user"] == "admin@brandspace-test.com"

        other = [s for s in sessions if not s["current"]][0]
        response = client.delete(f"/api/admin/security/sessions/{other['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = client.get("/api/auth/me", headers=customer_headers)
        assert response.status_code == 401

    def test_revoke_missing_session(self, client, auth_headers):
        response = client.delete("/api/admin/security/sessions/999", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.admin
class TestAdminSystem:
    def test_connection_is_public(self, client):
        response = client.get("/api/admin/system/connection")

        assert response.status_code == 200
        assert json.loads(response.data) == {"success": True}

    def test_status(self, client, auth_headers, shop):
        response = client.get("/api/admin/system/status", headers=auth_headers)

        data = json.loads(response.data)
        assert data["database"] == "sqlite"
        assert data["scheduler"] is False
        assert data["tables"]["shops"] == 1
        assert data["tables"]["users"] == 1

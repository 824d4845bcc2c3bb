import pytest
import json
from io import BytesIO

from app.models import Bookings
from app.utils.s3_utils import UploadError, key_from_url, public_url


@pytest.mark.bookings
class TestBookings:
    """Test suite for booking endpoints."""

    def _payload(self, shop, customer, developer, **overrides):
        payload = {
            "shop_id": shop.id,
            "user_id": customer.id,
            "developer_id": developer.id,
            "booking_type": "rent",
            "start_date": "2026-01-01",
            "end_date": "2026-12-31",
            "monthly_amount": "10000",
            "total_amount": "120000",
            "contract_duration": "12",
        }
        payload.update(overrides)
        return payload

    def test_create_booking(self, client, auth_headers, shop, customer, developer):
        response = client.post(
            "/api/bookings",
            data=json.dumps(self._payload(shop, customer, developer)),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 201
        booking = json.loads(response.data)["booking"]
        assert booking["status"] == "pending"
        assert booking["payment_status"] == "pending"
        assert booking["total_amount"] == 120000.0
        assert booking["shop"]["title"] == "Corner Unit A1"
        assert booking["user"]["email"] == "customer@example.com"

    def test_create_booking_end_before_start(self, client, auth_headers, shop, customer, developer):
        payload = self._payload(shop, customer, developer, end_date="2025-06-01")
        response = client.post(
            "/api/bookings",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "End date" in json.loads(response.data)["message"]

    def test_create_booking_bad_type(self, client, auth_headers, shop, customer, developer):
        payload = self._payload(shop, customer, developer, booking_type="lease")
        response = client.post(
            "/api/bookings",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_create_booking_missing_refs(self, client, auth_headers):
        response = client.post(
            "/api/bookings",
            data=json.dumps({"shop_id": 1}),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "Please fill in required fields"

    def test_update_booking_status(self, client, auth_headers, booking, shop, customer, developer):
        payload = self._payload(shop, customer, developer, status="cancelled")
        response = client.put(
            f"/api/bookings/{booking.id}",
            data=json.dumps(payload),
            content_type="application/json",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert json.loads(response.data)["booking"]["status"] == "cancelled"

    def test_list_and_filter_bookings(self, client, auth_headers, booking):
        response = client.get("/api/bookings?search=sara", headers=auth_headers)
        data = json.loads(response.data)
        assert data["count"] == 1
        assert data["bookings"][0]["status_label"] == "Confirmed"

        response = client.get("/api/bookings?status=pending", headers=auth_headers)
        assert json.loads(response.data)["count"] == 0

    def test_booking_stats(self, client, auth_headers, booking):
        response = client.get("/api/bookings/stats", headers=auth_headers)

        stats = json.loads(response.data)["stats"]
        assert stats["total"] == 1
        assert stats["confirmed"] == 1
        assert stats["total_amount"] == 144000.0

    def test_delete_booking(self, client, auth_headers, booking):
        response = client.delete(f"/api/bookings/{booking.id}", headers=auth_headers)
        assert response.status_code == 200

        response = client.get(f"/api/bookings/{booking.id}", headers=auth_headers)
        assert response.status_code == 404


@pytest.mark.bookings
class TestContractUpload:
    """Contract files are stored in S3; the upload itself is faked here."""

    @pytest.fixture
    def fake_s3(self, app, monkeypatch):
        uploads = []
        deletes = []

        def fake_upload(file, key, bucket_name, content_type=None):
            uploads.append((key, bucket_name, file.read()))
            return f"https://{bucket_name}.s3.amazonaws.com/{key}"

        def fake_delete(file_url, bucket_name):
            deletes.append(file_url)
            return True

        monkeypatch.setitem(app.config, "S3_BUCKET_NAME", "test-bucket")
        monkeypatch.setattr("app.api.bookings.bookings.upload_file_to_s3", fake_upload)
        monkeypatch.setattr("app.api.bookings.bookings.delete_file_from_s3", fake_delete)
        return uploads, deletes

    def _upload(self, client, headers, booking_id, name="lease.pdf", content=b"%PDF-1.4 lease"):
        return client.post(
            f"/api/bookings/{booking_id}/contract",
            data={"contract_file": (BytesIO(content), name)},
            content_type="multipart/form-data",
            headers=headers,
        )

    def test_upload_contract(self, client, auth_headers, booking, fake_s3):
        uploads, deletes = fake_s3
        response = self._upload(client, auth_headers, booking.id)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["message"] == "Contract uploaded successfully"
        assert data["booking"]["contract_file"].startswith("https://test-bucket.s3.amazonaws.com/contracts/")
        key, bucket, body = uploads[0]
        assert key.startswith(f"contracts/{booking.id}/")
        assert key.endswith("_lease.pdf")
        assert bucket == "test-bucket"
        assert body == b"%PDF-1.4 lease"
        assert deletes == []

    def test_replacing_contract_deletes_previous(self, client, auth_headers, booking, fake_s3):
        uploads, deletes = fake_s3
        first = json.loads(self._upload(client, auth_headers, booking.id).data)["booking"]["contract_file"]
        self._upload(client, auth_headers, booking.id, name="lease-v2.pdf")

        assert len(uploads) == 2
        assert deletes == [first]

    def test_upload_rejects_file_type(self, client, auth_headers, booking, fake_s3):
        response = self._upload(client, auth_headers, booking.id, name="payload.exe")

        assert response.status_code == 400
        assert "File type not allowed" in json.loads(response.data)["message"]

    def test_upload_rejects_large_file(self, client, auth_headers, booking, fake_s3):
        client.put(
            "/api/admin/settings",
            data=json.dumps({"maxFileSize": 1}),
            content_type="application/json",
            headers=auth_headers,
        )
        response = self._upload(
            client, auth_headers, booking.id, content=b"0" * (1024 * 1024 + 1)
        )

        assert response.status_code == 400

    def test_upload_requires_file(self, client, auth_headers, booking, fake_s3):
        response = client.post(
            f"/api/bookings/{booking.id}/contract",
            data={},
            content_type="multipart/form-data",
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "contract_file is required"

    def test_upload_without_bucket(self, client, app, auth_headers, booking, monkeypatch):
        monkeypatch.setitem(app.config, "S3_BUCKET_NAME", None)
        response = self._upload(client, auth_headers, booking.id)

        assert response.status_code == 500

    def test_failed_cleanup_keeps_new_contract(self, client, db, auth_headers, booking, fake_s3, monkeypatch):
        self._upload(client, auth_headers, booking.id)

        def failing_delete(file_url, bucket_name):
            raise UploadError("AWS credentials not found. Check environment variables.")

        monkeypatch.setattr("app.api.bookings.bookings.delete_file_from_s3", failing_delete)
        response = self._upload(client, auth_headers, booking.id, name="lease-v2.pdf")

        assert response.status_code == 200
        stored = json.loads(response.data)["booking"]["contract_file"]
        assert stored.endswith("_lease-v2.pdf")
        db.session.expire_all()
        assert db.session.get(Bookings, booking.id).contract_file == stored


@pytest.mark.unit
class TestContractKeys:
    def test_key_under_bucket_url(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "S3_BASE_URL", None)
        monkeypatch.setitem(app.config, "S3_BUCKET_NAME", "test-bucket")
        with app.app_context():
            url = public_url("contracts/7/abc_lease.pdf")
            assert url == "https://test-bucket.s3.amazonaws.com/contracts/7/abc_lease.pdf"
            assert key_from_url(url) == "contracts/7/abc_lease.pdf"

    def test_key_under_base_url_with_path(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "S3_BASE_URL", "https://cdn.example.com/media/")
        with app.app_context():
            url = public_url("contracts/7/abc_lease.pdf")
            assert url == "https://cdn.example.com/media/contracts/7/abc_lease.pdf"
            assert key_from_url(url) == "contracts/7/abc_lease.pdf"

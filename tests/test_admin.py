"""
Tests for the premium request flow and the admin panel endpoints
"""
import uuid
from datetime import datetime, timedelta, timezone

from conftest import ADMIN_ID, OTHER_ID, USER_ID, auth_headers
from studycards.services.premium import is_premium_active, review_fields

def _submit(client, user_id=USER_ID, content_type="image/png", data=b"\x89PNGshot"):
    return client.post(
        "/premium/requests", headers=auth_headers(user_id),
        data={"email": "student@example.com", "username": "student"},
        files={"screenshot": ("receipt.png", data, content_type)},
    )

class TestPremiumRequests:
    def test_submit_request(self, client, fake_db):
        response = _submit(client)
        assert response.status_code == 201, response.text
        row = response.json()
        assert row["status"] == "pending"
        assert row["screenshot_url"].startswith(f"{USER_ID}/")
        assert ("payment-screenshots", row["screenshot_url"]) in fake_db.objects

        status = client.get("/premium", headers=auth_headers(USER_ID)).json()
        assert status["is_premium"] is False
        assert status["latest_request"]["id"] == row["id"]

    def test_screenshot_must_be_image(self, client):
        assert _submit(client, content_type="application/pdf").status_code == 400

    def test_screenshot_size_limit(self, client, monkeypatch):
        from studycards.settings import settings
        monkeypatch.setattr(settings, "MAX_SCREENSHOT_MB", 0)
        assert _submit(client).status_code == 413

    def test_second_pending_request_conflicts(self, client):
        assert _submit(client).status_code == 201
        assert _submit(client).status_code == 409

class TestAdminAccess:
    def test_non_admin_is_denied(self, client):
        response = client.get("/admin/premium-requests", headers=auth_headers(USER_ID))
        assert response.status_code == 403
        assert response.json()["detail"] == "You don't have admin privileges"

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/admin/users").status_code == 401

class TestAdminReview:
    def test_approve_grants_thirty_days(self, client, fake_db):
        req_id = _submit(client).json()["id"]
        response = client.post(f"/admin/premium-requests/{req_id}/approve", headers=auth_headers(ADMIN_ID))
        assert response.status_code == 200

        req = fake_db.requests[req_id]
        assert req["status"] == "approved"
        assert req["reviewed_by"] == ADMIN_ID
        profile = fake_db.profiles[USER_ID]
        assert profile["is_premium"] is True
        expires = datetime.fromisoformat(profile["premium_expires_at"])
        assert timedelta(days=29) < expires - datetime.now(timezone.utc) <= timedelta(days=30)

        status = client.get("/premium", headers=auth_headers(USER_ID)).json()
        assert status["is_premium"] is True

    def test_reject_default_reason(self, client, fake_db):
        req_id = _submit(client).json()["id"]
        response = client.post(f"/admin/premium-requests/{req_id}/reject", headers=auth_headers(ADMIN_ID))
        assert response.status_code == 200
        assert fake_db.requests[req_id]["admin_notes"] == "Payment could not be verified"
        assert fake_db.profiles[USER_ID]["is_premium"] is False

    def test_reject_with_reason(self, client, fake_db):
        req_id = _submit(client).json()["id"]
        client.post(f"/admin/premium-requests/{req_id}/reject", headers=auth_headers(ADMIN_ID),
                    json={"reason": "Amount too low"})
        assert fake_db.requests[req_id]["admin_notes"] == "Amount too low"

    def test_cannot_review_twice(self, client):
        req_id = _submit(client).json()["id"]
        h = auth_headers(ADMIN_ID)
        assert client.post(f"/admin/premium-requests/{req_id}/approve", headers=h).status_code == 200
        assert client.post(f"/admin/premium-requests/{req_id}/reject", headers=h).status_code == 409

    def test_screenshot_signed_url(self, client):
        req_id = _submit(client).json()["id"]
        data = client.get(f"/admin/premium-requests/{req_id}/screenshot", headers=auth_headers(ADMIN_ID)).json()
        assert "payment-screenshots" in data["url"]
        assert data["expires_in"] == 3600

    def test_unknown_request(self, client):
        response = client.post(f"/admin/premium-requests/{uuid.uuid4()}/approve", headers=auth_headers(ADMIN_ID))
        assert response.status_code == 404

class TestAdminUsersAndUploads:
    def test_toggle_premium(self, client, fake_db):
        h = auth_headers(ADMIN_ID)
        on = client.post(f"/admin/users/{OTHER_ID}/toggle-premium", headers=h).json()
        assert on["is_premium"] is True and on["premium_expires_at"]
        off = client.post(f"/admin/users/{OTHER_ID}/toggle-premium", headers=h).json()
        assert off == {"id": OTHER_ID, "is_premium": False, "premium_expires_at": None}
        assert fake_db.profiles[OTHER_ID]["premium_expires_at"] is None

    def test_stats(self, client, fake_db):
        _submit(client)
        fake_db.profiles[OTHER_ID]["is_premium"] = True
        fake_db.create_upload(user_id=USER_ID, file_name="a.pdf", file_type="application/pdf", file_url="a")
        stats = client.get("/admin/stats", headers=auth_headers(ADMIN_ID)).json()
        assert stats == {"users": 3, "premium_users": 1, "pending_requests": 1, "uploads": 1}

    def test_delete_upload(self, client, fake_db):
        path = f"{USER_ID}/1700000000000.pdf"
        fake_db.upload_object("uploads", path, b"%PDF", "application/pdf")
        row = fake_db.create_upload(user_id=USER_ID, file_name="a.pdf", file_type="application/pdf", file_url=path)
        h = auth_headers(ADMIN_ID)
        assert len(client.get("/admin/uploads", headers=h).json()["uploads"]) == 1
        assert client.delete(f"/admin/uploads/{row['id']}", headers=h).status_code == 200
        assert not fake_db.uploads
        assert ("uploads", path) not in fake_db.objects
        assert client.delete(f"/admin/uploads/{row['id']}", headers=h).status_code == 404

class TestPremiumHelpers:
    def test_expired_premium_is_inactive(self):
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        assert not is_premium_active({"is_premium": True, "premium_expires_at": past})

    def test_zulu_timestamps(self):
        assert is_premium_active({"is_premium": True, "premium_expires_at": "2999-01-01T00:00:00Z"})

    def test_missing_profile(self):
        assert not is_premium_active(None)

    def test_review_fields(self):
        fields = review_fields("approved", ADMIN_ID)
        assert fields["status"] == "approved"
        assert "admin_notes" not in fields

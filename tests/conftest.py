"""
Shared fixtures: environment, an in-memory stand-in for the Supabase layer,
and helpers for minting Supabase-style JWTs.
"""
import os

os.environ["SUPABASE_JWT_SECRET"] = "test-secret"
os.environ["SUPABASE_URL"] = "http://supabase.local"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role"
os.environ["MOCK_MODE"] = "1"
os.environ["RATE_LIMIT"] = "10000/minute"

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from studycards.main import app
from studycards.services import db, sessions
from studycards.settings import settings

USER_ID = str(uuid.uuid4())
OTHER_ID = str(uuid.uuid4())
ADMIN_ID = str(uuid.uuid4())

def make_token(user_id: str, secret: str = "test-secret") -> str:
    return jwt.encode({"sub": user_id, "aud": "authenticated"}, secret, algorithm="HS256")

def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

class FakeDB:
    """Just enough of studycards.services.db, backed by dicts."""

    def __init__(self):
        self.roles = {ADMIN_ID: {"admin"}, USER_ID: {"user"}, OTHER_ID: {"user"}}
        self.profiles = {
            uid: {"id": uid, "username": name, "email": f"{name}@example.com",
                  "is_premium": False, "premium_expires_at": None, "created_at": _now()}
            for uid, name in ((USER_ID, "student"), (OTHER_ID, "other"), (ADMIN_ID, "admin"))
        }
        self.uploads = {}
        self.sets = {}
        self.cards = {}
        self.requests = {}
        self.objects = {}

    # roles / profiles
    def has_role(self, user_id, role):
        return role in self.roles.get(user_id, set())

    def get_profile(self, user_id):
        return self.profiles.get(user_id)

    def list_profiles(self):
        return list(self.profiles.values())

    def set_premium(self, user_id, *, is_premium, expires_at):
        self.profiles[user_id]["is_premium"] = is_premium
        self.profiles[user_id]["premium_expires_at"] = expires_at.isoformat() if expires_at else None

    # uploads
    def count_uploads(self, user_id):
        return sum(1 for u in self.uploads.values()
                   if u["user_id"] == user_id and u["processing_status"] != "failed")

    def create_upload(self, *, user_id, file_name, file_type, file_url, processing_status="processing"):
        row = {"id": str(uuid.uuid4()), "user_id": user_id, "file_name": file_name,
               "file_type": file_type, "file_url": file_url,
               "processing_status": processing_status, "created_at": _now()}
        self.uploads[row["id"]] = row
        return row

    def update_upload_status(self, upload_id, status):
        self.uploads[upload_id]["processing_status"] = status

    def list_uploads(self):
        return list(self.uploads.values())

    def get_upload(self, upload_id):
        return self.uploads.get(upload_id)

    def delete_upload(self, upload_id):
        self.uploads.pop(upload_id, None)

    # sets / cards
    def create_flashcard_set(self, *, user_id, upload_id, title, description):
        row = {"id": str(uuid.uuid4()), "user_id": user_id, "upload_id": upload_id,
               "title": title, "description": description, "created_at": _now()}
        self.sets[row["id"]] = row
        self.cards[row["id"]] = []
        return row

    def insert_flashcards(self, set_id, cards):
        for i, c in enumerate(cards):
            self.cards[set_id].append({"id": str(uuid.uuid4()), "question": c["question"],
                                       "answer": c["answer"], "order_index": i})

    def list_flashcard_sets(self, user_id):
        return [
            {**s, "flashcards": [{"count": len(self.cards.get(s["id"], []))}]}
            for s in self.sets.values() if s["user_id"] == user_id
        ]

    def get_flashcard_set(self, set_id):
        return self.sets.get(set_id)

    def get_flashcards(self, set_id):
        return sorted(self.cards.get(set_id, []), key=lambda c: c["order_index"])

    def delete_flashcard_set(self, set_id):
        self.sets.pop(set_id, None)
        self.cards.pop(set_id, None)

    # premium requests
    def create_premium_request(self, *, user_id, email, username, screenshot_url):
        row = {"id": str(uuid.uuid4()), "user_id": user_id, "email": email, "username": username,
               "screenshot_url": screenshot_url, "status": "pending", "admin_notes": None,
               "created_at": _now(), "reviewed_at": None, "reviewed_by": None}
        self.requests[row["id"]] = row
        return row

    def latest_premium_request(self, user_id):
        mine = [r for r in self.requests.values() if r["user_id"] == user_id]
        return mine[-1] if mine else None

    def list_premium_requests(self):
        return list(self.requests.values())

    def get_premium_request(self, request_id):
        return self.requests.get(request_id)

    def update_premium_request(self, request_id, fields):
        self.requests[request_id].update(fields)

    # storage
    def upload_object(self, bucket, path, data, content_type):
        self.objects[(bucket, path)] = (data, content_type)

    def remove_object(self, bucket, path):
        self.objects.pop((bucket, path), None)

    def signed_url(self, bucket, path, expires_in=3600):
        return f"http://supabase.local/storage/v1/object/sign/{bucket}/{path}?token=t&expires={expires_in}"

    def add_set(self, user_id, pairs, title="Capitals"):
        row = self.create_flashcard_set(user_id=user_id, upload_id=None, title=title, description="")
        self.insert_flashcards(row["id"], [{"question": q, "answer": a} for q, a in pairs])
        return row["id"]

@pytest.fixture
def fake_db(monkeypatch, tmp_path):
    fake = FakeDB()
    for name in (
        "has_role", "get_profile", "list_profiles", "set_premium",
        "count_uploads", "create_upload", "update_upload_status", "list_uploads",
        "get_upload", "delete_upload",
        "create_flashcard_set", "insert_flashcards", "list_flashcard_sets",
        "get_flashcard_set", "get_flashcards", "delete_flashcard_set",
        "create_premium_request", "latest_premium_request", "list_premium_requests",
        "get_premium_request", "update_premium_request",
        "upload_object", "remove_object", "signed_url",
    ):
        monkeypatch.setattr(db, name, getattr(fake, name))
    monkeypatch.setattr(settings, "CACHE_DIR", str(tmp_path / "cache"))
    sessions.clear()
    yield fake
    sessions.clear()

@pytest.fixture
def client(fake_db):
    return TestClient(app)

CAPITALS = [
    ("Capital of France?", "Paris"),
    ("Capital of Japan?", "Tokyo"),
    ("Capital of Italy?", "Rome"),
    ("Capital of Spain?", "Madrid"),
]

from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase import create_client, Client
from ..settings import settings

UPLOADS_BUCKET = "uploads"
SCREENSHOTS_BUCKET = "payment-screenshots"

_supabase: Client | None = None

def supabase() -> Client:
    global _supabase
    if _supabase is None:
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase

def _first(rows: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    return rows[0] if rows else None

# ---------- roles / profiles ----------
def has_role(user_id: str, role: str) -> bool:
    res = (supabase().table("user_roles").select("role")
           .eq("user_id", user_id).eq("role", role).execute())
    return bool(res.data)

def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    res = supabase().table("profiles").select("*").eq("id", user_id).limit(1).execute()
    return _first(res.data)

def list_profiles() -> List[Dict[str, Any]]:
    return supabase().table("profiles").select("*").order("created_at", desc=True).execute().data

def set_premium(user_id: str, *, is_premium: bool, expires_at: Optional[datetime]):
    supabase().table("profiles").update({
        "is_premium": is_premium,
        "premium_expires_at": expires_at.isoformat() if expires_at else None,
    }).eq("id", user_id).execute()

# ---------- uploads ----------
def count_uploads(user_id: str) -> int:
    """Uploads that count against the free quota; failed ones do not."""
    res = (supabase().table("uploads").select("id", count="exact")
           .eq("user_id", user_id).neq("processing_status", "failed").execute())
    return res.count or 0

def create_upload(*, user_id: str, file_name: str, file_type: str, file_url: str,
                  processing_status: str = "processing") -> Dict[str, Any]:
    res = supabase().table("uploads").insert({
        "user_id": user_id,
        "file_name": file_name,
        "file_type": file_type,
        "file_url": file_url,
        "processing_status": processing_status,
    }).execute()
    return res.data[0]

def update_upload_status(upload_id: str, status: str):
    supabase().table("uploads").update({"processing_status": status}).eq("id", upload_id).execute()

def list_uploads() -> List[Dict[str, Any]]:
    return supabase().table("uploads").select("*").order("created_at", desc=True).execute().data

def get_upload(upload_id: str) -> Optional[Dict[str, Any]]:
    res = supabase().table("uploads").select("*").eq("id", upload_id).limit(1).execute()
    return _first(res.data)

def delete_upload(upload_id: str):
    supabase().table("uploads").delete().eq("id", upload_id).execute()

# ---------- flashcard sets ----------
def create_flashcard_set(*, user_id: str, upload_id: Optional[str], title: str, description: str) -> Dict[str, Any]:
    res = supabase().table("flashcard_sets").insert({
        "user_id": user_id,
        "upload_id": upload_id,
        "title": title,
        "description": description,
    }).execute()
    return res.data[0]

def insert_flashcards(set_id: str, cards: List[Dict[str, str]]):
    rows = [
        {"set_id": set_id, "question": c["question"], "answer": c["answer"], "order_index": i}
        for i, c in enumerate(cards)
    ]
    supabase().table("flashcards").insert(rows).execute()

def list_flashcard_sets(user_id: str) -> List[Dict[str, Any]]:
    res = (supabase().table("flashcard_sets")
           .select("id, title, description, created_at, flashcards(count)")
           .eq("user_id", user_id).order("created_at", desc=True).execute())
    return res.data

def get_flashcard_set(set_id: str) -> Optional[Dict[str, Any]]:
    res = (supabase().table("flashcard_sets").select("id, user_id, title, description, created_at")
           .eq("id", set_id).limit(1).execute())
    return _first(res.data)

def get_flashcards(set_id: str) -> List[Dict[str, Any]]:
    res = (supabase().table("flashcards").select("id, question, answer, order_index")
           .eq("set_id", set_id).order("order_index").execute())
    return res.data

def delete_flashcard_set(set_id: str):
    supabase().table("flashcard_sets").delete().eq("id", set_id).execute()

# ---------- premium requests ----------
def create_premium_request(*, user_id: str, email: str, username: str, screenshot_url: str) -> Dict[str, Any]:
    res = supabase().table("premium_requests").insert({
        "user_id": user_id,
        "email": email,
        "username": username,
        "screenshot_url": screenshot_url,
    }).execute()
    return res.data[0]

def latest_premium_request(user_id: str) -> Optional[Dict[str, Any]]:
    res = (supabase().table("premium_requests").select("*").eq("user_id", user_id)
           .order("created_at", desc=True).limit(1).execute())
    return _first(res.data)

def list_premium_requests() -> List[Dict[str, Any]]:
    return supabase().table("premium_requests").select("*").order("created_at", desc=True).execute().data

def get_premium_request(request_id: str) -> Optional[Dict[str, Any]]:
    res = supabase().table("premium_requests").select("*").eq("id", request_id).limit(1).execute()
    return _first(res.data)

def update_premium_request(request_id: str, fields: Dict[str, Any]):
    supabase().table("premium_requests").update(fields).eq("id", request_id).execute()

# ---------- storage ----------
def upload_object(bucket: str, path: str, data: bytes, content_type: str):
    supabase().storage.from_(bucket).upload(path, data, {"content-type": content_type})

def remove_object(bucket: str, path: str):
    supabase().storage.from_(bucket).remove([path])

def signed_url(bucket: str, path: str, expires_in: int = 3600) -> Optional[str]:
    res = supabase().storage.from_(bucket).create_signed_url(path, expires_in)
    # key casing differs between storage client versions
    return res.get("signedURL") or res.get("signedUrl")

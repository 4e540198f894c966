from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from ..auth import admin_user
from ..schemas import RejectIn
from ..services import db
from ..services.premium import premium_expiry, review_fields
from .library import as_uuid

router = APIRouter(prefix="/admin")

def _pending_request(request_id: str):
    as_uuid(request_id)
    req = db.get_premium_request(request_id)
    if not req:
        raise HTTPException(404, "Not found")
    if req.get("status") != "pending":
        raise HTTPException(409, f"Request already {req.get('status')}")
    return req

@router.get("/stats")
def stats(_: str = Depends(admin_user)):
    users = db.list_profiles()
    requests = db.list_premium_requests()
    return {
        "users": len(users),
        "premium_users": sum(1 for u in users if u.get("is_premium")),
        "pending_requests": sum(1 for r in requests if r.get("status") == "pending"),
        "uploads": len(db.list_uploads()),
    }

@router.get("/premium-requests")
def list_requests(_: str = Depends(admin_user)):
    return {"requests": db.list_premium_requests()}

@router.post("/premium-requests/{request_id}/approve")
def approve(request_id: str, admin_id: str = Depends(admin_user)):
    req = _pending_request(request_id)
    db.update_premium_request(request_id, review_fields("approved", admin_id))
    expires = premium_expiry()
    db.set_premium(req["user_id"], is_premium=True, expires_at=expires)
    logger.info(f"[admin] {admin_id} approved request {request_id} for {req.get('username')}")
    return {"approved": True, "id": request_id, "premium_expires_at": expires.isoformat()}

@router.post("/premium-requests/{request_id}/reject")
def reject(request_id: str, body: RejectIn | None = None, admin_id: str = Depends(admin_user)):
    _pending_request(request_id)
    fields = review_fields("rejected", admin_id, notes=body.reason if body else None)
    db.update_premium_request(request_id, fields)
    logger.info(f"[admin] {admin_id} rejected request {request_id}")
    return {"rejected": True, "id": request_id, "admin_notes": fields["admin_notes"]}

@router.get("/premium-requests/{request_id}/screenshot")
def screenshot(request_id: str, _: str = Depends(admin_user)):
    as_uuid(request_id)
    req = db.get_premium_request(request_id)
    if not req:
        raise HTTPException(404, "Not found")
    url = db.signed_url(db.SCREENSHOTS_BUCKET, req["screenshot_url"], 3600)
    if not url:
        raise HTTPException(502, "Could not sign screenshot URL")
    return {"url": url, "expires_in": 3600}

@router.get("/users")
def list_users(_: str = Depends(admin_user)):
    return {"users": db.list_profiles()}

@router.post("/users/{user_id}/toggle-premium")
def toggle_premium(user_id: str, admin_id: str = Depends(admin_user)):
    as_uuid(user_id)
    profile = db.get_profile(user_id)
    if not profile:
        raise HTTPException(404, "Not found")
    grant = not profile.get("is_premium")
    expires = premium_expiry() if grant else None
    db.set_premium(user_id, is_premium=grant, expires_at=expires)
    logger.info(f"[admin] {admin_id} set premium={grant} for {profile.get('username')}")
    return {
        "id": user_id,
        "is_premium": grant,
        "premium_expires_at": expires.isoformat() if expires else None,
    }

@router.get("/uploads")
def list_uploads(_: str = Depends(admin_user)):
    return {"uploads": db.list_uploads()}

@router.delete("/uploads/{upload_id}")
def delete_upload(upload_id: str, admin_id: str = Depends(admin_user)):
    as_uuid(upload_id)
    row = db.get_upload(upload_id)
    if not row:
        raise HTTPException(404, "Not found")
    if row.get("file_url"):
        db.remove_object(db.UPLOADS_BUCKET, row["file_url"])
    db.delete_upload(upload_id)
    logger.info(f"[admin] {admin_id} deleted upload {upload_id}")
    return {"deleted": True, "id": upload_id}

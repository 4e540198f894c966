import time
from pathlib import PurePath

from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Depends
from loguru import logger

from ..auth import current_user
from ..services import db
from ..services.premium import is_premium_active
from ..settings import settings

router = APIRouter()

@router.get("/premium")
def premium_status(uid: str = Depends(current_user)):
    profile = db.get_profile(uid) or {}
    return {
        "username": profile.get("username"),
        "is_premium": is_premium_active(profile),
        "premium_expires_at": profile.get("premium_expires_at"),
        "latest_request": db.latest_premium_request(uid),
    }

@router.post("/premium/requests", status_code=201)
async def request_premium(
    email: str = Form(...),
    username: str = Form(...),
    screenshot: UploadFile = File(...),
    uid: str = Depends(current_user),
):
    email, username = email.strip(), username.strip()
    if not email or not username:
        raise HTTPException(400, "Please fill all fields and upload a screenshot")
    if not (screenshot.content_type or "").startswith("image/"):
        raise HTTPException(400, "Please upload an image file (screenshot)")
    raw = await screenshot.read()
    if not raw:
        raise HTTPException(400, "Empty file.")
    if len(raw) > settings.MAX_SCREENSHOT_MB * 1024 * 1024:
        raise HTTPException(413, f"Maximum file size is {settings.MAX_SCREENSHOT_MB}MB")

    if is_premium_active(db.get_profile(uid)):
        raise HTTPException(409, "You already have premium.")
    latest = db.latest_premium_request(uid)
    if latest and latest.get("status") == "pending":
        raise HTTPException(409, "Your premium request is already being reviewed.")

    ext = PurePath(screenshot.filename or "").suffix.lstrip(".").lower() or "png"
    path = f"{uid}/{int(time.time() * 1000)}.{ext}"
    db.upload_object(db.SCREENSHOTS_BUCKET, path, raw, screenshot.content_type)
    row = db.create_premium_request(user_id=uid, email=email, username=username, screenshot_url=path)
    logger.info(f"[premium] request {row.get('id')} submitted by user_id={uid}")
    return row

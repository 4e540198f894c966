import time
from pathlib import PurePath

from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Depends
from openai import APIError, AuthenticationError, RateLimitError
from loguru import logger

from ..auth import current_user
from ..services import db
from ..services.flashcards import generate_flashcards
from ..services.premium import is_premium_active
from ..settings import settings

router = APIRouter()

ALLOWED_TYPES = {"application/pdf", "image/png", "image/jpeg", "image/jpg"}

def _storage_path(user_id: str, file_name: str) -> str:
    ext = PurePath(file_name).suffix.lstrip(".").lower() or "bin"
    return f"{user_id}/{int(time.time() * 1000)}.{ext}"

def _check_quota(user_id: str):
    if is_premium_active(db.get_profile(user_id)):
        return
    used = db.count_uploads(user_id)
    if used >= settings.FREE_UPLOAD_LIMIT:
        raise HTTPException(
            402, f"Free plan allows {settings.FREE_UPLOAD_LIMIT} uploads. Upgrade to premium for unlimited uploads."
        )

@router.post("/upload")
async def upload(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    user_id: str = Depends(current_user),
):
    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_TYPES:
        raise HTTPException(400, "Please upload a PDF or image file (PNG, JPEG)")
    raw = await file.read()
    if not raw: raise HTTPException(400, "Empty file.")
    if len(raw) > settings.MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(413, f"Please upload a file smaller than {settings.MAX_UPLOAD_MB}MB")

    _check_quota(user_id)

    file_name = file.filename or "document"
    path = _storage_path(user_id, file_name)
    db.upload_object(db.UPLOADS_BUCKET, path, raw, content_type)
    record = db.create_upload(user_id=user_id, file_name=file_name, file_type=content_type, file_url=path)
    upload_id = record["id"]
    logger.info(f"[upload] user_id={user_id} upload_id={upload_id} file={file_name!r}")

    try:
        cards = await generate_flashcards(raw, content_type, file_name)

        set_row = db.create_flashcard_set(
            user_id=user_id,
            upload_id=upload_id,
            title=(title or "").strip() or PurePath(file_name).stem,
            description=f"Generated from {file_name}",
        )
        db.insert_flashcards(set_row["id"], cards)
        db.update_upload_status(upload_id, "completed")
        logger.info(f"[upload] set_id={set_row['id']} cards={len(cards)}")

        return {"success": True, "set_id": set_row["id"], "flashcards_count": len(cards)}

    except Exception as e:
        logger.warning(f"[upload] processing failed for upload_id={upload_id}: {e}")
        try:
            db.update_upload_status(upload_id, "failed")
        except Exception as mark_err:
            logger.error(f"[upload] could not mark upload_id={upload_id} failed: {mark_err}")
        if isinstance(e, AuthenticationError):
            raise HTTPException(401, "AI auth failed. Check OPENAI_API_KEY.")
        if isinstance(e, RateLimitError):
            raise HTTPException(429, "Rate limit exceeded. Please try again later.")
        if isinstance(e, APIError):
            raise HTTPException(502, f"AI API error: {getattr(e, 'message', str(e))}")
        if isinstance(e, HTTPException):
            raise
        raise HTTPException(500, f"Server error: {str(e)}")

from __future__ import annotations

import uuid
from typing import Any, Dict
from urllib.parse import unquote_plus

from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from ..auth import current_user
from ..services import db

router = APIRouter()

def as_uuid(val: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(val))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid UUID")

def owned_set(set_id: str, uid: str) -> Dict[str, Any]:
    """Load a flashcard set, ensuring it belongs to uid (service role, so checked manually)."""
    as_uuid(set_id)
    row = db.get_flashcard_set(set_id)
    if not row:
        raise HTTPException(status_code=404, detail="Not found")
    if row.get("user_id") != uid:
        raise HTTPException(status_code=403, detail="Forbidden")
    return row

def _display_title(title: str) -> str:
    # titles may arrive URL-encoded from the file name
    return unquote_plus(title or "")

@router.get("/sets")
def list_sets(uid: str = Depends(current_user)):
    out = []
    for s in db.list_flashcard_sets(uid):
        counts = s.get("flashcards") or []
        out.append({
            "id": s["id"],
            "title": _display_title(s.get("title")),
            "description": s.get("description"),
            "created_at": s.get("created_at"),
            "flashcards_count": counts[0].get("count", 0) if counts else 0,
        })
    return {"sets": out}

@router.get("/sets/{set_id}")
def get_set(set_id: str, uid: str = Depends(current_user)):
    row = owned_set(set_id, uid)
    cards = db.get_flashcards(set_id)
    return {
        "id": row["id"],
        "title": _display_title(row.get("title")),
        "description": row.get("description"),
        "flashcards": [
            {"id": c.get("id"), "question": c["question"], "answer": c["answer"]}
            for c in cards
        ],
    }

@router.delete("/sets/{set_id}")
def delete_set(set_id: str, uid: str = Depends(current_user)):
    owned_set(set_id, uid)
    db.delete_flashcard_set(set_id)
    logger.info(f"[delete] set_id={set_id} user_id={uid}")
    return {"deleted": True, "id": set_id}

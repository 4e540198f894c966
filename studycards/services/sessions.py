import threading
import time
import uuid
from typing import Dict, Optional, Tuple

from ..settings import settings
from .quiz import QuizSession

# session_id -> (owner user_id, set_id, session, last touched)
_sessions: Dict[str, Tuple[str, str, QuizSession, float]] = {}
# sync routes run in the threadpool
_lock = threading.Lock()

def _prune(now: float) -> None:
    # caller holds _lock
    ttl = settings.QUIZ_SESSION_TTL_SECONDS
    for sid in [sid for sid, (_, _, _, ts) in _sessions.items() if now - ts > ttl]:
        _sessions.pop(sid, None)

def open_session(user_id: str, set_id: str, session: QuizSession) -> str:
    sid = str(uuid.uuid4())
    with _lock:
        now = time.monotonic()
        _prune(now)
        _sessions[sid] = (user_id, set_id, session, now)
    return sid

def get_session(user_id: str, session_id: str) -> Optional[Tuple[str, QuizSession]]:
    """Return (set_id, session) for the owner, or None if unknown/expired/not theirs."""
    with _lock:
        now = time.monotonic()
        _prune(now)
        entry = _sessions.get(session_id)
        if not entry or entry[0] != user_id:
            return None
        owner, set_id, session, _ = entry
        _sessions[session_id] = (owner, set_id, session, now)
        return set_id, session

def close_session(user_id: str, session_id: str) -> bool:
    with _lock:
        entry = _sessions.get(session_id)
        if not entry or entry[0] != user_id:
            return False
        del _sessions[session_id]
        return True

def clear() -> None:
    with _lock:
        _sessions.clear()

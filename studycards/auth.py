# studycards/auth.py
from typing import Optional, Any
from fastapi import Header, HTTPException, Depends
from jose import jwt, JWTError
import logging
from .settings import settings
from .services import db

logger = logging.getLogger("auth")

def _get_supabase_secret() -> str:
    """
    Return the Supabase JWT secret as a plain string, even if Settings uses SecretStr.
    """
    secret: Any = getattr(settings, "SUPABASE_JWT_SECRET", "")
    if hasattr(secret, "get_secret_value"):
        # pydantic SecretStr
        secret = secret.get_secret_value()
    if not isinstance(secret, str):
        secret = str(secret or "")
    return secret.strip()

def user_id_from_auth_header(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        logger.warning("No Authorization Bearer token present")
        return None

    token = authorization.split(" ", 1)[1].strip()
    secret = _get_supabase_secret()
    if not secret:
        logger.error("SUPABASE_JWT_SECRET is not configured")
        return None

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options={"verify_aud": False},  # Supabase uses 'aud': 'authenticated'
        )
        uid = payload.get("sub") or payload.get("user_id")
        if not uid:
            logger.warning(f"Decoded JWT but no sub/user_id; payload keys: {list(payload.keys())}")
        return uid
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        return None

def current_user(Authorization: str | None = Header(default=None)) -> str:
    uid = user_id_from_auth_header(Authorization)
    if not uid:
        raise HTTPException(status_code=401, detail="Missing/invalid token")
    return uid

def admin_user(uid: str = Depends(current_user)) -> str:
    if not db.has_role(uid, "admin"):
        logger.warning(f"Non-admin {uid} attempted admin access")
        raise HTTPException(status_code=403, detail="You don't have admin privileges")
    return uid

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..settings import settings

DEFAULT_REJECT_REASON = "Payment could not be verified"

def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

def premium_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=settings.PREMIUM_DAYS)

def is_premium_active(profile: Optional[Dict[str, Any]], now: Optional[datetime] = None) -> bool:
    """A profile is premium while the flag is set and the expiry (if any) is in the future."""
    if not profile or not profile.get("is_premium"):
        return False
    expires = _parse_ts(profile.get("premium_expires_at"))
    if expires is None:
        return True
    return expires > (now or datetime.now(timezone.utc))

def review_fields(status: str, reviewer_id: str, notes: Optional[str] = None,
                  now: Optional[datetime] = None) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "status": status,
        "reviewed_at": (now or datetime.now(timezone.utc)).isoformat(),
        "reviewed_by": reviewer_id,
    }
    if status == "rejected":
        fields["admin_notes"] = notes or DEFAULT_REJECT_REASON
    return fields

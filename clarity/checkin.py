from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

CHECK_IN_DAYS = 7
DRAFT_KEY = "current"

CLARITY_DIRECTION_LABEL = {
    "subio": "Subió",
    "igual": "Igual",
    "bajo": "Bajó",
}


@dataclass
class CheckIn:
    what_changed: str
    clarity_direction: str  # subio | igual | bajo
    new_data: str
    completed_at: str = ""


def _parse_iso(iso: str) -> datetime:
    d = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    if d.tzinfo is None:
        d = d.replace(tzinfo=timezone.utc)
    return d


def days_since(created_at: str, now: Optional[datetime] = None) -> int:
    """Whole days since `created_at`, clamped to the 0..7 check-in window."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    try:
        start = _parse_iso(created_at)
    except ValueError:
        return 0
    days = (now - start).total_seconds() // 86400
    return int(min(CHECK_IN_DAYS, max(0, days)))


def is_check_in_due(created_at: str, now: Optional[datetime] = None) -> bool:
    return days_since(created_at, now) >= CHECK_IN_DAYS

"""
Time helpers: timezone-aware timestamps and elapsed-week arithmetic.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

WEEK = timedelta(weeks=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Union[datetime, str]) -> datetime:
    """Parse an ISO string (trailing Z allowed) or datetime; naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def weeks_between(earlier: datetime, later: datetime) -> float:
    """Fractional weeks from earlier to later."""
    return (ensure_utc(later) - ensure_utc(earlier)) / WEEK

"""
Timezone utilities for CineScope.
Provides consistent UTC datetime handling.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.
    Replacement for deprecated datetime.utcnow().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is UTC and timezone-aware.
    If timezone-naive, assumes it's already UTC and adds UTC timezone.
    If timezone-aware, converts to UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # SQLite hands back naive values for DateTime(timezone=True)
        return dt.replace(tzinfo=timezone.utc)
    else:
        return dt.astimezone(timezone.utc)


def format_iso_utc(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO-8601 UTC string, or None."""
    dt = ensure_utc(dt)
    return dt.isoformat() if dt else None

"""
Utility functions for UTC date handling.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def get_utc_now() -> datetime:
    """Current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones to UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    """Midnight UTC of the day containing dt."""
    dt = ensure_utc(dt)
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def days_ago(dt: datetime, days: int) -> datetime:
    return start_of_day(dt) - timedelta(days=days)

"""
Shared utilities.

Timestamp helpers used by the models, the import pipeline and the API. All
timestamps are handled as timezone-aware UTC; SQLite hands naive values back
on round-trip, so every reader goes through ``ensure_utc``.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Coerce a datetime to timezone-aware UTC.

    Naive values are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_date(date_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or date-time string to a UTC datetime.

    Args:
        date_str: e.g. "2025-05-01", "2025-05-01T09:00:00Z", "2025-05-01T11:00:00+02:00".

    Returns:
        Parsed datetime in UTC, or None if parsing fails.
    """
    if not date_str:
        return None
    try:
        # Handle 'Z' suffix
        if date_str.endswith(("Z", "z")):
            date_str = date_str[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(date_str))
    except (ValueError, AttributeError, TypeError):
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """
    Render a datetime as ISO 8601 UTC with millisecond precision.

    >>> format_timestamp(datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc))
    '2025-05-01T09:00:00.000Z'
    """
    if value is None:
        return None
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


__all__ = ["utcnow", "ensure_utc", "parse_iso_date", "format_timestamp"]

"""Timezone-aware datetime utilities.

All datetime values in the service use UTC for storage and comparison.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current datetime with UTC timezone.

    Always use this function instead of datetime.utcnow() or datetime.now().

    Returns:
        Current datetime with UTC timezone
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure datetime has UTC timezone.

    Naive datetimes are assumed to be UTC already.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def older_than(dt: datetime | None, age: timedelta, now: datetime | None = None) -> bool:
    """Check whether a timestamp lies further in the past than ``age``.

    Args:
        dt: Timestamp to check. ``None`` is never considered old.
        age: Minimum age
        now: Reference time (defaults to utc_now())

    Returns:
        True if ``now - dt`` exceeds ``age``
    """
    if dt is None:
        return False
    now = ensure_utc(now or utc_now())
    return now - ensure_utc(dt) > age


def datetime_to_iso(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string.

    Args:
        dt: Datetime to convert

    Returns:
        ISO 8601 formatted string, or None if input is None
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()

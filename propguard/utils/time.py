"""
Time handling helpers for challenge and journal calculations.

Results that depend on "now" take the instant as an argument so that the
same snapshot always produces the same answer. These helpers normalise the
different date representations a data store hands back.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

DateLike = Union[datetime, date, str]

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now(now: Optional[datetime] = None) -> datetime:
    """
    Get the evaluation instant, falling back to wall-clock UTC.

    Args:
        now: Explicit evaluation instant

    Returns:
        Timezone-aware UTC datetime
    """
    if now is not None:
        return ensure_utc(now)

    return datetime.now(timezone.utc)


def ensure_utc(value: DateLike) -> datetime:
    """
    Normalise a datetime, date or ISO string to an aware UTC datetime.

    Dates become midnight UTC. Strings accept a trailing ``Z``.

    Raises:
        ValueError: If a string is not ISO 8601
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def days_elapsed(start: DateLike, now: Optional[datetime] = None) -> int:
    """
    Whole days between ``start`` and ``now`` (floor, may be negative).
    """
    delta = utc_now(now) - ensure_utc(start)
    return int(delta.total_seconds() // SECONDS_PER_DAY)


def start_of_day(now: Optional[datetime] = None) -> datetime:
    """Midnight UTC of the day containing ``now``."""
    current = utc_now(now)
    return current.replace(hour=0, minute=0, second=0, microsecond=0)


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    """The instant ``days`` days before ``now``."""
    return utc_now(now) - timedelta(days=days)


def format_iso(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO 8601, passing ``None`` through."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()

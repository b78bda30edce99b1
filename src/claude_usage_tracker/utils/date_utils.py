"""Local calendar helpers for grouping records by day and hour."""

from datetime import datetime, timezone, tzinfo


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert to the given zone, or the system local zone when tz is None.

    Naive datetimes are taken to be in local time already.
    """
    if dt.tzinfo is None:
        return dt if tz is None else dt.astimezone(tz)
    return dt.astimezone(tz)


def day_key(dt: datetime, tz: tzinfo | None = None) -> str:
    """Format the local calendar day as YYYY-MM-DD."""
    return to_local(dt, tz).strftime("%Y-%m-%d")


def hour_of_day(dt: datetime, tz: tzinfo | None = None) -> int:
    return to_local(dt, tz).hour


def start_of_day(dt: datetime, tz: tzinfo | None = None) -> datetime:
    return to_local(dt, tz).replace(hour=0, minute=0, second=0, microsecond=0)


def is_same_day(a: datetime, b: datetime, tz: tzinfo | None = None) -> bool:
    return to_local(a, tz).date() == to_local(b, tz).date()


def floor_to_hour(dt: datetime) -> datetime:
    """Truncate to the start of the UTC hour.

    Half-hour offsets floor to the UTC hour, not the local one.
    """
    return dt.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)

"""
Time helpers shared by the scheduler, the signal store and the notifier.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current wall-clock time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def time_elapsed_seconds(start_time: datetime, end_time: Optional[datetime] = None) -> float:
    """
    Calculate elapsed time in seconds between two timestamps.

    Args:
        start_time: Start timestamp
        end_time: End timestamp, defaults to now

    Returns:
        Elapsed time in seconds
    """
    if end_time is None:
        end_time = utc_now()

    return (end_time - start_time).total_seconds()


def cooldown_elapsed(
    last_time: Optional[datetime],
    now: datetime,
    interval_minutes: float
) -> bool:
    """True when no previous time exists or at least interval_minutes have passed."""
    if last_time is None:
        return True
    return time_elapsed_seconds(last_time, now) >= interval_minutes * 60


def format_timestamp(ts: datetime) -> str:
    """ISO8601 representation used for persistence and broadcast payloads."""
    return ts.isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO8601 string, assuming UTC when no offset is present."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_local_time(ts: datetime, tz_name: str) -> str:
    """
    Format a timestamp as a 12-hour clock time in the given IANA timezone.

    Example: "3:07 PM"
    """
    local = ts.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"

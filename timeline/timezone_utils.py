"""
Timezone utilities for Kubux Tasks.

Provides unified timezone conversion and timestamp parsing for the entire
application. Task timestamps arrive as ISO-8601 strings and are converted
to local time for layout.
"""

from datetime import datetime, date, time as dt_time
from typing import Optional
import time as _time
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"


def set_timezone(timezone_name: str):
    """Set the local timezone for the application."""
    global _local_timezone_name
    _local_timezone_name = timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback: try system timezone name
        try:
            return pytz.timezone(_time.tzname[0])
        except pytz.UnknownTimeZoneError:
            # Last resort: calculate offset and use fixed offset timezone
            is_dst = _time.localtime().tm_isdst
            if is_dst:
                offset_seconds = -_time.altzone
            else:
                offset_seconds = -_time.timezone
            return pytz.FixedOffset(offset_seconds // 60)


def to_local_datetime(dt: datetime) -> datetime:
    """
    Convert an aware datetime to the local timezone.

    Args:
        dt: A datetime object, typically in UTC with tzinfo set.

    Returns:
        A timezone-aware datetime in the local timezone.
        If input has no tzinfo, returns it unchanged.
    """
    if dt.tzinfo is not None:
        local_tz = get_local_timezone()
        return dt.astimezone(local_tz)
    return dt


def localize(dt: datetime) -> datetime:
    """Attach the local timezone to a naive local datetime."""
    if dt.tzinfo is None:
        return get_local_timezone().localize(dt)
    return to_local_datetime(dt)


def combine_like(reference: datetime, day: date, at: dt_time) -> datetime:
    """
    Build a datetime on ``day`` at ``at`` with the same awareness as ``reference``.

    Naive references produce naive results; aware references produce
    a datetime localized in the configured timezone.
    """
    combined = datetime.combine(day, at)
    if reference.tzinfo is None:
        return combined
    return get_local_timezone().localize(combined)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a local, timezone-aware datetime.

    Naive values are interpreted as local time. Returns None for empty or
    unparsable input; never raises.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return localize(parsed)


def format_local(dt: datetime) -> str:
    """Format as a local ``YYYY-MM-DDTHH:MM`` string."""
    return to_local_datetime(dt).strftime("%Y-%m-%dT%H:%M")

"""
Time rules for shift admission.
Handles "HH:mm" parsing, wall-clock lookup and the shift-window check.
"""
from datetime import datetime, time
from typing import Optional, Union
import pytz
from ..config import settings


TimeLike = Union[str, time, datetime]


def parse_hhmm(value: str) -> time:
    """
    Parse a shift boundary in "HH:mm" form.

    Args:
        value: Time string, 24-hour clock (e.g. "08:00", "22:30")

    Returns:
        time with seconds dropped

    Raises:
        ValueError: if value is not a valid "HH:mm" string
    """
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"invalid shift time: {value!r}")


def to_minute(value: TimeLike) -> time:
    """Normalize a string, time or datetime to an hour:minute time of day."""
    if isinstance(value, str):
        return parse_hhmm(value)
    if isinstance(value, datetime):
        value = value.time()
    return value.replace(second=0, microsecond=0, tzinfo=None)


def current_time_of_day(timezone_str: Optional[str] = None) -> time:
    """
    Wall-clock time of day in the configured timezone, truncated to the minute.

    Args:
        timezone_str: Timezone string (defaults to TZ_DEFAULT)
    """
    try:
        tz = pytz.timezone(timezone_str or settings.tz_default)
    except pytz.UnknownTimeZoneError:
        tz = pytz.UTC
    return to_minute(datetime.now(tz))


def format_hhmm(value: TimeLike) -> str:
    return to_minute(value).strftime("%H:%M")


def is_within_shift(now: TimeLike, start: TimeLike, end: TimeLike) -> bool:
    """
    Check whether a time of day falls inside a shift window.

    Only hour and minute are compared. Both boundaries are inclusive.
    A window whose start is after its end spans midnight.

    Args:
        now: Current time of day
        start: Shift start ("HH:mm" or time)
        end: Shift end ("HH:mm" or time)

    Returns:
        True if now is inside the window
    """
    current = to_minute(now)
    start_time = to_minute(start)
    end_time = to_minute(end)

    if start_time <= end_time:
        return start_time <= current <= end_time
    # Overnight shift
    return current >= start_time or current <= end_time

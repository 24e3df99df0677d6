# aetherchat/services/scheduling/time_slots.py
"""Time-of-day primitives for "HH:MM" slot strings.

Slots are compared as minute offsets from midnight. All windows are half-open,
so a slot ending exactly when a break starts does not overlap the break.
"""
import re
from datetime import date, datetime, time
from typing import NamedTuple

from aetherchat.core.exceptions import InvalidDate, InvalidTimeFormat

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MINUTES_PER_DAY = 24 * 60


class TimeOfDay(NamedTuple):
    hours: int
    minutes: int


def parse_time(value: str) -> TimeOfDay:
    """Parse a strict "HH:MM" string (00:00-23:59)"""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)

    match = _TIME_RE.match(value)
    if not match:
        raise InvalidTimeFormat(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(value)

    return TimeOfDay(hours, minutes)


def to_minutes(value: TimeOfDay) -> int:
    return value.hours * 60 + value.minutes


def time_to_minutes(value: str) -> int:
    """Shortcut for to_minutes(parse_time(value))"""
    return to_minutes(parse_time(value))


def format_time(minutes: int) -> str:
    """Format a minute offset within a day as "HH:MM" """
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise ValueError(f"Minute offset out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_of_day(value: str) -> time:
    parsed = parse_time(value)
    return time(parsed.hours, parsed.minutes)


def overlaps(slot_start: int, duration_minutes: int, range_start: int, range_end: int) -> bool:
    """True iff [slot_start, slot_start + duration) intersects [range_start, range_end)"""
    slot_end = slot_start + duration_minutes
    return slot_start < range_end and range_start < slot_end


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD calendar date"""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidDate(value)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDate(value)


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def weekday_index(value: date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday"""
    return (value.weekday() + 1) % 7

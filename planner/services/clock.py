"""Parsing and rendering of 12-hour clock text such as ``"2:30 PM"``."""

from __future__ import annotations

import re
from datetime import date, datetime, time, tzinfo

from planner.exceptions import TimeParseError

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def to_24_hour(hour: int, period: str) -> int:
    """Convert a 1-12 hour and its AM/PM period to a 0-23 hour.

    12 AM is midnight (0), 12 PM is noon (12), other PM hours add 12.
    """
    period = period.upper()
    if period == "AM":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def parse_clock_time(text: str | None) -> time:
    """Parse ``H:MM AM|PM`` into a :class:`datetime.time`.

    Raises ``TimeParseError`` for anything that is not a valid 12-hour time.
    """
    if not isinstance(text, str):
        raise TimeParseError(repr(text), "not a string")
    m = _CLOCK_RE.match(text)
    if m is None:
        raise TimeParseError(text, "expected H:MM AM/PM")

    hour, minute, period = int(m.group(1)), int(m.group(2)), m.group(3)
    if not 1 <= hour <= 12:
        raise TimeParseError(text, f"hour {hour} out of range 1-12")
    if not 0 <= minute <= 59:
        raise TimeParseError(text, f"minute {minute} out of range 0-59")

    return time(to_24_hour(hour, period), minute)


def combine_on_day(day: date, text: str | None, tz: tzinfo | None = None) -> datetime:
    """Place the clock time *text* on the civil date *day*."""
    return datetime.combine(day, parse_clock_time(text), tzinfo=tz)


def format_clock_time(value: datetime | time) -> str:
    """Render a time as 12-hour clock text, e.g. ``"1:15 PM"``."""
    hour12 = value.hour % 12 or 12
    period = "AM" if value.hour < 12 else "PM"
    return f"{hour12}:{value.minute:02d} {period}"

"""Wall-clock <-> minute-of-day conversions for lecture slots.

All comparisons between slot times happen on integer minutes. ``HH:MM``
strings only exist at the edges (input parsing and display).
"""

from __future__ import annotations

import re

from timetable_service.core.exceptions import ParseError

MINUTES_PER_DAY = 24 * 60
LAST_MINUTE_OF_DAY = MINUTES_PER_DAY - 1
MIN_DURATION_MINUTES = 30
MAX_DURATION_MINUTES = 180

TIME_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise ParseError(value)
    match = TIME_PATTERN.match(value.strip())
    if match is None:
        raise ParseError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23:
        raise ParseError(value, "Hour must be between 00 and 23")
    if minutes > 59:
        raise ParseError(value, "Minute must be between 00 and 59")
    return hours * 60 + minutes


def compute_end_time(start_minutes: int, duration_minutes: int) -> int:
    # No wrap past midnight; range checks belong to the slot validator.
    return start_minutes + duration_minutes


def format_minutes(minutes: int) -> str:
    if minutes < 0:
        raise ParseError(minutes, "Minute offset cannot be negative")
    hours, remainder = divmod(minutes, 60)
    return f"{hours:02d}:{remainder:02d}"


def is_duration_in_bounds(duration_minutes: int) -> bool:
    return MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES

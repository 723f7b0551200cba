"""
Calendar date helpers used by the scheduler.

Dates are plain calendar dates and times are floating local wall times:
nothing here carries a timezone offset.
"""

import math
import re
from datetime import date, datetime, time, timedelta

# 0 = Sunday ... 6 = Saturday
SUNDAY = 0
SATURDAY = 6
DAYS_PER_WEEK = 7

START_AT_FORMAT = "%Y-%m-%dT%H:%M"

_TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def add_days(day: date, n: int) -> date:
    """Return the calendar date ``n`` days after ``day`` (negative goes back)."""
    return day + timedelta(days=n)


def add_weeks(day: date, n: int) -> date:
    return add_days(day, n * DAYS_PER_WEEK)


def weekday_index_of(day: date) -> int:
    """Weekday index with Sunday as 0, matching the ``daysOfWeek`` preference."""
    # date.weekday() is Monday=0 .. Sunday=6
    return (day.weekday() + 1) % DAYS_PER_WEEK


def round_minutes(value: float) -> int:
    """Round a minute count half up (44.5 -> 45), unlike the built-in round()."""
    return math.floor(value + 0.5)


def is_valid_time_of_day(value: str) -> bool:
    return isinstance(value, str) and bool(_TIME_OF_DAY_RE.match(value))


def parse_time_of_day(value: str) -> time:
    """Parse a 24h ``HH:mm`` string."""
    match = _TIME_OF_DAY_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:mm)")
    return time(int(match.group(1)), int(match.group(2)))


def format_start_at(day: date, time_of_day: str) -> str:
    """Combine a date and an ``HH:mm`` time into ``YYYY-MM-DDTHH:MM``."""
    moment = datetime.combine(day, parse_time_of_day(time_of_day))
    return moment.strftime(START_AT_FORMAT)


def parse_start_at(value: str) -> datetime:
    """
    Parse a stored ``start_at`` value into a naive local datetime.

    Accepts the minute-precision form written by the scheduler as well as
    full ISO-8601 strings; any offset is dropped since start times are
    floating wall-clock times.
    """
    moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return moment.replace(tzinfo=None)

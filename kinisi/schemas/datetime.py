from datetime import date, datetime
from typing import Any


def parse_datetime(value: Any) -> datetime:
    """Parse ISO 8601 datetime string."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            raise ValueError(f"Invalid datetime format: {value}")
    raise ValueError(f"Expected datetime, got {type(value)}")


def parse_date(value: Any) -> date:
    """
    Parse an ISO 8601 calendar date.

    A full timestamp is accepted and reduced to its date part, since start
    dates are picked in a date control but sometimes arrive as timestamps.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return parse_datetime(text).date()
        except ValueError:
            raise ValueError(f"Invalid date format: {value}")
    raise ValueError(f"Expected date, got {type(value)}")

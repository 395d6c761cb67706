"""
Datetime utility functions.
"""

from datetime import datetime, date
from typing import Optional, Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def today() -> date:
    """Current UTC calendar date (used for registration, creation and join dates)."""
    return utcnow().date()


def parse_event_date(date_input: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse an event date from an imported row.

    Handles date/datetime objects, ISO strings (with or without a time part)
    and US-style M/D/YYYY strings.

    Examples:
        >>> parse_event_date("2024-03-09")
        datetime.date(2024, 3, 9)
        >>> parse_event_date("3/9/2024")
        datetime.date(2024, 3, 9)
    """
    if date_input is None:
        return None
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input

    date_str = str(date_input).strip()
    if not date_str:
        return None

    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in ["%m/%d/%Y", "%m-%d-%Y", "%B %d, %Y", "%b %d, %Y"]:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Unrecognized date format: {date_str}")


def format_date(value: Optional[date]) -> Optional[str]:
    """ISO-format a date for API responses."""
    return value.isoformat() if value else None

"""
Date Range Module

Calendar helpers for monthly reporting: month lengths, ISO date lists
and month navigation. Everything here is pure except current_month()
and today_iso(), whose clock can be injected.
"""

from calendar import monthrange
from datetime import date
from typing import Callable, List, Optional, Tuple

from .exceptions import InvalidArgumentError

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

WEEKDAY_NAMES = [
    'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday'
]


def validate_month(year: int, month: int) -> None:
    """
    Check that (year, month) is a usable Gregorian month.

    Raises:
        InvalidArgumentError: If month is outside 1-12 or year outside 1-9999
    """
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidArgumentError(f"Year must be an integer, got {year!r}")
    if isinstance(month, bool) or not isinstance(month, int):
        raise InvalidArgumentError(f"Month must be an integer, got {month!r}")
    if not 1 <= month <= 12:
        raise InvalidArgumentError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise InvalidArgumentError(f"Invalid year: {year}")


def days_in_month(year: int, month: int) -> int:
    """Number of calendar days in the month, leap years included."""
    validate_month(year, month)
    _, num_days = monthrange(year, month)
    return num_days


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date(iso_date: str) -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        InvalidArgumentError: If the string is not a valid ISO date
    """
    try:
        parts = iso_date.split('-')
        if len(parts) != 3 or len(parts[0]) != 4 or len(parts[1]) != 2 or len(parts[2]) != 2:
            raise ValueError(iso_date)
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except (AttributeError, ValueError):
        raise InvalidArgumentError(f"Invalid ISO date: {iso_date!r}") from None


def month_dates(year: int, month: int) -> List[str]:
    """
    All dates of a month as ISO strings.

    Args:
        year: Year
        month: Month (1-12)

    Returns:
        Ascending list of YYYY-MM-DD strings starting at day 1
    """
    num_days = days_in_month(year, month)
    return [f"{year:04d}-{month:02d}-{day:02d}" for day in range(1, num_days + 1)]


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """First and last ISO date of a month."""
    dates = month_dates(year, month)
    return dates[0], dates[-1]


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """
    The month before (year, month), wrapping into the previous year.

    Raises:
        InvalidArgumentError: For January of year 1, which has no predecessor
    """
    validate_month(year, month)
    if month == 1:
        validate_month(year - 1, 12)
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> Tuple[int, int]:
    """
    The month after (year, month), wrapping into the next year.

    Raises:
        InvalidArgumentError: For December of year 9999, the last valid month
    """
    validate_month(year, month)
    if month == 12:
        validate_month(year + 1, 1)
        return year + 1, 1
    return year, month + 1


def current_month(today: Optional[Callable[[], date]] = None) -> Tuple[int, int]:
    """
    (year, month) of the current date.

    Args:
        today: Clock returning today's date; defaults to date.today
    """
    now = (today or date.today)()
    return now.year, now.month


def today_iso(today: Optional[Callable[[], date]] = None) -> str:
    """Today's date as YYYY-MM-DD."""
    return format_date((today or date.today)())


def month_name(month: int) -> str:
    """English month name for 1-12."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidArgumentError(f"Invalid month: {month!r}")
    return MONTH_NAMES[month - 1]


def format_display_date(iso_date: str) -> str:
    """Long display form, e.g. 'Saturday, March 1, 2025'."""
    d = parse_date(iso_date)
    return f"{WEEKDAY_NAMES[d.weekday()]}, {MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"

"""
Date and Key Utilities

Pure functions mapping (day, month, year) triples to display strings and
storage keys.

CONVENTION: months are zero-indexed (0 = January) everywhere in the
tracker, matching the month selector. They are rendered 1-indexed only
inside date keys and display strings.
"""

import re
from datetime import date, timedelta


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def days_in_month(year: int, month: int) -> int:
    """
    Number of days in the given month.

    Computed as "day 0 of the next month", i.e. the day before the
    first of the following month, so leap years come for free.
    """
    if month == 11:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 2, 1)
    return (first_of_next - timedelta(days=1)).day


def date_key(day: int, month: int, year: int) -> str:
    """Format a date as YYYY-MM-DD for storage."""
    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def key_for(value: date) -> str:
    """Date key for a datetime.date."""
    return date_key(value.day, value.month - 1, value.year)


def weekday_name(day: int, month: int, year: int) -> str:
    """Short English weekday name, Sunday first."""
    return WEEKDAY_NAMES[date(year, month + 1, day).isoweekday() % 7]


def format_full_date(day: int, month: int, year: int) -> str:
    """Full date string for tooltips, e.g. "12 March 2026"."""
    return f"{day} {MONTH_NAMES[month]} {year}"


def month_display(month: int, year: int) -> str:
    """Month title, e.g. "March 2026"."""
    return f"{MONTH_NAMES[month]} {year}"


def parse_date_key(key: str) -> date:
    """
    Strict inverse of date_key.

    Raises:
        ValueError: If the key is not exactly YYYY-MM-DD or is not a
            real calendar date.
    """
    if not isinstance(key, str) or not DATE_KEY_PATTERN.match(key):
        raise ValueError(f"Not a YYYY-MM-DD date key: {key!r}")
    return date(int(key[0:4]), int(key[5:7]), int(key[8:10]))


def is_valid_day(day: int, month: int, year: int) -> bool:
    """Check that day/month are in range for the given year."""
    if not 0 <= month <= 11:
        return False
    return 1 <= day <= days_in_month(year, month)

"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def end_of_month(day: date) -> date:
    """Last day of the month containing day."""
    return day.replace(day=1) + relativedelta(months=1) - timedelta(days=1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute and relative forms:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative days: "today", "yesterday", "tomorrow"
    - Period ends, as balance sheets are usually dated: "end of month",
      "end of last month", "end of year", "end of last year"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "end of month": end_of_month(today),
        "end of last month": today.replace(day=1) - timedelta(days=1),
        "end of year": today.replace(month=12, day=31),
        "end of last year": today.replace(month=1, day=1) - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")

"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Any
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# 05/01/2025, 5.1.25, 05-01-2025: bank statements in EUR locales put the day first
_NUMERIC_DATE = re.compile(r"^\d{1,2}[./-]\d{1,2}[./-]\d{2,4}$")


def parse_date(value: Any) -> date:
    """Parse a statement or user-supplied date into a date object.

    Supports:
    - date/datetime objects (returned as a date)
    - ISO dates: "2025-01-15", "2025-01-15T10:30:00"
    - Numeric day-first dates: "15/01/2025", "15.01.2025", "15-01-25"
    - Written dates: "January 15, 2025", "15 Jan 2025"
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        value: Date value in one of the formats above

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Could not parse date '{value}': empty or not text")

    date_str = value.strip().lower()
    today = date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    raw = value.strip()
    try:
        if _NUMERIC_DATE.match(raw):
            return date_parser.parse(raw, dayfirst=True).date()
        return date_parser.parse(raw).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")


def format_iso(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.isoformat()


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: Period string (this-month, this-year, last-month, last-year)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today)

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        # Day before the first of the current month
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        end_date = today.replace(month=1, day=1) - timedelta(days=1)
        return (start_date, end_date)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-year, last-month, last-year"
        )

"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime, str]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ...) and the
    relative forms "today", "yesterday", "tomorrow" and
    "last/this/next month|year|week".

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
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    for prefix, offset in (("last ", -1), ("this ", 0), ("next ", 1)):
        if date_str.startswith(prefix):
            period = date_str[len(prefix):]
            if period == "month":
                return today.replace(day=1) + relativedelta(months=offset)
            if period == "year":
                return today.replace(month=1, day=1) + relativedelta(years=offset)
            if period == "week":
                return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def coerce_date(value: DateLike) -> date:
    """Turn a date, datetime or date string into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value)
    raise ValueError(f"Expected a date, got {type(value).__name__}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates of a whole billing period.

    Args:
        period: One of this-month, last-month, this-year, last-year,
            this-week, last-week

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        start_date = today.replace(day=1)
        return (start_date, start_date + relativedelta(months=1) - timedelta(days=1))
    elif period == "last-month":
        start_date = today.replace(day=1) - relativedelta(months=1)
        return (start_date, today.replace(day=1) - timedelta(days=1))
    elif period == "this-year":
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))
    elif period == "last-year":
        return (date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))
    elif period == "this-week":
        start_date = today - timedelta(days=today.weekday())
        return (start_date, start_date + timedelta(days=6))
    elif period == "last-week":
        start_date = today - timedelta(days=today.weekday() + 7)
        return (start_date, start_date + timedelta(days=6))
    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, last-month, "
            "this-year, last-year, this-week, last-week"
        )

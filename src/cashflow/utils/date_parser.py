"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from cashflow.domain.errors import ValidationError


def week_start(value: date) -> date:
    """Return the Sunday on or before ``value``.

    ``date.weekday()`` counts from Monday, so Sunday is 6 and has to be
    shifted to 0.
    """
    return value - timedelta(days=(value.weekday() + 1) % 7)


def month_start(value: date) -> date:
    """Return the first day of the month containing ``value``."""
    return value.replace(day=1)


def month_end(value: date) -> date:
    """Return the last day of the month containing ``value``."""
    return month_start(value) + relativedelta(months=1) - timedelta(days=1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - ISO dates: "2024-01-15"
    - Day-first dates: "15/01/2024", "15.01.2024"
    - Relative dates: "today", "yesterday", "last month", "next month", etc.

    Weeks start on Sunday.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValidationError: If date string cannot be parsed
    """
    if not isinstance(date_str, str):
        raise ValidationError(f"Could not parse date {date_str!r}: expected a string")

    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Handle "last/this/next" + time period
    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return week_start(today) - timedelta(days=7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return week_start(today)

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)
        elif period == "week":
            return week_start(today) + timedelta(days=7)

    # Backend rows always carry ISO dates; dateutil would read
    # "2024-01-05" as May 1st with dayfirst enabled.
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        dt = date_parser.parse(date_str, dayfirst=True)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValidationError(f"Could not parse date '{date_str}': {e}")


def coerce_date(value: date | datetime | str) -> date:
    """Return ``value`` as a date, parsing strings.

    Raises:
        ValidationError: If value is neither a date nor a parsable string
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Ranges cover whole calendar periods, since cash-flow reports look
    forward as well as back.

    Args:
        period: Period string (this-month, next-month, last-month, this-week,
            next-week, last-week, this-year)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValidationError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (month_start(today), month_end(today))

    elif period == "next-month":
        start_date = month_start(today) + relativedelta(months=1)
        return (start_date, month_end(start_date))

    elif period == "last-month":
        start_date = month_start(today) - relativedelta(months=1)
        return (start_date, month_end(start_date))

    elif period == "this-week":
        start_date = week_start(today)
        return (start_date, start_date + timedelta(days=6))

    elif period == "next-week":
        start_date = week_start(today) + timedelta(days=7)
        return (start_date, start_date + timedelta(days=6))

    elif period == "last-week":
        start_date = week_start(today) - timedelta(days=7)
        return (start_date, start_date + timedelta(days=6))

    elif period == "this-year":
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))

    else:
        raise ValidationError(
            f"Unknown period: '{period}'. Supported periods: this-month, next-month, "
            "last-month, this-week, next-week, last-week, this-year"
        )

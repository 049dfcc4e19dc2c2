"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def _quarter_start(day: date) -> date:
    return day.replace(month=3 * ((day.month - 1) // 3) + 1, day=1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2025-01-15", "January 15, 2025") and a few
    relative forms used when posting and reporting:
    "today", "yesterday", "tomorrow", "start of month", "end of month",
    "start of year", "end of year", "last month" (its first day).

    Args:
        date_str: Date string

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
        "start of month": today.replace(day=1),
        "end of month": today.replace(day=1) + relativedelta(months=1) - timedelta(days=1),
        "start of year": today.replace(month=1, day=1),
        "end of year": today.replace(month=12, day=31),
        "last month": (today - relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: this-month, this-quarter, this-year, last-month, last-quarter,
            last-year, or a four-digit year such as "2025"

    Returns:
        Tuple of (start_date, end_date); "this-*" periods end today

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period.isdigit() and len(period) == 4:
        year = int(period)
        return (date(year, 1, 1), date(year, 12, 31))

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "this-quarter":
        return (_quarter_start(today), today)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today)

    elif period == "last-month":
        end_date = today.replace(day=1) - timedelta(days=1)
        return (end_date.replace(day=1), end_date)

    elif period == "last-quarter":
        end_date = _quarter_start(today) - timedelta(days=1)
        return (_quarter_start(end_date), end_date)

    elif period == "last-year":
        return (date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, this-quarter, "
        "this-year, last-month, last-quarter, last-year, or a year such as 2025"
    )

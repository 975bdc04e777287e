"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from typing import Optional

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this week", etc.

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

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)
        elif period in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7
            if days_ago == 0:
                days_ago = 7
            return today - timedelta(days=days_ago)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_timestamp(value: date | datetime, end_of_day: bool = False) -> datetime:
    """Convert a date or datetime into an aware UTC datetime.

    A bare date becomes midnight of that day, or the last microsecond of the
    day when ``end_of_day`` is set.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    moment = time.max if end_of_day else time.min
    return datetime.combine(value, moment, tzinfo=UTC)


def timestamp_bounds(
    start: Optional[date], end: Optional[date]
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Turn optional range bounds into inclusive UTC timestamps.

    A bare ``end`` date is extended to cover the whole day.
    """
    return (
        to_timestamp(start) if start is not None else None,
        to_timestamp(end, end_of_day=True) if end is not None else None,
    )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp or any date string into an aware UTC datetime.

    Strings that only name a day ("2024-01-15", "yesterday") resolve to
    midnight UTC of that day.

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = value.strip()
    try:
        return ensure_utc(date_parser.isoparse(text))
    except ValueError:
        pass
    if ":" in text:
        try:
            return ensure_utc(date_parser.parse(text))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Could not parse timestamp '{value}': {e}")
    return to_timestamp(parse_date(text))


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 in UTC with a trailing 'Z'."""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a calendar period.

    Args:
        period: Period string (this-month, this-week, last-month, last-week)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "this-week":
        return (today - timedelta(days=today.weekday()), today)

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        # Day before first day of current month
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "last-week":
        start_date = today - timedelta(days=today.weekday() + 7)
        return (start_date, start_date + timedelta(days=6))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-week, "
            "last-month, last-week"
        )

"""
Centralized date/time utilities
All task timestamps are timezone-aware and normalized to UTC
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

DateInput = Union[str, date, datetime]

# Date-only formats accepted from entry forms
DATE_FORMATS = [
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%d/%m/%Y",
]


def get_current_datetime() -> datetime:
    """
    Get current datetime in UTC

    Returns:
        Current timezone-aware datetime
    """
    return datetime.now(timezone.utc)


def parse_timestamp(value: DateInput) -> datetime:
    """
    Parse a timestamp into a timezone-aware UTC datetime

    Date-only inputs ("2025-11-05", date objects) resolve to midnight UTC.
    Naive datetimes are assumed to be UTC.

    Args:
        value: ISO 8601 string, date-only string, date or datetime

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_string(value.strip())
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_string(value: str) -> datetime:
    if not value:
        raise ValueError("Empty timestamp")

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    raise ValueError(f"Unrecognized date: {value!r}")


def resolve_complete_by(
    complete_by: Optional[DateInput] = None,
    days_from_now: Optional[int] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Resolve a due timestamp from either an explicit date or a day offset

    Args:
        complete_by: Explicit due date/timestamp
        days_from_now: Number of days from now (>= 1)
        now: Reference time (defaults to current time)

    Returns:
        Timezone-aware due timestamp

    Raises:
        ValueError: If neither or both inputs are given, or the offset is invalid
    """
    if complete_by is not None and days_from_now is not None:
        raise ValueError("Provide either a due date or a number of days, not both")

    if complete_by is not None:
        return parse_timestamp(complete_by)

    if days_from_now is None:
        raise ValueError("Due date is required")

    if days_from_now < 1:
        raise ValueError("Number of days must be at least 1")

    reference = now or get_current_datetime()
    return reference + timedelta(days=days_from_now)


def to_iso(value: datetime) -> str:
    """Format a timestamp as ISO 8601 with an explicit UTC offset"""
    return parse_timestamp(value).isoformat()

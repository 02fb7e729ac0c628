"""Date helpers for occupancy readings.

Week ids, reading date/time parsing, weekday names and timezone-aware
"now" used for current-hour highlighting.
"""

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Europe/Prague"

DAYS_OF_WEEK = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def parse_date(date_str: str) -> date:
    """Parse a ``dd.MM.yyyy`` date string.

    Single-digit days and months (``5.1.2024``) are accepted.

    Raises:
        ValueError: If the string is not a valid date.
    """
    return datetime.strptime(date_str.strip(), "%d.%m.%Y").date()


def get_hour_from_time(time_str: str) -> int:
    """Extract the hour from an ``HH:MM`` time string.

    Raises:
        ValueError: If the hour is not an integer in ``[0, 23]``.
    """
    hour = int(time_str.strip().split(":")[0])
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range in time '{time_str}'")
    return hour


def get_week_id(value: date) -> str:
    """Return the ISO date of the Monday starting the week of ``value``."""
    if isinstance(value, datetime):
        value = value.date()
    monday = value - timedelta(days=value.weekday())
    return monday.isoformat()


def get_day_name(value: date) -> str:
    return DAYS_OF_WEEK[value.weekday()]


def now_in_timezone(timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """Return the current wall-clock time in ``timezone``."""
    return datetime.now(ZoneInfo(timezone))


def is_day_today(day: str, now: Optional[datetime] = None) -> bool:
    """Check whether a weekday name matches today's weekday.

    Args:
        day: Weekday name, case-insensitive.
        now: Reference time, defaults to now in the default timezone.
    """
    now = now or now_in_timezone()
    return day.lower() == get_day_name(now).lower()

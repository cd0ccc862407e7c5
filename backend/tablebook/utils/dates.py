"""
Local calendar date helpers.

A date key is a YYYY-MM-DD string for the *local* calendar day. Keys are
never derived from UTC: a 00:30 booking in a zone ahead of UTC would land on
the previous day otherwise.
"""

import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

from tablebook.core.clock import Clock
from tablebook.core.errors import ValidationError

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

_KO_WEEKDAYS = ["월", "화", "수", "목", "금", "토", "일"]
_EN_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
_EN_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def format_date_key(value: Union[date, datetime, None], tz: Optional[tzinfo] = None) -> str:
    """
    Format a date (or datetime) as a local date key.

    Aware datetimes are first converted to `tz` when given, so the key is
    the calendar day on the local wall clock.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(key: str) -> date:
    if not isinstance(key, str) or not _DATE_KEY_RE.match(key):
        raise ValidationError(f"Invalid date '{key}', expected YYYY-MM-DD")
    try:
        return date.fromisoformat(key)
    except ValueError:
        raise ValidationError(f"Invalid date '{key}', expected YYYY-MM-DD")


def validate_date_key(key: str) -> str:
    parse_date_key(key)
    return key


def validate_time(value: str) -> str:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    return value


def format_display_date(key: str, locale: str = "ko") -> str:
    """Human-readable date with weekday, e.g. '2025년 6월 1일 (일)'."""
    day = parse_date_key(key)
    if locale.lower().startswith("ko"):
        return f"{day.year}년 {day.month}월 {day.day}일 ({_KO_WEEKDAYS[day.weekday()]})"
    return f"{_EN_WEEKDAYS[day.weekday()]}, {_EN_MONTHS[day.month - 1]} {day.day}, {day.year}"


def today_key(clock: Clock) -> str:
    return format_date_key(clock.now(), clock.tz)


def date_key_after(clock: Clock, days: int) -> str:
    return format_date_key(clock.now().date() + timedelta(days=days))


def tomorrow_key(clock: Clock) -> str:
    return date_key_after(clock, 1)


def current_time(clock: Clock) -> str:
    """Current local time as HH:MM."""
    return clock.now().strftime("%H:%M")


def is_today(key: str, clock: Clock) -> bool:
    return key == today_key(clock)


def is_past_date(key: str, clock: Clock) -> bool:
    return parse_date_key(key) < clock.now().date()


def compare_date_keys(first: str, second: str) -> int:
    # Zero-padded keys order lexicographically
    if first < second:
        return -1
    if first > second:
        return 1
    return 0


def is_future_datetime(key: str, time: str, clock: Clock) -> bool:
    day = parse_date_key(key)
    hour, minute = (int(part) for part in validate_time(time).split(":"))
    target = datetime(day.year, day.month, day.day, hour, minute, tzinfo=clock.tz)
    return target > clock.now()

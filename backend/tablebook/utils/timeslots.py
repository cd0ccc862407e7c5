"""
Bookable time-slot helpers.

A venue's operating day can run past midnight (16:00 -> 04:00 next day), so
slot ordering treats early-morning times as belonging to the end of the
previous evening: 00:30 sorts after 23:30, not before 16:00.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from tablebook.core.config import get_settings
from tablebook.utils.dates import format_date_key, validate_time

MINUTES_PER_DAY = 24 * 60


def generate_default_time_slots(
    opening_hour: Optional[int] = None,
    closing_hour: Optional[int] = None,
    interval_minutes: Optional[int] = None,
) -> list[str]:
    """Default slots, 16:00 through 04:00 the next day every 30 minutes."""
    settings = get_settings()
    opening_hour = settings.OPENING_HOUR if opening_hour is None else opening_hour
    closing_hour = settings.CLOSING_HOUR if closing_hour is None else closing_hour
    interval_minutes = interval_minutes or settings.SLOT_INTERVAL_MINUTES

    start = opening_hour * 60
    end = closing_hour * 60
    if closing_hour <= opening_hour:
        end += MINUTES_PER_DAY

    slots = []
    for minute in range(start, end + 1, interval_minutes):
        minute %= MINUTES_PER_DAY
        slots.append(f"{minute // 60:02d}:{minute % 60:02d}")
    return slots


def generate_date_range(start: date, days: int) -> list[str]:
    """Local date keys for `days` consecutive days beginning at `start`."""
    return [format_date_key(start + timedelta(days=offset)) for offset in range(days)]


def operating_minutes(value: str, cutoff_hour: Optional[int] = None) -> int:
    """Minutes since the start of the operating day's calendar date."""
    if cutoff_hour is None:
        cutoff_hour = get_settings().EARLY_MORNING_CUTOFF_HOUR
    hour, minute = (int(part) for part in value.split(":"))
    total = hour * 60 + minute
    # Midnight through HH:00 of the cutoff hour; 04:30 already starts a new day
    if total <= cutoff_hour * 60:
        total += MINUTES_PER_DAY
    return total


def sort_time_slots(slots: Iterable[str], cutoff_hour: Optional[int] = None) -> list[str]:
    """Validate, de-duplicate and order slots within the operating day."""
    unique = {validate_time(slot) for slot in slots}
    return sorted(unique, key=lambda slot: operating_minutes(slot, cutoff_hour))


def find_next_available_time(
    current_time: str,
    available_slots: Iterable[str],
    cutoff_hour: Optional[int] = None,
) -> Optional[str]:
    """
    Earliest slot strictly later than `current_time`, or None when every
    slot has passed for today (callers fall back to tomorrow).
    """
    now = operating_minutes(current_time, cutoff_hour)
    ordered = sorted(available_slots, key=lambda slot: operating_minutes(slot, cutoff_hour))
    for slot in ordered:
        if operating_minutes(slot, cutoff_hour) > now:
            return slot
    return None

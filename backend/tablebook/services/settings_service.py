"""
Venue settings store: per-venue closed dates, per-date capacity overrides
and per-date time slots.

ROLLING WINDOW
==============

Stored time slots always cover exactly "today plus the next N-1 days"
(N = SLOT_WINDOW_DAYS, 14 by default). Every read:

  1. Keeps overrides for dates still inside the window
  2. Drops dates that have fallen out of it
  3. Fills new trailing days with the default slot set

and persists the normalized record, so clients never see past-dated slot
data and nobody has to provision far-future dates. Venues without stored
settings get an empty default that is not persisted.

MERGE SEMANTICS
===============

update_venue_settings() replaces each supplied field wholesale.
set_daily_capacity(), set_time_slots() and toggle_date_availability()
touch one date key inside a single transaction, so concurrent owners
editing different dates do not overwrite each other.
"""

import dataclasses
from datetime import date

from tablebook.core.clock import Clock
from tablebook.core.config import get_settings
from tablebook.core.errors import ValidationError
from tablebook.core.logging import get_logger
from tablebook.domain.records import VenueSettings
from tablebook.storage.interfaces.storage import Storage
from tablebook.utils.dates import validate_date_key
from tablebook.utils.timeslots import (
    generate_date_range,
    generate_default_time_slots,
    sort_time_slots,
)

logger = get_logger(__name__)

SETTINGS_FIELDS = ("unavailable_dates", "daily_capacity", "available_time_slots")


def normalize_time_slot_window(settings: VenueSettings, start: date, days: int) -> VenueSettings:
    """Rebuild available_time_slots to cover exactly `days` days from `start`."""
    defaults = generate_default_time_slots()
    current = settings.available_time_slots or {}
    window = {
        day: list(current[day]) if day in current else list(defaults)
        for day in generate_date_range(start, days)
    }
    return dataclasses.replace(settings, available_time_slots=window)


def provision_settings(venue_id: int, start: date, days: int) -> VenueSettings:
    """Fresh settings with `days` days of default slots, used at owner signup."""
    return normalize_time_slot_window(VenueSettings(venue_id=venue_id), start, days)


async def get_venue_settings(storage: Storage, venue_id: int, clock: Clock) -> VenueSettings:
    """Never fails: a venue without stored settings gets an empty default."""
    async with storage.transaction():
        stored = await storage.settings.get(venue_id)
        if stored is None:
            return VenueSettings(venue_id=venue_id)

        window_days = get_settings().SLOT_WINDOW_DAYS
        normalized = normalize_time_slot_window(stored, clock.now().date(), window_days)
        if normalized.available_time_slots != stored.available_time_slots:
            await storage.settings.save(normalized)
            logger.debug("settings_window_rolled", venue_id=venue_id, days=window_days)
        return normalized


def _validate_changes(changes: dict) -> dict:
    unknown = set(changes) - set(SETTINGS_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

    cleaned = {}
    if changes.get("unavailable_dates") is not None:
        dates = [validate_date_key(d) for d in changes["unavailable_dates"]]
        cleaned["unavailable_dates"] = list(dict.fromkeys(dates))
    if changes.get("daily_capacity") is not None:
        capacities = {}
        for day, capacity in changes["daily_capacity"].items():
            capacities[validate_date_key(day)] = _validate_capacity(capacity)
        cleaned["daily_capacity"] = capacities
    if changes.get("available_time_slots") is not None:
        cleaned["available_time_slots"] = {
            validate_date_key(day): sort_time_slots(slots)
            for day, slots in changes["available_time_slots"].items()
        }
    return cleaned


def _validate_capacity(capacity) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0:
        raise ValidationError("Capacity must be a whole number, zero or greater")
    return capacity


async def update_venue_settings(
    storage: Storage,
    venue_id: int,
    changes: dict,
) -> VenueSettings:
    """Upsert settings; each supplied field replaces the stored one wholesale."""
    cleaned = _validate_changes(changes)

    async with storage.transaction():
        current = await storage.settings.get(venue_id) or VenueSettings(venue_id=venue_id)
        updated = dataclasses.replace(current, **cleaned)
        await storage.settings.save(updated)

    logger.info("settings_updated", venue_id=venue_id, fields=sorted(cleaned))
    return updated


async def toggle_date_availability(
    storage: Storage,
    venue_id: int,
    day: str,
    clock: Clock,
) -> VenueSettings:
    validate_date_key(day)
    async with storage.transaction():
        settings = await get_venue_settings(storage, venue_id, clock)
        if day in settings.unavailable_dates:
            dates = [d for d in settings.unavailable_dates if d != day]
        else:
            dates = [*settings.unavailable_dates, day]
        updated = dataclasses.replace(settings, unavailable_dates=dates)
        await storage.settings.save(updated)

    logger.info(
        "date_availability_toggled",
        venue_id=venue_id,
        date=day,
        unavailable=day in updated.unavailable_dates,
    )
    return updated


async def set_daily_capacity(
    storage: Storage,
    venue_id: int,
    day: str,
    capacity: int,
    clock: Clock,
) -> VenueSettings:
    validate_date_key(day)
    _validate_capacity(capacity)
    async with storage.transaction():
        settings = await get_venue_settings(storage, venue_id, clock)
        updated = dataclasses.replace(
            settings,
            daily_capacity={**settings.daily_capacity, day: capacity},
        )
        await storage.settings.save(updated)

    logger.info("daily_capacity_set", venue_id=venue_id, date=day, capacity=capacity)
    return updated


async def set_time_slots(
    storage: Storage,
    venue_id: int,
    day: str,
    slots: list[str],
    clock: Clock,
) -> VenueSettings:
    """Replace one date's slot list, leaving every other date untouched."""
    validate_date_key(day)
    ordered = sort_time_slots(slots)
    async with storage.transaction():
        settings = await get_venue_settings(storage, venue_id, clock)
        updated = dataclasses.replace(
            settings,
            available_time_slots={**settings.available_time_slots, day: ordered},
        )
        await storage.settings.save(updated)

    logger.info("time_slots_set", venue_id=venue_id, date=day, slots=len(ordered))
    return updated


async def is_date_available(storage: Storage, venue_id: int, day: str, clock: Clock) -> bool:
    validate_date_key(day)
    settings = await get_venue_settings(storage, venue_id, clock)
    return day not in settings.unavailable_dates

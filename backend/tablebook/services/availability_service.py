"""
Availability engine: what a venue can still seat on a date, and when.

CAPACITY MODEL
==============

    effective = 0                     if the date is marked unavailable
              = daily_capacity[date]  if an override exists
              = venue.capacity        otherwise

    remaining = max(0, effective - seats held by confirmed reservations)

Pending reservations hold no seats. Owners confirming past the effective
capacity is allowed (see booking_service.confirm_booking), so the raw
difference can go negative; remaining is clamped at zero.

INSTANT BOOKING
===============

A venue is instantly bookable when today is open, a slot later than the
current time exists (today, or else tomorrow's first slot), and it has
remaining seats today.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from tablebook.core.clock import Clock
from tablebook.core.logging import get_logger
from tablebook.core.metrics import record_availability_check
from tablebook.domain.records import Venue, VenueSettings
from tablebook.services.settings_service import get_venue_settings
from tablebook.services.venue_service import get_venue
from tablebook.storage.interfaces.storage import Storage
from tablebook.utils.dates import current_time, today_key, tomorrow_key, validate_date_key
from tablebook.utils.timeslots import find_next_available_time, generate_default_time_slots

logger = get_logger(__name__)


class InstantSlot(NamedTuple):
    date: str
    time: str


@dataclass
class AvailabilitySummary:
    venue_id: int
    date: str
    effective_capacity: int
    confirmed: int
    remaining: int
    unavailable: bool
    time_slots: list[str]


def _effective(venue: Venue, settings: VenueSettings, day: str) -> int:
    if day in settings.unavailable_dates:
        return 0
    return settings.daily_capacity.get(day, venue.capacity)


def _slots(settings: VenueSettings, day: str) -> list[str]:
    if day in settings.unavailable_dates:
        return []
    if day in settings.available_time_slots:
        return list(settings.available_time_slots[day])
    return generate_default_time_slots()


async def effective_capacity(storage: Storage, venue_id: int, day: str, clock: Clock) -> int:
    validate_date_key(day)
    venue = await get_venue(storage, venue_id)
    settings = await get_venue_settings(storage, venue_id, clock)
    return _effective(venue, settings, day)


async def remaining_capacity(storage: Storage, venue_id: int, day: str, clock: Clock) -> int:
    """Seats still free on `day`. NotFoundError for an unknown venue."""
    effective = await effective_capacity(storage, venue_id, day, clock)
    confirmed = await storage.reservations.confirmed_party_size(venue_id, day)
    remaining = max(0, effective - confirmed)
    record_availability_check(effective, remaining)
    return remaining


async def slots_for_date(storage: Storage, venue_id: int, day: str, clock: Clock) -> list[str]:
    """Configured slots for the date, the default set if none, [] when closed."""
    validate_date_key(day)
    settings = await get_venue_settings(storage, venue_id, clock)
    return _slots(settings, day)


async def next_instant_slot(storage: Storage, venue_id: int, clock: Clock) -> Optional[InstantSlot]:
    """
    Earliest walk-in slot: first slot later than now today, otherwise
    tomorrow's first slot. None when today is closed or nothing is left.
    """
    settings = await get_venue_settings(storage, venue_id, clock)
    today = today_key(clock)
    if today in settings.unavailable_dates:
        return None

    slot = find_next_available_time(current_time(clock), _slots(settings, today))
    if slot:
        return InstantSlot(today, slot)

    tomorrow = tomorrow_key(clock)
    tomorrow_slots = _slots(settings, tomorrow)
    if tomorrow_slots:
        logger.debug("instant_slot_tomorrow", venue_id=venue_id, date=tomorrow)
        return InstantSlot(tomorrow, tomorrow_slots[0])
    return None


async def is_bookable_instantly(storage: Storage, venue_id: int, clock: Clock) -> bool:
    if await next_instant_slot(storage, venue_id, clock) is None:
        return False
    return await remaining_capacity(storage, venue_id, today_key(clock), clock) > 0


async def is_bookable_on(storage: Storage, venue_id: int, day: str, clock: Clock) -> bool:
    """Open on `day`, at least one configured slot, and seats left."""
    validate_date_key(day)
    settings = await get_venue_settings(storage, venue_id, clock)
    if day in settings.unavailable_dates:
        return False
    if not settings.available_time_slots.get(day):
        return False
    return await remaining_capacity(storage, venue_id, day, clock) > 0


async def bookable_venues_on(storage: Storage, day: str, clock: Clock) -> list[Venue]:
    venues = await storage.venues.all()
    return [v for v in venues if await is_bookable_on(storage, v.id, day, clock)]


async def instant_venues(storage: Storage, clock: Clock) -> list[Venue]:
    venues = await storage.venues.all()
    return [v for v in venues if await is_bookable_instantly(storage, v.id, clock)]


async def availability_summary(
    storage: Storage,
    venue_id: int,
    day: str,
    clock: Clock,
) -> AvailabilitySummary:
    validate_date_key(day)
    venue = await get_venue(storage, venue_id)
    settings = await get_venue_settings(storage, venue_id, clock)
    effective = _effective(venue, settings, day)
    confirmed = await storage.reservations.confirmed_party_size(venue_id, day)
    remaining = max(0, effective - confirmed)
    record_availability_check(effective, remaining)

    return AvailabilitySummary(
        venue_id=venue_id,
        date=day,
        effective_capacity=effective,
        confirmed=confirmed,
        remaining=remaining,
        unavailable=day in settings.unavailable_dates,
        time_slots=_slots(settings, day),
    )

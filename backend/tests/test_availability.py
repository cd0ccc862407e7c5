"""
Tests for the availability engine: capacity accounting, slots and
instant bookability.
"""

from datetime import datetime

import pytest

from tablebook.core.clock import FixedClock
from tablebook.core.errors import NotFoundError
from tablebook.domain.records import Venue, VenueSettings
from tablebook.services import availability_service, reservation_service, settings_service, venue_service
from tablebook.services.settings_service import provision_settings
from tablebook.utils.timeslots import generate_default_time_slots

DAY = "2025-06-01"


async def _big_venue(storage, clock) -> Venue:
    venue = await venue_service.create_venue(storage, Venue(id=None, name="Grand Hall", capacity=50))
    await storage.settings.save(provision_settings(venue.id, clock.now().date(), 14))
    return venue


async def _reserve(storage, clock, ids, venue, party_size, date=DAY, confirm=False):
    reservation = await reservation_service.create_reservation(
        storage,
        clock,
        ids,
        user_id="user-a",
        venue_id=venue.id,
        venue_name=venue.name,
        date=date,
        time="19:00",
        party_size=party_size,
        guest_name="Choi",
        guest_phone="010-2222-3333",
    )
    if confirm:
        reservation = await reservation_service.confirm_reservation(storage, reservation.id)
    return reservation


@pytest.mark.asyncio
async def test_remaining_subtracts_confirmed_party_sizes(storage, clock, ids):
    venue = await _big_venue(storage, clock)
    await _reserve(storage, clock, ids, venue, 20, confirm=True)
    await _reserve(storage, clock, ids, venue, 15, confirm=True)

    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 15


@pytest.mark.asyncio
async def test_unavailable_date_has_no_capacity(storage, clock, ids):
    venue = await _big_venue(storage, clock)
    await settings_service.set_daily_capacity(storage, venue.id, DAY, 80, clock)
    await settings_service.toggle_date_availability(storage, venue.id, DAY, clock)

    assert await availability_service.effective_capacity(storage, venue.id, DAY, clock) == 0
    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 0


@pytest.mark.asyncio
async def test_daily_override_replaces_base_capacity(storage, clock):
    venue = await _big_venue(storage, clock)
    await settings_service.set_daily_capacity(storage, venue.id, "2025-06-03", 12, clock)

    assert await availability_service.remaining_capacity(storage, venue.id, "2025-06-03", clock) == 12
    assert await availability_service.remaining_capacity(storage, venue.id, "2025-06-04", clock) == 50


@pytest.mark.asyncio
async def test_pending_reservations_hold_no_seats(storage, clock, ids):
    venue = await _big_venue(storage, clock)
    pending = [await _reserve(storage, clock, ids, venue, 10) for _ in range(8)]
    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 50

    await reservation_service.confirm_reservation(storage, pending[0].id)
    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 40

    await reservation_service.cancel_reservation(storage, pending[0].id)
    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 50


@pytest.mark.asyncio
async def test_remaining_never_negative_when_overconfirmed(storage, clock, ids):
    venue = await _big_venue(storage, clock)
    await _reserve(storage, clock, ids, venue, 40, confirm=True)
    await _reserve(storage, clock, ids, venue, 30, confirm=True)

    assert await availability_service.remaining_capacity(storage, venue.id, DAY, clock) == 0


@pytest.mark.asyncio
async def test_unknown_venue_is_not_found(storage, clock):
    with pytest.raises(NotFoundError):
        await availability_service.remaining_capacity(storage, 404, DAY, clock)


@pytest.mark.asyncio
async def test_slots_for_date(storage, clock, venue):
    await settings_service.set_time_slots(storage, venue.id, "2025-06-02", ["18:00", "20:00"], clock)
    await settings_service.toggle_date_availability(storage, venue.id, "2025-06-03", clock)

    assert await availability_service.slots_for_date(storage, venue.id, "2025-06-02", clock) == ["18:00", "20:00"]
    assert await availability_service.slots_for_date(storage, venue.id, "2025-06-03", clock) == []
    # Beyond the window: default set
    assert (
        await availability_service.slots_for_date(storage, venue.id, "2025-07-01", clock)
        == generate_default_time_slots()
    )


@pytest.mark.asyncio
async def test_next_instant_slot_today(storage, clock, venue):
    slot = await availability_service.next_instant_slot(storage, venue.id, clock)
    assert slot == (DAY, "18:30")


@pytest.mark.asyncio
async def test_next_instant_slot_falls_back_to_tomorrow(storage, clock, venue):
    await settings_service.set_time_slots(storage, venue.id, DAY, ["12:00", "13:00"], clock)
    await settings_service.set_time_slots(storage, venue.id, "2025-06-02", ["17:00", "18:00"], clock)

    slot = await availability_service.next_instant_slot(storage, venue.id, clock)
    assert slot.date == "2025-06-02"
    assert slot.time == "17:00"


@pytest.mark.asyncio
async def test_no_instant_slot_when_today_closed(storage, clock, venue):
    await settings_service.toggle_date_availability(storage, venue.id, DAY, clock)
    assert await availability_service.next_instant_slot(storage, venue.id, clock) is None
    assert not await availability_service.is_bookable_instantly(storage, venue.id, clock)


@pytest.mark.asyncio
async def test_instant_bookability_needs_seats_today(storage, clock, ids, venue):
    assert await availability_service.is_bookable_instantly(storage, venue.id, clock)

    await _reserve(storage, clock, ids, venue, 10, confirm=True)
    assert not await availability_service.is_bookable_instantly(storage, venue.id, clock)


@pytest.mark.asyncio
async def test_is_bookable_on_requires_configured_slots(storage, clock):
    venue = await venue_service.create_venue(storage, Venue(id=None, name="No Slots", capacity=20))
    assert not await availability_service.is_bookable_on(storage, venue.id, "2025-06-02", clock)

    await storage.settings.save(VenueSettings(
        venue_id=venue.id, available_time_slots={"2025-06-02": ["18:00"]}
    ))
    # Stored settings roll into a full window, which fills 06-02 onward with defaults
    assert await availability_service.is_bookable_on(storage, venue.id, "2025-06-02", clock)
    # Outside the rolling window nothing is configured
    assert not await availability_service.is_bookable_on(storage, venue.id, "2025-07-01", clock)


@pytest.mark.asyncio
async def test_bookable_and_instant_venue_lists(storage, clock, ids, venue):
    full = await _big_venue(storage, clock)
    await _reserve(storage, clock, ids, full, 50, confirm=True)

    bookable_today = await availability_service.bookable_venues_on(storage, DAY, clock)
    assert [v.id for v in bookable_today] == [venue.id]

    bookable_tomorrow = await availability_service.bookable_venues_on(storage, "2025-06-02", clock)
    assert {v.id for v in bookable_tomorrow} == {venue.id, full.id}

    instant = await availability_service.instant_venues(storage, clock)
    assert [v.id for v in instant] == [venue.id]


@pytest.mark.asyncio
async def test_availability_summary(storage, clock, ids, venue):
    await _reserve(storage, clock, ids, venue, 4, confirm=True)
    await _reserve(storage, clock, ids, venue, 3)

    summary = await availability_service.availability_summary(storage, venue.id, DAY, clock)
    assert summary.effective_capacity == 10
    assert summary.confirmed == 4
    assert summary.remaining == 6
    assert not summary.unavailable
    assert summary.time_slots == generate_default_time_slots()


@pytest.mark.asyncio
async def test_instant_slot_after_closing_is_same_day_opening(storage, ids):
    """At 04:30 the night is over; the same calendar day's 16:00 opening is next."""
    clock = FixedClock(datetime(2025, 6, 1, 4, 30))
    venue = await _big_venue(storage, clock)
    slot = await availability_service.next_instant_slot(storage, venue.id, clock)
    assert slot == ("2025-06-01", "16:00")


@pytest.mark.asyncio
async def test_instant_slot_at_closing_falls_back_to_tomorrow(storage, ids):
    clock = FixedClock(datetime(2025, 6, 1, 4, 0))
    venue = await _big_venue(storage, clock)
    slot = await availability_service.next_instant_slot(storage, venue.id, clock)
    assert slot == ("2025-06-02", "16:00")

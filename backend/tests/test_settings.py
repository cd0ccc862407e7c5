"""
Tests for the venue settings store: defaults, rolling slot window, merges.
"""

import pytest

from tablebook.core.errors import ValidationError
from tablebook.domain.records import VenueSettings
from tablebook.services import settings_service
from tablebook.utils.timeslots import generate_default_time_slots


@pytest.mark.asyncio
async def test_missing_settings_return_unpersisted_default(storage, clock):
    settings = await settings_service.get_venue_settings(storage, 99, clock)
    assert settings == VenueSettings(venue_id=99)
    assert await storage.settings.get(99) is None


@pytest.mark.asyncio
async def test_read_rolls_window_and_persists(storage, clock, venue):
    await storage.settings.save(VenueSettings(
        venue_id=venue.id,
        available_time_slots={
            "2025-05-30": ["18:00"],
            "2025-06-01": ["18:00", "19:00"],
        },
    ))

    settings = await settings_service.get_venue_settings(storage, venue.id, clock)

    keys = sorted(settings.available_time_slots)
    assert len(keys) == 14
    assert keys[0] == "2025-06-01"
    assert keys[-1] == "2025-06-14"
    assert settings.available_time_slots["2025-06-01"] == ["18:00", "19:00"]
    assert settings.available_time_slots["2025-06-02"] == generate_default_time_slots()

    stored = await storage.settings.get(venue.id)
    assert stored.available_time_slots == settings.available_time_slots


@pytest.mark.asyncio
async def test_window_moves_with_the_clock(storage, clock, venue):
    clock.advance(days=3)
    settings = await settings_service.get_venue_settings(storage, venue.id, clock)
    keys = sorted(settings.available_time_slots)
    assert keys[0] == "2025-06-04"
    assert keys[-1] == "2025-06-17"


@pytest.mark.asyncio
async def test_update_replaces_fields_wholesale(storage, venue):
    await settings_service.update_venue_settings(
        storage, venue.id, {"daily_capacity": {"2025-06-05": 4}}
    )
    updated = await settings_service.update_venue_settings(
        storage, venue.id, {"daily_capacity": {"2025-06-06": 8}}
    )
    assert updated.daily_capacity == {"2025-06-06": 8}


@pytest.mark.asyncio
async def test_update_upserts_for_venue_without_settings(storage):
    updated = await settings_service.update_venue_settings(
        storage, 42, {"unavailable_dates": ["2025-06-03", "2025-06-03"]}
    )
    assert updated.unavailable_dates == ["2025-06-03"]
    assert (await storage.settings.get(42)).unavailable_dates == ["2025-06-03"]


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields_and_bad_keys(storage, venue):
    with pytest.raises(ValidationError):
        await settings_service.update_venue_settings(storage, venue.id, {"capacity": 3})
    with pytest.raises(ValidationError):
        await settings_service.update_venue_settings(
            storage, venue.id, {"daily_capacity": {"June 5": 4}}
        )


@pytest.mark.asyncio
async def test_set_daily_capacity_merges_one_key(storage, clock, venue):
    await settings_service.set_daily_capacity(storage, venue.id, "2025-06-05", 4, clock)
    settings = await settings_service.set_daily_capacity(storage, venue.id, "2025-06-06", 0, clock)
    assert settings.daily_capacity == {"2025-06-05": 4, "2025-06-06": 0}


@pytest.mark.asyncio
async def test_set_daily_capacity_rejects_negative(storage, clock, venue):
    with pytest.raises(ValidationError):
        await settings_service.set_daily_capacity(storage, venue.id, "2025-06-05", -1, clock)
    assert (await storage.settings.get(venue.id)).daily_capacity == {}


@pytest.mark.asyncio
async def test_toggle_twice_restores_original(storage, clock, venue):
    closed = await settings_service.toggle_date_availability(storage, venue.id, "2025-06-03", clock)
    assert "2025-06-03" in closed.unavailable_dates
    assert not await settings_service.is_date_available(storage, venue.id, "2025-06-03", clock)

    reopened = await settings_service.toggle_date_availability(storage, venue.id, "2025-06-03", clock)
    assert reopened.unavailable_dates == []
    assert await settings_service.is_date_available(storage, venue.id, "2025-06-03", clock)


@pytest.mark.asyncio
async def test_set_time_slots_orders_and_leaves_other_dates(storage, clock, venue):
    settings = await settings_service.set_time_slots(
        storage, venue.id, "2025-06-02", ["00:30", "19:00", "18:00"], clock
    )
    assert settings.available_time_slots["2025-06-02"] == ["18:00", "19:00", "00:30"]
    assert settings.available_time_slots["2025-06-03"] == generate_default_time_slots()

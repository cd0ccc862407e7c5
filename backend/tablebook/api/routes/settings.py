"""
Venue settings endpoints: closed dates, capacity overrides, time slots.
Reads are public; writes are restricted to the venue's owner.
"""

from fastapi import APIRouter, Depends

from tablebook.api.deps import ensure_venue_owner, get_clock, get_current_user, get_storage
from tablebook.core.clock import Clock
from tablebook.domain.records import User
from tablebook.schemas.settings import (
    DailyCapacityUpdate,
    DateAvailabilityResponse,
    DateToggle,
    SettingsResponse,
    SettingsUpdate,
    TimeSlotsUpdate,
)
from tablebook.services import settings_service
from tablebook.storage.interfaces.storage import Storage

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/venue/{venue_id}", response_model=SettingsResponse)
async def read_settings(
    venue_id: int,
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """Settings with the slot window rolled forward to today."""
    return await settings_service.get_venue_settings(storage, venue_id, clock)


@router.patch("/venue/{venue_id}", response_model=SettingsResponse)
async def update_settings(
    venue_id: int,
    data: SettingsUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Replace any of the three settings maps wholesale."""
    ensure_venue_owner(user, venue_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    return await settings_service.update_venue_settings(storage, venue_id, changes)


@router.post("/venue/{venue_id}/toggle-date", response_model=SettingsResponse)
async def toggle_date(
    venue_id: int,
    data: DateToggle,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    ensure_venue_owner(user, venue_id)
    return await settings_service.toggle_date_availability(storage, venue_id, data.date, clock)


@router.post("/venue/{venue_id}/daily-capacity", response_model=SettingsResponse)
async def set_daily_capacity(
    venue_id: int,
    data: DailyCapacityUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    ensure_venue_owner(user, venue_id)
    return await settings_service.set_daily_capacity(
        storage, venue_id, data.date, data.capacity, clock
    )


@router.post("/venue/{venue_id}/time-slots", response_model=SettingsResponse)
async def set_time_slots(
    venue_id: int,
    data: TimeSlotsUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    ensure_venue_owner(user, venue_id)
    return await settings_service.set_time_slots(storage, venue_id, data.date, data.slots, clock)


@router.get("/venue/{venue_id}/date/{date}/available", response_model=DateAvailabilityResponse)
async def date_available(
    venue_id: int,
    date: str,
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    available = await settings_service.is_date_available(storage, venue_id, date, clock)
    return DateAvailabilityResponse(venue_id=venue_id, date=date, available=available)

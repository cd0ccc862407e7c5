"""
Pydantic schemas for venue settings.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SettingsResponse(BaseModel):
    venue_id: int
    unavailable_dates: list[str]
    daily_capacity: dict[str, int]
    available_time_slots: dict[str, list[str]]

    model_config = {"from_attributes": True}


class SettingsUpdate(BaseModel):
    unavailable_dates: Optional[list[str]] = None
    daily_capacity: Optional[dict[str, int]] = None
    available_time_slots: Optional[dict[str, list[str]]] = None


class DateToggle(BaseModel):
    date: str


class DailyCapacityUpdate(BaseModel):
    date: str
    capacity: int = Field(..., ge=0)


class TimeSlotsUpdate(BaseModel):
    date: str
    slots: list[str]


class DateAvailabilityResponse(BaseModel):
    venue_id: int
    date: str
    available: bool

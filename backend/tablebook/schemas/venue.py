"""
Pydantic schemas for venue and availability responses.
"""

from typing import Optional

from pydantic import BaseModel, Field


class VenueBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field("", max_length=500)
    phone: Optional[str] = Field(None, max_length=30)
    capacity: int = Field(0, ge=0, le=10000)
    image: str = ""
    cuisine: str = Field("", max_length=50)
    rating: float = Field(0.0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    price_range: str = Field("", max_length=10)
    hours: str = Field("", max_length=100)
    website: Optional[str] = None
    description: str = Field("", max_length=2000)


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=30)
    capacity: Optional[int] = Field(None, ge=0, le=10000)
    image: Optional[str] = None
    cuisine: Optional[str] = Field(None, max_length=50)
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)
    price_range: Optional[str] = Field(None, max_length=10)
    hours: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)


class VenueResponse(VenueBase):
    id: int

    model_config = {"from_attributes": True}


class VenueListResponse(BaseModel):
    venues: list[VenueResponse]
    total: int
    cached: bool = False


class InstantSlotResponse(BaseModel):
    date: str
    time: str


class AvailabilityResponse(BaseModel):
    venue_id: int
    date: str
    display_date: str
    effective_capacity: int
    confirmed: int
    remaining: int
    unavailable: bool
    time_slots: list[str]
    next_instant_slot: Optional[InstantSlotResponse] = None

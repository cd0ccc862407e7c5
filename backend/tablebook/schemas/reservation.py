"""
Pydantic schemas for reservation request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tablebook.domain.records import BookingMode, ReservationStatus


class ReservationCreate(BaseModel):
    """Any status sent by the client is ignored; new reservations start pending."""

    venue_id: int
    date: str
    time: str
    party_size: int = Field(..., ge=1, le=100)
    guest_name: str = Field(..., min_length=1, max_length=100)
    guest_phone: str = Field(..., min_length=1, max_length=30)
    mode: BookingMode = BookingMode.SCHEDULED


class ReservationUpdate(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = None
    party_size: Optional[int] = Field(None, ge=1, le=100)
    guest_name: Optional[str] = Field(None, min_length=1, max_length=100)
    guest_phone: Optional[str] = Field(None, min_length=1, max_length=30)
    status: Optional[ReservationStatus] = None


class ReservationResponse(BaseModel):
    id: str
    user_id: str
    venue_id: int
    venue_name: str
    date: str
    time: str
    party_size: int
    guest_name: str
    guest_phone: str
    status: ReservationStatus
    mode: BookingMode
    created_at: datetime
    confirmation_number: str

    model_config = {"from_attributes": True}


class PartitionedReservations(BaseModel):
    upcoming: list[ReservationResponse]
    past: list[ReservationResponse]

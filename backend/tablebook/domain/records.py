"""
Storage-agnostic domain records.

Both storage backends read and write these dataclasses; the SQL backend maps
them onto ORM rows in tablebook.models.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class BookingMode(str, enum.Enum):
    INSTANT = "instant"
    SCHEDULED = "scheduled"


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    RESTAURANT_OWNER = "restaurant_owner"


@dataclass
class Venue:
    id: Optional[int]
    name: str
    address: str = ""
    phone: Optional[str] = None
    capacity: int = 0
    image: str = ""
    cuisine: str = ""
    rating: float = 0.0
    reviews: int = 0
    price_range: str = ""
    hours: str = ""
    website: Optional[str] = None
    description: str = ""


@dataclass
class VenueSettings:
    """
    Per-venue booking overrides.

    unavailable_dates wins over daily_capacity: a closed date has an
    effective capacity of 0 whatever its override says.
    """
    venue_id: int
    unavailable_dates: list[str] = field(default_factory=list)
    daily_capacity: dict[str, int] = field(default_factory=dict)
    available_time_slots: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class Reservation:
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


@dataclass
class User:
    id: str
    login_id: str
    email: str
    name: str
    role: Role
    phone: Optional[str] = None
    venue_id: Optional[int] = None
    created_at: Optional[datetime] = None
    password_hash: str = field(default="", repr=False)

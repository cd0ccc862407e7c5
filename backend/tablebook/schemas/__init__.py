from tablebook.schemas.user import (
    CustomerSignup, OwnerSignup, UserLogin, UserResponse, ProfileUpdate, PasswordChange, Token,
)
from tablebook.schemas.venue import (
    VenueCreate, VenueUpdate, VenueResponse, VenueListResponse, AvailabilityResponse,
)
from tablebook.schemas.settings import (
    SettingsResponse, SettingsUpdate, DateToggle, DailyCapacityUpdate, TimeSlotsUpdate,
)
from tablebook.schemas.reservation import (
    ReservationCreate, ReservationUpdate, ReservationResponse, PartitionedReservations,
)

__all__ = [
    "CustomerSignup", "OwnerSignup", "UserLogin", "UserResponse", "ProfileUpdate",
    "PasswordChange", "Token",
    "VenueCreate", "VenueUpdate", "VenueResponse", "VenueListResponse", "AvailabilityResponse",
    "SettingsResponse", "SettingsUpdate", "DateToggle", "DailyCapacityUpdate", "TimeSlotsUpdate",
    "ReservationCreate", "ReservationUpdate", "ReservationResponse", "PartitionedReservations",
]

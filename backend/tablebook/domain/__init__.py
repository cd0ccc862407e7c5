from tablebook.domain.records import (
    BookingMode,
    Reservation,
    ReservationStatus,
    Role,
    User,
    Venue,
    VenueSettings,
)

__all__ = [
    "BookingMode", "Reservation", "ReservationStatus", "Role",
    "User", "Venue", "VenueSettings",
]

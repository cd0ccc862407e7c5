from tablebook.models.venue import VenueORM, VenueSettingsORM
from tablebook.models.reservation import ReservationORM
from tablebook.models.user import UserORM

__all__ = ["VenueORM", "VenueSettingsORM", "ReservationORM", "UserORM"]

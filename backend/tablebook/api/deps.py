"""
Shared request dependencies: storage, clock, id generator, signed-in user.

Tests swap any of these through app.dependency_overrides.
"""

from fastapi import Depends

from tablebook.core.clock import get_clock
from tablebook.core.errors import AuthenticationError, PermissionDeniedError
from tablebook.core.ids import get_id_generator
from tablebook.core.security import get_current_user_id
from tablebook.domain.records import Reservation, Role, User
from tablebook.services import auth_service
from tablebook.storage.factory import get_storage
from tablebook.storage.interfaces.storage import Storage

__all__ = [
    "get_clock",
    "get_id_generator",
    "get_storage",
    "get_current_user",
    "ensure_venue_owner",
    "ensure_reservation_access",
]


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
) -> User:
    user = await auth_service.current_user(storage, user_id)
    if user is None:
        raise AuthenticationError("Account no longer exists")
    return user


def is_venue_owner(user: User, venue_id: int) -> bool:
    return user.role == Role.RESTAURANT_OWNER and user.venue_id == venue_id


def ensure_venue_owner(user: User, venue_id: int) -> None:
    if not is_venue_owner(user, venue_id):
        raise PermissionDeniedError("Only the venue's owner can do this")


def ensure_reservation_access(user: User, reservation: Reservation) -> None:
    """The guest who booked and the venue's owner may see and change a reservation."""
    if reservation.user_id != user.id and not is_venue_owner(user, reservation.venue_id):
        raise PermissionDeniedError("Not allowed to access this reservation")

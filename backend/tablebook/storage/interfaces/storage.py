"""
Storage interface for dependency inversion.

The booking core only talks to these abstractions, so the same services run
on the in-memory backend (tests, demos) and the SQL backend (deployments).
Repositories hand out copies of domain records: mutating a returned record
has no effect until it is passed back to save().
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional

from tablebook.domain.records import Reservation, User, Venue, VenueSettings


class VenueRepository(ABC):
    @abstractmethod
    async def all(self) -> list[Venue]:
        pass

    @abstractmethod
    async def get(self, venue_id: int) -> Optional[Venue]:
        pass

    @abstractmethod
    async def next_id(self) -> int:
        """An id greater than every stored venue id."""
        pass

    @abstractmethod
    async def add(self, venue: Venue) -> Venue:
        pass

    @abstractmethod
    async def save(self, venue: Venue) -> Venue:
        pass


class SettingsRepository(ABC):
    @abstractmethod
    async def get(self, venue_id: int) -> Optional[VenueSettings]:
        pass

    @abstractmethod
    async def save(self, settings: VenueSettings) -> VenueSettings:
        """Insert or replace the settings record for settings.venue_id."""
        pass


class ReservationRepository(ABC):
    @abstractmethod
    async def find(
        self,
        venue_id: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> list[Reservation]:
        """Reservations matching every given filter, oldest first."""
        pass

    @abstractmethod
    async def get(self, reservation_id: str) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def get_by_confirmation_number(self, confirmation_number: str) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        pass

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        pass

    @abstractmethod
    async def delete(self, reservation_id: str) -> bool:
        """Remove a reservation. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def confirmed_party_size(self, venue_id: int, date: str) -> int:
        """Sum of party sizes of confirmed reservations for venue and date."""
        pass


class UserRepository(ABC):
    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_login_id(self, login_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        pass


class Storage(ABC):
    """
    Unit of work over the four collections.

    Implementations:
    - MemoryStorage: process-local dicts guarded by one asyncio.Lock
    - SqlStorage: SQLAlchemy AsyncSession per request
    """

    venues: VenueRepository
    settings: SettingsRepository
    reservations: ReservationRepository
    users: UserRepository

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """
        Run a block atomically: every write inside it is applied, or none
        is. Nested calls join the outer transaction.
        """
        pass

    async def close(self) -> None:
        pass

"""
In-memory storage backend.

CONCURRENCY
===========

All collections live in plain dicts owned by one MemoryStorage. Single
repository calls never await while mutating, so each one is atomic on the
event loop. Multi-step read-modify-write sequences (toggle a date, owner
signup) go through transaction(), which:

  1. Takes one asyncio.Lock, serializing writers across requests
  2. Snapshots every collection
  3. Restores the snapshot if the block raises

Nested transaction() calls from the task already holding the lock join the
outer transaction instead of deadlocking.
"""

import asyncio
import copy
from contextlib import asynccontextmanager
from typing import Optional

from tablebook.domain.records import Reservation, ReservationStatus, User, Venue, VenueSettings
from tablebook.storage.interfaces.storage import (
    ReservationRepository,
    SettingsRepository,
    Storage,
    UserRepository,
    VenueRepository,
)


class _Collections:
    def __init__(self):
        self.venues: dict[int, Venue] = {}
        self.settings: dict[int, VenueSettings] = {}
        self.reservations: dict[str, Reservation] = {}
        self.users: dict[str, User] = {}


class MemoryVenueRepository(VenueRepository):
    def __init__(self, data: _Collections):
        self._data = data

    async def all(self) -> list[Venue]:
        return [copy.deepcopy(v) for _, v in sorted(self._data.venues.items())]

    async def get(self, venue_id: int) -> Optional[Venue]:
        venue = self._data.venues.get(venue_id)
        return copy.deepcopy(venue) if venue else None

    async def next_id(self) -> int:
        return max(self._data.venues, default=0) + 1

    async def add(self, venue: Venue) -> Venue:
        self._data.venues[venue.id] = copy.deepcopy(venue)
        return venue

    async def save(self, venue: Venue) -> Venue:
        self._data.venues[venue.id] = copy.deepcopy(venue)
        return venue


class MemorySettingsRepository(SettingsRepository):
    def __init__(self, data: _Collections):
        self._data = data

    async def get(self, venue_id: int) -> Optional[VenueSettings]:
        settings = self._data.settings.get(venue_id)
        return copy.deepcopy(settings) if settings else None

    async def save(self, settings: VenueSettings) -> VenueSettings:
        self._data.settings[settings.venue_id] = copy.deepcopy(settings)
        return settings


class MemoryReservationRepository(ReservationRepository):
    def __init__(self, data: _Collections):
        self._data = data

    async def find(
        self,
        venue_id: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> list[Reservation]:
        matches = [
            r for r in self._data.reservations.values()
            if (venue_id is None or r.venue_id == venue_id)
            and (user_id is None or r.user_id == user_id)
        ]
        matches.sort(key=lambda r: r.created_at)
        return [copy.deepcopy(r) for r in matches]

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        reservation = self._data.reservations.get(reservation_id)
        return copy.deepcopy(reservation) if reservation else None

    async def get_by_confirmation_number(self, confirmation_number: str) -> Optional[Reservation]:
        for reservation in self._data.reservations.values():
            if reservation.confirmation_number == confirmation_number:
                return copy.deepcopy(reservation)
        return None

    async def add(self, reservation: Reservation) -> Reservation:
        self._data.reservations[reservation.id] = copy.deepcopy(reservation)
        return reservation

    async def save(self, reservation: Reservation) -> Reservation:
        self._data.reservations[reservation.id] = copy.deepcopy(reservation)
        return reservation

    async def delete(self, reservation_id: str) -> bool:
        return self._data.reservations.pop(reservation_id, None) is not None

    async def confirmed_party_size(self, venue_id: int, date: str) -> int:
        return sum(
            r.party_size for r in self._data.reservations.values()
            if r.venue_id == venue_id
            and r.date == date
            and r.status == ReservationStatus.CONFIRMED
        )


class MemoryUserRepository(UserRepository):
    def __init__(self, data: _Collections):
        self._data = data

    async def get(self, user_id: str) -> Optional[User]:
        user = self._data.users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_by_login_id(self, login_id: str) -> Optional[User]:
        return self._first(lambda u: u.login_id == login_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return self._first(lambda u: u.email.lower() == email.lower())

    def _first(self, predicate) -> Optional[User]:
        for user in self._data.users.values():
            if predicate(user):
                return copy.deepcopy(user)
        return None

    async def add(self, user: User) -> User:
        self._data.users[user.id] = copy.deepcopy(user)
        return user

    async def save(self, user: User) -> User:
        self._data.users[user.id] = copy.deepcopy(user)
        return user


class MemoryStorage(Storage):
    def __init__(self):
        self._data = _Collections()
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None
        self.venues = MemoryVenueRepository(self._data)
        self.settings = MemorySettingsRepository(self._data)
        self.reservations = MemoryReservationRepository(self._data)
        self.users = MemoryUserRepository(self._data)

    @asynccontextmanager
    async def transaction(self):
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            yield
            return

        async with self._lock:
            self._owner = task
            snapshot = copy.deepcopy(self._data.__dict__)
            try:
                yield
            except BaseException:
                self._data.__dict__.update(snapshot)
                raise
            finally:
                self._owner = None

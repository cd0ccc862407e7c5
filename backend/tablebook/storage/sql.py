"""
SQLAlchemy storage backend.

One SqlStorage wraps one AsyncSession (one per request). Every repository
call flushes immediately so later statements in the same transaction see
its rows, and insert order follows call order (venue before its owner).
transaction() commits on success and rolls back on error; nested calls
join the outermost one.

Driver-level timeouts and connection failures are re-raised as
StorageUnavailableError so callers can tell "retry" from "fix your input".
"""

import functools
from contextlib import asynccontextmanager
from dataclasses import fields
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.core.errors import StorageUnavailableError
from tablebook.core.logging import get_logger
from tablebook.core.metrics import storage_errors
from tablebook.domain.records import (
    BookingMode,
    Reservation,
    ReservationStatus,
    Role,
    User,
    Venue,
    VenueSettings,
)
from tablebook.models import ReservationORM, UserORM, VenueORM, VenueSettingsORM
from tablebook.storage.interfaces.storage import (
    ReservationRepository,
    SettingsRepository,
    Storage,
    UserRepository,
    VenueRepository,
)

logger = get_logger(__name__)


def _translate_errors(method):
    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except (OperationalError, PoolTimeoutError) as e:
            storage_errors.labels(backend="sql").inc()
            logger.error("storage_unavailable", operation=method.__qualname__, error=str(e))
            raise StorageUnavailableError("Database is unavailable, please retry") from e
        except DBAPIError as e:
            if e.connection_invalidated:
                storage_errors.labels(backend="sql").inc()
                raise StorageUnavailableError("Database connection lost, please retry") from e
            raise
    return wrapper


def _columns(record) -> dict:
    return {f.name: getattr(record, f.name) for f in fields(record)}


# ---- row <-> record mapping ----

def _venue_from_row(row: VenueORM) -> Venue:
    return Venue(
        id=row.id,
        name=row.name,
        address=row.address,
        phone=row.phone,
        capacity=row.capacity,
        image=row.image,
        cuisine=row.cuisine,
        rating=row.rating,
        reviews=row.reviews,
        price_range=row.price_range,
        hours=row.hours,
        website=row.website,
        description=row.description,
    )


def _settings_from_row(row: VenueSettingsORM) -> VenueSettings:
    return VenueSettings(
        venue_id=row.venue_id,
        unavailable_dates=list(row.unavailable_dates or []),
        daily_capacity=dict(row.daily_capacity or {}),
        available_time_slots={k: list(v) for k, v in (row.available_time_slots or {}).items()},
    )


def _reservation_from_row(row: ReservationORM) -> Reservation:
    return Reservation(
        id=row.id,
        user_id=row.user_id,
        venue_id=row.venue_id,
        venue_name=row.venue_name,
        date=row.date,
        time=row.time,
        party_size=row.party_size,
        guest_name=row.guest_name,
        guest_phone=row.guest_phone,
        status=ReservationStatus(row.status),
        mode=BookingMode(row.mode),
        created_at=row.created_at,
        confirmation_number=row.confirmation_number,
    )


def _reservation_values(reservation: Reservation) -> dict:
    values = _columns(reservation)
    values["status"] = reservation.status.value
    values["mode"] = reservation.mode.value
    return values


def _user_from_row(row: UserORM) -> User:
    return User(
        id=row.id,
        login_id=row.login_id,
        email=row.email,
        name=row.name,
        role=Role(row.role),
        phone=row.phone,
        venue_id=row.venue_id,
        created_at=row.created_at,
        password_hash=row.password_hash,
    )


def _user_values(user: User) -> dict:
    values = _columns(user)
    values["role"] = user.role.value
    if values["created_at"] is None:
        del values["created_at"]
    return values


class SqlVenueRepository(VenueRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @_translate_errors
    async def all(self) -> list[Venue]:
        result = await self.session.execute(select(VenueORM).order_by(VenueORM.id))
        return [_venue_from_row(row) for row in result.scalars().all()]

    @_translate_errors
    async def get(self, venue_id: int) -> Optional[Venue]:
        row = await self.session.get(VenueORM, venue_id)
        return _venue_from_row(row) if row else None

    @_translate_errors
    async def next_id(self) -> int:
        current = (await self.session.execute(select(func.max(VenueORM.id)))).scalar()
        return (current or 0) + 1

    @_translate_errors
    async def add(self, venue: Venue) -> Venue:
        self.session.add(VenueORM(**_columns(venue)))
        await self.session.flush()
        return venue

    @_translate_errors
    async def save(self, venue: Venue) -> Venue:
        await self.session.merge(VenueORM(**_columns(venue)))
        await self.session.flush()
        return venue


class SqlSettingsRepository(SettingsRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @_translate_errors
    async def get(self, venue_id: int) -> Optional[VenueSettings]:
        row = await self.session.get(VenueSettingsORM, venue_id)
        return _settings_from_row(row) if row else None

    @_translate_errors
    async def save(self, settings: VenueSettings) -> VenueSettings:
        await self.session.merge(VenueSettingsORM(**_columns(settings)))
        await self.session.flush()
        return settings


class SqlReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @_translate_errors
    async def find(
        self,
        venue_id: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> list[Reservation]:
        query = select(ReservationORM)
        if venue_id is not None:
            query = query.where(ReservationORM.venue_id == venue_id)
        if user_id is not None:
            query = query.where(ReservationORM.user_id == user_id)
        result = await self.session.execute(query.order_by(ReservationORM.created_at.asc()))
        return [_reservation_from_row(row) for row in result.scalars().all()]

    @_translate_errors
    async def get(self, reservation_id: str) -> Optional[Reservation]:
        row = await self.session.get(ReservationORM, reservation_id)
        return _reservation_from_row(row) if row else None

    @_translate_errors
    async def get_by_confirmation_number(self, confirmation_number: str) -> Optional[Reservation]:
        result = await self.session.execute(
            select(ReservationORM)
            .where(ReservationORM.confirmation_number == confirmation_number)
            .order_by(ReservationORM.created_at, ReservationORM.id)
            .limit(1)
        )
        row = result.scalars().first()
        return _reservation_from_row(row) if row else None

    @_translate_errors
    async def add(self, reservation: Reservation) -> Reservation:
        self.session.add(ReservationORM(**_reservation_values(reservation)))
        await self.session.flush()
        return reservation

    @_translate_errors
    async def save(self, reservation: Reservation) -> Reservation:
        await self.session.merge(ReservationORM(**_reservation_values(reservation)))
        await self.session.flush()
        return reservation

    @_translate_errors
    async def delete(self, reservation_id: str) -> bool:
        row = await self.session.get(ReservationORM, reservation_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True

    @_translate_errors
    async def confirmed_party_size(self, venue_id: int, date: str) -> int:
        # Uses ix_reservations_venue_date_status
        result = await self.session.execute(
            select(func.coalesce(func.sum(ReservationORM.party_size), 0)).where(
                ReservationORM.venue_id == venue_id,
                ReservationORM.date == date,
                ReservationORM.status == ReservationStatus.CONFIRMED.value,
            )
        )
        return int(result.scalar())


class SqlUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @_translate_errors
    async def get(self, user_id: str) -> Optional[User]:
        row = await self.session.get(UserORM, user_id)
        return _user_from_row(row) if row else None

    @_translate_errors
    async def get_by_login_id(self, login_id: str) -> Optional[User]:
        result = await self.session.execute(select(UserORM).where(UserORM.login_id == login_id))
        row = result.scalar_one_or_none()
        return _user_from_row(row) if row else None

    @_translate_errors
    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(UserORM).where(func.lower(UserORM.email) == email.lower())
        )
        row = result.scalar_one_or_none()
        return _user_from_row(row) if row else None

    @_translate_errors
    async def add(self, user: User) -> User:
        self.session.add(UserORM(**_user_values(user)))
        await self.session.flush()
        return user

    @_translate_errors
    async def save(self, user: User) -> User:
        await self.session.merge(UserORM(**_user_values(user)))
        await self.session.flush()
        return user


class SqlStorage(Storage):
    def __init__(self, session: AsyncSession):
        self.session = session
        self._depth = 0
        self.venues = SqlVenueRepository(session)
        self.settings = SqlSettingsRepository(session)
        self.reservations = SqlReservationRepository(session)
        self.users = SqlUserRepository(session)

    @asynccontextmanager
    async def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield
            await self._commit()
        except BaseException:
            await self.session.rollback()
            raise
        finally:
            self._depth = 0

    @_translate_errors
    async def _commit(self) -> None:
        await self.session.commit()

    async def close(self) -> None:
        await self.session.close()

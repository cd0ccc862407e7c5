"""
Runs the booking core against the SQL backend on an in-memory SQLite
database (aiosqlite), checking it behaves like the memory backend.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tablebook.core.errors import NotFoundError, StorageUnavailableError
from tablebook.core.ids import IdGenerator
from tablebook.db.base import Base
from tablebook.domain.records import ReservationStatus
from tablebook.services import (
    auth_service,
    availability_service,
    booking_service,
    reservation_service,
    settings_service,
    venue_service,
)
from tablebook.storage.sql import SqlStorage


@pytest_asyncio.fixture
async def sql_storage() -> AsyncGenerator[SqlStorage, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessionmaker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with sessionmaker() as session:
        storage = SqlStorage(session)
        yield storage
        await storage.close()

    await engine.dispose()


async def _owner(storage, clock, ids):
    return await auth_service.signup_restaurant_owner(
        storage, clock, ids,
        login_id="owner1", email="owner1@example.com", password="ownerpassword1",
        name="Park Owner", venue_name="SQL Table", capacity=10,
    )


@pytest.mark.asyncio
async def test_owner_signup_persists_all_records(sql_storage, clock, ids):
    owner = await _owner(sql_storage, clock, ids)

    venue = await venue_service.get_venue(sql_storage, owner.venue_id)
    assert venue.name == "SQL Table"
    assert venue.id == 1

    settings = await settings_service.get_venue_settings(sql_storage, venue.id, clock)
    assert len(settings.available_time_slots) == 14

    stored_user = await sql_storage.users.get_by_email("OWNER1@example.com")
    assert stored_user.id == owner.id


@pytest.mark.asyncio
async def test_failed_signup_rolls_back(sql_storage, clock, ids, monkeypatch):
    async def broken_add(user):
        raise RuntimeError("disk full")

    monkeypatch.setattr(sql_storage.users, "add", broken_add)
    with pytest.raises(RuntimeError):
        await _owner(sql_storage, clock, ids)

    assert await sql_storage.venues.all() == []
    assert await sql_storage.settings.get(1) is None


@pytest.mark.asyncio
async def test_booking_flow_and_capacity(sql_storage, clock, ids):
    owner = await _owner(sql_storage, clock, ids)

    async def book(party_size):
        return await booking_service.create_booking(
            sql_storage, clock, ids,
            user_id="user-a", venue_id=owner.venue_id, date="2025-06-05", time_slot="19:00",
            party_size=party_size, guest_name="Seo", guest_phone="010-5555-6666",
        )

    first = await book(6)
    second = await book(3)
    await booking_service.confirm_booking(sql_storage, first.id, clock)
    await booking_service.confirm_booking(sql_storage, second.id, clock)
    assert await availability_service.remaining_capacity(sql_storage, owner.venue_id, "2025-06-05", clock) == 1

    await booking_service.cancel_booking(sql_storage, second.id)
    assert await availability_service.remaining_capacity(sql_storage, owner.venue_id, "2025-06-05", clock) == 4

    found = await reservation_service.get_by_confirmation_code(sql_storage, first.confirmation_number)
    assert found.status == ReservationStatus.CONFIRMED

    await booking_service.discard_booking(sql_storage, second.id)
    with pytest.raises(NotFoundError):
        await reservation_service.delete_reservation(sql_storage, second.id)


@pytest.mark.asyncio
async def test_colliding_confirmation_codes_both_book(sql_storage, clock, ids):
    class RepeatingCodes(IdGenerator):
        def confirmation_code(self, prefix, now):
            return f"{prefix}-20250601-1234"

    owner = await _owner(sql_storage, clock, ids)
    same_code = RepeatingCodes(seed=7)

    booked = [
        await booking_service.create_booking(
            sql_storage, clock, same_code,
            user_id=f"user-{n}", venue_id=owner.venue_id, date="2025-06-05", time_slot="19:00",
            party_size=2, guest_name="Seo", guest_phone="010-5555-6666",
        )
        for n in range(2)
    ]
    assert booked[0].confirmation_number == booked[1].confirmation_number
    assert booked[0].id != booked[1].id
    assert len(await reservation_service.list_by_venue(sql_storage, owner.venue_id)) == 2

    found = await reservation_service.get_by_confirmation_code(sql_storage, "BK-20250601-1234")
    assert found.id in {r.id for r in booked}


@pytest.mark.asyncio
async def test_settings_merges_round_trip_json(sql_storage, clock, ids):
    owner = await _owner(sql_storage, clock, ids)
    await settings_service.set_daily_capacity(sql_storage, owner.venue_id, "2025-06-05", 4, clock)
    await settings_service.set_daily_capacity(sql_storage, owner.venue_id, "2025-06-06", 2, clock)
    await settings_service.toggle_date_availability(sql_storage, owner.venue_id, "2025-06-07", clock)

    stored = await sql_storage.settings.get(owner.venue_id)
    assert stored.daily_capacity == {"2025-06-05": 4, "2025-06-06": 2}
    assert stored.unavailable_dates == ["2025-06-07"]


@pytest.mark.asyncio
async def test_operational_errors_surface_as_unavailable(sql_storage, monkeypatch):
    async def timed_out(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(sql_storage.session, "execute", timed_out)
    with pytest.raises(StorageUnavailableError):
        await sql_storage.venues.all()

"""
Pytest fixtures: in-memory storage, pinned clock, seeded ids, HTTP client
and signed-in users.

Every test gets a fresh MemoryStorage, so there is nothing to roll back.
The clock is frozen at 2025-06-01 18:00 Asia/Seoul (a Sunday).
"""

import os

# Must be set before tablebook is imported: settings are cached on first use
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEED_SAMPLE_VENUES"] = "false"
os.environ["TIMEZONE"] = "Asia/Seoul"

from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tablebook.main import app
from tablebook.api.deps import get_clock, get_id_generator, get_storage
from tablebook.core.clock import FixedClock
from tablebook.core.ids import IdGenerator
from tablebook.core.security import create_access_token
from tablebook.domain.records import User, Venue
from tablebook.services import auth_service, venue_service
from tablebook.services.settings_service import provision_settings
from tablebook.storage.memory import MemoryStorage

NOW = datetime(2025, 6, 1, 18, 0)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def ids() -> IdGenerator:
    return IdGenerator(seed=1234)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture
async def client(storage, clock, ids) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the test storage, clock and id generator."""

    async def override_get_storage():
        yield storage

    app.dependency_overrides[get_storage] = override_get_storage
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_id_generator] = lambda: ids

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def venue(storage, clock) -> Venue:
    """A 10-seat venue with the standard 14-day slot window."""
    venue = await venue_service.create_venue(
        storage,
        Venue(id=None, name="Test Bistro", capacity=10, cuisine="Korean", price_range="$$"),
    )
    await storage.settings.save(provision_settings(venue.id, clock.now().date(), 14))
    return venue


@pytest_asyncio.fixture
async def customer(storage, clock, ids) -> User:
    return await auth_service.signup_customer(
        storage,
        clock,
        ids,
        login_id="guest1",
        email="guest1@example.com",
        password="guestpassword1",
        name="Kim Guest",
        phone="010-1111-2222",
    )


@pytest_asyncio.fixture
async def owner(storage, clock, ids) -> User:
    """Owner of a freshly signed-up 10-seat venue."""
    return await auth_service.signup_restaurant_owner(
        storage,
        clock,
        ids,
        login_id="owner1",
        email="owner1@example.com",
        password="ownerpassword1",
        name="Park Owner",
        venue_name="Owner's Table",
        capacity=10,
    )


def _headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': user.id})}"}


@pytest.fixture
def make_headers():
    """Authorization headers for any user."""
    return _headers_for


@pytest.fixture
def customer_headers(customer) -> dict:
    return _headers_for(customer)


@pytest.fixture
def owner_headers(owner) -> dict:
    return _headers_for(owner)

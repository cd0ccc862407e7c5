"""
Venue directory: CRUD and search over venue profiles.
"""

import dataclasses
from typing import Optional

from tablebook.core.clock import Clock
from tablebook.core.config import get_settings
from tablebook.core.errors import NotFoundError, ValidationError
from tablebook.core.logging import get_logger
from tablebook.data.sample_venues import SAMPLE_VENUES
from tablebook.domain.records import Venue
from tablebook.services.settings_service import provision_settings
from tablebook.storage.interfaces.storage import Storage

logger = get_logger(__name__)

# Fields an update may touch; id is immutable
UPDATABLE_FIELDS = frozenset(f.name for f in dataclasses.fields(Venue)) - {"id"}


async def list_venues(storage: Storage) -> list[Venue]:
    return await storage.venues.all()


async def get_venue(storage: Storage, venue_id: int) -> Venue:
    venue = await storage.venues.get(venue_id)
    if not venue:
        raise NotFoundError("Venue", venue_id)
    return venue


async def create_venue(storage: Storage, venue: Venue) -> Venue:
    """Persist a venue, assigning the next free id when none is given."""
    if venue.capacity < 0:
        raise ValidationError("Capacity must be zero or greater")

    async with storage.transaction():
        if venue.id is None:
            venue = dataclasses.replace(venue, id=await storage.venues.next_id())
        elif await storage.venues.get(venue.id):
            raise ValidationError(f"Venue {venue.id} already exists")
        await storage.venues.add(venue)

    logger.info("venue_created", venue_id=venue.id, name=venue.name, capacity=venue.capacity)
    return venue


async def update_venue(storage: Storage, venue_id: int, changes: dict) -> Venue:
    """Merge the supplied fields into an existing venue."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if changes.get("capacity") is not None and changes["capacity"] < 0:
        raise ValidationError("Capacity must be zero or greater")

    async with storage.transaction():
        venue = await get_venue(storage, venue_id)
        venue = dataclasses.replace(venue, **changes)
        await storage.venues.save(venue)

    logger.info("venue_updated", venue_id=venue_id, fields=sorted(changes))
    return venue


async def search_venues(
    storage: Storage,
    cuisine: Optional[str] = None,
    price_range: Optional[str] = None,
    min_rating: Optional[float] = None,
) -> list[Venue]:
    """All filters are optional and combine with AND."""
    venues = await storage.venues.all()
    return [
        v for v in venues
        if (not cuisine or v.cuisine == cuisine)
        and (not price_range or v.price_range == price_range)
        and (not min_rating or v.rating >= min_rating)
    ]


async def seed_sample_venues(storage: Storage, clock: Clock) -> int:
    """Load sample venues (with a default slot window) into an empty store."""
    async with storage.transaction():
        if await storage.venues.all():
            return 0

        days = get_settings().SLOT_WINDOW_DAYS
        for venue in SAMPLE_VENUES:
            await storage.venues.add(venue)
            await storage.settings.save(provision_settings(venue.id, clock.now().date(), days))

    logger.info("sample_venues_seeded", count=len(SAMPLE_VENUES))
    return len(SAMPLE_VENUES)

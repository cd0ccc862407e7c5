"""
Venue directory endpoints with Redis caching on list and search.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tablebook.api.deps import ensure_venue_owner, get_clock, get_current_user, get_storage
from tablebook.core.clock import Clock
from tablebook.core.logging import get_logger
from tablebook.domain.records import User, Venue
from tablebook.schemas.venue import (
    AvailabilityResponse,
    VenueCreate,
    VenueListResponse,
    VenueResponse,
    VenueUpdate,
)
from tablebook.services import availability_service, venue_service
from tablebook.services.cache_service import (
    get_cached_venues,
    invalidate_venue_cache,
    make_venue_list_key,
    set_cached_venues,
)
from tablebook.storage.interfaces.storage import Storage
from tablebook.utils.dates import format_display_date, today_key

logger = get_logger(__name__)
router = APIRouter(prefix="/venues", tags=["Venues"])


def _listing(venues: list[Venue]) -> VenueListResponse:
    return VenueListResponse(
        venues=[VenueResponse.model_validate(v) for v in venues],
        total=len(venues),
    )


async def _cached_listing(key: str, load) -> VenueListResponse:
    cached = await get_cached_venues(key)
    if cached is not None:
        logger.info("venues_list_cache_hit", key=key)
        return VenueListResponse(venues=cached, total=len(cached), cached=True)

    response = _listing(await load())
    await set_cached_venues(key, [v.model_dump() for v in response.venues])
    return response


@router.get("", response_model=VenueListResponse)
async def list_venues(storage: Storage = Depends(get_storage)):
    """
    All venues in id order.
    Cached in Redis; invalidated when a venue is created or edited.
    """
    return await _cached_listing(
        make_venue_list_key(),
        lambda: venue_service.list_venues(storage),
    )


@router.get("/search", response_model=VenueListResponse)
async def search_venues(
    cuisine: Optional[str] = Query(None),
    price_range: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    storage: Storage = Depends(get_storage),
):
    return await _cached_listing(
        make_venue_list_key(cuisine, price_range, min_rating),
        lambda: venue_service.search_venues(storage, cuisine, price_range, min_rating),
    )


@router.get("/bookable", response_model=VenueListResponse)
async def bookable_venues(
    date: str = Query(...),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """Venues open on the date with at least one slot and seats left. Not cached."""
    return _listing(await availability_service.bookable_venues_on(storage, date, clock))


@router.get("/instant", response_model=VenueListResponse)
async def instant_venues(
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """Venues taking walk-in bookings right now. Not cached."""
    return _listing(await availability_service.instant_venues(storage, clock))


@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue(venue_id: int, storage: Storage = Depends(get_storage)):
    return await venue_service.get_venue(storage, venue_id)


@router.post("", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
async def create_venue(
    data: VenueCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create a venue. Requires authentication."""
    venue = await venue_service.create_venue(storage, Venue(id=None, **data.model_dump()))
    await invalidate_venue_cache()
    return venue


@router.patch("/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: int,
    data: VenueUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Edit a venue profile. Owner only."""
    ensure_venue_owner(user, venue_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    venue = await venue_service.update_venue(storage, venue_id, changes)
    await invalidate_venue_cache()
    return venue


@router.get("/{venue_id}/availability", response_model=AvailabilityResponse)
async def venue_availability(
    venue_id: int,
    date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    locale: str = Query("ko"),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """Capacity and slots for one date; includes the next walk-in slot when asking about today."""
    day = date or today_key(clock)
    summary = await availability_service.availability_summary(storage, venue_id, day, clock)

    instant = None
    if day == today_key(clock):
        instant = await availability_service.next_instant_slot(storage, venue_id, clock)

    return AvailabilityResponse(
        venue_id=summary.venue_id,
        date=summary.date,
        display_date=format_display_date(summary.date, locale),
        effective_capacity=summary.effective_capacity,
        confirmed=summary.confirmed,
        remaining=summary.remaining,
        unavailable=summary.unavailable,
        time_slots=summary.time_slots,
        next_instant_slot=instant._asdict() if instant else None,
    )

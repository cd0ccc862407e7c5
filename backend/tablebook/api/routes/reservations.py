"""
Reservation endpoints: booking, lookup and the owner's confirm/reject flow.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tablebook.api.deps import (
    ensure_reservation_access,
    ensure_venue_owner,
    get_clock,
    get_current_user,
    get_id_generator,
    get_storage,
    is_venue_owner,
)
from tablebook.core.clock import Clock
from tablebook.core.errors import PermissionDeniedError
from tablebook.core.ids import IdGenerator
from tablebook.domain.records import ReservationStatus, User
from tablebook.schemas.reservation import (
    PartitionedReservations,
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
)
from tablebook.services import booking_service, reservation_service
from tablebook.storage.interfaces.storage import Storage

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
    ids: IdGenerator = Depends(get_id_generator),
):
    """
    Book a table. The reservation starts pending until the owner confirms it.

    Fails with 422 when the date is closed, fully booked, or has fewer seats
    left than the party size.
    """
    return await booking_service.create_booking(
        storage,
        clock,
        ids,
        user_id=user.id,
        venue_id=data.venue_id,
        date=data.date,
        time_slot=data.time,
        party_size=data.party_size,
        guest_name=data.guest_name,
        guest_phone=data.guest_phone,
        mode=data.mode,
    )


@router.get("", response_model=PartitionedReservations)
async def my_reservations(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """The signed-in user's reservations, split into upcoming and past."""
    return await booking_service.get_user_bookings(storage, user.id, clock)


@router.get("/venue/{venue_id}", response_model=PartitionedReservations)
async def venue_reservations(
    venue_id: int,
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """Every reservation for a venue. Owner only."""
    ensure_venue_owner(user, venue_id)
    return await booking_service.get_venue_bookings(storage, venue_id, clock, status_filter)


@router.get("/code/{code}", response_model=ReservationResponse)
async def reservation_by_code(
    code: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    reservation = await reservation_service.get_by_confirmation_code(storage, code)
    ensure_reservation_access(user, reservation)
    return reservation


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_reservation_access(user, reservation)
    return reservation


@router.patch("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: str,
    data: ReservationUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """
    Edit a reservation. Guests may only change status to cancelled;
    other status changes belong to the venue's owner. New dates, times
    and party sizes must still fit the venue's remaining capacity.
    """
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_reservation_access(user, reservation)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    target = changes.get("status")
    if (
        target is not None
        and target != ReservationStatus.CANCELLED
        and not is_venue_owner(user, reservation.venue_id)
    ):
        raise PermissionDeniedError("Only the venue's owner can confirm or reject")

    return await booking_service.edit_booking(storage, reservation_id, changes, clock)


@router.post("/{reservation_id}/confirm", response_model=ReservationResponse)
async def confirm_reservation(
    reservation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_venue_owner(user, reservation.venue_id)
    return await booking_service.confirm_booking(storage, reservation_id, clock)


@router.post("/{reservation_id}/reject", response_model=ReservationResponse)
async def reject_reservation(
    reservation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_venue_owner(user, reservation.venue_id)
    return await booking_service.reject_booking(storage, reservation_id)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Cancel as the guest or the owner. Confirmed seats are released at once."""
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_reservation_access(user, reservation)
    return await booking_service.cancel_booking(storage, reservation_id)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Remove a cancelled or rejected reservation from the list."""
    reservation = await reservation_service.get_reservation(storage, reservation_id)
    ensure_reservation_access(user, reservation)
    await booking_service.discard_booking(storage, reservation_id)

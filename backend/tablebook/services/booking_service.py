"""
Reservation lifecycle: creating bookings against capacity, and moving them
through pending -> confirmed / rejected / cancelled.

CAPACITY PRE-FLIGHT
===================

Problem:
  Two guests ask for the last seats on the same night at the same time.
  Both read remaining=4, both insert, the venue is oversubscribed.

Solution:
  create_booking() runs every check and the insert inside one
  storage.transaction():

  1. Validate the request (date key, HH:MM time, party size >= 1, guest)
  2. Load the venue; an unknown venue is NotFoundError
  3. Reject closed dates
  4. remaining == 0           -> CapacityExceededError ("Fully booked")
     party_size > remaining   -> CapacityExceededError
  5. Insert the reservation as pending

  Nothing is written unless all checks pass. The memory backend
  serializes transactions on one asyncio.Lock; the SQL backend relies on
  the session transaction.

  edit_booking() re-runs steps 1, 3 and 4 when date, time or party size
  change, leaving a confirmed reservation's own seats out of the total.

  Only confirmed reservations hold seats, so step 4 compares against the
  confirmed total. Owners may still confirm past capacity; that is logged
  as reservation_overbooked rather than refused.
"""

import time
from typing import Optional

from tablebook.core.clock import Clock
from tablebook.core.errors import CapacityExceededError, ValidationError
from tablebook.core.ids import IdGenerator
from tablebook.core.logging import get_logger
from tablebook.core.metrics import record_reservation_attempt, reservation_latency
from tablebook.domain.lifecycle import DISCARDABLE, partition
from tablebook.domain.records import BookingMode, Reservation, ReservationStatus
from tablebook.services import reservation_service
from tablebook.services.availability_service import effective_capacity, remaining_capacity
from tablebook.services.settings_service import get_venue_settings
from tablebook.services.venue_service import get_venue
from tablebook.storage.interfaces.storage import Storage
from tablebook.utils.dates import validate_date_key, validate_time

logger = get_logger(__name__)

# Edits to these fields re-run the creation checks
BOOKING_FIELDS = frozenset({"date", "time", "party_size"})
HOLDING = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


def _validate_request(
    date: str,
    time_slot: str,
    party_size: int,
    guest_name: str,
    guest_phone: str,
) -> None:
    if not date or not time_slot:
        raise ValidationError("Date and time are required")
    validate_date_key(date)
    validate_time(time_slot)
    if isinstance(party_size, bool) or not isinstance(party_size, int) or party_size < 1:
        raise ValidationError("Party size must be at least 1")
    if not guest_name or not guest_name.strip():
        raise ValidationError("Guest name is required")
    if not guest_phone or not guest_phone.strip():
        raise ValidationError("Guest phone is required")


async def create_booking(
    storage: Storage,
    clock: Clock,
    ids: IdGenerator,
    *,
    user_id: str,
    venue_id: int,
    date: str,
    time_slot: str,
    party_size: int,
    guest_name: str,
    guest_phone: str,
    mode: BookingMode = BookingMode.SCHEDULED,
) -> Reservation:
    """
    Create a pending reservation after the capacity pre-flight.
    Raises ValidationError (or CapacityExceededError) before any write.
    """
    started = time.perf_counter()
    try:
        _validate_request(date, time_slot, party_size, guest_name, guest_phone)
    except ValidationError:
        record_reservation_attempt("invalid")
        raise

    async with storage.transaction():
        venue = await get_venue(storage, venue_id)

        settings = await get_venue_settings(storage, venue_id, clock)
        if date in settings.unavailable_dates:
            record_reservation_attempt("closed")
            logger.warning("reservation_rejected_closed", venue_id=venue_id, date=date)
            raise ValidationError("The venue is not taking reservations on this date")

        remaining = await remaining_capacity(storage, venue_id, date, clock)
        if remaining == 0 or party_size > remaining:
            record_reservation_attempt("capacity")
            logger.warning(
                "reservation_rejected_capacity",
                venue_id=venue_id,
                date=date,
                requested=party_size,
                remaining=remaining,
            )
            raise CapacityExceededError(party_size, remaining)

        reservation = await reservation_service.create_reservation(
            storage,
            clock,
            ids,
            user_id=user_id,
            venue_id=venue_id,
            venue_name=venue.name,
            date=date,
            time=time_slot,
            party_size=party_size,
            guest_name=guest_name.strip(),
            guest_phone=guest_phone.strip(),
            mode=mode,
        )

    record_reservation_attempt("created")
    reservation_latency.observe(time.perf_counter() - started)
    return reservation


async def edit_booking(
    storage: Storage,
    reservation_id: str,
    changes: dict,
    clock: Clock,
) -> Reservation:
    """
    Apply a guest's or owner's edit. Changing date, time or party size
    re-runs the creation checks against the edited values; a confirmed
    reservation's own seats are not counted against itself.
    """
    if not BOOKING_FIELDS & set(changes):
        return await reservation_service.update_reservation(storage, reservation_id, changes)

    cleaned = reservation_service.validate_changes(changes)
    async with storage.transaction():
        current = await reservation_service.get_reservation(storage, reservation_id)
        date = changes.get("date", current.date)
        time_slot = changes.get("time", current.time)
        party_size = changes.get("party_size", current.party_size)
        guest_name = changes.get("guest_name", current.guest_name)
        guest_phone = changes.get("guest_phone", current.guest_phone)
        _validate_request(date, time_slot, party_size, guest_name, guest_phone)

        if cleaned.get("status", current.status) in HOLDING:
            settings = await get_venue_settings(storage, current.venue_id, clock)
            if date in settings.unavailable_dates:
                logger.warning(
                    "reservation_edit_rejected_closed", reservation_id=reservation_id, date=date
                )
                raise ValidationError("The venue is not taking reservations on this date")

            effective = await effective_capacity(storage, current.venue_id, date, clock)
            confirmed = await storage.reservations.confirmed_party_size(current.venue_id, date)
            if current.status == ReservationStatus.CONFIRMED and current.date == date:
                confirmed -= current.party_size
            remaining = max(0, effective - confirmed)
            if remaining == 0 or party_size > remaining:
                logger.warning(
                    "reservation_edit_rejected_capacity",
                    reservation_id=reservation_id,
                    date=date,
                    requested=party_size,
                    remaining=remaining,
                )
                raise CapacityExceededError(party_size, remaining)

        return await reservation_service.update_reservation(storage, reservation_id, changes)


async def confirm_booking(storage: Storage, reservation_id: str, clock: Clock) -> Reservation:
    """Confirm a pending reservation. Over-capacity confirmations are allowed and logged."""
    async with storage.transaction():
        reservation = await reservation_service.confirm_reservation(storage, reservation_id)
        effective = await effective_capacity(storage, reservation.venue_id, reservation.date, clock)
        confirmed = await storage.reservations.confirmed_party_size(
            reservation.venue_id, reservation.date
        )

    if confirmed > effective:
        logger.warning(
            "reservation_overbooked",
            reservation_id=reservation_id,
            venue_id=reservation.venue_id,
            date=reservation.date,
            confirmed=confirmed,
            capacity=effective,
        )
    return reservation


async def reject_booking(storage: Storage, reservation_id: str) -> Reservation:
    return await reservation_service.reject_reservation(storage, reservation_id)


async def cancel_booking(storage: Storage, reservation_id: str) -> Reservation:
    """Cancelling a confirmed reservation frees its seats immediately."""
    return await reservation_service.cancel_reservation(storage, reservation_id)


async def discard_booking(storage: Storage, reservation_id: str) -> None:
    """Delete a reservation, but only once it is cancelled or rejected."""
    async with storage.transaction():
        reservation = await reservation_service.get_reservation(storage, reservation_id)
        if reservation.status not in DISCARDABLE:
            raise ValidationError(
                f"Only cancelled or rejected reservations can be deleted, this one is {reservation.status.value}"
            )
        await reservation_service.delete_reservation(storage, reservation_id)


async def get_user_bookings(
    storage: Storage,
    user_id: str,
    clock: Clock,
) -> dict[str, list[Reservation]]:
    """A user's reservations split into upcoming and past, newest first."""
    reservations = await reservation_service.list_by_user(storage, user_id)
    reservations.sort(key=lambda r: r.created_at, reverse=True)
    return partition(reservations, clock)


async def get_venue_bookings(
    storage: Storage,
    venue_id: int,
    clock: Clock,
    status: Optional[ReservationStatus] = None,
) -> dict[str, list[Reservation]]:
    """A venue's reservations split into upcoming and past, optionally by status."""
    await get_venue(storage, venue_id)
    reservations = await reservation_service.list_by_venue(storage, venue_id)
    if status is not None:
        reservations = [r for r in reservations if r.status == status]
    reservations.sort(key=lambda r: r.created_at, reverse=True)
    return partition(reservations, clock)

"""
Reservation store: persistence, lookup and status changes for reservations.

The store itself is capacity-agnostic. Capacity pre-flight lives in
booking_service.create_booking(); every status change, whether through
update_reservation() or the confirm/reject/cancel helpers, goes through
the state machine in tablebook.domain.lifecycle.
"""

import dataclasses

from tablebook.core.clock import Clock
from tablebook.core.config import get_settings
from tablebook.core.errors import NotFoundError, ValidationError
from tablebook.core.ids import IdGenerator
from tablebook.core.logging import get_logger
from tablebook.core.metrics import record_transition
from tablebook.domain.lifecycle import check_transition
from tablebook.domain.records import BookingMode, Reservation, ReservationStatus
from tablebook.storage.interfaces.storage import Storage
from tablebook.utils.dates import validate_date_key, validate_time

logger = get_logger(__name__)

# Assigned at creation, never changed afterwards
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "confirmation_number"})
UPDATABLE_FIELDS = frozenset(f.name for f in dataclasses.fields(Reservation)) - IMMUTABLE_FIELDS


async def create_reservation(
    storage: Storage,
    clock: Clock,
    ids: IdGenerator,
    *,
    user_id: str,
    venue_id: int,
    venue_name: str,
    date: str,
    time: str,
    party_size: int,
    guest_name: str,
    guest_phone: str,
    mode: BookingMode = BookingMode.SCHEDULED,
) -> Reservation:
    """Persist a new pending reservation with fresh id and confirmation code."""
    now = clock.now()
    reservation = Reservation(
        id=ids.reservation_id(now),
        user_id=user_id,
        venue_id=venue_id,
        venue_name=venue_name,
        date=date,
        time=time,
        party_size=party_size,
        guest_name=guest_name,
        guest_phone=guest_phone,
        status=ReservationStatus.PENDING,
        mode=BookingMode(mode),
        created_at=now,
        confirmation_number=ids.confirmation_code(get_settings().CONFIRMATION_PREFIX, now),
    )
    await storage.reservations.add(reservation)

    logger.info(
        "reservation_created",
        reservation_id=reservation.id,
        venue_id=venue_id,
        date=date,
        time=time,
        party_size=party_size,
        mode=reservation.mode.value,
    )
    return reservation


async def get_reservation(storage: Storage, reservation_id: str) -> Reservation:
    reservation = await storage.reservations.get(reservation_id)
    if not reservation:
        raise NotFoundError("Reservation", reservation_id)
    return reservation


async def get_by_confirmation_code(storage: Storage, code: str) -> Reservation:
    reservation = await storage.reservations.get_by_confirmation_number(code)
    if not reservation:
        raise NotFoundError("Reservation", code)
    return reservation


async def list_by_venue(storage: Storage, venue_id: int) -> list[Reservation]:
    return await storage.reservations.find(venue_id=venue_id)


async def list_by_user(storage: Storage, user_id: str) -> list[Reservation]:
    return await storage.reservations.find(user_id=user_id)


async def list_all(storage: Storage) -> list[Reservation]:
    return await storage.reservations.find()


async def list_by_date_range(
    storage: Storage,
    venue_id: int,
    start: str,
    end: str,
) -> list[Reservation]:
    """Reservations of a venue dated between start and end, both inclusive."""
    validate_date_key(start)
    validate_date_key(end)
    if start > end:
        raise ValidationError("Range start must not be after its end")
    reservations = await storage.reservations.find(venue_id=venue_id)
    return [r for r in reservations if start <= r.date <= end]


async def confirmed_party_size_for_date(storage: Storage, venue_id: int, date: str) -> int:
    """Seats held by confirmed reservations; pending ones hold nothing."""
    return await storage.reservations.confirmed_party_size(venue_id, date)


def validate_changes(changes: dict) -> dict:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    cleaned = dict(changes)
    if "date" in cleaned:
        validate_date_key(cleaned["date"])
    if "time" in cleaned:
        validate_time(cleaned["time"])
    if "party_size" in cleaned and cleaned["party_size"] < 1:
        raise ValidationError("Party size must be at least 1")
    try:
        if "status" in cleaned:
            cleaned["status"] = ReservationStatus(cleaned["status"])
        if "mode" in cleaned:
            cleaned["mode"] = BookingMode(cleaned["mode"])
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return cleaned


async def update_reservation(
    storage: Storage,
    reservation_id: str,
    changes: dict,
) -> Reservation:
    """Merge the supplied fields; a status change must be a legal transition."""
    cleaned = validate_changes(changes)

    async with storage.transaction():
        current = await get_reservation(storage, reservation_id)
        target = cleaned.get("status")
        if target is not None:
            # Re-sending the current status counts as an illegal transition
            check_transition(current.status, target)
        updated = dataclasses.replace(current, **cleaned)
        await storage.reservations.save(updated)

    if target is not None:
        record_transition(current.status.value, target.value)
    logger.info("reservation_updated", reservation_id=reservation_id, fields=sorted(cleaned))
    return updated


async def transition_reservation(
    storage: Storage,
    reservation_id: str,
    target: ReservationStatus,
) -> Reservation:
    """Move a reservation to `target`, leaving it untouched if illegal."""
    async with storage.transaction():
        current = await get_reservation(storage, reservation_id)
        check_transition(current.status, target)
        updated = dataclasses.replace(current, status=target)
        await storage.reservations.save(updated)

    record_transition(current.status.value, target.value)
    logger.info(
        "reservation_transitioned",
        reservation_id=reservation_id,
        from_status=current.status.value,
        to_status=target.value,
    )
    return updated


async def confirm_reservation(storage: Storage, reservation_id: str) -> Reservation:
    return await transition_reservation(storage, reservation_id, ReservationStatus.CONFIRMED)


async def reject_reservation(storage: Storage, reservation_id: str) -> Reservation:
    return await transition_reservation(storage, reservation_id, ReservationStatus.REJECTED)


async def cancel_reservation(storage: Storage, reservation_id: str) -> Reservation:
    return await transition_reservation(storage, reservation_id, ReservationStatus.CANCELLED)


async def delete_reservation(storage: Storage, reservation_id: str) -> None:
    if not await storage.reservations.delete(reservation_id):
        raise NotFoundError("Reservation", reservation_id)
    logger.info("reservation_deleted", reservation_id=reservation_id)


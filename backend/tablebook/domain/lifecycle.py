"""
Reservation state machine and upcoming/past classification.

    pending   --confirm--> confirmed
    pending   --reject-->  rejected
    pending   --cancel-->  cancelled
    confirmed --cancel-->  cancelled

Rejected and cancelled are terminal. Repeating a transition into the state a
reservation already holds is an error, never a silent no-op.
"""

from typing import Iterable

from tablebook.core.clock import Clock
from tablebook.core.errors import InvalidTransitionError
from tablebook.domain.records import Reservation, ReservationStatus
from tablebook.utils.dates import current_time, today_key

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({
        ReservationStatus.CONFIRMED,
        ReservationStatus.REJECTED,
        ReservationStatus.CANCELLED,
    }),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED}),
    ReservationStatus.REJECTED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

DISCARDABLE = frozenset({ReservationStatus.CANCELLED, ReservationStatus.REJECTED})

UPCOMING = "upcoming"
PAST = "past"


def is_terminal(status: ReservationStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def check_transition(current: ReservationStatus, target: ReservationStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)


def classify(reservation: Reservation, clock: Clock) -> str:
    """
    Display bucket for a reservation.

    Cancelled is always past. Every other status, rejected included, is
    bucketed by its date and time against the local wall clock; on the
    current day, times strictly earlier than now (HH:MM) are past.
    """
    if reservation.status == ReservationStatus.CANCELLED:
        return PAST

    today = today_key(clock)
    if reservation.date > today:
        return UPCOMING
    if reservation.date < today:
        return PAST
    return PAST if reservation.time < current_time(clock) else UPCOMING


def partition(reservations: Iterable[Reservation], clock: Clock) -> dict[str, list[Reservation]]:
    buckets: dict[str, list[Reservation]] = {UPCOMING: [], PAST: []}
    for reservation in reservations:
        buckets[classify(reservation, clock)].append(reservation)
    return buckets

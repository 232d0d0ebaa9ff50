"""Booking lifecycle state machine.

    CREATED --confirm--> CONFIRMED --complete--> COMPLETED
    CREATED | CONFIRMED --cancel--> CANCELLED

CANCELLED and COMPLETED are terminal. Any (state, event) pair missing from
the table fails with InvalidTransitionError.
"""
import logging
from typing import Dict, Tuple

from domain.entities import Reservation
from domain.enums import ReservationStatus, LifecycleEvent
from domain.errors import InvalidTransitionError

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[Tuple[ReservationStatus, LifecycleEvent], ReservationStatus] = {
    (ReservationStatus.CREATED, LifecycleEvent.CONFIRM): ReservationStatus.CONFIRMED,
    (ReservationStatus.CREATED, LifecycleEvent.CANCEL): ReservationStatus.CANCELLED,
    (ReservationStatus.CONFIRMED, LifecycleEvent.CANCEL): ReservationStatus.CANCELLED,
    (ReservationStatus.CONFIRMED, LifecycleEvent.COMPLETE): ReservationStatus.COMPLETED,
}


def next_status(current: ReservationStatus, event: LifecycleEvent) -> ReservationStatus:
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(current, event) from None


def can_apply(current: ReservationStatus, event: LifecycleEvent) -> bool:
    return (current, event) in TRANSITIONS


class BookingLifecycle:
    """Applies lifecycle events to a reservation in place"""

    def apply(self, reservation: Reservation, event: LifecycleEvent) -> Reservation:
        new_status = next_status(reservation.status, event)
        previous = reservation.status
        reservation.status = new_status
        reservation.touch()
        logger.info(
            "reservation %s: %s -> %s",
            reservation.reservation_id, previous.value, new_status.value
        )
        return reservation

    def confirm(self, reservation: Reservation) -> Reservation:
        return self.apply(reservation, LifecycleEvent.CONFIRM)

    def cancel(self, reservation: Reservation) -> Reservation:
        """Cancelled reservations stop holding the room"""
        return self.apply(reservation, LifecycleEvent.CANCEL)

    def complete(self, reservation: Reservation) -> Reservation:
        return self.apply(reservation, LifecycleEvent.COMPLETE)

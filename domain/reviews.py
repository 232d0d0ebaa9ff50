"""Review eligibility gate"""
from uuid import UUID

from domain.entities import Reservation


def can_review(requester_id: UUID, reservation: Reservation, already_reviewed: bool) -> bool:
    """Owner only, at most once per reservation.

    Lifecycle state is not consulted: a cancelled or unconfirmed
    stay may still be reviewed by its owner.
    """
    return reservation.belongs_to(requester_id) and not already_reviewed

"""Room availability decisions.

Pure functions over a snapshot of reservations: no storage access, no side
effects, same answer for the same inputs. Callers supply the active
reservations for the room (see ReservationRepository.find_active_by_room).
"""
from typing import Iterable, List, Optional

from domain.entities import Reservation
from domain.value_objects import DateRange


def find_conflicts(
    room_id: str,
    candidate: DateRange,
    active_reservations: Iterable[Reservation]
) -> List[Reservation]:
    """Active reservations on room_id whose stay overlaps candidate"""
    return [
        r for r in active_reservations
        if r.room_id == room_id and r.is_active() and r.date_range.overlaps(candidate)
    ]


def first_conflict(
    room_id: str,
    candidate: DateRange,
    active_reservations: Iterable[Reservation]
) -> Optional[Reservation]:
    conflicts = find_conflicts(room_id, candidate, active_reservations)
    if not conflicts:
        return None
    return min(conflicts, key=lambda r: r.date_range.check_in)


def is_available(
    room_id: str,
    candidate: DateRange,
    active_reservations: Iterable[Reservation]
) -> bool:
    """True iff candidate overlaps none of the room's active reservations"""
    return not find_conflicts(room_id, candidate, active_reservations)

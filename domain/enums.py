"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class LifecycleEvent(str, Enum):
    CONFIRM = "CONFIRM"
    CANCEL = "CANCEL"
    COMPLETE = "COMPLETE"


class ReservationErrorCode(str, Enum):
    # Validation
    PAST_CHECK_IN = "PAST_CHECK_IN"
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_GUEST_COUNT = "INVALID_GUEST_COUNT"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    REQUESTER_NOT_FOUND = "REQUESTER_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    NOT_RESERVATION_OWNER = "NOT_RESERVATION_OWNER"
    INVALID_RATING = "INVALID_RATING"
    # Conflict
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"
    # Lifecycle
    INVALID_TRANSITION = "INVALID_TRANSITION"
    # Transient
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"


# States that hold the room for overlap checks
ACTIVE_STATUSES = frozenset({ReservationStatus.CREATED, ReservationStatus.CONFIRMED})

"""Domain Errors"""
from typing import Optional

from domain.enums import ReservationErrorCode, ReservationStatus, LifecycleEvent


class ReservationError(Exception):
    """Base class for every failure the booking core reports"""

    retryable = False

    def __init__(self, code: ReservationErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or code.value
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message})"


class ValidationError(ReservationError):
    """Caller-supplied input is structurally invalid"""


class ConflictError(ReservationError):
    """The request collides with existing state (e.g. an active reservation)"""


class InvalidTransitionError(ReservationError):
    """Lifecycle event not permitted from the current state"""

    def __init__(self, current: ReservationStatus, event: LifecycleEvent):
        self.current = current
        self.event = event
        super().__init__(
            ReservationErrorCode.INVALID_TRANSITION,
            f"Cannot {event.value.lower()} reservation with status {current.value}"
        )


class StorageUnavailableError(ReservationError):
    """Transient storage fault; carries no business-rule outcome"""

    retryable = True

    def __init__(self, message: str = "Reservation storage is unavailable"):
        super().__init__(ReservationErrorCode.STORAGE_UNAVAILABLE, message)


class LockTimeoutError(ReservationError):
    """Gave up waiting for a per-room or per-reservation lock"""

    retryable = True

    def __init__(self, key: object, timeout: float):
        self.key = key
        self.timeout = timeout
        super().__init__(
            ReservationErrorCode.LOCK_TIMEOUT,
            f"Timed out after {timeout}s waiting for lock on {key}"
        )

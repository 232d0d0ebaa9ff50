"""Application Services - Booking use cases

Commands (reserve, confirm, cancel, complete, create_review) return a Result
and never raise ReservationError to the caller. Queries return plain values
and raise only StorageUnavailableError once storage retries are exhausted.
"""
import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, List, Optional, TypeVar
from uuid import UUID

from domain.availability import first_conflict
from domain.entities import Reservation, Review, Room
from domain.enums import LifecycleEvent, ReservationErrorCode, ReservationStatus
from domain.errors import (
    ReservationError, ValidationError, ConflictError, InvalidTransitionError,
    StorageUnavailableError
)
from domain.lifecycle import BookingLifecycle
from domain.repositories import (
    ReservationRepository, RoomRepository, UserRepository, ReviewRepository
)
from domain.results import Result
from domain.reviews import can_review
from domain.value_objects import DateRange
from infrastructure.locks import KeyedLock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageRetryPolicy:
    """Re-run a whole operation on transient storage faults, with backoff"""

    def __init__(self, attempts: int = 3, backoff_seconds: float = 0.05):
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds

    async def run(self, operation: Callable[[], Awaitable[T]], description: str) -> T:
        for attempt in range(1, self.attempts + 1):
            try:
                return await operation()
            except StorageUnavailableError as e:
                if attempt == self.attempts:
                    logger.error("%s failed after %d attempts: %s", description, attempt, e.message)
                    raise
                logger.warning(
                    "%s hit a storage fault (attempt %d/%d): %s",
                    description, attempt, self.attempts, e.message
                )
                await asyncio.sleep(self.backoff_seconds * 2 ** (attempt - 1))


class ReservationCoordinator:
    """Check availability and reserve as one atomic unit per room"""

    def __init__(self,
                 repository: ReservationRepository,
                 rooms: RoomRepository,
                 users: UserRepository,
                 room_locks: KeyedLock,
                 retry_policy: Optional[StorageRetryPolicy] = None,
                 currency: str = "USD",
                 today: Callable[[], date] = date.today):
        self.repository = repository
        self.rooms = rooms
        self.users = users
        self.room_locks = room_locks
        self.retry_policy = retry_policy or StorageRetryPolicy()
        self.currency = currency
        self.today = today

    async def reserve(
        self,
        room_id: str,
        requester_id: UUID,
        date_range: DateRange,
        guests: int,
        special_requests: Optional[str] = None
    ) -> Result[Reservation]:
        """Reserve room_id for date_range on behalf of requester_id"""
        try:
            self._validate_request(date_range, guests)
            room = await self._resolve_room(room_id)
            await self._resolve_requester(requester_id)
            if guests > room.capacity:
                raise ValidationError(
                    ReservationErrorCode.INVALID_GUEST_COUNT,
                    f"Room {room_id} sleeps at most {room.capacity} guests"
                )

            reservation = await self.retry_policy.run(
                lambda: self._reserve_locked(room, requester_id, date_range, guests, special_requests),
                f"reserve room {room_id}"
            )
            return Result.success(reservation)
        except ReservationError as e:
            return Result.failure(e)

    async def _reserve_locked(
        self,
        room: Room,
        requester_id: UUID,
        date_range: DateRange,
        guests: int,
        special_requests: Optional[str]
    ) -> Reservation:
        async with self.room_locks.hold(room.room_id):
            active = await self.repository.find_active_by_room(room.room_id)
            conflict = first_conflict(room.room_id, date_range, active)
            if conflict is not None:
                logger.info(
                    "room %s unavailable for %s: overlaps reservation %s %s",
                    room.room_id, date_range, conflict.reservation_id, conflict.date_range
                )
                raise ConflictError(
                    ReservationErrorCode.ROOM_UNAVAILABLE,
                    "Room is not available for the selected dates"
                )

            reservation = Reservation.create(
                room=room,
                requester_id=requester_id,
                date_range=date_range,
                guests=guests,
                currency=self.currency,
                special_requests=special_requests
            )
            await self.repository.add(reservation)

        logger.info(
            "reservation %s committed: room %s %s for %s",
            reservation.reservation_id, room.room_id, date_range, requester_id
        )
        return reservation

    def _validate_request(self, date_range: DateRange, guests: int) -> None:
        """Input checks that need no storage access"""
        if not date_range.is_valid():
            raise ValidationError(
                ReservationErrorCode.INVALID_RANGE,
                "Check-out date must be after check-in date"
            )
        if date_range.check_in < self.today():
            raise ValidationError(
                ReservationErrorCode.PAST_CHECK_IN,
                "Check-in date cannot be in the past"
            )
        if guests < 1:
            raise ValidationError(
                ReservationErrorCode.INVALID_GUEST_COUNT,
                "At least 1 guest is required"
            )

    async def _resolve_room(self, room_id: str) -> Room:
        room = await self.rooms.find_by_id(room_id)
        if room is None or not room.bookable:
            raise ValidationError(ReservationErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found")
        return room

    async def _resolve_requester(self, requester_id: UUID) -> None:
        user = await self.users.find_by_id(requester_id)
        if user is None or user.disabled:
            raise ValidationError(
                ReservationErrorCode.REQUESTER_NOT_FOUND,
                f"Requester {requester_id} not found"
            )

    # ==================== QUERIES ====================
    async def get_active_reservations(self, room_id: str) -> List[Reservation]:
        """Reservations currently holding the room, earliest first"""
        active = await self.retry_policy.run(
            lambda: self.repository.find_active_by_room(room_id),
            f"list active reservations for room {room_id}"
        )
        return sorted(active, key=lambda r: r.date_range.check_in)

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.retry_policy.run(
            lambda: self.repository.find_by_id(reservation_id),
            f"load reservation {reservation_id}"
        )

    async def get_reservations_by_requester(self, requester_id: UUID) -> List[Reservation]:
        """Requester's reservations, newest first"""
        reservations = await self.retry_policy.run(
            lambda: self.repository.find_by_requester(requester_id),
            f"list reservations for {requester_id}"
        )
        return sorted(reservations, key=lambda r: r.created_at, reverse=True)


class BookingLifecycleService:
    """Confirm, cancel and complete existing reservations"""

    def __init__(self,
                 repository: ReservationRepository,
                 reservation_locks: KeyedLock,
                 retry_policy: Optional[StorageRetryPolicy] = None,
                 lifecycle: Optional[BookingLifecycle] = None):
        self.repository = repository
        self.reservation_locks = reservation_locks
        self.retry_policy = retry_policy or StorageRetryPolicy()
        self.lifecycle = lifecycle or BookingLifecycle()

    async def confirm(self, reservation_id: UUID) -> Result[Reservation]:
        return await self._transition(reservation_id, LifecycleEvent.CONFIRM)

    async def cancel(self, reservation_id: UUID) -> Result[Reservation]:
        """Cancel and release the room for future reservations"""
        return await self._transition(reservation_id, LifecycleEvent.CANCEL)

    async def complete(self, reservation_id: UUID) -> Result[Reservation]:
        return await self._transition(reservation_id, LifecycleEvent.COMPLETE)

    async def complete_finished_stays(self, today: Optional[date] = None) -> Result[List[Reservation]]:
        """Complete every confirmed reservation whose check-out is on or before today"""
        today = today or date.today()
        try:
            reservations = await self.retry_policy.run(
                self.repository.find_all, "scan reservations for completion"
            )
        except ReservationError as e:
            return Result.failure(e)

        completed = []
        for reservation in reservations:
            if reservation.status != ReservationStatus.CONFIRMED:
                continue
            if reservation.date_range.check_out > today:
                continue
            result = await self.complete(reservation.reservation_id)
            if result.ok:
                completed.append(result.value)
            elif result.error.retryable:
                return Result.failure(result.error)
        return Result.success(completed)

    async def _transition(self, reservation_id: UUID, event: LifecycleEvent) -> Result[Reservation]:
        try:
            reservation = await self.retry_policy.run(
                lambda: self._transition_locked(reservation_id, event),
                f"{event.value.lower()} reservation {reservation_id}"
            )
            return Result.success(reservation)
        except InvalidTransitionError as e:
            logger.info("rejected %s on reservation %s: %s", event.value, reservation_id, e.message)
            return Result.failure(e)
        except ReservationError as e:
            return Result.failure(e)

    async def _transition_locked(self, reservation_id: UUID, event: LifecycleEvent) -> Reservation:
        async with self.reservation_locks.hold(reservation_id):
            reservation = await self.repository.find_by_id(reservation_id)
            if reservation is None:
                raise ValidationError(
                    ReservationErrorCode.RESERVATION_NOT_FOUND,
                    f"Reservation {reservation_id} not found"
                )
            self.lifecycle.apply(reservation, event)
            return await self.repository.update(reservation)


class ReviewService:
    """Review eligibility and creation"""

    def __init__(self,
                 reservations: ReservationRepository,
                 reviews: ReviewRepository,
                 reservation_locks: KeyedLock,
                 retry_policy: Optional[StorageRetryPolicy] = None):
        self.reservations = reservations
        self.reviews = reviews
        self.reservation_locks = reservation_locks
        self.retry_policy = retry_policy or StorageRetryPolicy()

    async def can_review(self, requester_id: UUID, reservation_id: UUID) -> bool:
        """False for unknown reservations"""
        return await self.retry_policy.run(
            lambda: self._can_review(requester_id, reservation_id),
            f"check review eligibility for {reservation_id}"
        )

    async def _can_review(self, requester_id: UUID, reservation_id: UUID) -> bool:
        reservation = await self.reservations.find_by_id(reservation_id)
        if reservation is None:
            return False
        already_reviewed = await self.reviews.exists_for_reservation(reservation_id)
        return can_review(requester_id, reservation, already_reviewed)

    async def create_review(
        self,
        requester_id: UUID,
        reservation_id: UUID,
        rating: int,
        comment: str = ""
    ) -> Result[Review]:
        try:
            if not 1 <= rating <= 5:
                raise ValidationError(ReservationErrorCode.INVALID_RATING, "Rating must be between 1 and 5")
            review = await self.retry_policy.run(
                lambda: self._create_review_locked(requester_id, reservation_id, rating, comment),
                f"review reservation {reservation_id}"
            )
            return Result.success(review)
        except ReservationError as e:
            return Result.failure(e)

    async def _create_review_locked(
        self,
        requester_id: UUID,
        reservation_id: UUID,
        rating: int,
        comment: str
    ) -> Review:
        async with self.reservation_locks.hold(reservation_id):
            reservation = await self.reservations.find_by_id(reservation_id)
            if reservation is None:
                raise ValidationError(
                    ReservationErrorCode.RESERVATION_NOT_FOUND,
                    f"Reservation {reservation_id} not found"
                )
            if not reservation.belongs_to(requester_id):
                raise ValidationError(
                    ReservationErrorCode.NOT_RESERVATION_OWNER,
                    "Only the guest who made the reservation can review it"
                )
            already_reviewed = await self.reviews.exists_for_reservation(reservation_id)
            if not can_review(requester_id, reservation, already_reviewed):
                raise ConflictError(
                    ReservationErrorCode.ALREADY_REVIEWED,
                    "You have already reviewed this booking"
                )

            review = Review(
                reservation_id=reservation_id,
                requester_id=requester_id,
                room_id=reservation.room_id,
                rating=rating,
                comment=comment
            )
            await self.reviews.add(review)

        logger.info("review %s created for reservation %s", review.review_id, reservation_id)
        return review

    async def get_review(self, reservation_id: UUID) -> Optional[Review]:
        return await self.retry_policy.run(
            lambda: self.reviews.find_by_reservation(reservation_id),
            f"load review for {reservation_id}"
        )

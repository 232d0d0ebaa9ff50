"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional
from decimal import Decimal

from domain.enums import ReservationStatus, ReservationErrorCode, ACTIVE_STATUSES
from domain.errors import ValidationError
from domain.value_objects import DateRange, Money


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Room(BaseModel):
    """Bookable room as seen by the booking core (catalog owns the rest)"""
    room_id: str
    hotel_id: str
    nightly_rate: Decimal = Field(ge=0)
    capacity: int = Field(ge=1, default=2)
    bookable: bool = True

    class Config:
        from_attributes = True


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # References to other contexts (by identifier only)
    room_id: str
    requester_id: UUID

    # Value Objects
    date_range: DateRange
    guests: int = Field(ge=1)
    total_price: Money
    special_requests: Optional[str] = None

    status: ReservationStatus = ReservationStatus.CREATED

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room: Room,
        requester_id: UUID,
        date_range: DateRange,
        guests: int,
        currency: str = "USD",
        special_requests: Optional[str] = None
    ) -> "Reservation":
        """Create a new reservation in CREATED state"""
        if not date_range.is_valid():
            raise ValidationError(
                ReservationErrorCode.INVALID_RANGE,
                "Check-out date must be after check-in date"
            )

        total_price = Money(
            amount=room.nightly_rate * date_range.nights(),
            currency=currency
        )

        return Reservation(
            room_id=room.room_id,
            requester_id=requester_id,
            date_range=date_range,
            guests=guests,
            total_price=total_price,
            special_requests=special_requests,
            status=ReservationStatus.CREATED
        )

    # ==================== QUERY METHODS ====================
    def is_active(self) -> bool:
        """Active reservations hold the room"""
        return self.status in ACTIVE_STATUSES

    def is_terminal(self) -> bool:
        return self.status in (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED)

    def belongs_to(self, requester_id: UUID) -> bool:
        return self.requester_id == requester_id

    def get_nights(self) -> int:
        """Get number of nights"""
        return self.date_range.nights()

    def touch(self) -> None:
        """Record a state change"""
        self.modified_at = _utcnow()
        self.version += 1


class Review(BaseModel):
    """Guest review attached to exactly one reservation"""
    review_id: UUID = Field(default_factory=uuid4)
    reservation_id: UUID
    requester_id: UUID
    room_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True

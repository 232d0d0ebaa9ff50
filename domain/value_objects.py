"""Domain Value Objects"""
from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal


class DateRange(BaseModel):
    """Half-open stay interval: check_in inclusive, check_out exclusive.

    Ordering is not enforced on construction; the coordinator rejects
    inverted or empty ranges with INVALID_RANGE so that the rejection is
    reported as a typed result instead of a parse failure.
    """
    check_in: date
    check_out: date

    def is_valid(self) -> bool:
        """Check-in strictly before check-out"""
        return self.check_in < self.check_out

    def overlaps(self, other: "DateRange") -> bool:
        """Shared boundary (back-to-back stays) is not an overlap"""
        return self.check_in < other.check_out and other.check_in < self.check_out

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    def __str__(self) -> str:
        return f"[{self.check_in.isoformat()}, {self.check_out.isoformat()})"

    class Config:
        frozen = True


class Money(BaseModel):
    """Value Object for monetary amounts"""
    amount: Decimal = Field(ge=0)
    currency: str = "USD"

    class Config:
        frozen = True

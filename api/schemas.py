"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Optional


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    room_id: str
    check_in: date
    check_out: date
    guests: int = 1
    special_requests: Optional[str] = None


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    room_id: str
    requester_id: UUID
    check_in: date
    check_out: date
    nights: int
    guests: int
    total_price: Decimal
    currency: str
    special_requests: Optional[str] = None
    status: str
    created_at: datetime
    modified_at: datetime
    version: int


class ErrorResponse(BaseModel):
    """Error body for every rejected booking command"""
    code: str
    message: str
    retryable: bool = False


# ============================================================================
# REVIEW SCHEMAS
# ============================================================================

class CreateReviewRequest(BaseModel):
    """Create review request DTO"""
    rating: int = Field(ge=1, le=5)
    comment: str = ""


class ReviewResponse(BaseModel):
    """Review response DTO"""
    review_id: UUID
    reservation_id: UUID
    requester_id: UUID
    room_id: str
    rating: int
    comment: str
    created_at: datetime


class ReviewEligibilityResponse(BaseModel):
    reservation_id: UUID
    can_review: bool


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    disabled: bool

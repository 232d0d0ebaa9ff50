from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from uuid import UUID
from decimal import Decimal
from typing import List

from api.schemas import (
    # Reservation
    CreateReservationRequest, ReservationResponse, ErrorResponse,
    # Review
    CreateReviewRequest, ReviewResponse, ReviewEligibilityResponse,
    # Auth
    Token, UserResponse
)
from api.dependencies import get_current_active_user, get_user_repository
from application.services import (
    ReservationCoordinator, BookingLifecycleService, ReviewService, StorageRetryPolicy
)
from domain.auth import User
from domain.entities import Room
from domain.enums import ReservationStatus, ReservationErrorCode
from domain.errors import ReservationError, ConflictError, InvalidTransitionError
from domain.repositories import UserRepository
from domain.value_objects import DateRange
from infrastructure.locks import KeyedLock
from infrastructure.logging_config import setup_logging
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomRepository, InMemoryReviewRepository
)
from infrastructure.security import verify_password, create_access_token
from infrastructure.settings import get_settings

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(
    title="Hotel Booking API",
    description="Room reservations with per-room conflict resolution",
    version="1.0.0"
)

# Demo catalog; room CRUD lives outside the booking service
_seed_rooms = [
    Room(room_id="101", hotel_id="grand-plaza", nightly_rate=Decimal("100.00"), capacity=2),
    Room(room_id="102", hotel_id="grand-plaza", nightly_rate=Decimal("150.00"), capacity=4),
    Room(room_id="201", hotel_id="seaside-inn", nightly_rate=Decimal("80.00"), capacity=2),
]

# Initialize repositories
reservation_repo = InMemoryReservationRepository()
room_repo = InMemoryRoomRepository(_seed_rooms)
review_repo = InMemoryReviewRepository()

room_locks = KeyedLock("room", timeout=settings.lock_timeout_seconds)
reservation_locks = KeyedLock("reservation", timeout=settings.lock_timeout_seconds)
retry_policy = StorageRetryPolicy(
    attempts=settings.storage_retry_attempts,
    backoff_seconds=settings.storage_retry_backoff_seconds
)


# Dependency injection
def get_reservation_coordinator(
    users: UserRepository = Depends(get_user_repository)
) -> ReservationCoordinator:
    return ReservationCoordinator(
        reservation_repo, room_repo, users, room_locks,
        retry_policy=retry_policy, currency=settings.currency
    )

def get_lifecycle_service() -> BookingLifecycleService:
    return BookingLifecycleService(reservation_repo, reservation_locks, retry_policy=retry_policy)

def get_review_service() -> ReviewService:
    return ReviewService(reservation_repo, review_repo, reservation_locks, retry_policy=retry_policy)


# ============================================================================
# ERROR MAPPING
# ============================================================================

_NOT_FOUND_CODES = {ReservationErrorCode.RESERVATION_NOT_FOUND}
_FORBIDDEN_CODES = {ReservationErrorCode.NOT_RESERVATION_OWNER}


def _status_for(error: ReservationError) -> int:
    if error.retryable:
        return 503
    if isinstance(error, (ConflictError, InvalidTransitionError)):
        return 409
    if error.code in _NOT_FOUND_CODES:
        return 404
    if error.code in _FORBIDDEN_CODES:
        return 403
    return 400


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    body = ErrorResponse(code=exc.code.value, message=exc.message, retryable=exc.retryable)
    return JSONResponse(status_code=_status_for(exc), content=body.model_dump())


# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.name for item in ReservationStatus],
        "description": "Reservation status values: CREATED, CONFIRMED, CANCELLED, COMPLETED"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UserRepository = Depends(get_user_repository)
):
    user = await users.find_by_username(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    coordinator: ReservationCoordinator = Depends(get_reservation_coordinator),
    current_user: User = Depends(get_current_active_user)
):
    """Reserve a room for the authenticated user"""
    result = await coordinator.reserve(
        room_id=request.room_id,
        requester_id=current_user.user_id,
        date_range=DateRange(check_in=request.check_in, check_out=request.check_out),
        guests=request.guests,
        special_requests=request.special_requests
    )
    return _reservation_to_response(result.unwrap())

@app.get("/api/reservations/me", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_my_reservations(
    coordinator: ReservationCoordinator = Depends(get_reservation_coordinator),
    current_user: User = Depends(get_current_active_user)
):
    """Get the authenticated user's reservations, newest first"""
    reservations = await coordinator.get_reservations_by_requester(current_user.user_id)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    coordinator: ReservationCoordinator = Depends(get_reservation_coordinator),
    current_user: User = Depends(get_current_active_user)
):
    """Get reservation by ID"""
    reservation = await coordinator.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.get("/api/rooms/{room_id}/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_active_room_reservations(
    room_id: str,
    coordinator: ReservationCoordinator = Depends(get_reservation_coordinator),
    current_user: User = Depends(get_current_active_user)
):
    """Reservations currently holding the room"""
    reservations = await coordinator.get_active_reservations(room_id)
    return [_reservation_to_response(r) for r in reservations]

@app.post("/api/reservations/{reservation_id}/confirm", response_model=ReservationResponse, tags=["Reservations"])
async def confirm_reservation(
    reservation_id: UUID,
    service: BookingLifecycleService = Depends(get_lifecycle_service),
    current_user: User = Depends(get_current_active_user)
):
    """Confirm a newly created reservation"""
    result = await service.confirm(reservation_id)
    return _reservation_to_response(result.unwrap())

@app.post("/api/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    service: BookingLifecycleService = Depends(get_lifecycle_service),
    current_user: User = Depends(get_current_active_user)
):
    """Cancel reservation and release the room"""
    result = await service.cancel(reservation_id)
    return _reservation_to_response(result.unwrap())

@app.post("/api/reservations/{reservation_id}/complete", response_model=ReservationResponse, tags=["Reservations"])
async def complete_reservation(
    reservation_id: UUID,
    service: BookingLifecycleService = Depends(get_lifecycle_service),
    current_user: User = Depends(get_current_active_user)
):
    """Mark a confirmed stay as completed"""
    result = await service.complete(reservation_id)
    return _reservation_to_response(result.unwrap())

@app.post("/api/maintenance/complete-finished-stays", response_model=List[ReservationResponse], tags=["Reservations"])
async def complete_finished_stays(
    service: BookingLifecycleService = Depends(get_lifecycle_service),
    current_user: User = Depends(get_current_active_user)
):
    """Complete every confirmed stay whose check-out date has passed"""
    result = await service.complete_finished_stays()
    return [_reservation_to_response(r) for r in result.unwrap()]

# ============================================================================
# REVIEW ENDPOINTS
# ============================================================================

@app.get("/api/reservations/{reservation_id}/review-eligibility", response_model=ReviewEligibilityResponse, tags=["Reviews"])
async def get_review_eligibility(
    reservation_id: UUID,
    service: ReviewService = Depends(get_review_service),
    current_user: User = Depends(get_current_active_user)
):
    """Whether the authenticated user may review this reservation"""
    allowed = await service.can_review(current_user.user_id, reservation_id)
    return ReviewEligibilityResponse(reservation_id=reservation_id, can_review=allowed)

@app.post("/api/reservations/{reservation_id}/review", response_model=ReviewResponse, status_code=201, tags=["Reviews"])
async def create_review(
    reservation_id: UUID,
    request: CreateReviewRequest,
    service: ReviewService = Depends(get_review_service),
    current_user: User = Depends(get_current_active_user)
):
    """Review a reservation (owner only, once)"""
    result = await service.create_review(
        requester_id=current_user.user_id,
        reservation_id=reservation_id,
        rating=request.rating,
        comment=request.comment
    )
    return _review_to_response(result.unwrap())

@app.get("/api/reservations/{reservation_id}/review", response_model=ReviewResponse, tags=["Reviews"])
async def get_review(
    reservation_id: UUID,
    service: ReviewService = Depends(get_review_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get the review attached to a reservation"""
    review = await service.get_review(reservation_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return _review_to_response(review)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        room_id=reservation.room_id,
        requester_id=reservation.requester_id,
        check_in=reservation.date_range.check_in,
        check_out=reservation.date_range.check_out,
        nights=reservation.get_nights(),
        guests=reservation.guests,
        total_price=reservation.total_price.amount,
        currency=reservation.total_price.currency,
        special_requests=reservation.special_requests,
        status=reservation.status.value,
        created_at=reservation.created_at,
        modified_at=reservation.modified_at,
        version=reservation.version
    )

def _review_to_response(review) -> ReviewResponse:
    """Convert Review entity to ReviewResponse"""
    return ReviewResponse(
        review_id=review.review_id,
        reservation_id=review.reservation_id,
        requester_id=review.requester_id,
        room_id=review.room_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at
    )

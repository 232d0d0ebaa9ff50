"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict, Iterable
from uuid import UUID

from domain.auth import UserInDB
from domain.entities import Reservation, Review, Room
from domain.repositories import (
    ReservationRepository, RoomRepository, UserRepository, ReviewRepository
)


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository.

    Rows are stored and handed out as deep copies so that no caller can
    change stored state except through update().
    """

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}

    async def add(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        if reservation.reservation_id in self._storage:
            raise ValueError("Reservation already exists")
        self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        stored = self._storage.get(reservation_id)
        return stored.model_copy(deep=True) if stored else None

    async def find_active_by_room(self, room_id: str) -> List[Reservation]:
        return [
            r.model_copy(deep=True) for r in self._storage.values()
            if r.room_id == room_id and r.is_active()
        ]

    async def find_by_requester(self, requester_id: UUID) -> List[Reservation]:
        """Find reservations by requester ID"""
        return [
            r.model_copy(deep=True) for r in self._storage.values()
            if r.requester_id == requester_id
        ]

    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        return [r.model_copy(deep=True) for r in self._storage.values()]

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id in self._storage:
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
            return reservation
        raise ValueError("Reservation not found")


class InMemoryRoomRepository(RoomRepository):
    """In-memory room catalog"""

    def __init__(self, rooms: Iterable[Room] = ()):
        self._storage: Dict[str, Room] = {room.room_id: room for room in rooms}

    def add(self, room: Room) -> Room:
        self._storage[room.room_id] = room
        return room

    async def find_by_id(self, room_id: str) -> Optional[Room]:
        return self._storage.get(room_id)


class InMemoryUserRepository(UserRepository):
    """In-memory user directory"""

    def __init__(self, users: Iterable[UserInDB] = ()):
        self._storage: Dict[UUID, UserInDB] = {user.user_id: user for user in users}

    def add(self, user: UserInDB) -> UserInDB:
        self._storage[user.user_id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> Optional[UserInDB]:
        return self._storage.get(user_id)

    async def find_by_username(self, username: str) -> Optional[UserInDB]:
        for user in self._storage.values():
            if user.username == username:
                return user
        return None


class InMemoryReviewRepository(ReviewRepository):
    """In-memory implementation of ReviewRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Review] = {}

    async def add(self, review: Review) -> Review:
        if review.reservation_id in self._storage:
            raise ValueError("Reservation already reviewed")
        self._storage[review.reservation_id] = review
        return review

    async def find_by_reservation(self, reservation_id: UUID) -> Optional[Review]:
        return self._storage.get(reservation_id)

    async def exists_for_reservation(self, reservation_id: UUID) -> bool:
        return reservation_id in self._storage

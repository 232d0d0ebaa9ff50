"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID

from domain.auth import UserInDB
from domain.entities import Reservation, Review, Room


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate.

    Implementations raise StorageUnavailableError for transient faults.
    Returned reservations are detached copies; changes persist only via update.
    """

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_active_by_room(self, room_id: str) -> List[Reservation]:
        """Reservations on a room that still hold it (CREATED or CONFIRMED)"""
        pass

    @abstractmethod
    async def find_by_requester(self, requester_id: UUID) -> List[Reservation]:
        """Find reservations made by a requester"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Persist a state change on an existing reservation"""
        pass


class RoomRepository(ABC):
    """Read-only view of the room catalog"""

    @abstractmethod
    async def find_by_id(self, room_id: str) -> Optional[Room]:
        pass


class UserRepository(ABC):
    """Read-only view of registered users"""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[UserInDB]:
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[UserInDB]:
        pass


class ReviewRepository(ABC):
    """Repository interface for reviews"""

    @abstractmethod
    async def add(self, review: Review) -> Review:
        pass

    @abstractmethod
    async def find_by_reservation(self, reservation_id: UUID) -> Optional[Review]:
        pass

    @abstractmethod
    async def exists_for_reservation(self, reservation_id: UUID) -> bool:
        pass

"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import ContextManager, Optional, List
from uuid import UUID

from domain.entities import Room, Reservation


class RoomRepository(ABC):
    """Repository interface for the Room catalog"""

    @abstractmethod
    def save(self, room: Room) -> Room:
        """Save a new room"""
        pass

    @abstractmethod
    def find_by_id(self, room_id: str) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    def find_all(self) -> List[Room]:
        """Find all rooms, ordered by ID"""
        pass

    @abstractmethod
    def update(self, room: Room) -> Room:
        """Update an existing room"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate

    Implementations own their concurrency discipline: records handed out are
    snapshots, and ``room_lock`` serializes read-check-write sequences for a
    single room.
    """

    @abstractmethod
    def save(self, reservation: Reservation) -> Reservation:
        """Save a new reservation"""
        pass

    @abstractmethod
    def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    def find_by_room(self, room_id: str) -> List[Reservation]:
        """Find reservations held against a room"""
        pass

    @abstractmethod
    def find_by_customer_email(self, email: str) -> List[Reservation]:
        """Find reservations by customer email, case-insensitive"""
        pass

    @abstractmethod
    def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        pass

    @abstractmethod
    def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    def room_lock(self, room_id: str) -> ContextManager[None]:
        """Exclusive lock scoping a read-check-write on one room"""
        pass

"""In-Memory Repository Implementations"""
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional
from uuid import UUID

from domain.repositories import RoomRepository, ReservationRepository
from domain.entities import Room, Reservation
from domain.exceptions import StorageError


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[str, Room] = {}
        self._lock = threading.RLock()

    def save(self, room: Room) -> Room:
        """Save room to memory"""
        with self._lock:
            if room.room_id in self._storage:
                raise StorageError(f"Room already stored: {room.room_id}")
            self._storage[room.room_id] = room.model_copy(deep=True)
        return room

    def find_by_id(self, room_id: str) -> Optional[Room]:
        """Find room by ID"""
        with self._lock:
            room = self._storage.get(room_id)
            return room.model_copy(deep=True) if room else None

    def find_all(self) -> List[Room]:
        """Find all rooms, ordered by ID"""
        with self._lock:
            return [
                self._storage[room_id].model_copy(deep=True)
                for room_id in sorted(self._storage)
            ]

    def update(self, room: Room) -> Room:
        """Update room"""
        with self._lock:
            if room.room_id not in self._storage:
                raise StorageError(f"Room not stored: {room.room_id}")
            self._storage[room.room_id] = room.model_copy(deep=True)
        return room


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository

    ``_guard`` protects the dictionaries so readers always see whole records.
    Per-room locks serialize the lifecycle service's read-check-write
    sequences without blocking other rooms.
    """

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}
        self._by_room: Dict[str, List[UUID]] = defaultdict(list)
        self._guard = threading.RLock()
        self._room_locks: Dict[str, threading.RLock] = {}

    def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        with self._guard:
            if reservation.reservation_id in self._storage:
                raise StorageError(f"Reservation already stored: {reservation.reservation_id}")
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
            self._by_room[reservation.room_id].append(reservation.reservation_id)
        return reservation

    def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        with self._guard:
            reservation = self._storage.get(reservation_id)
            return reservation.model_copy(deep=True) if reservation else None

    def find_by_room(self, room_id: str) -> List[Reservation]:
        """Find reservations for a room via the room index"""
        with self._guard:
            return [
                self._storage[reservation_id].model_copy(deep=True)
                for reservation_id in self._by_room.get(room_id, [])
            ]

    def find_by_customer_email(self, email: str) -> List[Reservation]:
        """Find reservations by customer email"""
        with self._guard:
            return [
                r.model_copy(deep=True) for r in self._storage.values()
                if r.customer.matches_email(email)
            ]

    def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        with self._guard:
            return [r.model_copy(deep=True) for r in self._storage.values()]

    def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        with self._guard:
            existing = self._storage.get(reservation.reservation_id)
            if existing is None:
                raise StorageError(f"Reservation not stored: {reservation.reservation_id}")
            if existing.room_id != reservation.room_id:
                self._by_room[existing.room_id].remove(reservation.reservation_id)
                self._by_room[reservation.room_id].append(reservation.reservation_id)
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    @contextmanager
    def room_lock(self, room_id: str) -> Iterator[None]:
        """Hold the room's lock for the duration of the block"""
        with self._guard:
            lock = self._room_locks.setdefault(room_id, threading.RLock())
        with lock:
            yield

"""Domain Entities - Aggregates"""
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from datetime import datetime
from typing import Optional, Set, Iterable
from decimal import Decimal

from domain.enums import ReservationStatus, RoomType
from domain.exceptions import AlreadyTerminal, MutationNotAllowed, TooLateToCancel
from domain.value_objects import CustomerInfo, Money, TimeWindow, utc_now


class Room(BaseModel):
    """Room Aggregate Root Entity - a bookable resource"""

    # Identity
    room_id: str = Field(min_length=1, max_length=64)

    # Descriptive
    name: str = Field(min_length=2, max_length=100)
    room_type: RoomType
    amenities: Set[str] = Field(default_factory=set, max_length=10)

    # Capacity & pricing
    capacity: int = Field(ge=1, le=100)
    price_per_hour: Decimal = Field(ge=0)

    # Status
    is_active: bool = True

    # Metadata
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)
    version: int = 1

    model_config = ConfigDict(from_attributes=True)

    # ==================== MODIFICATION METHODS ====================
    def apply_changes(
        self,
        name: Optional[str] = None,
        capacity: Optional[int] = None,
        price_per_hour: Optional[Decimal] = None,
        amenities: Optional[Iterable[str]] = None,
        room_type: Optional[RoomType] = None
    ) -> None:
        """Apply an administrative update; values are validated by the caller"""
        if name is not None:
            self.name = name
        if capacity is not None:
            self.capacity = capacity
        if price_per_hour is not None:
            self.price_per_hour = price_per_hour
        if amenities is not None:
            self.amenities = set(amenities)
        if room_type is not None:
            self.room_type = room_type
        self._touch()

    def deactivate(self) -> None:
        self.is_active = False
        self._touch()

    def activate(self) -> None:
        self.is_active = True
        self._touch()

    # ==================== QUERY METHODS ====================
    def can_accommodate(self, party_size: int) -> bool:
        return party_size <= self.capacity

    def calculate_cost(self, hours: int) -> Decimal:
        return self.price_per_hour * hours

    def has_amenities(self, required: Iterable[str]) -> bool:
        return set(required) <= self.amenities

    def _touch(self) -> None:
        self.modified_at = utc_now()
        self.version += 1


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # Reference to the catalog
    room_id: str

    # Value Objects
    customer: CustomerInfo
    window: TimeWindow
    total_cost: Money

    party_size: int = Field(ge=1)
    notes: Optional[str] = Field(default=None, max_length=500)

    # Status
    status: ReservationStatus = ReservationStatus.CONFIRMED

    # Metadata
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)
    version: int = 1

    model_config = ConfigDict(from_attributes=True)

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_id: str,
        customer: CustomerInfo,
        window: TimeWindow,
        party_size: int,
        total_cost: Money,
        notes: Optional[str] = None,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
        created_at: Optional[datetime] = None
    ) -> "Reservation":
        """Create new reservation; business rules are checked by the lifecycle service"""
        if status.is_terminal:
            raise ValueError(f"Cannot create reservation in {status.value} status")

        created_at = created_at or utc_now()
        return Reservation(
            room_id=room_id,
            customer=customer,
            window=window,
            party_size=party_size,
            total_cost=total_cost,
            notes=notes,
            status=status,
            created_at=created_at,
            modified_at=created_at
        )

    # ==================== MODIFICATION METHODS ====================
    def modify(
        self,
        now: datetime,
        new_window: Optional[TimeWindow] = None,
        new_cost: Optional[Money] = None,
        new_party_size: Optional[int] = None,
        new_customer: Optional[CustomerInfo] = None,
        new_notes: Optional[str] = None
    ) -> None:
        """Modify reservation details; capacity and conflicts are checked by the caller"""
        self.ensure_mutable(now)

        if new_window is not None:
            if new_cost is None:
                raise ValueError("A new window requires a new price")
            self.window = new_window
            self.total_cost = new_cost

        if new_party_size is not None:
            if new_party_size < 1:
                raise ValueError("Party size must be at least 1")
            self.party_size = new_party_size

        if new_customer is not None:
            self.customer = new_customer

        if new_notes is not None:
            self.notes = new_notes

        self._touch(now)

    # ==================== STATE TRANSITION METHODS ====================
    def confirm(self, now: datetime) -> None:
        """Promote a pending reservation"""
        if self.status != ReservationStatus.PENDING:
            raise MutationNotAllowed(
                self.reservation_id, f"cannot confirm reservation with status {self.status.value}"
            )
        self.status = ReservationStatus.CONFIRMED
        self._touch(now)

    def cancel(self, now: datetime) -> None:
        if self.status.is_terminal:
            raise AlreadyTerminal(self.reservation_id, self.status.value)
        if now >= self.window.start:
            raise TooLateToCancel(self.reservation_id, self.window.start)

        self.status = ReservationStatus.CANCELLED
        self._touch(now)

    def refresh_status(self, now: datetime) -> bool:
        """Mark as completed once the window has elapsed; returns True if changed"""
        if self.status.is_terminal or now < self.window.end:
            return False

        self.status = ReservationStatus.COMPLETED
        self._touch(now)
        return True

    # ==================== QUERY METHODS ====================
    def blocks_slot(self, now: Optional[datetime] = None) -> bool:
        """Whether this reservation takes part in conflict checks

        Terminal reservations never do. When ``now`` is given, a reservation
        whose window has elapsed is treated as completed even if the status
        has not been refreshed yet.
        """
        if self.status.is_terminal:
            return False
        return now is None or now < self.window.end

    def is_active(self, now: datetime) -> bool:
        """Whether the room was held at ``now``; completed stays true for past instants"""
        return self.status != ReservationStatus.CANCELLED and self.window.contains(now)

    def is_upcoming(self, now: datetime) -> bool:
        return self.blocks_slot() and self.window.start > now

    # ==================== VALIDATION METHODS ====================
    def ensure_mutable(self, now: datetime) -> None:
        if self.status.is_terminal:
            raise MutationNotAllowed(self.reservation_id, f"reservation is {self.status.value}")
        if now >= self.window.start:
            raise MutationNotAllowed(self.reservation_id, "reservation has already started")

    def _touch(self, now: datetime) -> None:
        self.modified_at = now
        self.version += 1

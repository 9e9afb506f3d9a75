"""Domain Services - pure scheduling and pricing rules"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID

from domain.entities import Reservation, Room
from domain.repositories import ReservationRepository
from domain.value_objects import Money, TimeWindow

_CENTS = Decimal("0.01")


def overlaps(a: TimeWindow, b: TimeWindow) -> bool:
    """Half-open overlap test: touching endpoints never conflict."""
    return a.start < b.end and b.start < a.end


class ConflictDetector:
    """Decides whether a candidate window collides with live reservations on a room"""

    def __init__(self, repository: ReservationRepository):
        self.repository = repository

    def find_conflicts(
        self,
        room_id: str,
        window: TimeWindow,
        exclude_reservation_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> List[Reservation]:
        """Live reservations on the room overlapping the window, in start order"""
        conflicts = [
            r for r in self.repository.find_by_room(room_id)
            if r.blocks_slot(now)
            and r.reservation_id != exclude_reservation_id
            and overlaps(r.window, window)
        ]
        return sorted(conflicts, key=lambda r: r.window.start)

    def has_conflict(
        self,
        room_id: str,
        window: TimeWindow,
        exclude_reservation_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> bool:
        return bool(self.find_conflicts(room_id, window, exclude_reservation_id, now))


class PricingCalculator:
    """Prices a window on a room: billable hours (partial hours round up) x hourly rate"""

    def __init__(self, currency: str = "USD"):
        self.currency = currency

    def price(self, room: Room, window: TimeWindow) -> Money:
        amount = room.calculate_cost(window.billable_hours())
        return Money(amount=amount.quantize(_CENTS, rounding=ROUND_HALF_UP), currency=self.currency)

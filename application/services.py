"""Application Services - Business use cases"""
from uuid import UUID
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import ValidationError

from application.schemas import (
    AvailabilitySearchRequest, CreateReservationRequest, CreateRoomRequest,
    RoomSearchRequest, UpdateReservationRequest, UpdateRoomRequest, validation_details
)
from domain.entities import Reservation, Room
from domain.enums import ReservationStatus, RoomType
from domain.exceptions import (
    CapacityExceeded, InvalidRequest, InvalidWindow, ReservationNotFound,
    ResourceInactive, ResourceNotFound, SlotConflict
)
from domain.repositories import ReservationRepository, RoomRepository
from domain.services import ConflictDetector, PricingCalculator
from domain.value_objects import CustomerInfo, TimeWindow, utc_now
from infrastructure.config import Settings, get_settings
from infrastructure.logging_config import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def build_window(start: datetime, end: datetime, now: datetime) -> TimeWindow:
    """Build a bookable window: start before end and not entirely in the past"""
    try:
        window = TimeWindow(start=start, end=end)
    except ValidationError as e:
        raise InvalidWindow("End must be after start", start=start, end=end) from e

    if window.is_in_past(now):
        raise InvalidWindow("Window is entirely in the past", start=window.start, end=window.end)
    return window


def build_customer(name: str, email: str) -> CustomerInfo:
    try:
        return CustomerInfo(name=name, email=email)
    except ValidationError as e:
        raise InvalidRequest("Invalid customer details", details=validation_details(e)) from e


class RoomCatalogService:
    """Service for the room catalog: lookups and administrative changes"""

    def __init__(self, repository: RoomRepository):
        self.repository = repository

    def create_room(self, request: CreateRoomRequest) -> Room:
        """Register a new room"""
        if self.repository.find_by_id(request.room_id) is not None:
            raise InvalidRequest(
                f"Room already exists: {request.room_id}",
                details={"room_id": request.room_id}
            )

        room = Room(
            room_id=request.room_id,
            name=request.name,
            room_type=request.room_type,
            capacity=request.capacity,
            price_per_hour=request.price_per_hour,
            amenities=set(request.amenities)
        )
        self.repository.save(room)
        logger.info("room_created", room_id=room.room_id, room_type=room.room_type.value,
                    capacity=room.capacity, price_per_hour=str(room.price_per_hour))
        return room

    def get_room(self, room_id: str) -> Room:
        room = self.repository.find_by_id(room_id)
        if room is None:
            raise ResourceNotFound(room_id)
        return room

    def list_rooms(self, active_only: bool = True) -> List[Room]:
        rooms = self.repository.find_all()
        if active_only:
            return [r for r in rooms if r.is_active]
        return rooms

    def find_by_capacity_at_least(self, min_capacity: int) -> List[Room]:
        """Active rooms that seat at least ``min_capacity`` people"""
        return [r for r in self.list_rooms(active_only=True) if r.capacity >= min_capacity]

    def get_rooms_by_type(self, room_type: RoomType) -> List[Room]:
        return [r for r in self.list_rooms(active_only=True) if r.room_type == room_type]

    def search_rooms(self, request: RoomSearchRequest) -> List[Room]:
        """Filter active rooms by type, minimum capacity and maximum hourly price"""
        return [
            r for r in self.list_rooms(active_only=True)
            if (request.room_type is None or r.room_type == request.room_type)
            and (request.min_capacity is None or r.capacity >= request.min_capacity)
            and (request.max_price_per_hour is None or r.price_per_hour <= request.max_price_per_hour)
        ]

    def update_room(self, room_id: str, request: UpdateRoomRequest) -> Room:
        """Apply a partial update. Existing reservations keep their price snapshot."""
        room = self.get_room(room_id)
        room.apply_changes(
            name=request.name,
            capacity=request.capacity,
            price_per_hour=request.price_per_hour,
            amenities=request.amenities,
            room_type=request.room_type
        )
        self.repository.update(room)
        logger.info("room_updated", room_id=room_id, version=room.version)
        return room

    def deactivate_room(self, room_id: str) -> Room:
        room = self.get_room(room_id)
        room.deactivate()
        self.repository.update(room)
        logger.info("room_deactivated", room_id=room_id)
        return room

    def activate_room(self, room_id: str) -> Room:
        room = self.get_room(room_id)
        room.activate()
        self.repository.update(room)
        logger.info("room_activated", room_id=room_id)
        return room

    def seed_sample_rooms(self) -> List[Room]:
        """Load the sample catalog, skipping rooms that already exist"""
        created = []
        for data in SAMPLE_ROOMS:
            if self.repository.find_by_id(data["room_id"]) is None:
                created.append(self.create_room(CreateRoomRequest(**data)))
        return created


SAMPLE_ROOMS = [
    {"room_id": "conference-a", "name": "Conference Room A", "room_type": RoomType.CONFERENCE,
     "capacity": 12, "price_per_hour": Decimal("25.00"),
     "amenities": ["Projector", "Whiteboard", "Video Conferencing"]},
    {"room_id": "meeting-b", "name": "Meeting Room B", "room_type": RoomType.MEETING,
     "capacity": 6, "price_per_hour": Decimal("15.00"),
     "amenities": ["TV Screen", "Whiteboard"]},
    {"room_id": "training-c", "name": "Training Room C", "room_type": RoomType.TRAINING,
     "capacity": 20, "price_per_hour": Decimal("30.00"),
     "amenities": ["Projector", "Audio System", "Flipchart"]},
    {"room_id": "board-room", "name": "Board Room", "room_type": RoomType.BOARDROOM,
     "capacity": 8, "price_per_hour": Decimal("50.00"),
     "amenities": ["Conference Table", "Projector", "Video Conferencing", "Catering Setup"]},
    {"room_id": "phone-booth-1", "name": "Phone Booth 1", "room_type": RoomType.PHONE_BOOTH,
     "capacity": 1, "price_per_hour": Decimal("5.00"),
     "amenities": ["Soundproof", "Phone"]},
]


class AvailabilityService:
    """Service for read-only availability queries"""

    def __init__(self,
                 room_repository: RoomRepository,
                 conflict_detector: ConflictDetector,
                 clock: Clock = utc_now):
        self.room_repository = room_repository
        self.conflict_detector = conflict_detector
        self.clock = clock

    def find_available(
        self,
        start: datetime,
        end: datetime,
        party_size: int = 1,
        room_type: Optional[RoomType] = None
    ) -> List[Room]:
        """Rooms free for the whole window, cheapest first, ties broken by room id"""
        if party_size < 1:
            raise InvalidRequest("Party size must be at least 1", details={"party_size": party_size})

        now = self.clock()
        window = build_window(start, end, now)

        candidates = [
            room for room in self.room_repository.find_all()
            if room.is_active
            and (room_type is None or room.room_type == room_type)
            and room.can_accommodate(party_size)
        ]
        available = [
            room for room in candidates
            if not self.conflict_detector.has_conflict(room.room_id, window, now=now)
        ]
        available.sort(key=lambda room: (room.price_per_hour, room.room_id))

        logger.debug("availability_search", start=window.start.isoformat(), end=window.end.isoformat(),
                     party_size=party_size, room_type=room_type.value if room_type else None,
                     candidates=len(candidates), matches=len(available))
        return available

    def search(self, request: AvailabilitySearchRequest) -> List[Room]:
        return self.find_available(request.start, request.end, request.party_size, request.room_type)

    def is_room_available(self, room_id: str, start: datetime, end: datetime, party_size: int = 1) -> bool:
        """Check one room for a window; unknown rooms raise ResourceNotFound"""
        if party_size < 1:
            raise InvalidRequest("Party size must be at least 1", details={"party_size": party_size})

        room = self.room_repository.find_by_id(room_id)
        if room is None:
            raise ResourceNotFound(room_id)

        now = self.clock()
        window = build_window(start, end, now)
        if not room.is_active or not room.can_accommodate(party_size):
            return False
        return not self.conflict_detector.has_conflict(room_id, window, now=now)


class ReservationService:
    """Service for Reservation business use cases

    Every read-check-write runs under the repository's lock for the room
    involved, so two overlapping bookings on one room cannot both pass the
    conflict check.
    """

    def __init__(self,
                 room_repository: RoomRepository,
                 repository: ReservationRepository,
                 conflict_detector: Optional[ConflictDetector] = None,
                 pricing: Optional[PricingCalculator] = None,
                 settings: Optional[Settings] = None,
                 clock: Clock = utc_now):
        self.room_repository = room_repository
        self.repository = repository
        self.settings = settings or get_settings()
        self.conflict_detector = conflict_detector or ConflictDetector(repository)
        self.pricing = pricing or PricingCalculator(currency=self.settings.currency)
        self.clock = clock

    # ==================== COMMANDS ====================
    def create_reservation(self, request: CreateReservationRequest) -> Reservation:
        """Create a reservation; checks run in a fixed order, each with its own error"""
        now = self.clock()
        customer = build_customer(request.customer_name, request.customer_email)
        with self.repository.room_lock(request.room_id):
            room = self._get_bookable_room(request.room_id)
            self._check_capacity(room, request.party_size)
            window = build_window(request.start, request.end, now)
            self._check_conflicts(room.room_id, window, now)
            total_cost = self.pricing.price(room, window)

            reservation = Reservation.create(
                room_id=room.room_id,
                customer=customer,
                window=window,
                party_size=request.party_size,
                total_cost=total_cost,
                notes=request.notes,
                status=self.settings.initial_status,
                created_at=now
            )
            self.repository.save(reservation)

        logger.info("reservation_created", reservation_id=str(reservation.reservation_id),
                    room_id=room.room_id, start=window.start.isoformat(), end=window.end.isoformat(),
                    party_size=reservation.party_size, total_cost=str(total_cost.amount),
                    status=reservation.status.value)
        return reservation

    def update_reservation(self, reservation_id: UUID, request: UpdateReservationRequest) -> Reservation:
        """Modify a reservation that is still live and has not started"""
        now = self.clock()
        room_id = self.get_reservation(reservation_id).room_id

        with self.repository.room_lock(room_id):
            reservation = self._find(reservation_id)
            reservation.ensure_mutable(now)
            room = self.room_repository.find_by_id(room_id)
            if room is None:
                raise ResourceNotFound(room_id)

            new_party_size = None
            if request.party_size is not None and request.party_size != reservation.party_size:
                new_party_size = request.party_size

            if new_party_size is not None or request.changes_window():
                self._check_capacity(room, new_party_size or reservation.party_size)

            new_window = new_cost = None
            if request.changes_window():
                window = build_window(
                    request.start or reservation.window.start,
                    request.end or reservation.window.end,
                    now
                )
                if window != reservation.window:
                    new_window = window

            if new_window is not None:
                if not room.is_active:
                    raise ResourceInactive(room_id)
                self._check_conflicts(room_id, new_window, now, exclude_reservation_id=reservation_id)
                new_cost = self.pricing.price(room, new_window)

            new_customer = None
            if request.changes_customer():
                new_customer = build_customer(
                    request.customer_name or reservation.customer.name,
                    request.customer_email or reservation.customer.email
                )

            reservation.modify(
                now,
                new_window=new_window,
                new_cost=new_cost,
                new_party_size=new_party_size,
                new_customer=new_customer,
                new_notes=request.notes
            )
            self.repository.update(reservation)

        logger.info("reservation_updated", reservation_id=str(reservation_id), room_id=room_id,
                    rescheduled=new_window is not None, version=reservation.version)
        return reservation

    def cancel_reservation(self, reservation_id: UUID) -> bool:
        """Cancel a reservation that has not started yet"""
        now = self.clock()
        room_id = self._find(reservation_id).room_id

        with self.repository.room_lock(room_id):
            reservation = self._find(reservation_id)
            reservation.cancel(now)
            self.repository.update(reservation)

        logger.info("reservation_cancelled", reservation_id=str(reservation_id), room_id=room_id)
        return True

    def confirm_reservation(self, reservation_id: UUID) -> Reservation:
        """Promote a PENDING reservation to CONFIRMED"""
        now = self.clock()
        room_id = self.get_reservation(reservation_id).room_id

        with self.repository.room_lock(room_id):
            reservation = self._find(reservation_id)
            reservation.confirm(now)
            self.repository.update(reservation)

        logger.info("reservation_confirmed", reservation_id=str(reservation_id), room_id=room_id)
        return reservation

    def complete_elapsed(self) -> int:
        """Sweep: mark every elapsed live reservation COMPLETED; returns how many changed"""
        now = self.clock()
        completed = 0
        for reservation in self.repository.find_all():
            if reservation.blocks_slot() and not reservation.blocks_slot(now):
                if self._complete(reservation.reservation_id, reservation.room_id, now):
                    completed += 1
        if completed:
            logger.info("reservations_completed", count=completed)
        return completed

    # ==================== QUERIES ====================
    def get_reservation(self, reservation_id: UUID) -> Reservation:
        return self._refresh([self._find(reservation_id)])[0]

    def list_all(self) -> List[Reservation]:
        return self._sorted(self._refresh(self.repository.find_all()))

    def list_for_room(self, room_id: str) -> List[Reservation]:
        if self.room_repository.find_by_id(room_id) is None:
            raise ResourceNotFound(room_id)
        return self._sorted(self._refresh(self.repository.find_by_room(room_id)))

    def list_for_customer(self, email: str) -> List[Reservation]:
        return self._sorted(self._refresh(self.repository.find_by_customer_email(email)))

    def list_upcoming(self, within_days: Optional[int] = None) -> List[Reservation]:
        """Live reservations starting after now and within the horizon"""
        if within_days is None:
            within_days = self.settings.default_upcoming_days
        if within_days < 0:
            raise InvalidRequest("within_days must not be negative", details={"within_days": within_days})

        now = self.clock()
        horizon = now + timedelta(days=within_days)
        return [
            r for r in self.list_all()
            if r.is_upcoming(now) and r.window.start <= horizon
        ]

    def list_active(self, now: Optional[datetime] = None) -> List[Reservation]:
        """Reservations holding their room at ``now``, which may lie in the past"""
        now = now or self.clock()
        return [r for r in self.list_all() if r.is_active(now)]

    def occupancy_rate(self, room_id: Optional[str] = None, window_days: int = 7) -> float:
        """Fraction of bookable hours reserved over the last ``window_days``

        Counts non-cancelled reservations starting inside the lookback window.
        The denominator is ``bookable_hours_per_day`` (24 unless configured)
        times the number of days, per room: one room when ``room_id`` is given,
        every room in the catalog otherwise.
        """
        if window_days < 1:
            raise InvalidRequest("window_days must be at least 1", details={"window_days": window_days})

        if room_id is not None:
            if self.room_repository.find_by_id(room_id) is None:
                raise ResourceNotFound(room_id)
            reservations = self.repository.find_by_room(room_id)
            room_count = 1
        else:
            reservations = self.repository.find_all()
            room_count = len(self.room_repository.find_all())

        bookable_hours = self.settings.bookable_hours_per_day * window_days * room_count
        if bookable_hours == 0:
            return 0.0

        now = self.clock()
        lookback_start = now - timedelta(days=window_days)
        booked_hours = sum(
            r.window.hours() for r in reservations
            if r.status != ReservationStatus.CANCELLED
            and lookback_start <= r.window.start <= now
        )
        return max(0.0, min(1.0, booked_hours / bookable_hours))

    # ==================== HELPERS ====================
    def _find(self, reservation_id: UUID) -> Reservation:
        reservation = self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFound(reservation_id)
        return reservation

    def _get_bookable_room(self, room_id: str) -> Room:
        room = self.room_repository.find_by_id(room_id)
        if room is None:
            raise ResourceNotFound(room_id)
        if not room.is_active:
            raise ResourceInactive(room_id)
        return room

    def _check_capacity(self, room: Room, party_size: int) -> None:
        if not room.can_accommodate(party_size):
            raise CapacityExceeded(room.room_id, party_size, room.capacity)

    def _check_conflicts(
        self,
        room_id: str,
        window: TimeWindow,
        now: datetime,
        exclude_reservation_id: Optional[UUID] = None
    ) -> None:
        conflicts = self.conflict_detector.find_conflicts(
            room_id, window, exclude_reservation_id=exclude_reservation_id, now=now
        )
        if conflicts:
            conflicting_ids = [c.reservation_id for c in conflicts]
            logger.info("reservation_conflict", room_id=room_id, start=window.start.isoformat(),
                        end=window.end.isoformat(), conflicting=[str(c) for c in conflicting_ids])
            raise SlotConflict(room_id, conflicting_ids)

    def _complete(self, reservation_id: UUID, room_id: str, now: datetime) -> Optional[Reservation]:
        """Persist lazy completion under the room lock; returns the record if it changed"""
        with self.repository.room_lock(room_id):
            current = self.repository.find_by_id(reservation_id)
            if current is not None and current.refresh_status(now):
                self.repository.update(current)
                logger.debug("reservation_completed", reservation_id=str(reservation_id), room_id=room_id)
                return current
        return None

    def _refresh(self, reservations: List[Reservation]) -> List[Reservation]:
        """Apply lazy completion to records read from the store"""
        now = self.clock()
        refreshed = []
        for reservation in reservations:
            if reservation.blocks_slot() and not reservation.blocks_slot(now):
                reservation = self._complete(reservation.reservation_id, reservation.room_id, now) \
                    or self._find(reservation.reservation_id)
            refreshed.append(reservation)
        return refreshed

    @staticmethod
    def _sorted(reservations: List[Reservation]) -> List[Reservation]:
        return sorted(reservations, key=lambda r: (r.window.start, str(r.reservation_id)))

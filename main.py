"""Composition root - wires repositories, domain services and use cases"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from application.schemas import AvailabilitySearchRequest, CreateReservationRequest, build_request
from application.services import (
    AvailabilityService, Clock, ReservationService, RoomCatalogService
)
from domain.exceptions import BookingError
from domain.services import ConflictDetector, PricingCalculator
from domain.value_objects import utc_now
from infrastructure.config import Settings, get_settings
from infrastructure.logging_config import configure_logging, get_logger
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomRepository
)

logger = get_logger(__name__)


@dataclass
class BookingSystem:
    """The wired engine: one catalog, one availability search, one lifecycle manager"""
    settings: Settings
    catalog: RoomCatalogService
    availability: AvailabilityService
    reservations: ReservationService


def build_booking_system(settings: Optional[Settings] = None, clock: Clock = utc_now) -> BookingSystem:
    settings = settings or get_settings()

    room_repo = InMemoryRoomRepository()
    reservation_repo = InMemoryReservationRepository()
    conflict_detector = ConflictDetector(reservation_repo)

    catalog = RoomCatalogService(room_repo)
    availability = AvailabilityService(room_repo, conflict_detector, clock=clock)
    reservations = ReservationService(
        room_repo,
        reservation_repo,
        conflict_detector=conflict_detector,
        pricing=PricingCalculator(currency=settings.currency),
        settings=settings,
        clock=clock
    )

    if settings.seed_sample_rooms:
        catalog.seed_sample_rooms()

    logger.info("booking_system_ready", app=settings.app_name, version=settings.app_version,
                environment=settings.environment, rooms=len(catalog.list_rooms(active_only=False)))
    return BookingSystem(settings=settings, catalog=catalog, availability=availability, reservations=reservations)


def setup_logging(settings: Settings):
    """Configure logging from settings; production always renders JSON"""
    return configure_logging(settings.log_level, json_logs=settings.json_logs or settings.is_production)


def run_demo(system: BookingSystem) -> None:
    """Book a room, collide with the booking, then search the following slot"""
    if not system.catalog.list_rooms():
        system.catalog.seed_sample_rooms()

    start = (utc_now() + timedelta(days=1)).replace(hour=9, minute=0, second=0, microsecond=0)
    booking = system.reservations.create_reservation(build_request(CreateReservationRequest, {
        "room_id": "conference-a",
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "start": start,
        "end": start + timedelta(hours=2),
        "party_size": 4,
    }))
    logger.info("demo_booked", reservation_id=str(booking.reservation_id),
                total_cost=str(booking.total_cost.amount), status=booking.status.value)

    try:
        system.reservations.create_reservation(build_request(CreateReservationRequest, {
            "room_id": "conference-a",
            "customer_name": "Alan Turing",
            "customer_email": "alan@example.com",
            "start": start + timedelta(hours=1),
            "end": start + timedelta(hours=3),
            "party_size": 2,
        }))
    except BookingError as e:
        logger.info("demo_rejected", **e.to_dict())

    search = AvailabilitySearchRequest(start=start + timedelta(hours=2), end=start + timedelta(hours=4), party_size=2)
    rooms = system.availability.search(search)
    logger.info("demo_available", rooms=[r.room_id for r in rooms])


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings)
    run_demo(build_booking_system(settings))

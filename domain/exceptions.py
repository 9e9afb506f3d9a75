"""
Domain exceptions for the booking engine

Every expected, recoverable outcome of a booking call is raised as a
BookingError subclass carrying a stable error code. Storage faults raise
StorageError, which is not a BookingError.
"""
from datetime import datetime
from typing import Any, Optional


class BookingError(Exception):
    """Base exception for all booking-related errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for callers that serialize errors"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class StorageError(Exception):
    """Underlying store failed; not an expected booking outcome"""
    pass


# ============================================================
# Catalog Exceptions
# ============================================================

class ResourceNotFound(BookingError):
    """Room not found in the catalog"""

    def __init__(self, room_id: str):
        super().__init__(
            message=f"Room not found: {room_id}",
            error_code="RESOURCE_NOT_FOUND",
            details={"room_id": room_id}
        )
        self.room_id = room_id


class ResourceInactive(BookingError):
    """Room exists but has been deactivated"""

    def __init__(self, room_id: str):
        super().__init__(
            message=f"Room is not active: {room_id}",
            error_code="RESOURCE_INACTIVE",
            details={"room_id": room_id}
        )
        self.room_id = room_id


class CapacityExceeded(BookingError):
    """Party does not fit in the room"""

    def __init__(self, room_id: str, party_size: int, capacity: int):
        super().__init__(
            message=f"Room {room_id} cannot accommodate {party_size} guests (capacity {capacity})",
            error_code="CAPACITY_EXCEEDED",
            details={"room_id": room_id, "party_size": party_size, "capacity": capacity}
        )
        self.party_size = party_size
        self.capacity = capacity


# ============================================================
# Request Exceptions
# ============================================================

class InvalidRequest(BookingError):
    """Request failed validation"""

    def __init__(self, message: str, details: Optional[dict] = None, error_code: str = "INVALID_REQUEST"):
        super().__init__(message=message, error_code=error_code, details=details)


class InvalidWindow(InvalidRequest):
    """Time window is empty, inverted or entirely in the past"""

    def __init__(self, message: str, start: Any = None, end: Any = None):
        super().__init__(
            message=message,
            error_code="INVALID_WINDOW",
            details={
                "start": start.isoformat() if isinstance(start, datetime) else start,
                "end": end.isoformat() if isinstance(end, datetime) else end
            }
        )


class SlotConflict(BookingError):
    """Window overlaps an existing reservation on the same room"""

    def __init__(self, room_id: str, conflicting_ids: Optional[list] = None):
        conflicting_ids = [str(c) for c in (conflicting_ids or [])]
        super().__init__(
            message=f"Room {room_id} is not available for the specified time",
            error_code="SLOT_CONFLICT",
            details={"room_id": room_id, "conflicting_reservations": conflicting_ids}
        )
        self.room_id = room_id
        self.conflicting_ids = conflicting_ids


# ============================================================
# Reservation Lifecycle Exceptions
# ============================================================

class ReservationNotFound(BookingError):
    """Reservation not found"""

    def __init__(self, reservation_id: Any):
        super().__init__(
            message=f"Reservation not found: {reservation_id}",
            error_code="RESERVATION_NOT_FOUND",
            details={"reservation_id": str(reservation_id)}
        )
        self.reservation_id = reservation_id


class MutationNotAllowed(BookingError):
    """Reservation is terminal or has already started"""

    def __init__(self, reservation_id: Any, reason: str):
        super().__init__(
            message=f"Cannot modify reservation {reservation_id}: {reason}",
            error_code="MUTATION_NOT_ALLOWED",
            details={"reservation_id": str(reservation_id), "reason": reason}
        )


class AlreadyTerminal(BookingError):
    """Reservation is already cancelled or completed"""

    def __init__(self, reservation_id: Any, status: str):
        super().__init__(
            message=f"Reservation {reservation_id} is already {status}",
            error_code="ALREADY_TERMINAL",
            details={"reservation_id": str(reservation_id), "status": status}
        )
        self.status = status


class TooLateToCancel(BookingError):
    """Reservation has already started"""

    def __init__(self, reservation_id: Any, start: datetime):
        super().__init__(
            message=f"Reservation {reservation_id} started at {start.isoformat()} and can no longer be cancelled",
            error_code="TOO_LATE_TO_CANCEL",
            details={"reservation_id": str(reservation_id), "start": start.isoformat()}
        )

"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED)


class RoomType(str, Enum):
    CONFERENCE = "CONFERENCE"
    MEETING = "MEETING"
    TRAINING = "TRAINING"
    BOARDROOM = "BOARDROOM"
    PHONE_BOOTH = "PHONE_BOOTH"

    @property
    def display_name(self) -> str:
        return _ROOM_TYPE_DISPLAY_NAMES[self]


_ROOM_TYPE_DISPLAY_NAMES = {
    RoomType.CONFERENCE: "Conference Room",
    RoomType.MEETING: "Meeting Room",
    RoomType.TRAINING: "Training Room",
    RoomType.BOARDROOM: "Board Room",
    RoomType.PHONE_BOOTH: "Phone Booth",
}

"""Domain Value Objects"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from datetime import datetime, timedelta, timezone
from decimal import Decimal


def utc_now() -> datetime:
    """Current time as naive UTC, the representation used for all timestamps"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimeWindow(BaseModel):
    """Value Object for a half-open time interval [start, end)"""
    start: datetime
    end: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator('start', 'end')
    def to_naive_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is not None and v.utcoffset() is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode='after')
    def end_after_start(self) -> "TimeWindow":
        if self.end <= self.start:
            raise ValueError('End must be after start')
        return self

    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_minutes(self) -> int:
        return int(self.duration() // timedelta(minutes=1))

    def hours(self) -> float:
        """Exact length in hours, used for occupancy statistics"""
        return self.duration() / timedelta(hours=1)

    def billable_hours(self) -> int:
        """Length in whole hours; any partial hour counts as a full one"""
        hours, remainder = divmod(self.duration(), timedelta(hours=1))
        return hours + (1 if remainder else 0)

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def is_in_past(self, now: datetime) -> bool:
        """True when the whole window has already elapsed"""
        return self.end <= now


class Money(BaseModel):
    """Value Object for monetary amounts"""
    amount: Decimal = Field(ge=0)
    currency: str = "USD"

    model_config = ConfigDict(frozen=True)


class CustomerInfo(BaseModel):
    """Value Object for the person holding a reservation"""
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    def matches_email(self, email: str) -> bool:
        return self.email.lower() == email.strip().lower()

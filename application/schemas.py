"""Application Schemas - Request DTOs consumed by the services"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Type, TypeVar

from domain.enums import RoomType
from domain.exceptions import InvalidRequest

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validation_details(error: ValidationError) -> dict:
    return {
        "errors": [
            {"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]}
            for err in error.errors()
        ]
    }


def build_request(schema: Type[SchemaT], data: Mapping[str, Any]) -> SchemaT:
    """Validate raw request data, reporting failures as InvalidRequest"""
    try:
        return schema.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidRequest(f"Invalid {schema.__name__}", details=validation_details(e)) from e


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    room_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=2, max_length=100)
    room_type: RoomType
    capacity: int = Field(ge=1, le=100)
    price_per_hour: Decimal = Field(ge=0)
    amenities: List[str] = Field(default_factory=list, max_length=10)


class UpdateRoomRequest(BaseModel):
    """Update room request DTO; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    room_type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, ge=1, le=100)
    price_per_hour: Optional[Decimal] = Field(None, ge=0)
    amenities: Optional[List[str]] = Field(None, max_length=10)


class RoomSearchRequest(BaseModel):
    """Catalog search request DTO"""
    room_type: Optional[RoomType] = None
    min_capacity: Optional[int] = Field(None, ge=1)
    max_price_per_hour: Optional[Decimal] = Field(None, ge=0)


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Create reservation request DTO

    Window ordering is not checked here; the lifecycle service validates it
    after the room and capacity checks.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    room_id: str
    customer_name: str = Field(min_length=2, max_length=100)
    customer_email: EmailStr
    start: datetime
    end: datetime
    party_size: int = Field(ge=1)
    notes: Optional[str] = Field(None, max_length=500)


class UpdateReservationRequest(BaseModel):
    """Update reservation request DTO; omitted fields are left unchanged"""
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: Optional[str] = Field(None, min_length=2, max_length=100)
    customer_email: Optional[EmailStr] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    party_size: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=500)

    def changes_window(self) -> bool:
        return self.start is not None or self.end is not None

    def changes_customer(self) -> bool:
        return self.customer_name is not None or self.customer_email is not None


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class AvailabilitySearchRequest(BaseModel):
    """Availability search request DTO"""
    start: datetime
    end: datetime
    party_size: int = Field(ge=1, default=1)
    room_type: Optional[RoomType] = None

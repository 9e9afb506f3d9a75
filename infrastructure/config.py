"""
Centralized configuration using Pydantic Settings

Values come from BOOKING_* environment variables or a .env file.
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.enums import ReservationStatus


class Settings(BaseSettings):
    """Booking engine settings with environment variable support and validation"""

    # ========================================================================
    # Application
    # ========================================================================
    app_name: str = Field(default="Room Booking Engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="development, staging, production")

    # ========================================================================
    # Logging
    # ========================================================================
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # ========================================================================
    # Booking rules
    # ========================================================================
    currency: str = Field(default="USD", min_length=3, max_length=3, description="Currency for computed prices")
    initial_status: ReservationStatus = Field(
        default=ReservationStatus.CONFIRMED,
        description="Status given to newly created reservations"
    )
    bookable_hours_per_day: int = Field(
        default=24,
        ge=1,
        le=24,
        description="Bookable hours per day used as the occupancy denominator"
    )
    default_upcoming_days: int = Field(default=7, ge=1, description="Horizon for upcoming reservation listings")
    seed_sample_rooms: bool = Field(default=False, description="Load the sample room catalog at start-up")

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return v.upper()

    @field_validator("currency")
    def validate_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator("initial_status")
    def validate_initial_status(cls, v: ReservationStatus) -> ReservationStatus:
        if v.is_terminal:
            raise ValueError("initial_status must be PENDING or CONFIRMED")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()

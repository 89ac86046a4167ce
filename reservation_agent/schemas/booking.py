from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from reservation_agent.orchestrator.steps import Step

MIN_GUESTS = 1
MAX_GUESTS = 20


def clamp_guests(value: int) -> int:
    return min(MAX_GUESTS, max(MIN_GUESTS, value))


class SeatingPreference(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    NO_PREFERENCE = "no_preference"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeatherInfo(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    condition: str
    temperature: float = Field(..., description="Temperature in degrees Celsius")
    description: str
    icon: str
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None


class BookingContext(CamelModel):
    customer_name: Optional[str] = None
    number_of_guests: Optional[int] = None
    booking_date: Optional[str] = Field(default=None, description="Calendar date, YYYY-MM-DD")
    booking_time: Optional[str] = Field(default=None, description="Free text, display only")
    cuisine_preference: Optional[str] = None
    location: Optional[str] = Field(default=None, description="City used as the weather lookup key")
    special_requests: Optional[str] = None
    seating_preference: Optional[SeatingPreference] = None
    weather_info: Optional[WeatherInfo] = None
    step: Step = Step.GREETING

    @field_validator("step", mode="before")
    @classmethod
    def _normalize_step(cls, value: Any) -> Step:
        return Step.normalize(value)

    @field_validator("number_of_guests", mode="before")
    @classmethod
    def _clamp_guests(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return clamp_guests(int(value))
        except (TypeError, ValueError):
            return None

    @field_validator("seating_preference", mode="before")
    @classmethod
    def _drop_unknown_seating(cls, value: Any) -> Any:
        if value is None or isinstance(value, SeatingPreference):
            return value
        try:
            return SeatingPreference(value)
        except ValueError:
            return None

    @model_validator(mode="after")
    def _weather_requires_location_and_date(self) -> "BookingContext":
        if self.weather_info is not None and not (self.location and self.booking_date):
            self.weather_info = None
        return self

    def needs_weather(self) -> bool:
        return bool(self.location and self.booking_date) and self.weather_info is None


class InsertBooking(CamelModel):
    customer_name: str
    number_of_guests: int = Field(..., ge=MIN_GUESTS, le=MAX_GUESTS)
    booking_date: str
    booking_time: str
    cuisine_preference: str
    location: str
    special_requests: Optional[str] = None
    weather_info: Optional[WeatherInfo] = None
    seating_preference: SeatingPreference


class Booking(InsertBooking):
    booking_id: str = Field(..., pattern=r"^BK-[A-Z0-9]{8}$")
    status: BookingStatus
    created_at: str


class StatusUpdate(CamelModel):
    status: BookingStatus

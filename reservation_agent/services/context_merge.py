from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import field_validator

from reservation_agent.orchestrator.steps import Step
from reservation_agent.schemas.booking import BookingContext, CamelModel, SeatingPreference, clamp_guests

TEXT_FIELDS = (
    "customer_name",
    "booking_date",
    "booking_time",
    "cuisine_preference",
    "location",
    "special_requests",
)


class ExtractedFields(CamelModel):
    """Candidate values pulled out of one user message. Every field is optional."""

    customer_name: Optional[str] = None
    number_of_guests: Optional[int] = None
    booking_date: Optional[str] = None
    booking_time: Optional[str] = None
    cuisine_preference: Optional[str] = None
    location: Optional[str] = None
    special_requests: Optional[str] = None
    seating_preference: Optional[SeatingPreference] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        value = value.strip()
        # Models sometimes echo the placeholder instead of JSON null.
        if not value or value.lower() in {"null", "none"}:
            return None
        return value

    @field_validator("number_of_guests", mode="before")
    @classmethod
    def _integer_or_none(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("seating_preference", mode="before")
    @classmethod
    def _known_seating_or_none(cls, value: Any) -> Optional[SeatingPreference]:
        try:
            return SeatingPreference(value)
        except ValueError:
            return None


ExtractedInput = Union[ExtractedFields, Mapping[str, Any], None]


def merge_context(
    context: BookingContext,
    extracted: ExtractedInput = None,
    proposed_next_step: Optional[object] = None,
) -> BookingContext:
    """Fold extracted values into ``context`` and return a new context.

    Empty values never overwrite populated ones, guest counts are clamped to
    the bookable range, and a step outside the enumeration leaves the current
    step in place.
    """
    fields = _coerce(extracted)
    updates: Dict[str, Any] = {}

    for name in TEXT_FIELDS:
        value = getattr(fields, name)
        if value:
            updates[name] = value

    if fields.number_of_guests is not None:
        updates["number_of_guests"] = clamp_guests(fields.number_of_guests)

    if fields.seating_preference is not None:
        updates["seating_preference"] = fields.seating_preference

    step = Step.parse(proposed_next_step)
    if step is not None:
        updates["step"] = step

    return context.model_copy(update=updates)


def _coerce(extracted: ExtractedInput) -> ExtractedFields:
    if extracted is None:
        return ExtractedFields()
    if isinstance(extracted, ExtractedFields):
        return extracted
    return ExtractedFields.model_validate(dict(extracted))

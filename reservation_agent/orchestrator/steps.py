from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class Step(str, Enum):
    GREETING = "greeting"
    COLLECT_NAME = "collect_name"
    COLLECT_GUESTS = "collect_guests"
    COLLECT_DATE = "collect_date"
    COLLECT_TIME = "collect_time"
    COLLECT_CUISINE = "collect_cuisine"
    COLLECT_LOCATION = "collect_location"
    FETCH_WEATHER = "fetch_weather"
    SUGGEST_SEATING = "suggest_seating"
    COLLECT_SPECIAL_REQUESTS = "collect_special_requests"
    CONFIRM_BOOKING = "confirm_booking"
    BOOKING_COMPLETE = "booking_complete"

    @classmethod
    def parse(cls, label: object) -> Optional["Step"]:
        """Return the matching step, or ``None`` for anything outside the enumeration."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return None
        try:
            return cls(label.strip())
        except ValueError:
            return None

    @classmethod
    def normalize(cls, label: object) -> "Step":
        return cls.parse(label) or cls.GREETING

    @property
    def next(self) -> Optional["Step"]:
        return TRANSITIONS[self]

    def precedes(self, other: "Step") -> bool:
        return ORDER.index(self) < ORDER.index(other)


TRANSITIONS: Dict[Step, Optional[Step]] = {
    Step.GREETING: Step.COLLECT_NAME,
    Step.COLLECT_NAME: Step.COLLECT_GUESTS,
    Step.COLLECT_GUESTS: Step.COLLECT_DATE,
    Step.COLLECT_DATE: Step.COLLECT_TIME,
    Step.COLLECT_TIME: Step.COLLECT_CUISINE,
    Step.COLLECT_CUISINE: Step.COLLECT_LOCATION,
    Step.COLLECT_LOCATION: Step.FETCH_WEATHER,
    Step.FETCH_WEATHER: Step.SUGGEST_SEATING,
    Step.SUGGEST_SEATING: Step.COLLECT_SPECIAL_REQUESTS,
    Step.COLLECT_SPECIAL_REQUESTS: Step.CONFIRM_BOOKING,
    Step.CONFIRM_BOOKING: Step.BOOKING_COMPLETE,
    Step.BOOKING_COMPLETE: None,
}

ORDER = list(Step)

# Steps the model is allowed to propose, in prompt order.
MODEL_STEPS = [step for step in ORDER if step is not Step.GREETING]

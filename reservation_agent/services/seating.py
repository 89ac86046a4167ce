from __future__ import annotations

import math
from dataclasses import dataclass

from reservation_agent.schemas.booking import SeatingPreference

INDOOR_CONDITIONS = ("rain", "storm", "snow")
OUTDOOR_CONDITIONS = ("clear", "sunny")
HOT_ABOVE_C = 30
COLD_BELOW_C = 10


@dataclass(frozen=True)
class SeatingRecommendation:
    response: str
    preference: SeatingPreference


def _round_temperature(temperature: float) -> int:
    # Halves round up (-2.5 -> -2), not banker's rounding.
    return int(math.floor(temperature + 0.5))


def recommend_seating(condition: str, temperature: float) -> SeatingRecommendation:
    """Map a weather condition and temperature (°C) to a seating suggestion.

    Rules are checked in order and the first match wins, so precipitation
    always beats the temperature thresholds.
    """
    lowered = (condition or "").lower()
    degrees = _round_temperature(temperature)

    if any(keyword in lowered for keyword in INDOOR_CONDITIONS):
        return SeatingRecommendation(
            response=(
                f"It looks like there might be some {lowered} on your booking date. "
                "I'd recommend our cozy indoor seating area where you can enjoy your meal "
                "comfortably. Does that sound good?"
            ),
            preference=SeatingPreference.INDOOR,
        )

    if temperature > HOT_ABOVE_C:
        return SeatingRecommendation(
            response=(
                f"It's going to be quite warm at {degrees}°C on your booking date. "
                "Our air-conditioned indoor seating would be more comfortable. Would you prefer that?"
            ),
            preference=SeatingPreference.INDOOR,
        )

    if temperature < COLD_BELOW_C:
        return SeatingRecommendation(
            response=(
                f"It's going to be a bit chilly at {degrees}°C on your booking date. "
                "Our warm indoor seating would be perfect. Sound good?"
            ),
            preference=SeatingPreference.INDOOR,
        )

    if any(keyword in lowered for keyword in OUTDOOR_CONDITIONS):
        return SeatingRecommendation(
            response=(
                f"Great news! The weather looks beautiful on your booking date - {degrees}°C "
                f"and {lowered}! Would you like outdoor seating to enjoy the lovely weather?"
            ),
            preference=SeatingPreference.OUTDOOR,
        )

    return SeatingRecommendation(
        response=(
            f"The weather on your booking date looks fine - around {degrees}°C. "
            "Would you prefer indoor or outdoor seating?"
        ),
        preference=SeatingPreference.NO_PREFERENCE,
    )

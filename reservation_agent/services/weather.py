from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from reservation_agent.adapters.weather_client import OpenWeatherClient, WeatherServiceError
from reservation_agent.schemas.booking import WeatherInfo

logger = logging.getLogger(__name__)

MIDDAY_HOURS = range(12, 16)

# (condition, description, base temperature °C)
SYNTHETIC_TEMPLATES = (
    ("Clear", "Clear sky", 25),
    ("Clouds", "Partly cloudy", 22),
    ("Rain", "Light rain", 18),
    ("Sunny", "Sunny and warm", 28),
)


def capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def synthetic_weather(date_text: str) -> WeatherInfo:
    """Reproducible stand-in weather for a date string.

    The generator is seeded with the sum of the string's character codes, so
    the same date always yields the same summary across processes. This is
    for offline and demo behaviour only and carries no statistical meaning.
    """
    rng = random.Random(sum(ord(char) for char in date_text))
    condition, description, base_temperature = rng.choice(SYNTHETIC_TEMPLATES)
    return WeatherInfo(
        condition=condition,
        temperature=float(base_temperature + rng.randint(-2, 2)),
        description=description,
        icon="01d",
        humidity=float(rng.randint(50, 79)),
        wind_speed=float(rng.randint(2, 9)),
    )


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.split("T")[0].strip())
    except ValueError:
        return None


class WeatherResolver:
    """Chooses between forecast, current-weather estimate and synthetic weather."""

    def __init__(
        self,
        client: Optional[OpenWeatherClient],
        forecast_horizon_days: int = 5,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._horizon = forecast_horizon_days
        self._today = today

    def resolve(self, booking_date: str, location: str) -> Optional[WeatherInfo]:
        if self._client is None or not self._client.configured:
            logger.warning("OpenWeather API key not configured, using synthetic weather")
            return synthetic_weather(booking_date)

        target = _parse_date(booking_date)
        if target is None:
            logger.warning("Unparsable booking date, using synthetic weather", extra={"reason": booking_date})
            return synthetic_weather(booking_date)

        days_ahead = (target - self._today()).days
        if days_ahead < 0:
            return synthetic_weather(booking_date)

        try:
            if days_ahead <= self._horizon:
                return self._forecast(location, target)
            return self._estimate(location)
        except (WeatherServiceError, AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning(
                "Weather lookup failed, using synthetic weather",
                extra={"location": location, "reason": str(exc)},
            )
            return synthetic_weather(booking_date)

    def validate_location(self, location: str) -> bool:
        if self._client is None or not self._client.configured:
            return True
        try:
            return self._client.location_exists(location)
        except WeatherServiceError as exc:
            logger.warning("Location check failed", extra={"location": location, "reason": str(exc)})
            return False

    def _forecast(self, location: str, target: date) -> Optional[WeatherInfo]:
        payload = self._client.forecast(location)
        entries: List[Dict[str, Any]] = payload.get("list") or []
        if not entries:
            return None

        target_text = target.isoformat()
        same_day = [entry for entry in entries if entry["dt_txt"].split(" ")[0] == target_text]
        midday = [entry for entry in same_day if self._entry_hour(entry) in MIDDAY_HOURS]
        chosen = (midday or same_day or entries)[0]
        return self._to_weather(chosen)

    def _estimate(self, location: str) -> WeatherInfo:
        payload = self._client.current_weather(location)
        weather = self._to_weather(payload)
        return weather.model_copy(update={"description": f"{weather.description} (estimate)"})

    @staticmethod
    def _entry_hour(entry: Dict[str, Any]) -> int:
        return int(entry["dt_txt"].split(" ")[1].split(":")[0])

    @staticmethod
    def _to_weather(entry: Dict[str, Any]) -> WeatherInfo:
        summary = entry["weather"][0]
        main = entry["main"]
        wind = entry.get("wind") or {}
        return WeatherInfo(
            condition=summary["main"],
            temperature=float(main["temp"]),
            description=capitalize_words(summary["description"]),
            icon=summary["icon"],
            humidity=main.get("humidity"),
            wind_speed=wind.get("speed"),
        )

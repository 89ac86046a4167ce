from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

try:  # pragma: no cover - import guard for optional dependency
    import requests
except ImportError:  # pragma: no cover - handled at runtime
    requests = None  # type: ignore


class WeatherServiceError(RuntimeError):
    """Raised when OpenWeather is unreachable, rejects the key, or answers with an error."""


@dataclass
class OpenWeatherClient:
    api_key: str
    base_url: str = "https://api.openweathermap.org/data/2.5"
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def current_weather(self, location: str) -> Dict[str, Any]:
        return self._get("weather", location)

    def forecast(self, location: str) -> Dict[str, Any]:
        """Five-day forecast in three-hour steps; entries live under ``list``."""
        return self._get("forecast", location)

    def location_exists(self, location: str) -> bool:
        if requests is None:
            raise WeatherServiceError("The 'requests' package is required for OpenWeather access")
        try:
            response = requests.get(
                f"{self.base_url.rstrip('/')}/weather",
                params={"q": location, "appid": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise WeatherServiceError(f"OpenWeather request failed: {exc}") from exc
        return response.ok

    def _get(self, endpoint: str, location: str) -> Dict[str, Any]:
        if not self.api_key:
            raise WeatherServiceError("OpenWeather client configured without API key")
        if requests is None:
            raise WeatherServiceError("The 'requests' package is required for OpenWeather access")

        params = {"q": location, "appid": self.api_key, "units": "metric"}
        try:
            response = requests.get(
                f"{self.base_url.rstrip('/')}/{endpoint}",
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise WeatherServiceError(f"OpenWeather request failed: {exc}") from exc

        if response.status_code == 401:
            raise WeatherServiceError("OpenWeather rejected the API key (status 401)")
        if not response.ok:
            raise WeatherServiceError(
                f"OpenWeather {endpoint} request failed (status {response.status_code}): {response.text}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise WeatherServiceError(f"OpenWeather returned invalid JSON for {endpoint}") from exc

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application configuration."""

    app_name: str = Field(default="Restaurant Reservation Agent")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    restaurant_name: str = Field(default="our restaurant")

    # Gemini / NLU
    gemini_api_key: str = Field(default="")
    gemini_nlu_model: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("GEMINI_MODEL", "GEMINI_NLU_MODEL"),
    )

    # OpenWeather
    openweather_api_key: str = Field(default="")
    openweather_base_url: str = Field(default="https://api.openweathermap.org/data/2.5")
    weather_timeout_seconds: float = Field(default=10.0)
    forecast_horizon_days: int = Field(default=5)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

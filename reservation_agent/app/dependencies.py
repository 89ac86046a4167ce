from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from reservation_agent.adapters.gemini_client import CompletionClient, GeminiCompletionClient
from reservation_agent.adapters.weather_client import OpenWeatherClient
from reservation_agent.app.config import Settings, get_settings
from reservation_agent.orchestrator.graph import DialogueController
from reservation_agent.services.booking_store import BookingStore, InMemoryBookingStore
from reservation_agent.services.nlu import NluAdapter
from reservation_agent.services.weather import WeatherResolver

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_weather_client() -> OpenWeatherClient:
    settings = get_settings()
    return OpenWeatherClient(
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        timeout=settings.weather_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_completion_client() -> Optional[CompletionClient]:
    settings = get_settings()
    if not settings.gemini_api_key:
        logger.warning("Gemini API key not configured, using rule-based parsing only")
        return None
    return GeminiCompletionClient(settings.gemini_nlu_model, settings.gemini_api_key)


@lru_cache(maxsize=1)
def get_booking_store() -> BookingStore:
    return InMemoryBookingStore()


def get_weather_resolver(
    settings: Settings = Depends(get_settings),
    client: OpenWeatherClient = Depends(get_weather_client),
) -> WeatherResolver:
    return WeatherResolver(client=client, forecast_horizon_days=settings.forecast_horizon_days)


def get_nlu_adapter(
    settings: Settings = Depends(get_settings),
    completion_client: Optional[CompletionClient] = Depends(get_completion_client),
) -> NluAdapter:
    return NluAdapter(completion_client=completion_client, restaurant_name=settings.restaurant_name)


def get_dialogue_controller(
    settings: Settings = Depends(get_settings),
    weather_resolver: WeatherResolver = Depends(get_weather_resolver),
    nlu_adapter: NluAdapter = Depends(get_nlu_adapter),
    booking_store: BookingStore = Depends(get_booking_store),
) -> DialogueController:
    return DialogueController(
        weather_resolver=weather_resolver,
        nlu_adapter=nlu_adapter,
        booking_store=booking_store,
        restaurant_name=settings.restaurant_name,
    )

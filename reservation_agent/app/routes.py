from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from reservation_agent.app.config import Settings
from reservation_agent.app.dependencies import (
    get_booking_store,
    get_dialogue_controller,
    get_settings,
    get_weather_resolver,
)
from reservation_agent.orchestrator.graph import DialogueController
from reservation_agent.schemas.booking import Booking, InsertBooking, StatusUpdate, WeatherInfo
from reservation_agent.schemas.chat import ChatRequest, ChatResponse, ConversationMessage
from reservation_agent.services.booking_store import BookingStore
from reservation_agent.services.weather import WeatherResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, details: object = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _not_found() -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "Booking not found")


@router.get("/health", status_code=status.HTTP_200_OK)
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {"app": settings.app_name, "status": "ok"}


@router.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True)
def chat(
    payload: ChatRequest,
    controller: DialogueController = Depends(get_dialogue_controller),
):
    try:
        final_state = controller.handle_turn(payload.message, payload.context)
    except Exception as exc:
        logger.exception("Chat turn failed", extra={"step": payload.context.step.value})
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process message", str(exc))

    return ChatResponse(
        response=final_state.response,
        context=final_state.context,
        booking_complete=final_state.booking_complete or None,
        booking=final_state.booking,
        messages=[
            ConversationMessage(role="user", content=payload.message),
            ConversationMessage(role="assistant", content=final_state.response),
        ],
    )


@router.post(
    "/api/bookings",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
def create_booking(payload: InsertBooking, store: BookingStore = Depends(get_booking_store)):
    try:
        return store.create_booking(payload)
    except Exception:
        logger.exception("Create booking failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create booking")


@router.get("/api/bookings", response_model=List[Booking], response_model_exclude_none=True)
def list_bookings(store: BookingStore = Depends(get_booking_store)):
    return store.list_bookings()


@router.get("/api/bookings/{booking_id}", response_model=Booking, response_model_exclude_none=True)
def get_booking(booking_id: str, store: BookingStore = Depends(get_booking_store)):
    booking = store.get_booking(booking_id)
    if booking is None:
        return _not_found()
    return booking


@router.patch("/api/bookings/{booking_id}/status", response_model=Booking, response_model_exclude_none=True)
def update_booking_status(
    booking_id: str,
    payload: StatusUpdate,
    store: BookingStore = Depends(get_booking_store),
):
    booking = store.update_booking_status(booking_id, payload.status)
    if booking is None:
        return _not_found()
    return booking


@router.delete("/api/bookings/{booking_id}")
def cancel_booking(booking_id: str, store: BookingStore = Depends(get_booking_store)):
    if not store.cancel_booking(booking_id):
        return _not_found()
    return {"message": "Booking cancelled successfully", "bookingId": booking_id}


@router.get("/api/weather/{location}/{booking_date}", response_model=WeatherInfo, response_model_exclude_none=True)
def get_weather(
    location: str,
    booking_date: str,
    resolver: WeatherResolver = Depends(get_weather_resolver),
):
    weather = resolver.resolve(booking_date, location)
    if weather is None:
        return _error(status.HTTP_404_NOT_FOUND, "Weather data not available")
    return weather


@router.get("/api/locations/{location}/validate")
def validate_location(location: str, resolver: WeatherResolver = Depends(get_weather_resolver)) -> dict:
    return {"location": location, "valid": resolver.validate_location(location)}

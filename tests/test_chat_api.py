from __future__ import annotations

import re

import pytest
from fastapi.testclient import TestClient

from reservation_agent.app.dependencies import (
    get_booking_store,
    get_dialogue_controller,
    get_nlu_adapter,
    get_weather_resolver,
)
from reservation_agent.app.main import app
from reservation_agent.services.booking_store import InMemoryBookingStore
from reservation_agent.services.nlu import NluAdapter
from reservation_agent.services.weather import WeatherResolver


class ExplodingController:
    def handle_turn(self, message, context):
        raise RuntimeError("graph crashed")


@pytest.fixture()
def store():
    return InMemoryBookingStore()


@pytest.fixture()
def client(store):
    overrides = {
        get_weather_resolver: lambda: WeatherResolver(client=None),
        get_nlu_adapter: lambda: NluAdapter(completion_client=None),
        get_booking_store: lambda: store,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield TestClient(app)
    finally:
        for key in overrides:
            app.dependency_overrides.pop(key, None)


def test_chat_greeting_turn(client: TestClient):
    response = client.post("/api/chat", json={"message": "hello", "context": {"step": "greeting"}})
    data = response.json()

    assert response.status_code == 200
    assert data["context"]["step"] == "collect_name"
    assert "name" in data["response"]
    assert "booking" not in data
    assert [m["role"] for m in data["messages"]] == ["user", "assistant"]
    assert data["messages"][0]["content"] == "hello"
    assert data["messages"][1]["content"] == data["response"]


def test_chat_context_defaults_to_greeting(client: TestClient):
    response = client.post("/api/chat", json={"message": "hi"})

    assert response.status_code == 200
    assert response.json()["context"]["step"] == "collect_name"


def test_chat_weather_turn_returns_camel_case_context(client: TestClient):
    payload = {"message": "ok", "context": {"location": "London", "bookingDate": "2030-01-01"}}

    data = client.post("/api/chat", json=payload).json()

    assert data["context"]["step"] == "suggest_seating"
    assert {"condition", "temperature", "description", "icon"} <= set(data["context"]["weatherInfo"])
    assert data["context"]["seatingPreference"] in {"indoor", "outdoor", "no_preference"}


def test_chat_confirmation_returns_booking(client: TestClient, store):
    context = {
        "customerName": "Ana",
        "numberOfGuests": 2,
        "bookingDate": "2030-01-01",
        "bookingTime": "7:00 PM",
        "cuisinePreference": "Thai",
        "location": "London",
        "weatherInfo": {"condition": "Clear", "temperature": 21, "description": "Clear Sky", "icon": "01d"},
        "step": "confirm_booking",
    }

    data = client.post("/api/chat", json={"message": "yes, confirm", "context": context}).json()

    assert data["bookingComplete"] is True
    assert data["booking"]["status"] == "confirmed"
    assert re.match(r"^BK-[A-Z0-9]{8}$", data["booking"]["bookingId"])
    assert data["context"]["step"] == "booking_complete"
    assert store.get_booking(data["booking"]["bookingId"]) is not None


def test_chat_rejects_missing_message(client: TestClient):
    response = client.post("/api/chat", json={"context": {"step": "greeting"}})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"
    assert response.json()["details"]


def test_chat_failure_returns_500(client: TestClient):
    app.dependency_overrides[get_dialogue_controller] = lambda: ExplodingController()
    try:
        response = client.post("/api/chat", json={"message": "hello"})
    finally:
        app.dependency_overrides.pop(get_dialogue_controller, None)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process message", "details": "graph crashed"}


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"

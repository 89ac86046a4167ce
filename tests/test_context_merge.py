from __future__ import annotations

import pytest

from reservation_agent.orchestrator.steps import Step
from reservation_agent.schemas.booking import BookingContext, SeatingPreference, WeatherInfo
from reservation_agent.services.context_merge import ExtractedFields, merge_context


def _context(**overrides) -> BookingContext:
    values = {
        "customer_name": "Ana",
        "number_of_guests": 4,
        "booking_date": "2030-01-01",
        "location": "Paris",
        "step": Step.COLLECT_TIME,
    }
    values.update(overrides)
    return BookingContext(**values)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(45, 20), (20, 20), (1, 1), (0, 1), (-3, 1), ("6", 6), (7.0, 7)],
)
def test_guest_count_is_clamped(raw, expected):
    merged = merge_context(_context(), {"numberOfGuests": raw})
    assert merged.number_of_guests == expected


@pytest.mark.parametrize("raw", [None, True, "a few", 2.5, [3]])
def test_unusable_guest_count_keeps_existing_value(raw):
    merged = merge_context(_context(), {"numberOfGuests": raw})
    assert merged.number_of_guests == 4


def test_empty_values_never_overwrite_populated_fields():
    context = _context()

    for extraction in ({}, {"location": ""}, {"location": None}, {"location": "   "}, {"location": "null"}):
        assert merge_context(context, extraction).location == "Paris"


def test_non_empty_values_overwrite_and_are_stripped():
    merged = merge_context(
        _context(),
        {"location": "  Lyon ", "bookingTime": "8:00 PM", "cuisinePreference": "Italian"},
    )

    assert merged.location == "Lyon"
    assert merged.booking_time == "8:00 PM"
    assert merged.cuisine_preference == "Italian"
    assert merged.customer_name == "Ana"


def test_snake_case_keys_and_model_input_are_accepted():
    merged = merge_context(_context(), {"special_requests": "window seat"})
    assert merged.special_requests == "window seat"

    merged = merge_context(_context(), ExtractedFields(booking_date="2030-02-02"))
    assert merged.booking_date == "2030-02-02"


def test_seating_preference_must_be_a_known_value():
    context = _context(seating_preference=SeatingPreference.INDOOR)

    assert merge_context(context, {"seatingPreference": "on the roof"}).seating_preference is SeatingPreference.INDOOR
    assert merge_context(context, {"seatingPreference": "outdoor"}).seating_preference is SeatingPreference.OUTDOOR


def test_proposed_step_is_only_accepted_when_valid():
    context = _context()

    assert merge_context(context, {}, "collect_cuisine").step is Step.COLLECT_CUISINE
    assert merge_context(context, {}, Step.CONFIRM_BOOKING).step is Step.CONFIRM_BOOKING
    assert merge_context(context, {}, "order_dessert").step is Step.COLLECT_TIME
    assert merge_context(context, {}, None).step is Step.COLLECT_TIME
    assert merge_context(context, {}, 7).step is Step.COLLECT_TIME


def test_merge_returns_a_new_context():
    context = _context()
    merged = merge_context(context, {"location": "Lyon"})

    assert merged is not context
    assert context.location == "Paris"


def test_merging_an_empty_extraction_is_idempotent():
    weather = WeatherInfo(condition="Clear", temperature=21.0, description="Clear Sky", icon="01d")
    context = _context(weather_info=weather, seating_preference=SeatingPreference.OUTDOOR)

    once = merge_context(context, {})
    twice = merge_context(once, {})

    assert once == context
    assert twice == context
    assert twice.model_dump_json() == context.model_dump_json()
    assert merge_context(context, None) == context


def test_context_normalizes_external_input():
    context = BookingContext.model_validate(
        {"step": "order_dessert", "numberOfGuests": 99, "seatingPreference": "rooftop"}
    )

    assert context.step is Step.GREETING
    assert context.number_of_guests == 20
    assert context.seating_preference is None

    assert BookingContext.model_validate({"numberOfGuests": "lots"}).number_of_guests is None
    assert BookingContext.model_validate({"numberOfGuests": 0}).number_of_guests == 1


def test_weather_is_dropped_without_location_and_date():
    weather = {"condition": "Rain", "temperature": 12, "description": "Light Rain", "icon": "10d"}

    orphan = BookingContext.model_validate({"weatherInfo": weather, "location": "Paris"})
    attached = BookingContext.model_validate(
        {"weatherInfo": weather, "location": "Paris", "bookingDate": "2030-01-01"}
    )

    assert orphan.weather_info is None
    assert attached.weather_info.condition == "Rain"


def test_context_serializes_with_camel_case_keys():
    dumped = _context().model_dump(by_alias=True, exclude_none=True)

    assert dumped == {
        "customerName": "Ana",
        "numberOfGuests": 4,
        "bookingDate": "2030-01-01",
        "location": "Paris",
        "step": "collect_time",
    }


def test_step_transition_table_is_linear_and_exhaustive():
    step = Step.GREETING
    visited = [step]
    while step.next is not None:
        step = step.next
        visited.append(step)

    assert visited == list(Step)
    assert Step.COLLECT_LOCATION.precedes(Step.FETCH_WEATHER)
    assert not Step.CONFIRM_BOOKING.precedes(Step.FETCH_WEATHER)
    assert Step.parse("order_dessert") is None
    assert Step.normalize("order_dessert") is Step.GREETING

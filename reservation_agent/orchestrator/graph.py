from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Callable, Optional, Tuple

from langgraph.graph import END, StateGraph

from reservation_agent.orchestrator import responses
from reservation_agent.orchestrator.state import TurnState
from reservation_agent.orchestrator.steps import Step
from reservation_agent.schemas.booking import BookingContext, InsertBooking, SeatingPreference
from reservation_agent.services.booking_store import BookingStore
from reservation_agent.services.nlu import NluAdapter
from reservation_agent.services.nlu_fallback import fold_text, mentions
from reservation_agent.services.seating import recommend_seating
from reservation_agent.services.weather import WeatherResolver

logger = logging.getLogger(__name__)

OUTDOOR_WORDS = ("outdoor", "outside", "patio")
INDOOR_WORDS = ("indoor", "inside")
AGREEMENT_WORDS = ("yes", "sure", "sounds good")
NO_REQUEST_WORDS = ("no", "none", "nothing", "nope", "nah")
CONFIRM_PHRASES = ("yes", "confirm", "correct", "looks good", "that's right")
NEGATION_PHRASES = ("incorrect", "not correct", "not right", "wrong", "don't confirm", "do not confirm")

SPECIAL_CASED_STEPS = {
    Step.SUGGEST_SEATING: "suggest_seating",
    Step.COLLECT_SPECIAL_REQUESTS: "special_requests",
    Step.CONFIRM_BOOKING: "confirm_booking",
}


class DialogueController:
    """LangGraph state machine that turns one user message into a reply and a new context."""

    def __init__(
        self,
        weather_resolver: WeatherResolver,
        nlu_adapter: NluAdapter,
        booking_store: BookingStore,
        today: Callable[[], date] = date.today,
        restaurant_name: str = "our restaurant",
    ) -> None:
        self._weather = weather_resolver
        self._nlu = nlu_adapter
        self._store = booking_store
        self._today = today
        self._restaurant = restaurant_name
        self._graph = self._build_graph().compile()

    def _build_graph(self) -> StateGraph[TurnState]:
        graph: StateGraph[TurnState] = StateGraph(TurnState)

        graph.add_node("fetch_weather", self._fetch_weather_node)
        graph.add_node("suggest_seating", self._suggest_seating_node)
        graph.add_node("special_requests", self._special_requests_node)
        graph.add_node("confirm_booking", self._confirm_booking_node)
        graph.add_node("nlu", self._nlu_node)
        graph.add_node("attach_weather", self._attach_weather_node)

        graph.set_conditional_entry_point(
            self._entry_router,
            {
                "fetch_weather": "fetch_weather",
                "suggest_seating": "suggest_seating",
                "special_requests": "special_requests",
                "confirm_booking": "confirm_booking",
                "nlu": "nlu",
            },
        )

        graph.add_conditional_edges("fetch_weather", self._handled_router, {True: END, False: "nlu"})
        graph.add_conditional_edges("confirm_booking", self._handled_router, {True: END, False: "nlu"})
        graph.add_conditional_edges("nlu", self._post_nlu_router, {True: "attach_weather", False: END})
        graph.add_edge("suggest_seating", END)
        graph.add_edge("special_requests", END)
        graph.add_edge("attach_weather", END)

        return graph

    def _entry_router(self, state: TurnState) -> str:
        context = state.context
        if context.step is Step.FETCH_WEATHER and context.location and context.booking_date:
            return "fetch_weather"
        if context.needs_weather() and context.step.precedes(Step.FETCH_WEATHER):
            return "fetch_weather"
        return SPECIAL_CASED_STEPS.get(context.step, "nlu")

    def _handled_router(self, state: TurnState) -> bool:
        return state.handled

    def _post_nlu_router(self, state: TurnState) -> bool:
        return state.context.needs_weather() and state.context.step is not Step.BOOKING_COMPLETE

    def _fetch_weather_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        resolved = self._resolve_seating(updated.context)
        if resolved is None:
            return updated
        updated.context, updated.response = resolved
        updated.handled = True
        return updated

    def _suggest_seating_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        lowered = updated.message.lower()
        preference = updated.context.seating_preference

        # Substring checks so "outdoors" and "patio table" still count.
        if any(word in lowered for word in OUTDOOR_WORDS):
            preference = SeatingPreference.OUTDOOR
        elif any(word in lowered for word in INDOOR_WORDS):
            preference = SeatingPreference.INDOOR
        elif mentions(lowered, AGREEMENT_WORDS):
            preference = preference or SeatingPreference.INDOOR
        preference = preference or SeatingPreference.NO_PREFERENCE

        updated.context = updated.context.model_copy(
            update={"seating_preference": preference, "step": updated.context.step.next}
        )
        updated.response = responses.seating_choice_message(preference)
        updated.handled = True
        return updated

    def _special_requests_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        text = updated.message.strip()
        special_requests = None if mentions(text, NO_REQUEST_WORDS) or not text else text

        updated.context = updated.context.model_copy(
            update={"special_requests": special_requests, "step": updated.context.step.next}
        )
        updated.response = responses.confirmation_request_message(updated.context)
        updated.handled = True
        return updated

    def _confirm_booking_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        if not self._confirms(updated.message):
            return updated
        return self._complete_booking(updated)

    @staticmethod
    def _confirms(message: str) -> bool:
        # Substring match so "Confirmed!" counts; negations are checked first.
        text = fold_text(message)
        if any(phrase in text for phrase in NEGATION_PHRASES):
            return False
        return any(phrase in text for phrase in CONFIRM_PHRASES)

    def _nlu_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        context = updated.context
        if context.step is Step.GREETING:
            context = context.model_copy(update={"step": Step.GREETING.next})

        outcome = self._nlu.interpret(updated.message, context)
        updated.context = outcome.context
        updated.response = outcome.response
        if outcome.booking_complete:
            return self._complete_booking(updated)
        return updated

    def _attach_weather_node(self, state: TurnState) -> TurnState:
        updated = state.copy()
        updated.context = updated.context.model_copy(update={"step": Step.FETCH_WEATHER})
        resolved = self._resolve_seating(updated.context)
        if resolved is None:
            return updated
        updated.context, rationale = resolved
        updated.response = f"{updated.response}\n\n{rationale}" if updated.response else rationale
        return updated

    def _resolve_seating(self, context: BookingContext) -> Optional[Tuple[BookingContext, str]]:
        weather = self._weather.resolve(context.booking_date, context.location)
        if weather is None:
            logger.warning("No weather data for booking", extra={"location": context.location})
            return None
        recommendation = recommend_seating(weather.condition, weather.temperature)
        updated = context.model_copy(
            update={
                "weather_info": weather,
                "seating_preference": recommendation.preference,
                "step": Step.FETCH_WEATHER.next,
            }
        )
        return updated, recommendation.response

    def _complete_booking(self, state: TurnState) -> TurnState:
        context = state.context
        payload = InsertBooking(
            customer_name=context.customer_name or "Guest",
            number_of_guests=context.number_of_guests or 2,
            booking_date=context.booking_date or self._today().isoformat(),
            booking_time=context.booking_time or "7:00 PM",
            cuisine_preference=context.cuisine_preference or "Any",
            location=context.location or "Unknown",
            special_requests=context.special_requests,
            weather_info=context.weather_info,
            seating_preference=context.seating_preference or SeatingPreference.NO_PREFERENCE,
        )
        try:
            booking = self._store.create_booking(payload)
        except Exception:
            logger.exception("Booking creation failed", extra={"step": context.step.value})
            state.context = context.model_copy(update={"step": Step.CONFIRM_BOOKING})
            state.response = responses.BOOKING_FAILED_MESSAGE
            state.booking_complete = False
            state.booking = None
            state.handled = True
            return state

        state.context = context.model_copy(update={"step": Step.CONFIRM_BOOKING.next})
        state.response = responses.booking_confirmed_message(booking, self._restaurant)
        state.booking_complete = True
        state.booking = booking
        state.handled = True
        return state

    def run(self, state: TurnState) -> TurnState:
        payload = asdict(state) if is_dataclass(state) else state
        result = self._graph.invoke(payload)
        if isinstance(result, TurnState):
            return result
        if isinstance(result, dict):
            return TurnState(
                message=result.get("message", ""),
                context=result.get("context") or BookingContext(),
                response=result.get("response", ""),
                booking_complete=bool(result.get("booking_complete", False)),
                booking=result.get("booking"),
                handled=bool(result.get("handled", False)),
            )
        raise TypeError(f"Unsupported state result from graph: {type(result)!r}")

    def handle_turn(self, message: str, context: BookingContext) -> TurnState:
        return self.run(TurnState(message=message, context=context))

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Union

from pydantic import Field, ValidationError

from reservation_agent.adapters.gemini_client import CompletionClient
from reservation_agent.orchestrator.steps import MODEL_STEPS, Step
from reservation_agent.schemas.booking import BookingContext, CamelModel
from reservation_agent.services.context_merge import ExtractedFields, merge_context
from reservation_agent.services.nlu_fallback import FallbackParser

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE = "I'm sorry, I didn't understand that. Could you please repeat?"

SYSTEM_PROMPT = """You are a friendly and professional restaurant booking assistant. Your goal is to help customers book a table at {restaurant} through natural conversation.

You must collect the following information step by step:
1. Customer's name
2. Number of guests (1-20)
3. Preferred date (in YYYY-MM-DD format)
4. Preferred time (e.g., "7:00 PM", "19:00")
5. Cuisine preference (e.g., Italian, Chinese, Indian, Mexican, American, etc.)
6. Location/City for weather-based seating suggestions
7. Special requests (birthdays, anniversaries, dietary restrictions, etc.)

IMPORTANT RULES:
- Be conversational and friendly, not robotic
- Ask for one piece of information at a time
- If the user provides multiple pieces of information at once, acknowledge all of them
- Validate the information makes sense (e.g., date should be in the future, guests 1-20)
- When you have all the required information, summarize the booking and ask for confirmation
- Handle variations in user input naturally (e.g., "me and my wife" = 2 guests)
- If the user says something off-topic, gently guide them back to the booking

For dates, convert natural language ("tomorrow", "next Friday", "December 25") to YYYY-MM-DD relative to the current date.
For times, use 12-hour format with AM/PM.

Current date: {today}

Response format: You must respond with a JSON object:
{{
  "response": "Your conversational response to the user",
  "extractedData": {{
    "customerName": "extracted name or null",
    "numberOfGuests": extracted number or null,
    "bookingDate": "YYYY-MM-DD or null",
    "bookingTime": "HH:MM AM/PM or null",
    "cuisinePreference": "cuisine type or null",
    "location": "city name or null",
    "specialRequests": "any special requests or null",
    "seatingPreference": "indoor, outdoor, no_preference or null"
  }},
  "nextStep": "one of: {steps}",
  "isConfirmed": true if user confirmed the booking, false otherwise
}}"""


class ModelReply(CamelModel):
    response: Optional[str] = None
    extracted_data: Optional[ExtractedFields] = None
    next_step: Optional[str] = None
    is_confirmed: Optional[bool] = Field(default=None)


@dataclass(frozen=True)
class ParsedReply:
    reply: ModelReply


@dataclass(frozen=True)
class ReplyError:
    reason: str


ParseResult = Union[ParsedReply, ReplyError]


@dataclass
class NluOutcome:
    response: str
    context: BookingContext
    booking_complete: bool = False
    used_fallback: bool = False


def parse_model_reply(raw: str) -> ParseResult:
    """Pull the JSON object out of a model reply and validate its shape."""
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        return ReplyError("no JSON object in model reply")
    try:
        payload = json.loads(raw[start : end + 1])
    except json.JSONDecodeError as exc:
        return ReplyError(f"invalid JSON in model reply: {exc.msg}")
    if not isinstance(payload, dict):
        return ReplyError("model reply JSON is not an object")
    try:
        return ParsedReply(ModelReply.model_validate(payload))
    except ValidationError as exc:
        return ReplyError(f"model reply has unexpected shape: {exc.error_count()} error(s)")


def build_context_summary(context: BookingContext) -> str:
    parts: List[str] = []
    if context.customer_name:
        parts.append(f"Name: {context.customer_name}")
    if context.number_of_guests:
        parts.append(f"Guests: {context.number_of_guests}")
    if context.booking_date:
        parts.append(f"Date: {context.booking_date}")
    if context.booking_time:
        parts.append(f"Time: {context.booking_time}")
    if context.cuisine_preference:
        parts.append(f"Cuisine: {context.cuisine_preference}")
    if context.location:
        parts.append(f"Location: {context.location}")
    if context.special_requests:
        parts.append(f"Special Requests: {context.special_requests}")
    if context.seating_preference:
        parts.append(f"Seating: {context.seating_preference.value}")
    if context.weather_info:
        parts.append(f"Weather: {context.weather_info.description}, {context.weather_info.temperature}°C")
    return "\n".join(parts) if parts else "No information collected yet."


def build_prompt(message: str, context: BookingContext, today: date, restaurant: str = "our restaurant") -> str:
    preamble = SYSTEM_PROMPT.format(
        restaurant=restaurant,
        today=today.isoformat(),
        steps=", ".join(step.value for step in MODEL_STEPS),
    )
    return (
        f"{preamble}\n\n"
        f"Current booking context:\n{build_context_summary(context)}\n\n"
        f"Current step: {context.step.value}\n"
        f'User message: "{message}"\n\n'
        "Respond with only the JSON object, no additional text."
    )


class NluAdapter:
    """Interprets one user turn with the language model, degrading to rule-based parsing."""

    def __init__(
        self,
        completion_client: Optional[CompletionClient],
        fallback_parser: Optional[FallbackParser] = None,
        today: Callable[[], date] = date.today,
        restaurant_name: str = "our restaurant",
    ) -> None:
        self._client = completion_client
        self._fallback = fallback_parser or FallbackParser()
        self._today = today
        self._restaurant = restaurant_name

    def interpret(self, message: str, context: BookingContext) -> NluOutcome:
        result = self._ask_model(message, context)
        if isinstance(result, ReplyError):
            logger.warning(
                "Falling back to rule-based parsing",
                extra={"step": context.step.value, "reason": result.reason},
            )
            fallback = self._fallback.parse(message, context)
            return NluOutcome(response=fallback.response, context=fallback.context, used_fallback=True)

        reply = result.reply
        merged = merge_context(context, reply.extracted_data, reply.next_step)
        return NluOutcome(
            response=reply.response or DEFAULT_RESPONSE,
            context=merged,
            booking_complete=reply.is_confirmed is True and merged.step is Step.BOOKING_COMPLETE,
        )

    def _ask_model(self, message: str, context: BookingContext) -> ParseResult:
        if self._client is None:
            return ReplyError("completion client not configured")
        prompt = build_prompt(message, context, self._today(), self._restaurant)
        try:
            raw = self._client.complete(prompt)
        except Exception as exc:  # any provider failure degrades to the fallback parser
            return ReplyError(f"completion service error: {exc}")
        if not isinstance(raw, str):
            return ReplyError("completion service returned no text")
        return parse_model_reply(raw)

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from reservation_agent.orchestrator.steps import Step
from reservation_agent.schemas.booking import BookingContext, clamp_guests

_TOKEN_PATTERN = re.compile(r"[a-z0-9']+")
_NUMBER_PATTERN = re.compile(r"\d+")

GREETING_PHRASES = ("hello", "hi", "hey", "good morning", "good afternoon", "good evening")

NAME_PROMPT = (
    "Hello! Welcome to our restaurant booking service. I'd be happy to help you reserve a table. "
    "May I have your name, please?"
)
NOT_UNDERSTOOD = "I'm sorry, I didn't quite catch that. Could you please repeat?"


def fold_text(text: str) -> str:
    """Lowercase ``text`` and fold typographic apostrophes to ASCII."""
    return text.lower().replace("\u2019", "'")


def mentions(text: str, phrases) -> bool:
    """True when any phrase appears in ``text`` as whole words, ignoring case and punctuation."""
    padded = " " + " ".join(_TOKEN_PATTERN.findall(fold_text(text))) + " "
    return any(f" {phrase} " in padded for phrase in phrases)


@dataclass
class FallbackResult:
    response: str
    context: BookingContext


class FallbackParser:
    """Step-scoped rule extraction used when the language model cannot answer."""

    def parse(self, message: str, context: BookingContext) -> FallbackResult:
        text = message.strip()

        if context.step is Step.GREETING or self.is_greeting(text):
            return FallbackResult(
                response=NAME_PROMPT,
                context=context.model_copy(update={"step": Step.GREETING.next}),
            )

        if context.step is Step.COLLECT_NAME and not context.customer_name and text:
            name = self.extract_name(text)
            return FallbackResult(
                response=f"Nice to meet you, {name}! How many guests will be joining you for dinner?",
                context=context.model_copy(update={"customer_name": name, "step": context.step.next}),
            )

        if context.step is Step.COLLECT_GUESTS:
            guests = self.extract_guests(text)
            if guests is not None:
                return FallbackResult(
                    response=(
                        f"Wonderful! A table for {guests}. What date would you like to book? "
                        'You can say something like "tomorrow" or give me a specific date.'
                    ),
                    context=context.model_copy(update={"number_of_guests": guests, "step": context.step.next}),
                )

        return FallbackResult(response=NOT_UNDERSTOOD, context=context)

    def is_greeting(self, text: str) -> bool:
        return mentions(text, GREETING_PHRASES)

    def extract_name(self, text: str) -> str:
        words = text.split()
        if len(words) <= 3:
            return text
        return " ".join(words[:2])

    def extract_guests(self, text: str) -> Optional[int]:
        match = _NUMBER_PATTERN.search(text)
        if not match:
            return None
        return clamp_guests(int(match.group(0)))

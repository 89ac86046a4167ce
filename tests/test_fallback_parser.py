from __future__ import annotations

from reservation_agent.orchestrator.steps import Step
from reservation_agent.schemas.booking import BookingContext
from reservation_agent.services.nlu_fallback import NAME_PROMPT, NOT_UNDERSTOOD, FallbackParser, mentions


def test_greeting_step_asks_for_a_name():
    result = FallbackParser().parse("good evening", BookingContext(step=Step.GREETING))

    assert result.response == NAME_PROMPT
    assert result.context.step is Step.COLLECT_NAME


def test_greeting_keyword_restarts_name_collection():
    result = FallbackParser().parse("Hi!", BookingContext(step=Step.COLLECT_DATE))

    assert result.context.step is Step.COLLECT_NAME


def test_greeting_keywords_match_whole_words_only():
    parser = FallbackParser()

    assert parser.is_greeting("hey there")
    assert parser.is_greeting("Good morning to you")
    assert not parser.is_greeting("this is fine")
    assert not parser.is_greeting("they said so")


def test_short_reply_is_taken_as_the_name():
    result = FallbackParser().parse("  Ana Maria Lopez ", BookingContext(step=Step.COLLECT_NAME))

    assert result.context.customer_name == "Ana Maria Lopez"
    assert result.context.step is Step.COLLECT_GUESTS
    assert "Nice to meet you, Ana Maria Lopez!" in result.response


def test_long_reply_keeps_first_two_words_as_the_name():
    result = FallbackParser().parse("Jordan Smith and my partner", BookingContext(step=Step.COLLECT_NAME))

    assert result.context.customer_name == "Jordan Smith"


def test_name_is_not_overwritten_once_captured():
    context = BookingContext(customer_name="Ana", step=Step.COLLECT_NAME)

    result = FallbackParser().parse("Bob", context)

    assert result.response == NOT_UNDERSTOOD
    assert result.context == context


def test_guest_count_uses_first_number_and_is_clamped():
    parser = FallbackParser()

    assert parser.parse("table for 4, maybe 5", BookingContext(step=Step.COLLECT_GUESTS)).context.number_of_guests == 4
    large = parser.parse("we are 35 people", BookingContext(step=Step.COLLECT_GUESTS))
    assert large.context.number_of_guests == 20
    assert large.context.step is Step.COLLECT_DATE
    assert parser.parse("0", BookingContext(step=Step.COLLECT_GUESTS)).context.number_of_guests == 1


def test_guest_step_without_number_is_not_understood():
    context = BookingContext(step=Step.COLLECT_GUESTS)

    result = FallbackParser().parse("a few of us", context)

    assert result.response == NOT_UNDERSTOOD
    assert result.context is context


def test_mentions_matches_phrases_ignoring_punctuation():
    assert mentions("Yes, that's right!", ("that's right",))
    assert mentions("Looks good to me", ("looks good",))
    assert not mentions("That is incorrect", ("correct",))


def test_mentions_folds_typographic_apostrophes():
    assert mentions("That’s right", ("that's right",))

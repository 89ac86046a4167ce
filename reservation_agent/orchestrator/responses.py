from __future__ import annotations

from datetime import date
from typing import List

from reservation_agent.schemas.booking import Booking, BookingContext, SeatingPreference


def format_date(value: str) -> str:
    """Render ``2030-03-15`` as ``Friday, March 15, 2030``; anything unparsable is returned as is."""
    try:
        parsed = date.fromisoformat(value.split("T")[0].strip())
    except ValueError:
        return value
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def build_booking_summary(context: BookingContext) -> str:
    lines: List[str] = []
    if context.customer_name:
        lines.append(f"Name: {context.customer_name}")
    if context.number_of_guests:
        lines.append(f"Party size: {context.number_of_guests} guests")
    if context.booking_date:
        lines.append(f"Date: {format_date(context.booking_date)}")
    if context.booking_time:
        lines.append(f"Time: {context.booking_time}")
    if context.cuisine_preference:
        lines.append(f"Cuisine: {context.cuisine_preference}")
    if context.location:
        lines.append(f"Location: {context.location}")
    if context.seating_preference and context.seating_preference is not SeatingPreference.NO_PREFERENCE:
        lines.append(f"Seating: {context.seating_preference.value}")
    if context.special_requests:
        lines.append(f"Special requests: {context.special_requests}")
    return "\n".join(lines)


def seating_choice_message(preference: SeatingPreference) -> str:
    if preference is SeatingPreference.OUTDOOR:
        choice = "Great choice! Outdoor seating it is."
    elif preference is SeatingPreference.INDOOR:
        choice = "Great choice! Indoor seating it is."
    else:
        choice = "No problem, we'll find you the best available table."
    return (
        f"{choice} Do you have any special requests? For example, is this for a birthday, "
        "anniversary, or do you have any dietary requirements? "
        'If not, just say "no special requests".'
    )


def confirmation_request_message(context: BookingContext) -> str:
    return (
        "Perfect! Let me confirm your booking details:\n\n"
        f"{build_booking_summary(context)}\n\n"
        'Is everything correct? Say "yes" or "confirm" to complete your booking, '
        "or let me know what you'd like to change."
    )


def booking_confirmed_message(booking: Booking, restaurant: str = "our restaurant") -> str:
    return (
        f"Wonderful! Your booking has been confirmed! Your booking ID is {booking.booking_id}. "
        f"We look forward to seeing you, {booking.customer_name}, on {format_date(booking.booking_date)} "
        f"at {booking.booking_time}. Thank you for choosing {restaurant}!"
    )


BOOKING_FAILED_MESSAGE = (
    "I'm sorry, something went wrong while saving your booking and it has not been confirmed yet. "
    'Please say "confirm" to try again in a moment.'
)

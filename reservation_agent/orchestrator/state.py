from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from reservation_agent.schemas.booking import Booking, BookingContext


@dataclass
class TurnState:
    message: str = ""
    context: BookingContext = field(default_factory=BookingContext)
    response: str = ""
    booking_complete: bool = False
    booking: Optional[Booking] = None
    # Set by a special-cased node once it has produced this turn's reply.
    handled: bool = False

    def copy(self) -> "TurnState":
        return TurnState(
            message=self.message,
            context=self.context,
            response=self.response,
            booking_complete=self.booking_complete,
            booking=self.booking,
            handled=self.handled,
        )

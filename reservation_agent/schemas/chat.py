from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import Field

from reservation_agent.schemas.booking import Booking, BookingContext, CamelModel


class ConversationMessage(CamelModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"] = Field(..., description="Message author")
    content: str = Field(..., description="Plain text content")
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ChatRequest(CamelModel):
    message: str
    context: BookingContext = Field(default_factory=BookingContext)


class ChatResponse(CamelModel):
    response: str
    context: BookingContext
    booking_complete: Optional[bool] = None
    booking: Optional[Booking] = None
    messages: List[ConversationMessage] = Field(
        default_factory=list,
        description="The user and assistant messages of this turn, for transcript display",
    )

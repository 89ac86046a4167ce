from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

from reservation_agent.schemas.booking import Booking, BookingStatus, InsertBooking

logger = logging.getLogger(__name__)

BOOKING_ID_PREFIX = "BK-"
MAX_ID_ATTEMPTS = 5


class BookingStoreError(RuntimeError):
    """Raised when a booking cannot be stored."""


class BookingStore(Protocol):
    def create_booking(self, payload: InsertBooking) -> Booking:  # pragma: no cover - interface
        ...

    def get_booking(self, booking_id: str) -> Optional[Booking]:  # pragma: no cover - interface
        ...

    def list_bookings(self) -> List[Booking]:  # pragma: no cover - interface
        ...

    def update_booking_status(
        self, booking_id: str, status: BookingStatus
    ) -> Optional[Booking]:  # pragma: no cover - interface
        ...

    def cancel_booking(self, booking_id: str) -> bool:  # pragma: no cover - interface
        ...


def generate_booking_id() -> str:
    return f"{BOOKING_ID_PREFIX}{uuid.uuid4().hex[:8].upper()}"


class InMemoryBookingStore:
    """Keeps bookings in a process-local dict keyed by booking id."""

    def __init__(self, id_factory: Callable[[], str] = generate_booking_id) -> None:
        self._bookings: Dict[str, Booking] = {}
        self._order: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory

    def create_booking(self, payload: InsertBooking) -> Booking:
        with self._lock:
            booking_id = self._unused_id()
            booking = Booking(
                **payload.model_dump(),
                booking_id=booking_id,
                status=BookingStatus.CONFIRMED,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            self._bookings[booking_id] = booking
            self._order[booking_id] = len(self._order)
        logger.info("Booking created", extra={"booking_id": booking_id})
        return booking

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def list_bookings(self) -> List[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        return sorted(
            bookings,
            key=lambda booking: (booking.created_at, self._order[booking.booking_id]),
            reverse=True,
        )

    def update_booking_status(self, booking_id: str, status: BookingStatus) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                return None
            updated = booking.model_copy(update={"status": status})
            self._bookings[booking_id] = updated
        logger.info("Booking status updated", extra={"booking_id": booking_id, "reason": status.value})
        return updated

    def cancel_booking(self, booking_id: str) -> bool:
        return self.update_booking_status(booking_id, BookingStatus.CANCELLED) is not None

    def _unused_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in self._bookings:
                return candidate
        raise BookingStoreError(f"Could not allocate a free booking id after {MAX_ID_ATTEMPTS} attempts")

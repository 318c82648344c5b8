"""Administrator-side booking status changes and calendar blocking."""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import config
from app.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from app.models import BOOKING_STATUSES, Booking
from app.repository import BookingRepository, UnavailableSlotRepository
from app.slots import sort_key
from app.timeutil import TIMEFRAMES, business_now, business_today, parse_date_string

logger = logging.getLogger(__name__)

HISTORICAL_STATUSES = ("completed", "cancelled")

# Only consulted when STRICT_STATUS_TRANSITIONS is on
ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "completed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": {"pending"},
}


class BookingLifecycleManager:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = business_now,
        strict: Optional[bool] = None,
    ):
        self.db = db
        self.clock = clock
        self.strict = config.STRICT_STATUS_TRANSITIONS if strict is None else strict
        self.repo = BookingRepository()

    def list_bookings(self) -> dict:
        """Split into upcoming (ascending) and past (descending) by business date and status."""
        today = business_today(self.clock())
        upcoming, past = [], []
        for booking in self.repo.list_all(self.db):
            if booking.date >= today and booking.status not in HISTORICAL_STATUSES:
                upcoming.append(booking)
            else:
                past.append(booking)
        upcoming.sort(key=sort_key)
        past.sort(key=sort_key, reverse=True)
        return {"upcoming": upcoming, "past": past}

    def _check_transition(self, booking: Booking, status: str, date: Optional[str]) -> None:
        if not self.strict or booking.status == status:
            return
        if status not in ALLOWED_TRANSITIONS[booking.status]:
            raise InvalidTransitionError(f"Cannot move a {booking.status} booking to {status}")
        if booking.status == "cancelled" and status == "pending" and not date:
            raise InvalidTransitionError("Rebooking a cancelled booking requires a new date and time")

    def update_status(
        self,
        booking_id: str,
        status: str,
        date: Optional[str] = None,
        time_of_day: Optional[str] = None,
    ) -> Booking:
        """Set a booking's status, optionally moving it to a new slot (rebook)."""
        if not booking_id or not status:
            raise ValidationError("Missing id or status")
        if status not in BOOKING_STATUSES:
            raise ValidationError("Invalid status")
        if date:
            parse_date_string(date)
        if time_of_day and time_of_day not in TIMEFRAMES:
            raise ValidationError(f"Invalid timeOfDay: {time_of_day!r}")

        booking = self.repo.get(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        self._check_transition(booking, status, date)

        previous = booking.status
        booking.status = status
        if date:
            booking.date = date
        if time_of_day:
            booking.time_of_day = time_of_day
        try:
            self.db.commit()
        except IntegrityError:
            # uq_bookings_pending_slot: another pending booking already holds the slot
            self.db.rollback()
            raise ConflictError("This time slot is already booked") from None

        self.db.refresh(booking)
        logger.info(
            "Booking %s: %s -> %s (%s %s)",
            booking.id, previous, booking.status, booking.date, booking.time_of_day,
        )
        return booking


class UnavailabilityManager:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UnavailableSlotRepository()

    def list_unavailable_slots(self):
        return self.repo.list_all(self.db)

    def add_unavailable_slots(self, slots: list[tuple[str, str]]) -> int:
        if not slots:
            raise ValidationError("Missing or invalid slots array")
        count = self.repo.add_many(self.db, slots)
        logger.info("Blocked %d slot(s)", count)
        return count

    def remove_unavailable_slots(self, slots: list[tuple[str, str]]) -> int:
        if not slots:
            raise ValidationError("Missing or invalid slots array")
        removed = self.repo.remove_many(self.db, slots)
        logger.info("Unblocked %d of %d requested slot(s)", removed, len(slots))
        return removed

"""Booking admission: the only way a booking comes into existence."""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import config
from app.errors import ConflictError, HorizonError, LeadTimeError, SlotBlockedError
from app.models import Booking
from app.notifications import NotificationDispatcher, NullDispatcher, booking_notification_message
from app.repository import BookingRepository, UnavailableSlotRepository
from app.schemas import BookingCreate
from app.timeutil import business_now, is_horizon_exceeded, is_lead_time_violated

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked"
SLOT_BLOCKED_MESSAGE = "This time slot is not available"


class BookingAdmissionController:
    """Checks a booking request against the slot rules and stores it as pending."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = business_now,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.db = db
        self.clock = clock
        self.dispatcher = dispatcher or NullDispatcher()
        self.bookings = BookingRepository()
        self.unavailable = UnavailableSlotRepository()

    def check_slot(self, date: str, time_of_day: str, now: Optional[datetime] = None) -> None:
        """Raise the first rule the slot breaks: lead time, horizon, conflict, block."""
        now = now or self.clock()
        if is_lead_time_violated(date, time_of_day, now):
            raise LeadTimeError(
                f"Bookings require at least {config.MIN_BOOKING_HOURS_AHEAD} hours notice"
            )
        if is_horizon_exceeded(date, config.MAX_BOOKING_DAYS_AHEAD, now):
            raise HorizonError(
                f"Bookings cannot be made more than {config.MAX_BOOKING_DAYS_AHEAD} days in advance"
            )
        if self.bookings.find_pending_on_slot(self.db, date, time_of_day):
            raise ConflictError(SLOT_TAKEN_MESSAGE)
        if self.unavailable.find_covering(self.db, date, time_of_day):
            raise SlotBlockedError(SLOT_BLOCKED_MESSAGE)

    def _lost_race(self, date: str, time_of_day: str) -> ConflictError:
        if self.unavailable.find_covering(self.db, date, time_of_day):
            return SlotBlockedError(SLOT_BLOCKED_MESSAGE)
        return ConflictError(SLOT_TAKEN_MESSAGE)

    def submit_booking(self, data: BookingCreate) -> Booking:
        self.check_slot(data.date, data.timeOfDay)

        values = {
            "name": data.name,
            "mobile": data.mobile,
            "address": data.address,
            "returning_customer": data.returningCustomer,
            "vehicle_year": data.vehicleYear,
            "vehicle_make": data.vehicleMake,
            "vehicle_model": data.vehicleModel,
            "service_type": data.serviceType,
            "scent": data.scent,
            "special_requests": data.specialRequests,
            "attachments": [a.model_dump() for a in data.attachments] or None,
            "date": data.date,
            "time_of_day": data.timeOfDay,
        }
        try:
            booking_id = self.bookings.reserve(self.db, **values)
        except IntegrityError:
            # Another request committed a pending booking for this slot first
            self.db.rollback()
            logger.warning("Slot %s %s taken concurrently (unique index)", data.date, data.timeOfDay)
            raise self._lost_race(data.date, data.timeOfDay) from None

        if booking_id is None:
            self.db.rollback()
            logger.warning("Slot %s %s taken concurrently (conditional insert)", data.date, data.timeOfDay)
            raise self._lost_race(data.date, data.timeOfDay)

        self.db.commit()
        booking = self.bookings.get(self.db, booking_id)
        logger.info("Booking %s admitted for %s %s", booking.id, booking.date, booking.time_of_day)

        try:
            self.dispatcher.dispatch(booking_notification_message(booking))
        except Exception:
            logger.exception("Failed to queue notification for booking %s", booking.id)
        return booking

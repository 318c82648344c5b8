"""
New-booking SMS notifications.

Messages go to the business contact number via the Twilio REST API. Sending
is fire-and-forget: failures are logged and never reach the booking request.
"""

import logging
from typing import Optional, Protocol

import httpx
from fastapi import BackgroundTasks

from app import config
from app.errors import DownstreamNotificationFailure
from app.models import SERVICE_TYPES, Booking
from app.schemas import SCENT_NONE
from app.timeutil import format_date_display

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def booking_notification_message(booking: Booking) -> str:
    service_label = SERVICE_TYPES.get(booking.service_type, booking.service_type)
    returning_tag = " [RETURNING]" if booking.returning_customer else ""
    scent = f" - {booking.scent}" if booking.scent != SCENT_NONE else ""
    notes = f"\n\nNotes: {booking.special_requests}" if booking.special_requests else ""

    return (
        f"New Booking{returning_tag}!\n\n"
        f"{booking.name}\n"
        f"{format_date_display(booking.date)} ({booking.time_of_day})\n\n"
        f"{booking.vehicle_year} {booking.vehicle_make} {booking.vehicle_model}\n"
        f"{service_label}{scent}\n\n"
        f"{booking.address}\n"
        f"{booking.mobile}{notes}\n\n"
        f"{config.BASE_URL}/dashboard"
    )


def review_request_message(booking: Booking) -> str:
    """Text the owner copies to a customer after a completed job."""
    first_name = booking.name.split()[0] if booking.name.strip() else booking.name
    links = "\n".join(f"{name}: {url}" for name, url in config.REVIEW_LINKS if url)
    return (
        f"Hi {first_name}! Thank you for choosing {config.BUSINESS_NAME}. "
        "We hope you're happy with the results! "
        f"If you have a moment, we'd really appreciate a review:\n\n{links}\n\nThanks again!"
    )


async def send_sms(message: str, to_phone: Optional[str] = None) -> str:
    """Send an SMS via Twilio and return the message SID.

    Raises DownstreamNotificationFailure if Twilio is not configured or the
    API call fails.
    """
    to_phone = to_phone or config.CONTACT_NUMBER
    account_sid = config.TWILIO_ACCOUNT_SID
    auth_token = config.TWILIO_AUTH_TOKEN
    if not (account_sid and auth_token and config.TWILIO_PHONE_NUMBER and to_phone):
        raise DownstreamNotificationFailure("Twilio not configured")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                TWILIO_MESSAGES_URL.format(sid=account_sid),
                auth=(account_sid, auth_token),
                data={"To": to_phone, "From": config.TWILIO_PHONE_NUMBER, "Body": message},
                timeout=10.0,
            )
    except httpx.HTTPError as e:
        raise DownstreamNotificationFailure(f"Twilio request failed: {e}") from e

    if response.status_code not in (200, 201):
        raise DownstreamNotificationFailure(
            f"Twilio API returned {response.status_code}: {response.text[:200]}"
        )
    return response.json().get("sid", "")


async def deliver_notification(message: str) -> bool:
    """Background task body: send and log, never raise."""
    try:
        sid = await send_sms(message)
    except DownstreamNotificationFailure as e:
        logger.warning("SMS notification failed: %s", e)
        return False
    logger.info("SMS notification sent (sid=%s)", sid)
    return True


class NotificationDispatcher(Protocol):
    def dispatch(self, message: str) -> None: ...


class BackgroundDispatcher:
    """Queues the SMS to run after the response has been sent."""

    def __init__(self, background_tasks: BackgroundTasks):
        self.background_tasks = background_tasks

    def dispatch(self, message: str) -> None:
        self.background_tasks.add_task(deliver_notification, message)


class NullDispatcher:
    def dispatch(self, message: str) -> None:
        logger.debug("Notification dropped: no dispatcher configured")

"""What is bookable, for the customer calendar, the rebook dialog and the block calendar.

Computed from live rows on every call; nothing is cached.
"""

import logging
from datetime import datetime
from typing import Iterable, Literal, Optional

from sqlalchemy.orm import Session

from app import config
from app.errors import ValidationError
from app.repository import BookingRepository, UnavailableSlotRepository
from app.slots import (
    TIMEFRAME_ORDER,
    expand_unavailable,
    is_date_fully_occupied,
    is_slot_blocked,
    is_slot_taken,
    slot_of,
    slot_state,
)
from app.timeutil import (
    TIMEFRAMES,
    add_days,
    business_today,
    is_horizon_exceeded,
    is_lead_time_violated,
    parse_date_string,
)

logger = logging.getLogger(__name__)

Context = Literal["booking", "rebook", "block"]
BlockTarget = Literal["morning", "afternoon", "all"]


def get_taken_and_blocked_slots(db: Session) -> list[dict]:
    """Pending bookings plus blocked slots (``all`` expanded), deduplicated."""
    slots = {slot_of(b) for b in BookingRepository.list_pending(db)}
    for entry in UnavailableSlotRepository.list_all(db):
        slots.update(expand_unavailable(entry))
    return [
        {"date": date, "timeframe": timeframe}
        for date, timeframe in sorted(slots, key=lambda s: (s[0], TIMEFRAME_ORDER[s[1]]))
    ]


def is_date_selectable(
    date_str: str,
    context: Context,
    pending: Iterable = (),
    unavailable: Iterable = (),
    block_target: Optional[BlockTarget] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Whether a calendar day can be picked.

    ``booking`` and ``rebook``: not today or earlier, and at least one timeframe
    still free of bookings, blocks and the lead-time window. ``booking`` also
    stops at the booking horizon.

    ``block``: not before today, and not already covered for ``block_target``.
    Blocking ``all`` is refused for a day with any block; blocking one
    timeframe is refused when that timeframe or ``all`` is already blocked.
    """
    parse_date_string(date_str)
    today = business_today(now)
    unavailable = list(unavailable)

    if context == "block":
        if block_target not in ("morning", "afternoon", "all"):
            raise ValidationError(f"Invalid block target: {block_target!r}")
        if date_str < today:
            return False
        on_date = [u for u in unavailable if slot_of(u)[0] == date_str]
        if any(slot_of(u)[1] == "all" for u in on_date):
            return False
        if block_target == "all":
            return not on_date
        return not any(slot_of(u)[1] == block_target for u in on_date)

    if context not in ("booking", "rebook"):
        raise ValidationError(f"Invalid calendar context: {context!r}")
    if date_str <= today:
        return False
    if context == "booking" and is_horizon_exceeded(date_str, config.MAX_BOOKING_DAYS_AHEAD, now):
        return False
    return not is_date_fully_occupied(date_str, pending, unavailable, now)


def is_timeframe_selectable(
    date_str: str,
    timeframe: str,
    pending: Iterable = (),
    unavailable: Iterable = (),
    now: Optional[datetime] = None,
) -> bool:
    if is_lead_time_violated(date_str, timeframe, now):
        return False
    return not (is_slot_taken(date_str, timeframe, pending) or is_slot_blocked(date_str, timeframe, unavailable))


def build_calendar(db: Session, now: Optional[datetime] = None, context: Context = "booking") -> list[dict]:
    """One entry per day from today through the booking horizon.

    The rebook view has no horizon and runs to REBOOK_CALENDAR_DAYS_AHEAD instead.
    """
    if context == "block":
        raise ValidationError("The calendar view supports the booking and rebook contexts only")
    pending = BookingRepository.list_pending(db)
    unavailable = UnavailableSlotRepository.list_all(db)
    today = business_today(now)
    days_ahead = config.REBOOK_CALENDAR_DAYS_AHEAD if context == "rebook" else config.MAX_BOOKING_DAYS_AHEAD

    days = []
    for offset in range(days_ahead + 1):
        date_str = add_days(today, offset)
        days.append({
            "date": date_str,
            "selectable": is_date_selectable(date_str, context, pending, unavailable, now=now),
            "timeframes": {
                tf: slot_state(date_str, tf, pending, unavailable, now).value for tf in TIMEFRAMES
            },
        })
    logger.debug("Built %s calendar of %d days from %s", context, len(days), today)
    return days

"""Business-timezone date helpers.

Dates are exchanged as zero-padded ``YYYY-MM-DD`` strings observed in the
business timezone, so plain string comparison orders them correctly no matter
which timezone the server or the browser runs in.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from app import config
from app.errors import ValidationError

TIMEFRAMES = ("morning", "afternoon")


def business_tz() -> ZoneInfo:
    return ZoneInfo(config.BUSINESS_TIMEZONE)


def slot_start_hour(timeframe: str) -> int:
    """Start hour (24h, business wall clock) of a timeframe."""
    hours = {
        "morning": config.MORNING_START_HOUR,
        "afternoon": config.AFTERNOON_START_HOUR,
    }
    if timeframe not in hours:
        raise ValidationError(f"Invalid timeframe: {timeframe!r}")
    return hours[timeframe]


def business_now() -> datetime:
    """Current instant as an aware datetime in the business timezone."""
    return datetime.now(business_tz())


def _as_business_wall_clock(now: Optional[datetime]) -> datetime:
    now = now or business_now()
    if now.tzinfo is not None:
        now = now.astimezone(business_tz())
    return now.replace(tzinfo=None)


def parse_date_string(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    if not isinstance(value, str) or len(value) != 10:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None


def to_business_date_string(value: Union[str, date, datetime]) -> str:
    """Convert a date-like value to the ``YYYY-MM-DD`` seen in the business timezone.

    Aware datetimes are converted first; naive datetimes are taken as business
    wall-clock time. The time-of-day part never changes the result for a
    naive value.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(business_tz())
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse_date_string(value).isoformat()


def business_today(now: Optional[datetime] = None) -> str:
    return _as_business_wall_clock(now).date().isoformat()


def add_days(date_str: str, days: int) -> str:
    return (parse_date_string(date_str) + timedelta(days=days)).isoformat()


def is_lead_time_violated(date_str: str, timeframe: str, now: Optional[datetime] = None) -> bool:
    """True if the slot starts less than MIN_BOOKING_HOURS_AHEAD hours from now.

    Past dates and today always violate.
    """
    slot_date = parse_date_string(date_str)
    start_hour = slot_start_hour(timeframe)
    wall_now = _as_business_wall_clock(now)
    if slot_date <= wall_now.date():
        return True

    slot_start = datetime.combine(slot_date, time(start_hour))
    hours_until_slot = (slot_start - wall_now).total_seconds() / 3600
    return hours_until_slot < config.MIN_BOOKING_HOURS_AHEAD


def is_horizon_exceeded(
    date_str: str,
    max_days_ahead: Optional[int] = None,
    now: Optional[datetime] = None,
) -> bool:
    """True if the date is later than today + max_days_ahead (the last day itself is allowed)."""
    if max_days_ahead is None:
        max_days_ahead = config.MAX_BOOKING_DAYS_AHEAD
    return to_business_date_string(date_str) > add_days(business_today(now), max_days_ahead)


def format_date_display(date_str: str) -> str:
    """e.g. ``2026-01-05`` -> ``Mon 5 Jan``"""
    d = parse_date_string(date_str)
    return f"{d.strftime('%a')} {d.day} {d.strftime('%b')}"

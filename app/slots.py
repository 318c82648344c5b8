"""Slot model: pure computations over (date, timeframe) pairs. No I/O.

``pending`` and ``unavailable`` arguments are iterables of objects or dicts
exposing ``date`` and ``time_of_day`` (or ``timeOfDay`` / ``timeframe``).
"""

import enum
from datetime import datetime
from typing import Iterable, Optional

from app.timeutil import TIMEFRAMES, business_today, is_lead_time_violated

TIMEFRAME_ORDER = {"morning": 0, "afternoon": 1}


class SlotState(str, enum.Enum):
    OPEN = "open"
    TAKEN = "taken"
    BLOCKED = "blocked"
    TOO_SOON = "too_soon"
    PAST = "past"


def _field(entry, *names):
    for name in names:
        if isinstance(entry, dict):
            if name in entry:
                return entry[name]
        elif hasattr(entry, name):
            return getattr(entry, name)
    raise KeyError(names[0])


def slot_of(entry) -> tuple[str, str]:
    return (
        _field(entry, "date"),
        _field(entry, "time_of_day", "timeOfDay", "timeframe"),
    )


def expand_unavailable(entry) -> list[tuple[str, str]]:
    """``all`` becomes the morning and afternoon slots of that date."""
    date_str, time_of_day = slot_of(entry)
    if time_of_day == "all":
        return [(date_str, tf) for tf in TIMEFRAMES]
    return [(date_str, time_of_day)]


def is_slot_taken(date_str: str, timeframe: str, pending: Iterable) -> bool:
    return any(slot_of(b) == (date_str, timeframe) for b in pending)


def is_slot_blocked(date_str: str, timeframe: str, unavailable: Iterable) -> bool:
    return any((date_str, timeframe) in expand_unavailable(u) for u in unavailable)


def is_date_fully_occupied(
    date_str: str,
    pending: Iterable,
    unavailable: Iterable,
    now: Optional[datetime] = None,
) -> bool:
    """Both timeframes are taken, blocked or inside the lead-time window."""
    pending = list(pending)
    unavailable = list(unavailable)
    return all(
        is_lead_time_violated(date_str, tf, now)
        or is_slot_taken(date_str, tf, pending)
        or is_slot_blocked(date_str, tf, unavailable)
        for tf in TIMEFRAMES
    )


def slot_state(
    date_str: str,
    timeframe: str,
    pending: Iterable,
    unavailable: Iterable,
    now: Optional[datetime] = None,
) -> SlotState:
    if date_str < business_today(now):
        return SlotState.PAST
    if is_lead_time_violated(date_str, timeframe, now):
        return SlotState.TOO_SOON
    if is_slot_blocked(date_str, timeframe, unavailable):
        return SlotState.BLOCKED
    if is_slot_taken(date_str, timeframe, pending):
        return SlotState.TAKEN
    return SlotState.OPEN


def sort_key(entry) -> tuple[str, int]:
    """Order by date, then morning before afternoon."""
    date_str, time_of_day = slot_of(entry)
    return date_str, TIMEFRAME_ORDER.get(time_of_day, 0)

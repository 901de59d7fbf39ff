# barbershop/slots.py
"""
Slot arithmetic shared by the resolver, the override store and admission.

A slot is named by its start time as "HH:MM AM/PM" ("09:00 AM", "05:00 PM").
The shop grid runs from OPEN_TIME to CLOSE_TIME inclusive, one slot every
SLOT_MINUTES.
"""

from datetime import datetime, date, time, timedelta
from typing import List
from zoneinfo import ZoneInfo

from .config import get_settings
from .errors import ValidationError


def parse_slot(value: str) -> time:
    """Parse "09:00 AM" / "9:00 AM" into a time. Raises ValidationError."""
    try:
        return datetime.strptime((value or "").strip().upper(), "%I:%M %p").time()
    except ValueError:
        raise ValidationError(f"Invalid time slot: {value!r}", {"timeSlot": value})


def format_slot(value: time) -> str:
    return value.strftime("%I:%M %p")


def normalize_slot(value: str) -> str:
    return format_slot(parse_slot(value))


def grid_slots() -> List[time]:
    settings = get_settings()
    step = timedelta(minutes=settings.slot_minutes)
    current = datetime.combine(date.min, settings.open_time_value)
    last = datetime.combine(date.min, settings.close_time_value)

    slots = []
    while current <= last:
        slots.append(current.time())
        current += step
    return slots


def on_grid(value: time) -> bool:
    return value in grid_slots()


def candidate_slots(start: time, end: time) -> List[time]:
    """Grid slots whose start lies within [start, end]."""
    return [s for s in grid_slots() if start <= s <= end]


def slot_start(day: date, slot: str) -> datetime:
    return datetime.combine(day, parse_slot(slot))


def local_now() -> datetime:
    """Current wall-clock time in the shop's timezone (naive)."""
    tz = ZoneInfo(get_settings().shop_timezone)
    return datetime.now(tz).replace(tzinfo=None)

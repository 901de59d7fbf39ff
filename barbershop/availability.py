# barbershop/availability.py
"""
Slot availability resolver.

Combines, for one barber and one day:
1) the roster assignment (no roster, expired roster or day off => nothing),
2) the shop slot grid clipped to the shift,
3) the barber's hidden hours,
4) confirmed/completed bookings,
5) for today, slots that already started (plus SAME_DAY_LEAD_MINUTES).

Read-only and uncached: every call queries the store, so admission can use it
as the freshness check right before inserting.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlmodel import Session

from .bookings import occupied_slots
from .config import get_settings
from .errors import ValidationError
from .models import Barber
from .overrides import get_hidden_hours
from .rosters import find_assignment
from .slots import candidate_slots, format_slot, local_now


def get_available_slots(
    session: Session,
    barber_id: int,
    day: date,
    now: Optional[datetime] = None,
) -> List[str]:
    barber = session.get(Barber, barber_id)
    if barber is None or not barber.active:
        raise ValidationError("Unknown barber", {"barberId": barber_id})

    now = now or local_now()
    if day < now.date():
        return []

    assignment = find_assignment(session, barber_id, day)
    if assignment is None or assignment.is_day_off:
        return []

    hidden = set(get_hidden_hours(session, barber_id))
    taken = occupied_slots(session, barber_id, day)

    earliest = None
    if day == now.date():
        earliest = now + timedelta(minutes=get_settings().same_day_lead_minutes)

    available = []
    for start in candidate_slots(assignment.start_time, assignment.end_time):
        label = format_slot(start)
        if label in hidden or label in taken:
            continue
        if earliest is not None and datetime.combine(day, start) < earliest:
            continue
        available.append(label)
    return available

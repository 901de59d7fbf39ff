# barbershop/overrides.py
"""Barber-owned hidden hours: slots a barber removes from every rostered day."""

import logging
from typing import Iterable, List

from sqlmodel import Session, select

from .deps import acts_for_barber
from .errors import AuthorizationError, NotFoundError, ValidationError
from .models import Barber, HiddenHour
from .slots import format_slot, on_grid, parse_slot

logger = logging.getLogger(__name__)


def get_hidden_hours(session: Session, barber_id: int) -> List[str]:
    rows = session.exec(
        select(HiddenHour.time_slot).where(HiddenHour.barber_id == barber_id)
    ).all()
    return [format_slot(t) for t in sorted(parse_slot(s) for s in rows)]


def set_hidden_hours(session: Session, actor, barber_id: int, slots: Iterable[str]) -> List[str]:
    """Replace the barber's hidden-hours set. Barber themself or an admin only."""
    if session.get(Barber, barber_id) is None:
        raise NotFoundError("Barber not found", {"barberId": barber_id})
    if not acts_for_barber(session, actor, barber_id):
        raise AuthorizationError("Only the barber or an admin can change hidden hours")

    wanted = set()
    for raw in slots:
        parsed = parse_slot(raw)
        if not on_grid(parsed):
            raise ValidationError("Hidden hour is not a bookable slot", {"timeSlot": raw})
        wanted.add(parsed)

    existing = session.exec(
        select(HiddenHour).where(HiddenHour.barber_id == barber_id)
    ).all()
    for row in existing:
        session.delete(row)
    session.flush()

    for t in sorted(wanted):
        session.add(HiddenHour(barber_id=barber_id, time_slot=format_slot(t)))
    session.commit()

    result = [format_slot(t) for t in sorted(wanted)]
    logger.info("Hidden hours for barber %s set to %s by user %s", barber_id, result, actor.user_id)
    return result

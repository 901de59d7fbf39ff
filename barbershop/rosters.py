# barbershop/rosters.py
"""
Roster store.

Admins publish weekly shift rosters; a roster is immutable once published and
expires after its end_date. The resolver only ever asks one question of this
module: which assignment covers (barber, day)?
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlmodel import Session, select

from .deps import require_role
from .errors import NotFoundError, ValidationError
from .models import Barber, Role, Roster, RosterAssignment, utcnow

logger = logging.getLogger(__name__)


def roster_status(roster: Roster, today: date) -> str:
    return "expired" if today > roster.end_date else "active"


def publish_roster(
    session: Session,
    actor,
    name: str,
    start_date: date,
    end_date: date,
    assignments: Iterable,
) -> Roster:
    require_role(actor, Role.admin.value)

    name = (name or "").strip()
    if not name:
        raise ValidationError("Roster name is required")
    if start_date > end_date:
        raise ValidationError("start_date cannot be after end_date")

    assignments = list(assignments)
    barber_ids = {a.barber_id for a in assignments}
    known = set(session.exec(select(Barber.id).where(Barber.id.in_(barber_ids))).all()) if barber_ids else set()
    unknown = barber_ids - known
    if unknown:
        raise ValidationError("Unknown barber in roster", {"barberIds": sorted(unknown)})

    seen = set()
    for a in assignments:
        if not (start_date <= a.date <= end_date):
            raise ValidationError(
                "Assignment date outside roster range",
                {"barberId": a.barber_id, "date": a.date.isoformat()},
            )
        key = (a.barber_id, a.date)
        if key in seen:
            raise ValidationError(
                "Duplicate assignment for barber and date",
                {"barberId": a.barber_id, "date": a.date.isoformat()},
            )
        seen.add(key)
        if not a.is_day_off:
            if a.start_time is None or a.end_time is None:
                raise ValidationError(
                    "Working assignments need start_time and end_time",
                    {"barberId": a.barber_id, "date": a.date.isoformat()},
                )
            if a.start_time >= a.end_time:
                raise ValidationError(
                    "start_time must be before end_time",
                    {"barberId": a.barber_id, "date": a.date.isoformat()},
                )

    roster = Roster(
        name=name,
        start_date=start_date,
        end_date=end_date,
        published_at=utcnow(),
        created_by=actor.user_id,
    )
    session.add(roster)
    session.flush()  # fills roster.id

    for a in assignments:
        session.add(RosterAssignment(
            roster_id=roster.id,
            barber_id=a.barber_id,
            date=a.date,
            start_time=None if a.is_day_off else a.start_time,
            end_time=None if a.is_day_off else a.end_time,
            is_day_off=a.is_day_off,
        ))

    session.commit()
    session.refresh(roster)
    logger.info(
        "Roster %s published (%s..%s, %d assignments)",
        roster.id, start_date, end_date, len(assignments),
    )
    return roster


def get_roster(session: Session, roster_id: int) -> Roster:
    roster = session.get(Roster, roster_id)
    if roster is None:
        raise NotFoundError("Roster not found", {"rosterId": roster_id})
    return roster


def get_assignments(session: Session, roster_id: int, barber_id: Optional[int] = None) -> List[RosterAssignment]:
    stmt = select(RosterAssignment).where(RosterAssignment.roster_id == roster_id)
    if barber_id is not None:
        stmt = stmt.where(RosterAssignment.barber_id == barber_id)
    return session.exec(stmt.order_by(RosterAssignment.date, RosterAssignment.barber_id)).all()


def list_rosters(
    session: Session,
    barber_id: Optional[int] = None,
    active_on: Optional[date] = None,
) -> List[Roster]:
    stmt = select(Roster)
    if barber_id is not None:
        stmt = stmt.where(
            Roster.id.in_(
                select(RosterAssignment.roster_id).where(RosterAssignment.barber_id == barber_id)
            )
        )
    if active_on is not None:
        stmt = stmt.where(Roster.end_date >= active_on)
    return session.exec(stmt.order_by(Roster.published_at.desc(), Roster.id.desc())).all()


def delete_roster(session: Session, actor, roster_id: int) -> None:
    require_role(actor, Role.admin.value)
    roster = get_roster(session, roster_id)

    for a in get_assignments(session, roster_id):
        session.delete(a)
    session.delete(roster)
    session.commit()
    logger.info("Roster %s deleted by user %s", roster_id, actor.user_id)


def find_assignment(session: Session, barber_id: int, day: date) -> Optional[RosterAssignment]:
    """Assignment for (barber, day) from the newest roster covering that day."""
    stmt = (
        select(RosterAssignment)
        .join(Roster, Roster.id == RosterAssignment.roster_id)
        .where(RosterAssignment.barber_id == barber_id)
        .where(RosterAssignment.date == day)
        .where(Roster.start_date <= day)
        .where(Roster.end_date >= day)
        .order_by(Roster.published_at.desc(), Roster.id.desc())
    )
    return session.exec(stmt).first()

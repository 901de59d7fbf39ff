# barbershop/routers/rosters_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import Roster
from barbershop.schemas import RosterCreate, RosterPublic, SuccessResponse
from barbershop.auth import Actor, get_current_actor
from barbershop.rosters import (
    delete_roster, get_assignments, get_roster, list_rosters, publish_roster, roster_status,
)
from barbershop.slots import local_now

router = APIRouter(
    prefix="/rosters",
    tags=["rosters"],
)


def _roster_out(session: Session, roster: Roster, barber_id: Optional[int] = None) -> dict:
    return {
        "id": roster.id,
        "name": roster.name,
        "start_date": roster.start_date,
        "end_date": roster.end_date,
        "published_at": roster.published_at,
        "status": roster_status(roster, local_now().date()),
        "assignments": get_assignments(session, roster.id, barber_id=barber_id),
    }


@router.post("", response_model=RosterPublic, status_code=201)
def create_roster(
    body: RosterCreate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    roster = publish_roster(
        session, actor, body.name, body.start_date, body.end_date, body.assignments,
    )
    return _roster_out(session, roster)


@router.get("", response_model=List[RosterPublic])
def read_rosters(
    barber_id: Optional[int] = Query(None, alias="barberId"),
    active_only: bool = Query(False, alias="activeOnly"),
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    active_on = local_now().date() if active_only else None
    rosters = list_rosters(session, barber_id=barber_id, active_on=active_on)
    return [_roster_out(session, r, barber_id=barber_id) for r in rosters]


@router.get("/{roster_id}", response_model=RosterPublic)
def read_roster(
    roster_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    return _roster_out(session, get_roster(session, roster_id))


@router.delete("/{roster_id}", response_model=SuccessResponse)
def remove_roster(
    roster_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    delete_roster(session, actor, roster_id)
    return {"success": True}

# barbershop/routers/barbers_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Barber, User, Role
from barbershop.schemas import (
    BarberCreate, BarberPublic, BookingPublic, HiddenHoursPublic, HiddenHoursUpdate,
)
from barbershop.auth import Actor, get_current_actor
from barbershop.deps import barber_for_actor, require_role
from barbershop.errors import NotFoundError, ValidationError
from barbershop.availability import get_available_slots
from barbershop.bookings import list_barber_bookings
from barbershop.overrides import get_hidden_hours, set_hidden_hours

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


@router.get("", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return session.exec(
        select(Barber).where(Barber.active == True).order_by(Barber.id)  # noqa: E712
    ).all()


@router.post("", response_model=BarberPublic, status_code=201)
def create_barber(
    barber: BarberCreate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    require_role(actor, Role.admin.value)

    user = session.get(User, barber.user_id)
    if user is None:
        raise ValidationError("Unknown user", {"userId": barber.user_id})
    if user.role != Role.barber.value:
        raise ValidationError("User must have the barber role", {"userId": barber.user_id})

    existing = session.exec(
        select(Barber).where(Barber.user_id == barber.user_id)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Barber profile already exists for that user")

    db_barber = Barber(user_id=barber.user_id, name=barber.name.strip())
    session.add(db_barber)
    session.commit()
    session.refresh(db_barber)
    return db_barber


@router.get("/me/bookings", response_model=List[BookingPublic])
def list_my_barber_bookings(
    on_date: Optional[date] = Query(None, alias="date"),
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    barber = barber_for_actor(session, actor)
    return list_barber_bookings(session, barber.id, day=on_date, status=status)


@router.get("/{barber_id}/availability", response_model=List[str])
def barber_availability(
    barber_id: int,
    date: date,
    session: Session = Depends(get_session),
):
    return get_available_slots(session, barber_id, date)


@router.get("/{barber_id}/hidden-hours", response_model=HiddenHoursPublic)
def read_hidden_hours(
    barber_id: int,
    session: Session = Depends(get_session),
):
    if session.get(Barber, barber_id) is None:
        raise NotFoundError("Barber not found", {"barberId": barber_id})
    return {"barber_id": barber_id, "hidden_slots": get_hidden_hours(session, barber_id)}


@router.put("/{barber_id}/hidden-hours", response_model=HiddenHoursPublic)
def update_hidden_hours(
    barber_id: int,
    body: HiddenHoursUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    slots = set_hidden_hours(session, actor, barber_id, body.hidden_slots)
    return {"barber_id": barber_id, "hidden_slots": slots}

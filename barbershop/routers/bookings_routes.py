# barbershop/routers/bookings_routes.py

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import Role
from barbershop.schemas import (
    BookingAction, BookingCreate, BookingPublic, CancelRequest, SuccessResponse,
)
from barbershop.auth import Actor, get_current_actor
from barbershop.deps import acts_for_barber, require_role
from barbershop.errors import AuthorizationError
from barbershop.admission import create_booking
from barbershop.bookings import get_booking, list_customer_bookings
from barbershop.cancellation import cancel_booking, complete_booking, mark_no_show
from barbershop import notifications

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


@router.post("", response_model=BookingPublic, status_code=201)
def book(
    body: BookingCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    booking = create_booking(
        session,
        actor,
        barber_id=body.barber_id,
        day=body.date,
        time_slot=body.time_slot,
        service_ids=body.service_ids,
        reward_context=body.reward_context,
    )
    background_tasks.add_task(
        notifications.dispatch, notifications.BOOKING_CONFIRMED, notifications.payload_for(booking)
    )
    return booking


@router.get("/me", response_model=List[BookingPublic])
def my_bookings(
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    require_role(actor, Role.customer.value)
    return list_customer_bookings(session, actor.user_id, status=status)


@router.get("/{booking_id}", response_model=BookingPublic)
def read_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    booking = get_booking(session, booking_id)
    if booking.customer_id != actor.user_id and not acts_for_barber(session, actor, booking.barber_id):
        raise AuthorizationError("Forbidden", {"bookingId": booking_id})
    return booking


@router.post("/cancel", response_model=SuccessResponse)
def cancel(
    body: CancelRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    booking = cancel_booking(session, actor, body.booking_id, reason=body.reason)
    background_tasks.add_task(
        notifications.dispatch, notifications.BOOKING_CANCELLED, notifications.payload_for(booking)
    )
    return {"success": True}


@router.post("/complete", response_model=SuccessResponse)
def complete(
    body: BookingAction,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    booking = complete_booking(session, actor, body.booking_id)
    background_tasks.add_task(
        notifications.dispatch, notifications.BOOKING_COMPLETED, notifications.payload_for(booking)
    )
    return {"success": True}


@router.post("/no-show", response_model=SuccessResponse)
def no_show(
    body: BookingAction,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    booking = mark_no_show(session, actor, body.booking_id)
    background_tasks.add_task(
        notifications.dispatch, notifications.BOOKING_NO_SHOW, notifications.payload_for(booking)
    )
    return {"success": True}

# barbershop/bookings.py
"""Booking store: reads are always fresh queries; status changes are conditional updates."""

from datetime import date
from typing import List, Optional, Set

from sqlalchemy import update
from sqlmodel import Session, select

from .errors import NotFoundError
from .models import ACTIVE_STATUSES, Booking, BookingStatus, utcnow


def occupied_slots(session: Session, barber_id: int, day: date) -> Set[str]:
    rows = session.exec(
        select(Booking.time_slot)
        .where(Booking.barber_id == barber_id)
        .where(Booking.date == day)
        .where(Booking.status.in_(ACTIVE_STATUSES))
    ).all()
    return set(rows)


def get_booking(session: Session, booking_id: int) -> Booking:
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found", {"bookingId": booking_id})
    return booking


def list_customer_bookings(session: Session, customer_id: int, status: Optional[str] = None) -> List[Booking]:
    stmt = select(Booking).where(Booking.customer_id == customer_id)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
    return session.exec(stmt.order_by(Booking.date, Booking.id)).all()


def list_barber_bookings(
    session: Session,
    barber_id: int,
    day: Optional[date] = None,
    status: Optional[str] = None,
) -> List[Booking]:
    stmt = select(Booking).where(Booking.barber_id == barber_id)
    if day is not None:
        stmt = stmt.where(Booking.date == day)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
    return session.exec(stmt.order_by(Booking.date, Booking.id)).all()


def transition(session: Session, booking_id: int, to_status: str, **fields) -> bool:
    """
    Move a confirmed booking to `to_status` in a single conditional UPDATE.

    Returns True only for the caller whose update matched, so concurrent
    retries of the same transition apply their side effects once. Does not
    commit.
    """
    result = session.exec(
        update(Booking)
        .where(Booking.id == booking_id)
        .where(Booking.status == BookingStatus.confirmed.value)
        .values(status=to_status, updated_at=utcnow(), **fields)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1

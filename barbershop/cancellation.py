# barbershop/cancellation.py
"""
Booking state transitions: cancel, complete, no-show.

All three leave `confirmed` through bookings.transition(), a conditional
update, so only one caller ever wins a transition and ledger side effects are
applied once. Repeating the transition a booking already went through is a
no-op success; any other move out of a terminal state is rejected.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session

from .bookings import get_booking, transition
from .catalog import loyalty_points_for
from .config import get_settings
from .deps import acts_for_barber
from .errors import AuthorizationError, InvalidTransitionError
from .loyalty import apply_penalty, credit, get_loyalty_settings, record_visit
from .models import Booking, BookingStatus, Role
from .slots import local_now, slot_start

logger = logging.getLogger(__name__)


def _check_terminal(booking: Booking, target: str) -> bool:
    """True when `booking` already sits in `target` (idempotent repeat)."""
    if booking.status == target:
        return True
    if booking.status != BookingStatus.confirmed.value:
        raise InvalidTransitionError(
            f"Cannot move a {booking.status} booking to {target}",
            {"bookingId": booking.id, "status": booking.status, "target": target},
        )
    return False


def _lost_race(session: Session, booking_id: int, target: str) -> None:
    # Someone else moved the booking between our read and our update.
    session.rollback()
    booking = get_booking(session, booking_id)
    session.refresh(booking)
    _check_terminal(booking, target)


def _require_staff(session: Session, actor, booking: Booking) -> None:
    if not acts_for_barber(session, actor, booking.barber_id):
        raise AuthorizationError(
            "Only the booking's barber or an admin can do this",
            {"bookingId": booking.id},
        )


def _require_started(booking: Booking, now: datetime, target: str) -> None:
    if now < slot_start(booking.date, booking.time_slot):
        raise InvalidTransitionError(
            f"Booking cannot be marked {target} before it starts",
            {"bookingId": booking.id, "date": booking.date.isoformat(), "timeSlot": booking.time_slot},
        )


def cancel_booking(
    session: Session,
    actor,
    booking_id: int,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Booking:
    booking = get_booking(session, booking_id)
    target = BookingStatus.cancelled.value

    is_owner = actor.role == Role.customer.value and booking.customer_id == actor.user_id
    by_staff = acts_for_barber(session, actor, booking.barber_id)
    if not (is_owner or by_staff):
        raise AuthorizationError("Forbidden", {"bookingId": booking_id})

    if _check_terminal(booking, target):
        return booking

    now = now or local_now()
    if not transition(session, booking_id, target, cancel_reason=reason, cancelled_by=actor.user_id):
        _lost_race(session, booking_id, target)
        return get_booking(session, booking_id)

    if by_staff and not is_owner:
        cutoff = timedelta(minutes=get_settings().late_cancellation_cutoff_minutes)
        if now >= slot_start(booking.date, booking.time_slot) - cutoff:
            penalty = get_loyalty_settings(session).late_cancellation_penalty
            apply_penalty(session, booking.customer_id, penalty, "Late cancellation", booking_id)

    if booking.is_reward_booking and booking.points_redeemed:
        credit(
            session, booking.customer_id, booking.points_redeemed,
            f"Refunded {booking.points_redeemed} points for cancelled reward booking",
            booking_id,
        )

    session.commit()
    session.refresh(booking)
    logger.info(
        "Booking %s cancelled by user %s (%s)%s",
        booking_id, actor.user_id, actor.role, f": {reason}" if reason else "",
    )
    return booking


def complete_booking(
    session: Session,
    actor,
    booking_id: int,
    now: Optional[datetime] = None,
) -> Booking:
    booking = get_booking(session, booking_id)
    target = BookingStatus.completed.value
    _require_staff(session, actor, booking)

    if _check_terminal(booking, target):
        return booking
    _require_started(booking, now or local_now(), target)

    if not transition(session, booking_id, target):
        _lost_race(session, booking_id, target)
        return get_booking(session, booking_id)

    # reward bookings count as a visit but earn nothing
    base_points = 0 if booking.is_reward_booking else loyalty_points_for(session, booking.service_ids)
    record_visit(session, booking.customer_id, base_points, booking_id)
    session.commit()
    session.refresh(booking)
    logger.info("Booking %s completed by user %s", booking_id, actor.user_id)
    return booking


def mark_no_show(
    session: Session,
    actor,
    booking_id: int,
    now: Optional[datetime] = None,
) -> Booking:
    booking = get_booking(session, booking_id)
    target = BookingStatus.no_show.value
    _require_staff(session, actor, booking)

    if _check_terminal(booking, target):
        return booking
    _require_started(booking, now or local_now(), target)

    if not transition(session, booking_id, target):
        _lost_race(session, booking_id, target)
        return get_booking(session, booking_id)

    penalty = get_loyalty_settings(session).no_show_penalty
    apply_penalty(session, booking.customer_id, penalty, "No-show", booking_id)
    session.commit()
    session.refresh(booking)
    logger.info("Booking %s marked no-show by user %s", booking_id, actor.user_id)
    return booking

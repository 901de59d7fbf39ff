# barbershop/admission.py
"""
Booking admission.

Validation runs in a fixed order, each step with its own failure kind:
1) well-formed request (ValidationError),
2) slot re-resolved against the store right now (SlotUnavailableError),
3) reward bookings: redeemable service and enough points (InsufficientPointsError),
4) one transaction: insert the booking, debit the points. The partial unique
   index on (barber_id, date, time_slot) decides concurrent winners; the
   loser gets ConflictError and nothing of its transaction survives.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from .availability import get_available_slots
from .catalog import load_services
from .deps import require_role
from .errors import (
    ConflictError, InsufficientPointsError, SchedulingError, SlotUnavailableError, ValidationError,
)
from .loyalty import debit, ensure_account
from .models import Barber, Booking, BookingStatus, Role
from .slots import local_now, normalize_slot, on_grid, parse_slot

logger = logging.getLogger(__name__)


def create_booking(
    session: Session,
    actor,
    barber_id: int,
    day: date,
    time_slot: str,
    service_ids: List[int],
    reward_context=None,
    now: Optional[datetime] = None,
) -> Booking:
    require_role(actor, Role.customer.value)
    now = now or local_now()

    # 1) Validate request
    barber = session.get(Barber, barber_id)
    if barber is None or not barber.active:
        raise ValidationError("Unknown barber", {"barberId": barber_id})
    if day < now.date():
        raise ValidationError("Cannot book an appointment in the past", {"date": day.isoformat()})
    slot = normalize_slot(time_slot)
    if not on_grid(parse_slot(slot)):
        raise ValidationError("Time slot is not on the booking grid", {"timeSlot": time_slot})
    services = load_services(session, service_ids)

    # 2) Re-resolve the slot now, never trust the client's snapshot
    if slot not in get_available_slots(session, barber_id, day, now=now):
        raise SlotUnavailableError(
            "Selected time slot is no longer available",
            {"barberId": barber_id, "date": day.isoformat(), "timeSlot": slot},
        )

    # 3) Reward bookings
    reward_service = None
    points_cost = 0
    if reward_context is not None:
        reward_service = next((s for s in services if s.id == reward_context.service_id), None)
        if reward_service is None:
            raise ValidationError(
                "Reward service must be one of the booked services",
                {"serviceId": reward_context.service_id},
            )
        if not reward_service.is_redeemable:
            raise ValidationError("Service cannot be redeemed with points", {"serviceId": reward_service.id})
        points_cost = reward_service.redemption_points
        balance = ensure_account(session, actor.user_id).redeemable_points
        if balance < points_cost:
            session.rollback()
            raise InsufficientPointsError(points_cost, balance)

    total_price = sum(s.price for s in services if s is not reward_service)

    # 4) Commit atomically
    booking = Booking(
        barber_id=barber_id,
        customer_id=actor.user_id,
        date=day,
        time_slot=slot,
        service_ids=[s.id for s in services],
        total_price=total_price,
        status=BookingStatus.confirmed.value,
        is_reward_booking=reward_service is not None,
        points_redeemed=points_cost,
    )
    session.add(booking)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        logger.warning(
            "Lost slot race for barber %s on %s at %s (customer %s)",
            barber_id, day, slot, actor.user_id,
        )
        raise ConflictError(
            "Another booking already holds that time slot",
            {"barberId": barber_id, "date": day.isoformat(), "timeSlot": slot},
        )

    try:
        if points_cost:
            debit(session, actor.user_id, points_cost, booking_id=booking.id)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning("Commit conflict for barber %s on %s at %s", barber_id, day, slot)
        raise ConflictError(
            "Another booking already holds that time slot",
            {"barberId": barber_id, "date": day.isoformat(), "timeSlot": slot},
        )
    except SchedulingError:
        session.rollback()
        raise

    session.refresh(booking)
    logger.info(
        "Booking %s confirmed: customer %s, barber %s, %s %s%s",
        booking.id, actor.user_id, barber_id, day, slot,
        f" (reward, {points_cost} points)" if points_cost else "",
    )
    return booking

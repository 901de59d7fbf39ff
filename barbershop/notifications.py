# barbershop/notifications.py
"""
Best-effort booking notifications.

Dispatch runs as a FastAPI background task after the booking transaction has
committed, so a failing channel can never undo a booking. Delivery channels
(push, email, SMS) plug in through register_channel(); by default the event is
only written to the log.
"""

import logging
from typing import Callable, Dict, List

from .models import Booking

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
BOOKING_CANCELLED = "BOOKING_CANCELLED"
BOOKING_COMPLETED = "BOOKING_COMPLETED"
BOOKING_NO_SHOW = "BOOKING_NO_SHOW"

_MESSAGES = {
    BOOKING_CONFIRMED: "Booking #{id} confirmed for {date} at {time_slot}.",
    BOOKING_CANCELLED: "Booking #{id} for {date} at {time_slot} was cancelled.",
    BOOKING_COMPLETED: "Booking #{id} on {date} at {time_slot} is complete.",
    BOOKING_NO_SHOW: "Booking #{id} on {date} at {time_slot} was marked as a no-show.",
}

_channels: List[Callable[[str, Dict], None]] = []


def register_channel(channel: Callable[[str, Dict], None]) -> None:
    _channels.append(channel)


def clear_channels() -> None:
    _channels.clear()


def payload_for(booking: Booking) -> Dict:
    return {
        "id": booking.id,
        "barber_id": booking.barber_id,
        "customer_id": booking.customer_id,
        "date": booking.date.isoformat(),
        "time_slot": booking.time_slot,
        "status": booking.status,
    }


def dispatch(event: str, payload: Dict) -> None:
    message = _MESSAGES.get(event, event).format(**payload)
    logger.info("[%s] %s", event, message)

    for channel in list(_channels):
        try:
            channel(event, payload)
        except Exception:
            logger.exception("Notification channel %r failed for %s (booking %s)",
                             channel, event, payload.get("id"))

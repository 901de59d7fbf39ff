# barbershop/catalog.py

import logging
from typing import List, Sequence

from sqlmodel import Session, select

from .deps import require_role
from .errors import ValidationError
from .models import Role, Service

logger = logging.getLogger(__name__)


def list_services(session: Session, include_inactive: bool = False) -> List[Service]:
    stmt = select(Service)
    if not include_inactive:
        stmt = stmt.where(Service.active == True)  # noqa: E712
    return session.exec(stmt.order_by(Service.id)).all()


def load_services(session: Session, service_ids: Sequence[int]) -> List[Service]:
    """Services for a booking, in request order. Every id must be known and active."""
    if not service_ids:
        raise ValidationError("At least one service is required")
    if len(set(service_ids)) != len(service_ids):
        raise ValidationError("serviceIds cannot contain duplicates", {"serviceIds": list(service_ids)})

    found = {
        s.id: s
        for s in session.exec(select(Service).where(Service.id.in_(service_ids))).all()
    }
    missing = [sid for sid in service_ids if sid not in found or not found[sid].active]
    if missing:
        raise ValidationError("Service not available", {"serviceIds": missing})
    return [found[sid] for sid in service_ids]


def loyalty_points_for(session: Session, service_ids: Sequence[int]) -> int:
    """Base loyalty points of the booked services, inactive ones included."""
    if not service_ids:
        return 0
    points = session.exec(
        select(Service.loyalty_points).where(Service.id.in_(service_ids))
    ).all()
    return sum(points)


def create_service(session: Session, actor, **fields) -> Service:
    require_role(actor, Role.admin.value)

    if not (fields.get("name") or "").strip():
        raise ValidationError("Service name is required")
    if fields.get("price", 0) < 0:
        raise ValidationError("price cannot be negative")
    if fields.get("duration", 60) <= 0:
        raise ValidationError("duration must be positive")
    if fields.get("is_redeemable") and fields.get("redemption_points", 0) <= 0:
        raise ValidationError("Redeemable services need positive redemption_points")

    service = Service(**fields)
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("Service %s (%s) created", service.id, service.name)
    return service

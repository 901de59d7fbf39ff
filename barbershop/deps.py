# barbershop/deps.py

from sqlmodel import Session, select

from .errors import AuthorizationError, NotFoundError
from .models import Barber, Role


def require_role(actor, *roles: str):
    if actor.role not in roles:
        raise AuthorizationError(
            "Forbidden",
            {"role": actor.role, "required": list(roles)},
        )


def is_admin(actor) -> bool:
    return actor.role == Role.admin.value


def barber_for_actor(session: Session, actor) -> Barber:
    """The barber profile owned by a barber actor."""
    require_role(actor, Role.barber.value)
    barber = session.exec(
        select(Barber).where(Barber.user_id == actor.user_id)
    ).first()
    if barber is None:
        raise NotFoundError("Barber profile not found for user")
    return barber


def acts_for_barber(session: Session, actor, barber_id: int) -> bool:
    """Admins act for every barber; a barber only for their own profile."""
    if is_admin(actor):
        return True
    if actor.role != Role.barber.value:
        return False
    barber = session.exec(
        select(Barber).where(Barber.user_id == actor.user_id)
    ).first()
    return barber is not None and barber.id == barber_id

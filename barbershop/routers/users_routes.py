# barbershop/routers/users_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User, Role
from barbershop.schemas import UserCreate, UserPublic, UserRole
from barbershop.auth import Actor, get_current_actor, hash_password
from barbershop.errors import AuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)

optional_oauth2 = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


@router.get("/me", response_model=UserPublic)
def me(actor: Actor = Depends(get_current_actor)):
    return {
        "id": actor.user_id,
        "email": actor.email,
        "role": actor.role,
    }


def _optional_actor(
    token: Optional[str] = Depends(optional_oauth2),
    session: Session = Depends(get_session),
) -> Optional[Actor]:
    if token is None:
        return None
    return get_current_actor(token=token, session=session)


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
    actor: Optional[Actor] = Depends(_optional_actor),
):
    # 1) Staff accounts are created by an admin; the very first admin bootstraps the shop
    if user.role != UserRole.customer:
        has_admin = session.exec(
            select(User).where(User.role == Role.admin.value)
        ).first() is not None
        bootstrapping = user.role == UserRole.admin and not has_admin
        if not bootstrapping and (actor is None or actor.role != Role.admin.value):
            raise AuthorizationError("Only an admin can create barber or admin accounts")

    # 2) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 3) Create user in DB
    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("User %s registered as %s", db_user.id, db_user.role)

    return {
        "id": db_user.id,
        "email": db_user.email,
        "role": db_user.role,
    }

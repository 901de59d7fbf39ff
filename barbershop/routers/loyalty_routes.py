# barbershop/routers/loyalty_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import Role
from barbershop.schemas import (
    LoyaltyAccountPublic, LoyaltySettingsPublic, LoyaltySettingsUpdate, LoyaltyTransactionPublic,
)
from barbershop.auth import Actor, get_current_actor
from barbershop.deps import require_role
from barbershop.loyalty import (
    get_account, get_loyalty_settings, list_transactions, update_loyalty_settings,
)

router = APIRouter(
    prefix="/loyalty",
    tags=["loyalty"],
)


@router.get("/me", response_model=LoyaltyAccountPublic)
def my_account(
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    require_role(actor, Role.customer.value)
    return get_account(session, actor.user_id)


@router.get("/me/transactions", response_model=List[LoyaltyTransactionPublic])
def my_transactions(
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    require_role(actor, Role.customer.value)
    return list_transactions(session, actor.user_id)


@router.get("/settings", response_model=LoyaltySettingsPublic)
def read_settings(
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    settings = get_loyalty_settings(session)
    session.commit()
    session.refresh(settings)
    return settings


@router.put("/settings", response_model=LoyaltySettingsPublic)
def write_settings(
    body: LoyaltySettingsUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    return update_loyalty_settings(session, actor, **body.model_dump())

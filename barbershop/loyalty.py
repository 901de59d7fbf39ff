# barbershop/loyalty.py
"""
Loyalty ledger.

The only module that writes LoyaltyAccount. Every balance change is a single
conditional UPDATE evaluated by the database (no read-modify-write), and
every movement is appended to loyalty_transactions. None of the ledger
operations commit: they run inside the caller's booking transaction.
"""

import logging
from typing import List, Optional

from sqlalchemy import case, update
from sqlmodel import Session, select

from .deps import require_role
from .errors import InsufficientPointsError, ValidationError
from .models import (
    LedgerKind, LoyaltyAccount, LoyaltySettings, LoyaltyTransaction, Role, Tier, utcnow,
)

logger = logging.getLogger(__name__)

TIER_ORDER = [Tier.silver.value, Tier.gold.value, Tier.platinum.value]

SETTINGS_FIELDS = (
    "service_rate_silver",
    "service_rate_gold",
    "service_rate_platinum",
    "gold_threshold",
    "platinum_threshold",
    "late_cancellation_penalty",
    "no_show_penalty",
)


def get_loyalty_settings(session: Session) -> LoyaltySettings:
    settings = session.get(LoyaltySettings, "default")
    if settings is None:
        settings = LoyaltySettings(id="default")
        session.add(settings)
        session.flush()
    return settings


def update_loyalty_settings(session: Session, actor, **values) -> LoyaltySettings:
    require_role(actor, Role.admin.value)
    settings = get_loyalty_settings(session)

    for key, value in values.items():
        if key not in SETTINGS_FIELDS:
            raise ValidationError(f"Unknown loyalty setting: {key}")
        if value is None:
            continue
        if value < 0:
            raise ValidationError(f"{key} cannot be negative", {key: value})
        setattr(settings, key, value)

    if settings.gold_threshold >= settings.platinum_threshold:
        raise ValidationError("gold_threshold must be lower than platinum_threshold")

    settings.updated_at = utcnow()
    session.add(settings)
    session.commit()
    session.refresh(settings)
    logger.info("Loyalty settings updated by user %s", actor.user_id)
    return settings


def tier_for_visits(visits: int, settings: LoyaltySettings) -> str:
    if visits >= settings.platinum_threshold:
        return Tier.platinum.value
    if visits >= settings.gold_threshold:
        return Tier.gold.value
    return Tier.silver.value


def rate_for_tier(tier: str, settings: LoyaltySettings) -> float:
    if tier == Tier.platinum.value:
        return settings.service_rate_platinum
    if tier == Tier.gold.value:
        return settings.service_rate_gold
    return settings.service_rate_silver


def ensure_account(session: Session, customer_id: int) -> LoyaltyAccount:
    account = session.get(LoyaltyAccount, customer_id)
    if account is None:
        account = LoyaltyAccount(customer_id=customer_id)
        session.add(account)
        session.flush()
    return account


def get_account(session: Session, customer_id: int) -> LoyaltyAccount:
    account = ensure_account(session, customer_id)
    session.commit()
    session.refresh(account)
    return account


def list_transactions(session: Session, customer_id: int) -> List[LoyaltyTransaction]:
    return session.exec(
        select(LoyaltyTransaction)
        .where(LoyaltyTransaction.customer_id == customer_id)
        .order_by(LoyaltyTransaction.created_at.desc(), LoyaltyTransaction.id.desc())
    ).all()


def _record(session, customer_id, kind, points, description, booking_id=None):
    session.add(LoyaltyTransaction(
        customer_id=customer_id,
        booking_id=booking_id,
        kind=kind.value,
        points=points,
        description=description,
    ))


def debit(session: Session, customer_id: int, points: int, booking_id: Optional[int] = None) -> LoyaltyAccount:
    """Redeem points. Raises InsufficientPointsError rather than going below zero."""
    account = ensure_account(session, customer_id)
    if points <= 0:
        return account

    result = session.exec(
        update(LoyaltyAccount)
        .where(LoyaltyAccount.customer_id == customer_id)
        .where(LoyaltyAccount.redeemable_points >= points)
        .values(redeemable_points=LoyaltyAccount.redeemable_points - points)
        .execution_options(synchronize_session=False)
    )
    session.refresh(account)
    if result.rowcount != 1:
        raise InsufficientPointsError(points, account.redeemable_points)

    _record(session, customer_id, LedgerKind.redeemed, -points,
            f"Redeemed {points} points for a reward booking", booking_id)
    logger.info("Debited %d points from customer %s (balance %d)",
                points, customer_id, account.redeemable_points)
    return account


def credit(session: Session, customer_id: int, points: int, description: str,
           booking_id: Optional[int] = None) -> LoyaltyAccount:
    account = ensure_account(session, customer_id)
    if points <= 0:
        return account

    session.exec(
        update(LoyaltyAccount)
        .where(LoyaltyAccount.customer_id == customer_id)
        .values(redeemable_points=LoyaltyAccount.redeemable_points + points)
        .execution_options(synchronize_session=False)
    )
    session.refresh(account)
    _record(session, customer_id, LedgerKind.earned, points, description, booking_id)
    logger.info("Credited %d points to customer %s (balance %d)",
                points, customer_id, account.redeemable_points)
    return account


def apply_penalty(session: Session, customer_id: int, points: int, reason: str,
                  booking_id: Optional[int] = None) -> int:
    """Deduct up to `points`, flooring the balance at zero. Returns the amount deducted."""
    account = ensure_account(session, customer_id)
    if points <= 0:
        return 0

    session.refresh(account)
    before = account.redeemable_points
    session.exec(
        update(LoyaltyAccount)
        .where(LoyaltyAccount.customer_id == customer_id)
        .values(redeemable_points=case(
            (LoyaltyAccount.redeemable_points > points, LoyaltyAccount.redeemable_points - points),
            else_=0,
        ))
        .execution_options(synchronize_session=False)
    )
    session.refresh(account)
    deducted = min(points, before)

    _record(session, customer_id, LedgerKind.penalty, -deducted,
            f"{reason} penalty: {points} points (deducted {deducted})", booking_id)
    logger.info("Penalty '%s' on customer %s: %d requested, %d deducted",
                reason, customer_id, points, deducted)
    return deducted


def record_visit(session: Session, customer_id: int, base_points: int,
                 booking_id: Optional[int] = None) -> LoyaltyAccount:
    """
    Count a completed visit and issue points.

    `base_points` is the sum of the booked services' loyalty_points (zero for
    a reward booking). It is multiplied by the rate of the tier held *before*
    this visit; the tier is re-derived from the new visit count afterwards, so
    a visit that crosses a threshold is still paid at the old rate.
    """
    settings = get_loyalty_settings(session)
    account = ensure_account(session, customer_id)
    session.refresh(account)
    tier_before = account.status_tier
    earned = int(max(base_points, 0) * rate_for_tier(tier_before, settings))

    session.exec(
        update(LoyaltyAccount)
        .where(LoyaltyAccount.customer_id == customer_id)
        .values(
            total_confirmed_visits=LoyaltyAccount.total_confirmed_visits + 1,
            redeemable_points=LoyaltyAccount.redeemable_points + earned,
        )
        .execution_options(synchronize_session=False)
    )
    session.refresh(account)
    if earned:
        _record(session, customer_id, LedgerKind.earned, earned,
                f"Earned {earned} points for a completed booking ({tier_before} tier)", booking_id)

    new_tier = tier_for_visits(account.total_confirmed_visits, settings)
    if TIER_ORDER.index(new_tier) > TIER_ORDER.index(tier_before):
        session.exec(
            update(LoyaltyAccount)
            .where(LoyaltyAccount.customer_id == customer_id)
            .values(status_tier=new_tier)
            .execution_options(synchronize_session=False)
        )
        session.refresh(account)
        _record(session, customer_id, LedgerKind.tier_upgrade, 0,
                f"Upgraded to {new_tier} after {account.total_confirmed_visits} visits", booking_id)
        logger.info("Customer %s upgraded %s -> %s", customer_id, tier_before, new_tier)

    return account

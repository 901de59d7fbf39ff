import pytest
from sqlmodel import select

from barbershop.errors import AuthorizationError, InsufficientPointsError, ValidationError
from barbershop.loyalty import (
    apply_penalty, credit, debit, ensure_account, get_account, get_loyalty_settings,
    list_transactions, record_visit, tier_for_visits, update_loyalty_settings,
)
from barbershop.models import LoyaltyAccount, LoyaltySettings


def test_new_account_defaults(session, customer):
    account = get_account(session, customer.id)

    assert account.redeemable_points == 0
    assert account.status_tier == "Silver"
    assert account.total_confirmed_visits == 0


def test_default_settings(session):
    settings = get_loyalty_settings(session)

    assert settings.service_rate_silver == 5.0
    assert settings.service_rate_gold == 10.0
    assert settings.service_rate_platinum == 15.0
    assert settings.gold_threshold == 100
    assert settings.platinum_threshold == 200
    assert settings.late_cancellation_penalty == 500
    assert settings.no_show_penalty == 1000


@pytest.mark.parametrize(
    "visits, tier",
    [(0, "Silver"), (99, "Silver"), (100, "Gold"), (199, "Gold"), (200, "Platinum"), (500, "Platinum")],
)
def test_tier_for_visits(session, visits, tier):
    assert tier_for_visits(visits, get_loyalty_settings(session)) == tier


def test_debit_never_goes_negative(session, customer, give_points):
    give_points(customer, 50)

    with pytest.raises(InsufficientPointsError) as exc_info:
        debit(session, customer.id, 80)

    assert exc_info.value.shortfall == 30
    session.rollback()
    assert session.get(LoyaltyAccount, customer.id).redeemable_points == 50


def test_debit_and_credit(session, customer, give_points):
    give_points(customer, 100)

    debit(session, customer.id, 40)
    credit(session, customer.id, 15, "Goodwill")
    session.commit()

    assert session.get(LoyaltyAccount, customer.id).redeemable_points == 75
    kinds = sorted(t.kind for t in list_transactions(session, customer.id))
    assert kinds == ["EARNED", "REDEEMED"]


def test_apply_penalty_returns_amount_deducted(session, customer, give_points):
    give_points(customer, 700)

    assert apply_penalty(session, customer.id, 500, "Late cancellation") == 500
    assert apply_penalty(session, customer.id, 500, "Late cancellation") == 200
    assert apply_penalty(session, customer.id, 500, "Late cancellation") == 0
    session.commit()

    assert session.get(LoyaltyAccount, customer.id).redeemable_points == 0


def test_record_visit_upgrades_through_tiers(session, customer, give_points):
    give_points(customer, 0, visits=199, tier="Gold")

    account = record_visit(session, customer.id, 20)
    session.commit()

    assert account.status_tier == "Platinum"
    assert account.total_confirmed_visits == 200
    assert account.redeemable_points == 200  # earned at the Gold rate


def test_record_visit_never_downgrades(session, customer, give_points):
    give_points(customer, 0, visits=3, tier="Platinum")

    account = record_visit(session, customer.id, 10)

    assert account.status_tier == "Platinum"
    assert account.redeemable_points == 150


def test_record_visit_uses_current_settings(session, admin, customer, actor_for):
    update_loyalty_settings(session, actor_for(admin), service_rate_silver=2.5)

    account = record_visit(session, customer.id, 30)

    assert account.redeemable_points == 75


def test_update_settings_requires_admin(session, customer, actor_for):
    with pytest.raises(AuthorizationError):
        update_loyalty_settings(session, actor_for(customer), no_show_penalty=10)


def test_update_settings_ignores_missing_values(session, admin, actor_for):
    settings = update_loyalty_settings(
        session, actor_for(admin), no_show_penalty=750, late_cancellation_penalty=None,
    )

    assert settings.no_show_penalty == 750
    assert settings.late_cancellation_penalty == 500
    assert session.exec(select(LoyaltySettings)).one().updated_at is not None


@pytest.mark.parametrize(
    "values",
    [
        {"no_show_penalty": -1},
        {"gold_threshold": 300},
        {"platinum_threshold": 50},
        {"bogus": 1},
    ],
)
def test_update_settings_validation(session, admin, actor_for, values):
    with pytest.raises(ValidationError):
        update_loyalty_settings(session, actor_for(admin), **values)


def test_ensure_account_is_lazy(session, customer):
    assert session.get(LoyaltyAccount, customer.id) is None

    ensure_account(session, customer.id)

    assert session.get(LoyaltyAccount, customer.id) is not None

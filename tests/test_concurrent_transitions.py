"""
Two sessions racing for the same booking transition.

These tests run against a file-backed SQLite database so the rival session
has a connection of its own. The rival commits its transition after our
session has read the booking and before our conditional update runs.
"""
from datetime import date, datetime

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from barbershop import cancellation
from barbershop.admission import create_booking
from barbershop.cancellation import cancel_booking, complete_booking, mark_no_show
from barbershop.db import init_db
from barbershop.errors import InvalidTransitionError
from barbershop.models import Booking, LoyaltyAccount, LoyaltyTransaction

DAY = date(2025, 11, 10)
NOW = datetime(2025, 11, 9, 8, 0)
LATE = datetime(2025, 11, 10, 8, 0)
AFTER = datetime(2025, 11, 10, 10, 0)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'shop.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def booking(session, barber, customer, haircut, publish, actor_for, give_points):
    publish(barber.id)
    give_points(customer, 800)
    return create_booking(session, actor_for(customer), barber.id, DAY, "09:00 AM", [haircut.id], now=NOW)


@pytest.fixture
def rival_goes_first(engine, monkeypatch):
    """Run `rival(session)` in its own session just before our next transition()."""
    real_transition = cancellation.transition

    def _arm(rival):
        def _transition(session, booking_id, to_status, **fields):
            monkeypatch.setattr(cancellation, "transition", real_transition)
            with Session(engine) as other:
                rival(other, booking_id)
            return real_transition(session, booking_id, to_status, **fields)

        monkeypatch.setattr(cancellation, "transition", _transition)

    return _arm


def _ledger(session, kind):
    return session.exec(select(LoyaltyTransaction).where(LoyaltyTransaction.kind == kind)).all()


def _balance(session, user):
    account = session.get(LoyaltyAccount, user.id)
    session.refresh(account)
    return account.redeemable_points


def test_losing_the_same_cancel_is_a_no_op(session, booking, customer, barber_user, actor_for, rival_goes_first):
    actor = actor_for(barber_user)
    rival_goes_first(lambda other, booking_id: cancel_booking(other, actor, booking_id, now=LATE))

    result = cancel_booking(session, actor, booking.id, now=LATE)

    assert result.status == "cancelled"
    assert _balance(session, customer) == 300
    assert len(_ledger(session, "PENALTY")) == 1


def test_losing_the_same_completion_is_a_no_op(session, booking, customer, admin, actor_for, rival_goes_first):
    actor = actor_for(admin)
    rival_goes_first(lambda other, booking_id: complete_booking(other, actor, booking_id, now=AFTER))

    result = complete_booking(session, actor, booking.id, now=AFTER)

    assert result.status == "completed"
    account = session.get(LoyaltyAccount, customer.id)
    session.refresh(account)
    assert account.total_confirmed_visits == 1
    assert account.redeemable_points == 850
    assert len(_ledger(session, "EARNED")) == 1


def test_losing_to_a_different_transition_is_rejected(
    session, booking, customer, barber_user, actor_for, rival_goes_first,
):
    actor = actor_for(barber_user)
    rival_goes_first(lambda other, booking_id: complete_booking(other, actor, booking_id, now=AFTER))

    with pytest.raises(InvalidTransitionError):
        cancel_booking(session, actor, booking.id, now=AFTER)

    assert session.get(Booking, booking.id).status == "completed"
    assert _ledger(session, "PENALTY") == []
    assert len(_ledger(session, "EARNED")) == 1
    assert _balance(session, customer) == 850


def test_no_show_racing_a_cancel(session, booking, customer, barber_user, actor_for, rival_goes_first):
    actor = actor_for(barber_user)
    rival_goes_first(lambda other, booking_id: cancel_booking(other, actor, booking_id, now=AFTER))

    with pytest.raises(InvalidTransitionError):
        mark_no_show(session, actor, booking.id, now=AFTER)

    penalties = _ledger(session, "PENALTY")
    assert [p.points for p in penalties] == [-500]
    assert _balance(session, customer) == 300

"""
Pytest fixtures.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the single
connection alive) and one session shared by the fixtures and the TestClient.
Fixture users are inserted directly and authenticated with freshly minted
tokens; only the registration tests go through password hashing.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from barbershop.auth import Actor, create_access_token
from barbershop.db import get_session, init_db
from barbershop.main import app
from barbershop.models import (
    Barber, LoyaltyAccount, Roster, RosterAssignment, Service, User, utcnow,
)

# a Monday
DAY = date(2025, 11, 10)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    # handlers share the test session, so fixtures and requests see the same rows
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role: str = "customer", email: str = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role}{counter['n']}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def actor_for():
    def _actor(user: User) -> Actor:
        return Actor(user_id=user.id, email=user.email, role=user.role)

    return _actor


@pytest.fixture
def auth_header():
    def _header(user: User) -> dict:
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def barber_user(make_user):
    return make_user("barber")


@pytest.fixture
def barber(session, barber_user):
    barber = Barber(user_id=barber_user.id, name="Marco")
    session.add(barber)
    session.commit()
    session.refresh(barber)
    return barber


@pytest.fixture
def haircut(session):
    service = Service(name="Haircut", price=30.0, loyalty_points=10)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@pytest.fixture
def reward_service(session):
    service = Service(name="Free Beard Trim", price=15.0, is_redeemable=True, redemption_points=80)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@pytest.fixture
def publish(session):
    """Publish a one-assignment roster straight into the store."""

    def _publish(
        barber_id: int,
        day: date = DAY,
        start: time = time(9, 0),
        end: time = time(17, 0),
        is_day_off: bool = False,
        start_date: date = None,
        end_date: date = None,
    ) -> Roster:
        roster = Roster(
            name="Week roster",
            start_date=start_date or day,
            end_date=end_date or day,
            published_at=utcnow(),
        )
        session.add(roster)
        session.flush()
        session.add(RosterAssignment(
            roster_id=roster.id,
            barber_id=barber_id,
            date=day,
            start_time=None if is_day_off else start,
            end_time=None if is_day_off else end,
            is_day_off=is_day_off,
        ))
        session.commit()
        session.refresh(roster)
        return roster

    return _publish


@pytest.fixture
def give_points(session):
    def _give(user: User, points: int, visits: int = 0, tier: str = "Silver") -> LoyaltyAccount:
        account = session.get(LoyaltyAccount, user.id)
        if account is None:
            account = LoyaltyAccount(customer_id=user.id)
        account.redeemable_points = points
        account.total_confirmed_visits = visits
        account.status_tier = tier
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    return _give

# barbershop/models.py

from typing import Optional, List
from datetime import datetime, date as Date, time, timezone
from enum import Enum

from sqlalchemy import DateTime, Index, UniqueConstraint, CheckConstraint, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    customer = "customer"
    barber = "barber"
    admin = "admin"


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"


# statuses that occupy a slot
ACTIVE_STATUSES = (BookingStatus.confirmed.value, BookingStatus.completed.value)


class Tier(str, Enum):
    silver = "Silver"
    gold = "Gold"
    platinum = "Platinum"


class LedgerKind(str, Enum):
    earned = "EARNED"
    redeemed = "REDEEMED"
    penalty = "PENALTY"
    tier_upgrade = "TIER_UPGRADE"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # customer, barber or admin


class Barber(SQLModel, table=True):
    __tablename__ = "barbers"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True)
    name: str
    active: bool = True


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    duration: int = 60  # minutes, not used for slot math
    price: float
    category: str = "general"
    loyalty_points: int = 0
    is_redeemable: bool = False
    redemption_points: int = 0
    active: bool = True


class Roster(SQLModel, table=True):
    __tablename__ = "rosters"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    start_date: Date
    end_date: Date
    published_at: datetime = Field(sa_type=DateTime(timezone=True))
    created_by: Optional[int] = Field(default=None, foreign_key="users.id")


class RosterAssignment(SQLModel, table=True):
    __tablename__ = "roster_assignments"
    __table_args__ = (
        UniqueConstraint("roster_id", "barber_id", "date", name="uq_roster_barber_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    roster_id: int = Field(foreign_key="rosters.id", index=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    date: Date = Field(index=True)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_day_off: bool = False


class HiddenHour(SQLModel, table=True):
    __tablename__ = "hidden_hours"
    __table_args__ = (
        UniqueConstraint("barber_id", "time_slot", name="uq_barber_hidden_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    time_slot: str  # "09:00 AM"


_ACTIVE_SLOT = text("status IN ('confirmed', 'completed')")


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # at most one confirmed/completed booking per barber slot
        Index(
            "uq_booking_active_slot",
            "barber_id", "date", "time_slot",
            unique=True,
            sqlite_where=_ACTIVE_SLOT,
            postgresql_where=_ACTIVE_SLOT,
        ),
        CheckConstraint("points_redeemed >= 0", name="ck_booking_points_redeemed"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    customer_id: int = Field(foreign_key="users.id", index=True)
    date: Date = Field(index=True)
    time_slot: str
    service_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    total_price: float = 0.0
    status: str = BookingStatus.confirmed.value
    is_reward_booking: bool = False
    points_redeemed: int = 0
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class LoyaltyAccount(SQLModel, table=True):
    __tablename__ = "loyalty_accounts"
    __table_args__ = (
        CheckConstraint("redeemable_points >= 0", name="ck_loyalty_points_non_negative"),
    )

    customer_id: int = Field(foreign_key="users.id", primary_key=True)
    redeemable_points: int = 0
    status_tier: str = Tier.silver.value
    total_confirmed_visits: int = 0


class LoyaltySettings(SQLModel, table=True):
    __tablename__ = "loyalty_settings"

    id: str = Field(default="default", primary_key=True)
    service_rate_silver: float = 5.0
    service_rate_gold: float = 10.0
    service_rate_platinum: float = 15.0
    gold_threshold: int = 100
    platinum_threshold: int = 200
    late_cancellation_penalty: int = 500
    no_show_penalty: int = 1000
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class LoyaltyTransaction(SQLModel, table=True):
    __tablename__ = "loyalty_transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="users.id", index=True)
    booking_id: Optional[int] = Field(default=None, foreign_key="bookings.id")
    kind: str
    points: int
    description: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

# barbershop/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime, date, time
from typing import List, Optional


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case accepted too
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    customer = "customer"
    barber = "barber"
    admin = "admin"


class UserPublic(CamelModel):
    id: int
    email: str
    role: UserRole


class UserCreate(CamelModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole = UserRole.customer


class BarberCreate(CamelModel):
    user_id: int
    name: str = Field(min_length=1)


class BarberPublic(CamelModel):
    id: int
    user_id: int
    name: str
    active: bool


class HiddenHoursUpdate(CamelModel):
    hidden_slots: List[str]


class HiddenHoursPublic(CamelModel):
    barber_id: int
    hidden_slots: List[str]


class RosterAssignmentIn(CamelModel):
    barber_id: int
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_day_off: bool = False


class RosterCreate(CamelModel):
    name: str
    start_date: date
    end_date: date
    assignments: List[RosterAssignmentIn]


class RosterAssignmentPublic(CamelModel):
    barber_id: int
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_day_off: bool


class RosterPublic(CamelModel):
    id: int
    name: str
    start_date: date
    end_date: date
    published_at: datetime
    status: str
    assignments: List[RosterAssignmentPublic]


class ServiceCreate(CamelModel):
    name: str
    duration: int = 60
    price: float
    category: str = "general"
    loyalty_points: int = 0
    is_redeemable: bool = False
    redemption_points: int = 0


class ServicePublic(CamelModel):
    id: int
    name: str
    duration: int
    price: float
    category: str
    loyalty_points: int
    is_redeemable: bool
    redemption_points: int
    active: bool


class RewardContext(CamelModel):
    service_id: int


class BookingCreate(CamelModel):
    barber_id: int
    date: date
    time_slot: str
    service_ids: List[int]
    reward_context: Optional[RewardContext] = None


class BookingPublic(CamelModel):
    id: int
    barber_id: int
    customer_id: int
    date: date
    time_slot: str
    service_ids: List[int]
    total_price: float
    status: str
    is_reward_booking: bool
    points_redeemed: int
    cancel_reason: Optional[str] = None
    created_at: datetime


class BookingAction(CamelModel):
    booking_id: int


class CancelRequest(CamelModel):
    booking_id: int
    reason: Optional[str] = None


class SuccessResponse(CamelModel):
    success: bool = True


class LoyaltyAccountPublic(CamelModel):
    customer_id: int
    redeemable_points: int
    status_tier: str
    total_confirmed_visits: int


class LoyaltyTransactionPublic(CamelModel):
    id: int
    booking_id: Optional[int] = None
    kind: str
    points: int
    description: str
    created_at: datetime


class LoyaltySettingsPublic(CamelModel):
    service_rate_silver: float
    service_rate_gold: float
    service_rate_platinum: float
    gold_threshold: int
    platinum_threshold: int
    late_cancellation_penalty: int
    no_show_penalty: int


class LoyaltySettingsUpdate(CamelModel):
    service_rate_silver: Optional[float] = None
    service_rate_gold: Optional[float] = None
    service_rate_platinum: Optional[float] = None
    gold_threshold: Optional[int] = None
    platinum_threshold: Optional[int] = None
    late_cancellation_penalty: Optional[int] = None
    no_show_penalty: Optional[int] = None

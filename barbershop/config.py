# barbershop/config.py

from functools import lru_cache
from datetime import time

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite:///./barber.db", alias="DATABASE_URL")
    secret_key: str = Field(default="change-me-later", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    shop_timezone: str = Field(default="America/New_York", alias="SHOP_TIMEZONE")
    open_time: str = Field(default="09:00", alias="OPEN_TIME")
    close_time: str = Field(default="17:00", alias="CLOSE_TIME")
    slot_minutes: int = Field(default=60, alias="SLOT_MINUTES")
    same_day_lead_minutes: int = Field(default=0, alias="SAME_DAY_LEAD_MINUTES")
    late_cancellation_cutoff_minutes: int = Field(default=120, alias="LATE_CANCELLATION_CUTOFF_MINUTES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def open_time_value(self) -> time:
        return _parse_hhmm(self.open_time)

    @property
    def close_time_value(self) -> time:
        return _parse_hhmm(self.close_time)


def _parse_hhmm(value: str) -> time:
    h, m = value.split(":")
    return time(int(h), int(m))


@lru_cache
def get_settings() -> Settings:
    return Settings()

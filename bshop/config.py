# bshop/config.py

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BSHOP_", env_file=".env", extra="ignore")

    # business hours / slot grid
    open_hour: int = 9
    close_hour: int = 18
    slot_interval_minutes: int = 30
    booking_horizon_days: int = 14

    pending_penalty_rate: Decimal = Decimal("0.50")
    confirmed_penalty_rate: Decimal = Decimal("0.60")

    # America/Santo_Domingo, no DST
    utc_offset_hours: float = -4

    database_url: str = "sqlite:///./bshop.db"
    snapshot_key: str = "bshop-storage"

    sweep_interval_seconds: float = 10
    payment_threshold: Decimal = Decimal("1000")
    payment_latency_seconds: float = 0.8

    log_level: str = "INFO"


settings = Settings()

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "clubrollup"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/clubrollup.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Wall-clock zone used to bucket timezone-aware usage timestamps
    CLUB_TIMEZONE: str = "UTC"

    # Classification thresholds
    UNDERUSE_USAGE_CEILING: int = 10
    UNDERUSE_COST_FLOOR: Decimal = Decimal("100.00")

    # "zero_cost": amenities without a cost model are estimated at zero cost, included in dues
    # "skip": periods of amenities without a cost model are skipped
    MISSING_COST_MODEL_POLICY: Literal["zero_cost", "skip"] = "zero_cost"

    # Recomputation
    RECOMPUTE_MAX_WORKERS: int = 1
    UPSERT_RETRY_ATTEMPTS: int = 1
    RECOMPUTE_LOOKBACK_MONTHS: int = 1

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()

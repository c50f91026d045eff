"""Runtime settings loaded from ``LEARNMET_*`` environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEARNMET_",
        env_file=".env",
        extra="ignore",
    )

    default_period_days: int = Field(
        default=7, ge=1, description="Period length used when a caller gives no start date"
    )
    retention_window_days: int = Field(
        default=30, ge=1, description="Tenure and activity window for retention"
    )
    trend_months: int = Field(default=6, ge=1, description="Months covered by enrollment trends")
    leaderboard_size: int = Field(default=10, ge=1)
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()

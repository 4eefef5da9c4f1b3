from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    api_key: str = "test-api-key"
    hmac_secret: str = "test-hmac-secret"

    database_url: str = Field(
        "sqlite:////tmp/playerzero_test.db", alias="DATABASE_URL"
    )
    db_create_all: bool = Field(False, alias="DB_CREATE_ALL")

    redis_url: str = Field("redis://localhost:6379", alias="REDIS_URL")
    trusted_proxies: list[str] = Field(
        default_factory=lambda: ["127.0.0.1", "testclient"]
    )
    rate_limit_ip: int = 30
    rate_limit_user: int = 120
    rate_limit_window_s: int = 60
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    trial_days: int = Field(7, alias="TRIAL_DAYS")
    buffer_window_hours: float = Field(
        4,
        alias="BUFFER_WINDOW_HOURS",
        description="Lookback before a week/month start used to pick a baseline upload",
    )
    free_mode_refresh_s: int = Field(300, alias="FREE_MODE_REFRESH_S")
    free_mode_refresher_enabled: bool = Field(
        True, alias="FREE_MODE_REFRESHER_ENABLED"
    )

    max_pokedex_entries: int = Field(1000, alias="MAX_POKEDEX_ENTRIES")
    leaderboard_limit: int = 100

    model_config = ConfigDict(
        extra="ignore",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
    )

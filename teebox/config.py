"""Application configuration using Pydantic settings."""

from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def utc_now_naive() -> datetime:
    """Current UTC time as naive datetime (for SQLAlchemy defaults).

    SQLite doesn't handle timezone-aware datetimes well, so we store
    UTC as naive datetime. This function is used as the default factory
    for model created_at/settled_at fields.
    """
    return utc_now().replace(tzinfo=None)


def utc_today() -> date:
    """Today's date in UTC."""
    return utc_now().date()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TEEBOX_",
        extra="ignore",
    )

    # Database
    db_path: Path = Path("./data/teebox.db")

    # App
    debug: bool = False
    log_level: str = "INFO"
    disable_background: bool = False

    # DataGolf in-play feed
    datagolf_base_url: str = "https://feeds.datagolf.com"
    datagolf_api_key: str = ""
    feed_timeout: float = 30.0

    # Settlement
    settle_interval_minutes: int = 30
    completed_lookback_days: int = 7
    legacy_push_payout: bool = False  # stake-only refund for win+push parlays
    live_stats_batch_size: int = 100

    def model_post_init(self, __context) -> None:
        """Load the DataGolf key from its standard env var or .env file if not set."""
        import os
        from dotenv import dotenv_values

        if not self.datagolf_api_key:
            self.datagolf_api_key = os.getenv("DATAGOLF_API_KEY", "")
        if not self.datagolf_api_key:
            env_vals = dotenv_values(".env")
            self.datagolf_api_key = env_vals.get("DATAGOLF_API_KEY", "") or ""

    @property
    def database_url(self) -> str:
        """SQLite database URL for SQLAlchemy."""
        return f"sqlite+aiosqlite:///{self.db_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Export for convenience
settings = get_settings()

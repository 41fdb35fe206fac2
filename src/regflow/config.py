"""Engine settings - pydantic-settings configuration.

Values load from ``REGFLOW_``-prefixed environment variables or a ``.env``
file, falling back to the defaults below.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="REGFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    db_path: str = "regflow.db"
    busy_timeout_seconds: float = Field(default=30.0, gt=0)

    # Academic calendar defaults
    default_session: str = "2025/2026"
    default_semester: str = "First"

    # Credit bounds applied to student documents missing them
    default_min_credits: int = Field(default=15, ge=0)
    default_max_credits: int = Field(default=24, ge=0)

    # Ledger commit retry (StorageError only)
    commit_retries: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=0.05, ge=0)

    # Logging (see regflow.logging.setup_logging)
    log_dir: str = "logs"
    log_level: str = "INFO"

    # API server
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

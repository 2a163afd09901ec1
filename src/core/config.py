"""Configuration management for taskboard."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/taskboard.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Task list cache
    cache_sliding_expiration_seconds: int = Field(
        default=60, gt=0, description="Seconds of inactivity after which the cached task list expires"
    )

    # Overdue scanner
    overdue_scan_interval_seconds: int = Field(
        default=120, gt=0, description="Interval between background overdue reconciliation passes"
    )

    # Error responses
    expose_internal_errors: bool = Field(
        default=False,
        description="Return raw persistence/internal error text to API clients (legacy client compatibility)",
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Task identifiers are 32-bit signed integers on the wire
    MAX_TASK_ID: int = 2_147_483_647

    # Task field limits
    TASK_NAME_MIN_LENGTH: int = 2
    TASK_NAME_MAX_LENGTH: int = 100
    TASK_DESCRIPTION_MAX_LENGTH: int = 255
    NIL_DESCRIPTION: str = "Nil"

    # Cache
    TASK_LIST_CACHE_KEY: str = "TodoTasks"

    # Scheduler
    OVERDUE_SCAN_JOB_ID: str = "overdue_scan"

    # Job Tracker Configuration
    TRACKER_ERROR_MAXLEN: int = 500


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()

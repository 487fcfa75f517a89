"""Configuration management for hearth."""

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
    sqlite_db_path: str = Field(default="./data/hearth.db", description="Path to the SQLite database file")
    db_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound for a single persistence call (in seconds)"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Redis Configuration (optional)
    redis_url: str | None = Field(default=None, description="Redis connection URL (e.g., redis://localhost:6379)")

    # Moments Automation
    moments_run_on_startup: bool = Field(
        default=True, description="Run the moments sweep once immediately when the scheduler starts"
    )

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production."""
        return self.environment.lower() == "production"


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_UNPROCESSABLE: int = 422
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Actor recorded on automation-generated records
    SYSTEM_ACTOR_ID: str = "system"

    # Moments Automation
    MOMENTS_LOOKAHEAD_DAYS: int = 14
    MOMENTS_REMINDER_LEAD_DAYS: int = 3
    MOMENTS_INTERVAL_HOURS: int = 24

    # Task validation limits
    TASK_TITLE_MAX_LENGTH: int = 500
    TASK_TEXT_MAX_LENGTH: int = 5000
    IMPORTANT_DATE_TITLE_MAX_LENGTH: int = 200
    IMPORTANT_DATE_NOTES_MAX_LENGTH: int = 1000

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100

    # Job Retry Configuration
    JOB_MAX_RETRIES: int = 3
    JOB_RETRY_BASE_DELAY_SECONDS: float = 2.0
    JOB_CONSECUTIVE_FAILURE_THRESHOLD: int = 3
    TRACKER_DEAD_LETTER_QUEUE_MAXLEN: int = 100
    TRACKER_STATUS_TTL_SECONDS: int = 86400 * 7
    TRACKER_DLQ_TTL_SECONDS: int = 86400 * 30

    # Redis Configuration
    REDIS_MAX_CONNECTIONS: int = 10


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()

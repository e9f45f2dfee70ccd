"""Timetable editor configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class TimetableConfig(BaseSettings):
    """Timetable editor configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Storage API (Cloud Functions backend)
    api_base_url: str = Field(
        default="http://localhost:5001",
        description="Base URL of the timetable storage API",
    )
    api_token: str = Field(
        default="",
        description="Bearer token sent with every request (empty = no auth header)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single HTTP request",
    )
    read_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for idempotent reads on transient failures",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "TIMETABLE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: TimetableConfig | None = None


def get_config() -> TimetableConfig:
    """Get the timetable configuration singleton.

    Returns:
        TimetableConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = TimetableConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the env."""
    global _config
    _config = None

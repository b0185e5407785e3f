"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackendType(str, Enum):
    """Supported ledger backends."""

    HTTP = "http"
    MEMORY = "memory"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with PMC_) or .env file.

    Examples:
        PMC_BACKEND_TYPE=memory
        PMC_LEDGER_API_URL=https://gateway.example.org
        PMC_LOG_LEVEL=DEBUG
        PMC_DISCARD_STALE_RESULTS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="PMC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Token Permissions Console"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] | None = Field(
        default=None,
        validate_default=True,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Ledger backend
    backend_type: BackendType = BackendType.HTTP
    ledger_api_url: str = Field(
        default="http://localhost:8545",
        description="Base URL of the ledger gateway REST API",
    )
    request_timeout: float = Field(default=30.0, gt=0)
    job_poll_interval: float = Field(
        default=1.0, gt=0, description="Seconds between transaction queue polls"
    )
    job_timeout: float = Field(
        default=600.0, gt=0, description="Give up waiting on a queue after this long"
    )

    # Store behaviour
    discard_stale_results: bool = Field(
        default=True,
        description=(
            "Drop loader/mutation results issued for a previously selected token "
            "or superseded by a newer request for the same resource"
        ),
    )

    @field_validator("log_format", mode="after")
    @classmethod
    def set_log_format_from_environment(cls, v: str | None, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()

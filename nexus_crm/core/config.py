"""Settings for the CRM service, read from the environment and ``.env``."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

# Settings field -> environment variable.
ENV_VARS: dict[str, str] = {
    "app_env": "APP_ENV",
    "database_url": "DATABASE_URL",
    "cors_origins": "CORS_ORIGINS",
    "version": "APP_VERSION",
    "log_level": "LOG_LEVEL",
    "summary_endpoint_url": "SUMMARY_ENDPOINT_URL",
    "summary_timeout_seconds": "SUMMARY_TIMEOUT_SECONDS",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "anthropic_model": "ANTHROPIC_MODEL",
    "anthropic_api_url": "ANTHROPIC_API_URL",
    "source_fetch_limit": "SOURCE_FETCH_LIMIT",
}

_ASYNC_SQLITE_PREFIXES = (
    ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
    ("sqlite:///", "sqlite+aiosqlite:///"),
    ("sqlite://", "sqlite+aiosqlite://"),
)


class Settings(BaseModel):
    """Runtime configuration.

    ``summary_endpoint_url`` may be left empty, in which case every summary
    request takes the structured fallback path.
    """

    app_env: str = "dev"
    database_url: str = "sqlite:///./nexus.db"
    cors_origins: list[str] = Field(default_factory=list)
    version: str = "0.1.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    summary_endpoint_url: str = ""
    summary_timeout_seconds: float = Field(default=20.0, gt=0)
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-haiku-20240307"
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    source_fetch_limit: int = Field(default=5, ge=0)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: Any) -> list[str]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return []

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("summary_endpoint_url", "anthropic_api_key", mode="before")
    @classmethod
    def strip_secret_like(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @property
    def async_database_url(self) -> str:
        for prefix, replacement in _ASYNC_SQLITE_PREFIXES:
            if self.database_url.startswith(prefix):
                return replacement + self.database_url[len(prefix) :]
        return self.database_url


def _build_settings() -> Settings:
    values = {field: os.getenv(env_var) for field, env_var in ENV_VARS.items()}
    return Settings(**{field: value for field, value in values.items() if value is not None})


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return _build_settings()

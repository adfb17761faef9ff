"""
Application settings loaded from environment variables.
Only the values every process needs live here; HTTP-specific options are in `api.api_config`.
Missing variables fail fast with one message that lists all of them.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "PROJECT_NAME",
    "ENV",
    "LOG_LEVEL",
    "DATABASE_URL",
)


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str
    ENV: str
    LOG_LEVEL: str
    DATABASE_URL: str

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)


def load_settings(*, load_env: bool = True) -> Settings:
    """Load settings from `.env` and the process environment."""

    if load_env:
        load_dotenv()

    missing = sorted(key for key in REQUIRED_ENV_VARS if not os.getenv(key))
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set them in the environment or in `.env` before starting the service."
        )

    try:
        return Settings.model_validate({key: os.environ[key] for key in REQUIRED_ENV_VARS})
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for application settings."""

    return load_settings()

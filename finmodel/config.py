"""Application configuration read from the environment."""

from __future__ import annotations

import logging
import os
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

CORS_ORIGINS_ENV = "FINMODEL_CORS_ORIGINS"
LOG_LEVEL_ENV = "FINMODEL_LOG_LEVEL"
PORT_ENV = "FINMODEL_PORT"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


class ConfigError(ValueError):
    """Raised when an environment variable holds an invalid value."""


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    port: int = Field(default=5000, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}'")
        return level


def _parse_port(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{PORT_ENV} must be an integer, got '{raw}'") from e


def load_config() -> AppConfig:
    """Build the configuration from FINMODEL_* environment variables."""
    values: dict = {}

    origins = os.environ.get(CORS_ORIGINS_ENV, "").strip()
    if origins:
        values["cors_origins"] = [origin.strip() for origin in origins.split(",") if origin.strip()]

    level = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if level:
        values["log_level"] = level

    port = os.environ.get(PORT_ENV, "").strip()
    if port:
        values["port"] = _parse_port(port)

    return AppConfig(**values)


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("finmodel").setLevel(config.log_level)

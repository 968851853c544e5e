"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

LOG_LEVEL_ENV = "PERCENTFMT_LOG_LEVEL"
SERVE_HOST_ENV = "PERCENTFMT_SERVE_HOST"
SERVE_PORT_ENV = "PERCENTFMT_SERVE_PORT"
MAX_FIELD_WIDTH_ENV = "PERCENTFMT_MAX_FIELD_WIDTH"

_ENV_FIELDS = {
    LOG_LEVEL_ENV: "log_level",
    SERVE_HOST_ENV: "serve_host",
    SERVE_PORT_ENV: "serve_port",
    MAX_FIELD_WIDTH_ENV: "max_field_width",
}


class ConfigError(ValueError):
    """Raised when an environment variable holds an invalid setting"""


class Settings(BaseModel):
    """percentfmt settings"""

    log_level: str = "INFO"
    serve_host: str = "127.0.0.1"
    serve_port: int = Field(8000, ge=1, le=65535)
    max_field_width: Optional[int] = Field(None, ge=0)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``environ`` (defaults to ``os.environ``)"""
    env = os.environ if environ is None else environ
    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = env.get(env_name, "").strip()
        if raw:
            values[field_name] = raw
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"invalid percentfmt settings: {e}") from e

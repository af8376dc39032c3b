"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
Command-line flags override whatever is configured here.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cclip.markup.model import Pattern

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class InputConfig(BaseModel):
    """Standard input reading and decoding."""

    codepage: str | None = None
    buffer_size_step: int = 4096

    @field_validator("buffer_size_step")
    @classmethod
    def step_must_be_positive(cls, value: int) -> int:
        if value <= 0:
            msg = "INPUT__BUFFER_SIZE_STEP must be positive"
            raise ValueError(msg)
        return value


class PatternConfig(BaseModel):
    """One configured search/replace pair."""

    search: str
    replace: str = ""

    @field_validator("search")
    @classmethod
    def search_must_not_be_empty(cls, value: str) -> str:
        if not value:
            msg = "pattern search text must not be empty"
            raise ValueError(msg)
        return value

    def to_pattern(self) -> Pattern:
        return Pattern(self.search, self.replace)


class MarkupConfig(BaseModel):
    """Rewriting and fragment serialization."""

    patterns: list[PatternConfig] = []
    encoding: str = "utf-8"


class ClipboardConfig(BaseModel):
    """Clipboard output."""

    html: bool = False


class LogConfig(BaseModel):
    """Logging destinations and verbosity."""

    level: str = "WARNING"
    log_dir: Path | None = None

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            msg = f"LOG__LEVEL must be one of {', '.join(_LOG_LEVELS)}"
            raise ValueError(msg)
        return upper


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use the ``CCLIP_`` prefix and a double-underscore
    delimiter for nesting: ``CCLIP_INPUT__CODEPAGE``,
    ``CCLIP_MARKUP__PATTERNS`` (JSON list of ``{"search", "replace"}``),
    ``CCLIP_CLIPBOARD__HTML``, ``CCLIP_LOG__LEVEL``, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="CCLIP_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    input: InputConfig = InputConfig()
    markup: MarkupConfig = MarkupConfig()
    clipboard: ClipboardConfig = ClipboardConfig()
    log: LogConfig = LogConfig()

    def patterns(self) -> list[Pattern]:
        return [p.to_pattern() for p in self.markup.patterns]


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None:
        paths = env_file if isinstance(env_file, (list, tuple)) else (env_file,)
        loaded = [str(p) for p in paths if Path(str(p)).is_file()]
        if loaded:
            logger.debug("Settings loaded .env from: %s", ", ".join(loaded))
        else:
            logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings

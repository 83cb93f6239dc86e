"""Runtime settings with typed configuration and fail-fast validation.

Settings are read from ``MSGHARVEST_*`` environment variables; command-line
flags are applied as overrides through :func:`load_settings`.

Examples
--------
>>> from msgharvest.settings import load_settings
>>> settings = load_settings(workers=2)
>>> settings.workers
2
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from msgharvest.errors import SettingsError

__all__ = [
    "DEFAULT_EXCLUDE",
    "DEFAULT_INCLUDE",
    "HarvestSettings",
    "LanguageName",
    "load_settings",
]

LanguageName = Literal["typescript", "tsx", "javascript"]

DEFAULT_INCLUDE: tuple[str, ...] = ("**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx")
DEFAULT_EXCLUDE: tuple[str, ...] = ("**/node_modules/**",)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class HarvestSettings(BaseSettings):
    """Harvest configuration (``MSGHARVEST_*`` namespace)."""

    model_config = SettingsConfigDict(
        env_prefix="MSGHARVEST_",
        extra="forbid",
        case_sensitive=False,
    )

    log_level: str = Field(default="WARNING", description="Logging level name")
    log_json: bool = Field(default=False, description="Emit log records as JSON lines")
    workers: int = Field(default=1, ge=1, description="Worker processes used for parsing")
    default_language: LanguageName = Field(
        default="tsx",
        description="Grammar used for files whose extension is not recognised",
    )
    signatures_path: Path | None = Field(
        default=None,
        description="JSON signature table replacing the built-in gettext family",
    )
    include: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE),
        description="Glob patterns selecting source files below the base directory",
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE),
        description="Glob patterns removing files from the selection",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            msg = f"unknown log level '{value}'"
            raise ValueError(msg)
        return level


def load_settings(**overrides: object) -> HarvestSettings:
    """Load :class:`HarvestSettings` with optional overrides.

    Overrides whose value is ``None`` are ignored so unset CLI flags fall
    back to the environment.

    Parameters
    ----------
    **overrides : object
        Field values taking precedence over the environment.

    Returns
    -------
    HarvestSettings
        Validated settings.

    Raises
    ------
    SettingsError
        If any value fails validation.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return HarvestSettings(**values)  # type: ignore[arg-type]
    except ValidationError as exc:
        msg = f"Failed to load settings: {exc.error_count()} invalid value(s)"
        raise SettingsError(
            msg,
            cause=exc,
            context={"errors": [error["msg"] for error in exc.errors()]},
        ) from exc

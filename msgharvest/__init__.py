"""Harvest translatable string literals from JavaScript/TypeScript sources."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:  # pragma: no cover - populated at install time
    __version__ = version("msgharvest")
except PackageNotFoundError:  # pragma: no cover - development fallback
    __version__ = "0.0.0-dev"

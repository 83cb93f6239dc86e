"""Structured logging helpers.

Library modules obtain a :class:`LoggerAdapter` via :func:`get_logger`; the
adapter injects ``operation`` and ``status`` fields into every record.
Handlers are only configured at the application boundary through
:func:`setup_logging`.

Examples
--------
>>> from msgharvest.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Harvest started", extra={"operation": "harvest", "status": "started"})
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from typing import Any

__all__ = [
    "JsonFormatter",
    "LoggerAdapter",
    "get_logger",
    "setup_logging",
    "with_fields",
]

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Formats log records as one JSON object per line with timestamp, level,
    logger name, message and any JSON-compatible extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format. May include extra fields in record.__dict__.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if (
                key not in _STANDARD_ATTRS
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects structured context fields.

    Fields bound at construction are merged into the ``extra`` dict of every
    call without overriding values supplied by the call itself. ``operation``
    defaults to ``"unknown"`` and ``status`` is inferred from the level.
    """

    logger: logging.Logger

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        """Merge bound fields into the call's ``extra`` dict.

        Parameters
        ----------
        msg : Any
            Log message.
        kwargs : Any
            Keyword arguments from the logging call.

        Returns
        -------
        tuple[Any, Any]
            Message and kwargs with the merged ``extra`` dict.
        """
        extra = kwargs.setdefault("extra", {})
        if isinstance(self.extra, Mapping):
            for key, value in self.extra.items():
                extra.setdefault(key, value)
        extra.setdefault("operation", "unknown")
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        """Log ``msg`` at ``level`` with an inferred ``status`` field."""
        extra = kwargs.setdefault("extra", {})
        if "status" not in extra and not (
            isinstance(self.extra, Mapping) and "status" in self.extra
        ):
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"
        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Get a logger adapter with structured logging support.

    Module-level loggers get a ``NullHandler`` so the library stays silent
    until the application calls :func:`setup_logging`.

    Parameters
    ----------
    name : str
        Logger name (typically ``__name__``).

    Returns
    -------
    LoggerAdapter
        Adapter with structured context injection.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: Any) -> LoggerAdapter:
    """Return an adapter bound to ``fields``.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger to wrap (may already be an adapter).
    **fields : Any
        Structured fields to inject into all log entries.

    Returns
    -------
    LoggerAdapter
        Adapter carrying the union of existing and new fields.
    """
    if isinstance(logger, LoggerAdapter):
        merged = dict(logger.extra or {})
        merged.update(fields)
        return LoggerAdapter(logger.logger, merged)
    return LoggerAdapter(logger, fields)


def setup_logging(level: int | str = logging.WARNING, *, json_format: bool = False) -> None:
    """Configure the root logger with a single stderr handler.

    Parameters
    ----------
    level : int | str, optional
        Threshold, as a level number or name. Defaults to ``logging.WARNING``.
    json_format : bool, optional
        Emit JSON lines instead of plain text. Defaults to False.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, handlers=[handler], force=True)

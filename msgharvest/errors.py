"""Exception hierarchy for message harvesting.

Errors fall into two groups. Configuration errors (bad signature tables,
invalid settings, missing grammars, unusable selection criteria) are fatal and
raised before any file is traversed. Per-file errors (:class:`ParseError`,
:class:`FileAccessError`) are caught by the driver, recorded in the catalog
statistics and reported as one warning per skipped file.

Examples
--------
>>> from msgharvest.errors import ConfigurationError, ErrorCode
>>> error = ConfigurationError.with_details(field="gettext.text", issue="missing")
>>> error.code is ErrorCode.CONFIGURATION_ERROR
True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "FileAccessError",
    "HarvestError",
    "ParseError",
    "SettingsError",
]


class ErrorCode(StrEnum):
    """Stable error codes carried by every :class:`HarvestError`.

    Attributes
    ----------
    CONFIGURATION_ERROR
        Signature table or selection configuration is invalid.
    SETTINGS_ERROR
        Environment or command-line settings failed validation.
    PARSE_ERROR
        A source file could not be turned into a syntax tree.
    FILE_ACCESS_ERROR
        A selected source file could not be read.
    RUNTIME_ERROR
        Unclassified failure.
    """

    CONFIGURATION_ERROR = "configuration-error"
    SETTINGS_ERROR = "settings-error"
    PARSE_ERROR = "parse-error"
    FILE_ACCESS_ERROR = "file-access-error"
    RUNTIME_ERROR = "runtime-error"


class HarvestError(Exception):
    """Base exception for all msgharvest errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Stable error code. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    log_level : int, optional
        Level used when the error is logged. Defaults to ``logging.ERROR``.
    cause : Exception | None, optional
        Underlying exception. Defaults to None.
    context : Mapping[str, object] | None, optional
        Structured details (paths, field names). Defaults to None.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    log_level : int
        Logging level for error logging.
    context : dict[str, object]
        Additional context dictionary for error details.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        log_level: int = logging.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.log_level = log_level
        self.context: dict[str, object] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return formatted error string.

        Returns
        -------
        str
            Formatted error string (e.g., "ParseError[parse-error]: Syntax errors in app.ts").
        """
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class ConfigurationError(HarvestError):
    """Error during configuration validation or loading.

    Raised when a signature table, a grammar package or the file-selection
    criteria are unusable. Always fatal: the run stops before any traversal.

    Parameters
    ----------
    message : str
        Human-readable error message describing the configuration failure.
    cause : Exception | None, optional
        Underlying exception that caused the configuration failure. Defaults to None.
    context : Mapping[str, object] | None, optional
        Additional context dictionary for error details. Defaults to None.

    Examples
    --------
    >>> str(ConfigurationError("Signature table contains no entries"))
    'ConfigurationError[configuration-error]: Signature table contains no entries'
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            log_level=logging.CRITICAL,
            cause=cause,
            context=context,
        )

    @classmethod
    def with_details(
        cls,
        *,
        field: str,
        issue: str,
        hint: str | None = None,
        cause: Exception | None = None,
    ) -> ConfigurationError:
        """Create a ConfigurationError with structured validation details.

        Parameters
        ----------
        field : str
            Name of the configuration field that failed validation.
        issue : str
            Description of the validation issue.
        hint : str | None, optional
            Optional hint for resolving the issue. Defaults to ``None``.
        cause : Exception | None, optional
            Underlying exception. Defaults to ``None``.

        Returns
        -------
        ConfigurationError
            New instance with details captured in context.
        """
        details: dict[str, object] = {"field": field, "issue": issue}
        if hint is not None:
            details["hint"] = hint
        message = f"Configuration validation failed for field '{field}': {issue}"
        return cls(message, cause=cause, context=details)


class SettingsError(ConfigurationError):
    """Raised when environment or command-line settings fail validation."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, cause=cause, context=context)
        self.code = ErrorCode.SETTINGS_ERROR


class ParseError(HarvestError):
    """A selected file could not be turned into a syntax tree.

    The driver skips the file, logs one warning and continues with the next.

    Parameters
    ----------
    message : str
        Human-readable error message.
    path : str
        Offending source file.
    cause : Exception | None, optional
        Underlying exception (for example ``UnicodeDecodeError``). Defaults to None.
    """

    def __init__(self, message: str, path: str, cause: Exception | None = None) -> None:
        super().__init__(
            message,
            code=ErrorCode.PARSE_ERROR,
            log_level=logging.WARNING,
            cause=cause,
            context={"path": path},
        )
        self.path = path


class FileAccessError(HarvestError):
    """A selected file could not be read.

    Recoverable: the driver skips the file and warns.

    Parameters
    ----------
    message : str
        Human-readable error message.
    path : str
        File that could not be read.
    cause : Exception | None, optional
        Underlying ``OSError``. Defaults to None.
    """

    def __init__(self, message: str, path: str, cause: Exception | None = None) -> None:
        super().__init__(
            message,
            code=ErrorCode.FILE_ACCESS_ERROR,
            log_level=logging.WARNING,
            cause=cause,
            context={"path": path},
        )
        self.path = path

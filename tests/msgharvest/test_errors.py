from __future__ import annotations

import logging

from msgharvest.errors import (
    ConfigurationError,
    ErrorCode,
    FileAccessError,
    HarvestError,
    ParseError,
    SettingsError,
)


def test_str_includes_code_and_cause() -> None:
    error = ParseError("Syntax errors in source", path="a.ts", cause=ValueError("bad"))

    assert str(error) == "ParseError[parse-error]: Syntax errors in source (caused by: ValueError)"
    assert error.__cause__ is not None


def test_configuration_error_with_details() -> None:
    error = ConfigurationError.with_details(field="t", issue="missing text", hint="add text")

    assert error.message == "Configuration validation failed for field 't': missing text"
    assert error.context == {"field": "t", "issue": "missing text", "hint": "add text"}
    assert error.log_level == logging.CRITICAL


def test_hierarchy_and_codes() -> None:
    settings = SettingsError("bad settings")
    access = FileAccessError("unreadable", path="a.ts")

    assert isinstance(settings, ConfigurationError)
    assert isinstance(access, HarvestError)
    assert settings.code is ErrorCode.SETTINGS_ERROR
    assert access.code is ErrorCode.FILE_ACCESS_ERROR
    assert access.context == {"path": "a.ts"}
    assert access.log_level == logging.WARNING


def test_default_code_is_runtime_error() -> None:
    assert HarvestError("boom").code is ErrorCode.RUNTIME_ERROR

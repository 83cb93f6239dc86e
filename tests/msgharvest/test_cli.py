from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from msgharvest import cli

pytestmark = pytest.mark.usefixtures("restore_root_logging")


@pytest.fixture(name="runner")
def _runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(write_corpus) -> Path:
    return write_corpus(
        {
            "src/app.ts": 'gettext("Hello");\nngettext("%d file", "%d files", n);\n',
            "src/menu.tsx": 'const m = <a>{pgettext("menu", "Open")}</a>;\n',
            "src/util.js": "export const id = (x) => x;\n",
            "node_modules/dep/index.js": 'gettext("Vendored");\n',
        }
    )


def test_extract_prints_summary(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(cli.app, ["extract", "--base", str(project)])

    assert result.exit_code == 0, result.output
    assert "3 messages extracted (1 with plural forms)" in result.output
    assert "3 total usages" in result.output
    assert "3 files (2 with messages)" in result.output
    assert "2 message contexts" in result.output


def test_extract_writes_json(runner: CliRunner, project: Path, tmp_path: Path) -> None:
    output = tmp_path / "catalog.json"

    result = runner.invoke(
        cli.app, ["extract", "-b", str(project), "--json", str(output), "--workers", "2"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert sorted(payload["contexts"]) == ["", "menu"]
    assert payload["stats"]["files_parsed"] == 3
    texts = [message["text"] for message in payload["contexts"][""]]
    assert texts == ["%d file", "Hello"]


def test_extract_honours_include_and_exclude(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["extract", "-b", str(project), "-i", "**/*.js", "-e", "src/**"],
    )

    assert result.exit_code == 0, result.output
    assert "1 messages extracted" in result.output
    assert "1 files (1 with messages)" in result.output


def test_extract_with_custom_signatures(
    runner: CliRunner, write_corpus, tmp_path: Path
) -> None:
    root = write_corpus({"a.ts": 't("Hello");\ngettext("Ignored");\n'})
    table = tmp_path / "signatures.json"
    table.write_text('{"t": {"text": 0}}', encoding="utf-8")

    result = runner.invoke(cli.app, ["extract", "-b", str(root), "-s", str(table)])

    assert result.exit_code == 0, result.output
    assert "1 messages extracted" in result.output
    assert "1 t usages" in result.output


def test_invalid_signatures_exit_with_configuration_error(
    runner: CliRunner, project: Path, tmp_path: Path
) -> None:
    table = tmp_path / "signatures.json"
    table.write_text('{"t": {"context": 0}}', encoding="utf-8")

    result = runner.invoke(cli.app, ["extract", "-b", str(project), "-s", str(table)])

    assert result.exit_code == cli.EXIT_CONFIGURATION_ERROR
    assert "error: Configuration validation failed" in result.output
    assert "messages extracted" not in result.output


def test_missing_base_exits_with_configuration_error(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["extract", "-b", str(tmp_path / "absent")])

    assert result.exit_code == cli.EXIT_CONFIGURATION_ERROR
    assert "is not a directory" in result.output


def test_invalid_log_level_exits_with_configuration_error(
    runner: CliRunner, project: Path
) -> None:
    result = runner.invoke(cli.app, ["extract", "-b", str(project), "--log-level", "chatty"])

    assert result.exit_code == cli.EXIT_CONFIGURATION_ERROR
    assert "error: Failed to load settings" in result.output


def test_settings_are_read_from_environment(
    runner: CliRunner, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MSGHARVEST_INCLUDE", '["**/*.tsx"]')

    result = runner.invoke(cli.app, ["extract", "-b", str(project)])

    assert result.exit_code == 0, result.output
    assert "1 files (1 with messages)" in result.output


def test_json_path_in_missing_directory_fails_before_harvest(
    runner: CliRunner, project: Path, tmp_path: Path
) -> None:
    output = tmp_path / "nope" / "catalog.json"

    result = runner.invoke(cli.app, ["extract", "-b", str(project), "--json", str(output)])

    assert result.exit_code == cli.EXIT_CONFIGURATION_ERROR
    assert "error: Configuration validation failed for field 'json'" in result.output
    assert "messages extracted" not in result.output
    assert not output.exists()


def test_json_path_that_is_a_directory_is_rejected(
    runner: CliRunner, project: Path, tmp_path: Path
) -> None:
    result = runner.invoke(cli.app, ["extract", "-b", str(project), "--json", str(tmp_path)])

    assert result.exit_code == 2
    assert "messages extracted" not in result.output


def test_json_write_failure_exits_with_output_error(
    runner: CliRunner, project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    dump = cli.dump_catalog_json

    def dump_after_directory_removed(catalog: object) -> bytes:
        shutil.rmtree(out_dir)
        return dump(catalog)

    monkeypatch.setattr(cli, "dump_catalog_json", dump_after_directory_removed)

    result = runner.invoke(
        cli.app, ["extract", "-b", str(project), "--json", str(out_dir / "catalog.json")]
    )

    assert result.exit_code == cli.EXIT_OUTPUT_ERROR
    assert isinstance(result.exception, SystemExit)
    assert "3 messages extracted" in result.output
    assert "error: cannot write JSON dump to" in result.output


def test_configuration_error_is_logged_at_its_level(
    runner: CliRunner,
    project: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    table = tmp_path / "signatures.json"
    table.write_text("{}", encoding="utf-8")

    with caplog.at_level(logging.DEBUG, logger="msgharvest.cli"):
        result = runner.invoke(cli.app, ["extract", "-b", str(project), "-s", str(table)])

    assert result.exit_code == cli.EXIT_CONFIGURATION_ERROR
    (record,) = [record for record in caplog.records if record.name == "msgharvest.cli"]
    assert record.levelno == logging.CRITICAL
    assert record.error_code == "configuration-error"
    assert record.status == "error"

"""Command-line interface for harvesting translatable messages."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from msgharvest import __version__
from msgharvest.driver import Harvester
from msgharvest.errors import ConfigurationError
from msgharvest.logging import get_logger, setup_logging
from msgharvest.registry import load_registry
from msgharvest.report import dump_catalog_json, render_summary
from msgharvest.selection import select_files
from msgharvest.settings import load_settings

LOGGER = get_logger(__name__)

EXIT_OUTPUT_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2

app = typer.Typer(
    help=f"Extract translatable messages from JavaScript/TypeScript sources ({__version__}).",
    no_args_is_help=True,
    add_completion=False,
)

BaseOption = Annotated[
    Path,
    typer.Option(
        "--base",
        "-b",
        help="Directory containing the sources to scan.",
        file_okay=False,
        resolve_path=True,
    ),
]
IncludeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--include",
        "-i",
        help="Glob selecting files below --base (repeatable). Defaults to JS/TS sources.",
    ),
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--exclude",
        "-e",
        help="Glob removing files from the selection (repeatable). Defaults to node_modules.",
    ),
]
SignaturesOption = Annotated[
    Path | None,
    typer.Option(
        "--signatures",
        "-s",
        help="JSON table of marker functions replacing the built-in gettext family.",
        dir_okay=False,
    ),
]
WorkersOption = Annotated[
    int | None,
    typer.Option("--workers", "-w", min=1, help="Worker processes used for parsing."),
]
JsonOption = Annotated[
    Path | None,
    typer.Option(
        "--json",
        help="Also write the catalog and statistics as JSON to this path.",
        dir_okay=False,
        resolve_path=True,
    ),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)."),
]


@app.callback()
def main() -> None:
    """Message harvesting commands."""


@app.command("extract")
def extract(
    base: BaseOption,
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    signatures: SignaturesOption = None,
    workers: WorkersOption = None,
    json_path: JsonOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Scan --base and print a summary of the harvested catalog."""
    try:
        settings = load_settings(
            include=include or None,
            exclude=exclude or None,
            signatures_path=signatures,
            workers=workers,
            log_level=log_level,
        )
        setup_logging(settings.log_level, json_format=settings.log_json)
        if json_path is not None:
            _check_output_path(json_path)
        registry = load_registry(settings.signatures_path)
        paths = select_files(base, settings.include, settings.exclude)
        harvester = Harvester(registry, default_language=settings.default_language)
        harvester.harvest(paths, workers=settings.workers)
    except ConfigurationError as exc:
        LOGGER.log(
            exc.log_level,
            "Configuration error",
            extra={"operation": "extract", "error_code": exc.code.value, **exc.context},
        )
        typer.echo(f"error: {exc.message}", err=True)
        raise typer.Exit(code=EXIT_CONFIGURATION_ERROR) from exc

    typer.echo(render_summary(harvester.catalog))
    if json_path is None:
        return
    try:
        json_path.write_bytes(dump_catalog_json(harvester.catalog))
    except OSError as exc:
        LOGGER.error(
            "Cannot write JSON dump",
            extra={"operation": "extract", "path": str(json_path), "error": str(exc)},
        )
        reason = exc.strerror or str(exc)
        typer.echo(f"error: cannot write JSON dump to '{json_path}': {reason}", err=True)
        raise typer.Exit(code=EXIT_OUTPUT_ERROR) from exc


def _check_output_path(path: Path) -> None:
    if not path.parent.is_dir():
        raise ConfigurationError.with_details(
            field="json",
            issue=f"directory '{path.parent}' does not exist",
            hint="Create the directory or choose another --json path.",
        )


if __name__ == "__main__":  # pragma: no cover - manual execution entrypoint
    app()

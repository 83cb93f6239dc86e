"""Traversal driver feeding parsed files through matching and extraction.

A :class:`Harvester` owns the catalog for a run. Each file is read, parsed
and walked post-order; every call node is matched against the registry and
accepted candidates are inserted into the catalog. Per-file failures are
isolated: the file is counted as failed, one warning is logged, and the run
continues.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import repeat
from pathlib import Path
from time import perf_counter
from typing import TYPE_CHECKING

from msgharvest.catalog import Catalog
from msgharvest.errors import FileAccessError, ParseError
from msgharvest.extractor import extract_candidate
from msgharvest.logging import get_logger, with_fields
from msgharvest.matcher import match_call
from msgharvest.tscore import iter_call_sites, language_for_path, load_language, parse_source

if TYPE_CHECKING:
    from tree_sitter import Tree

    from msgharvest.registry import SignatureRegistry
    from msgharvest.syntax import CallSite

__all__ = ["FileOutcome", "Harvester"]

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """Result of submitting one file to the driver.

    ``log_level`` is the level the outcome is reported at: the error's own
    level for skipped files, DEBUG otherwise.
    """

    path: str
    usages: int = 0
    error: str | None = None
    error_code: str | None = None
    log_level: int = logging.DEBUG

    @property
    def ok(self) -> bool:
        return self.error is None


class Harvester:
    """Walk source files and collect translatable messages into a catalog.

    Parameters
    ----------
    registry : SignatureRegistry
        Marker-function signatures.
    catalog : Catalog | None, optional
        Catalog to fill. A fresh one is created when omitted.
    default_language : str, optional
        Grammar for files with an unrecognised extension. Defaults to ``"tsx"``.
    """

    def __init__(
        self,
        registry: SignatureRegistry,
        catalog: Catalog | None = None,
        *,
        default_language: str = "tsx",
    ) -> None:
        self.registry = registry
        self.catalog = catalog if catalog is not None else Catalog()
        self.default_language = default_language

    def visit(self, calls: Iterable[CallSite], path: str) -> int:
        """Match and extract every call site of one file.

        Parameters
        ----------
        calls : Iterable[CallSite]
            Call sites of the file, in traversal order.
        path : str
            File the call sites belong to; recorded as the message reference.

        Returns
        -------
        int
            Number of accepted call sites.
        """
        accepted = 0
        for call in calls:
            signature = match_call(call, self.registry)
            if signature is None:
                continue
            candidate = extract_candidate(call, signature)
            if candidate is None:
                continue
            self.catalog.insert(candidate, path, function=signature.name)
            accepted += 1
        self.catalog.record_file(path)
        return accepted

    def visit_tree(self, tree: Tree, path: str) -> int:
        """Visit every call of a parsed tree, nested calls first."""
        return self.visit(iter_call_sites(tree), path)

    def harvest_file(self, path: str | Path) -> FileOutcome:
        """Read, parse and visit one file.

        Read and parse failures are recorded in the catalog statistics and
        returned in the outcome instead of being raised.

        Parameters
        ----------
        path : str | Path
            Source file.

        Returns
        -------
        FileOutcome
            Accepted usages, or the error that caused the file to be skipped.
        """
        path_str = str(path)
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            reason = exc.strerror or type(exc).__name__
            return self._fail(
                FileAccessError(f"Cannot read source file: {reason}", path=path_str, cause=exc)
            )
        try:
            tree = parse_source(path_str, data, self.default_language)
        except ParseError as exc:
            return self._fail(exc)
        return FileOutcome(path_str, usages=self.visit_tree(tree, path_str))

    def _fail(self, error: FileAccessError | ParseError) -> FileOutcome:
        self.catalog.record_failure(error.path)
        return FileOutcome(
            error.path,
            error=error.message,
            error_code=error.code.value,
            log_level=error.log_level,
        )

    def harvest(self, paths: Sequence[str | Path], *, workers: int = 1) -> list[FileOutcome]:
        """Process ``paths`` in order and return one outcome per file.

        With ``workers > 1`` files are parsed in worker processes, each
        producing a per-file catalog that is merged here in submission order.

        Parameters
        ----------
        paths : Sequence[str | Path]
            Files to process.
        workers : int, optional
            Worker process count. Defaults to 1 (sequential).

        Returns
        -------
        list[FileOutcome]
            Outcomes in the order of ``paths``.

        Raises
        ------
        ConfigurationError
            If a grammar needed by ``paths`` cannot be loaded. Raised before
            any file is processed.
        """
        for language in sorted({language_for_path(p, self.default_language) for p in paths}):
            load_language(language)
        start = perf_counter()
        outcomes: list[FileOutcome] = []
        if workers <= 1 or len(paths) <= 1:
            for path in paths:
                outcome = self.harvest_file(path)
                _report_outcome(outcome)
                outcomes.append(outcome)
        else:
            with ProcessPoolExecutor(max_workers=workers) as executor:
                results = executor.map(
                    _harvest_in_worker,
                    [str(path) for path in paths],
                    repeat(self.registry),
                    repeat(self.default_language),
                )
                for catalog, outcome in results:
                    self.catalog.merge(catalog)
                    _report_outcome(outcome)
                    outcomes.append(outcome)
        LOGGER.info(
            "Harvest finished",
            extra={
                "operation": "harvest",
                "files": len(outcomes),
                "workers": workers,
                "duration_ms": round((perf_counter() - start) * 1000, 3),
                **self.catalog.stats.to_dict(),
            },
        )
        return outcomes


def _harvest_in_worker(
    path: str,
    registry: SignatureRegistry,
    default_language: str,
) -> tuple[Catalog, FileOutcome]:
    harvester = Harvester(registry, default_language=default_language)
    outcome = harvester.harvest_file(path)
    return harvester.catalog, outcome


def _report_outcome(outcome: FileOutcome) -> None:
    logger = with_fields(LOGGER, operation="harvest_file", path=outcome.path)
    if outcome.ok:
        logger.log(outcome.log_level, "Visited file", extra={"usages": outcome.usages})
        return
    logger.log(
        outcome.log_level,
        "Skipping %s: %s",
        outcome.path,
        outcome.error,
        extra={"error_code": outcome.error_code},
    )

"""Source-file selection below a base directory using glob patterns."""

from __future__ import annotations

import fnmatch
from collections.abc import Sequence
from pathlib import Path

from msgharvest.errors import ConfigurationError

__all__ = ["path_matches_glob", "select_files"]


def path_matches_glob(path: str, pattern: str) -> bool:
    """Test if a relative path matches a glob pattern.

    ``*`` also matches ``/`` (fnmatch semantics), and a leading ``**/``
    additionally matches files at the top level, so ``**/*.ts`` selects both
    ``app.ts`` and ``src/app.ts``.

    Parameters
    ----------
    path : str
        Path relative to the base directory.
    pattern : str
        Glob pattern (Unix shell-style).

    Returns
    -------
    bool
        True if path matches pattern, False otherwise.

    Examples
    --------
    >>> path_matches_glob("app.ts", "**/*.ts")
    True
    >>> path_matches_glob("node_modules/lib/index.js", "**/node_modules/**")
    True
    >>> path_matches_glob("src/app.ts", "*.js")
    False
    """
    normalized_path = path.replace("\\", "/")
    normalized_pattern = pattern.replace("\\", "/")
    if fnmatch.fnmatchcase(normalized_path, normalized_pattern):
        return True
    if normalized_pattern.startswith("**/"):
        return fnmatch.fnmatchcase(normalized_path, normalized_pattern[3:])
    return False


def select_files(
    base: Path,
    include: Sequence[str],
    exclude: Sequence[str] = (),
) -> list[Path]:
    """Return the files below ``base`` selected by the patterns.

    A file is kept when its path relative to ``base`` matches at least one
    include pattern and no exclude pattern.

    Parameters
    ----------
    base : Path
        Directory to walk.
    include : Sequence[str]
        Glob patterns selecting files. Must not be empty.
    exclude : Sequence[str], optional
        Glob patterns removing files from the selection.

    Returns
    -------
    list[Path]
        Selected files, sorted by relative path.

    Raises
    ------
    ConfigurationError
        If ``base`` is not a directory or no include pattern is given.
    """
    if not base.is_dir():
        raise ConfigurationError.with_details(
            field="base",
            issue=f"'{base}' is not a directory",
        )
    if not include:
        raise ConfigurationError.with_details(
            field="include",
            issue="at least one include pattern is required",
            hint="For example --include '**/*.ts'",
        )
    selected: list[tuple[str, Path]] = []
    for candidate in base.rglob("*"):
        if not candidate.is_file():
            continue
        relative = candidate.relative_to(base).as_posix()
        if not any(path_matches_glob(relative, pattern) for pattern in include):
            continue
        if any(path_matches_glob(relative, pattern) for pattern in exclude):
            continue
        selected.append((relative, candidate))
    selected.sort(key=lambda item: item[0])
    return [path for _, path in selected]

"""Signature registry mapping marker-function names to argument positions.

A signature names the argument index holding the message text (required)
and, optionally, the indices of the disambiguation context and the plural
form. The registry is built once at startup, either from the built-in
gettext family or from an external JSON table that replaces it wholesale,
and is read-only afterwards.

Examples
--------
>>> from msgharvest.registry import SignatureRegistry
>>> registry = SignatureRegistry.from_table({"t": {"text": 0}})
>>> registry.lookup("t").text_index
0
>>> registry.lookup("gettext") is None
True
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Final

import msgspec

from msgharvest.errors import ConfigurationError
from msgharvest.logging import get_logger

__all__ = [
    "DEFAULT_SIGNATURES",
    "ExtractorSignature",
    "SignatureRegistry",
    "load_registry",
]

LOGGER = get_logger(__name__)

ArgumentIndex = Annotated[int, msgspec.Meta(ge=0)]


@dataclass(frozen=True, slots=True)
class ExtractorSignature:
    """Argument layout of one marker function."""

    name: str
    text_index: int
    context_index: int | None = None
    plural_index: int | None = None


class _SignatureEntry(msgspec.Struct, forbid_unknown_fields=True):
    """Wire shape of one entry in an external signature table."""

    text: ArgumentIndex
    context: ArgumentIndex | None = None
    plural: ArgumentIndex | None = None


_SignatureTable = dict[str, _SignatureEntry]

DEFAULT_SIGNATURES: Final[tuple[ExtractorSignature, ...]] = (
    ExtractorSignature("gettext", text_index=0),
    ExtractorSignature("ngettext", text_index=0, plural_index=1),
    ExtractorSignature("pgettext", text_index=1, context_index=0),
    ExtractorSignature("npgettext", text_index=1, context_index=0, plural_index=2),
)


class SignatureRegistry(Mapping[str, ExtractorSignature]):
    """Immutable lookup table from function name to signature."""

    def __init__(self, signatures: Iterable[ExtractorSignature]) -> None:
        self._signatures: dict[str, ExtractorSignature] = {sig.name: sig for sig in signatures}

    @classmethod
    def default(cls) -> SignatureRegistry:
        """Return the built-in ``gettext``/``ngettext``/``pgettext``/``npgettext`` table."""
        return cls(DEFAULT_SIGNATURES)

    @classmethod
    def from_table(cls, table: object, *, source: str = "<table>") -> SignatureRegistry:
        """Build a registry from a decoded configuration table.

        Parameters
        ----------
        table : object
            Mapping of ``{name: {"text": i, "context"?: i, "plural"?: i}}``.
        source : str, optional
            Label used in error messages. Defaults to ``"<table>"``.

        Returns
        -------
        SignatureRegistry
            Registry holding exactly the entries of ``table``.

        Raises
        ------
        ConfigurationError
            If any entry lacks a text index, carries an invalid index or an
            unknown key, or the table is empty.
        """
        try:
            entries = msgspec.convert(table, type=_SignatureTable)
        except msgspec.ValidationError as exc:
            raise ConfigurationError.with_details(
                field=source,
                issue=str(exc),
                hint='Each entry needs at least {"text": <index>}.',
                cause=exc,
            ) from exc
        return cls._from_entries(entries, source)

    @classmethod
    def from_file(cls, path: Path) -> SignatureRegistry:
        """Load a registry from a JSON signature table.

        Parameters
        ----------
        path : Path
            JSON file holding the signature table.

        Returns
        -------
        SignatureRegistry
            Registry holding exactly the entries of the file.

        Raises
        ------
        ConfigurationError
            If the file cannot be read, is not valid JSON, or fails validation.
        """
        try:
            payload = path.read_bytes()
        except OSError as exc:
            message = f"Failed to read signature table '{path}': {exc}"
            raise ConfigurationError(message, cause=exc, context={"path": str(path)}) from exc
        try:
            entries = msgspec.json.decode(payload, type=_SignatureTable)
        except msgspec.ValidationError as exc:
            raise ConfigurationError.with_details(
                field=str(path),
                issue=str(exc),
                hint='Each entry needs at least {"text": <index>}.',
                cause=exc,
            ) from exc
        except msgspec.DecodeError as exc:
            message = f"Signature table '{path}' is not valid JSON: {exc}"
            raise ConfigurationError(message, cause=exc, context={"path": str(path)}) from exc
        return cls._from_entries(entries, str(path))

    @classmethod
    def _from_entries(cls, entries: _SignatureTable, source: str) -> SignatureRegistry:
        if not entries:
            raise ConfigurationError.with_details(
                field=source,
                issue="signature table contains no entries",
            )
        return cls(
            ExtractorSignature(
                name=name,
                text_index=entry.text,
                context_index=entry.context,
                plural_index=entry.plural,
            )
            for name, entry in entries.items()
        )

    def lookup(self, name: str) -> ExtractorSignature | None:
        return self._signatures.get(name)

    def __getitem__(self, name: str) -> ExtractorSignature:
        return self._signatures[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._signatures)

    def __len__(self) -> int:
        return len(self._signatures)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self._signatures)!r})"


def load_registry(path: Path | None = None) -> SignatureRegistry:
    """Return the registry for a run.

    Parameters
    ----------
    path : Path | None, optional
        External signature table. When None the built-in defaults are used.

    Returns
    -------
    SignatureRegistry
        The loaded registry.
    """
    if path is None:
        return SignatureRegistry.default()
    registry = SignatureRegistry.from_file(path)
    LOGGER.info(
        "Loaded signature table",
        extra={"operation": "load_registry", "path": str(path), "functions": sorted(registry)},
    )
    return registry

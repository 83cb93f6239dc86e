"""Deduplicated message catalog with incrementally maintained statistics.

Messages are keyed by ``(context, text)``. Every accepted call site goes
through :meth:`Catalog.insert`, which updates the catalog and its
:class:`Statistics` together so the counters agree with the catalog at every
point. The plural form of a message is fixed by its first insertion; later
call sites supplying a different plural only add a reference.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from msgharvest.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from msgharvest.extractor import Candidate

__all__ = ["Catalog", "Message", "Statistics"]

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Message:
    """One unique catalog entry and the files referencing it."""

    text: str
    context: str = ""
    plural_text: str | None = None
    references: set[str] = field(default_factory=set)


@dataclass(slots=True)
class Statistics:
    """Running counters maintained alongside the catalog."""

    message_count: int = 0
    plural_count: int = 0
    usage_count: int = 0
    context_count: int = 0
    files_parsed: int = 0
    files_with_messages: int = 0
    files_failed: int = 0
    usage_breakdown: Counter[str] = field(default_factory=Counter)

    def to_dict(self) -> dict[str, object]:
        return {
            "message_count": self.message_count,
            "plural_count": self.plural_count,
            "usage_count": self.usage_count,
            "context_count": self.context_count,
            "files_parsed": self.files_parsed,
            "files_with_messages": self.files_with_messages,
            "files_failed": self.files_failed,
            "usage_breakdown": dict(sorted(self.usage_breakdown.items())),
        }


class Catalog:
    """Mapping of context to text to :class:`Message`, plus statistics.

    Attributes
    ----------
    stats : Statistics
        Counters updated by every mutation.

    Examples
    --------
    >>> from msgharvest.extractor import Candidate
    >>> catalog = Catalog()
    >>> _ = catalog.insert(Candidate("Open", context="menu"), "a.ts", function="pgettext")
    >>> _ = catalog.insert(Candidate("Open", context="menu"), "b.ts", function="pgettext")
    >>> sorted(catalog.get("menu", "Open").references)
    ['a.ts', 'b.ts']
    >>> catalog.stats.usage_count, catalog.stats.message_count
    (2, 1)
    """

    def __init__(self) -> None:
        self._contexts: dict[str, dict[str, Message]] = {}
        self._files_with_messages: set[str] = set()
        self.stats = Statistics()

    def insert(self, candidate: Candidate, source_file: str, *, function: str) -> Message:
        """Merge ``candidate`` into the catalog and count the usage.

        Parameters
        ----------
        candidate : Candidate
            Extracted message.
        source_file : str
            File containing the call site.
        function : str
            Resolved marker-function name, used for the usage breakdown.

        Returns
        -------
        Message
            The new or existing catalog entry.
        """
        message = self._upsert(
            candidate.context, candidate.text, candidate.plural_text, {source_file}
        )
        self.stats.usage_count += 1
        self.stats.usage_breakdown[function] += 1
        self._files_with_messages.add(source_file)
        self.stats.files_with_messages = len(self._files_with_messages)
        return message

    def _upsert(
        self,
        context: str,
        text: str,
        plural_text: str | None,
        references: set[str],
    ) -> Message:
        texts = self._contexts.get(context)
        if texts is None:
            texts = self._contexts[context] = {}
            self.stats.context_count += 1
        message = texts.get(text)
        if message is None:
            message = texts[text] = Message(
                text=text,
                context=context,
                plural_text=plural_text,
                references=set(references),
            )
            self.stats.message_count += 1
            if plural_text is not None:
                self.stats.plural_count += 1
            return message
        message.references.update(references)
        if plural_text != message.plural_text and plural_text is not None:
            LOGGER.debug(
                "Discarding plural form for existing message",
                extra={
                    "operation": "catalog_insert",
                    "context": context,
                    "text": text,
                    "kept": message.plural_text,
                    "discarded": plural_text,
                },
            )
        return message

    def record_file(self, path: str) -> None:
        """Count one file handed to the driver, whatever its match outcome."""
        self.stats.files_parsed += 1
        LOGGER.debug(
            "Recorded parsed file",
            extra={
                "operation": "catalog_record_file",
                "path": path,
                "files_parsed": self.stats.files_parsed,
            },
        )

    def record_failure(self, path: str) -> None:
        """Count one file skipped because it could not be read or parsed."""
        self.stats.files_failed += 1
        LOGGER.debug(
            "Recorded failed file",
            extra={
                "operation": "catalog_record_failure",
                "path": path,
                "files_failed": self.stats.files_failed,
            },
        )

    def merge(self, other: Catalog) -> None:
        """Fold ``other`` into this catalog.

        Messages are merged in ``other``'s insertion order, so folding
        per-file catalogs in file order reproduces a sequential traversal,
        including which plural form wins.

        Parameters
        ----------
        other : Catalog
            Catalog built over a disjoint slice of the run.
        """
        for message in other.messages():
            self._upsert(message.context, message.text, message.plural_text, message.references)
        self.stats.usage_count += other.stats.usage_count
        self.stats.usage_breakdown.update(other.stats.usage_breakdown)
        self.stats.files_parsed += other.stats.files_parsed
        self.stats.files_failed += other.stats.files_failed
        self._files_with_messages.update(other.files_with_messages)
        self.stats.files_with_messages = len(self._files_with_messages)

    def get(self, context: str, text: str) -> Message | None:
        return self._contexts.get(context, {}).get(text)

    def contexts(self) -> dict[str, dict[str, Message]]:
        """Return a shallow copy of the context -> text -> message mapping."""
        return {context: dict(texts) for context, texts in self._contexts.items()}

    def messages(self) -> Iterator[Message]:
        for texts in self._contexts.values():
            yield from texts.values()

    @property
    def files_with_messages(self) -> frozenset[str]:
        return frozenset(self._files_with_messages)

    def __len__(self) -> int:
        return sum(len(texts) for texts in self._contexts.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:  # noqa: PLR2004
            return False
        context, text = key
        return self.get(context, text) is not None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(messages={self.stats.message_count}, "
            f"contexts={self.stats.context_count}, usages={self.stats.usage_count})"
        )

"""Shared pytest fixtures for msgharvest tests.

Provides builders for hand-made call sites, a small on-disk source corpus
writer and a cross-check of catalog statistics against the catalog contents.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from msgharvest.catalog import Catalog
from msgharvest.registry import SignatureRegistry
from msgharvest.syntax import Argument, Callee, CalleeShape, CallSite

CallFactory = Callable[..., CallSite]
CorpusWriter = Callable[[dict[str, str | bytes]], Path]


def build_call(
    name: str | None,
    *args: str | None,
    shape: CalleeShape = CalleeShape.IDENTIFIER,
) -> CallSite:
    """Build a call site; ``str`` arguments are literals, ``None`` is a non-literal."""
    arguments = tuple(Argument.opaque() if arg is None else Argument.literal(arg) for arg in args)
    return CallSite(callee=Callee(shape, name), arguments=arguments, line=1)


def check_catalog_invariants(catalog: Catalog) -> None:
    """Recount ``catalog`` and compare with its incrementally kept statistics."""
    stats = catalog.stats
    contexts = catalog.contexts()
    messages = list(catalog.messages())
    pairs = [(message.context, message.text) for message in messages]
    assert len(pairs) == len(set(pairs))
    assert stats.message_count == len(messages) == len(catalog)
    assert stats.context_count == len(contexts)
    assert stats.plural_count == sum(1 for message in messages if message.plural_text is not None)
    assert stats.usage_count >= stats.message_count
    assert stats.usage_count == sum(stats.usage_breakdown.values())
    referenced = {path for message in messages for path in message.references}
    assert stats.files_with_messages == len(catalog.files_with_messages) == len(referenced)
    for context, texts in contexts.items():
        for text, message in texts.items():
            assert (message.context, message.text) == (context, text)


@pytest.fixture(name="make_call")
def _make_call() -> CallFactory:
    return build_call


@pytest.fixture(name="check_invariants")
def _check_invariants() -> Callable[[Catalog], None]:
    return check_catalog_invariants


@pytest.fixture
def registry() -> SignatureRegistry:
    return SignatureRegistry.default()


@pytest.fixture
def write_corpus(tmp_path: Path) -> CorpusWriter:
    """Return a writer creating ``{relative_path: content}`` below a fresh directory."""

    def _write(files: dict[str, str | bytes]) -> Path:
        root = tmp_path / "corpus"
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        root.mkdir(exist_ok=True)
        return root

    return _write


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    """Undo handler changes made by ``setup_logging`` inside a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)

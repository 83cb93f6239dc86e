"""Human-readable summary and JSON dump of a harvested catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import msgspec

if TYPE_CHECKING:
    from msgharvest.catalog import Catalog

__all__ = ["CatalogDump", "MessageDump", "catalog_to_dump", "dump_catalog_json", "render_summary"]


class MessageDump(msgspec.Struct, frozen=True, omit_defaults=True):
    """Serialized message; references are sorted."""

    text: str
    references: list[str]
    plural: str | None = None


class CatalogDump(msgspec.Struct, frozen=True):
    """Serialized catalog: contexts and texts sorted, plus statistics."""

    contexts: dict[str, list[MessageDump]]
    stats: dict[str, object]


def render_summary(catalog: Catalog) -> str:
    """Render the end-of-run summary.

    Parameters
    ----------
    catalog : Catalog
        Harvested catalog.

    Returns
    -------
    str
        Multi-line summary: messages, usages with a per-function breakdown
        (most used first), files, failures and contexts.
    """
    stats = catalog.stats
    lines = [
        f"{stats.message_count} messages extracted ({stats.plural_count} with plural forms)",
        f"{stats.usage_count} total usages",
    ]
    breakdown = sorted(stats.usage_breakdown.items(), key=lambda item: (-item[1], item[0]))
    lines.extend(f"  {count} {name} usages" for name, count in breakdown)
    lines.append(
        f"{stats.files_parsed} files ({stats.files_with_messages} with messages)",
    )
    if stats.files_failed:
        lines.append(f"{stats.files_failed} files skipped")
    lines.append(f"{stats.context_count} message contexts")
    return "\n".join(lines)


def catalog_to_dump(catalog: Catalog) -> CatalogDump:
    """Return a deterministic, order-independent snapshot of ``catalog``."""
    contexts = {
        context: [
            MessageDump(
                text=message.text,
                references=sorted(message.references),
                plural=message.plural_text,
            )
            for _, message in sorted(texts.items())
        ]
        for context, texts in sorted(catalog.contexts().items())
    }
    return CatalogDump(contexts=contexts, stats=catalog.stats.to_dict())


def dump_catalog_json(catalog: Catalog) -> bytes:
    """Encode :func:`catalog_to_dump` as JSON."""
    return msgspec.json.format(msgspec.json.encode(catalog_to_dump(catalog)), indent=2)

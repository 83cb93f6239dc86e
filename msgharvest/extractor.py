"""Argument extraction for matched call sites.

The text argument is strict: when it is missing or not a string literal the
whole call is skipped. Context and plural arguments are lenient: anything
other than a string literal simply means "no context" (empty string) or
"no plural form".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from msgharvest.registry import ExtractorSignature
    from msgharvest.syntax import CallSite

__all__ = ["Candidate", "extract_candidate"]


@dataclass(frozen=True, slots=True)
class Candidate:
    """Provisional message extracted from one call site."""

    text: str
    plural_text: str | None = None
    context: str = ""


def extract_candidate(call: CallSite, signature: ExtractorSignature) -> Candidate | None:
    """Build a candidate from ``call`` using ``signature``'s argument positions.

    Parameters
    ----------
    call : CallSite
        Matched call site.
    signature : ExtractorSignature
        Signature the callee resolved to.

    Returns
    -------
    Candidate | None
        The candidate, or None when the text argument is missing or dynamic.
    """
    text = call.literal_at(signature.text_index)
    if text is None:
        return None
    context = call.literal_at(signature.context_index)
    return Candidate(
        text=text,
        plural_text=call.literal_at(signature.plural_index),
        context=context if context is not None else "",
    )

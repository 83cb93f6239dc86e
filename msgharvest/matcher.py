"""Call-site matching against the signature registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from msgharvest.syntax import Callee, CalleeShape

if TYPE_CHECKING:
    from msgharvest.registry import ExtractorSignature, SignatureRegistry
    from msgharvest.syntax import CallSite

__all__ = ["match_call", "resolve_callee"]

_NAMED_SHAPES = frozenset(
    {CalleeShape.IDENTIFIER, CalleeShape.MEMBER, CalleeShape.OPTIONAL_MEMBER}
)


def resolve_callee(callee: Callee) -> str | None:
    """Normalize a callee to the plain function name used for lookup.

    ``f(...)``, ``obj.f(...)`` and ``obj?.f(...)`` all resolve to ``"f"``.
    Every other shape resolves to None.

    Parameters
    ----------
    callee : Callee
        Classified callee expression.

    Returns
    -------
    str | None
        Function name, or None when the shape is not matchable.
    """
    if callee.shape not in _NAMED_SHAPES:
        return None
    return callee.name or None


def match_call(call: CallSite, registry: SignatureRegistry) -> ExtractorSignature | None:
    """Return the signature registered for ``call``'s callee, if any."""
    name = resolve_callee(call.callee)
    if name is None:
        return None
    return registry.lookup(name)

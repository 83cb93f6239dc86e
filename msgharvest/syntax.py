"""Parser-independent view of call sites.

The parser adapter (:mod:`msgharvest.tscore`) converts every call node into a
:class:`CallSite`; matching and extraction only ever see these values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

__all__ = ["Argument", "CallSite", "Callee", "CalleeShape"]


class CalleeShape(StrEnum):
    """Syntactic shape of a call's callee expression."""

    IDENTIFIER = "identifier"
    """``f(...)``"""
    MEMBER = "member"
    """``obj.f(...)``"""
    OPTIONAL_MEMBER = "optional_member"
    """``obj?.f(...)``"""
    OTHER = "other"
    """Computed member access, call results, parenthesized callees, ..."""


@dataclass(frozen=True, slots=True)
class Callee:
    """Classified callee; ``name`` is the identifier or property name."""

    shape: CalleeShape
    name: str | None = None

    @classmethod
    def other(cls) -> Callee:
        return cls(CalleeShape.OTHER)


@dataclass(frozen=True, slots=True)
class Argument:
    """One call argument.

    ``value`` holds the decoded string for string literals (possibly empty)
    and is None for every other expression.
    """

    value: str | None = None

    @property
    def is_literal(self) -> bool:
        return self.value is not None

    @classmethod
    def literal(cls, value: str) -> Argument:
        return cls(value)

    @classmethod
    def opaque(cls) -> Argument:
        return cls(None)


@dataclass(frozen=True, slots=True)
class CallSite:
    """A call expression as seen by the matcher."""

    callee: Callee
    arguments: tuple[Argument, ...] = ()
    line: int = 0

    def literal_at(self, index: int | None) -> str | None:
        """Return the literal string at ``index``.

        Parameters
        ----------
        index : int | None
            Argument position, or None when the signature has no such field.

        Returns
        -------
        str | None
            The decoded literal, or None when the index is unset, out of range
            or the argument is not a string literal.
        """
        if index is None or index < 0 or index >= len(self.arguments):
            return None
        return self.arguments[index].value

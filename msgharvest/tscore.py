"""Tree-sitter front end: grammars, parsing and call-site classification.

JavaScript and TypeScript sources are parsed with the ``tree-sitter``
grammars; every ``call_expression`` node is converted into a
:class:`~msgharvest.syntax.CallSite` for the matcher.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterator
from functools import cache
from importlib import import_module
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, cast

from tree_sitter import Language, Parser

from msgharvest.errors import ConfigurationError, ParseError
from msgharvest.syntax import Argument, Callee, CalleeShape, CallSite

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

__all__ = [
    "EXTENSION_LANGUAGE",
    "LANGUAGE_FACTORIES",
    "decode_string_literal",
    "iter_call_nodes",
    "iter_call_sites",
    "iter_nodes_postorder",
    "language_for_path",
    "load_language",
    "parse_bytes",
    "parse_source",
    "to_call_site",
]

LANGUAGE_FACTORIES: Final[dict[str, tuple[str, str]]] = {
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "javascript": ("tree_sitter_javascript", "language"),
}
"""Canonical language name -> (package, factory attribute)."""

EXTENSION_LANGUAGE: Final[dict[str, str]] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

_CALL_NODE = "call_expression"
_STRING_NODE = "string"
_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}
_LINE_TERMINATORS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})
_MAX_CODE_POINT = 0x10FFFF
_OCTAL_ESCAPE = re.compile(r"[0-7]{1,3}")
_SURROGATE = re.compile("[\ud800-\udfff]")


@cache
def load_language(name: str) -> Language:
    """Load a Tree-sitter grammar by canonical name.

    Parameters
    ----------
    name : str
        One of :data:`LANGUAGE_FACTORIES`.

    Returns
    -------
    Language
        Instantiated Tree-sitter ``Language``.

    Raises
    ------
    ConfigurationError
        If the name is unknown or the grammar package is missing or does not
        expose the expected factory.
    """
    try:
        package, factory_name = LANGUAGE_FACTORIES[name]
    except KeyError as exc:
        message = f"Unsupported language '{name}'. Choose one of {sorted(LANGUAGE_FACTORIES)}."
        raise ConfigurationError(message, cause=exc) from exc
    try:
        module = import_module(package)
    except ModuleNotFoundError as exc:
        message = f"Tree-sitter package '{package}' is not installed."
        raise ConfigurationError(message, cause=exc) from exc
    try:
        factory = getattr(module, factory_name)
    except AttributeError as exc:
        message = f"Tree-sitter package '{package}' does not expose a '{factory_name}()' factory."
        raise ConfigurationError(message, cause=exc) from exc
    return Language(factory())


def language_for_path(path: str | Path, default: str = "tsx") -> str:
    """Return the canonical language name for ``path``'s extension."""
    return EXTENSION_LANGUAGE.get(Path(path).suffix.lower(), default)


def parse_bytes(lang: Language, data: bytes) -> Tree:
    """Parse a byte buffer with the supplied Tree-sitter language.

    Parameters
    ----------
    lang : Language
        Instantiated Tree-sitter grammar.
    data : bytes
        UTF-8 encoded source code to parse.

    Returns
    -------
    Tree
        Parsed syntax tree for the provided source buffer.
    """
    parser = Parser()
    cast("Any", parser).language = lang
    return parser.parse(data)


def parse_source(path: str | Path, data: bytes, default_language: str = "tsx") -> Tree:
    """Parse one source file, rejecting undecodable or syntactically broken input.

    Parameters
    ----------
    path : str | Path
        File path; only its extension is used, to pick the grammar.
    data : bytes
        File contents.
    default_language : str, optional
        Grammar for unrecognised extensions. Defaults to ``"tsx"``.

    Returns
    -------
    Tree
        Error-free syntax tree.

    Raises
    ------
    ParseError
        If ``data`` is not UTF-8 or the tree contains syntax errors.
    """
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        message = f"File is not valid UTF-8: {exc.reason} at byte {exc.start}"
        raise ParseError(message, path=str(path), cause=exc) from exc
    tree = parse_bytes(load_language(language_for_path(path, default_language)), data)
    if tree.root_node.has_error:
        location = _first_error_location(tree.root_node)
        message = f"Syntax errors in source (first near line {location})"
        raise ParseError(message, path=str(path))
    return tree


def _first_error_location(root: Node) -> int:
    for node in iter_nodes_postorder(root):
        if node.is_error or node.is_missing:
            return node.start_point[0] + 1
    return root.start_point[0] + 1


def iter_nodes_postorder(root: Node) -> Iterator[Node]:
    """Yield every node below and including ``root``, children first.

    Uses a tree cursor instead of recursion so deeply nested sources cannot
    exhaust the interpreter stack.
    """
    cursor = root.walk()
    children_done = False
    while True:
        if not children_done and cursor.goto_first_child():
            continue
        node = cursor.node
        if node is not None:
            yield node
        if cursor.goto_next_sibling():
            children_done = False
        elif cursor.goto_parent():
            children_done = True
        else:
            return


def iter_call_nodes(root: Node) -> Iterator[Node]:
    """Yield every ``call_expression`` node, nested calls before their enclosing call."""
    for node in iter_nodes_postorder(root):
        if node.type == _CALL_NODE:
            yield node


def iter_call_sites(tree: Tree) -> Iterator[CallSite]:
    """Yield a :class:`CallSite` for every call in ``tree``, in post-order."""
    for node in iter_call_nodes(tree.root_node):
        yield to_call_site(node)


def to_call_site(node: Node) -> CallSite:
    """Classify a ``call_expression`` node.

    Parameters
    ----------
    node : Node
        A ``call_expression`` node.

    Returns
    -------
    CallSite
        Callee shape/name, classified arguments and 1-based line number.
    """
    arguments_node = node.child_by_field_name("arguments")
    arguments: tuple[Argument, ...] = ()
    # Tagged templates (tag`...`) carry a template_string instead of arguments.
    if arguments_node is not None and arguments_node.type == "arguments":
        arguments = tuple(
            _classify_argument(child)
            for child in arguments_node.named_children
            if child.type != "comment"
        )
    return CallSite(
        callee=_classify_callee(node.child_by_field_name("function")),
        arguments=arguments,
        line=node.start_point[0] + 1,
    )


def _classify_callee(node: Node | None) -> Callee:
    if node is None:
        return Callee.other()
    if node.type == "identifier":
        return Callee(CalleeShape.IDENTIFIER, _node_text(node))
    if node.type == "member_expression":
        prop = node.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return Callee.other()
        optional = node.child_by_field_name("optional_chain") is not None
        shape = CalleeShape.OPTIONAL_MEMBER if optional else CalleeShape.MEMBER
        return Callee(shape, _node_text(prop))
    return Callee.other()


def _classify_argument(node: Node) -> Argument:
    if node.type == _STRING_NODE:
        return Argument.literal(decode_string_literal(node))
    return Argument.opaque()


def decode_string_literal(node: Node) -> str:
    """Return the runtime value of a ``string`` node.

    Parameters
    ----------
    node : Node
        A ``string`` node (single- or double-quoted, not a template).

    Returns
    -------
    str
        Literal value with escape sequences resolved.
    """
    parts: list[str] = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(_node_text(child))
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(_node_text(child)))
        elif child.type == "html_character_reference":
            parts.append(html.unescape(_node_text(child)))
    value = "".join(parts)
    if _SURROGATE.search(value):
        value = value.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return value


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if body in _LINE_TERMINATORS:
        return ""
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body.startswith("u{") and body.endswith("}"):
        code_point = int(body[2:-1], 16)
        return chr(code_point) if code_point <= _MAX_CODE_POINT else "\ufffd"
    if body.startswith("u") and len(body) == 5:  # noqa: PLR2004
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:  # noqa: PLR2004
        return chr(int(body[1:], 16))
    if _OCTAL_ESCAPE.fullmatch(body):
        # Legacy octal tops out at \377; a third digit after 4-7 is plain text.
        if len(body) == 3 and body[0] in "4567":  # noqa: PLR2004
            return chr(int(body[:2], 8)) + body[2]
        return chr(int(body, 8))
    return body


def _node_text(node: Node) -> str:
    text = node.text
    return text.decode("utf-8") if text is not None else ""

"""Tree-sitter helpers for reading story modules without executing them."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from .models import Expression

Resolver = Callable[[str], Optional[Any]]

_TYPESCRIPT = Language(tsts.language_typescript())
_TSX = Language(tsts.language_tsx())

# Plain TypeScript cannot parse JSX and TSX rejects `<T>value` casts.
_TYPESCRIPT_SUFFIXES = {".ts", ".mts", ".cts"}

_WRAPPERS = {
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "type_assertion",
}

_FUNCTIONS = {"arrow_function", "function_expression", "function", "function_declaration"}

_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_LINE_CONTINUATION = re.compile(r"^\\(?:\r\n|[\n\r  ])$")


def parse_module(source: str, path: Path | str | None = None) -> Tree:
    """Parse JavaScript/TypeScript source, picking the grammar from the suffix."""
    suffix = Path(path).suffix if path is not None else ".tsx"
    language = _TYPESCRIPT if suffix in _TYPESCRIPT_SUFFIXES else _TSX
    parser = Parser(language)
    return parser.parse(source.encode("utf-8"))


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def named(node: Node) -> Iterator[Node]:
    """Named children without comments."""
    for child in node.named_children:
        if child.type != "comment":
            yield child


def descendants(node: Node, types: Optional[Set[str]] = None) -> Iterator[Node]:
    """Pre-order walk over named descendants, optionally limited to ``types``."""
    stack = list(reversed(node.named_children))
    while stack:
        current = stack.pop()
        if types is None or current.type in types:
            yield current
        stack.extend(reversed(current.named_children))


def has_token(node: Node, token: str) -> bool:
    """True when ``node`` has a direct child token such as ``?``, ``set`` or ``default``."""
    return any(child.type == token for child in node.children)


def comments_before(node: Node) -> List[Node]:
    """Comment nodes directly above ``node``, with no blank line or code in between."""
    comments: List[Node] = []
    row = node.start_point[0]
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment" and sibling.end_point[0] >= row - 1:
        comments.insert(0, sibling)
        row = sibling.start_point[0]
        sibling = sibling.prev_sibling
    # A comment sharing a line with earlier code belongs to that code.
    if comments and sibling is not None and sibling.end_point[0] == comments[0].start_point[0]:
        comments.pop(0)
    return comments


def callee_name(call: Node) -> str:
    """Source text of the called expression (``defineProps``, ``React.memo``)."""
    return node_text(call.child_by_field_name("function"))


def call_arguments(call: Node) -> List[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return []
    return list(named(arguments))


def type_arguments(node: Node) -> List[Node]:
    """Type arguments of a call, generic type or ``extends`` clause."""
    generics = node.child_by_field_name("type_arguments")
    if generics is None:
        generics = next((child for child in node.named_children if child.type == "type_arguments"), None)
    return list(named(generics)) if generics is not None else []


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and ``as``/``satisfies``/``!`` wrappers around an expression."""
    while node is not None and node.type in _WRAPPERS:
        inner = list(named(node))
        if not inner:
            return node
        # `<T>value` keeps the expression last; the other wrappers keep it first.
        node = inner[-1] if node.type == "type_assertion" else inner[0]
    return node


def is_function(node: Optional[Node]) -> bool:
    return node is not None and node.type in _FUNCTIONS


def object_pairs(node: Node) -> Dict[str, Node]:
    """Map property keys of an object literal onto their value nodes (last one wins)."""
    pairs: Dict[str, Node] = {}
    for child in named(node):
        if child.type == "pair":
            key = property_key(child.child_by_field_name("key"))
            value = child.child_by_field_name("value")
            if key is not None and value is not None:
                pairs[key] = value
        elif child.type == "shorthand_property_identifier":
            pairs[node_text(child)] = child
        elif child.type == "method_definition":
            key = property_key(child.child_by_field_name("name"))
            if key is not None:
                pairs[key] = child
    return pairs


def property_key(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    if node.type == "string":
        return string_value(node)
    if node.type == "computed_property_name":
        inner = next(named(node), None)
        if inner is not None and inner.type == "string":
            return string_value(inner)
        return None
    return node_text(node)


def string_value(node: Node) -> str:
    parts: List[str] = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(node_text(child))
        elif child.type == "escape_sequence":
            parts.append(_unescape(node_text(child)))
    value = "".join(parts)
    try:
        # Joins `😀` style surrogate pairs into one code point.
        return value.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return value


def literal_value(node: Optional[Node], resolve: Optional[Resolver] = None) -> Any:
    """Convert a literal expression node into Python data.

    Identifiers and member expressions are handed to ``resolve``; anything that
    is not a static literal becomes an :class:`Expression` holding its source.
    """
    node = unwrap(node)
    if node is None:
        return None
    kind = node.type

    if kind == "string":
        return string_value(node)
    if kind == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return Expression(node_text(node))
        if any(child.type == "string_fragment" for child in node.named_children):
            return string_value(node)
        return node_text(node)[1:-1]
    if kind == "number":
        return _number(node_text(node))
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in {"null", "undefined"}:
        return None
    if kind == "unary_expression":
        operator = node_text(node.child_by_field_name("operator"))
        argument = unwrap(node.child_by_field_name("argument"))
        if operator in {"-", "+"} and argument is not None and argument.type == "number":
            value = _number(node_text(argument))
            if isinstance(value, (int, float)):
                return -value if operator == "-" else value
        return Expression(node_text(node))
    if kind == "array":
        return _array_value(node, resolve)
    if kind == "object":
        return _object_value(node, resolve)
    if kind in {"identifier", "member_expression"} and resolve is not None:
        resolved = resolve(node_text(node))
        if resolved is not None:
            return resolved
    return Expression(node_text(node))


def _array_value(node: Node, resolve: Optional[Resolver]) -> List[Any]:
    items: List[Any] = []
    for child in named(node):
        if child.type == "spread_element":
            target = next(named(child), None)
            spread = literal_value(target, resolve)
            if isinstance(spread, list):
                items.extend(spread)
            else:
                items.append(Expression(node_text(child)))
            continue
        items.append(literal_value(child, resolve))
    return items


def _object_value(node: Node, resolve: Optional[Resolver]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for child in named(node):
        if child.type == "pair":
            key = property_key(child.child_by_field_name("key"))
            if key is None:
                continue
            result[key] = literal_value(child.child_by_field_name("value"), resolve)
        elif child.type == "shorthand_property_identifier":
            name = node_text(child)
            resolved = resolve(name) if resolve is not None else None
            result[name] = resolved if resolved is not None else Expression(name)
        elif child.type == "method_definition":
            key = property_key(child.child_by_field_name("name"))
            if key is not None:
                result[key] = Expression(node_text(child))
        elif child.type == "spread_element":
            target = next(named(child), None)
            spread = literal_value(target, resolve)
            if isinstance(spread, dict):
                result.update(spread)
    return result


def _number(text: str) -> Any:
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        return Expression(text)
    try:
        if cleaned[:2].lower() in {"0x", "0o", "0b"}:
            return int(cleaned, 0)
        return int(cleaned)
    except ValueError:
        pass
    try:
        return float(cleaned)
    except ValueError:
        return Expression(text)


def _unescape(text: str) -> str:
    """Decode one JavaScript escape sequence (``\\n``, ``\\x41``, ``\\u00e9``, ``\\u{1F600}``)."""
    if len(text) < 2 or not text.startswith("\\"):
        return text
    if _LINE_CONTINUATION.match(text):
        return ""
    body = text[1:]
    if body[0] in {"u", "x"} and len(body) > 1:
        digits = body[2:-1] if body.startswith("u{") and body.endswith("}") else body[1:]
        try:
            return chr(int(digits, 16))
        except (ValueError, OverflowError):
            return text
    return _SIMPLE_ESCAPES.get(body, body)


__all__ = [
    "call_arguments",
    "callee_name",
    "comments_before",
    "descendants",
    "has_token",
    "is_function",
    "literal_value",
    "named",
    "node_text",
    "object_pairs",
    "parse_module",
    "property_key",
    "string_value",
    "type_arguments",
    "unwrap",
]

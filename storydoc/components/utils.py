"""Syntax-tree helpers shared by component strategies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set

from tree_sitter import Node, Tree

from ..logging import get_logger
from ..models import PropertyDescriptor
from ..syntax import (
    comments_before,
    descendants,
    has_token,
    named,
    node_text,
    object_pairs,
    parse_module,
    property_key,
    type_arguments,
)

_LOGGER = get_logger("components")

_DIRECTIVE_LINE = re.compile(r"^(?:eslint|prettier|@ts-|istanbul|tslint|jshint)")
_STRING_LITERAL = re.compile(r"""(['"])[\s\S]*\1|`[^`]*`""")
_NUMBER_LITERAL = re.compile(r"-?(?:\d[\d_]*)?\.?\d+(?:[eE][+-]?\d+)?")

_TYPE_DECLARATIONS = {"interface_declaration", "type_alias_declaration"}
_TYPE_WRAPPERS = {
    "Readonly",
    "Required",
    "Partial",
    "PropsWithChildren",
    "React.PropsWithChildren",
}


@dataclass
class Member:
    """One declared or destructured prop before it becomes a descriptor."""

    key: str
    type: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False
    doc: Optional[str] = None


def read_source(path: Path) -> Optional[str]:
    """Return file contents, or None when the file is missing or unreadable."""
    try:
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.debug("Could not read %s: %s", path, exc)
        return None


@lru_cache(maxsize=16)
def parse_source(source: str, suffix: str) -> Tree:
    """Parse ``source`` once per strategy pass; resolvers share the tree."""
    return parse_module(source, f"component{suffix}")


def source_from(node: Node, source: str) -> str:
    """Return ``source`` from the start of ``node`` to the end of the file."""
    return source.encode("utf-8")[node.start_byte :].decode("utf-8", errors="ignore")


def clean_comment(raw: str) -> Optional[str]:
    """Strip comment markers and JSDoc block tags from a comment block."""
    lines: List[str] = []
    for line in raw.strip().splitlines():
        stripped = line.strip()
        stripped = re.sub(r"^(?:/\*+|<!--|//+)", "", stripped)
        stripped = re.sub(r"(?:\*+/|-->)$", "", stripped).strip()
        stripped = re.sub(r"^\*+\s?", "", stripped).rstrip()
        if stripped.startswith("@component"):
            stripped = stripped[len("@component") :].strip()
        elif stripped.startswith("@"):
            break
        if _DIRECTIVE_LINE.match(stripped):
            continue
        lines.append(stripped)

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    text = "\n".join(lines).strip()
    return text or None


def doc_comment(node: Optional[Node]) -> Optional[str]:
    """Return the cleaned comment attached above ``node``.

    The closest block comment wins; otherwise a run of ``//`` lines is joined.
    """
    if node is None:
        return None
    comments = comments_before(node)
    if not comments:
        return None
    last = node_text(comments[-1])
    if last.startswith("/*"):
        return clean_comment(last)
    run: List[str] = []
    for comment in reversed(comments):
        text = node_text(comment)
        if not text.startswith("//"):
            break
        run.insert(0, text)
    return clean_comment("\n".join(run))


def pascal_case(name: str) -> str:
    """Convert a file stem such as ``my-button`` into ``MyButton``."""
    parts = re.split(r"[^A-Za-z0-9]+", name)
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def excerpt(text: str, limit: int) -> Optional[str]:
    """Return ``text`` stripped and capped at ``limit`` characters."""
    text = text.strip()
    if not text:
        return None
    if len(text) > limit:
        text = text[:limit].rstrip()
    return text


def normalize_type(text: Optional[str]) -> Optional[str]:
    """Collapse whitespace in a type annotation."""
    if text is None:
        return None
    collapsed = " ".join(text.split()).strip().rstrip(";,").strip()
    if collapsed.startswith("| "):
        collapsed = collapsed[2:]
    return collapsed or None


def annotation_text(node: Optional[Node]) -> Optional[str]:
    """Type text of a ``type_annotation`` node (without the colon) or any type node."""
    if node is None:
        return None
    if node.type == "type_annotation":
        inner = next(named(node), None)
        return normalize_type(node_text(inner)) if inner is not None else None
    return normalize_type(node_text(node))


def find_type_declaration(root: Node, name: str) -> Optional[Node]:
    """Return the ``interface``/``type`` declaration named ``name`` anywhere in the module."""
    for declaration in descendants(root, _TYPE_DECLARATIONS):
        if node_text(declaration.child_by_field_name("name")) == name:
            return declaration
    return None


def type_members(node: Optional[Node], root: Node, seen: Optional[Set[str]] = None) -> Optional[List[Member]]:
    """Resolve a props type into members.

    Handles type literals, local interfaces and aliases (including ``extends``),
    intersections and the ``Readonly``/``Partial`` style wrappers. Returns None
    when the type cannot be resolved locally.
    """
    if node is None:
        return None
    seen = set() if seen is None else seen
    kind = node.type

    if kind in {"type_annotation", "parenthesized_type"}:
        return type_members(next(named(node), None), root, seen)
    if kind in {"object_type", "interface_body"}:
        return _signature_members(node)
    if kind in {"type_identifier", "identifier"}:
        return _declared_members(node_text(node), root, seen)
    if kind == "generic_type":
        name = node_text(node.child_by_field_name("name"))
        if name in _TYPE_WRAPPERS:
            arguments = type_arguments(node)
            members = type_members(arguments[0], root, seen) if arguments else None
            if members is not None and name == "Partial":
                for member in members:
                    member.optional = True
            return members
        return _declared_members(name, root, seen)
    if kind == "intersection_type":
        merged: Optional[List[Member]] = None
        for part in named(node):
            members = type_members(part, root, seen)
            if members is not None:
                merged = (merged or []) + members
        return merged
    return None


def find_props_members(root: Node) -> Optional[List[Member]]:
    """Members of the first ``*Props`` interface or type alias in the module."""
    for declaration in descendants(root, _TYPE_DECLARATIONS):
        name = node_text(declaration.child_by_field_name("name"))
        if name.endswith("Props"):
            return _declared_members(name, root, set())
    return None


def _declared_members(name: str, root: Node, seen: Set[str]) -> Optional[List[Member]]:
    if name in seen:
        return None
    seen.add(name)
    declaration = find_type_declaration(root, name)
    if declaration is None:
        return None
    if declaration.type == "type_alias_declaration":
        return type_members(declaration.child_by_field_name("value"), root, seen)

    members: List[Member] = []
    for clause in declaration.named_children:
        if clause.type != "extends_type_clause":
            continue
        for parent in named(clause):
            members.extend(type_members(parent, root, seen) or [])
    members.extend(_signature_members(declaration.child_by_field_name("body")) or [])
    return members


def _signature_members(body: Optional[Node]) -> Optional[List[Member]]:
    if body is None:
        return None
    members: List[Member] = []
    for child in named(body):
        key = property_key(child.child_by_field_name("name"))
        if key is None:
            continue
        if child.type == "property_signature":
            prop_type = annotation_text(child.child_by_field_name("type"))
        elif child.type == "method_signature":
            parameters = node_text(child.child_by_field_name("parameters"))
            returns = annotation_text(child.child_by_field_name("return_type"))
            prop_type = normalize_type(f"{parameters} => {returns}" if returns else parameters)
        else:
            continue
        members.append(
            Member(key=key, type=prop_type, optional=has_token(child, "?"), doc=doc_comment(child))
        )
    return members


def pattern_members(pattern: Node) -> List[Member]:
    """Names and defaults of an object destructuring pattern; rest elements are skipped."""
    members: List[Member] = []
    for child in named(pattern):
        if child.type == "shorthand_property_identifier_pattern":
            members.append(Member(key=node_text(child), doc=doc_comment(child)))
        elif child.type == "object_assignment_pattern":
            left = child.child_by_field_name("left")
            right = child.child_by_field_name("right")
            members.append(Member(key=node_text(left), default=node_text(right) or None, doc=doc_comment(child)))
        elif child.type == "pair_pattern":
            key = property_key(child.child_by_field_name("key"))
            if key is None:
                continue
            value = child.child_by_field_name("value")
            default: Optional[str] = None
            if value is not None and value.type == "assignment_pattern":
                default = node_text(value.child_by_field_name("right")) or None
            members.append(Member(key=key, default=default, doc=doc_comment(child)))
    return members


def object_texts(node: Optional[Node]) -> Dict[str, str]:
    """Map object literal keys onto the source text of their values."""
    if node is None or node.type != "object":
        return {}
    return {key: node_text(value) for key, value in object_pairs(node).items()}


def describe_members(
    typed: Optional[Sequence[Member]],
    destructured: Optional[Sequence[Member]] = None,
    defaults: Optional[Mapping[str, str]] = None,
) -> List[PropertyDescriptor]:
    """Merge a props type declaration with destructured defaults into descriptors.

    Typed members keep their declaration order; destructured names missing from
    the type follow them.
    """
    default_map: Dict[str, Optional[str]] = {}
    for member in destructured or []:
        default_map[member.key] = member.default
    for key, value in (defaults or {}).items():
        if default_map.get(key) is None:
            default_map[key] = value

    properties: List[PropertyDescriptor] = []
    seen: set[str] = set()
    for member in typed or []:
        if member.key in seen:
            continue
        seen.add(member.key)
        default = default_map.get(member.key)
        properties.append(
            PropertyDescriptor(
                name=member.key,
                type=member.type,
                default_value=default,
                description=member.doc,
                required=not member.optional and default is None,
            )
        )
    for member in destructured or []:
        if member.key in seen:
            continue
        seen.add(member.key)
        default = default_map.get(member.key)
        properties.append(
            PropertyDescriptor(
                name=member.key,
                type=infer_literal_type(default),
                default_value=default,
                description=member.doc,
            )
        )
    return properties


def infer_literal_type(value: Optional[str]) -> Optional[str]:
    """Infer a primitive type name from a literal default value."""
    if value is None:
        return None
    text = value.strip()
    if _STRING_LITERAL.fullmatch(text) and "${" not in text:
        return "string"
    if text in {"true", "false"}:
        return "boolean"
    if _NUMBER_LITERAL.fullmatch(text):
        return "number"
    if text.startswith("["):
        return "array"
    if text.startswith("{"):
        return "object"
    return None


__all__ = [
    "Member",
    "annotation_text",
    "clean_comment",
    "describe_members",
    "doc_comment",
    "excerpt",
    "find_props_members",
    "find_type_declaration",
    "infer_literal_type",
    "normalize_type",
    "object_texts",
    "parse_source",
    "pascal_case",
    "pattern_members",
    "read_source",
    "source_from",
    "type_members",
]

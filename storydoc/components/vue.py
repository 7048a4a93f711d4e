"""Vue single-file component strategy."""

from __future__ import annotations

import re
import textwrap
from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Node

from .base import ComponentStrategy
from .utils import (
    clean_comment,
    describe_members,
    doc_comment,
    normalize_type,
    object_texts,
    parse_source,
    pascal_case,
    pattern_members,
    type_members,
)
from ..models import FrameworkKind, PropertyDescriptor
from ..syntax import (
    call_arguments,
    callee_name,
    descendants,
    has_token,
    named,
    node_text,
    object_pairs,
    property_key,
    string_value,
    type_arguments,
    unwrap,
)

_SCRIPT_BLOCK = re.compile(r"<script\b(?P<attrs>[^>]*)>(?P<body>[\s\S]*?)</script\s*>", re.I)
_TEMPLATE_OPEN = re.compile(r"<template\b[^>]*>", re.I)
_TEMPLATE_CLOSE = re.compile(r"</template\s*>", re.I)
_LEADING_HTML_COMMENT = re.compile(r"^\s*(?P<comment><!--[\s\S]*?-->)")
_LEADING_JSDOC = re.compile(r"^\s*(?P<comment>/\*\*[\s\S]*?\*/)")
_SCRIPT_LANG = re.compile(r"""\blang\s*=\s*["']?(?P<lang>[\w-]+)""")

_CONSTRUCTOR_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Array": "array",
    "Object": "object",
    "Function": "function",
    "Symbol": "symbol",
    "BigInt": "bigint",
}


class VueStrategy(ComponentStrategy):
    """Reads template, props and options from ``.vue`` files."""

    framework = FrameworkKind.VUE

    def supports(self, path: Path, source: str) -> bool:
        return path.suffix == ".vue"

    def resolve_selector(self, path: Path, source: str) -> Optional[str]:
        name = unwrap(_component_options(_script_root(source)).get("name"))
        if name is not None and name.type == "string" and string_value(name):
            return string_value(name)
        return pascal_case(path.stem) or None

    def resolve_template(self, path: Path, source: str) -> Optional[str]:
        markup = _SCRIPT_BLOCK.sub("", source)
        opening = _TEMPLATE_OPEN.search(markup)
        if not opening:
            return None
        closings = list(_TEMPLATE_CLOSE.finditer(markup, opening.end()))
        if not closings:
            return None
        body = markup[opening.end() : closings[-1].start()]
        return textwrap.dedent(body).strip("\n").rstrip() or None

    def resolve_properties(self, path: Path, source: str) -> List[PropertyDescriptor]:
        if not _script(source):
            return []
        root = _script_root(source)

        macro = next(
            (call for call in descendants(root, {"call_expression"}) if callee_name(call) == "defineProps"),
            None,
        )
        if macro is not None:
            return _macro_props(root, macro)

        declared = _component_options(root).get("props")
        if declared is not None:
            return _runtime_props(declared)
        return []

    def resolve_description(self, path: Path, source: str) -> Optional[str]:
        leading = _LEADING_HTML_COMMENT.match(source)
        if leading:
            return clean_comment(leading.group("comment"))

        root = _script_root(source)
        for statement in named(root):
            if statement.type == "export_statement" and has_token(statement, "default"):
                doc = doc_comment(statement)
                if doc:
                    return doc
        for block in _SCRIPT_BLOCK.finditer(source):
            jsdoc = _LEADING_JSDOC.match(block.group("body"))
            if jsdoc:
                return clean_comment(jsdoc.group("comment"))
        return None

    def resolve_code(self, path: Path, source: str, limit: int) -> Optional[str]:
        code = _script(source).strip()
        if not code:
            return None
        return code[:limit].rstrip() if len(code) > limit else code


def _script(source: str) -> str:
    """Return every script block of the file joined in source order."""
    blocks = [textwrap.dedent(match.group("body")).strip() for match in _SCRIPT_BLOCK.finditer(source)]
    return "\n\n".join(block for block in blocks if block)


def _script_root(source: str) -> Node:
    suffix = ".tsx"
    for match in _SCRIPT_BLOCK.finditer(source):
        lang = _SCRIPT_LANG.search(match.group("attrs"))
        if lang and lang.group("lang").lower() == "ts":
            suffix = ".ts"
    return parse_source(_script(source), suffix).root_node


def _component_options(root: Node) -> Dict[str, Node]:
    """Properties of ``export default {}``, ``defineComponent({})`` and ``defineOptions({})``."""
    objects: List[Node] = []
    for statement in named(root):
        if statement.type != "export_statement":
            continue
        value = unwrap(statement.child_by_field_name("value"))
        if value is not None and value.type == "call_expression" and callee_name(value) == "defineComponent":
            arguments = call_arguments(value)
            value = unwrap(arguments[0]) if arguments else None
        if value is not None and value.type == "object":
            objects.append(value)
    for call in descendants(root, {"call_expression"}):
        if callee_name(call) == "defineOptions":
            arguments = call_arguments(call)
            if arguments and unwrap(arguments[0]).type == "object":
                objects.append(unwrap(arguments[0]))

    options: Dict[str, Node] = {}
    for options_object in objects:
        for key, value in object_pairs(options_object).items():
            options.setdefault(key, value)
    return options


def _macro_props(root: Node, macro: Node) -> List[PropertyDescriptor]:
    outer = macro
    defaults: Dict[str, str] = {}
    holder = macro.parent.parent if macro.parent is not None else None
    if holder is not None and holder.type == "call_expression" and callee_name(holder) == "withDefaults":
        arguments = call_arguments(holder)
        if len(arguments) > 1:
            defaults = object_texts(unwrap(arguments[1]))
        outer = holder

    destructured = None
    declarator = outer.parent
    if declarator is not None and declarator.type == "variable_declarator":
        pattern = declarator.child_by_field_name("name")
        if pattern is not None and pattern.type == "object_pattern":
            destructured = pattern_members(pattern)

    generics = type_arguments(macro)
    if generics:
        return describe_members(type_members(generics[0], root), destructured, defaults)

    arguments = call_arguments(macro)
    if not arguments:
        return describe_members(None, destructured, defaults)
    properties = _runtime_props(arguments[0])
    for prop in properties:
        if prop.default_value is None:
            prop.default_value = defaults.get(prop.name)
    return properties


def _runtime_props(declared: Node) -> List[PropertyDescriptor]:
    declared = unwrap(declared)
    if declared is None:
        return []
    if declared.type == "array":
        return [PropertyDescriptor(name=string_value(item)) for item in named(declared) if item.type == "string"]
    if declared.type != "object":
        return []

    properties: List[PropertyDescriptor] = []
    for member in named(declared):
        if member.type == "shorthand_property_identifier":
            properties.append(PropertyDescriptor(name=node_text(member), description=doc_comment(member)))
            continue
        if member.type != "pair":
            continue
        key = property_key(member.child_by_field_name("key"))
        if key is None:
            continue
        value = member.child_by_field_name("value")
        settings = unwrap(value)
        if settings is None or settings.type != "object":
            properties.append(
                PropertyDescriptor(name=key, type=_vue_type(value), description=doc_comment(member))
            )
            continue
        options = object_pairs(settings)
        required = unwrap(options.get("required"))
        properties.append(
            PropertyDescriptor(
                name=key,
                type=_vue_type(options.get("type")),
                default_value=node_text(options.get("default")) or None,
                description=doc_comment(member),
                required=required is not None and required.type == "true",
            )
        )
    return properties


def _vue_type(node: Optional[Node]) -> Optional[str]:
    """Translate a runtime prop type (``String``, ``[String, Number]``) into a type name."""
    if node is None:
        return None
    if node.type == "as_expression":
        # `Array as PropType<T>` keeps the expression first and the type last.
        parts = list(named(node))
        declared = parts[-1] if parts else None
        if declared is not None and declared.type == "generic_type":
            generics = type_arguments(declared)
            if node_text(declared.child_by_field_name("name")) == "PropType" and generics:
                return normalize_type(node_text(generics[0]))
        return _vue_type(parts[0]) if parts else None
    if node.type == "array":
        names = [_vue_type(item) for item in named(node)]
        return " | ".join(name for name in names if name) or None
    text = node_text(node)
    return _CONSTRUCTOR_TYPES.get(text, normalize_type(text))


__all__ = ["VueStrategy"]

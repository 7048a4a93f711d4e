"""Svelte component strategy (Svelte 4 ``export let`` and Svelte 5 ``$props()``)."""

from __future__ import annotations

import re
import textwrap
from pathlib import Path
from typing import List, Optional

from tree_sitter import Node

from .base import ComponentStrategy
from .utils import (
    annotation_text,
    clean_comment,
    describe_members,
    doc_comment,
    infer_literal_type,
    parse_source,
    pascal_case,
    pattern_members,
    type_members,
)
from ..models import FrameworkKind, PropertyDescriptor
from ..syntax import callee_name, descendants, has_token, named, node_text, unwrap

_SCRIPT_BLOCK = re.compile(r"<script\b(?P<attrs>[^>]*)>(?P<body>[\s\S]*?)</script\s*>", re.I)
_STYLE_BLOCK = re.compile(r"<style\b[^>]*>[\s\S]*?</style\s*>", re.I)
_COMPONENT_COMMENT = re.compile(r"<!--\s*@component\b[\s\S]*?-->")
_MODULE_SCRIPT = re.compile(r"""\bcontext\s*=\s*["']module["']|\bmodule\b""")
_TYPESCRIPT_LANG = re.compile(r"""\blang\s*=\s*["']?ts\b""")


class SvelteStrategy(ComponentStrategy):
    """Reads markup and props from ``.svelte`` files."""

    framework = FrameworkKind.SVELTE

    def supports(self, path: Path, source: str) -> bool:
        return path.suffix == ".svelte"

    def resolve_selector(self, path: Path, source: str) -> Optional[str]:
        return pascal_case(path.stem) or None

    def resolve_template(self, path: Path, source: str) -> Optional[str]:
        markup = _SCRIPT_BLOCK.sub("", source)
        markup = _STYLE_BLOCK.sub("", markup)
        markup = _COMPONENT_COMMENT.sub("", markup)
        return textwrap.dedent(markup).strip() or None

    def resolve_properties(self, path: Path, source: str) -> List[PropertyDescriptor]:
        root = _instance_root(source)
        if root is None:
            return []
        runes = _runes_props(root)
        if runes is not None:
            return runes
        return _exported_lets(root)

    def resolve_description(self, path: Path, source: str) -> Optional[str]:
        match = _COMPONENT_COMMENT.search(source)
        return clean_comment(match.group(0)) if match else None

    def resolve_code(self, path: Path, source: str, limit: int) -> Optional[str]:
        blocks = [textwrap.dedent(match.group("body")).strip() for match in _SCRIPT_BLOCK.finditer(source)]
        code = "\n\n".join(block for block in blocks if block)
        if not code:
            return None
        return code[:limit].rstrip() if len(code) > limit else code


def _instance_root(source: str) -> Optional[Node]:
    """Syntax tree of the instance script; module scripts are skipped."""
    for match in _SCRIPT_BLOCK.finditer(source):
        attrs = match.group("attrs")
        if _MODULE_SCRIPT.search(attrs):
            continue
        suffix = ".ts" if _TYPESCRIPT_LANG.search(attrs) else ".js"
        return parse_source(textwrap.dedent(match.group("body")), suffix).root_node
    return None


def _runes_props(root: Node) -> Optional[List[PropertyDescriptor]]:
    """Props from ``let { a = 1 }: Props = $props()``; None when the rune is absent."""
    for declarator in descendants(root, {"variable_declarator"}):
        value = unwrap(declarator.child_by_field_name("value"))
        if value is None or value.type != "call_expression" or callee_name(value) != "$props":
            continue
        pattern = declarator.child_by_field_name("name")
        destructured = pattern_members(pattern) if pattern is not None and pattern.type == "object_pattern" else None
        typed = type_members(declarator.child_by_field_name("type"), root)
        return describe_members(typed, destructured)
    return None


def _exported_lets(root: Node) -> List[PropertyDescriptor]:
    properties: List[PropertyDescriptor] = []
    for statement in named(root):
        if statement.type != "export_statement":
            continue
        declaration = statement.child_by_field_name("declaration")
        if declaration is None:
            continue
        mutable = declaration.type == "variable_declaration" or (
            declaration.type == "lexical_declaration" and has_token(declaration, "let")
        )
        if not mutable:
            continue
        for declarator in named(declaration):
            name = declarator.child_by_field_name("name")
            if declarator.type != "variable_declarator" or name is None or name.type != "identifier":
                continue
            default = node_text(declarator.child_by_field_name("value")) or None
            properties.append(
                PropertyDescriptor(
                    name=node_text(name),
                    type=annotation_text(declarator.child_by_field_name("type")) or infer_literal_type(default),
                    default_value=default,
                    description=doc_comment(statement),
                    required=default is None,
                )
            )
    return properties


__all__ = ["SvelteStrategy"]

"""Angular component strategy (``@Component`` / ``@Directive`` classes)."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from .base import ComponentStrategy
from .utils import (
    annotation_text,
    doc_comment,
    excerpt,
    infer_literal_type,
    normalize_type,
    parse_source,
    read_source,
    source_from,
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
    string_value,
    type_arguments,
    unwrap,
)

_DECORATOR_HINT = re.compile(r"@(?:Component|Directive)\s*\(")
_CLASS_DECORATORS = {"Component", "Directive"}
_SIGNAL_FUNCTIONS = {"input", "model", "input.required", "model.required"}


@dataclass
class _DecoratedClass:
    node: Node
    anchor: Node
    metadata: Dict[str, Node]


class AngularStrategy(ComponentStrategy):
    """Reads decorator metadata and inputs from Angular component classes."""

    framework = FrameworkKind.ANGULAR

    def supports(self, path: Path, source: str) -> bool:
        return path.suffix == ".ts" and _DECORATOR_HINT.search(source) is not None

    def resolve_selector(self, path: Path, source: str) -> Optional[str]:
        found = _decorated_class(source)
        if found is None:
            return None
        selector = found.metadata.get("selector")
        if selector is not None and selector.type == "string":
            value = string_value(selector).strip()
            if value:
                return value
        return node_text(found.node.child_by_field_name("name")) or None

    def resolve_template(self, path: Path, source: str) -> Optional[str]:
        found = _decorated_class(source)
        if found is None:
            return None
        inline = unwrap(found.metadata.get("template"))
        if inline is not None:
            if inline.type == "string":
                body: Optional[str] = string_value(inline)
            elif inline.type == "template_string":
                body = node_text(inline)[1:-1]
            else:
                body = None
            if body is not None:
                return textwrap.dedent(body).strip() or None

        template_url = unwrap(found.metadata.get("templateUrl"))
        if template_url is not None and template_url.type == "string":
            content = read_source(path.parent / string_value(template_url))
            if content is not None:
                return content.strip() or None
        return None

    def resolve_properties(self, path: Path, source: str) -> List[PropertyDescriptor]:
        found = _decorated_class(source)
        if found is None:
            return []
        body = found.node.child_by_field_name("body")
        if body is None:
            return []

        properties: List[PropertyDescriptor] = []
        pending: List[Node] = []
        for member in named(body):
            # Method decorators are siblings in the class body; field decorators are children.
            if member.type == "decorator":
                pending.append(member)
                continue
            decorators = pending + [child for child in member.named_children if child.type == "decorator"]
            anchor = pending[0] if pending else member
            pending = []

            prop: Optional[PropertyDescriptor] = None
            input_call = _input_decorator(decorators)
            if member.type == "public_field_definition":
                if input_call is not None:
                    prop = _decorated_field(member, input_call, anchor)
                else:
                    prop = _signal_input(member)
            elif member.type == "method_definition" and has_token(member, "set") and input_call is not None:
                prop = _decorated_setter(member, input_call, anchor)
            if prop is not None:
                properties.append(prop)
        return properties

    def resolve_description(self, path: Path, source: str) -> Optional[str]:
        found = _decorated_class(source)
        return doc_comment(found.anchor) if found is not None else None

    def resolve_code(self, path: Path, source: str, limit: int) -> Optional[str]:
        found = _decorated_class(source)
        if found is None:
            return excerpt(source, limit)
        return excerpt(source_from(found.anchor, source), limit)


def _decorated_class(source: str) -> Optional[_DecoratedClass]:
    """Return the first class carrying ``@Component`` or ``@Directive``."""
    root = parse_source(source, ".ts").root_node
    for node in descendants(root, {"class_declaration", "abstract_class_declaration"}):
        decorators = [child for child in node.named_children if child.type == "decorator"]
        anchor = node
        parent = node.parent
        if parent is not None and parent.type == "export_statement":
            decorators = [child for child in parent.named_children if child.type == "decorator"] + decorators
            anchor = parent
        for decorator in decorators:
            call = next(named(decorator), None)
            if call is None or call.type != "call_expression" or callee_name(call) not in _CLASS_DECORATORS:
                continue
            arguments = call_arguments(call)
            options = unwrap(arguments[0]) if arguments else None
            metadata = object_pairs(options) if options is not None and options.type == "object" else {}
            return _DecoratedClass(node=node, anchor=anchor, metadata=metadata)
    return None


def _input_decorator(decorators: List[Node]) -> Optional[Node]:
    for decorator in decorators:
        call = next(named(decorator), None)
        if call is not None and call.type == "call_expression" and callee_name(call) == "Input":
            return call
    return None


def _input_options(call: Node) -> Tuple[Optional[str], bool]:
    """Return ``(alias, required)`` from ``@Input(...)`` arguments."""
    arguments = call_arguments(call)
    if not arguments:
        return None, False
    first = unwrap(arguments[0])
    if first is None:
        return None, False
    if first.type == "string":
        return string_value(first) or None, False
    if first.type == "object":
        return _alias(first), _flag(first, "required")
    return None, False


def _alias(options: Optional[Node]) -> Optional[str]:
    options = unwrap(options)
    if options is None or options.type != "object":
        return None
    alias = unwrap(object_pairs(options).get("alias"))
    if alias is None or alias.type != "string":
        return None
    return string_value(alias) or None


def _flag(options: Node, key: str) -> bool:
    value = unwrap(object_pairs(options).get(key))
    return value is not None and value.type == "true"


def _decorated_field(member: Node, call: Node, anchor: Node) -> Optional[PropertyDescriptor]:
    name = node_text(member.child_by_field_name("name"))
    if not name:
        return None
    alias, required = _input_options(call)
    value = member.child_by_field_name("value")
    default = node_text(value) or None
    return PropertyDescriptor(
        name=alias or name,
        type=annotation_text(member.child_by_field_name("type")) or infer_literal_type(default),
        default_value=default,
        description=doc_comment(anchor),
        required=required,
    )


def _decorated_setter(member: Node, call: Node, anchor: Node) -> Optional[PropertyDescriptor]:
    name = node_text(member.child_by_field_name("name"))
    if not name:
        return None
    alias, required = _input_options(call)
    parameters = member.child_by_field_name("parameters")
    first = next(named(parameters), None) if parameters is not None else None
    prop_type = annotation_text(first.child_by_field_name("type")) if first is not None else None
    return PropertyDescriptor(
        name=alias or name,
        type=prop_type,
        description=doc_comment(anchor),
        required=required,
    )


def _signal_input(member: Node) -> Optional[PropertyDescriptor]:
    """Describe ``name = input<T>(default, { alias })`` style signal inputs."""
    call = unwrap(member.child_by_field_name("value"))
    if call is None or call.type != "call_expression":
        return None
    function = callee_name(call)
    if function not in _SIGNAL_FUNCTIONS:
        return None

    required = function.endswith(".required")
    generics = type_arguments(call)
    arguments = call_arguments(call)
    default: Optional[str] = None
    options: Optional[Node] = None
    if required:
        options = arguments[0] if arguments else None
    else:
        default = node_text(arguments[0]) if arguments else None
        options = arguments[1] if len(arguments) > 1 else None

    prop_type = normalize_type(node_text(generics[0])) if generics else None
    return PropertyDescriptor(
        name=_alias(options) or node_text(member.child_by_field_name("name")),
        type=prop_type or infer_literal_type(default),
        default_value=default or None,
        description=doc_comment(member),
        required=required,
    )


__all__ = ["AngularStrategy"]

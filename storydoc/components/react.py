"""React component strategy (exported function, const and class components)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from tree_sitter import Node

from .base import ComponentStrategy
from .utils import (
    Member,
    describe_members,
    doc_comment,
    excerpt,
    find_props_members,
    normalize_type,
    object_texts,
    parse_source,
    pattern_members,
    source_from,
    type_members,
)
from ..models import FrameworkKind, PropertyDescriptor
from ..syntax import (
    call_arguments,
    callee_name,
    is_function,
    named,
    node_text,
    property_key,
    type_arguments,
    unwrap,
)

_REACT_SUFFIXES = {".tsx", ".jsx", ".js", ".ts", ".mjs"}
_JSX_HINT = re.compile(r"<[A-Za-z][\w.]*[\s/>]|\bReact\b|\bjsx\b")
_PROP_TYPES_PREFIX = re.compile(r"^(?:PropTypes|React\.PropTypes)\.")

_WRAPPERS = {"memo", "React.memo", "forwardRef", "React.forwardRef"}
_FC_TYPES = {
    "FC",
    "React.FC",
    "FunctionComponent",
    "React.FunctionComponent",
    "VFC",
    "React.VFC",
    "VoidFunctionComponent",
    "React.VoidFunctionComponent",
}
_JSX = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
_NESTED_SCOPES = {"arrow_function", "function_expression", "function_declaration", "class_declaration", "class"}


@dataclass
class _Component:
    name: str
    anchor: Node
    node: Node
    props_hint: Optional[Node] = None


class ReactStrategy(ComponentStrategy):
    """Reads exported React components and their props declarations."""

    framework = FrameworkKind.REACT

    def supports(self, path: Path, source: str) -> bool:
        if path.suffix not in _REACT_SUFFIXES:
            return False
        if path.suffix in {".js", ".ts", ".mjs"} and not _JSX_HINT.search(source):
            return False
        return _find_component(_root(path, source)) is not None

    def resolve_selector(self, path: Path, source: str) -> Optional[str]:
        component = _find_component(_root(path, source))
        return component.name if component else None

    def resolve_template(self, path: Path, source: str) -> Optional[str]:
        component = _find_component(_root(path, source))
        if component is None:
            return None
        body = component.node.child_by_field_name("body")
        if body is None:
            return None
        if component.node.type in {"class_declaration", "class"}:
            render = next(
                (
                    method
                    for method in named(body)
                    if method.type == "method_definition"
                    and node_text(method.child_by_field_name("name")) == "render"
                ),
                None,
            )
            body = render.child_by_field_name("body") if render is not None else None
            if body is None:
                return None
        return _returned_jsx(body)

    def resolve_properties(self, path: Path, source: str) -> List[PropertyDescriptor]:
        root = _root(path, source)
        component = _find_component(root)
        if component is None:
            return []
        annotation, pattern = _props_signature(component)

        typed: Optional[List[Member]] = type_members(annotation, root) if annotation is not None else None
        if typed is None and component.props_hint is not None:
            typed = type_members(component.props_hint, root)
        if typed is None:
            typed = find_props_members(root)

        destructured = pattern_members(pattern) if pattern is not None else None
        defaults = object_texts(_static_object(root, component, "defaultProps"))
        if typed:
            return describe_members(typed, destructured, defaults)

        for member in destructured or []:
            if member.default is not None:
                defaults.setdefault(member.key, member.default)
        declared = _prop_types(root, component, defaults)
        if declared:
            return declared
        return describe_members(None, destructured, defaults)

    def resolve_description(self, path: Path, source: str) -> Optional[str]:
        component = _find_component(_root(path, source))
        return doc_comment(component.anchor) if component else None

    def resolve_code(self, path: Path, source: str, limit: int) -> Optional[str]:
        component = _find_component(_root(path, source))
        if component is None:
            return excerpt(source, limit)
        return excerpt(source_from(component.anchor, source), limit)


def _root(path: Path, source: str) -> Node:
    return parse_source(source, path.suffix).root_node


def _exported_names(root: Node) -> Set[str]:
    """Local names exported through ``export default X``, ``memo(X)`` or ``export { X }``."""
    names: Set[str] = set()
    for statement in named(root):
        if statement.type != "export_statement":
            continue
        value = unwrap(statement.child_by_field_name("value"))
        if value is not None and value.type == "call_expression" and callee_name(value) in _WRAPPERS:
            arguments = call_arguments(value)
            value = unwrap(arguments[0]) if arguments else None
        if value is not None and value.type == "identifier":
            names.add(node_text(value))
        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in named(clause):
                local = specifier.child_by_field_name("name")
                if local is not None:
                    names.add(node_text(local))
    return names


def _find_component(root: Node) -> Optional[_Component]:
    """Return the first exported PascalCase declaration that looks like a component."""
    exported = _exported_names(root)
    for statement in named(root):
        declaration = statement
        direct = False
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is None:
                declaration = unwrap(statement.child_by_field_name("value"))
            direct = True
            if declaration is None:
                continue
        for name, node, hint in _candidates(declaration):
            if name[:1].isupper() and (direct or name in exported):
                return _Component(name=name, anchor=statement, node=node, props_hint=hint)
    return None


def _candidates(declaration: Node) -> Iterator[Tuple[str, Node, Optional[Node]]]:
    if declaration.type in {"function_declaration", "class_declaration", "function_expression", "class"}:
        name = node_text(declaration.child_by_field_name("name"))
        if name:
            yield name, declaration, None
        return
    if declaration.type not in {"lexical_declaration", "variable_declaration"}:
        return
    for declarator in named(declaration):
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        resolved = _component_value(declarator.child_by_field_name("value"))
        if resolved is None:
            continue
        node, hint = resolved
        yield node_text(name_node), node, hint or _fc_type(declarator)


def _component_value(value: Optional[Node]) -> Optional[Tuple[Node, Optional[Node]]]:
    """Unwrap ``memo``/``forwardRef`` calls down to the function or class they wrap.

    The props type given as the last wrapper type argument comes back as a hint.
    """
    value = unwrap(value)
    if value is None:
        return None
    if is_function(value) or value.type == "class":
        return value, None
    if value.type == "call_expression" and callee_name(value) in _WRAPPERS:
        generics = type_arguments(value)
        arguments = call_arguments(value)
        inner = _component_value(arguments[0]) if arguments else None
        if inner is None:
            return None
        return inner[0], inner[1] or (generics[-1] if generics else None)
    return None


def _fc_type(declarator: Node) -> Optional[Node]:
    """Props type of ``const X: React.FC<Props> = ...``."""
    annotation = declarator.child_by_field_name("type")
    declared = next(named(annotation), None) if annotation is not None else None
    if declared is None or declared.type != "generic_type":
        return None
    if node_text(declared.child_by_field_name("name")) not in _FC_TYPES:
        return None
    generics = type_arguments(declared)
    return generics[0] if generics else None


def _props_signature(component: _Component) -> Tuple[Optional[Node], Optional[Node]]:
    """Return ``(props type node, destructuring pattern)`` of a component."""
    node = component.node
    if node.type in {"class_declaration", "class"}:
        for heritage in node.named_children:
            if heritage.type != "class_heritage":
                continue
            for clause in heritage.named_children:
                if clause.type == "extends_clause":
                    generics = type_arguments(clause)
                    return (generics[0] if generics else None), None
        return None, None

    parameters = node.child_by_field_name("parameters")
    if parameters is None:
        parameter = node.child_by_field_name("parameter")
        return None, parameter if parameter is not None and parameter.type == "object_pattern" else None
    first = next(named(parameters), None)
    if first is None:
        return None, None
    if first.type in {"required_parameter", "optional_parameter"}:
        pattern = first.child_by_field_name("pattern")
        annotation = first.child_by_field_name("type")
    else:
        pattern, annotation = first, None
    if pattern is not None and pattern.type != "object_pattern":
        pattern = None
    return annotation, pattern


def _returned_jsx(body: Node) -> Optional[str]:
    """JSX returned by a function body, ignoring returns inside nested functions."""
    expression = unwrap(body)
    if expression is not None and expression.type in _JSX:
        return node_text(expression).strip() or None
    stack = list(reversed(list(named(body))))
    while stack:
        current = stack.pop()
        if current.type in _NESTED_SCOPES:
            continue
        if current.type == "return_statement":
            value = unwrap(next(named(current), None))
            if value is not None and value.type in _JSX:
                return node_text(value).strip() or None
            continue
        stack.extend(reversed(list(named(current))))
    return None


def _static_object(root: Node, component: _Component, attribute: str) -> Optional[Node]:
    """Object literal assigned to ``Name.attribute`` or declared as ``static attribute``."""
    target = f"{component.name}.{attribute}"
    for statement in named(root):
        if statement.type != "expression_statement":
            continue
        assignment = next(named(statement), None)
        if assignment is None or assignment.type != "assignment_expression":
            continue
        if node_text(assignment.child_by_field_name("left")) != target:
            continue
        value = unwrap(assignment.child_by_field_name("right"))
        if value is not None and value.type == "object":
            return value

    body = component.node.child_by_field_name("body") if component.node.type in {"class_declaration", "class"} else None
    for member in named(body) if body is not None else []:
        if member.type != "public_field_definition":
            continue
        if node_text(member.child_by_field_name("name")) != attribute:
            continue
        value = unwrap(member.child_by_field_name("value"))
        if value is not None and value.type == "object":
            return value
    return None


def _prop_types(root: Node, component: _Component, defaults: Dict[str, str]) -> List[PropertyDescriptor]:
    declared = _static_object(root, component, "propTypes")
    if declared is None:
        return []

    properties: List[PropertyDescriptor] = []
    for pair in named(declared):
        if pair.type != "pair":
            continue
        key = property_key(pair.child_by_field_name("key"))
        if key is None:
            continue
        expression = " ".join(node_text(pair.child_by_field_name("value")).split())
        required = expression.endswith(".isRequired")
        if required:
            expression = expression[: -len(".isRequired")]
        properties.append(
            PropertyDescriptor(
                name=key,
                type=normalize_type(_PROP_TYPES_PREFIX.sub("", expression)),
                default_value=defaults.get(key),
                description=doc_comment(pair),
                required=required,
            )
        )
    return properties


__all__ = ["ReactStrategy"]

"""Framework-idiomatic usage snippets generated from story args."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from .models import Expression, FrameworkKind

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_ATTRIBUTE_SELECTOR = re.compile(r"^(?P<tag>[\w-]*)\[(?P<attr>[\w-]+)(?:=[^\]]*)?\]$")


def generate_usage_example(
    selector: str,
    args: Optional[Mapping[str, Any]],
    story_name: str,
    framework: FrameworkKind | str | None,
) -> str:
    """Render ``selector`` invoked with ``args`` in the framework's template syntax.

    Every key appears exactly once as a binding, in insertion order.
    """
    kind = FrameworkKind.coerce(framework)
    renderer = _RENDERERS.get(kind, _call_example)
    return renderer(selector, dict(args or {}), story_name)


def js_literal(value: Any) -> str:
    """Serialize a story value as a single-line JavaScript literal."""
    if isinstance(value, Expression):
        return value.source
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
        return f"'{escaped}'"
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = ", ".join(f"{_js_key(str(key))}: {js_literal(item)}" for key, item in value.items())
        return f"{{ {items} }}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(js_literal(item) for item in value) + "]"
    return js_literal(str(value))


def _js_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else js_literal(key)


def _attribute(text: str) -> str:
    return text.replace("&", "&amp;").replace('"', "&quot;")


def _angular_example(selector: str, args: Dict[str, Any], story_name: str) -> str:
    tag, attribute = _angular_host(selector)
    bindings: List[str] = [attribute] if attribute else []
    bindings += [f'[{key}]="{_attribute(js_literal(value))}"' for key, value in args.items()]
    opening = " ".join([tag] + bindings)
    return f"<{opening}></{tag}>"


def _angular_host(selector: str) -> tuple[str, Optional[str]]:
    """Split a selector into the host element and an attribute to place on it."""
    first = selector.split(",")[0].strip()
    match = _ATTRIBUTE_SELECTOR.match(first)
    if match:
        return match.group("tag") or "div", match.group("attr")
    return first, None


def _jsx_example(selector: str, args: Dict[str, Any], story_name: str) -> str:
    bindings: List[str] = []
    for key, value in args.items():
        if isinstance(value, str) and '"' not in value and "\n" not in value:
            bindings.append(f'{key}="{value}"')
        elif isinstance(value, str):
            bindings.append(f"{key}={{{json.dumps(value)}}}")
        else:
            bindings.append(f"{key}={{{js_literal(value)}}}")
    return "<" + " ".join([selector] + bindings) + " />"


def _vue_example(selector: str, args: Dict[str, Any], story_name: str) -> str:
    bindings: List[str] = []
    for key, value in args.items():
        if isinstance(value, str) and '"' not in value:
            bindings.append(f'{key}="{value}"')
        else:
            bindings.append(f':{key}="{_attribute(js_literal(value))}"')
    return "<" + " ".join([selector] + bindings) + " />"


def _call_example(selector: str, args: Dict[str, Any], story_name: str) -> str:
    return f"// {story_name}\n{selector}({js_literal(args)})"


_RENDERERS: Dict[FrameworkKind, Callable[[str, Dict[str, Any], str], str]] = {
    FrameworkKind.ANGULAR: _angular_example,
    FrameworkKind.REACT: _jsx_example,
    FrameworkKind.SVELTE: _jsx_example,
    FrameworkKind.VUE: _vue_example,
}


__all__ = ["generate_usage_example", "js_literal"]

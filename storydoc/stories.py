"""Story module parsing (Component Story Format and MDX docs)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from tree_sitter import Node

from .components import ComponentStrategy, extract_component_docs
from .components.utils import read_source
from .config import DEFAULT_CODE_EXCERPT_LIMIT, DEFAULT_COMPONENT_EXTENSIONS
from .logging import get_logger
from .models import (
    Expression,
    FrameworkKind,
    StoryDetails,
    StoryFileInfo,
    StoryMeta,
    StoryRecord,
)
from .syntax import (
    is_function,
    literal_value,
    named,
    node_text,
    object_pairs,
    parse_module,
    string_value,
    unwrap,
)

_LOGGER = get_logger("stories")

_NAMED_EXPORTS_ORDER = "__namedExportsOrder"
_DECLARATIONS = {"lexical_declaration", "variable_declaration"}

_SANITIZE = re.compile(r"[ ’–—―′¿'`~!@#$%^&*()_|+\-=?;:\",.<>{}\[\]\\/]", re.U)
_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

_MDX_IMPORT = re.compile(r"^import\s[\s\S]*?from\s*['\"][^'\"]+['\"];?|^import\s*['\"][^'\"]+['\"];?", re.M)
_MDX_META_TITLE = re.compile(r"<Meta\b[^>]*?\btitle\s*=\s*(?:\{\s*)?['\"`](?P<title>[^'\"`]+)['\"`]")
_MDX_META_OF = re.compile(r"<Meta\b[^>]*?\bof\s*=\s*\{\s*(?P<of>[\w$.]+)\s*\}")


def sanitize(text: str) -> str:
    """Lower-case ``text`` and fold punctuation into single dashes."""
    lowered = _SANITIZE.sub("-", text.lower())
    return re.sub(r"-+", "-", lowered).strip("-")


def story_name_from_export(export_name: str) -> str:
    """Start-case an export name: ``primaryButton`` becomes ``Primary Button``."""
    words = _WORDS.findall(export_name)
    return " ".join(word[:1].upper() + word[1:] for word in words)


def to_story_id(title: str, export_name: str) -> str:
    """Build the Storybook id (``example-button--primary``) for a story export."""
    return f"{sanitize(title)}--{sanitize(story_name_from_export(export_name))}"


def extract_story_examples(file_path: Path | str) -> Optional[StoryFileInfo]:
    """Read imports, meta configuration and per-story args from a story module."""
    path = Path(file_path)
    source = read_source(path)
    if source is None:
        _LOGGER.debug("Story file %s is missing or unreadable", path)
        return None
    if path.suffix == ".mdx":
        return _mdx_examples(source)
    return _StoryModule(source, path).collect()


def resolve_component_file(
    story_dir: Path,
    specifier: Optional[str],
    project_root: Optional[Path] = None,
    extensions: Sequence[str] = DEFAULT_COMPONENT_EXTENSIONS,
) -> Optional[Path]:
    """Find the component file an import specifier points at, trying each extension."""
    if not specifier:
        return None
    if specifier.startswith("."):
        base = story_dir / specifier
    elif specifier.startswith("/") and project_root is not None:
        base = project_root / specifier.lstrip("/")
    else:
        return None

    for extension in extensions:
        candidate = Path(f"{base}{extension}")
        if candidate.is_file():
            return candidate.resolve()
    return None


def parse_story_file(
    file_path: Path | str,
    story_id: str,
    project_root: Path | str,
    framework: FrameworkKind | str | None = None,
    *,
    extensions: Sequence[str] = DEFAULT_COMPONENT_EXTENSIONS,
    code_limit: int = DEFAULT_CODE_EXCERPT_LIMIT,
    strategies: Optional[Sequence[ComponentStrategy]] = None,
) -> Optional[StoryDetails]:
    """Merge meta and story args for ``story_id`` and describe the referenced component."""
    path = Path(file_path)
    info = extract_story_examples(path)
    if info is None:
        return None

    details = StoryDetails(component=info.meta.component)
    record = select_story(info, story_id)
    if record is not None:
        details.story_name = record.name
        details.args = {**info.meta.args, **record.args}
        details.arg_types = {**info.meta.arg_types, **record.arg_types}
    else:
        _LOGGER.debug("No story export in %s matches %s", path, story_id)

    component_file = resolve_component_file(
        path.parent, info.meta.component_path, Path(project_root), extensions
    )
    if component_file is not None:
        details.component_docs = extract_component_docs(
            component_file, framework, code_limit=code_limit, strategies=strategies
        )
    return details


def select_story(info: StoryFileInfo, story_id: str) -> Optional[StoryRecord]:
    """Return the story whose export name produces the id suffix of ``story_id``."""
    _, _, suffix = story_id.rpartition("--")
    if not suffix:
        return None
    for export_name, record in info.stories.items():
        if sanitize(story_name_from_export(export_name)) == suffix:
            return record
    return None


def _mdx_examples(source: str) -> StoryFileInfo:
    info = StoryFileInfo(imports=[match.group(0).strip() for match in _MDX_IMPORT.finditer(source)])
    title = _MDX_META_TITLE.search(source)
    if title:
        info.meta.title = title.group("title")
    of = _MDX_META_OF.search(source)
    if of:
        info.meta.component = of.group("of")
    return info


@dataclass
class _StoryModule:
    """Top-level bindings of one story module and the lookups over them."""

    source: str
    path: Path
    imports: List[str] = field(default_factory=list)
    import_sources: Dict[str, str] = field(default_factory=dict)
    bindings: Dict[str, Node] = field(default_factory=dict)
    assignments: Dict[str, Dict[str, Node]] = field(default_factory=dict)
    exports: Dict[str, str] = field(default_factory=dict)
    meta_node: Optional[Node] = None
    meta_local: Optional[str] = None
    _resolving: Set[str] = field(default_factory=set)

    def collect(self) -> StoryFileInfo:
        tree = parse_module(self.source, self.path)
        for statement in named(tree.root_node):
            self._visit(statement)

        meta = self._meta()
        stories: Dict[str, StoryRecord] = {}
        include = self._story_filter("includeStories")
        exclude = self._story_filter("excludeStories")
        for export_name, local in self.exports.items():
            if export_name == _NAMED_EXPORTS_ORDER or local == self.meta_local:
                continue
            if include is not None and not include(export_name):
                continue
            if exclude is not None and exclude(export_name):
                continue
            stories[export_name] = self._story(export_name, local)
        return StoryFileInfo(imports=list(self.imports), meta=meta, stories=stories)

    # Collection

    def _visit(self, statement: Node) -> None:
        kind = statement.type
        if kind == "import_statement":
            self._import(statement)
        elif kind in _DECLARATIONS:
            self._declare(statement)
        elif kind == "function_declaration":
            name = statement.child_by_field_name("name")
            if name is not None:
                self.bindings.setdefault(node_text(name), statement)
        elif kind == "export_statement":
            self._export(statement)
        elif kind == "expression_statement":
            self._assignment(statement)

    def _import(self, statement: Node) -> None:
        self.imports.append(node_text(statement))
        source = statement.child_by_field_name("source")
        specifier = string_value(source) if source is not None else None
        if specifier is None:
            return
        clause = next((child for child in named(statement) if child.type == "import_clause"), None)
        if clause is None:
            return
        for child in named(clause):
            if child.type == "identifier":
                self.import_sources.setdefault(node_text(child), specifier)
            elif child.type == "namespace_import":
                for name in named(child):
                    self.import_sources.setdefault(node_text(name), specifier)
            elif child.type == "named_imports":
                for spec in named(child):
                    if spec.type != "import_specifier":
                        continue
                    alias = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    self.import_sources.setdefault(node_text(alias), specifier)

    def _declare(self, declaration: Node) -> List[str]:
        names: List[str] = []
        for declarator in named(declaration):
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is None or name.type != "identifier":
                continue
            names.append(node_text(name))
            if value is not None:
                self.bindings.setdefault(node_text(name), unwrap(value))
        return names

    def _export(self, statement: Node) -> None:
        is_default = any(child.type == "default" for child in statement.children)
        declaration = statement.child_by_field_name("declaration")
        value = statement.child_by_field_name("value")

        if is_default:
            target = unwrap(value if value is not None else declaration)
            if target is not None and target.type == "identifier":
                self.meta_local = node_text(target)
            elif target is not None:
                self.meta_node = target
            return

        if declaration is not None:
            if declaration.type in _DECLARATIONS:
                for name in self._declare(declaration):
                    self.exports.setdefault(name, name)
            elif declaration.type == "function_declaration":
                name = declaration.child_by_field_name("name")
                if name is not None:
                    self.bindings.setdefault(node_text(name), declaration)
                    self.exports.setdefault(node_text(name), node_text(name))
            return

        if statement.child_by_field_name("source") is not None:
            return
        clause = next((child for child in named(statement) if child.type == "export_clause"), None)
        if clause is None:
            return
        for spec in named(clause):
            if spec.type != "export_specifier":
                continue
            local = node_text(spec.child_by_field_name("name"))
            exported = node_text(spec.child_by_field_name("alias")) or local
            if exported == "default":
                self.meta_local = local
            else:
                self.exports.setdefault(exported, local)

    def _assignment(self, statement: Node) -> None:
        expression = next(named(statement), None)
        if expression is None or expression.type != "assignment_expression":
            return
        left = expression.child_by_field_name("left")
        right = expression.child_by_field_name("right")
        if left is None or right is None or left.type != "member_expression":
            return
        target = left.child_by_field_name("object")
        prop = left.child_by_field_name("property")
        if target is None or prop is None or target.type != "identifier":
            return
        self.assignments.setdefault(node_text(target), {})[node_text(prop)] = right

    # Resolution

    def value_of(self, name: str) -> Optional[Dict[str, Any]]:
        """Static value of a local binding, merged with later ``name.prop = ...`` assignments."""
        if name in self._resolving:
            return None
        node = self.bindings.get(name)
        assigned = self.assignments.get(name, {})
        self._resolving.add(name)
        try:
            if node is not None and node.type == "object":
                value = literal_value(node, self.resolve)
            elif _is_bind_call(node) or assigned:
                value = {}
            else:
                return None
            for key, right in assigned.items():
                value[key] = literal_value(right, self.resolve)
            return value
        finally:
            self._resolving.discard(name)

    def resolve(self, reference: str) -> Optional[Any]:
        """Resolve ``name`` or ``name.a.b`` against local literal bindings."""
        root, *path = reference.split(".")
        value: Any = self.value_of(root)
        for part in path:
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def _meta_object(self) -> Optional[Node]:
        node = self.meta_node
        if node is None and self.meta_local is not None:
            node = self.bindings.get(self.meta_local)
        return node if node is not None and node.type == "object" else None

    def _meta(self) -> StoryMeta:
        meta = StoryMeta()
        node = self._meta_object()
        if node is None:
            return meta

        pairs = object_pairs(node)
        values = literal_value(node, self.resolve)
        title = values.get("title")
        meta.title = title if isinstance(title, str) else None

        component_node = unwrap(pairs.get("component"))
        if component_node is not None:
            meta.component = node_text(component_node)
            root = meta.component.split(".")[0]
            meta.component_path = self.import_sources.get(root)

        args = values.get("args")
        meta.args = args if isinstance(args, dict) else {}
        arg_types = values.get("argTypes")
        meta.arg_types = arg_types if isinstance(arg_types, dict) else {}
        tags = values.get("tags")
        meta.tags = [tag for tag in tags if isinstance(tag, str)] if isinstance(tags, list) else []
        return meta

    def _story_filter(self, key: str) -> Optional[Callable[[str], bool]]:
        """Build the ``includeStories``/``excludeStories`` predicate, if declared."""
        meta = self._meta_object()
        node = unwrap(object_pairs(meta).get(key)) if meta is not None else None
        if node is None:
            return None
        if node.type == "regex":
            pattern = node_text(node.child_by_field_name("pattern"))
            try:
                compiled = re.compile(pattern)
            except re.error:
                _LOGGER.debug("Ignoring %s regex %s in %s", key, pattern, self.path)
                return None
            return lambda name: compiled.search(name) is not None
        value = literal_value(node, self.resolve)
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            names = {item for item in value if isinstance(item, str)}
            return lambda name: name in names
        return None

    def _story(self, export_name: str, local: str) -> StoryRecord:
        node = self.bindings.get(local)
        value = self.value_of(local) or {}

        legacy = value.get("story")
        legacy = legacy if isinstance(legacy, dict) else {}
        name = value.get("name") or value.get("storyName") or legacy.get("name")

        render: Optional[str] = None
        if is_function(node):
            render = node_text(node)
        elif _is_bind_call(node):
            template = self.bindings.get(node_text(_bind_target(node)))
            render = node_text(template) if is_function(template) else None
        else:
            override = value.get("render")
            render = override.source if isinstance(override, Expression) else None

        args = value.get("args")
        arg_types = value.get("argTypes")
        return StoryRecord(
            export_name=export_name,
            name=name if isinstance(name, str) else story_name_from_export(export_name),
            args=args if isinstance(args, dict) else {},
            arg_types=arg_types if isinstance(arg_types, dict) else {},
            render=render,
        )


def _is_bind_call(node: Optional[Node]) -> bool:
    return _bind_target(node) is not None


def _bind_target(node: Optional[Node]) -> Optional[Node]:
    """Return ``Template`` for a ``Template.bind(...)`` call."""
    if node is None or node.type != "call_expression":
        return None
    function = node.child_by_field_name("function")
    if function is None or function.type != "member_expression":
        return None
    if node_text(function.child_by_field_name("property")) != "bind":
        return None
    return function.child_by_field_name("object")


__all__ = [
    "extract_story_examples",
    "parse_story_file",
    "resolve_component_file",
    "sanitize",
    "select_story",
    "story_name_from_export",
    "to_story_id",
]

"""Core data models shared across storydoc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FrameworkKind(str, Enum):
    """UI frameworks the extraction engine knows how to read."""

    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    SVELTE = "svelte"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: object) -> "FrameworkKind":
        """Map free-form text (``"vue3"``, ``"React"``) onto a known kind."""
        if isinstance(value, FrameworkKind):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        lowered = value.strip().lower()
        for kind in cls:
            if kind is not cls.UNKNOWN and lowered.startswith(kind.value):
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class Expression:
    """Source text of a story value that is not a static literal."""

    source: str

    def to_dict(self) -> Dict[str, str]:
        return {"__expression__": self.source}


def to_jsonable(value: Any) -> Any:
    """Convert extracted literal values into plain JSON-compatible data."""
    if isinstance(value, Expression):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


@dataclass
class PropertyDescriptor:
    """A single declared input/prop of a component."""

    name: str
    type: Optional[str] = None
    default_value: Optional[str] = None
    description: Optional[str] = None
    required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "defaultValue": self.default_value,
            "description": self.description,
            "required": self.required,
        }


@dataclass
class ComponentDoc:
    """Metadata recovered from a component source file."""

    selector: str
    file_path: str
    framework: FrameworkKind = FrameworkKind.UNKNOWN
    template: Optional[str] = None
    component_code: Optional[str] = None
    properties: List[PropertyDescriptor] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selector": self.selector,
            "filePath": self.file_path,
            "framework": self.framework.value,
            "template": self.template,
            "componentCode": self.component_code,
            "properties": [prop.to_dict() for prop in self.properties],
            "description": self.description,
        }


@dataclass
class StoryRecord:
    """Args and overrides declared by one named story export."""

    export_name: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    arg_types: Dict[str, Any] = field(default_factory=dict)
    render: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportName": self.export_name,
            "name": self.name,
            "args": to_jsonable(self.args),
            "argTypes": to_jsonable(self.arg_types),
            "render": self.render,
        }


@dataclass
class StoryMeta:
    """The default-export configuration shared by every story in a file."""

    title: Optional[str] = None
    component: Optional[str] = None
    component_path: Optional[str] = None
    args: Dict[str, Any] = field(default_factory=dict)
    arg_types: Dict[str, Any] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "component": self.component,
            "componentPath": self.component_path,
            "args": to_jsonable(self.args),
            "argTypes": to_jsonable(self.arg_types),
            "tags": list(self.tags),
        }


@dataclass
class StoryFileInfo:
    """Everything statically recoverable from a story module."""

    imports: List[str] = field(default_factory=list)
    meta: StoryMeta = field(default_factory=StoryMeta)
    stories: Dict[str, StoryRecord] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imports": list(self.imports),
            "meta": self.meta.to_dict(),
            "stories": {name: story.to_dict() for name, story in self.stories.items()},
        }


@dataclass
class StoryDetails:
    """Resolved args and component docs for a single story id."""

    component: Optional[str] = None
    story_name: Optional[str] = None
    args: Dict[str, Any] = field(default_factory=dict)
    arg_types: Dict[str, Any] = field(default_factory=dict)
    component_docs: Optional[ComponentDoc] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "storyName": self.story_name,
            "args": to_jsonable(self.args),
            "argTypes": to_jsonable(self.arg_types),
            "componentDocs": self.component_docs.to_dict() if self.component_docs else None,
        }


@dataclass
class StoryIndexEntry:
    """One entry of the Storybook ``index.json`` manifest."""

    id: str
    name: str
    title: str
    import_path: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    type: str = "story"
    kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "kind": self.kind or self.title,
            "importPath": self.import_path,
            "tags": list(self.tags),
            "type": self.type,
        }


@dataclass
class StoryDocs:
    """Composed documentation record for one story id."""

    story_id: str
    title: str
    name: str
    type: str
    framework: FrameworkKind
    component: Optional[str] = None
    selector: Optional[str] = None
    template: Optional[str] = None
    component_code: Optional[str] = None
    properties: List[PropertyDescriptor] = field(default_factory=list)
    component_description: Optional[str] = None
    imports: List[str] = field(default_factory=list)
    meta: Optional[StoryMeta] = None
    story_examples: Dict[str, StoryRecord] = field(default_factory=dict)
    usage_examples: Dict[str, str] = field(default_factory=dict)
    mdx_content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storyId": self.story_id,
            "title": self.title,
            "name": self.name,
            "type": self.type,
            "framework": self.framework.value,
            "component": self.component,
            "selector": self.selector,
            "template": self.template,
            "componentCode": self.component_code,
            "properties": [prop.to_dict() for prop in self.properties],
            "componentDescription": self.component_description,
            "imports": list(self.imports),
            "meta": self.meta.to_dict() if self.meta else None,
            "storyExamples": {
                name: story.to_dict() for name, story in self.story_examples.items()
            },
            "usageExamples": dict(self.usage_examples),
            "mdxContent": self.mdx_content,
        }

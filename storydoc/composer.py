"""Index-driven composition of story documentation records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .components import ComponentStrategy, default_strategies, discover_strategies, extract_component_docs
from .components.utils import read_source
from .config import ConfigError, StorydocConfig, load_config
from .detection import detect_framework
from .logging import configure_logging, get_logger
from .models import FrameworkKind, StoryDocs, StoryIndexEntry
from .stories import extract_story_examples, parse_story_file, resolve_component_file
from .usage import generate_usage_example

_LOGGER = get_logger("composer")


class StoryIndexError(RuntimeError):
    """Raised when a story index file is missing or malformed."""


@dataclass
class StoryIndex:
    """Story entries keyed by id, as published by ``storybook build``."""

    entries: Dict[str, StoryIndexEntry] = field(default_factory=dict)
    version: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StoryIndex":
        """Accept the ``index.json`` layout or the legacy ``stories.json`` one."""
        if not isinstance(data, Mapping):
            raise StoryIndexError("Story index must be a JSON object")
        raw = data.get("entries")
        if raw is None:
            raw = data.get("stories")
        if not isinstance(raw, Mapping):
            raise StoryIndexError("Story index has no 'entries' or 'stories' mapping")

        entries: Dict[str, StoryIndexEntry] = {}
        for key, item in raw.items():
            if not isinstance(item, Mapping):
                continue
            entry = _entry_from_mapping(str(key), item)
            entries[entry.id] = entry
        version = data.get("v")
        return cls(entries=entries, version=version if isinstance(version, int) else None)

    def get(self, story_id: str) -> Optional[StoryIndexEntry]:
        return self.entries.get(story_id)

    def __iter__(self) -> Iterator[StoryIndexEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)


def load_story_index(path: Path | str) -> StoryIndex:
    """Read a local ``index.json`` (or ``stories.json``) file."""
    index_path = Path(path).expanduser()
    try:
        text = index_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise StoryIndexError(f"Story index not found: {index_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise StoryIndexError(f"Could not read story index {index_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoryIndexError(f"Failed to parse {index_path.name}: {exc}") from exc
    return StoryIndex.from_mapping(data)


def list_stories(index: StoryIndex | Mapping[str, Any], kind: Optional[str] = None) -> List[StoryIndexEntry]:
    """Return index entries, optionally filtered by kind or title."""
    entries = list(_as_index(index))
    if kind:
        entries = [entry for entry in entries if (entry.kind or entry.title) == kind or entry.title == kind]
    return entries


class StoryComposer:
    """Combines story parsing, component extraction and usage generation per story id."""

    def __init__(
        self,
        project_root: Path | str,
        framework: FrameworkKind | str | None = None,
        config: Optional[StorydocConfig] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.config = config or load_config(self.project_root)
        if self.config.log_level is not None or self.config.log_file is not None:
            configure_logging(level=self.config.log_level, log_file=self.config.log_file)
        self.strategies = self._select_strategies(self.config)
        if framework is not None:
            self.framework = FrameworkKind.coerce(framework)
        elif self.config.framework is not None:
            self.framework = self.config.framework
        else:
            self.framework = detect_framework(self.project_root)
        _LOGGER.debug("Composer for %s using framework %s", self.project_root, self.framework.value)

    def _select_strategies(self, config: StorydocConfig) -> Sequence[ComponentStrategy]:
        if config.strategies is None:
            return default_strategies()
        try:
            return discover_strategies(config.strategies)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    def load_index(self) -> StoryIndex:
        return load_story_index(self.config.resolved_index_path())

    def get_story(self, index: StoryIndex | Mapping[str, Any], story_id: str) -> Optional[Dict[str, Any]]:
        """Return the index entry for ``story_id`` enriched with parsed args and component docs."""
        entry = _as_index(index).get(story_id)
        if entry is None:
            return None

        story = entry.to_dict()
        story_file = self._story_path(entry)
        if story_file is None:
            return story
        parsed = parse_story_file(
            story_file,
            story_id,
            self.project_root,
            self.framework,
            extensions=self.config.component_extensions,
            code_limit=self.config.code_excerpt_limit,
            strategies=self.strategies,
        )
        if parsed is not None:
            details = parsed.to_dict()
            story["component"] = details["component"]
            story["args"] = details["args"]
            story["argTypes"] = details["argTypes"]
            if details["componentDocs"] is not None:
                story["docs"] = details["componentDocs"]
        return story

    def get_story_docs(self, index: StoryIndex | Mapping[str, Any], story_id: str) -> Optional[StoryDocs]:
        """Compose the documentation record for ``story_id``; fields degrade independently."""
        entry = _as_index(index).get(story_id)
        if entry is None:
            return None

        docs = StoryDocs(
            story_id=story_id,
            title=entry.title,
            name=entry.name,
            type=entry.type,
            framework=self.framework,
        )
        story_file = self._story_path(entry)
        if story_file is None:
            return docs

        if story_file.suffix == ".mdx":
            docs.mdx_content = read_source(story_file)
            return docs

        info = extract_story_examples(story_file)
        if info is None:
            return docs

        docs.component = info.meta.component
        docs.imports = list(info.imports)
        docs.meta = info.meta
        docs.story_examples = dict(info.stories)

        component_file = resolve_component_file(
            story_file.parent,
            info.meta.component_path,
            self.project_root,
            self.config.component_extensions,
        )
        component = None
        if component_file is not None:
            component = extract_component_docs(
                component_file,
                self.framework,
                code_limit=self.config.code_excerpt_limit,
                strategies=self.strategies,
            )
        if component is not None:
            docs.selector = component.selector
            docs.template = component.template
            docs.component_code = component.component_code
            docs.properties = list(component.properties)
            docs.component_description = component.description

        if docs.selector:
            framework = self.framework
            if framework is FrameworkKind.UNKNOWN and component is not None:
                framework = component.framework
            docs.usage_examples = {
                name: generate_usage_example(docs.selector, story.args, name, framework)
                for name, story in info.stories.items()
            }
        return docs

    def _story_path(self, entry: StoryIndexEntry) -> Optional[Path]:
        if not entry.import_path:
            return None
        relative = entry.import_path
        if relative.startswith("./"):
            relative = relative[2:]
        return self.project_root / relative


def _as_index(index: StoryIndex | Mapping[str, Any]) -> StoryIndex:
    if isinstance(index, StoryIndex):
        return index
    return StoryIndex.from_mapping(index)


def _entry_from_mapping(key: str, item: Mapping[str, Any]) -> StoryIndexEntry:
    title = item.get("title") or item.get("kind") or ""
    tags = item.get("tags")
    entry_type = item.get("type")
    if not isinstance(entry_type, str):
        parameters = item.get("parameters")
        docs_only = isinstance(parameters, Mapping) and parameters.get("docsOnly")
        entry_type = "docs" if docs_only else "story"
    kind = item.get("kind")
    import_path = item.get("importPath")
    return StoryIndexEntry(
        id=str(item.get("id") or key),
        name=str(item.get("name") or ""),
        title=str(title),
        import_path=import_path if isinstance(import_path, str) else None,
        tags=[tag for tag in tags if isinstance(tag, str)] if isinstance(tags, list) else [],
        type=entry_type,
        kind=kind if isinstance(kind, str) else None,
    )


__all__ = [
    "StoryComposer",
    "StoryIndex",
    "StoryIndexError",
    "list_stories",
    "load_story_index",
]

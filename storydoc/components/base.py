"""Base classes for framework-specific component strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import DEFAULT_CODE_EXCERPT_LIMIT
from ..models import ComponentDoc, FrameworkKind, PropertyDescriptor


class ComponentStrategy(ABC):
    """Contract for strategies that read one framework's component files."""

    framework: FrameworkKind = FrameworkKind.UNKNOWN

    @abstractmethod
    def supports(self, path: Path, source: str) -> bool:
        """Return True when this strategy recognises the component file."""

    @abstractmethod
    def resolve_selector(self, path: Path, source: str) -> Optional[str]:
        """Return the tag, directive selector or exported symbol of the component."""

    @abstractmethod
    def resolve_properties(self, path: Path, source: str) -> List[PropertyDescriptor]:
        """Return declared inputs/props in source order."""

    def resolve_template(self, path: Path, source: str) -> Optional[str]:
        return None

    def resolve_description(self, path: Path, source: str) -> Optional[str]:
        return None

    def resolve_code(self, path: Path, source: str, limit: int) -> Optional[str]:
        return None

    def extract(
        self,
        path: Path,
        source: str,
        *,
        code_limit: int = DEFAULT_CODE_EXCERPT_LIMIT,
    ) -> Optional[ComponentDoc]:
        """Compose the resolvers into a ComponentDoc, or None without a selector."""
        selector = self.resolve_selector(path, source)
        if not selector:
            return None
        return ComponentDoc(
            selector=selector,
            file_path=str(path),
            framework=self.framework,
            template=self.resolve_template(path, source),
            component_code=self.resolve_code(path, source, code_limit),
            properties=_unique(self.resolve_properties(path, source)),
            description=self.resolve_description(path, source),
        )


def _unique(properties: Iterable[PropertyDescriptor]) -> List[PropertyDescriptor]:
    seen: set[str] = set()
    result: List[PropertyDescriptor] = []
    for prop in properties:
        if prop.name in seen:
            continue
        seen.add(prop.name)
        result.append(prop)
    return result

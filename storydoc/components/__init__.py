"""Component strategy implementations and discovery utilities."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from .angular import AngularStrategy
from .base import ComponentStrategy
from .react import ReactStrategy
from .svelte import SvelteStrategy
from .utils import read_source
from .vue import VueStrategy
from ..config import DEFAULT_CODE_EXCERPT_LIMIT
from ..logging import get_logger
from ..models import ComponentDoc, FrameworkKind

_ENTRY_POINT_GROUP = "storydoc.strategies"

_LOGGER = get_logger("components")

# File-extension specific strategies first so sniffing stays unambiguous.
_BUILTIN_FACTORIES: dict[str, Callable[[], ComponentStrategy]] = {
    "vue": VueStrategy,
    "svelte": SvelteStrategy,
    "angular": AngularStrategy,
    "react": ReactStrategy,
}


def discover_strategies(enabled: Sequence[str] | None = None) -> List[ComponentStrategy]:
    """Return instantiated strategies, honoring optional enabled names.

    Plugins that fail to import or do not produce a ``ComponentStrategy`` are
    logged and skipped. Naming a strategy in ``enabled`` that is neither built
    in nor loadable raises ``ValueError``.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    strategies: List[ComponentStrategy] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], ComponentStrategy]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        try:
            instance = factory()
        except Exception as exc:  # plugin factory failure
            _LOGGER.warning("Skipping component strategy '%s': %s", name, exc)
            return
        if not isinstance(instance, ComponentStrategy):
            _LOGGER.warning("Skipping component strategy '%s': factory did not return a ComponentStrategy", name)
            return
        strategies.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # plugin import failure
            _LOGGER.warning("Failed to load component strategy entry point '%s': %s", name, exc)
            continue

        def _factory(obj: object = loaded) -> ComponentStrategy:
            return _coerce_strategy(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown component strategies requested: {missing}")

    return strategies


@lru_cache(maxsize=None)
def default_strategies() -> Tuple[ComponentStrategy, ...]:
    """Every available strategy, resolved once per process."""
    return tuple(discover_strategies())


def extract_component_docs(
    file_path: Path | str,
    framework: FrameworkKind | str | None = None,
    *,
    code_limit: int = DEFAULT_CODE_EXCERPT_LIMIT,
    strategies: Optional[Sequence[ComponentStrategy]] = None,
) -> Optional[ComponentDoc]:
    """Read one component file and describe it, or None when nothing is recognised.

    The strategy matching ``framework`` is tried first; otherwise the file is
    offered to every strategy in registry order.
    """
    path = Path(file_path)
    source = read_source(path)
    if source is None:
        _LOGGER.debug("Component file %s is missing or unreadable", path)
        return None

    available = list(strategies) if strategies is not None else list(default_strategies())
    kind = FrameworkKind.coerce(framework) if framework is not None else FrameworkKind.UNKNOWN

    ordered = [strategy for strategy in available if strategy.framework is kind]
    ordered += [strategy for strategy in available if strategy.framework is not kind]
    for strategy in ordered:
        if not strategy.supports(path, source):
            continue
        doc = strategy.extract(path, source, code_limit=code_limit)
        if doc is not None:
            _LOGGER.debug("Extracted %s component %s from %s", doc.framework.value, doc.selector, path)
            return doc

    _LOGGER.debug("No component strategy recognised %s", path)
    return None


def _coerce_strategy(obj: object) -> ComponentStrategy:
    if isinstance(obj, ComponentStrategy):
        return obj
    if isinstance(obj, type) and issubclass(obj, ComponentStrategy):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, ComponentStrategy):
            return instance
    raise TypeError("Strategy entry point must be a ComponentStrategy subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    entry_points = metadata.entry_points()
    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]
    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "AngularStrategy",
    "ComponentStrategy",
    "ReactStrategy",
    "SvelteStrategy",
    "VueStrategy",
    "default_strategies",
    "discover_strategies",
    "extract_component_docs",
]

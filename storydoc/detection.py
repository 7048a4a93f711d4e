"""Project-level detection of the UI framework and Storybook installation."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .logging import get_logger
from .models import FrameworkKind

_LOGGER = get_logger("detection")

_STORYBOOK_MAIN_FILES = ("main.ts", "main.js", "main.mjs", "main.cjs", "main.mts")

# Renderer packages are the most specific signal and are checked first.
_RENDERER_PACKAGES: Tuple[Tuple[str, FrameworkKind], ...] = (
    ("@storybook/angular", FrameworkKind.ANGULAR),
    ("@storybook/vue3", FrameworkKind.VUE),
    ("@storybook/vue", FrameworkKind.VUE),
    ("@storybook/svelte", FrameworkKind.SVELTE),
    ("@storybook/sveltekit", FrameworkKind.SVELTE),
    ("@storybook/nextjs", FrameworkKind.REACT),
    ("@storybook/react", FrameworkKind.REACT),
)

# React is last: Storybook 6 and earlier pull it into every project.
_FRAMEWORK_PACKAGES: Tuple[Tuple[str, FrameworkKind], ...] = (
    ("@angular/core", FrameworkKind.ANGULAR),
    ("vue", FrameworkKind.VUE),
    ("nuxt", FrameworkKind.VUE),
    ("svelte", FrameworkKind.SVELTE),
    ("@sveltejs/kit", FrameworkKind.SVELTE),
    ("react", FrameworkKind.REACT),
    ("next", FrameworkKind.REACT),
)

_MARKER_FILES: Tuple[Tuple[str, FrameworkKind], ...] = (
    ("angular.json", FrameworkKind.ANGULAR),
    ("svelte.config.js", FrameworkKind.SVELTE),
    ("svelte.config.ts", FrameworkKind.SVELTE),
    ("svelte.config.mjs", FrameworkKind.SVELTE),
    ("vue.config.js", FrameworkKind.VUE),
    ("nuxt.config.ts", FrameworkKind.VUE),
    ("nuxt.config.js", FrameworkKind.VUE),
)

_MAIN_FRAMEWORK_PATTERN = re.compile(
    r"framework\s*:\s*(?:\{[^}]*?name\s*:\s*)?(?:[\w.]+\(\s*)?['\"`]@storybook/(?P<package>[\w-]+)"
)

_VERSION_PATTERN = re.compile(r"(\d+)(?:\.\d+)*")


def detect_framework(project_root: Path | str) -> FrameworkKind:
    """Classify the project's UI framework; ``unknown`` when nothing matches."""
    root = Path(project_root)

    from_main = _framework_from_storybook_main(root)
    if from_main is not None:
        _LOGGER.debug("Framework %s detected from Storybook main config", from_main.value)
        return from_main

    dependencies = load_node_dependencies(root)
    names = {name.lower() for deps in dependencies.values() for name in deps}

    for package, kind in _RENDERER_PACKAGES:
        if any(name == package or name.startswith(f"{package}-") for name in names):
            _LOGGER.debug("Framework %s detected from renderer package %s", kind.value, package)
            return kind

    for package, kind in _FRAMEWORK_PACKAGES:
        if package in names:
            _LOGGER.debug("Framework %s detected from dependency %s", kind.value, package)
            return kind

    for filename, kind in _MARKER_FILES:
        if (root / filename).is_file():
            _LOGGER.debug("Framework %s detected from marker file %s", kind.value, filename)
            return kind

    return FrameworkKind.UNKNOWN


def detect_storybook_version(project_root: Path | str) -> Optional[int]:
    """Return the Storybook major version installed or declared for the project."""
    root = Path(project_root)

    installed = load_package_json(root / "node_modules" / "storybook")
    version = _major_version(installed.get("version"))
    if version is not None:
        return version

    package = load_package_json(root)
    candidates: List[str] = []
    for key in ("dependencies", "devDependencies"):
        deps = package.get(key)
        if not isinstance(deps, dict):
            continue
        for name, spec in deps.items():
            if name == "storybook":
                candidates.insert(0, spec)
            elif isinstance(name, str) and name.startswith("@storybook/"):
                candidates.append(spec)

    for spec in candidates:
        version = _major_version(spec)
        if version is not None:
            return version
    return None


def find_storybook_config(project_root: Path | str) -> Optional[Path]:
    """Locate the Storybook configuration directory."""
    root = Path(project_root)
    default = root / ".storybook"
    if default.is_dir():
        return default

    angular = _load_json(root / "angular.json")
    projects = angular.get("projects")
    if not isinstance(projects, dict):
        return None
    for project in projects.values():
        if not isinstance(project, dict):
            continue
        architect = project.get("architect")
        if not isinstance(architect, dict):
            continue
        target = architect.get("storybook")
        options = target.get("options") if isinstance(target, dict) else None
        config_dir = options.get("configDir") if isinstance(options, dict) else None
        if isinstance(config_dir, str) and (root / config_dir).is_dir():
            return root / config_dir
    return None


# Node.js manifest helpers


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    return _load_json(root / "package.json")


def load_node_dependencies(root: Path) -> Dict[str, List[str]]:
    """Return Node.js dependencies separated into runtime/dev lists."""
    data = load_package_json(root)

    def _extract(key: str) -> List[str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return sorted(deps.keys())
        return []

    return {
        "dependencies": _extract("dependencies"),
        "devDependencies": _extract("devDependencies"),
    }


def _load_json(path: Path) -> Dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        _LOGGER.debug("Could not read %s: %s", path, exc)
        return {}
    if isinstance(data, dict):
        return data
    return {}


def _framework_from_storybook_main(root: Path) -> Optional[FrameworkKind]:
    config_dir = find_storybook_config(root)
    if config_dir is None:
        return None
    for filename in _STORYBOOK_MAIN_FILES:
        path = config_dir / filename
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        match = _MAIN_FRAMEWORK_PATTERN.search(text)
        if match:
            kind = _kind_for_renderer(f"@storybook/{match.group('package')}")
            if kind is not None:
                return kind
    return None


def _kind_for_renderer(package: str) -> Optional[FrameworkKind]:
    for name, kind in _RENDERER_PACKAGES:
        if package == name or package.startswith(f"{name}-"):
            return kind
    return None


def _major_version(spec: object) -> Optional[int]:
    if not isinstance(spec, str):
        return None
    match = _VERSION_PATTERN.search(spec)
    if not match:
        return None
    return int(match.group(1))


__all__ = [
    "detect_framework",
    "detect_storybook_version",
    "find_storybook_config",
    "load_node_dependencies",
    "load_package_json",
]

"""Configuration loading for storydoc (.storydoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .logging import resolve_level
from .models import FrameworkKind

CONFIG_FILENAME = ".storydoc.yml"

DEFAULT_INDEX_PATH = Path("storybook-static") / "index.json"

DEFAULT_COMPONENT_EXTENSIONS: tuple[str, ...] = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".vue",
    ".svelte",
    "/index.ts",
    "/index.tsx",
    "/index.js",
    "/index.jsx",
)

DEFAULT_CODE_EXCERPT_LIMIT = 4000


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class StorydocConfig:
    """Represents the settings defined in .storydoc.yml."""

    root: Path
    framework: Optional[FrameworkKind] = None
    index_path: Path = DEFAULT_INDEX_PATH
    component_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_COMPONENT_EXTENSIONS)
    )
    code_excerpt_limit: int = DEFAULT_CODE_EXCERPT_LIMIT
    strategies: Optional[List[str]] = None
    log_level: Optional[str] = None
    log_file: Optional[Path] = None

    def resolved_index_path(self) -> Path:
        """Return the story index location anchored at the project root."""
        if self.index_path.is_absolute():
            return self.index_path
        return self.root / self.index_path


def load_config(config_path: Path) -> StorydocConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return StorydocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = StorydocConfig(root=root)

    framework = _as_str(data.get("framework"))
    if framework:
        kind = FrameworkKind.coerce(framework)
        if kind is FrameworkKind.UNKNOWN and framework.strip().lower() != "unknown":
            raise ConfigError(f"Unsupported framework in {CONFIG_FILENAME}: {framework}")
        config.framework = kind

    index_path = _as_str(data.get("index_path"))
    if index_path:
        config.index_path = Path(index_path).expanduser()

    extensions = _as_str_list(data.get("component_extensions"))
    if extensions:
        config.component_extensions = extensions

    limit = _as_int(data.get("code_excerpt_limit"))
    if limit is not None:
        if limit <= 0:
            raise ConfigError("code_excerpt_limit must be a positive integer")
        config.code_excerpt_limit = limit

    strategies = _as_str_list(data.get("strategies"))
    if strategies:
        config.strategies = strategies

    log_level = _as_str(data.get("log_level"))
    if log_level:
        try:
            resolve_level(log_level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        config.log_level = log_level.strip().upper()

    log_file = _as_str(data.get("log_file"))
    if log_file:
        path = Path(log_file).expanduser()
        config.log_file = path if path.is_absolute() else root / path

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_COMPONENT_EXTENSIONS",
    "StorydocConfig",
    "load_config",
]

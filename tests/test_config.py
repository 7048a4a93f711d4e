"""Tests for storydoc.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from storydoc.config import (
    DEFAULT_COMPONENT_EXTENSIONS,
    ConfigError,
    StorydocConfig,
    load_config,
)
from storydoc.models import FrameworkKind


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, StorydocConfig)
    assert config.root == tmp_path.resolve()
    assert config.framework is None
    assert config.index_path == Path("storybook-static") / "index.json"
    assert config.component_extensions == list(DEFAULT_COMPONENT_EXTENSIONS)
    assert config.code_excerpt_limit == 4000
    assert config.strategies is None
    assert (config.log_level, config.log_file) == (None, None)
    assert config.resolved_index_path() == tmp_path.resolve() / "storybook-static" / "index.json"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".storydoc.yml"
    config_file.write_text(
        """
framework: vue3
index_path: "dist/storybook/index.json"
component_extensions:
  - ""
  - ".vue"
  - "/index.vue"
code_excerpt_limit: 1200
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.framework is FrameworkKind.VUE
    assert config.index_path == Path("dist/storybook/index.json")
    assert config.component_extensions == ["", ".vue", "/index.vue"]
    assert config.code_excerpt_limit == 1200
    assert config.resolved_index_path() == tmp_path.resolve() / "dist" / "storybook" / "index.json"


def test_load_config_accepts_directory_and_stray_file_paths(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("framework: angular\n", encoding="utf-8")

    assert load_config(tmp_path).framework is FrameworkKind.ANGULAR
    assert load_config(tmp_path / "package.json").framework is FrameworkKind.ANGULAR


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.framework is None
    assert config.code_excerpt_limit == 4000


def test_load_config_keeps_absolute_index_path(tmp_path: Path) -> None:
    target = tmp_path / "elsewhere" / "index.json"
    (tmp_path / ".storydoc.yml").write_text(f"index_path: '{target}'\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.resolved_index_path() == target


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("- react\n- vue\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("framework: [react\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_unknown_framework(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("framework: ember\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_excerpt_limit(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("code_excerpt_limit: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reads_strategies_and_logging(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text(
        """
strategies:
  - vue
  - svelte
log_level: debug
log_file: logs/storydoc.log
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.strategies == ["vue", "svelte"]
    assert config.log_level == "DEBUG"
    assert config.log_file == tmp_path.resolve() / "logs" / "storydoc.log"


def test_load_config_rejects_unknown_log_level(tmp_path: Path) -> None:
    (tmp_path / ".storydoc.yml").write_text("log_level: chatty\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Unknown log level"):
        load_config(tmp_path)

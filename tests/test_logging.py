from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from storydoc.logging import configure_logging, get_logger, resolve_level


def test_get_logger_nests_under_storydoc() -> None:
    assert get_logger().name == "storydoc"
    assert get_logger("stories").name == "storydoc.stories"


def test_configure_logging_hides_debug_unless_verbose() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("stories").debug("hidden")
    get_logger("stories").info("shown")

    assert stream.getvalue() == "[storydoc] INFO shown\n"


def test_configure_logging_replaces_handlers_and_writes_file(tmp_path: Path) -> None:
    first = io.StringIO()
    second = io.StringIO()
    log_file = tmp_path / "logs" / "storydoc.log"

    configure_logging(stream=first)
    logger = configure_logging(verbose=True, log_file=log_file, stream=second)
    get_logger("composer").debug("resolved %s", "Button")

    assert len(logger.handlers) == 2
    assert first.getvalue() == ""
    assert second.getvalue() == "[storydoc] DEBUG resolved Button\n"
    assert "storydoc.composer: resolved Button" in log_file.read_text(encoding="utf-8")


def test_configure_logging_explicit_level_wins_over_verbose() -> None:
    stream = io.StringIO()
    configure_logging(level="warning", verbose=True, stream=stream)

    get_logger("components").info("quiet")
    get_logger("components").warning("Skipping component strategy 'ember'")

    assert stream.getvalue() == "[storydoc] WARNING Skipping component strategy 'ember'\n"


def test_resolve_level_accepts_names_and_numbers() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warn ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("chatty")

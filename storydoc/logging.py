"""Logging helpers for the storydoc extraction engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional, Union

_LOGGER_NAME = "storydoc"
_CONSOLE_FORMAT = "[storydoc] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Library default: stay silent until an application configures handlers.
logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under ``storydoc`` (``storydoc.stories``, ``storydoc.components``...)."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def resolve_level(value: Union[str, int]) -> int:
    """Translate ``"debug"``/``"INFO"``/``10`` into a logging level number."""
    if isinstance(value, int):
        return value
    level = _LEVELS.get(value.strip().upper())
    if level is None:
        choices = ", ".join(name.lower() for name in _LEVELS)
        raise ValueError(f"Unknown log level '{value}' (expected one of: {choices})")
    return level


def configure_logging(
    *,
    level: Union[str, int, None] = None,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the storydoc logger.

    Extraction misses are reported at DEBUG, so ``verbose`` (or ``level="debug"``)
    is what surfaces them. An explicit ``level`` wins over ``verbose``. Calling
    this again replaces the previous handlers.
    """
    if level is not None:
        resolved = resolve_level(level)
    else:
        resolved = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(resolved)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger", "resolve_level"]

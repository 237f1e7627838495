"""Logging utilities for showcase commands and the job service."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Mapping

_LOGGER_NAME = "showcase"
_CONSOLE_FORMAT = "[showcase] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"

LOG_LEVEL_ENV = "SHOWCASE_LOG_LEVEL"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the showcase hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(verbose: bool = False, environ: Mapping[str, str] | None = None) -> int:
    """Return the effective level; a valid ``SHOWCASE_LOG_LEVEL`` wins over ``verbose``."""
    env = os.environ if environ is None else environ
    named = env.get(LOG_LEVEL_ENV, "").strip().upper()
    if named:
        level = logging.getLevelName(named)
        if isinstance(level, int):
            return level
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the showcase logger.

    Safe to call repeatedly: previously installed handlers are replaced, so
    the CLI and the service can both configure logging in one process.
    """
    level = resolve_level(verbose, environ)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = []
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    handlers.append(console)
    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(sink)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]

"""Progress reporting shared by the CLI and background jobs."""

from __future__ import annotations

import logging
from typing import Callable, List, Protocol

from .logging import get_logger


class Reporter(Protocol):
    """Receives user-facing progress lines for a generation run."""

    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...


class LoggingReporter:
    """Forwards progress to the showcase logger (CLI mode)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("progress")

    def info(self, message: str) -> None:
        self.logger.info("%s", message)

    def warning(self, message: str) -> None:
        self.logger.warning("%s", message)


class CallbackReporter:
    """Adapts two callables into a :class:`Reporter`."""

    def __init__(self, on_info: Callable[[str], None], on_warning: Callable[[str], None]) -> None:
        self._on_info = on_info
        self._on_warning = on_warning

    def info(self, message: str) -> None:
        self._on_info(message)

    def warning(self, message: str) -> None:
        self._on_warning(message)


class RecordingReporter:
    """Collects progress lines in memory."""

    def __init__(self) -> None:
        self.lines: List[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.lines.append(("info", message))

    def warning(self, message: str) -> None:
        self.lines.append(("warning", message))

    @property
    def warnings(self) -> List[str]:
        return [message for level, message in self.lines if level == "warning"]


__all__ = ["CallbackReporter", "LoggingReporter", "RecordingReporter", "Reporter"]

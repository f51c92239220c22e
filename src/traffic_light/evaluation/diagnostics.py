"""Diagnostics sinks handed to the evaluator and the check runner."""

from __future__ import annotations

import logging
from typing import Protocol


class Diagnostics(Protocol):
    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class LoggingDiagnostics:
    """Forwards diagnostics to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("traffic_light.checks")

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)


class RecordingDiagnostics:
    """Keeps every emitted message in memory as ``(level, message)``."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    @property
    def warnings(self) -> list[str]:
        return [m for level, m in self.records if level == "warning"]

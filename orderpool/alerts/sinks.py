"""Alert delivery interface and a logging-backed default."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class AlertSink(Protocol):
    """Interface for whatever delivers alerts to the outside world."""

    def alert(self, title: str, message: str) -> None:
        """Deliver one fired alert."""
        ...


class LoggingAlertSink:
    """Writes fired alerts to the ``orderpool.alerts`` logger and keeps a history."""

    def __init__(self, logger_name: str = "orderpool.alerts") -> None:
        self._logger = logging.getLogger(logger_name)
        self.history: list[tuple[str, str]] = []

    def alert(self, title: str, message: str) -> None:
        self.history.append((title, message))
        self._logger.info("%s: %s", title, message)

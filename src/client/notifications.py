"""User-visible notices (the toast layer)."""

from __future__ import annotations

import logging
from typing import Protocol


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Route notices to the application log."""

    def __init__(self, name: str = "uigen.notices") -> None:
        self._logger = logging.getLogger(name)

    def success(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


"""Progress sinks – human-readable status strings, never used for control flow."""

from __future__ import annotations

import logging
from typing import Callable

from rich.console import Console
from rich.status import Status

logger = logging.getLogger("common_films.progress")

ProgressCallback = Callable[[str], None]


def null_progress(message: str) -> None:
    pass


def prefixed(callback: ProgressCallback, prefix: str) -> ProgressCallback:
    """Wrap *callback* so every message reads ``"<prefix>: <message>"``."""
    def _report(message: str) -> None:
        callback(f"{prefix}: {message}")
    return _report


class ConsoleReporter:
    """Shows the latest message on a rich spinner line."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._status: Status | None = None
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
        logger.debug(message)
        if self._status is not None:
            self._status.update(message)

    def __enter__(self) -> ConsoleReporter:
        self._status = self.console.status("Starting...")
        self._status.start()
        return self

    def __exit__(self, *args: object) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

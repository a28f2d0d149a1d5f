"""Notification dispatcher with pluggable sinks."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

NotificationSink = Callable[[str], Awaitable[None]]


class NotificationDispatcher:
    """Dispatches user-facing messages to registered notification sinks.

    Sinks are async callables that receive a message string. The feed
    controller and the forms report outcomes here; the CLI registers a
    console sink that prints them immediately.
    """

    def __init__(self) -> None:
        self._sinks: list[NotificationSink] = []
        self._history: list[str] = []

    def register(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    def unregister(self, sink: NotificationSink) -> None:
        self._sinks = [s for s in self._sinks if s is not sink]

    async def send(self, message: str) -> None:
        """Send a message to all registered sinks.

        Failures are isolated per-sink.
        """
        self._history.append(message)
        for sink in self._sinks:
            try:
                await sink(message)
            except Exception:
                logger.exception("Notification sink failed")

    @property
    def history(self) -> list[str]:
        """Messages sent so far, oldest first."""
        return list(self._history)

"""Cooperative cancellation shared between the UI loop and worker threads."""

from __future__ import annotations

import threading

__all__ = ["CancellationToken"]


class CancellationToken:
    """Thread-safe flag polled at token granularity by background builds.

    Cancellation is a normal terminal state for a build, not an error: holders
    simply stop producing output once :attr:`cancelled` turns true.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"CancellationToken(cancelled={self.cancelled})"

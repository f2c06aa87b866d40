"""Owned holder for the active completion index."""

from __future__ import annotations

import logging
import threading

from .index import CompletionEntry, CompletionIndex

__all__ = ["CompletionStore"]

LOGGER = logging.getLogger(__name__)


class CompletionStore:
    """Publishes completed indexes and serves them to completion queries.

    Readers go through :attr:`current` without locking; the attribute always
    points at one fully built index. Writers swap the reference under a lock
    and never move the store back to an older generation.
    """

    def __init__(self, initial: CompletionIndex | None = None) -> None:
        self._index = initial or CompletionIndex.empty()
        self._lock = threading.Lock()

    @property
    def current(self) -> CompletionIndex:
        return self._index

    def publish(self, index: CompletionIndex) -> bool:
        """Make ``index`` the active one. Returns ``False`` for stale generations."""

        with self._lock:
            if index.generation < self._index.generation:
                LOGGER.debug(
                    "Ignoring stale index generation %s (active=%s)",
                    index.generation,
                    self._index.generation,
                )
                return False
            self._index = index
        return True

    def reset(self) -> None:
        with self._lock:
            self._index = CompletionIndex.empty()

    def owns(self, entry: CompletionEntry) -> bool:
        return entry in self._index

"""Background refresh of the completion index on every text change."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from .cancellation import CancellationToken
from .index import DEFAULT_MIN_LENGTH, CompletionIndex, build_index
from .store import CompletionStore
from .tokenizer import DEFAULT_MAX_TOKENS, WordSegmenter, tokenize

__all__ = ["ControllerState", "CompletionRefreshController", "RefreshConfig"]

LOGGER = logging.getLogger(__name__)

PublishCallback = Callable[[CompletionIndex], None]


class ControllerState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    CLOSED = "closed"


@dataclass(slots=True)
class RefreshConfig:
    """Tunable parameters for index builds."""

    max_tokens: int = DEFAULT_MAX_TOKENS
    min_length: int = DEFAULT_MIN_LENGTH


@dataclass(slots=True)
class _Build:
    generation: int
    cancel_token: CancellationToken
    started_at: float
    task: asyncio.Task[None] | None = None


class CompletionRefreshController:
    """Cancels stale index builds and starts a fresh one per text change.

    Builds run on a worker thread so the UI loop stays responsive. Only the most
    recently started build may publish into the :class:`CompletionStore`: older
    builds are cancelled before the new one starts and are re-checked against
    the active generation before publishing.

    When no asyncio loop is running (scripts, headless widget tests) the build
    runs inline on the calling thread instead.
    """

    def __init__(
        self,
        store: CompletionStore,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        config: RefreshConfig | None = None,
        segmenter: WordSegmenter | None = None,
        executor: Executor | None = None,
        on_published: PublishCallback | None = None,
    ) -> None:
        if store is None:
            raise ValueError("store is required")
        self._store = store
        self._loop = loop
        self._config = config or RefreshConfig()
        self._segmenter = segmenter
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="wordcomplete-index"
        )
        self._listeners: list[PublishCallback] = [on_published] if on_published is not None else []
        self._generation = 0
        self._active: _Build | None = None
        self._state = ControllerState.IDLE

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def store(self) -> CompletionStore:
        return self._store

    @property
    def config(self) -> RefreshConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Generation number of the most recently started build."""

        return self._generation

    def add_listener(self, listener: PublishCallback) -> None:
        """Register a callback receiving every published index."""

        self._listeners.append(listener)

    def text_changed(self, text: str, change: Any | None = None) -> None:
        """Cancel any in-flight build and start a new one for ``text``."""

        if self._state is ControllerState.CLOSED:
            return
        self._cancel_active(reason="superseded")
        self._generation += 1
        build = _Build(
            generation=self._generation,
            cancel_token=CancellationToken(),
            started_at=time.perf_counter(),
        )
        self._active = build
        self._state = ControllerState.BUILDING
        LOGGER.debug(
            "Starting index build generation=%s chars=%s change=%s",
            build.generation,
            len(text),
            change,
        )

        loop = self._resolve_loop()
        if loop is None:
            self._run_inline(text, build)
            return
        build.task = loop.create_task(self._run(text, build))

    async def wait_idle(self) -> None:
        """Wait until no build is in flight."""

        while True:
            build = self._active
            if build is None or build.task is None or self._state is ControllerState.CLOSED:
                return
            await asyncio.wait({build.task})
            if self._active is build:
                # Task ended without publishing (cancelled or failed).
                return

    def close(self) -> None:
        """Tear down: cancel the in-flight build and ignore later changes."""

        if self._state is ControllerState.CLOSED:
            return
        self._cancel_active(reason="teardown")
        self._state = ControllerState.CLOSED
        if self._owns_executor and isinstance(self._executor, ThreadPoolExecutor):
            self._executor.shutdown(wait=False, cancel_futures=True)

    async def aclose(self) -> None:
        build = self._active
        self.close()
        if build is not None and build.task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await build.task

    # ------------------------------------------------------------------
    # Build pipeline
    # ------------------------------------------------------------------
    async def _run(self, text: str, build: _Build) -> None:
        loop = asyncio.get_running_loop()
        try:
            index = await loop.run_in_executor(self._executor, self._compute, text, build)
        except asyncio.CancelledError:
            build.cancel_token.cancel()
            LOGGER.debug("Index build generation=%s cancelled", build.generation)
            return
        except RuntimeError as exc:
            if self._state is not ControllerState.CLOSED:
                LOGGER.exception("Index build generation=%s failed", build.generation)
                self._abandon(build)
                return
            # Executor already shut down by teardown.
            LOGGER.debug("Index build generation=%s not scheduled: %s", build.generation, exc)
            return
        except Exception:
            LOGGER.exception("Index build generation=%s failed", build.generation)
            self._abandon(build)
            return
        self._finish(build, index)

    def _run_inline(self, text: str, build: _Build) -> None:
        try:
            index = self._compute(text, build)
        except Exception:
            LOGGER.exception("Index build generation=%s failed", build.generation)
            self._abandon(build)
            return
        self._finish(build, index)

    def _compute(self, text: str, build: _Build) -> CompletionIndex | None:
        tokens = tokenize(
            text,
            self._config.max_tokens,
            cancel_token=build.cancel_token,
            segmenter=self._segmenter,
        )
        return build_index(
            tokens,
            cancel_token=build.cancel_token,
            min_length=self._config.min_length,
            generation=build.generation,
        )

    def _finish(self, build: _Build, index: CompletionIndex | None) -> None:
        if index is None or build.cancel_token.cancelled or self._active is not build:
            LOGGER.debug("Dropping result of cancelled build generation=%s", build.generation)
            return
        if self._state is ControllerState.CLOSED:
            return
        published = self._store.publish(index)
        self._active = None
        self._state = ControllerState.IDLE
        if not published:
            return
        elapsed_ms = (time.perf_counter() - build.started_at) * 1000.0
        LOGGER.debug(
            "Published completion index generation=%s words=%s in %.1fms",
            build.generation,
            len(index),
            elapsed_ms,
        )
        for listener in list(self._listeners):
            try:
                listener(index)
            except Exception:  # pragma: no cover - listener failures are logged only
                LOGGER.warning("Completion publish listener failed", exc_info=True)

    def _abandon(self, build: _Build) -> None:
        if self._active is build:
            self._active = None
            self._state = ControllerState.IDLE

    def _cancel_active(self, *, reason: str) -> None:
        build = self._active
        if build is None:
            return
        self._active = None
        build.cancel_token.cancel()
        if build.task is not None and not build.task.done():
            build.task.cancel()
        LOGGER.debug("Cancelled index build generation=%s (%s)", build.generation, reason)

    def _resolve_loop(self) -> asyncio.AbstractEventLoop | None:
        if self._loop is not None and not self._loop.is_closed():
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

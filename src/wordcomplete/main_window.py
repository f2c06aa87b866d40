"""Main window hosting the completing editor."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from PySide6.QtCore import QByteArray
from PySide6.QtWidgets import QLabel, QMainWindow

from .editor.document_model import DocumentState, SelectionRange
from .editor.editor_widget import EditorWidget
from .services.settings import Settings, SettingsStore

__all__ = ["MainWindow", "WindowContext", "WINDOW_APP_NAME"]

_LOGGER = logging.getLogger(__name__)

WINDOW_APP_NAME = "Word Complete"


@dataclass(slots=True)
class WindowContext:
    """Shared context passed to the main window when constructing the UI."""

    settings: Optional[Settings] = None
    settings_store: Optional[SettingsStore] = None
    loop: Optional[asyncio.AbstractEventLoop] = None


class MainWindow(QMainWindow):
    """Single-document window: editor in the center, caret and index size below."""

    def __init__(self, context: WindowContext | None = None) -> None:
        super().__init__()
        self._context = context or WindowContext()
        settings = self._context.settings or Settings()
        self._settings = settings
        self._closed = False

        self.setWindowTitle(WINDOW_APP_NAME)
        self.resize(800, 600)

        self._editor = EditorWidget(self, settings=settings, loop=self._context.loop)
        self.setCentralWidget(self._editor)

        self._cursor_label = QLabel(self)
        self._cursor_label.setObjectName("wc-status-cursor")
        self._cursor_label.setContentsMargins(8, 0, 8, 0)
        self._index_label = QLabel(self)
        self._index_label.setObjectName("wc-status-index")
        self._index_label.setContentsMargins(0, 0, 8, 0)
        self.statusBar().addPermanentWidget(self._cursor_label)
        self.statusBar().addPermanentWidget(self._index_label)

        self._editor.add_cursor_listener(self._handle_cursor_moved)
        self._editor.indexPublished.connect(self.update_index_status)

        self._editor.set_text(settings.initial_text, mark_dirty=False)
        line, column = self._editor.caret_line_column()
        self.update_cursor_status(line, column)
        self.update_index_status(len(self._editor.store.current))
        self._restore_geometry(settings.window_geometry)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def editor(self) -> EditorWidget:
        return self._editor

    @property
    def settings(self) -> Settings:
        return self._settings

    def document(self) -> DocumentState:
        return self._editor.to_document()

    def cursor_status_text(self) -> str:
        return self._cursor_label.text()

    def index_status_text(self) -> str:
        return self._index_label.text()

    # ------------------------------------------------------------------
    # Status bar
    # ------------------------------------------------------------------
    def update_cursor_status(self, line: int, column: int) -> None:
        self._cursor_label.setText(f"Ln {line}, Col {column}")

    def update_index_status(self, word_count: int) -> None:
        suffix = "" if word_count == 1 else "s"
        self._index_label.setText(f"{word_count} word{suffix}")

    def _handle_cursor_moved(self, selection: SelectionRange, line: int, column: int) -> None:
        del selection
        self.update_cursor_status(line, column)

    # ------------------------------------------------------------------
    # Qt lifecycle hooks
    # ------------------------------------------------------------------
    def closeEvent(self, event: Any) -> None:  # noqa: N802 - Qt naming
        """Stop background index builds and persist the window geometry."""

        self.shutdown()
        super().closeEvent(event)
        event.accept()

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._editor.shutdown()
        self._persist_geometry()

    def _restore_geometry(self, encoded: str | None) -> None:
        if not encoded:
            return
        try:
            data = QByteArray.fromBase64(encoded.encode("ascii"))
        except (UnicodeEncodeError, ValueError):
            _LOGGER.debug("Ignoring malformed window geometry")
            return
        if not self.restoreGeometry(data):
            _LOGGER.debug("Stored window geometry could not be restored")

    def _persist_geometry(self) -> None:
        store = self._context.settings_store
        if store is None:
            return
        self._settings.window_geometry = bytes(self.saveGeometry().toBase64()).decode("ascii")
        try:
            store.save(self._settings)
        except OSError as exc:  # pragma: no cover - read-only home dirs
            _LOGGER.warning("Failed to persist window geometry: %s", exc)

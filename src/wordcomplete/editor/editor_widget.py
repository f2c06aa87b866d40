"""Editor widget wiring the text view to the completion engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from PySide6.QtCore import QEvent, QObject, QPoint, Qt, QTimer, Signal
from PySide6.QtGui import QKeyEvent, QTextCursor
from PySide6.QtWidgets import QVBoxLayout, QWidget

from ..completion.controller import CompletionRefreshController, RefreshConfig
from ..completion.errors import ForeignCompletionError
from ..completion.index import CompletionEntry, CompletionIndex
from ..completion.provider import completions_at, fragment_before
from ..completion.store import CompletionStore
from ..completion.tokenizer import WordSegmenter
from ..services.settings import Settings
from ..theme import Theme, load_theme
from .completion_popup import CompletionPopup
from .document_model import DocumentState, SelectionRange, TextChange
from .segmenter import QtWordSegmenter
from .text_view import TextView

__all__ = ["EditorWidget"]

LOGGER = logging.getLogger(__name__)

_POPUP_NAV_KEYS = {Qt.Key.Key_Up, Qt.Key.Key_Down}
_POPUP_ACCEPT_KEYS = {Qt.Key.Key_Tab, Qt.Key.Key_Return, Qt.Key.Key_Enter}


class TextChangeListener(Protocol):
    """Callback signature invoked when the editor text changes."""

    def __call__(self, text: str, state: DocumentState) -> None:
        ...


class CursorListener(Protocol):
    """Callback invoked when the selection or caret moves."""

    def __call__(self, selection: SelectionRange, line: int, column: int) -> None:
        ...


def _has_wide_chars(text: str) -> bool:
    return bool(text) and max(text) > "\uffff"


def _to_str_index(text: str, qt_position: int) -> int:
    """Convert a Qt (UTF-16) document position into a ``str`` index."""

    if not _has_wide_chars(text):
        return max(0, min(qt_position, len(text)))
    units = 0
    for index, char in enumerate(text):
        if units >= qt_position:
            return index
        units += 2 if ord(char) > 0xFFFF else 1
    return len(text)


def _to_qt_position(text: str, index: int) -> int:
    index = max(0, min(index, len(text)))
    if not _has_wide_chars(text):
        return index
    return index + sum(1 for char in text[:index] if ord(char) > 0xFFFF)


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class EditorWidget(QWidget):
    """Text view plus completion popup, backed by a refresh controller.

    Every edit is forwarded to the :class:`CompletionRefreshController`, which
    rebuilds the index off the UI thread. Completion queries read whatever
    index is currently published in the :class:`CompletionStore`.
    """

    indexPublished = Signal(int)

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        settings: Settings | None = None,
        theme: Theme | str | None = None,
        store: CompletionStore | None = None,
        controller: CompletionRefreshController | None = None,
        segmenter: WordSegmenter | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or Settings()
        self._theme = load_theme(theme if theme is not None else self._settings.theme)
        self._segmenter: WordSegmenter = segmenter or QtWordSegmenter()
        if controller is None:
            controller = CompletionRefreshController(
                store or CompletionStore(),
                loop=loop,
                config=RefreshConfig(
                    max_tokens=self._settings.max_tokens,
                    min_length=self._settings.min_word_length,
                ),
                segmenter=self._segmenter,
            )
        self._controller = controller
        self._store = controller.store
        self._controller.add_listener(self._handle_index_published)

        self._state = DocumentState()
        self._text = ""
        self._text_listeners: list[TextChangeListener] = []
        self._cursor_listeners: list[CursorListener] = []
        self._strict = self._settings.strict_completions
        self._auto_popup = self._settings.auto_popup
        self._inserting_completion = False

        self._view = TextView(
            self,
            theme=self._theme,
            font_family=self._settings.font_family,
            font_size=self._settings.font_size,
            line_height=self._settings.line_height,
            wrap_lines=self._settings.wrap_lines,
            highlight_selected_line=self._settings.highlight_selected_line,
            show_line_numbers=self._settings.show_line_numbers,
        )
        self._popup = CompletionPopup(self, theme=self._theme)
        self._popup.entryActivated.connect(self._handle_entry_activated)

        self._popup_timer = QTimer(self)
        self._popup_timer.setSingleShot(True)
        self._popup_timer.setInterval(0)
        self._popup_timer.timeout.connect(self._auto_complete)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view)

        self._view.textChangedAt.connect(self._handle_text_changed)
        self._view.cursorPositionChanged.connect(self._handle_cursor_changed)
        self._view.installEventFilter(self)
        self.setFocusProxy(self._view)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def view(self) -> TextView:
        return self._view

    @property
    def popup(self) -> CompletionPopup:
        return self._popup

    @property
    def store(self) -> CompletionStore:
        return self._store

    @property
    def controller(self) -> CompletionRefreshController:
        return self._controller

    @property
    def strict_completions(self) -> bool:
        return self._strict

    @strict_completions.setter
    def strict_completions(self, value: bool) -> None:
        self._strict = bool(value)

    def text(self) -> str:
        return self._text

    def to_document(self) -> DocumentState:
        self._state.selection = self.selection_range()
        return self._state

    def line_count(self) -> int:
        return self._view.blockCount()

    def cursor_position(self) -> int:
        return _to_str_index(self._text, self._view.textCursor().position())

    def set_cursor_position(self, position: int) -> None:
        cursor = self._view.textCursor()
        cursor.setPosition(_to_qt_position(self._text, position))
        self._view.setTextCursor(cursor)

    def selection_range(self) -> SelectionRange:
        cursor = self._view.textCursor()
        return SelectionRange(
            start=_to_str_index(self._text, cursor.selectionStart()),
            end=_to_str_index(self._text, cursor.selectionEnd()),
        )

    def caret_line_column(self) -> tuple[int, int]:
        return self._view.caret_line_column()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def set_text(self, text: str, *, mark_dirty: bool = True) -> None:
        """Replace the whole document and move the caret to the end."""

        self._popup.hide()
        self._view.setPlainText(text)
        if not mark_dirty:
            self._state.dirty = False
        self._view.moveCursor(QTextCursor.MoveOperation.End)

    def insert_text(self, text: str, position: int | None = None) -> None:
        cursor = self._view.textCursor()
        if position is not None:
            cursor.setPosition(_to_qt_position(self._text, position))
        cursor.insertText(text)
        self._view.setTextCursor(cursor)

    def apply_theme(self, theme: Theme | str | None) -> Theme:
        self._theme = self._view.apply_theme(theme)
        self._popup.apply_theme(self._theme)
        return self._theme

    def add_text_listener(self, listener: TextChangeListener) -> None:
        self._text_listeners.append(listener)

    def add_cursor_listener(self, listener: CursorListener) -> None:
        self._cursor_listeners.append(listener)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------
    def completions(self) -> list[CompletionEntry] | None:
        """Entries matching the fragment before the caret, from the active index."""

        return completions_at(
            self._store.current,
            self._text,
            self.cursor_position(),
            segmenter=self._segmenter,
        )

    def request_completions(self) -> bool:
        """Show the popup at the caret when there is anything to offer."""

        entries = self.completions()
        if not entries:
            self._popup.hide()
            return False
        rect = self._view.cursorRect()
        anchor = self._view.viewport().mapToGlobal(rect.bottomLeft() + QPoint(0, 2))
        return self._popup.show_entries(entries, anchor)

    def insert_completion(self, entry: CompletionEntry) -> bool:
        """Replace the fragment before the caret with ``entry.insert_text``.

        Entries that the active index did not produce are rejected: strict mode
        raises :class:`ForeignCompletionError`, otherwise the error is logged
        and nothing is inserted.
        """

        if not isinstance(entry, CompletionEntry) or not self._store.owns(entry):
            error = ForeignCompletionError(entry)
            if self._strict:
                raise error
            LOGGER.error("%s", error)
            return False

        caret = self.cursor_position()
        start = caret
        fragment = fragment_before(self._text, caret, segmenter=self._segmenter)
        if fragment and self._text.endswith(fragment, 0, caret):
            start = caret - len(fragment)

        cursor = self._view.textCursor()
        self._inserting_completion = True
        try:
            cursor.beginEditBlock()
            cursor.setPosition(_to_qt_position(self._text, start))
            cursor.setPosition(_to_qt_position(self._text, caret), QTextCursor.MoveMode.KeepAnchor)
            cursor.insertText(entry.insert_text)
            cursor.endEditBlock()
        finally:
            self._inserting_completion = False
        self._popup_timer.stop()
        self._view.setTextCursor(cursor)
        self._popup.hide()
        LOGGER.debug("Inserted completion %r at %s", entry.insert_text, start)
        return True

    def shutdown(self) -> None:
        """Stop background index builds; later edits are ignored by the controller."""

        self._popup_timer.stop()
        self._popup.hide()
        self._controller.close()

    # ------------------------------------------------------------------
    # Qt callbacks
    # ------------------------------------------------------------------
    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        if watched is self._view and event.type() == QEvent.Type.KeyPress:
            if self._handle_key_press(event):  # type: ignore[arg-type]
                return True
        return super().eventFilter(watched, event)

    def _handle_key_press(self, event: QKeyEvent) -> bool:
        key = event.key()
        if key == Qt.Key.Key_Space and event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            self.request_completions()
            return True
        if not self._popup.isVisible():
            return False
        if key in _POPUP_NAV_KEYS:
            if key == Qt.Key.Key_Up:
                self._popup.select_prev()
            else:
                self._popup.select_next()
            return True
        if key in _POPUP_ACCEPT_KEYS:
            self._popup.accept_current()
            return True
        if key == Qt.Key.Key_Escape:
            self._popup.hide()
            return True
        return False

    def _handle_text_changed(self, position: int, removed: int, added: int) -> None:
        previous = self._text
        self._text = self._view.toPlainText()
        start = _to_str_index(previous, position)
        end = _to_str_index(self._text, position + added)
        change = TextChange(start=start, removed=removed, inserted=self._text[start:end])
        self._state.update_text(self._text)
        for listener in list(self._text_listeners):
            listener(self._text, self._state)
        self._controller.text_changed(self._text, change)
        if self._inserting_completion:
            return
        if added and self._auto_popup:
            self._popup_timer.start()
        elif self._popup.isVisible():
            self._popup_timer.start()

    def _handle_cursor_changed(self) -> None:
        if not self._cursor_listeners:
            return
        selection = self.selection_range()
        line, column = self.caret_line_column()
        for listener in list(self._cursor_listeners):
            listener(selection, line, column)

    def _auto_complete(self) -> None:
        caret = self.cursor_position()
        if caret == 0 or not _is_word_char(self._text[caret - 1]):
            self._popup.hide()
            return
        self.request_completions()

    def _handle_entry_activated(self, entry: Any) -> None:
        self.insert_completion(entry)

    def _handle_index_published(self, index: CompletionIndex) -> None:
        self.indexPublished.emit(len(index))
        if self._popup.isVisible() and not self._inserting_completion:
            self.request_completions()

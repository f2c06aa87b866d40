"""Scrollable plain-text view with a line-number ruler."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QRect, Qt, Signal
from PySide6.QtGui import (
    QColor,
    QFontDatabase,
    QPainter,
    QPaintEvent,
    QResizeEvent,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
    QTextFormat,
)
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit, QWidget

from ..theme import Theme, load_theme
from .line_numbers import LineNumberRuler, ruler_width

__all__ = ["TextView"]


class TextView(QPlainTextEdit):
    """``QPlainTextEdit`` configured like a code/text editing surface.

    Emits :attr:`textChangedAt` for every content edit with the position and
    the number of characters removed and added. Formatting passes run by the
    view itself (line height) are not reported.
    """

    textChangedAt = Signal(int, int, int)

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        theme: Theme | str | None = None,
        font_family: str = "",
        font_size: int = 0,
        line_height: float = 1.2,
        wrap_lines: bool = False,
        highlight_selected_line: bool = True,
        show_line_numbers: bool = True,
    ) -> None:
        super().__init__(parent)
        self._theme = load_theme(theme)
        self._line_height = max(0.5, float(line_height))
        self._highlight_selected_line = highlight_selected_line
        self._formatting = False

        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        if font_family:
            font.setFamily(font_family)
        if font_size > 0:
            font.setPointSize(font_size)
        self.setFont(font)
        self.setLineWrapMode(
            QPlainTextEdit.LineWrapMode.WidgetWidth if wrap_lines else QPlainTextEdit.LineWrapMode.NoWrap
        )
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)

        self.ruler = LineNumberRuler(self)
        self.ruler.setFont(font)
        self.ruler.highlight_selected_line = highlight_selected_line
        self.ruler.setVisible(show_line_numbers)

        self.document().contentsChange.connect(self._handle_contents_change)
        self.blockCountChanged.connect(self._update_ruler_margin)
        self.updateRequest.connect(self._update_ruler_area)
        self.cursorPositionChanged.connect(self._highlight_current_line)

        self.apply_theme(self._theme)
        self._update_ruler_margin()
        self._highlight_current_line()

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def setPlainText(self, text: str) -> None:  # noqa: N802 - Qt API
        super().setPlainText(text)
        self.apply_line_height()

    @property
    def line_height(self) -> float:
        return self._line_height

    def apply_line_height(self) -> None:
        """Apply the paragraph line-height multiple to every block."""

        block_format = QTextBlockFormat()
        block_format.setLineHeight(
            self._line_height * 100.0,
            QTextBlockFormat.LineHeightTypes.ProportionalHeight.value,
        )
        document = self.document()
        undo_enabled = document.isUndoRedoEnabled()
        self._formatting = True
        try:
            document.setUndoRedoEnabled(False)
            cursor = QTextCursor(document)
            cursor.select(QTextCursor.SelectionType.Document)
            cursor.mergeBlockFormat(block_format)
        finally:
            document.setUndoRedoEnabled(undo_enabled)
            self._formatting = False

    def caret_line_column(self) -> tuple[int, int]:
        cursor = self.textCursor()
        return (cursor.blockNumber() + 1, cursor.positionInBlock() + 1)

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------
    @property
    def theme(self) -> Theme:
        return self._theme

    def apply_theme(self, theme: Theme | str | None) -> Theme:
        self._theme = load_theme(theme)
        palette = self.palette()
        palette.setColor(palette.ColorRole.Base, self._qcolor("editor_background"))
        palette.setColor(palette.ColorRole.Text, self._qcolor("editor_foreground"))
        self.setPalette(palette)
        self._highlight_current_line()
        self.ruler.update()
        return self._theme

    def _qcolor(self, key: str) -> QColor:
        return QColor(*self._theme.color(key, (128, 128, 128)))

    # ------------------------------------------------------------------
    # Line-number ruler
    # ------------------------------------------------------------------
    def ruler_width(self) -> int:
        if self.ruler.isHidden():
            return 0
        digit_width = self.fontMetrics().horizontalAdvance("9")
        return ruler_width(self.blockCount(), digit_width)

    def set_line_numbers_visible(self, visible: bool) -> None:
        self.ruler.setVisible(visible)
        self._update_ruler_margin()

    def _update_ruler_margin(self, *_args: Any) -> None:
        self.setViewportMargins(self.ruler_width(), 0, 0, 0)

    def _update_ruler_area(self, rect: QRect, dy: int) -> None:
        if dy:
            self.ruler.scroll(0, dy)
        else:
            self.ruler.update(0, rect.y(), self.ruler.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self._update_ruler_margin()

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802 - Qt API
        super().resizeEvent(event)
        contents = self.contentsRect()
        self.ruler.setGeometry(QRect(contents.left(), contents.top(), self.ruler_width(), contents.height()))

    def paint_line_numbers(self, event: QPaintEvent) -> None:
        painter = QPainter(self.ruler)
        try:
            painter.fillRect(event.rect(), self._qcolor("editor_gutter"))
            current_block = self.textCursor().blockNumber()
            muted = self._qcolor("editor_gutter_foreground")
            emphasis = self._qcolor("editor_gutter_current")
            width = self.ruler.width() - 6
            height = self.fontMetrics().height()

            block = self.firstVisibleBlock()
            number = block.blockNumber()
            top = round(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
            bottom = top + round(self.blockBoundingRect(block).height())
            while block.isValid() and top <= event.rect().bottom():
                if block.isVisible() and bottom >= event.rect().top():
                    highlighted = self.ruler.highlight_selected_line and number == current_block
                    painter.setPen(emphasis if highlighted else muted)
                    painter.drawText(0, top, width, height, Qt.AlignmentFlag.AlignRight, str(number + 1))
                block = block.next()
                top = bottom
                bottom = top + round(self.blockBoundingRect(block).height())
                number += 1
        finally:
            painter.end()

    # ------------------------------------------------------------------
    # Current-line highlight
    # ------------------------------------------------------------------
    def set_highlight_selected_line(self, enabled: bool) -> None:
        self._highlight_selected_line = enabled
        self.ruler.highlight_selected_line = enabled
        self._highlight_current_line()

    def _highlight_current_line(self) -> None:
        selections: list[QTextEdit.ExtraSelection] = []
        if self._highlight_selected_line:
            fmt = QTextCharFormat()
            fmt.setBackground(self._qcolor("editor_line_highlight"))
            fmt.setProperty(QTextFormat.Property.FullWidthSelection, True)
            cursor = self.textCursor()
            cursor.clearSelection()
            selection = QTextEdit.ExtraSelection()
            selection.format = fmt
            selection.cursor = cursor
            selections.append(selection)
        self.setExtraSelections(selections)
        self.ruler.update()

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def _handle_contents_change(self, position: int, removed: int, added: int) -> None:
        if self._formatting:
            return
        self.textChangedAt.emit(position, removed, added)

"""Completion menu shown under the caret."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from PySide6.QtCore import QPoint, QRectF, QSize, Qt, Signal
from PySide6.QtGui import QColor, QFont, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem, QWidget

from ..completion.index import GENERIC_SYMBOL, SQUARE_SUFFIX, CompletionEntry
from ..theme import Theme, load_theme

__all__ = ["CompletionPopup", "symbol_icon"]

_ENTRY_ROLE = Qt.ItemDataRole.UserRole + 1
_MAX_VISIBLE_ROWS = 8
ICON_SIZE = 16


@lru_cache(maxsize=128)
def symbol_icon(symbol: str, size: int = ICON_SIZE, color: tuple[int, int, int] = (97, 175, 239)) -> QIcon:
    """Render ``"<letter>.square"`` or the generic note symbol as an icon."""

    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.GlobalColor.transparent)
    painter = QPainter(pixmap)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        pen = QPen(QColor(*color))
        pen.setWidthF(max(1.0, size / 12))
        painter.setPen(pen)
        frame = QRectF(1, 1, size - 2, size - 2)
        if symbol.endswith(SQUARE_SUFFIX) and symbol != GENERIC_SYMBOL:
            painter.drawRoundedRect(frame, size / 5, size / 5)
            font = QFont()
            font.setPixelSize(max(6, int(size * 0.7)))
            font.setBold(True)
            painter.setFont(font)
            letter = symbol[: -len(SQUARE_SUFFIX)].upper()
            painter.drawText(frame, Qt.AlignmentFlag.AlignCenter, letter)
        else:
            painter.drawRect(frame.adjusted(size / 8, 0, -size / 8, 0))
            for row in (0.35, 0.55, 0.75):
                y = size * row
                painter.drawLine(int(size * 0.32), int(y), int(size * 0.68), int(y))
    finally:
        painter.end()
    return QIcon(pixmap)


class CompletionPopup(QListWidget):
    """Frameless list of completion entries that never takes keyboard focus.

    The owning editor forwards navigation keys; :attr:`entryActivated` fires
    with the chosen :class:`CompletionEntry`.
    """

    entryActivated = Signal(object)

    def __init__(self, parent: QWidget | None = None, *, theme: Theme | str | None = None) -> None:
        super().__init__(parent)
        self._theme = load_theme(theme)
        self.setObjectName("wc-completion-popup")
        self.setWindowFlags(Qt.WindowType.ToolTip | Qt.WindowType.FramelessWindowHint)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setIconSize(QSize(ICON_SIZE, ICON_SIZE))
        self.itemClicked.connect(self._handle_item_clicked)
        self.apply_theme(self._theme)
        self.hide()

    def apply_theme(self, theme: Theme | str | None) -> Theme:
        self._theme = load_theme(theme)
        palette = self.palette()
        palette.setColor(palette.ColorRole.Base, QColor(*self._theme.color("popup_background", (37, 37, 38))))
        palette.setColor(palette.ColorRole.Text, QColor(*self._theme.color("editor_foreground", (212, 212, 212))))
        self.setPalette(palette)
        return self._theme

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def set_entries(self, entries: Iterable[CompletionEntry]) -> int:
        self.clear()
        icon_color = self._theme.color("popup_icon", (97, 175, 239))
        for entry in entries:
            item = QListWidgetItem(symbol_icon(entry.symbol, ICON_SIZE, icon_color), entry.label)
            item.setData(_ENTRY_ROLE, entry)
            self.addItem(item)
        if self.count():
            self.setCurrentRow(0)
        return self.count()

    def entries(self) -> list[CompletionEntry]:
        return [self.item(row).data(_ENTRY_ROLE) for row in range(self.count())]

    def show_entries(self, entries: Iterable[CompletionEntry], pos: QPoint, width: int = 220) -> bool:
        """Populate and show the menu at global ``pos``. Hides it when empty."""

        if not self.set_entries(entries):
            self.hide()
            return False
        row_height = max(self.sizeHintForRow(0), ICON_SIZE + 4)
        rows = min(self.count(), _MAX_VISIBLE_ROWS)
        self.setFixedSize(width, row_height * rows + 2 * self.frameWidth())
        self.move(pos)
        self.show()
        return True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def select_next(self) -> None:
        if self.count():
            self.setCurrentRow((self.currentRow() + 1) % self.count())

    def select_prev(self) -> None:
        if self.count():
            self.setCurrentRow((self.currentRow() - 1) % self.count())

    def current_entry(self) -> CompletionEntry | None:
        item = self.currentItem()
        if item is None:
            return None
        return item.data(_ENTRY_ROLE)

    def accept_current(self) -> CompletionEntry | None:
        entry = self.current_entry()
        self.hide()
        if entry is not None:
            self.entryActivated.emit(entry)
        return entry

    def _handle_item_clicked(self, item: QListWidgetItem) -> None:
        self.setCurrentItem(item)
        self.accept_current()

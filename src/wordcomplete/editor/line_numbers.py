"""Line-number ruler painted in the text view's left margin."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QSize
from PySide6.QtGui import QPaintEvent
from PySide6.QtWidgets import QWidget

if TYPE_CHECKING:  # pragma: no cover - import only for static analysis
    from .text_view import TextView

__all__ = ["LineNumberRuler", "digit_count", "ruler_width"]

RULER_PADDING = 12


def digit_count(block_count: int) -> int:
    """Number of digits needed to print the highest line number."""

    digits = 1
    count = max(1, int(block_count))
    while count >= 10:
        count //= 10
        digits += 1
    return digits


def ruler_width(block_count: int, digit_width: int, padding: int = RULER_PADDING) -> int:
    """Pixel width of a ruler able to show ``block_count`` line numbers."""

    return padding + max(0, int(digit_width)) * max(2, digit_count(block_count))


class LineNumberRuler(QWidget):
    """Vertical ruler next to a :class:`TextView`; painting is delegated to the view.

    The ruler carries no markers. ``highlight_selected_line`` draws the caret's
    line number in the emphasis color.
    """

    def __init__(self, view: "TextView") -> None:
        super().__init__(view)
        self._view = view
        self.highlight_selected_line = True
        self.setObjectName("wc-line-number-ruler")

    def sizeHint(self) -> QSize:  # noqa: N802 - Qt API
        return QSize(self._view.ruler_width(), 0)

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802 - Qt API
        self._view.paint_line_numbers(event)

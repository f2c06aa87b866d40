"""Tests for the line-number ruler and text view."""

from __future__ import annotations

import pytest
from PySide6.QtGui import QTextBlockFormat, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

from wordcomplete.editor.line_numbers import digit_count, ruler_width
from wordcomplete.editor.text_view import TextView


@pytest.mark.parametrize(
    ("blocks", "digits"),
    [(0, 1), (1, 1), (9, 1), (10, 2), (99, 2), (100, 3), (12345, 5)],
)
def test_digit_count(blocks: int, digits: int) -> None:
    assert digit_count(blocks) == digits


def test_ruler_width_reserves_two_digits() -> None:
    assert ruler_width(1, 8) == 12 + 16
    assert ruler_width(150, 8) == 12 + 24
    assert ruler_width(150, 8, padding=0) == 24


def test_text_view_defaults(qtbot) -> None:
    view = TextView()
    qtbot.addWidget(view)

    assert view.lineWrapMode() == QPlainTextEdit.LineWrapMode.NoWrap
    assert view.ruler_width() > 0
    assert len(view.extraSelections()) == 1


def test_text_view_applies_line_height_to_loaded_text(qtbot) -> None:
    view = TextView(line_height=1.5)
    qtbot.addWidget(view)

    view.setPlainText("first\nsecond\nthird")

    block = view.document().firstBlock()
    while block.isValid():
        block_format = block.blockFormat()
        assert block_format.lineHeight() == pytest.approx(150.0)
        assert block_format.lineHeightType() == QTextBlockFormat.LineHeightTypes.ProportionalHeight.value
        block = block.next()


def test_formatting_pass_is_not_reported_as_edit(qtbot) -> None:
    view = TextView()
    qtbot.addWidget(view)
    view.setPlainText("alpha beta")
    changes: list[tuple[int, int, int]] = []
    view.textChangedAt.connect(lambda *args: changes.append(args))

    view.apply_line_height()
    assert changes == []

    view.moveCursor(QTextCursor.MoveOperation.End)
    view.insertPlainText("!")
    assert changes == [(10, 0, 1)]


def test_line_numbers_can_be_hidden(qtbot) -> None:
    view = TextView(show_line_numbers=False)
    qtbot.addWidget(view)

    assert view.ruler_width() == 0
    view.set_line_numbers_visible(True)
    assert view.ruler_width() > 0


def test_wrap_and_highlight_options(qtbot) -> None:
    view = TextView(wrap_lines=True, highlight_selected_line=False)
    qtbot.addWidget(view)

    assert view.lineWrapMode() == QPlainTextEdit.LineWrapMode.WidgetWidth
    assert view.extraSelections() == []
    view.set_highlight_selected_line(True)
    assert len(view.extraSelections()) == 1


def test_ruler_paints_without_errors(qtbot) -> None:
    view = TextView()
    qtbot.addWidget(view)
    view.setPlainText("\n".join(f"line {index}" for index in range(30)))
    view.resize(300, 200)
    view.show()
    qtbot.waitExposed(view)

    image = view.ruler.grab()

    assert not image.isNull()
    assert view.ruler.width() == view.ruler_width()

"""Tests for the completion popup widget."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QPoint, Qt

from wordcomplete.completion.index import CompletionEntry, build_index
from wordcomplete.editor.completion_popup import CompletionPopup, symbol_icon


@pytest.fixture
def entries() -> list[CompletionEntry]:
    index = build_index(["dog", "door", "dove", "_under"])
    assert index is not None
    return list(index)


@pytest.fixture
def popup(qtbot) -> CompletionPopup:
    widget = CompletionPopup()
    qtbot.addWidget(widget)
    return widget


def test_symbol_icons_render(qapp) -> None:
    square = symbol_icon("d.square")
    note = symbol_icon("note.text", 24)

    assert not square.isNull()
    assert not note.isNull()
    assert symbol_icon("d.square") is square


def test_set_entries_selects_first_row(popup: CompletionPopup, entries) -> None:
    assert popup.set_entries(entries) == 4

    assert popup.current_entry() == entries[0]
    assert [popup.item(row).text() for row in range(popup.count())] == [entry.label for entry in entries]
    assert popup.entries() == entries


def test_navigation_wraps_around(popup: CompletionPopup, entries) -> None:
    popup.set_entries(entries)

    popup.select_prev()
    assert popup.current_entry() == entries[-1]
    popup.select_next()
    assert popup.current_entry() == entries[0]
    popup.select_next()
    assert popup.current_entry() == entries[1]


def test_accept_current_emits_entry(qtbot, popup: CompletionPopup, entries) -> None:
    popup.show_entries(entries, QPoint(10, 10))
    popup.select_next()

    with qtbot.waitSignal(popup.entryActivated) as blocker:
        accepted = popup.accept_current()

    assert accepted == entries[1]
    assert blocker.args == [entries[1]]
    assert not popup.isVisible()


def test_show_entries_hides_when_empty(popup: CompletionPopup, entries) -> None:
    assert popup.show_entries(entries, QPoint(0, 0)) is True
    assert popup.isVisible()

    assert popup.show_entries([], QPoint(0, 0)) is False
    assert not popup.isVisible()
    assert popup.accept_current() is None


def test_popup_never_takes_focus(popup: CompletionPopup) -> None:
    assert popup.focusPolicy() == Qt.FocusPolicy.NoFocus

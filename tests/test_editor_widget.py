"""Editor widget tests covering completion behaviour in headless mode."""

from __future__ import annotations

import pytest
from PySide6.QtCore import Qt

from wordcomplete.completion.errors import ForeignCompletionError
from wordcomplete.completion.index import CompletionEntry
from wordcomplete.completion.controller import ControllerState
from wordcomplete.editor.document_model import DocumentState, SelectionRange
from wordcomplete.editor.editor_widget import EditorWidget
from wordcomplete.services.settings import Settings


@pytest.fixture
def editor(qtbot) -> EditorWidget:
    widget = EditorWidget(settings=Settings(auto_popup=False, strict_completion_checks=True))
    qtbot.addWidget(widget)
    yield widget
    widget.shutdown()


def _type_at_end(editor: EditorWidget, text: str) -> None:
    editor.set_cursor_position(len(editor.text()))
    editor.insert_text(text)


def test_set_text_builds_index(editor: EditorWidget) -> None:
    editor.set_text("Cat cat dog dog fish 2024")

    index = editor.store.current
    assert [entry.label for entry in index] == ["Cat", "Dog", "Fish"]
    assert [entry.symbol for entry in index] == ["c.square", "d.square", "f.square"]
    assert editor.cursor_position() == len("Cat cat dog dog fish 2024")


def test_completions_for_fragment_before_caret(editor: EditorWidget) -> None:
    editor.set_text("cat dog door\nI like ")
    _type_at_end(editor, "do")

    entries = editor.completions()

    assert entries is not None
    assert [entry.insert_text for entry in entries] == ["dog", "door"]


def test_completions_none_on_empty_document(editor: EditorWidget) -> None:
    editor.set_text("")

    assert editor.completions() is None
    assert editor.request_completions() is False
    assert not editor.popup.isVisible()


def test_insert_completion_replaces_fragment(editor: EditorWidget) -> None:
    editor.set_text("window widget\nwi")
    entry = next(item for item in editor.completions() or [] if item.insert_text == "widget")

    assert editor.insert_completion(entry) is True

    assert editor.text() == "window widget\nwidget"
    assert editor.cursor_position() == len(editor.text())


def test_insert_completion_at_caret_without_fragment(editor: EditorWidget) -> None:
    editor.set_text("kettle ")
    entry = editor.store.current.entries[0]

    assert editor.insert_completion(entry) is True
    assert editor.text() == "kettle kettle"


def test_foreign_entry_raises_in_strict_mode(editor: EditorWidget) -> None:
    editor.set_text("alpha beta")
    forged = CompletionEntry(id="forged", label="Alpha", symbol="a.square", insert_text="alpha")

    with pytest.raises(ForeignCompletionError) as excinfo:
        editor.insert_completion(forged)

    assert "alpha" in str(excinfo.value)
    assert editor.text() == "alpha beta"


def test_foreign_entry_is_logged_when_not_strict(editor: EditorWidget, caplog) -> None:
    editor.strict_completions = False
    editor.set_text("alpha beta")
    stale = editor.store.current.entries[0]
    _type_at_end(editor, " gamma")

    with caplog.at_level("ERROR"):
        assert editor.insert_completion(stale) is False

    assert "does not belong to the active index" in caplog.text
    assert editor.text() == "alpha beta gamma"


def test_text_and_cursor_listeners(editor: EditorWidget) -> None:
    texts: list[tuple[str, DocumentState]] = []
    cursors: list[tuple[SelectionRange, int, int]] = []
    editor.add_text_listener(lambda text, state: texts.append((text, state)))
    editor.add_cursor_listener(lambda selection, line, column: cursors.append((selection, line, column)))

    editor.set_text("one\ntwo")

    assert texts[-1][0] == "one\ntwo"
    assert texts[-1][1].dirty is True
    assert cursors[-1][1:] == (2, 4)
    assert editor.line_count() == 2
    assert editor.to_document().selection == SelectionRange(7, 7)


def test_document_version_tracks_edits(editor: EditorWidget) -> None:
    editor.set_text("draft")
    version = editor.to_document().version_id

    _type_at_end(editor, "s")

    document = editor.to_document()
    assert document.text == "drafts"
    assert document.version_id > version


def test_ctrl_space_and_keyboard_navigation(qtbot, editor: EditorWidget) -> None:
    editor.set_text("dog door dove\nd")

    qtbot.keyClick(editor.view, Qt.Key.Key_Space, Qt.KeyboardModifier.ControlModifier)
    assert editor.popup.isVisible()
    assert [entry.insert_text for entry in editor.popup.entries()] == ["dog", "door", "dove"]

    qtbot.keyClick(editor.view, Qt.Key.Key_Down)
    qtbot.keyClick(editor.view, Qt.Key.Key_Tab)

    assert not editor.popup.isVisible()
    assert editor.text() == "dog door dove\ndoor"


def test_escape_dismisses_popup(qtbot, editor: EditorWidget) -> None:
    editor.set_text("pear peach\npe")
    assert editor.request_completions() is True

    qtbot.keyClick(editor.view, Qt.Key.Key_Escape)

    assert not editor.popup.isVisible()
    assert editor.text() == "pear peach\npe"


def test_typing_opens_popup_automatically(qtbot) -> None:
    widget = EditorWidget(settings=Settings(auto_popup=True))
    qtbot.addWidget(widget)
    widget.set_text("banana bandana\n")
    widget.set_cursor_position(len(widget.text()))

    qtbot.keyClicks(widget.view, "ban")

    qtbot.waitUntil(widget.popup.isVisible)
    assert [entry.insert_text for entry in widget.popup.entries()] == ["ban", "banana", "bandana"]

    qtbot.keyClick(widget.view, Qt.Key.Key_Space)
    qtbot.waitUntil(lambda: not widget.popup.isVisible())
    widget.shutdown()


def test_accepting_completion_keeps_popup_closed(qtbot) -> None:
    widget = EditorWidget(settings=Settings(auto_popup=True))
    qtbot.addWidget(widget)
    widget.set_text("banana bandana\n")
    widget.set_cursor_position(len(widget.text()))

    qtbot.keyClicks(widget.view, "band")
    qtbot.waitUntil(widget.popup.isVisible)
    assert [entry.insert_text for entry in widget.popup.entries()] == ["band", "bandana"]

    qtbot.keyClick(widget.view, Qt.Key.Key_Down)
    qtbot.keyClick(widget.view, Qt.Key.Key_Return)
    qtbot.wait(20)

    assert widget.text() == "banana bandana\nbandana"
    assert not widget.popup.isVisible()

    qtbot.keyClick(widget.view, Qt.Key.Key_Return)

    assert widget.text() == "banana bandana\nbandana\n"
    widget.shutdown()


def test_astral_characters_keep_offsets_aligned(editor: EditorWidget) -> None:
    editor.set_text("\U0001f600 alpine alpaca\n\U0001f600 alp")

    assert editor.cursor_position() == len(editor.text())
    assert [entry.insert_text for entry in editor.completions() or []] == ["alp", "alpaca", "alpine"]


def test_index_published_signal(qtbot, editor: EditorWidget) -> None:
    with qtbot.waitSignal(editor.indexPublished) as blocker:
        editor.set_text("red green blue")

    assert blocker.args == [3]


def test_shutdown_stops_index_updates(editor: EditorWidget) -> None:
    editor.set_text("first words")
    before = editor.store.current

    editor.shutdown()
    _type_at_end(editor, " later additions")

    assert editor.controller.state is ControllerState.CLOSED
    assert editor.store.current is before

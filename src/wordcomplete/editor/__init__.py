"""Qt editing surface: text view, line-number ruler and completion popup."""

from .completion_popup import CompletionPopup, symbol_icon
from .document_model import DocumentState, SelectionRange, TextChange
from .editor_widget import EditorWidget
from .line_numbers import LineNumberRuler, ruler_width
from .segmenter import QtWordSegmenter
from .text_view import TextView

__all__ = [
    "CompletionPopup",
    "DocumentState",
    "EditorWidget",
    "LineNumberRuler",
    "QtWordSegmenter",
    "SelectionRange",
    "TextChange",
    "TextView",
    "ruler_width",
    "symbol_icon",
]

"""Word segmenter backed by Qt's Unicode boundary finder."""

from __future__ import annotations

from typing import Iterator

from PySide6.QtCore import QTextBoundaryFinder

from ..completion.tokenizer import WordSpan, is_numeric_word

__all__ = ["QtWordSegmenter"]

_BoundaryReason = QTextBoundaryFinder.BoundaryReason


def _utf16_offsets(text: str) -> list[int] | None:
    """Map UTF-16 code unit offsets to ``str`` indices, or ``None`` when identical."""

    if not text or max(text) <= "\uffff":
        return None
    offsets: list[int] = []
    for index, char in enumerate(text):
        offsets.append(index)
        if ord(char) > 0xFFFF:
            offsets.append(index)
    offsets.append(len(text))
    return offsets


class QtWordSegmenter:
    """Segments text on UAX #29 word boundaries via ``QTextBoundaryFinder``.

    Qt only reports where words start and end; numeric classification reuses
    :func:`is_numeric_word`.
    """

    def spans(self, text: str) -> Iterator[WordSpan]:
        if not text:
            return
        offsets = _utf16_offsets(text)
        finder = QTextBoundaryFinder(QTextBoundaryFinder.BoundaryType.Word, text)
        finder.toStart()
        start: int | None = None
        while True:
            position = finder.position()
            reasons = finder.boundaryReasons()
            if start is not None and reasons & _BoundaryReason.EndOfItem:
                begin, end = start, position
                if offsets is not None:
                    begin, end = offsets[begin], offsets[end]
                word = text[begin:end]
                if word.strip():
                    yield WordSpan(begin, end, word, is_numeric_word(word))
                start = None
            if reasons & _BoundaryReason.StartOfItem:
                start = position
            if finder.toNextBoundary() == -1:
                break

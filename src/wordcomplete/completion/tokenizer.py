"""Word tokenizer adapter feeding the completion index.

The adapter does not implement word segmentation itself. It wraps a
:class:`WordSegmenter` collaborator, drops spans the collaborator classifies as
numeric, lowercases the rest and stops early on cancellation or once the token
cap is reached.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol

from .cancellation import CancellationToken

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "RegexWordSegmenter",
    "Token",
    "WordSegmenter",
    "WordSpan",
    "default_segmenter",
    "is_numeric_word",
    "tokenize",
]

DEFAULT_MAX_TOKENS = 512

_WORD_RE = re.compile(r"\w+(?:['’]\w+)*", re.UNICODE)
_NUMERIC_SEPARATORS = frozenset(".,")


@dataclass(slots=True, frozen=True)
class WordSpan:
    """A word-boundary substring reported by a segmenter."""

    start: int
    end: int
    text: str
    numeric: bool = False


@dataclass(slots=True, frozen=True)
class Token:
    """Lowercase word extracted from document text; its position is dropped."""

    text: str

    def __str__(self) -> str:
        return self.text


class WordSegmenter(Protocol):
    """Collaborator that splits text into word spans."""

    def spans(self, text: str) -> Iterable[WordSpan]:
        ...


def is_numeric_word(text: str) -> bool:
    """Return ``True`` when ``text`` only holds digits and numeric separators."""

    if not text:
        return False
    has_digit = False
    for char in text:
        if char.isdigit() or char.isnumeric():
            has_digit = True
        elif char not in _NUMERIC_SEPARATORS:
            return False
    return has_digit


class RegexWordSegmenter:
    """Qt-free segmenter built on Unicode ``\\w`` runs.

    Apostrophes inside a word (``don't``) stay part of it.
    """

    def __init__(self, pattern: re.Pattern[str] | None = None) -> None:
        self._pattern = pattern or _WORD_RE

    def spans(self, text: str) -> Iterator[WordSpan]:
        for match in self._pattern.finditer(text):
            word = match.group(0)
            yield WordSpan(match.start(), match.end(), word, is_numeric_word(word))


_DEFAULT_SEGMENTER = RegexWordSegmenter()


def default_segmenter() -> WordSegmenter:
    return _DEFAULT_SEGMENTER


def tokenize(
    text: str,
    max_count: int = DEFAULT_MAX_TOKENS,
    *,
    cancel_token: CancellationToken | None = None,
    segmenter: WordSegmenter | None = None,
) -> Iterator[Token]:
    """Lazily yield lowercase, non-numeric word tokens from ``text``.

    At most ``max_count`` tokens are produced. ``cancel_token`` is polled before
    every yield so an abandoned build stops scanning immediately.
    """

    if max_count <= 0:
        return
    active = segmenter or _DEFAULT_SEGMENTER
    produced = 0
    for span in active.spans(text):
        if cancel_token is not None and cancel_token.cancelled:
            return
        if span.numeric:
            continue
        yield Token(span.text.lower())
        produced += 1
        if produced >= max_count:
            return

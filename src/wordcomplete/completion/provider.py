"""Prefix completion queries against the active index."""

from __future__ import annotations

from .index import CompletionEntry, CompletionIndex
from .tokenizer import WordSegmenter, default_segmenter

__all__ = ["completions_at", "filter_entries", "fragment_before"]


def fragment_before(
    text: str,
    cursor: int,
    *,
    segmenter: WordSegmenter | None = None,
) -> str | None:
    """Return the nearest word ending at or before ``cursor``.

    Text is segmented one line at a time, walking backward from the caret, so
    long documents are not re-scanned on every keystroke. A word straddling
    the caret is cut at the caret (``do|g`` yields ``do``).
    """

    active = segmenter or default_segmenter()
    end = max(0, min(int(cursor), len(text)))
    while end > 0:
        start = text.rfind("\n", 0, end) + 1
        last = None
        for span in active.spans(text[start:end]):
            last = span
        if last is not None:
            return last.text
        end = start - 1
    return None


def filter_entries(index: CompletionIndex, fragment: str) -> list[CompletionEntry]:
    """Entries whose insertion text starts with ``fragment``, in index order."""

    needle = fragment.casefold()
    return [entry for entry in index if entry.insert_text.casefold().startswith(needle)]


def completions_at(
    index: CompletionIndex,
    text: str,
    cursor: int,
    *,
    segmenter: WordSegmenter | None = None,
) -> list[CompletionEntry] | None:
    """Completion entries for the fragment preceding ``cursor``.

    ``None`` means no fragment precedes the caret and no menu should be shown.
    """

    fragment = fragment_before(text, cursor, segmenter=segmenter)
    if fragment is None:
        return None
    return filter_entries(index, fragment)

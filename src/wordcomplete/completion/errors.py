"""Error types raised by the completion layer."""

from __future__ import annotations

from .index import CompletionEntry

__all__ = ["CompletionError", "ForeignCompletionError"]


class CompletionError(Exception):
    """Base class for completion failures."""


class ForeignCompletionError(CompletionError):
    """An insertion request carried an entry the active index never produced."""

    def __init__(self, entry: object) -> None:
        self.entry = entry
        if isinstance(entry, CompletionEntry):
            detail = f"{entry.insert_text!r} (id={entry.id})"
        else:
            detail = f"object of type {type(entry).__name__}"
        super().__init__(f"Completion entry {detail} does not belong to the active index")

"""Completion entries and the index builder."""

from __future__ import annotations

import locale
import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from .cancellation import CancellationToken
from .tokenizer import Token

__all__ = [
    "DEFAULT_MIN_LENGTH",
    "GENERIC_SYMBOL",
    "SQUARE_SUFFIX",
    "CompletionEntry",
    "CompletionIndex",
    "build_index",
    "collation_key",
    "make_entry",
    "symbol_for",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 3
SQUARE_SUFFIX = ".square"
GENERIC_SYMBOL = "note.text"


@dataclass(slots=True, frozen=True)
class CompletionEntry:
    """A candidate word offered for autocomplete."""

    id: str
    label: str
    symbol: str
    insert_text: str


@dataclass(slots=True, frozen=True)
class CompletionIndex:
    """Immutable, collation-ordered sequence of completion entries."""

    entries: tuple[CompletionEntry, ...] = ()
    generation: int = 0
    _by_id: dict[str, CompletionEntry] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self._by_id and self.entries:
            object.__setattr__(self, "_by_id", {entry.id: entry for entry in self.entries})

    @classmethod
    def empty(cls) -> "CompletionIndex":
        return cls()

    def words(self) -> list[str]:
        return [entry.insert_text for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CompletionEntry]:
        return iter(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, CompletionEntry):
            return False
        return self._by_id.get(entry.id) == entry


def collation_key(word: str) -> tuple[str, str]:
    """Locale-aware, case-insensitive sort key with a deterministic tiebreak."""

    folded = word.casefold()
    try:
        primary = locale.strxfrm(folded)
    except (OSError, ValueError):  # pragma: no cover - broken C library locale
        primary = folded
    return (primary, word)


def symbol_for(word: str) -> str:
    """Return the icon identifier for ``word``."""

    first = word[:1]
    if first and first.isascii() and first.isalpha():
        return f"{first.lower()}{SQUARE_SUFFIX}"
    return GENERIC_SYMBOL


def make_entry(word: str) -> CompletionEntry:
    return CompletionEntry(
        id=uuid.uuid4().hex,
        label=word[:1].upper() + word[1:],
        symbol=symbol_for(word),
        insert_text=word,
    )


def build_index(
    tokens: Iterable[Token | str],
    *,
    cancel_token: CancellationToken | None = None,
    min_length: int = DEFAULT_MIN_LENGTH,
    generation: int = 0,
) -> CompletionIndex | None:
    """Collapse ``tokens`` into a sorted :class:`CompletionIndex`.

    Returns ``None`` when ``cancel_token`` fires, either during accumulation or
    after the final filter/sort/map stage; no partial index is ever produced.
    """

    words: set[str] = set()
    for token in tokens:
        if cancel_token is not None and cancel_token.cancelled:
            return None
        words.add(str(token))
    if cancel_token is not None and cancel_token.cancelled:
        return None

    kept = [word for word in words if len(word) >= min_length]
    ordered: Sequence[str] = sorted(kept, key=collation_key)
    entries = tuple(make_entry(word) for word in ordered)

    if cancel_token is not None and cancel_token.cancelled:
        LOGGER.debug("Discarding index generation %s cancelled after sorting", generation)
        return None
    return CompletionIndex(entries=entries, generation=generation)

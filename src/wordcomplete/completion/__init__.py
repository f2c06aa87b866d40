"""Word completion core: tokenizer adapter, index builder, provider, refresh."""

from .cancellation import CancellationToken
from .controller import CompletionRefreshController, ControllerState, RefreshConfig
from .errors import CompletionError, ForeignCompletionError
from .index import CompletionEntry, CompletionIndex, build_index, collation_key, symbol_for
from .provider import completions_at, filter_entries, fragment_before
from .store import CompletionStore
from .tokenizer import (
    DEFAULT_MAX_TOKENS,
    RegexWordSegmenter,
    Token,
    WordSegmenter,
    WordSpan,
    is_numeric_word,
    tokenize,
)

__all__ = [
    "CancellationToken",
    "CompletionEntry",
    "CompletionError",
    "CompletionIndex",
    "CompletionRefreshController",
    "CompletionStore",
    "ControllerState",
    "DEFAULT_MAX_TOKENS",
    "ForeignCompletionError",
    "RefreshConfig",
    "RegexWordSegmenter",
    "Token",
    "WordSegmenter",
    "WordSpan",
    "build_index",
    "collation_key",
    "completions_at",
    "filter_entries",
    "fragment_before",
    "is_numeric_word",
    "symbol_for",
    "tokenize",
]

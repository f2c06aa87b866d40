"""Tests for the completion index builder."""

from __future__ import annotations

import pytest

from wordcomplete.completion.cancellation import CancellationToken
from wordcomplete.completion.index import (
    GENERIC_SYMBOL,
    CompletionEntry,
    CompletionIndex,
    build_index,
    make_entry,
    symbol_for,
)
from wordcomplete.completion.tokenizer import Token, tokenize


def test_build_index_dedupes_filters_and_sorts() -> None:
    index = build_index(tokenize("Cat cat dog dog fish 2024"), generation=3)

    assert index is not None
    assert index.generation == 3
    assert [entry.label for entry in index] == ["Cat", "Dog", "Fish"]
    assert [entry.symbol for entry in index] == ["c.square", "d.square", "f.square"]
    assert index.words() == ["cat", "dog", "fish"]


def test_build_index_drops_short_words() -> None:
    index = build_index(tokenize("I am at the zoo"))

    assert index is not None
    assert index.words() == ["the", "zoo"]


def test_build_index_honours_min_length() -> None:
    index = build_index([Token("ab"), Token("abcd"), Token("abc")], min_length=4)

    assert index is not None
    assert index.words() == ["abcd"]


def test_build_index_from_empty_input_is_empty() -> None:
    index = build_index([])

    assert index is not None
    assert len(index) == 0
    assert not index


def test_build_index_accepts_plain_strings() -> None:
    index = build_index(["delta", "alpha", "charlie"])

    assert index is not None
    assert index.words() == ["alpha", "charlie", "delta"]


def test_build_index_sorts_case_insensitively() -> None:
    index = build_index(["beta", "Alpha", "gamma", "Beta", "alpha"])

    assert index is not None
    assert index.words() == ["Alpha", "alpha", "Beta", "beta", "gamma"]
    assert [entry.label for entry in index] == ["Alpha", "Alpha", "Beta", "Beta", "Gamma"]


def test_tokenized_mixed_case_collapses_to_one_entry() -> None:
    index = build_index(tokenize("Zebra apple Mango zebra APPLE mango"))

    assert index is not None
    assert index.words() == ["apple", "mango", "zebra"]

def test_build_index_ids_are_unique() -> None:
    index = build_index(tokenize("one two three four five six"))

    assert index is not None
    ids = [entry.id for entry in index]
    assert len(set(ids)) == len(ids)


def test_build_index_cancelled_during_accumulation_returns_none() -> None:
    token = CancellationToken()

    def _tokens():
        yield Token("alpha")
        token.cancel()
        yield Token("beta")

    assert build_index(_tokens(), cancel_token=token) is None


def test_build_index_cancelled_after_last_token_returns_none() -> None:
    token = CancellationToken()

    def _tokens():
        yield Token("alpha")
        token.cancel()

    assert build_index(_tokens(), cancel_token=token) is None


@pytest.mark.parametrize(
    ("word", "symbol"),
    [
        ("cat", "c.square"),
        ("Zebra", "z.square"),
        ("über", GENERIC_SYMBOL),
        ("_private", GENERIC_SYMBOL),
        ("", GENERIC_SYMBOL),
    ],
)
def test_symbol_for(word: str, symbol: str) -> None:
    assert symbol_for(word) == symbol


def test_make_entry_capitalises_label_only() -> None:
    entry = make_entry("iphone")

    assert entry.label == "Iphone"
    assert entry.insert_text == "iphone"
    assert entry.symbol == "i.square"


def test_index_membership_requires_same_entry() -> None:
    index = build_index(["alpha", "beta"])
    assert index is not None
    member = index.entries[0]
    impostor = CompletionEntry(id="nope", label=member.label, symbol=member.symbol, insert_text=member.insert_text)
    forged = CompletionEntry(id=member.id, label="Other", symbol=member.symbol, insert_text="other")

    assert member in index
    assert impostor not in index
    assert forged not in index
    assert "alpha" not in index


def test_empty_index() -> None:
    index = CompletionIndex.empty()

    assert index.generation == 0
    assert list(index) == []

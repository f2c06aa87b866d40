"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

from wordcomplete.completion import CompletionStore

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def store() -> CompletionStore:
    return CompletionStore()


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep log files out of the home directory and drop stray overrides."""

    for name in list(os.environ):
        if name.startswith("WORDCOMPLETE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WORDCOMPLETE_LOG_DIR", str(tmp_path / "logs"))

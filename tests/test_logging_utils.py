"""Tests for the logging bootstrap helpers."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import pytest

from wordcomplete.services.settings import Settings
from wordcomplete.utils import logging as logging_utils
from wordcomplete.utils.logging import COMPLETION_LOGGER, LogConfig


@pytest.fixture(autouse=True)
def _restore_loggers():
    root = logging.getLogger()
    tracked = [root, logging.getLogger("wordcomplete"), logging.getLogger(COMPLETION_LOGGER)]
    levels = [logger.level for logger in tracked]
    yield
    logging_utils._remove_installed_handlers(root)
    logging_utils._log_path = None
    for logger, level in zip(tracked, levels):
        logger.setLevel(level)


def _flush() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_setup_logging_writes_rotating_file(tmp_path: Path) -> None:
    log_path = logging_utils.setup_logging(LogConfig(log_dir=tmp_path, console=False), force=True)

    logging.getLogger("wordcomplete.editor").info("caret moved")
    _flush()

    assert log_path == tmp_path / "wordcomplete.log"
    assert logging_utils.get_log_path() == log_path
    content = log_path.read_text(encoding="utf-8")
    assert "| INFO     | wordcomplete.editor | caret moved" in content


def test_completion_logger_has_its_own_level(tmp_path: Path) -> None:
    config = LogConfig(level=logging.INFO, completion_level=logging.DEBUG, log_dir=tmp_path, console=False)
    log_path = logging_utils.setup_logging(config, force=True)

    logging.getLogger("wordcomplete.completion.controller").debug("build generation=7")
    logging.getLogger("wordcomplete.editor").debug("hidden detail")
    _flush()

    content = log_path.read_text(encoding="utf-8")
    assert "build generation=7" in content
    assert "hidden detail" not in content


def test_completion_logger_can_be_quieter(tmp_path: Path) -> None:
    config = LogConfig(level=logging.DEBUG, completion_level=logging.WARNING, log_dir=tmp_path, console=False)
    log_path = logging_utils.setup_logging(config, force=True)

    logging.getLogger("wordcomplete.completion.store").info("published 12 words")
    logging.getLogger("wordcomplete.app").debug("window shown")
    _flush()

    content = log_path.read_text(encoding="utf-8")
    assert "published 12 words" not in content
    assert "window shown" in content


def test_log_dir_falls_back_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORDCOMPLETE_LOG_DIR", str(tmp_path / "env-logs"))

    log_path = logging_utils.setup_logging(LogConfig(console=False), force=True)

    assert log_path.parent == tmp_path / "env-logs"
    assert log_path.parent.is_dir()


def test_setup_logging_is_idempotent_without_force(tmp_path: Path) -> None:
    first = logging_utils.setup_logging(LogConfig(log_dir=tmp_path / "a", console=False), force=True)
    second = logging_utils.setup_logging(LogConfig(log_dir=tmp_path / "b", console=False))

    assert second == first


def test_forced_setup_replaces_handlers(tmp_path: Path) -> None:
    logging_utils.setup_logging(LogConfig(log_dir=tmp_path / "a", console=False), force=True)
    logging_utils.setup_logging(LogConfig(log_dir=tmp_path / "b", console=False), force=True)

    files = [
        handler
        for handler in logging.getLogger().handlers
        if isinstance(handler, logging.handlers.RotatingFileHandler)
    ]
    assert [Path(handler.baseFilename).parent for handler in files] == [tmp_path / "b"]


def test_event_loop_loggers_are_quieted(tmp_path: Path) -> None:
    logging_utils.setup_logging(LogConfig(level=logging.DEBUG, log_dir=tmp_path, console=False), force=True)

    assert logging.getLogger("asyncio").level == logging.WARNING
    assert logging.getLogger("qasync").level == logging.WARNING


def test_config_from_settings(tmp_path: Path) -> None:
    settings = Settings(debug_logging=True, completion_log_level="warning", log_dir=str(tmp_path))

    config = LogConfig.from_settings(settings)

    assert config.level == logging.DEBUG
    assert config.completion_level == logging.WARNING
    assert config.resolved_log_dir() == tmp_path


def test_config_from_settings_ignores_bad_level(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        config = LogConfig.from_settings(Settings(completion_log_level="chatty"), debug=False)

    assert config.level == logging.INFO
    assert config.completion_level is None
    assert "chatty" in caplog.text


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", None), (None, None), ("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("15", 15), (30, 30)],
)
def test_parse_level(value, expected) -> None:
    assert logging_utils.parse_level(value) == expected

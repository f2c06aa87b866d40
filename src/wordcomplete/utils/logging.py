"""Log file and logger levels for the editor.

Everything goes to ``wordcomplete.log`` in the log directory (and to stderr
when ``console`` is set). The completion engine logs every index build at
DEBUG, one per keystroke, so its logger hierarchy can be given its own level
independently of the rest of the application.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path

from ..services.settings import Settings

__all__ = ["COMPLETION_LOGGER", "LogConfig", "get_log_path", "parse_level", "setup_logging"]

COMPLETION_LOGGER = "wordcomplete.completion"
LOG_FILE_NAME = "wordcomplete.log"
LOG_DIR_ENV = "WORDCOMPLETE_LOG_DIR"
_DEFAULT_LOG_DIR = Path.home() / ".wordcomplete" / "logs"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_EVENT_LOOP_LOGGERS: tuple[str, ...] = ("asyncio", "qasync")

_installed: list[logging.Handler] = []
_log_path: Path | None = None

LOGGER = logging.getLogger(__name__)


def parse_level(value: str | int | None) -> int | None:
    """Turn ``"debug"``, ``"WARNING"`` or ``"10"`` into a logging level.

    Empty values mean "not set" and return ``None``. Unknown names raise
    :class:`ValueError`.
    """

    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = value.strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


@dataclass(slots=True, frozen=True)
class LogConfig:
    """Where the editor logs and how verbosely."""

    level: int = logging.INFO
    completion_level: int | None = None  # None = same as ``level``
    log_dir: Path | None = None
    console: bool = True
    max_bytes: int = 1_000_000
    backup_count: int = 3

    @classmethod
    def from_settings(cls, settings: Settings, *, debug: bool = False) -> "LogConfig":
        level = logging.DEBUG if debug or settings.debug_logging else logging.INFO
        try:
            completion_level = parse_level(settings.completion_log_level)
        except ValueError as exc:
            LOGGER.warning("Ignoring completion_log_level: %s", exc)
            completion_level = None
        log_dir = Path(settings.log_dir).expanduser() if settings.log_dir else None
        return cls(level=level, completion_level=completion_level, log_dir=log_dir)

    def resolved_log_dir(self) -> Path:
        if self.log_dir is not None:
            return self.log_dir
        return Path(os.environ.get(LOG_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()


def setup_logging(config: LogConfig | None = None, *, force: bool = False) -> Path:
    """Install the log file handler and apply the configured levels.

    A second call is a no-op unless ``force`` is set, in which case the
    handlers from the previous call are replaced.
    """

    global _log_path
    if _installed and not force and _log_path is not None:
        return _log_path

    config = config or LogConfig()
    log_dir = config.resolved_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    _remove_installed_handlers(root)

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=config.max_bytes, backupCount=config.backup_count, encoding="utf-8"
    )
    _installed.append(file_handler)
    if config.console:
        _installed.append(logging.StreamHandler())
    for handler in _installed:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Handlers pass everything; the loggers decide what gets through.
    floor = min(config.level, config.completion_level or config.level)
    root.setLevel(floor)
    logging.getLogger("wordcomplete").setLevel(config.level)
    completion = logging.getLogger(COMPLETION_LOGGER)
    completion.setLevel(config.completion_level if config.completion_level is not None else logging.NOTSET)
    for name in _EVENT_LOOP_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, config.level))
    logging.captureWarnings(True)

    _log_path = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the log file written by the last :func:`setup_logging` call."""

    return _log_path


def _remove_installed_handlers(root: logging.Logger) -> None:
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

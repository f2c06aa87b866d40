"""Settings dataclass and JSON persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = ["Settings", "SettingsStore", "DEFAULT_SETTINGS_PATH"]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".wordcomplete"
DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "WORDCOMPLETE_THEME": "theme",
    "WORDCOMPLETE_FONT_FAMILY": "font_family",
    "WORDCOMPLETE_INITIAL_TEXT": "initial_text",
    "WORDCOMPLETE_COMPLETION_LOG_LEVEL": "completion_log_level",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "WORDCOMPLETE_DEBUG_LOGGING": "debug_logging",
    "WORDCOMPLETE_WRAP_LINES": "wrap_lines",
    "WORDCOMPLETE_LINE_NUMBERS": "show_line_numbers",
    "WORDCOMPLETE_AUTO_POPUP": "auto_popup",
    "WORDCOMPLETE_STRICT_COMPLETIONS": "strict_completion_checks",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "WORDCOMPLETE_LINE_HEIGHT": "line_height",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "WORDCOMPLETE_FONT_SIZE": "font_size",
    "WORDCOMPLETE_MAX_TOKENS": "max_tokens",
    "WORDCOMPLETE_MIN_WORD_LENGTH": "min_word_length",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    theme: str = "default"
    font_family: str = ""
    font_size: int = 0
    line_height: float = 1.2
    wrap_lines: bool = False
    highlight_selected_line: bool = True
    show_line_numbers: bool = True
    initial_text: str = "typing here"
    max_tokens: int = 512
    min_word_length: int = 3
    auto_popup: bool = True
    strict_completion_checks: bool | None = None  # None = follow __debug__
    debug_logging: bool = False
    completion_log_level: str = ""
    log_dir: str = ""
    window_geometry: str | None = None

    @property
    def strict_completions(self) -> bool:
        if self.strict_completion_checks is None:
            return __debug__
        return bool(self.strict_completion_checks)


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            if payload.get("version") != _SETTINGS_VERSION:
                try:
                    self.save(settings)
                except OSError as exc:  # pragma: no cover - read-only home dirs
                    LOGGER.warning("Failed to migrate settings payload: %s", exc)
        LOGGER.debug("Settings loaded from %s (%d keys)", self._path, len(payload))

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")
        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload: Dict[str, Any] = asdict(settings)
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Settings file %s must contain a JSON object", self._path)
            return {}
        return data

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {field.name for field in fields(Settings)}
        filtered = {key: value for key, value in overrides.items() if key in allowed}
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _INT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = int(value, 10)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid integer",
                    env_name,
                    value,
                )
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid float", env_name, value
                )
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}

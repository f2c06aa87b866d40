"""Theme registry and Qt palette integration."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from .models import ColorTuple, Theme

LOGGER = logging.getLogger(__name__)

_DARK_PALETTE: Dict[str, ColorTuple] = {
    "background": (30, 30, 30),
    "foreground": (235, 235, 235),
    "selection": (38, 79, 120),
    "selection_foreground": (255, 255, 255),
    "editor_background": (30, 30, 30),
    "editor_foreground": (212, 212, 212),
    "editor_gutter": (30, 30, 30),
    "editor_gutter_foreground": (110, 110, 110),
    "editor_gutter_current": (200, 200, 200),
    "editor_line_highlight": (42, 45, 46),
    "popup_background": (37, 37, 38),
    "popup_icon": (97, 175, 239),
}

_LIGHT_PALETTE: Dict[str, ColorTuple] = {
    "background": (248, 248, 248),
    "foreground": (32, 33, 36),
    "selection": (181, 215, 255),
    "selection_foreground": (32, 33, 36),
    "editor_background": (255, 255, 255),
    "editor_foreground": (33, 37, 41),
    "editor_gutter": (255, 255, 255),
    "editor_gutter_foreground": (150, 150, 150),
    "editor_gutter_current": (33, 37, 41),
    "editor_line_highlight": (235, 240, 255),
    "popup_background": (250, 250, 250),
    "popup_icon": (45, 123, 246),
}


def build_default_dark_theme() -> Theme:
    return Theme(
        name="default",
        title="Dark",
        palette=_DARK_PALETTE,
        appearance="dark",
    )


def build_light_theme() -> Theme:
    return Theme(
        name="daylight",
        title="Daylight",
        palette=_LIGHT_PALETTE,
        appearance="light",
    )


class ThemeManager:
    """Registry resolving theme names to :class:`Theme` instances."""

    def __init__(self, themes: Iterable[Theme] | None = None, *, default_name: str = "default") -> None:
        self._themes: Dict[str, Theme] = {}
        self._default_name = default_name.lower()
        for theme in themes or ():
            self.register(theme)
        if not self._themes:
            self.register(build_default_dark_theme())
        if self._default_name not in self._themes:
            self._default_name = next(iter(self._themes))

    def register(self, theme: Theme, *, overwrite: bool = True) -> None:
        key = theme.name.lower()
        if not overwrite and key in self._themes:
            raise ValueError(f"Theme '{theme.name}' already registered")
        missing = theme.missing_colors()
        if missing:
            LOGGER.warning("Theme %r has no colors for %s; widgets fall back to grey", theme.name, ", ".join(missing))
        self._themes[key] = theme

    def available_names(self) -> List[str]:
        return sorted(self._themes)

    def resolve(self, theme: Theme | str | None = None) -> Theme:
        if isinstance(theme, Theme):
            return theme
        key = (theme or self._default_name).strip().lower()
        resolved = self._themes.get(key)
        if resolved is None:
            LOGGER.debug("Unknown theme %r; using %s", theme, self._default_name)
            return self._themes[self._default_name]
        return resolved

    def apply_to_application(self, theme: Theme | str | None = None, *, app: Any | None = None) -> Theme:
        """Push the theme's window colors into the application palette."""

        from PySide6.QtGui import QColor, QPalette
        from PySide6.QtWidgets import QApplication

        resolved = self.resolve(theme)
        qt_app: Any = app if app is not None else QApplication.instance()
        if qt_app is None:
            return resolved

        if resolved.qt_style:
            qt_app.setStyle(resolved.qt_style)

        palette = QPalette()
        roles = (
            (QPalette.ColorRole.Window, "background"),
            (QPalette.ColorRole.WindowText, "foreground"),
            (QPalette.ColorRole.Base, "editor_background"),
            (QPalette.ColorRole.Text, "editor_foreground"),
            (QPalette.ColorRole.Button, "background"),
            (QPalette.ColorRole.ButtonText, "foreground"),
            (QPalette.ColorRole.Highlight, "selection"),
            (QPalette.ColorRole.HighlightedText, "selection_foreground"),
        )
        for role, key in roles:
            palette.setColor(role, QColor(*resolved.color(key, (128, 128, 128))))
        qt_app.setPalette(palette)
        return resolved


theme_manager = ThemeManager([build_default_dark_theme(), build_light_theme()])


def load_theme(theme: Theme | str | None = None) -> Theme:
    return theme_manager.resolve(theme)


def available_themes() -> List[str]:
    return theme_manager.available_names()


__all__ = [
    "ThemeManager",
    "available_themes",
    "build_default_dark_theme",
    "build_light_theme",
    "load_theme",
    "theme_manager",
]

"""Colour palette model for the editor, its gutter and the completion menu."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

ColorTuple = Tuple[int, int, int]

# Every colour the editor widgets and the application palette look up.
THEME_COLOR_KEYS: Tuple[str, ...] = (
    "background",
    "foreground",
    "selection",
    "selection_foreground",
    "editor_background",
    "editor_foreground",
    "editor_gutter",
    "editor_gutter_foreground",
    "editor_gutter_current",
    "editor_line_highlight",
    "popup_background",
    "popup_icon",
)
_APPEARANCES = ("dark", "light")


def normalize_color(value: Any) -> ColorTuple:
    """Accept ``#rrggbb``, ``#rgb`` or an RGB triple; channels are clamped to 0..255."""

    if isinstance(value, str):
        digits = value.strip().lstrip("#")
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            raise ValueError(f"Unsupported color format: {value!r}")
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    if isinstance(value, Sequence) and len(value) == 3:
        red, green, blue = (max(0, min(255, int(channel))) for channel in value)
        return (red, green, blue)
    if isinstance(value, Sequence):
        raise ValueError(f"RGB colors need exactly 3 channels, received {value!r}")
    raise TypeError(f"Cannot convert {type(value)!r} to an RGB color")


@dataclass(slots=True)
class Theme:
    """A named editor palette.

    ``appearance`` is ``"dark"`` or ``"light"``; ``qt_style`` names the Qt
    widget style pushed to the application together with the palette.
    """

    name: str
    title: str = ""
    palette: Dict[str, ColorTuple] = field(default_factory=dict)
    appearance: str = "dark"
    qt_style: str | None = "Fusion"

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip().lower() or "default"
        self.title = (self.title or self.name.title()).strip()
        self.palette = {key.strip().lower(): normalize_color(value) for key, value in self.palette.items()}
        if self.appearance not in _APPEARANCES:
            raise ValueError(f"Theme appearance must be one of {_APPEARANCES}, got {self.appearance!r}")

    def color(self, key: str, fallback: ColorTuple | None = None) -> ColorTuple:
        lookup = key.strip().lower()
        if lookup in self.palette:
            return self.palette[lookup]
        if fallback is not None:
            return fallback
        raise KeyError(f"Theme '{self.name}' has no color '{key}'")

    @property
    def is_dark(self) -> bool:
        return self.appearance == "dark"

    def missing_colors(self) -> List[str]:
        return [key for key in THEME_COLOR_KEYS if key not in self.palette]


__all__ = ["ColorTuple", "THEME_COLOR_KEYS", "Theme", "normalize_color"]

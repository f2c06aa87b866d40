"""Editor and popup colour palettes, resolved by name."""

from .models import Theme
from .manager import ThemeManager, available_themes, load_theme, theme_manager

__all__ = ["Theme", "ThemeManager", "available_themes", "load_theme", "theme_manager"]

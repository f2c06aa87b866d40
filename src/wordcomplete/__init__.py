"""wordcomplete: a PySide6 text editor demo with background word completion."""

__version__ = "0.1.0"

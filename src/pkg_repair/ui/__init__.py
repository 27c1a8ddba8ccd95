from .console import ConsoleRenderer
from .theme import Theme, default_theme

__all__ = ["ConsoleRenderer", "Theme", "default_theme"]

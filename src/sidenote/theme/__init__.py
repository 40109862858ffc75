"""Highlight themes for annotation styles."""

from .manager import (
    DEFAULT_THEME,
    HIGH_CONTRAST_THEME,
    ThemeManager,
    available_themes,
    load_theme,
    theme_manager,
)
from .models import ColorTuple, Theme, normalize_color

__all__ = [
    "ColorTuple",
    "DEFAULT_THEME",
    "HIGH_CONTRAST_THEME",
    "Theme",
    "ThemeManager",
    "available_themes",
    "load_theme",
    "normalize_color",
    "theme_manager",
]

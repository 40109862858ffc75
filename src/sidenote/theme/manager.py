"""Registry of named highlight themes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List

from .models import Theme

DEFAULT_THEME = Theme(name="default")
HIGH_CONTRAST_THEME = Theme(
    name="high-contrast",
    keep_in=(255, 214, 0),
    keep_out=(0, 120, 215),
    foreground=(0, 0, 0),
)


class ThemeManager:
    """Looks themes up by case-insensitive name, falling back to a default."""

    def __init__(self, themes: Iterable[Theme] = (), *, fallback: Theme = DEFAULT_THEME) -> None:
        self._fallback = fallback
        self._themes: Dict[str, Theme] = {fallback.name: fallback}
        for theme in themes:
            self.register(theme)

    def register(self, theme: Theme, *, replace: bool = True) -> Theme:
        if not replace and theme.name in self._themes:
            raise ValueError(f"Theme {theme.name!r} is already registered")
        self._themes[theme.name] = theme
        return theme

    def names(self) -> List[str]:
        return sorted(self._themes)

    def resolve(self, theme: Theme | str | None = None) -> Theme:
        """Return ``theme`` itself, the theme registered under that name, or the fallback."""

        if isinstance(theme, Theme):
            return theme
        if not theme:
            return self._fallback
        return self._themes.get(theme.strip().lower(), self._fallback)

    def load_file(self, source: Path | str) -> Theme:
        """Register the theme described by a JSON file and return it."""

        payload = json.loads(Path(source).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"{source} does not contain a JSON object")
        return self.register(Theme.from_dict(payload))


theme_manager = ThemeManager([HIGH_CONTRAST_THEME])


def load_theme(theme: Theme | str | None = None) -> Theme:
    return theme_manager.resolve(theme)


def available_themes() -> List[str]:
    return theme_manager.names()


__all__ = [
    "DEFAULT_THEME",
    "HIGH_CONTRAST_THEME",
    "ThemeManager",
    "available_themes",
    "load_theme",
    "theme_manager",
]

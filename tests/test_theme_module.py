"""Unit tests for the highlight theme module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sidenote.theme import Theme, ThemeManager, available_themes, load_theme, normalize_color


def test_normalize_color_accepts_hex_and_sequences() -> None:
    assert normalize_color("#ffffff") == (255, 255, 255)
    assert normalize_color("#0f0") == (0, 255, 0)
    assert normalize_color([300, -5, 12]) == (255, 0, 12)

    with pytest.raises(ValueError):
        normalize_color("#12")
    with pytest.raises(TypeError):
        normalize_color(42)


def test_theme_maps_styles_to_backgrounds() -> None:
    theme = Theme(name="Custom", keep_in="#102030", keep_out=(1, 2, 3))

    assert theme.name == "custom"
    assert theme.background_for("keep-in") == (16, 32, 48)
    assert theme.background_for("keep-out") == (1, 2, 3)
    assert theme.background_for("hidden") is None


def test_theme_serialization_round_trip() -> None:
    original = Theme(name="paper", keep_out=(200, 200, 200))

    restored = Theme.from_dict(original.to_dict())

    assert restored == original
    with pytest.raises(ValueError):
        Theme.from_dict({"keep_in": "#fff"})


def test_theme_manager_resolve_and_register() -> None:
    manager = ThemeManager()
    sunrise = manager.register(Theme(name="sunrise", keep_in=(255, 255, 255)))

    assert manager.resolve("Sunrise") is sunrise
    assert manager.resolve("unknown").name == "default"
    assert manager.resolve(None).name == "default"
    assert manager.names() == ["default", "sunrise"]
    with pytest.raises(ValueError):
        manager.register(Theme(name="sunrise"), replace=False)


def test_theme_manager_load_file(tmp_path: Path) -> None:
    source = tmp_path / "theme.json"
    source.write_text(json.dumps({"name": "paper", "keep_out": [200, 200, 200]}), encoding="utf-8")
    manager = ThemeManager()

    imported = manager.load_file(source)

    assert imported.name == "paper"
    assert manager.resolve("paper").keep_out == (200, 200, 200)


def test_builtin_themes_are_available() -> None:
    assert set(available_themes()) == {"default", "high-contrast"}
    assert load_theme("high-contrast").foreground == (0, 0, 0)

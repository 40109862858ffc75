"""User settings: defaults, the JSON settings file and environment overrides.

Precedence, lowest to highest: dataclass defaults, ``~/.sidenote/settings.json``,
``--set KEY=VALUE`` overrides, ``SIDENOTE_*`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from ..utils.file_io import write_text

__all__ = ["DEFAULT_SIDECAR_SUFFIX", "Settings", "SettingsStore", "parse_bool"]

LOGGER = logging.getLogger(__name__)

DEFAULT_SIDECAR_SUFFIX = ".sidenote"
DEFAULT_SETTINGS_PATH = Path.home() / ".sidenote" / "settings.json"
SETTINGS_VERSION = 1

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def parse_bool(value: Any) -> bool:
    """Interpret ``value`` as a flag; strings must be one of the usual spellings."""

    if not isinstance(value, str):
        return bool(value)
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


@dataclass(slots=True)
class Settings:
    """Options shared by every annotation session."""

    sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX
    banner_tool: str = "sidenote"
    default_show: bool = True
    default_keep: bool = False
    theme: str = "default"
    debug_logging: bool = False
    max_undo_history: int = 50

    def __post_init__(self) -> None:
        self.sidecar_suffix = str(self.sidecar_suffix or DEFAULT_SIDECAR_SUFFIX)
        self.banner_tool = str(self.banner_tool or "").strip() or "sidenote"
        self.default_show = parse_bool(self.default_show)
        self.default_keep = parse_bool(self.default_keep)
        self.debug_logging = parse_bool(self.debug_logging)
        self.max_undo_history = max(1, int(self.max_undo_history))


_ENVIRONMENT: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "SIDENOTE_SIDECAR_SUFFIX": ("sidecar_suffix", str),
    "SIDENOTE_BANNER_TOOL": ("banner_tool", str),
    "SIDENOTE_THEME": ("theme", str),
    "SIDENOTE_DEFAULT_SHOW": ("default_show", parse_bool),
    "SIDENOTE_DEFAULT_KEEP": ("default_keep", parse_bool),
    "SIDENOTE_DEBUG_LOGGING": ("debug_logging", parse_bool),
    "SIDENOTE_MAX_UNDO_HISTORY": ("max_undo_history", lambda raw: int(raw, 10)),
}


class SettingsStore:
    """Reads and writes :class:`Settings` as a versioned JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Return the effective settings for this process."""

        payload = self._read_payload()
        try:
            settings = Settings(**_known_fields(payload))
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Ignoring invalid settings in %s: %s", self._path, exc)
            settings = Settings()
        LOGGER.debug("Settings loaded from %s (version=%s)", self._path, payload.get("version"))

        settings = _merge(settings, overrides or {}, source="command line")
        return _merge(settings, _environment_overrides(), source="environment")

    def save(self, settings: Settings) -> Path:
        payload: Dict[str, Any] = {"version": SETTINGS_VERSION, **asdict(settings)}
        write_text(self._path, json.dumps(payload, indent=2, sort_keys=True))
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return data


def _known_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    names = {field.name for field in fields(Settings)}
    return {key: value for key, value in payload.items() if key in names and value is not None}


def _merge(settings: Settings, overrides: Mapping[str, Any], *, source: str) -> Settings:
    values = _known_fields(overrides)
    if not values:
        return settings
    LOGGER.debug("Applying %s settings overrides: %s", source, sorted(values))
    return replace(settings, **values)


def _environment_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_name, (field_name, parse) in _ENVIRONMENT.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            overrides[field_name] = parse(raw)
        except ValueError:
            LOGGER.warning("Ignoring environment override %s=%r", env_name, raw)
    return overrides

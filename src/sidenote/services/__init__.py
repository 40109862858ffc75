"""Service layer: persisted configuration."""

from .settings import DEFAULT_SIDECAR_SUFFIX, Settings, SettingsStore

__all__ = ["DEFAULT_SIDECAR_SUFFIX", "Settings", "SettingsStore"]

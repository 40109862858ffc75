"""Document-wide annotation mode flags and the save→load viewport hand-off."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class KeepMode(str, Enum):
    """Whether annotated text stays inline after a save."""

    IN = "IN"
    OUT = "OUT"

    @classmethod
    def from_flag(cls, keep: bool) -> "KeepMode":
        return cls.IN if keep else cls.OUT

    @property
    def keep(self) -> bool:
        return self is KeepMode.IN

    @property
    def label(self) -> str:
        return "keep-in" if self is KeepMode.IN else "keep-out"


@dataclass(slots=True, frozen=True)
class ViewportSnapshot:
    """Cursor offset and first visible offset captured right before a save."""

    cursor: int
    scroll_top: int


@dataclass(slots=True)
class ModeState:
    """Per-document flags shared by every annotation in the session."""

    show: bool = True
    keep: bool = False
    viewport_snapshot: ViewportSnapshot | None = None

    @property
    def keep_mode(self) -> KeepMode:
        return KeepMode.from_flag(self.keep)

    @property
    def style(self) -> str:
        """Highlight style applied uniformly to live annotations."""

        if not self.show:
            return "hidden"
        return self.keep_mode.label

    def take_viewport_snapshot(self) -> ViewportSnapshot | None:
        """Return the pending snapshot and clear it so it is consumed once."""

        snapshot = self.viewport_snapshot
        self.viewport_snapshot = None
        return snapshot

    def status_line(self) -> str:
        visibility = "show" if self.show else "hide"
        return f"({visibility}, {self.keep_mode.label})"


__all__ = ["KeepMode", "ModeState", "ViewportSnapshot"]

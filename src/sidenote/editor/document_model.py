"""Plain data describing the buffer held by :class:`~sidenote.editor.EditorWidget`."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..core.ranges import TextRange


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class DocumentMetadata:
    """Where the document lives on disk, if anywhere, and how it is encoded there."""

    path: Optional[Path] = None
    opened_at: datetime = field(default_factory=_now)
    encoding: str = "utf-8"
    bom: bool = False

    @property
    def name(self) -> str:
        """Base name written into sidecar headers; ``untitled`` for unsaved buffers."""

        return self.path.name if self.path is not None else "untitled"


@dataclass(slots=True)
class SelectionRange:
    """Anchor-independent selection; ``end`` doubles as the caret offset."""

    start: int = 0
    end: int = 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    @classmethod
    def from_value(cls, value: Any) -> "SelectionRange":
        if isinstance(value, SelectionRange):
            return cls(value.start, value.end)
        start, end = TextRange.from_value(value)
        return cls(start, end)


@dataclass(slots=True)
class DocumentState:
    """Buffer text plus the modification flag that gates saving."""

    text: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    selection: SelectionRange = field(default_factory=SelectionRange)
    dirty: bool = False
    revision: int = 0

    def update_text(self, new_text: str, *, mark_dirty: bool = True) -> None:
        self.text = new_text
        self.revision += 1
        if mark_dirty:
            self.dirty = True

    def mark_dirty(self) -> None:
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

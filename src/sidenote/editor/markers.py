"""Live range markers that follow document edits.

Every mutation of the editor buffer is reduced to a single :class:`TextChange`
(``position``, ``removed``, ``inserted``) and replayed over all registered
markers in one pass. Offsets are 0-based character positions.

Insertion semantics mirror classic editor overlays: text inserted exactly at a
marker's start lands inside the marker, text inserted exactly at its end lands
outside. Markers created with ``evaporate=True`` detach themselves as soon as an
edit collapses them to zero width.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from ..core.ranges import TextRange

__all__ = ["MarkerArena", "RangeMarker", "TextChange"]

LOGGER = logging.getLogger(__name__)
_MARKER_IDS = itertools.count(1)


@dataclass(slots=True, frozen=True)
class TextChange:
    """Single contiguous edit: ``removed`` chars at ``position`` replaced by ``inserted`` chars."""

    position: int
    removed: int = 0
    inserted: int = 0

    @property
    def delta(self) -> int:
        return self.inserted - self.removed

    @property
    def is_noop(self) -> bool:
        return self.removed == 0 and self.inserted == 0

    @classmethod
    def between(cls, before: str, after: str) -> TextChange:
        """Return the smallest single change turning ``before`` into ``after``."""

        limit = min(len(before), len(after))
        prefix = 0
        while prefix < limit and before[prefix] == after[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < limit - prefix
            and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
        ):
            suffix += 1
        return cls(
            position=prefix,
            removed=len(before) - prefix - suffix,
            inserted=len(after) - prefix - suffix,
        )


def _shift_for_deletion(offset: int, start: int, end: int) -> int:
    if offset <= start:
        return offset
    if offset >= end:
        return offset - (end - start)
    return start


@dataclass(slots=True, eq=False)
class RangeMarker:
    """Position pair bound to live document offsets."""

    start: int
    end: int
    evaporate: bool = True
    marker_id: int = field(default_factory=lambda: next(_MARKER_IDS))
    properties: Dict[str, Any] = field(default_factory=dict)
    _attached: bool = field(default=True, repr=False)

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def range(self) -> TextRange:
        return TextRange(self.start, self.end)

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    def detach(self) -> None:
        self._attached = False

    def apply(self, change: TextChange) -> bool:
        """Shift the marker for ``change``; return ``True`` if it evaporated."""

        if not self._attached or change.is_noop:
            return False
        if change.removed:
            finish = change.position + change.removed
            self.start = _shift_for_deletion(self.start, change.position, finish)
            self.end = _shift_for_deletion(self.end, change.position, finish)
            if self.evaporate and self.is_empty:
                self._attached = False
                return True
        if change.inserted:
            if self.start > change.position:
                self.start += change.inserted
            if self.end > change.position:
                self.end += change.inserted
        return False


class MarkerArena:
    """Owns every live marker of one document buffer."""

    def __init__(self) -> None:
        self._markers: List[RangeMarker] = []

    def __iter__(self) -> Iterator[RangeMarker]:
        return iter(list(self._markers))

    def __len__(self) -> int:
        return len(self._markers)

    def create(self, start: int, end: int, *, evaporate: bool = True) -> RangeMarker:
        bounds = TextRange(start, end)
        marker = RangeMarker(start=bounds.start, end=bounds.end, evaporate=evaporate)
        self._markers.append(marker)
        return marker

    def release(self, marker: RangeMarker) -> None:
        """Detach ``marker`` and stop tracking it. Releasing twice is a no-op."""

        marker.detach()
        try:
            self._markers.remove(marker)
        except ValueError:
            return

    def apply_change(self, change: TextChange) -> List[RangeMarker]:
        """Replay ``change`` over all markers and return the ones that evaporated."""

        if change.is_noop:
            return []
        evaporated: List[RangeMarker] = []
        for marker in self._markers:
            if marker.apply(change):
                evaporated.append(marker)
        if evaporated:
            self._markers = [marker for marker in self._markers if marker.attached]
            LOGGER.debug(
                "%d marker(s) evaporated after change at %d (-%d/+%d)",
                len(evaporated),
                change.position,
                change.removed,
                change.inserted,
            )
        return evaporated

    def detach_all(self) -> None:
        for marker in self._markers:
            marker.detach()
        self._markers.clear()

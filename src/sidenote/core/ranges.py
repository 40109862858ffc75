"""Half-open character spans and their sidecar (1-based) representation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(slots=True, frozen=True)
class TextRange:
    """``[start, end)`` over 0-based character offsets.

    Negative offsets are pinned to ``0`` and inverted bounds are swapped, so a
    range is always well formed once constructed.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        low = max(0, int(self.start))
        high = max(0, int(self.end))
        if high < low:
            low, high = high, low
        object.__setattr__(self, "start", low)
        object.__setattr__(self, "end", high)

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.end == self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def to_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def to_position_length(self) -> tuple[int, int]:
        """Return the 1-based ``(position, length)`` pair written to sidecar files."""

        return (self.start + 1, self.length)

    @classmethod
    def from_position_length(cls, position: int, length: int) -> TextRange:
        if position < 1:
            raise ValueError("Positions are 1-based and must be at least 1")
        if length < 0:
            raise ValueError("Length must not be negative")
        return cls(position - 1, position - 1 + length)

    @classmethod
    def from_value(cls, value: Any) -> TextRange:
        """Coerce a range, ``{"start", "end"}`` mapping, pair or span-like object."""

        if isinstance(value, TextRange):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(value["start"], value["end"])
            except KeyError as exc:
                raise ValueError("Range mappings require 'start' and 'end'") from exc
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if len(value) != 2:
                raise ValueError("Range sequences must have exactly two entries")
            return cls(value[0], value[1])
        if hasattr(value, "start") and hasattr(value, "end"):
            return cls(value.start, value.end)
        raise TypeError(f"Cannot interpret {type(value).__name__} as a text range")


__all__ = ["TextRange"]

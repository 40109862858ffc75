"""Highlight palettes for annotation styles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

ColorTuple = Tuple[int, int, int]


def normalize_color(value: Any) -> ColorTuple:
    """Parse ``#rrggbb`` / ``#rgb`` or an RGB triple; channels are clamped to 0-255."""

    if isinstance(value, str):
        digits = value.strip().removeprefix("#")
        if len(digits) == 3:
            digits = "".join(2 * digit for digit in digits)
        if len(digits) != 6:
            raise ValueError(f"Expected #rgb or #rrggbb, got {value!r}")
        red, green, blue = (int(digits[index : index + 2], 16) for index in (0, 2, 4))
        return (red, green, blue)
    if isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise ValueError(f"Expected three channels, got {value!r}")
        red, green, blue = (max(0, min(255, int(channel))) for channel in value)
        return (red, green, blue)
    raise TypeError(f"Unsupported color value of type {type(value).__name__}")


@dataclass(slots=True, frozen=True)
class Theme:
    """Background colors per annotation style plus the text color drawn over them."""

    name: str
    keep_in: ColorTuple = (255, 244, 197)
    keep_out: ColorTuple = (212, 226, 252)
    foreground: ColorTuple = (33, 37, 41)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name.strip().lower() or "default")
        for attr in ("keep_in", "keep_out", "foreground"):
            object.__setattr__(self, attr, normalize_color(getattr(self, attr)))

    def background_for(self, style: str) -> Optional[ColorTuple]:
        """Return the fill for ``keep-in``/``keep-out``; ``None`` for anything else."""

        return {"keep-in": self.keep_in, "keep-out": self.keep_out}.get(style)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "keep_in": list(self.keep_in),
            "keep_out": list(self.keep_out),
            "foreground": list(self.foreground),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Theme":
        name = payload.get("name")
        if not name:
            raise ValueError("Theme definitions need a 'name'")
        colors = {key: payload[key] for key in ("keep_in", "keep_out", "foreground") if key in payload}
        return cls(name=str(name), **colors)


__all__ = ["ColorTuple", "Theme", "normalize_color"]

"""Error types raised by the annotation layer.

Every error carries a machine-readable ``error_code`` plus structured
``details`` so front-ends can report failures consistently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ErrorCode:
    """Constants for error codes used in failure reports."""

    OVERLAP = "annotation_overlap"
    NOT_FOUND = "annotation_not_found"
    MALFORMED_SIDECAR = "malformed_sidecar"
    SIDECAR_IO = "sidecar_io"


@dataclass
class AnnotationError(Exception):
    """Base exception class for all annotation errors."""

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class OverlapError(AnnotationError):
    """The requested span intersects an existing annotation."""

    error_code: str = field(default=ErrorCode.OVERLAP)
    message: str = field(default="Range overlaps an existing annotation")
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_range(cls, start: int, end: int, conflicts: list[str]) -> "OverlapError":
        return cls(
            message=f"Range [{start}, {end}) overlaps {len(conflicts)} existing annotation(s)",
            details={"start": start, "end": end, "conflicts": list(conflicts)},
        )


@dataclass
class NotFoundError(AnnotationError):
    """An operation referenced an unknown or already-removed annotation."""

    error_code: str = field(default=ErrorCode.NOT_FOUND)
    message: str = field(default="Annotation not found")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class MalformedSidecarError(AnnotationError):
    """The sidecar file could not be parsed or does not fit the document."""

    error_code: str = field(default=ErrorCode.MALFORMED_SIDECAR)
    message: str = field(default="Sidecar file is malformed")
    details: dict[str, Any] = field(default_factory=dict)
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.line is not None:
            result["line"] = self.line
        return result

    def __str__(self) -> str:
        if self.line is None:
            return super().__str__()
        return f"[{self.error_code}] line {self.line}: {self.message}"


@dataclass
class SidecarIOError(AnnotationError):
    """Writing or deleting the sidecar file failed during a save."""

    error_code: str = field(default=ErrorCode.SIDECAR_IO)
    message: str = field(default="Sidecar file could not be written")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "AnnotationError",
    "ErrorCode",
    "MalformedSidecarError",
    "NotFoundError",
    "OverlapError",
    "SidecarIOError",
]

"""Side annotations over live document spans, persisted through a sidecar file."""

from .errors import (
    AnnotationError,
    MalformedSidecarError,
    NotFoundError,
    OverlapError,
    SidecarIOError,
)
from .mode import KeepMode, ModeState, ViewportSnapshot
from .persistence import AnnotationLoader, AnnotationSerializer, LoadResult, SaveResult
from .session import AnnotationSession
from .sidecar import Sidecar, SidecarRecord, parse_sidecar, render_sidecar
from .store import Annotation, AnnotationStore

__all__ = [
    "Annotation",
    "AnnotationError",
    "AnnotationLoader",
    "AnnotationSerializer",
    "AnnotationSession",
    "AnnotationStore",
    "KeepMode",
    "LoadResult",
    "MalformedSidecarError",
    "ModeState",
    "NotFoundError",
    "OverlapError",
    "SaveResult",
    "Sidecar",
    "SidecarIOError",
    "SidecarRecord",
    "ViewportSnapshot",
    "parse_sidecar",
    "render_sidecar",
]

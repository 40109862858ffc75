"""Ordered collection of the annotations attached to one document."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..editor.editor_widget import EditorWidget, Highlight
from ..editor.markers import RangeMarker
from .errors import NotFoundError, OverlapError
from .mode import KeepMode, ModeState
from .overlap import annotation_at, annotations_overlapping

__all__ = ["Annotation", "AnnotationStore"]

LOGGER = logging.getLogger(__name__)


def _generate_annotation_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, eq=False)
class Annotation:
    """One annotated span; owns its live marker."""

    marker: RangeMarker
    style: str
    id: str = field(default_factory=_generate_annotation_id)

    @property
    def start(self) -> int:
        return self.marker.start

    @property
    def end(self) -> int:
        return self.marker.end

    @property
    def length(self) -> int:
        return self.marker.length

    @property
    def live(self) -> bool:
        return self.marker.attached and not self.marker.is_empty

    @property
    def visible(self) -> bool:
        return self.style != "hidden"

    def to_position_length(self) -> tuple[int, int]:
        return self.marker.range().to_position_length()


class AnnotationStore:
    """Insertion-ordered annotations for one editor buffer.

    The store is the only owner of the markers it allocates on the editor and
    keeps the editor's highlight layer in sync with :class:`ModeState`.
    """

    def __init__(self, editor: EditorWidget, mode: ModeState | None = None) -> None:
        self._editor = editor
        self._mode = mode or ModeState()
        self._annotations: List[Annotation] = []

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._annotations))

    def __len__(self) -> int:
        return len(self._annotations)

    def __contains__(self, annotation_id: object) -> bool:
        return any(annotation.id == annotation_id for annotation in self._annotations)

    @property
    def editor(self) -> EditorWidget:
        return self._editor

    @property
    def mode(self) -> ModeState:
        return self._mode

    def annotations(self) -> List[Annotation]:
        """Return the records in store (insertion) order."""

        return list(self._annotations)

    def get(self, annotation_id: str) -> Annotation:
        for annotation in self._annotations:
            if annotation.id == annotation_id:
                return annotation
        raise NotFoundError(
            message=f"No annotation with id {annotation_id!r}",
            details={"annotation_id": annotation_id},
        )

    def content(self, annotation: Annotation) -> str:
        """Return the document text currently covered by ``annotation``."""

        return self._editor.text_in(annotation.start, annotation.end)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def annotation_at(self, pos: int) -> Optional[Annotation]:
        return annotation_at(self._tracked(), pos)

    def annotations_overlapping(self, pos: int, end: int) -> List[Annotation]:
        return annotations_overlapping(self._tracked(), pos, end)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create(self, start: int, end: int) -> str:
        """Annotate ``[start, end)`` and return the new annotation id."""

        length = len(self._editor.text)
        if not 0 <= start < end <= length:
            raise ValueError(
                f"Annotations must cover a non-empty range inside the document, got [{start}, {end})"
            )
        conflicts: List[Annotation] = []
        hit = self.annotation_at(start)
        if hit is not None:
            conflicts.append(hit)
        for annotation in self.annotations_overlapping(start, end):
            if annotation not in conflicts:
                conflicts.append(annotation)
        if conflicts:
            raise OverlapError.for_range(start, end, [annotation.id for annotation in conflicts])

        marker = self._editor.create_marker(start, end, evaporate=True)
        annotation = Annotation(marker=marker, style=self._mode.style)
        self._annotations.append(annotation)
        self._editor.set_modified(True)
        self._sync_highlights()
        LOGGER.debug("Annotation %s created over [%d, %d)", annotation.id, start, end)
        return annotation.id

    def remove(self, annotation_id: str) -> None:
        """Release the marker of ``annotation_id`` and drop the record; text is kept."""

        annotation = self.get(annotation_id)
        self._release(annotation)
        self._editor.set_modified(True)
        self._sync_highlights()
        LOGGER.debug("Annotation %s removed", annotation_id)

    def remove_at(self, pos: int) -> str:
        """Remove the annotation at ``pos`` and return its id."""

        annotation = self.annotation_at(pos)
        if annotation is None:
            raise NotFoundError(
                message=f"No annotation at offset {pos}",
                details={"position": pos},
            )
        self.remove(annotation.id)
        return annotation.id

    def clean_up(self) -> List[Annotation]:
        """Purge detached or zero-width annotations; return survivors sorted by start."""

        survivors: List[Annotation] = []
        purged = 0
        for annotation in list(self._annotations):
            if annotation.live:
                survivors.append(annotation)
                continue
            self._release(annotation)
            purged += 1
        if purged:
            LOGGER.debug("Purged %d degenerate annotation(s)", purged)
            self._sync_highlights()
        return sorted(survivors, key=lambda annotation: annotation.start)

    def clear(self) -> None:
        """Release every marker and empty the store."""

        for annotation in list(self._annotations):
            self._release(annotation)
        self._sync_highlights()

    # ------------------------------------------------------------------
    # Mode propagation
    # ------------------------------------------------------------------
    def set_visible(self, visible: bool) -> None:
        self._mode.show = bool(visible)
        self._restyle()

    def set_keep(self, keep: bool | KeepMode) -> None:
        self._mode.keep = keep.keep if isinstance(keep, KeepMode) else bool(keep)
        self._restyle()
        self._editor.set_modified(True)

    def restyle(self) -> None:
        """Re-apply the current mode styling to every annotation."""

        self._restyle()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _tracked(self) -> List[Annotation]:
        return [annotation for annotation in self._annotations if annotation.marker.attached]

    def _release(self, annotation: Annotation) -> None:
        self._editor.release_marker(annotation.marker)
        self._annotations.remove(annotation)

    def _restyle(self) -> None:
        style = self._mode.style
        for annotation in self._annotations:
            annotation.style = style
        self._sync_highlights()

    def _sync_highlights(self) -> None:
        self._editor.set_highlights(
            [
                Highlight(marker=annotation.marker, style=annotation.style)
                for annotation in self._annotations
                if annotation.visible
            ]
        )

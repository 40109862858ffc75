"""Save and load of annotations through the sidecar file.

Saving drains the store into the sidecar and, in keep-out mode, strips the
annotated text from the document. Loading parses and validates the complete
sidecar before touching the document, then reinserts keep-out content and
rebuilds the store. Both run with undo recording suspended so neither shows up
in the user's undo history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from ..utils.file_io import read_text, remove_file, write_text
from .errors import MalformedSidecarError, SidecarIOError
from .mode import KeepMode, ViewportSnapshot
from .sidecar import Sidecar, SidecarRecord, parse_sidecar, render_sidecar
from .store import AnnotationStore

__all__ = ["AnnotationLoader", "AnnotationSerializer", "LoadResult", "SaveResult"]

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass(slots=True, frozen=True)
class SaveResult:
    """Outcome of a save pass."""

    path: Path
    mode: KeepMode
    records: tuple[SidecarRecord, ...] = ()
    sidecar_removed: bool = False

    @property
    def written(self) -> bool:
        return bool(self.records)


@dataclass(slots=True, frozen=True)
class LoadResult:
    """Outcome of a load pass."""

    path: Path
    mode: KeepMode
    annotation_ids: tuple[str, ...] = ()
    viewport_restored: bool = False


class AnnotationSerializer:
    """Writes the store to the sidecar file right before the document is saved."""

    def __init__(
        self,
        store: AnnotationStore,
        sidecar_path: Path,
        *,
        tool: str = "sidenote",
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._sidecar_path = Path(sidecar_path)
        self._tool = tool
        self._clock = clock or _local_now

    @property
    def sidecar_path(self) -> Path:
        return self._sidecar_path

    def save(self) -> SaveResult:
        store = self._store
        editor = store.editor
        mode = store.mode
        annotations = store.clean_up()
        keep_mode = mode.keep_mode

        if not annotations:
            removed = self._remove_sidecar()
            if removed:
                LOGGER.info("No annotations left; removed %s", self._sidecar_path)
            return SaveResult(path=self._sidecar_path, mode=keep_mode, sidecar_removed=removed)

        cursor, scroll_top = editor.viewport()
        mode.viewport_snapshot = ViewportSnapshot(cursor=cursor, scroll_top=scroll_top)

        with editor.suspend_undo():
            records = tuple(
                SidecarRecord(position=annotation.start + 1, content=store.content(annotation))
                for annotation in annotations
            )
            sidecar = Sidecar(
                document_name=editor.to_document().metadata.name,
                mode=keep_mode,
                records=records,
                timestamp=self._clock(),
                tool=self._tool,
            )
            try:
                write_text(self._sidecar_path, render_sidecar(sidecar), newline=None)
            except OSError as exc:
                mode.viewport_snapshot = None
                LOGGER.error("Failed to write sidecar %s: %s", self._sidecar_path, exc)
                raise SidecarIOError(
                    message=f"Could not write sidecar {self._sidecar_path}: {exc}",
                    details={"path": str(self._sidecar_path)},
                ) from exc

            if keep_mode is KeepMode.OUT:
                for annotation in annotations:
                    editor.delete_range(annotation.start, annotation.end)
            store.clear()

        LOGGER.info(
            "Saved %d annotation(s) to %s (%s)",
            len(records),
            self._sidecar_path,
            keep_mode.label,
        )
        return SaveResult(path=self._sidecar_path, mode=keep_mode, records=records)

    def _remove_sidecar(self) -> bool:
        try:
            return remove_file(self._sidecar_path)
        except OSError as exc:
            LOGGER.error("Failed to remove sidecar %s: %s", self._sidecar_path, exc)
            raise SidecarIOError(
                message=f"Could not remove sidecar {self._sidecar_path}: {exc}",
                details={"path": str(self._sidecar_path)},
            ) from exc


class AnnotationLoader:
    """Rebuilds the store from the sidecar file when the document is opened or saved."""

    def __init__(self, store: AnnotationStore, sidecar_path: Path) -> None:
        self._store = store
        self._sidecar_path = Path(sidecar_path)

    @property
    def sidecar_path(self) -> Path:
        return self._sidecar_path

    def read(self) -> Sidecar | None:
        """Parse the sidecar file without applying it; ``None`` when there is none."""

        if not self._sidecar_path.exists():
            return None
        try:
            text = read_text(self._sidecar_path, encoding="utf-8", normalize_newlines=False)
        except UnicodeDecodeError as exc:
            raise MalformedSidecarError(
                message=f"Sidecar {self._sidecar_path} is not valid UTF-8",
                details={"path": str(self._sidecar_path)},
            ) from exc
        except OSError as exc:
            raise SidecarIOError(
                message=f"Could not read sidecar {self._sidecar_path}: {exc}",
                details={"path": str(self._sidecar_path)},
            ) from exc
        return parse_sidecar(text)

    def load(self) -> LoadResult | None:
        store = self._store
        editor = store.editor
        mode = store.mode

        try:
            sidecar = self.read()
            if sidecar is not None:
                sidecar.check_fits(len(editor.text))
        except MalformedSidecarError as exc:
            mode.viewport_snapshot = None
            LOGGER.error("Refusing to load %s: %s", self._sidecar_path, exc)
            raise
        if sidecar is None:
            mode.viewport_snapshot = None
            return None

        fallback_cursor, fallback_scroll = editor.viewport()
        ids: list[str] = []
        store.clear()
        mode.keep = sidecar.mode.keep
        with editor.suspend_undo():
            for record in sidecar.records:
                span = record.range
                if sidecar.mode is KeepMode.OUT:
                    editor.insert_text(record.content, position=span.start)
                elif editor.text_in(span.start, span.end) != record.content:
                    LOGGER.warning(
                        "Annotation at %d in %s no longer matches the document text",
                        record.position,
                        self._sidecar_path,
                    )
                ids.append(store.create(span.start, span.end))

            snapshot = mode.take_viewport_snapshot()
            if snapshot is not None:
                editor.restore_viewport(snapshot.cursor, snapshot.scroll_top)
            else:
                editor.restore_viewport(fallback_cursor, fallback_scroll)
            store.set_visible(mode.show)
        editor.set_modified(False)

        LOGGER.info(
            "Loaded %d annotation(s) from %s (%s)",
            len(ids),
            self._sidecar_path,
            sidecar.mode.label,
        )
        return LoadResult(
            path=self._sidecar_path,
            mode=sidecar.mode,
            annotation_ids=tuple(ids),
            viewport_restored=snapshot is not None,
        )

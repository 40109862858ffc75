"""Per-document annotation session.

One :class:`AnnotationSession` exists per open document. It owns the mode
flags and the store, translates host events (annotate, un-annotate, toggles,
save, load, close) into store and persistence calls, and reports the
``(show|hide, keep-in|keep-out)`` status line after toggles and loads.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional

from ..editor.document_model import DocumentMetadata, DocumentState
from ..editor.editor_widget import EditorWidget
from ..services.settings import Settings
from ..utils.file_io import read_document, sidecar_path_for, write_text
from .mode import KeepMode, ModeState
from .persistence import AnnotationLoader, AnnotationSerializer, Clock, LoadResult, SaveResult
from .store import Annotation, AnnotationStore

__all__ = ["AnnotationSession", "DocumentWriter", "StatusListener"]

LOGGER = logging.getLogger(__name__)

StatusListener = Callable[[str], None]
DocumentWriter = Callable[[Path, str], object]


def _write_document(path: Path, text: str, *, encoding: str = "utf-8", bom: bool = False) -> object:
    return write_text(path, text, encoding=encoding, newline=None, bom=bom)


class AnnotationSession:
    """Explicit context object for one document's annotations."""

    def __init__(
        self,
        editor: EditorWidget,
        *,
        path: Path | str | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._editor = editor
        self._settings = settings or Settings()
        self._mode = ModeState(show=self._settings.default_show, keep=self._settings.default_keep)
        self._store = AnnotationStore(editor, self._mode)
        self._clock = clock
        self._status_listeners: List[StatusListener] = []
        self._closed = False
        editor.apply_theme(self._settings.theme)
        if path is not None:
            editor.to_document().metadata.path = Path(path)

    @classmethod
    def open(
        cls,
        path: Path | str,
        *,
        settings: Settings | None = None,
        editor: EditorWidget | None = None,
        clock: Clock | None = None,
    ) -> "AnnotationSession":
        """Read ``path`` into an editor and restore its annotations."""

        resolved = Path(path)
        active_settings = settings or Settings()
        widget = editor or EditorWidget(max_history=active_settings.max_undo_history)
        text, encoding, bom = read_document(resolved)
        metadata = DocumentMetadata(path=resolved, encoding=encoding, bom=bom)
        widget.load_document(DocumentState(text=text, metadata=metadata))
        session = cls(widget, path=resolved, settings=active_settings, clock=clock)
        session.load()
        return session

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def editor(self) -> EditorWidget:
        return self._editor

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def mode(self) -> ModeState:
        return self._mode

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def path(self) -> Path | None:
        return self._editor.to_document().metadata.path

    @property
    def sidecar_path(self) -> Path:
        path = self.path
        if path is None:
            raise ValueError("Document has no path; annotations cannot be persisted")
        return sidecar_path_for(path, self._settings.sidecar_suffix)

    @property
    def closed(self) -> bool:
        return self._closed

    def annotations(self) -> List[Annotation]:
        return self._store.annotations()

    def annotation_at(self, pos: int) -> Optional[Annotation]:
        return self._store.annotation_at(pos)

    def content(self, annotation: Annotation) -> str:
        return self._store.content(annotation)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def annotate(self, start: int, end: int) -> str:
        self._ensure_open()
        return self._store.create(start, end)

    def annotate_selection(self) -> str:
        start, end = self._editor.selection_span()
        return self.annotate(start, end)

    def unannotate_at(self, pos: int | None = None) -> str:
        """Remove the annotation under ``pos`` (default: the cursor); the text stays."""

        self._ensure_open()
        target = self._editor.cursor_position() if pos is None else pos
        return self._store.remove_at(target)

    def remove(self, annotation_id: str) -> None:
        self._ensure_open()
        self._store.remove(annotation_id)

    def toggle_show(self) -> str:
        self._ensure_open()
        self._store.set_visible(not self._mode.show)
        return self._emit_status()

    def toggle_keep(self) -> str:
        self._ensure_open()
        self._store.set_keep(not self._mode.keep)
        return self._emit_status()

    def set_keep(self, keep: bool | KeepMode) -> str:
        self._ensure_open()
        self._store.set_keep(keep)
        return self._emit_status()

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------
    def before_save(self) -> SaveResult | None:
        """Run the save pass if the document has unsaved modifications."""

        self._ensure_open()
        if not self._editor.is_modified():
            return None
        return self._serializer().save()

    def after_save(self) -> LoadResult | None:
        return self.load()

    def load(self) -> LoadResult | None:
        self._ensure_open()
        result = self._loader().load()
        if result is not None:
            self._emit_status()
        return result

    def save(self, writer: DocumentWriter | None = None) -> bool:
        """Save the document through ``writer`` wrapped by the save and load passes.

        Returns ``False`` when there was nothing to save.
        """

        self._ensure_open()
        if not self._editor.is_modified():
            return False
        path = self.path
        if path is None:
            raise ValueError("Document has no path; save it with a file name first")
        if writer is None:
            metadata = self._editor.to_document().metadata
            writer = partial(_write_document, encoding=metadata.encoding, bom=metadata.bom)
        self.before_save()
        try:
            writer(path, self._editor.text)
        except Exception:
            LOGGER.error("Writing %s failed; restoring annotations", path)
            self.load()
            self._editor.set_modified(True)
            raise
        self._editor.set_modified(False)
        self.after_save()
        return True

    def close(self) -> None:
        """Save pending changes like any other save trigger, then tear the session down."""

        if self._closed:
            return
        if self.path is not None:
            self.save()
        self._store.clear()
        self._mode.viewport_snapshot = None
        self._status_listeners.clear()
        self._closed = True
        LOGGER.debug("Annotation session for %s closed", self.path)

    # ------------------------------------------------------------------
    # Status reporting
    # ------------------------------------------------------------------
    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def status_line(self) -> str:
        return self._mode.status_line()

    def _emit_status(self) -> str:
        line = self._mode.status_line()
        LOGGER.info("Annotations %s", line)
        for listener in list(self._status_listeners):
            listener(line)
        return line

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _serializer(self) -> AnnotationSerializer:
        return AnnotationSerializer(
            self._store,
            self.sidecar_path,
            tool=self._settings.banner_tool,
            clock=self._clock,
        )

    def _loader(self) -> AnnotationLoader:
        return AnnotationLoader(self._store, self.sidecar_path)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Annotation session is closed")

"""Text buffer with live range markers, undo history and an optional Qt view.

All editing state lives in plain Python so the widget works headless. When
PySide6 is importable and a ``QApplication`` exists, a ``QPlainTextEdit``
mirrors the buffer, forwards user typing back as :class:`TextChange` events
and paints annotation highlights as extra selections.
"""

from __future__ import annotations

import contextlib
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Iterator, Protocol

from ..theme import Theme, load_theme
from .document_model import DocumentState, SelectionRange
from .markers import MarkerArena, RangeMarker, TextChange

try:  # pragma: no cover - PySide6 is optional for headless use
    from PySide6.QtCore import QPoint
    from PySide6.QtGui import QColor, QTextCursor
    from PySide6.QtWidgets import QApplication, QPlainTextEdit, QTextEdit
except ImportError:  # pragma: no cover - PySide6 or its system libraries missing
    QPoint = QColor = QTextCursor = None  # type: ignore[assignment,misc]
    QApplication = QPlainTextEdit = QTextEdit = None  # type: ignore[assignment,misc]


class TextChangeListener(Protocol):
    def __call__(self, change: TextChange, state: DocumentState) -> None:
        ...


class SelectionListener(Protocol):
    def __call__(self, selection: SelectionRange, line: int, column: int) -> None:
        ...


@dataclass(slots=True, frozen=True)
class Highlight:
    """Style key painted over a live marker."""

    marker: RangeMarker
    style: str


class EditorWidget:
    """Owns one document buffer and every marker attached to it."""

    MAX_HISTORY = 50

    def __init__(
        self,
        parent: Any | None = None,
        *,
        theme: Theme | str | None = None,
        max_history: int | None = None,
    ) -> None:
        self._state = DocumentState()
        self._selection = SelectionRange()
        self._first_visible = 0
        self._theme = load_theme(theme)
        self._markers = MarkerArena()
        self._highlights: list[Highlight] = []
        history = max_history if max_history is not None else self.MAX_HISTORY
        self._undo: Deque[str] = deque(maxlen=max(1, history))
        self._redo: list[str] = []
        self._recording = True
        self._text_listeners: list[TextChangeListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._syncing_view = False
        self._view: Any = None
        if QApplication is not None and QApplication.instance() is not None:  # pragma: no cover - requires Qt
            self._attach_view(parent)

    @property
    def qt_widget(self) -> Any | None:
        """The backing ``QPlainTextEdit``, or ``None`` when headless."""

        return self._view

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------
    def load_document(self, document: DocumentState) -> None:
        """Replace the buffer wholesale; markers, highlights and history are dropped."""

        self._markers.detach_all()
        self._highlights = []
        self._undo.clear()
        self._redo.clear()
        self._state = document
        self._first_visible = 0
        self._push_to_view()
        self._select(SelectionRange())

    def to_document(self) -> DocumentState:
        self._state.selection = SelectionRange(self._selection.start, self._selection.end)
        return self._state

    @property
    def text(self) -> str:
        return self._state.text

    def text_in(self, start: int, end: int) -> str:
        begin, finish = self._bounded(start, end)
        return self._state.text[begin:finish]

    def is_modified(self) -> bool:
        return self._state.dirty

    def set_modified(self, modified: bool) -> None:
        if modified:
            self._state.mark_dirty()
        else:
            self._state.mark_clean()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def insert_text(self, text: str, position: int | None = None) -> None:
        """Insert at ``position`` (default: selection start); the caret ends after it."""

        if not text:
            return
        at = self._selection.start if position is None else position
        at, _ = self._bounded(at, at)
        self._apply(TextChange(position=at, inserted=len(text)), text)
        self._select(SelectionRange(at + len(text), at + len(text)))

    def delete_range(self, start: int, end: int) -> str:
        """Delete ``[start, end)`` and return what was removed."""

        begin, finish = self._bounded(start, end)
        if begin == finish:
            return ""
        removed = self._state.text[begin:finish]
        caret = self._selection.end
        self._apply(TextChange(position=begin, removed=finish - begin), "")
        if caret >= finish:
            caret -= finish - begin
        elif caret > begin:
            caret = begin
        self._select(SelectionRange(caret, caret))
        return removed

    def replace_range(self, start: int, end: int, replacement: str) -> None:
        """Replace ``[start, end)``; the replacement ends up selected."""

        begin, finish = self._bounded(start, end)
        change = TextChange(position=begin, removed=finish - begin, inserted=len(replacement))
        if change.is_noop:
            return
        self._apply(change, replacement)
        self._select(SelectionRange(begin, begin + len(replacement)))

    # ------------------------------------------------------------------
    # Markers and highlights
    # ------------------------------------------------------------------
    @property
    def markers(self) -> MarkerArena:
        return self._markers

    def create_marker(self, start: int, end: int, *, evaporate: bool = True) -> RangeMarker:
        begin, finish = self._bounded(start, end)
        return self._markers.create(begin, finish, evaporate=evaporate)

    def release_marker(self, marker: RangeMarker) -> None:
        self._markers.release(marker)
        self._highlights = [item for item in self._highlights if item.marker is not marker]
        self._paint()

    def set_highlights(self, highlights: list[Highlight]) -> None:
        self._highlights = list(highlights)
        self._paint()

    def highlight_spans(self) -> tuple[tuple[int, int, str], ...]:
        """``(start, end, style)`` for every highlight whose marker is still live."""

        return tuple(
            (item.marker.start, item.marker.end, item.style)
            for item in self._highlights
            if item.marker.attached and not item.marker.is_empty
        )

    @property
    def theme(self) -> Theme:
        return self._theme

    def apply_theme(self, theme: Theme | str | None) -> Theme:
        self._theme = load_theme(theme)
        self._paint()
        return self._theme

    # ------------------------------------------------------------------
    # Undo history
    # ------------------------------------------------------------------
    @property
    def undo_enabled(self) -> bool:
        return self._recording

    def set_undo_enabled(self, enabled: bool) -> None:
        self._recording = bool(enabled)

    @contextlib.contextmanager
    def suspend_undo(self) -> Iterator[None]:
        """Edits inside the block leave no undo entries; the previous setting is restored on exit."""

        previous = self._recording
        self._recording = False
        try:
            yield
        finally:
            self._recording = previous

    def can_undo(self) -> bool:
        return bool(self._undo)

    def undo(self) -> None:
        if self._undo:
            self._redo.append(self._state.text)
            self._restore(self._undo.pop())

    def redo(self) -> None:
        if self._redo:
            self._undo.append(self._state.text)
            self._restore(self._redo.pop())

    # ------------------------------------------------------------------
    # Selection and viewport
    # ------------------------------------------------------------------
    def cursor_position(self) -> int:
        return self._selection.end

    def set_cursor(self, position: int) -> None:
        caret, _ = self._bounded(position, position)
        self._select(SelectionRange(caret, caret))

    def selection_span(self) -> tuple[int, int]:
        return self._selection.as_tuple()

    def set_selection(self, selection: Any) -> None:
        """Select a :class:`SelectionRange`, ``(start, end)`` pair or ``{"start", "end"}`` mapping."""

        requested = SelectionRange.from_value(selection)
        self._select(SelectionRange(*self._bounded(requested.start, requested.end)))

    def scroll_top(self) -> int:
        """Offset of the first visible character."""

        if self._view is not None:  # pragma: no cover - requires Qt
            return int(self._view.cursorForPosition(QPoint(0, 0)).position())
        return self._first_visible

    def set_scroll_top(self, offset: int) -> None:
        self._first_visible, _ = self._bounded(offset, offset)
        if self._view is not None:  # pragma: no cover - requires Qt
            block = self._view.document().findBlock(self._first_visible)
            self._view.verticalScrollBar().setValue(block.blockNumber())

    def viewport(self) -> tuple[int, int]:
        """``(cursor, scroll_top)``"""

        return (self.cursor_position(), self.scroll_top())

    def restore_viewport(self, cursor: int, scroll_top: int) -> None:
        self.set_cursor(cursor)
        self.set_scroll_top(scroll_top)

    def add_text_listener(self, listener: TextChangeListener) -> None:
        self._text_listeners.append(listener)

    def add_selection_listener(self, listener: SelectionListener) -> None:
        self._selection_listeners.append(listener)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _apply(self, change: TextChange, inserted: str) -> None:
        text = self._state.text
        if self._recording:
            self._undo.append(text)
            self._redo.clear()
        tail = change.position + change.removed
        self._state.update_text(text[: change.position] + inserted + text[tail:])
        self._after_change(change)

    def _restore(self, text: str) -> None:
        change = TextChange.between(self._state.text, text)
        self._state.update_text(text)
        self._after_change(change)
        self.set_cursor(len(text))

    def _after_change(self, change: TextChange) -> None:
        self._markers.apply_change(change)
        self._push_to_view()
        for listener in list(self._text_listeners):
            listener(change, self._state)

    def _select(self, selection: SelectionRange) -> None:
        self._selection = selection
        if self._view is not None:  # pragma: no cover - requires Qt
            cursor = self._view.textCursor()
            cursor.setPosition(selection.start)
            cursor.setPosition(selection.end, QTextCursor.KeepAnchor)
            self._view.setTextCursor(cursor)
        if self._selection_listeners:
            line, column = self._line_column(selection.end)
            for listener in list(self._selection_listeners):
                listener(SelectionRange(selection.start, selection.end), line, column)

    def _bounded(self, start: int, end: int) -> tuple[int, int]:
        size = len(self._state.text)
        low, high = sorted((max(0, min(int(start), size)), max(0, min(int(end), size))))
        return low, high

    def _line_column(self, offset: int) -> tuple[int, int]:
        text = self._state.text
        line_start = text.rfind("\n", 0, offset) + 1
        return (text.count("\n", 0, offset) + 1, offset - line_start + 1)

    # Qt view ----------------------------------------------------------
    def _attach_view(self, parent: Any | None) -> None:  # pragma: no cover - requires Qt
        self._view = QPlainTextEdit(parent)
        self._view.document().contentsChange.connect(self._on_view_edited)
        self._view.cursorPositionChanged.connect(self._on_view_cursor_moved)

    def _push_to_view(self) -> None:
        if self._view is None:
            return
        self._syncing_view = True  # pragma: no cover - requires Qt
        try:
            self._view.blockSignals(True)
            self._view.setPlainText(self._state.text)
        finally:
            self._view.blockSignals(False)
            self._syncing_view = False
        self._paint()

    def _on_view_edited(self, position: int, removed: int, added: int) -> None:  # pragma: no cover - requires Qt
        if self._syncing_view:
            return
        change = TextChange(position=position, removed=removed, inserted=added)
        if self._recording:
            self._undo.append(self._state.text)
            self._redo.clear()
        self._state.update_text(self._view.toPlainText())
        self._markers.apply_change(change)
        for listener in list(self._text_listeners):
            listener(change, self._state)
        self._paint()

    def _on_view_cursor_moved(self) -> None:  # pragma: no cover - requires Qt
        cursor = self._view.textCursor()
        self._selection = SelectionRange(cursor.selectionStart(), cursor.selectionEnd())

    def _paint(self) -> None:
        if self._view is None:
            return
        extra = []  # pragma: no cover - requires Qt
        for start, end, style in self.highlight_spans():
            background = self._theme.background_for(style)
            if background is None:
                continue
            selection = QTextEdit.ExtraSelection()
            cursor = self._view.textCursor()
            cursor.setPosition(start)
            cursor.setPosition(end, QTextCursor.KeepAnchor)
            selection.cursor = cursor
            selection.format.setBackground(QColor(*background))
            selection.format.setForeground(QColor(*self._theme.foreground))
            extra.append(selection)
        self._view.setExtraSelections(extra)


__all__ = ["EditorWidget", "Highlight", "SelectionListener", "TextChangeListener"]

"""Tests for the annotation store."""

from __future__ import annotations

import pytest

from sidenote.annotations import (
    AnnotationStore,
    KeepMode,
    ModeState,
    NotFoundError,
    OverlapError,
)
from sidenote.editor.document_model import DocumentState
from sidenote.editor.editor_widget import EditorWidget


def _store(text: str, *, mode: ModeState | None = None) -> AnnotationStore:
    widget = EditorWidget()
    widget.load_document(DocumentState(text=text))
    return AnnotationStore(widget, mode)


def test_create_tracks_span_and_marks_document_dirty() -> None:
    store = _store("The quick fox")

    annotation_id = store.create(4, 10)

    annotation = store.get(annotation_id)
    assert (annotation.start, annotation.end) == (4, 10)
    assert store.content(annotation) == "quick "
    assert annotation.style == "keep-out"
    assert annotation_id in store
    assert store.editor.is_modified()


def test_create_returns_distinct_ids() -> None:
    store = _store("alpha beta gamma")

    first = store.create(0, 5)
    second = store.create(6, 10)

    assert first != second
    assert [annotation.id for annotation in store] == [first, second]


@pytest.mark.parametrize("span", [(2, 8), (5, 7), (9, 12), (0, 20), (4, 10)])
def test_create_rejects_overlapping_spans(span: tuple[int, int]) -> None:
    store = _store("The quick fox jumps over")
    existing = store.create(4, 10)

    with pytest.raises(OverlapError) as excinfo:
        store.create(*span)

    assert excinfo.value.details["conflicts"] == [existing]
    assert len(store) == 1


def test_create_allows_spans_touching_at_a_boundary() -> None:
    store = _store("The quick fox jumps over")
    store.create(4, 10)

    store.create(0, 4)
    store.create(10, 13)

    assert len(store) == 3


@pytest.mark.parametrize("span", [(3, 3), (5, 2), (-1, 2), (0, 99)])
def test_create_rejects_empty_or_out_of_bounds_ranges(span: tuple[int, int]) -> None:
    store = _store("short text")

    with pytest.raises(ValueError):
        store.create(*span)


def test_annotation_follows_edits_before_it() -> None:
    store = _store("The quick fox")
    annotation = store.get(store.create(4, 9))

    store.editor.insert_text("very ", position=0)

    assert (annotation.start, annotation.end) == (9, 14)
    assert store.content(annotation) == "quick"


def test_annotation_at_returns_first_in_store_order() -> None:
    store = _store("abcdefghij")
    first = store.create(2, 4)

    assert store.annotation_at(3).id == first
    assert store.annotation_at(4) is None
    assert store.annotation_at(0) is None


def test_remove_keeps_text_and_drops_highlight() -> None:
    store = _store("The quick fox")
    annotation_id = store.create(4, 10)
    store.editor.set_modified(False)

    store.remove(annotation_id)

    assert len(store) == 0
    assert store.editor.text == "The quick fox"
    assert store.editor.highlight_spans() == ()
    assert store.editor.is_modified()


def test_remove_unknown_id_raises_not_found() -> None:
    store = _store("text")

    with pytest.raises(NotFoundError) as excinfo:
        store.remove("missing")

    assert excinfo.value.to_dict()["error"] == "annotation_not_found"


def test_remove_at_returns_removed_id_and_raises_when_empty() -> None:
    store = _store("The quick fox")
    annotation_id = store.create(4, 10)

    assert store.remove_at(6) == annotation_id
    with pytest.raises(NotFoundError):
        store.remove_at(6)


def test_clean_up_purges_evaporated_annotations_and_sorts() -> None:
    store = _store("one two three four")
    late = store.create(14, 18)
    doomed = store.create(4, 7)
    early = store.create(0, 3)

    store.editor.delete_range(4, 8)

    survivors = store.clean_up()
    assert [annotation.id for annotation in survivors] == [early, late]
    assert doomed not in store
    assert len(store.editor.markers) == 2


def test_evaporated_annotation_is_invisible_to_queries() -> None:
    store = _store("one two three")
    store.create(4, 7)

    store.editor.delete_range(4, 7)

    assert store.annotation_at(4) is None
    store.create(4, 9)


def test_mode_changes_restyle_every_annotation() -> None:
    mode = ModeState()
    store = _store("alpha beta gamma", mode=mode)
    store.create(0, 5)
    store.create(6, 10)

    store.set_keep(KeepMode.IN)
    assert {annotation.style for annotation in store} == {"keep-in"}
    assert {style for _, _, style in store.editor.highlight_spans()} == {"keep-in"}

    store.set_visible(False)
    assert {annotation.style for annotation in store} == {"hidden"}
    assert store.editor.highlight_spans() == ()

    store.set_visible(True)
    store.set_keep(False)
    assert {annotation.style for annotation in store} == {"keep-out"}
    assert len(store.editor.highlight_spans()) == 2


def test_set_keep_marks_document_dirty() -> None:
    store = _store("alpha")
    store.editor.set_modified(False)

    store.set_keep(True)

    assert store.mode.keep is True
    assert store.editor.is_modified()


def test_clear_releases_all_markers() -> None:
    store = _store("alpha beta")
    store.create(0, 5)
    store.create(6, 10)

    store.clear()

    assert len(store) == 0
    assert len(store.editor.markers) == 0
    assert store.editor.highlight_spans() == ()

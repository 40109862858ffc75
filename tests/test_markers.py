"""Tests for live range markers and edit replay."""

from __future__ import annotations

import pytest

from sidenote.editor.markers import MarkerArena, RangeMarker, TextChange


def _marker(start: int, end: int, *, evaporate: bool = True) -> RangeMarker:
    return RangeMarker(start=start, end=end, evaporate=evaporate)


def test_insertion_before_marker_shifts_both_bounds() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=2, inserted=3))

    assert (marker.start, marker.end) == (8, 13)


def test_insertion_after_marker_leaves_it_untouched() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=12, inserted=4))

    assert (marker.start, marker.end) == (5, 10)


def test_insertion_at_start_lands_inside_marker() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=5, inserted=2))

    assert (marker.start, marker.end) == (5, 12)


def test_insertion_at_end_lands_outside_marker() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=10, inserted=2))

    assert (marker.start, marker.end) == (5, 10)


def test_insertion_inside_marker_grows_it() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=7, inserted=3))

    assert (marker.start, marker.end) == (5, 13)


def test_deletion_before_marker_shifts_it_back() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=0, removed=3))

    assert (marker.start, marker.end) == (2, 7)


def test_deletion_straddling_start_clips_marker() -> None:
    marker = _marker(5, 10)

    marker.apply(TextChange(position=3, removed=4))

    assert (marker.start, marker.end) == (3, 6)


def test_deletion_inside_marker_shrinks_it() -> None:
    marker = _marker(5, 10)

    evaporated = marker.apply(TextChange(position=6, removed=2))

    assert not evaporated
    assert (marker.start, marker.end) == (5, 8)


def test_deleting_all_marked_text_evaporates_marker() -> None:
    marker = _marker(5, 10)

    evaporated = marker.apply(TextChange(position=4, removed=8))

    assert evaporated
    assert not marker.attached
    assert marker.is_empty


def test_non_evaporating_marker_survives_as_caret() -> None:
    marker = _marker(5, 10, evaporate=False)

    evaporated = marker.apply(TextChange(position=5, removed=5))

    assert not evaporated
    assert marker.attached
    assert (marker.start, marker.end) == (5, 5)


def test_replacement_covering_marker_evaporates_before_insertion() -> None:
    marker = _marker(5, 10)

    evaporated = marker.apply(TextChange(position=5, removed=5, inserted=3))

    assert evaporated
    assert not marker.attached


def test_detached_marker_ignores_changes() -> None:
    marker = _marker(5, 10)
    marker.detach()

    marker.apply(TextChange(position=0, inserted=4))

    assert (marker.start, marker.end) == (5, 10)


def test_marker_contains_is_half_open() -> None:
    marker = _marker(2, 4)

    assert marker.contains(2)
    assert marker.contains(3)
    assert not marker.contains(4)
    assert marker.range().to_tuple() == (2, 4)


@pytest.mark.parametrize(
    "before, after, expected",
    [
        ("hello world", "hello brave world", TextChange(position=6, removed=0, inserted=6)),
        ("hello world", "hello", TextChange(position=5, removed=6, inserted=0)),
        ("abcdef", "abXYef", TextChange(position=2, removed=2, inserted=2)),
        ("same", "same", TextChange(position=4, removed=0, inserted=0)),
        ("aaa", "aaaa", TextChange(position=3, removed=0, inserted=1)),
    ],
)
def test_text_change_between_finds_minimal_edit(before: str, after: str, expected: TextChange) -> None:
    change = TextChange.between(before, after)

    assert change == expected
    assert change.delta == len(after) - len(before)


def test_arena_reports_and_drops_evaporated_markers() -> None:
    arena = MarkerArena()
    keep = arena.create(0, 3)
    doomed = arena.create(5, 8)

    evaporated = arena.apply_change(TextChange(position=4, removed=5))

    assert evaporated == [doomed]
    assert list(arena) == [keep]
    assert len(arena) == 1


def test_arena_create_orders_bounds_and_release_is_idempotent() -> None:
    arena = MarkerArena()
    marker = arena.create(9, 4)

    assert (marker.start, marker.end) == (4, 9)

    arena.release(marker)
    arena.release(marker)

    assert not marker.attached
    assert len(arena) == 0


def test_arena_detach_all_detaches_every_marker() -> None:
    arena = MarkerArena()
    markers = [arena.create(0, 1), arena.create(2, 3)]

    arena.detach_all()

    assert len(arena) == 0
    assert all(not marker.attached for marker in markers)

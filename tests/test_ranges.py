"""Tests for the TextRange helper."""

from __future__ import annotations

import pytest

from sidenote.core.ranges import TextRange


def test_text_range_normalizes_inverted_and_negative_bounds() -> None:
    assert TextRange(8, 3).to_tuple() == (3, 8)
    assert TextRange(-4, 2).to_tuple() == (0, 2)


def test_text_range_unpacks_and_measures() -> None:
    span = TextRange(4, 10)

    start, end = span
    assert (start, end) == (4, 10)
    assert span.length == 6
    assert span.contains(4) and not span.contains(10)
    assert TextRange(5, 5).is_empty


def test_text_range_position_length_uses_one_based_positions() -> None:
    span = TextRange(4, 10)

    assert span.to_position_length() == (5, 6)
    assert TextRange.from_position_length(5, 6) == span


@pytest.mark.parametrize("position, length", [(0, 3), (1, -1)])
def test_from_position_length_rejects_invalid_values(position: int, length: int) -> None:
    with pytest.raises(ValueError):
        TextRange.from_position_length(position, length)


def test_from_value_accepts_mappings_sequences_and_objects() -> None:
    class _Span:
        start = 3
        end = 7

    assert TextRange.from_value({"start": 1, "end": 2}).to_tuple() == (1, 2)
    assert TextRange.from_value([4, 9]).to_tuple() == (4, 9)
    assert TextRange.from_value(_Span()).to_tuple() == (3, 7)


def test_from_value_rejects_unsupported_input() -> None:
    with pytest.raises(ValueError):
        TextRange.from_value({"start": 1})
    with pytest.raises(ValueError):
        TextRange.from_value([1, 2, 3])
    with pytest.raises(TypeError):
        TextRange.from_value("0:5")

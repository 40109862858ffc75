"""Tests for the annotation error types."""

from __future__ import annotations

import pytest

from sidenote.annotations.errors import (
    AnnotationError,
    ErrorCode,
    MalformedSidecarError,
    NotFoundError,
    OverlapError,
    SidecarIOError,
)


@pytest.mark.parametrize(
    "error_cls, code",
    [
        (OverlapError, ErrorCode.OVERLAP),
        (NotFoundError, ErrorCode.NOT_FOUND),
        (MalformedSidecarError, ErrorCode.MALFORMED_SIDECAR),
        (SidecarIOError, ErrorCode.SIDECAR_IO),
    ],
)
def test_error_defaults(error_cls: type[AnnotationError], code: str) -> None:
    error = error_cls()

    assert isinstance(error, AnnotationError)
    assert isinstance(error, Exception)
    assert error.error_code == code
    assert str(error) == f"[{code}] {error.message}"


def test_overlap_error_for_range_lists_conflicts() -> None:
    error = OverlapError.for_range(2, 8, ["abc"])

    assert error.to_dict() == {
        "error": "annotation_overlap",
        "message": "Range [2, 8) overlaps 1 existing annotation(s)",
        "details": {"start": 2, "end": 8, "conflicts": ["abc"]},
    }


def test_malformed_error_reports_line() -> None:
    error = MalformedSidecarError(message="Truncated file", line=7)

    assert str(error) == "[malformed_sidecar] line 7: Truncated file"
    assert error.to_dict()["line"] == 7
    assert "details" not in error.to_dict()


def test_errors_can_be_raised_and_caught_as_base() -> None:
    with pytest.raises(AnnotationError) as excinfo:
        raise NotFoundError(message="gone", details={"annotation_id": "x"})

    assert excinfo.value.details == {"annotation_id": "x"}
    assert excinfo.value.args == ("gone",)

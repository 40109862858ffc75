"""Position and range queries over a collection of annotations.

Both queries walk the annotations in the order they are given (store order)
and never sort, so ``annotation_at`` returns the first match in that order even
when a nearer or smaller span also contains the position.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, TypeVar


class _Span(Protocol):
    @property
    def start(self) -> int: ...

    @property
    def end(self) -> int: ...


SpanT = TypeVar("SpanT", bound=_Span)


def annotation_at(annotations: Iterable[SpanT], pos: int) -> Optional[SpanT]:
    """Return the first annotation with ``start <= pos < end``."""

    for annotation in annotations:
        if annotation.start <= pos < annotation.end:
            return annotation
    return None


def overlaps(start: int, end: int, pos: int, query_end: int) -> bool:
    """Three-clause intersection test of ``[start, end)`` against the query ``[pos, query_end)``.

    The clauses are, in order: the existing span starts inside the query; the
    existing span ends inside the query, after the query start; the query lies
    strictly inside the existing span. Spans that only touch at a boundary do
    not overlap.
    """

    return (
        (pos <= start and start < query_end)
        or (pos < end and end <= query_end)
        or (start < pos and query_end < end)
    )


def annotations_overlapping(annotations: Iterable[SpanT], pos: int, end: int) -> List[SpanT]:
    """Return every annotation intersecting ``[pos, end)``, in the given order."""

    return [
        annotation
        for annotation in annotations
        if overlaps(annotation.start, annotation.end, pos, end)
    ]


__all__ = ["annotation_at", "annotations_overlapping", "overlaps"]

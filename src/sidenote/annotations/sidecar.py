"""Reader and writer for the annotation sidecar file.

Layout::

    generated by <tool>. DO NOT EDIT.
    <document base name>
    <YYYY-MM-DD HH:MM:SS>
    IN|OUT
    <position>,<length>
    <exactly length characters>
    ...

Positions are 1-based character offsets. Content is never escaped; the reader
relies on the declared length, so content may contain newlines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ranges import TextRange
from .errors import MalformedSidecarError
from .mode import KeepMode

__all__ = [
    "Sidecar",
    "SidecarRecord",
    "TIMESTAMP_FORMAT",
    "banner_for",
    "parse_sidecar",
    "render_sidecar",
]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_BANNER_RE = re.compile(r"generated by (?P<tool>.+)\. DO NOT EDIT\.")
_RECORD_RE = re.compile(r"(?P<position>\d+),(?P<length>\d+)")


def banner_for(tool: str) -> str:
    return f"generated by {tool}. DO NOT EDIT."


@dataclass(slots=True, frozen=True)
class SidecarRecord:
    """One annotated span: 1-based ``position`` plus its verbatim ``content``."""

    position: int
    content: str

    @property
    def length(self) -> int:
        return len(self.content)

    @property
    def range(self) -> TextRange:
        return TextRange.from_position_length(self.position, self.length)


@dataclass(slots=True)
class Sidecar:
    """Parsed representation of a sidecar file."""

    document_name: str
    mode: KeepMode
    records: tuple[SidecarRecord, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now().replace(microsecond=0))
    tool: str = "sidenote"

    def check_fits(self, document_length: int) -> None:
        """Ensure the records can be applied to a document of ``document_length`` chars.

        Records must be ascending and disjoint. In ``IN`` mode every span must
        already lie inside the document; in ``OUT`` mode every position must be
        reachable once the preceding records have been reinserted.
        """

        previous_end = 0
        available = document_length
        for index, record in enumerate(self.records, start=1):
            span = record.range
            if span.length == 0:
                raise MalformedSidecarError(
                    message=f"Record {index} at position {record.position} is empty",
                    details={"record": index},
                )
            if span.start < previous_end:
                raise MalformedSidecarError(
                    message=f"Record {index} at position {record.position} is out of order or overlaps",
                    details={"record": index, "position": record.position},
                )
            if self.mode is KeepMode.OUT:
                if span.start > available:
                    raise MalformedSidecarError(
                        message=f"Record {index} position {record.position} is past the end of the document",
                        details={"record": index, "position": record.position, "available": available},
                    )
                available += span.length
            elif span.end > document_length:
                raise MalformedSidecarError(
                    message=f"Record {index} [{record.position}, +{record.length}) exceeds the document",
                    details={"record": index, "position": record.position, "length": document_length},
                )
            previous_end = span.end


def render_sidecar(sidecar: Sidecar) -> str:
    """Serialize ``sidecar`` to the on-disk text layout."""

    parts = [
        banner_for(sidecar.tool),
        "\n",
        sidecar.document_name,
        "\n",
        sidecar.timestamp.strftime(TIMESTAMP_FORMAT),
        "\n",
        sidecar.mode.value,
        "\n",
    ]
    for record in sidecar.records:
        parts.append(f"{record.position},{record.length}\n")
        parts.append(record.content)
        parts.append("\n")
    return "".join(parts)


class _Reader:
    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0
        self.line = 1

    @property
    def exhausted(self) -> bool:
        return self._offset >= len(self._text)

    def read_line(self, what: str) -> str:
        newline = self._text.find("\n", self._offset)
        if newline == -1:
            raise MalformedSidecarError(message=f"Truncated file: missing {what}", line=self.line)
        value = self._text[self._offset : newline]
        self._offset = newline + 1
        self.line += 1
        return value

    def read_exact(self, length: int, what: str) -> str:
        finish = self._offset + length
        if finish > len(self._text):
            raise MalformedSidecarError(
                message=(
                    f"Truncated {what}: declared {length} characters, "
                    f"{len(self._text) - self._offset} remaining"
                ),
                line=self.line,
            )
        value = self._text[self._offset : finish]
        self._offset = finish
        self.line += value.count("\n")
        return value


def parse_sidecar(text: str) -> Sidecar:
    """Parse sidecar ``text``; raise :class:`MalformedSidecarError` on any defect."""

    reader = _Reader(text)
    banner = reader.read_line("banner")
    match = _BANNER_RE.fullmatch(banner)
    if match is None:
        raise MalformedSidecarError(message=f"Unexpected banner {banner!r}", line=1)
    document_name = reader.read_line("document name")
    raw_timestamp = reader.read_line("timestamp")
    try:
        timestamp = datetime.strptime(raw_timestamp, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise MalformedSidecarError(message=f"Invalid timestamp {raw_timestamp!r}", line=3) from exc
    raw_mode = reader.read_line("mode")
    try:
        mode = KeepMode(raw_mode)
    except ValueError as exc:
        raise MalformedSidecarError(message=f"Invalid mode line {raw_mode!r}", line=4) from exc

    records: list[SidecarRecord] = []
    while not reader.exhausted:
        header_line = reader.line
        header = reader.read_line("record header")
        record_match = _RECORD_RE.fullmatch(header)
        if record_match is None:
            raise MalformedSidecarError(message=f"Invalid record header {header!r}", line=header_line)
        position = int(record_match.group("position"))
        length = int(record_match.group("length"))
        if position < 1:
            raise MalformedSidecarError(message="Positions are 1-based", line=header_line)
        content = reader.read_exact(length, "record content")
        separator = reader.read_exact(1, "record separator")
        if separator != "\n":
            raise MalformedSidecarError(
                message=f"Record content longer than declared length {length}",
                line=header_line,
            )
        records.append(SidecarRecord(position=position, content=content))

    return Sidecar(
        document_name=document_name,
        mode=mode,
        records=tuple(records),
        timestamp=timestamp,
        tool=match.group("tool"),
    )


"""File helpers for documents and their sidecar files.

Writes go through a temporary file in the target directory followed by
``os.replace`` so a crash never leaves a half-written document or sidecar.
"""

from __future__ import annotations

import codecs
import locale
import os
import tempfile
from pathlib import Path

__all__ = [
    "detect_encoding",
    "read_document",
    "read_text",
    "write_text",
    "remove_file",
    "sidecar_path_for",
]

_BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)
_NEWLINES = {"\n", "\r\n", "\r"}


def read_text(
    path: Path | str,
    *,
    encoding: str | None = None,
    errors: str = "strict",
    normalize_newlines: bool = True,
) -> str:
    """Decode ``path``, sniffing the encoding from its BOM when none is given.

    A leading BOM never reaches the caller. With ``normalize_newlines=False``
    the text is returned exactly as stored, which is what offset-based
    consumers such as the annotation loader need.
    """

    raw = Path(path).read_bytes()
    text = raw.decode(encoding or detect_encoding(raw)[0], errors=errors)
    if text.startswith("\ufeff"):
        text = text[1:]
    if normalize_newlines and "\r" in text:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text


def read_document(path: Path | str) -> tuple[str, str, bool]:
    """Read a document verbatim and report how it was encoded.

    Returns ``(text, encoding, has_bom)``; passing the last two back to
    :func:`write_text` reproduces the original bytes for unchanged text.
    """

    raw = Path(path).read_bytes()
    encoding, has_bom = detect_encoding(raw)
    text = raw.decode(encoding)
    if has_bom:
        text = text[1:]
    return text, encoding, has_bom


def write_text(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
    newline: str | None = "\n",
    bom: bool = False,
    atomic: bool = True,
) -> Path:
    """Write ``content`` to ``path``.

    ``newline=None`` writes the characters untouched; otherwise every line
    ending is rewritten to ``newline``. ``bom=True`` prefixes the byte order
    mark of ``encoding``.
    """

    if newline is not None:
        if newline not in _NEWLINES:
            raise ValueError(f"Unsupported newline policy: {newline!r}")
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        if newline != "\n":
            content = content.replace("\n", newline)
    if bom:
        content = "\ufeff" + content

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if atomic:
        _replace_atomically(target, content, encoding)
    else:
        with target.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)
    return target


def remove_file(path: Path | str) -> bool:
    """Delete ``path``; ``False`` when it did not exist."""

    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    return True


def sidecar_path_for(document_path: Path | str, suffix: str) -> Path:
    """Return ``<document path><suffix>``, e.g. ``notes.md`` -> ``notes.md.sidenote``."""

    if not suffix:
        raise ValueError("Sidecar suffix must not be empty")
    document = Path(document_path)
    return document.with_name(f"{document.name}{suffix}")


def _replace_atomically(target: Path, content: str, encoding: str) -> None:
    descriptor, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def detect_encoding(raw: bytes) -> tuple[str, bool]:
    """Return ``(encoding, has_bom)`` for ``raw``.

    BOM-marked data reports the endian-specific codec so the mark can be
    written back unchanged; other data tries UTF-8, then the locale's
    preferred encoding, then latin-1, which decodes anything.
    """

    for bom, encoding in _BOMS:
        if raw.startswith(bom):
            return encoding, True
    for candidate in ("utf-8", locale.getpreferredencoding(False)):
        if not candidate:
            continue
        try:
            raw.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
        return candidate, False
    return "latin-1", False

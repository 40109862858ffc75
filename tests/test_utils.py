"""Tests for the file IO and logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sidenote.utils import file_io
from sidenote.utils import logging as logging_utils


def test_read_text_strips_bom_and_normalizes_newlines(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    path.write_bytes(b"\xef\xbb\xbfone\r\ntwo\rthree")

    assert file_io.read_text(path) == "one\ntwo\nthree"
    assert file_io.read_text(path, normalize_newlines=False) == "one\r\ntwo\rthree"


def test_read_text_falls_back_for_non_utf8_bytes(tmp_path: Path) -> None:
    path = tmp_path / "latin.txt"
    path.write_bytes("café".encode("latin-1"))

    assert file_io.read_text(path).endswith("é")


def test_write_text_without_newline_policy_is_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "out" / "doc.txt"

    file_io.write_text(path, "a\r\nb\n", newline=None)

    assert path.read_bytes() == b"a\r\nb\n"
    assert [entry.name for entry in path.parent.iterdir()] == ["doc.txt"]


@pytest.mark.parametrize("newline, expected", [("\n", b"a\nb\n"), ("\r\n", b"a\r\nb\r\n")])
def test_write_text_applies_newline_policy(tmp_path: Path, newline: str, expected: bytes) -> None:
    path = tmp_path / "doc.txt"

    file_io.write_text(path, "a\r\nb\n", newline=newline, atomic=False)

    assert path.read_bytes() == expected


def test_write_text_rejects_unknown_newline_policy(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        file_io.write_text(tmp_path / "doc.txt", "a", newline="\t")


@pytest.mark.parametrize(
    "raw, encoding",
    [
        (b"\xef\xbb\xbfabc", "utf-8"),
        (b"\xfe\xff\x00a\x00b", "utf-16-be"),
        (b"\xff\xfea\x00b\x00", "utf-16-le"),
    ],
)
def test_read_document_reports_bom_and_write_text_restores_it(
    tmp_path: Path, raw: bytes, encoding: str
) -> None:
    path = tmp_path / "doc.txt"
    path.write_bytes(raw)

    text, detected, bom = file_io.read_document(path)

    assert (detected, bom) == (encoding, True)
    assert not text.startswith("\ufeff")
    file_io.write_text(path, text, encoding=detected, newline=None, bom=bom)
    assert path.read_bytes() == raw


def test_detect_encoding_falls_back_to_latin1_without_bom(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(file_io.locale, "getpreferredencoding", lambda _do_setlocale=True: "utf-8")
    encoding, bom = file_io.detect_encoding("caf\xe9 \x81".encode("latin-1"))

    assert (encoding, bom) == ("latin-1", False)
    assert file_io.detect_encoding(b"plain") == ("utf-8", False)


def test_remove_file_reports_whether_a_file_was_removed(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt.sidenote"
    path.write_text("x", encoding="utf-8")

    assert file_io.remove_file(path) is True
    assert file_io.remove_file(path) is False


def test_sidecar_path_for_appends_suffix() -> None:
    assert file_io.sidecar_path_for(Path("/tmp/notes.md"), ".sidenote") == Path("/tmp/notes.md.sidenote")
    with pytest.raises(ValueError):
        file_io.sidecar_path_for("notes.md", "")


def test_setup_logging_writes_to_override_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SIDENOTE_LOG_DIR", str(tmp_path / "logs"))
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    try:
        log_path = logging_utils.setup_logging(logging.INFO, console=False, force=True)
        logging_utils.get_logger("sidenote.test").info("hello log")
        for handler in root.handlers:
            handler.flush()

        assert log_path == tmp_path / "logs" / "sidenote.log"
        assert logging_utils.get_log_path() == log_path
        assert "hello log" in log_path.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)

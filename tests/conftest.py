"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep user-level ``SIDENOTE_*`` variables from leaking into tests."""

    for name in list(os.environ):
        if name.startswith("SIDENOTE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SIDENOTE_LOG_DIR", str(tmp_path / "logs"))

"""Logging bootstrap for the sidenote command line tool."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["LOG_FORMAT", "setup_logging", "get_logger", "get_log_path"]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "sidenote.log"

_log_path: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Route the root logger to a rotating log file and, optionally, stderr.

    The directory defaults to ``~/.sidenote/logs`` and can be moved with the
    ``SIDENOTE_LOG_DIR`` environment variable. Calling again is a no-op unless
    ``force`` is set.
    """

    global _log_path
    if _log_path is not None and not force:
        return _log_path

    directory = Path(log_dir or os.environ.get("SIDENOTE_LOG_DIR") or Path.home() / ".sidenote" / "logs")
    directory = directory.expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / LOG_FILENAME

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    # Qt prints a lot at INFO; keep it at WARNING unless the root is stricter.
    logging.getLogger("PySide6").setLevel(max(level, logging.WARNING))

    _log_path = path
    return path


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_log_path() -> Path | None:
    """Return the active log file, or ``None`` before :func:`setup_logging` ran."""

    return _log_path

"""Command line front-end for annotating files on disk.

Every command opens the document (restoring its annotations from the sidecar),
applies one operation, and saves through the same save/load cycle an editor
would run. Positions on the command line are 1-based, like the sidecar file.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence, TextIO, get_type_hints

from .annotations import AnnotationError, AnnotationSession, KeepMode
from .services.settings import Settings, SettingsStore, parse_bool
from .theme import theme_manager
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """Configure structured logging for the command line tool."""

    level = logging.DEBUG if debug else logging.WARNING
    logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Path | None = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    return active_store.load(overrides=overrides)


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    """Entry point invoked by the ``sidenote`` console script."""

    out = stdout or sys.stdout
    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or _env_flag("SIDENOTE_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("SIDENOTE_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
        settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    if args.theme_file:
        try:
            theme = theme_manager.load_file(args.theme_file)
        except (OSError, TypeError, ValueError) as exc:
            print(f"Invalid --theme-file: {exc}", file=sys.stderr)
            return 2
        settings = replace(settings, theme=theme.name)

    if args.command == "settings":
        if args.save:
            _LOGGER.info("Saving settings to %s", settings_store.save(settings))
        _dump_settings(settings, settings_store, overrides=cli_overrides, stream=out)
        return 0

    try:
        return _run_command(args, settings, out)
    except AnnotationError as exc:
        _LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"sidenote: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"sidenote: {exc}", file=sys.stderr)
        return 1


def _run_command(args: argparse.Namespace, settings: Settings, out: TextIO) -> int:
    session = AnnotationSession.open(args.file, settings=settings)
    command = args.command

    if command == "annotate":
        annotation_id = session.annotate(args.start - 1, args.end - 1)
        session.save()
        out.write(f"{annotation_id}\n")
    elif command == "remove":
        annotation_id = session.unannotate_at(args.position - 1)
        session.save()
        out.write(f"{annotation_id}\n")
    elif command == "mode":
        line = session.set_keep(KeepMode.IN if args.keep == "in" else KeepMode.OUT)
        session.save()
        out.write(f"{line}\n")
    elif command == "list":
        for annotation in session.store.clean_up():
            position, length = annotation.to_position_length()
            out.write(f"{position},{length}\t{session.content(annotation)!r}\n")
    elif command == "status":
        out.write(f"{session.status_line()}\n")
    elif command == "restore":
        out.write(session.editor.text)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sidenote",
        description="Attach side annotations to text files without changing their content.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.sidenote/settings.json path.",
    )
    parser.add_argument(
        "--theme-file",
        metavar="PATH",
        type=Path,
        help="Register the highlight theme in a JSON file and use it.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this invocation (repeatable).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    annotate = commands.add_parser("annotate", help="Annotate the span [START, END) and save.")
    annotate.add_argument("file", type=Path)
    annotate.add_argument("start", type=int)
    annotate.add_argument("end", type=int)

    remove = commands.add_parser("remove", help="Remove the annotation covering POSITION and save.")
    remove.add_argument("file", type=Path)
    remove.add_argument("position", type=int)

    mode = commands.add_parser("mode", help="Switch between keep-in and keep-out and save.")
    mode.add_argument("file", type=Path)
    mode.add_argument("--keep", choices=("in", "out"), required=True)

    for name, help_text in (
        ("list", "List annotations as position,length and content."),
        ("status", "Print the (show|hide, keep-in|keep-out) status line."),
        ("restore", "Print the document with keep-out annotations reinserted."),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("file", type=Path)

    settings = commands.add_parser("settings", help="Print the effective settings and exit.")
    settings.add_argument(
        "--save",
        action="store_true",
        help="Also write the effective settings to the settings file.",
    )
    return parser


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    """Turn repeated ``--set KEY=VALUE`` options into typed :class:`Settings` overrides."""

    field_types = get_type_hints(Settings)
    overrides: Dict[str, Any] = {}
    for entry in items:
        key, separator, raw_value = entry.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ValueError(f"expected KEY=VALUE, got {entry!r}")
        if key not in field_types:
            raise ValueError(f"unknown setting {key!r}")
        target = field_types[key]
        raw_value = raw_value.strip()
        if target is bool:
            overrides[key] = parse_bool(raw_value)
        elif target is int:
            overrides[key] = int(raw_value, 10)
        else:
            overrides[key] = raw_value
    return overrides


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO,
) -> None:
    output = {
        "settings": asdict(settings),
        "meta": {
            "path": str(store.path),
            "cli_overrides": sorted(overrides.keys()),
            "environment_variables": sorted(
                name for name in os.environ if name.startswith("SIDENOTE_")
            ),
        },
    }
    json.dump(output, stream, indent=2)
    stream.write("\n")

# SPDX-License-Identifier: AGPL-3.0-or-later
"""cursor-reset CLI entrypoints."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from resetcore.appdata.paths import HostEnvironment, normalize_platform
from resetcore.backup.snapshot import BackupStore
from resetcore.errors import ResetError
from resetcore.install import find_installation, install_candidates
from resetcore.unilog import read_events

from . import get_version
from .bootstrap import bootstrap_orchestrator, build_store
from .console import TerminalConsole, needs_exit_pause, wait_for_keypress
from .logging_setup import setup_logging
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

RECENT_EVENTS = 5


def _prepare(args) -> Settings:
    settings = load_settings(assume_yes=True if getattr(args, "yes", False) else None)
    log_dir = settings.resolve_log_dir()
    os.environ.setdefault("CURSOR_RESET_EVENT_LOG", str(log_dir / "events.jsonl"))
    setup_logging(settings.log_file())
    return settings


def reset_cmd(args) -> int:
    settings = _prepare(args)
    console = TerminalConsole(as_json=bool(getattr(args, "json", False)))
    try:
        orchestrator = bootstrap_orchestrator(settings, console)
        outcome = orchestrator.run()
    except ResetError as exc:
        logger.error("reset.failed code=%s message=%s", exc.code, exc.message, exc_info=exc)
        console.error(exc.message)
        console.error(f"details: {settings.log_file()}")
        return 1
    except Exception as exc:
        logger.exception("reset.crashed")
        console.error(f"unexpected error while resetting device identifiers: {exc}")
        console.error(f"details: {settings.log_file()}")
        return 1
    logger.info("reset.outcome status=%s", outcome.status.value)
    return 0


def _wire_reset(subparsers):
    parser = subparsers.add_parser("reset", help="Back up storage.json and write fresh device identifiers")
    _add_reset_flags(parser, default=argparse.SUPPRESS)
    parser.set_defaults(func=reset_cmd)


def _add_reset_flags(parser: argparse.ArgumentParser, default=False) -> None:
    # SUPPRESS keeps values given before the subcommand
    parser.add_argument("--yes", "-y", action="store_true", default=default, help="Close the editor without asking")
    parser.add_argument("--json", action="store_true", default=default, help="Print the result summary as JSON")
    parser.add_argument(
        "--no-wait", action="store_true", default=default, help="Never wait for a keypress before exiting"
    )


def backups_cmd(args) -> int:
    settings = _prepare(args)
    try:
        path = build_store(settings, HostEnvironment.current()).resolve_path()
    except ResetError as exc:
        sys.stderr.write(f"[error] {exc.message}\n")
        return 1
    entries = BackupStore().list_snapshots(path)
    if getattr(args, "json", False):
        payload = [
            {"name": entry.name, "path": str(entry.path), "taken_at": entry.taken_at.isoformat()}
            for entry in entries
        ]
        print(json.dumps(payload, indent=2))
        return 0
    print(f"Record: {path}")
    if not entries:
        print("No backups yet.")
        return 0
    for index, entry in enumerate(entries, start=1):
        print(f"  {index}. {entry.name}  ({entry.taken_at:%Y-%m-%d %H:%M:%S})")
    return 0


def _wire_backups(subparsers):
    parser = subparsers.add_parser("backups", help="List storage.json backups, newest first")
    parser.add_argument("--json", action="store_true")
    parser.set_defaults(func=backups_cmd)


def paths_cmd(args) -> int:
    settings = _prepare(args)
    env = HostEnvironment.current()
    try:
        record = build_store(settings, env).resolve_path()
        candidates = install_candidates(env, settings.app_name)
    except ResetError as exc:
        sys.stderr.write(f"[error] {exc.message}\n")
        return 1
    installed = find_installation(env, settings.app_name)
    status = {
        "version": get_version(),
        "platform": env.platform,
        "record": str(record),
        "record_exists": record.exists(),
        "install_candidates": [str(p) for p in candidates],
        "installed_at": str(installed) if installed else None,
        "log_file": str(settings.log_file()),
        "event_log": os.environ.get("CURSOR_RESET_EVENT_LOG"),
        "recent_events": read_events(limit=RECENT_EVENTS),
        "settings": settings.model_dump(mode="json"),
    }
    if getattr(args, "json", False):
        print(json.dumps(status, indent=2))
        return 0
    for key, value in status.items():
        print(f"  {key}: {value}")
    return 0


def _wire_paths(subparsers):
    parser = subparsers.add_parser("paths", help="Show resolved locations and effective settings")
    parser.add_argument("--json", action="store_true")
    parser.set_defaults(func=paths_cmd)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cursor-reset", description="Reset the Cursor editor's device identifiers"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    _add_reset_flags(parser)
    subparsers = parser.add_subparsers(dest="command")
    _wire_reset(subparsers)
    _wire_backups(subparsers)
    _wire_paths(subparsers)
    parser.set_defaults(func=reset_cmd)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        result = func(args)
    except Exception as exc:
        # settings and log setup can fail before any log file exists
        logger.debug("cli.failed command=%s", getattr(args, "command", None), exc_info=exc)
        sys.stderr.write(f"[error] {exc}\n")
        result = 1
    finally:
        if not getattr(args, "no_wait", False) and needs_exit_pause(
            normalize_platform(sys.platform), os.environ
        ):
            wait_for_keypress()
    return 0 if result is None else int(result)


def run() -> None:
    sys.exit(main())


__all__ = ["backups_cmd", "build_parser", "main", "paths_cmd", "reset_cmd", "run"]

# SPDX-License-Identifier: AGPL-3.0-or-later
"""Append-only JSON lines event log for reset runs."""

from __future__ import annotations

import json
import logging
import os
import pathlib
import time
from typing import Any

from platformdirs import user_log_path

_EVENT_FILENAME = "events.jsonl"

logger = logging.getLogger(__name__)


def _log_path() -> pathlib.Path:
    path_value = os.getenv("CURSOR_RESET_EVENT_LOG")
    if path_value:
        path = pathlib.Path(path_value)
    else:
        path = user_log_path("cursor-reset", appauthor=False) / _EVENT_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write(event: str, run_id: str | None = None, **fields: Any) -> None:
    record = {
        "ts": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        "event": event,
        "run_id": run_id,
        **fields,
    }
    try:
        with _log_path().open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    except OSError as exc:
        # the event trail never decides the outcome of a reset
        logger.warning("unilog.write_failed", exc_info=exc)


def read_events(limit: int | None = None) -> list[dict[str, Any]]:
    path = _log_path()
    if not path.exists():
        return []
    events: list[dict[str, Any]] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            events.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    if limit is not None:
        return events[-limit:]
    return events

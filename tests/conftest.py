# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from resetcore.appdata.paths import HostEnvironment  # noqa: E402
from resetcore.process.table import ProcessInfo, ProcessQuery, ProcessTable  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_event_log(tmp_path, monkeypatch):
    monkeypatch.setenv("CURSOR_RESET_EVENT_LOG", str(tmp_path / "events" / "events.jsonl"))


class FakeProcessTable(ProcessTable):
    """Scripted process table: one queued answer per ``list_processes`` call."""

    def __init__(self, *answers: ProcessQuery) -> None:
        super().__init__(runner=lambda command: None)
        self.answers: List[ProcessQuery] = list(answers)
        self.queries: List[str] = []
        self.terminated: List[List[ProcessInfo]] = []

    def list_processes(self, pattern: str) -> ProcessQuery:
        self.queries.append(pattern)
        if len(self.answers) > 1:
            return self.answers.pop(0)
        return self.answers[0]

    def terminate(self, processes: Sequence[ProcessInfo]) -> List[str]:
        self.terminated.append(list(processes))
        return [f"kill {info.pid}" for info in processes]


class FakeConsole:
    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.lines: List[str] = []
        self.questions: List[str] = []
        self.summaries = []

    def info(self, message: str) -> None:
        self.lines.append(f"info:{message}")

    def success(self, message: str) -> None:
        self.lines.append(f"ok:{message}")

    def error(self, message: str) -> None:
        self.lines.append(f"error:{message}")

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer

    def report(self, summary) -> None:
        self.summaries.append(summary)


@pytest.fixture()
def linux_env(tmp_path) -> HostEnvironment:
    home = tmp_path / "home"
    home.mkdir()
    return HostEnvironment(platform="linux", home=home, env={}, pid=4242)

# SPDX-License-Identifier: AGPL-3.0-or-later
"""OS process listing and forceful termination behind one small interface.

Windows has no kill-by-pattern primitive, so its table lists everything with
``tasklist`` and terminates resolved PIDs with ``taskkill``. macOS and Linux
search with ``pgrep`` and terminate by exact name with ``pkill``.
"""

from __future__ import annotations

import csv
import enum
import io
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from resetcore.appdata.paths import LINUX, MACOS, WINDOWS, HostEnvironment
from resetcore.errors import UnsupportedPlatform

COMMAND_TIMEOUT_SEC = 30

# pgrep/pkill: 1 means "nothing matched"
_POSIX_NO_MATCH = 1
# taskkill: 128 means the PID is already gone
_TASKKILL_NOT_FOUND = 128

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]


def run_command(command: Sequence[str]) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(
        list(command),
        capture_output=True,
        check=False,
        text=True,
        errors="replace",
        timeout=COMMAND_TIMEOUT_SEC,
    )


class QueryStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    QUERY_ERROR = "query_error"


@dataclass(frozen=True)
class ProcessInfo:
    name: str
    pid: int


@dataclass
class ProcessQuery:
    status: QueryStatus
    processes: List[ProcessInfo] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def found(cls, processes: Iterable[ProcessInfo]) -> "ProcessQuery":
        items = list(processes)
        if not items:
            return cls(QueryStatus.NOT_FOUND)
        return cls(QueryStatus.FOUND, items)

    @classmethod
    def failed(cls, error: str) -> "ProcessQuery":
        return cls(QueryStatus.QUERY_ERROR, error=error)


class ProcessTable:
    """Capability used by :class:`~resetcore.process.guard.ProcessGuard`."""

    def __init__(self, runner: Runner = run_command) -> None:
        self._runner = runner

    def list_processes(self, pattern: str) -> ProcessQuery:
        raise NotImplementedError

    def terminate(self, processes: Sequence[ProcessInfo]) -> List[str]:
        """Issue forceful termination for ``processes``; return the commands run."""
        raise NotImplementedError

    def _run(self, command: Sequence[str]) -> Optional["subprocess.CompletedProcess[str]"]:
        try:
            return self._runner(command)
        except (OSError, subprocess.SubprocessError, UnicodeDecodeError) as exc:
            logger.warning("process.command_failed command=%s error=%s", " ".join(command), exc)
            return None

    @staticmethod
    def _detail(completed: "subprocess.CompletedProcess[str]") -> str:
        text = (completed.stderr or completed.stdout or "").strip()
        return f"exit {completed.returncode}: {text}" if text else f"exit {completed.returncode}"


class WindowsProcessTable(ProcessTable):
    LIST_COMMAND = ("tasklist", "/FO", "CSV", "/NH")

    def list_processes(self, pattern: str) -> ProcessQuery:
        completed = self._run(self.LIST_COMMAND)
        if completed is None:
            return ProcessQuery.failed("tasklist unavailable")
        if completed.returncode != 0:
            return ProcessQuery.failed(self._detail(completed))
        needle = pattern.lower()
        return ProcessQuery.found(
            info for info in parse_tasklist_csv(completed.stdout) if needle in info.name.lower()
        )

    def terminate(self, processes: Sequence[ProcessInfo]) -> List[str]:
        issued: List[str] = []
        for info in processes:
            command = ["taskkill", "/F", "/T", "/PID", str(info.pid)]
            issued.append(" ".join(command))
            completed = self._run(command)
            if completed is not None and completed.returncode not in (0, _TASKKILL_NOT_FOUND):
                logger.warning("process.taskkill_failed pid=%s %s", info.pid, self._detail(completed))
        return issued


class PosixProcessTable(ProcessTable):
    def list_processes(self, pattern: str) -> ProcessQuery:
        completed = self._run(["pgrep", "-l", "-i", pattern])
        if completed is None:
            return ProcessQuery.failed("pgrep unavailable")
        if completed.returncode == _POSIX_NO_MATCH:
            return ProcessQuery(QueryStatus.NOT_FOUND)
        if completed.returncode != 0:
            return ProcessQuery.failed(self._detail(completed))
        return ProcessQuery.found(parse_pgrep_output(completed.stdout))

    def terminate(self, processes: Sequence[ProcessInfo]) -> List[str]:
        issued: List[str] = []
        names: List[str] = []
        for info in processes:
            if info.name not in names:
                names.append(info.name)
        for name in names:
            command = ["pkill", "-9", "-x", name]
            issued.append(" ".join(command))
            completed = self._run(command)
            if completed is not None and completed.returncode not in (0, _POSIX_NO_MATCH):
                logger.warning("process.pkill_failed name=%s %s", name, self._detail(completed))
        return issued


def parse_tasklist_csv(output: str) -> List[ProcessInfo]:
    processes: List[ProcessInfo] = []
    for row in csv.reader(io.StringIO(output)):
        if len(row) < 2:
            continue
        name = row[0].strip()
        try:
            pid = int(row[1].strip())
        except ValueError:
            continue
        if name:
            processes.append(ProcessInfo(name=name, pid=pid))
    return processes


def parse_pgrep_output(output: str) -> List[ProcessInfo]:
    processes: List[ProcessInfo] = []
    for line in output.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) != 2:
            continue
        try:
            pid = int(parts[0])
        except ValueError:
            continue
        processes.append(ProcessInfo(name=parts[1].strip(), pid=pid))
    return processes


def process_table_for(env: HostEnvironment, runner: Runner = run_command) -> ProcessTable:
    if env.platform == WINDOWS:
        return WindowsProcessTable(runner)
    if env.platform in (MACOS, LINUX):
        return PosixProcessTable(runner)
    raise UnsupportedPlatform(env.platform)


__all__ = [
    "PosixProcessTable",
    "ProcessInfo",
    "ProcessQuery",
    "ProcessTable",
    "QueryStatus",
    "WindowsProcessTable",
    "parse_pgrep_output",
    "parse_tasklist_csv",
    "process_table_for",
    "run_command",
]

# SPDX-License-Identifier: AGPL-3.0-or-later
"""Detect and stop the guarded editor before its state is touched."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List

from resetcore.errors import DetectionFailed
from resetcore.process.table import ProcessInfo, ProcessTable, QueryStatus

DEFAULT_GRACE_SECONDS = 1.5

logger = logging.getLogger(__name__)


class GuardState(enum.Enum):
    NOT_RUNNING = "not_running"
    RUNNING = "running"


class TerminationResult(enum.Enum):
    TERMINATED = "terminated"
    STILL_RUNNING = "still_running"


class ProcessGuard:
    """Name-based guard around one application.

    Matching is a case-insensitive substring test on the process name. The
    current PID and anything whose name contains ``self_pattern`` are never
    treated as the guarded application.
    """

    def __init__(
        self,
        table: ProcessTable,
        pattern: str,
        *,
        self_pattern: str,
        current_pid: int,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.table = table
        self.pattern = pattern.lower()
        self.self_pattern = self_pattern.lower()
        self.current_pid = current_pid
        self.grace_seconds = grace_seconds
        self._sleep = sleep

    def _qualifies(self, info: ProcessInfo) -> bool:
        name = info.name.lower()
        if info.pid == self.current_pid:
            return False
        if self.self_pattern and self.self_pattern in name:
            return False
        return self.pattern in name

    def running_processes(self) -> List[ProcessInfo]:
        query = self.table.list_processes(self.pattern)
        if query.status is QueryStatus.QUERY_ERROR:
            raise DetectionFailed(f"cannot list processes: {query.error}")
        if query.status is QueryStatus.NOT_FOUND:
            return []
        matches = [info for info in query.processes if self._qualifies(info)]
        if matches:
            logger.info(
                "process.detected %s",
                ", ".join(f"{info.name}({info.pid})" for info in matches),
            )
        return matches

    def detect(self) -> GuardState:
        if self.running_processes():
            return GuardState.RUNNING
        return GuardState.NOT_RUNNING

    def terminate(self) -> TerminationResult:
        targets = self.running_processes()
        if not targets:
            logger.info("process.terminate_skipped no qualifying process")
            return TerminationResult.TERMINATED

        for command in self.table.terminate(targets):
            logger.info("process.terminate command=%s", command)
        self._sleep(self.grace_seconds)

        try:
            state = self.detect()
        except DetectionFailed as exc:
            logger.warning("process.verify_failed %s", exc)
            return TerminationResult.STILL_RUNNING
        if state is GuardState.RUNNING:
            logger.warning("process.still_running after %.1fs", self.grace_seconds)
            return TerminationResult.STILL_RUNNING
        return TerminationResult.TERMINATED


__all__ = ["GuardState", "ProcessGuard", "TerminationResult"]

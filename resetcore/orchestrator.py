# SPDX-License-Identifier: AGPL-3.0-or-later
"""Sequencing of one reset: guard, snapshot, rewrite, report."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from resetcore.appdata.paths import ensure_parent
from resetcore.backup.snapshot import BackupStore
from resetcore.errors import ProcessStillRunning
from resetcore.identity.generator import IdentityTriple, generate
from resetcore.identity.store import IdentityStore
from resetcore.process.guard import GuardState, ProcessGuard, TerminationResult
from resetcore.unilog import write as uni_write

logger = logging.getLogger(__name__)


class Console(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def confirm(self, question: str) -> bool: ...

    def report(self, summary: "ResetSummary") -> None: ...


class ResetSummary(BaseModel):
    machine_id: str = Field(alias="machineId")
    mac_machine_id: str = Field(alias="macMachineId")
    dev_device_id: str = Field(alias="devDeviceId")
    record_path: str
    snapshot_path: Optional[str] = None
    reset_count: int = 0
    snapshots: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def identity(self) -> dict:
        return {
            "machineId": self.machine_id,
            "macMachineId": self.mac_machine_id,
            "devDeviceId": self.dev_device_id,
        }


class ResetStatus(enum.Enum):
    SUCCESS = "success"
    NOT_INSTALLED = "not_installed"
    DECLINED = "declined"


@dataclass
class ResetOutcome:
    status: ResetStatus
    summary: Optional[ResetSummary] = None


class ResetOrchestrator:
    def __init__(
        self,
        *,
        guard: ProcessGuard,
        store: IdentityStore,
        backups: BackupStore,
        console: Console,
        installed: Callable[[], bool],
        generator: Callable[[], IdentityTriple] = generate,
        assume_yes: bool = False,
        app_name: str = "Cursor",
    ) -> None:
        self.guard = guard
        self.store = store
        self.backups = backups
        self.console = console
        self.installed = installed
        self.generator = generator
        self.assume_yes = assume_yes
        self.app_name = app_name
        self.run_id = datetime.now().strftime("%Y%m%dT%H%M%S")

    def run(self) -> ResetOutcome:
        uni_write("reset.start", self.run_id, app=self.app_name)

        self.console.info(f"Checking for a {self.app_name} installation...")
        if not self.installed():
            self.console.error(f"{self.app_name} is not installed; install it before running this tool.")
            uni_write("reset.not_installed", self.run_id)
            return ResetOutcome(ResetStatus.NOT_INSTALLED)
        self.console.success(f"{self.app_name} is installed")

        if not self._clear_running_process():
            uni_write("reset.declined", self.run_id)
            return ResetOutcome(ResetStatus.DECLINED)

        path = self.store.resolve_path()
        ensure_parent(path)
        self.console.success(f"Config directory ready: {path.parent}")

        self.console.info("Backing up the current record...")
        snapshot = self.backups.snapshot(path)
        if snapshot is None:
            self.console.info("No existing record; a new one will be created")
        else:
            self.console.success(f"Backup written: {snapshot.name}")
            uni_write("reset.snapshot", self.run_id, path=str(snapshot))

        record = self.store.load(path)
        triple = self.generator()
        self.store.merge_and_save(record, triple, path)
        self.console.success("New device identifiers saved")
        uni_write("reset.written", self.run_id, path=str(path), foreign_keys=len(record))

        history = self.backups.list_snapshots(path)
        summary = ResetSummary(
            machine_id=triple.machine_id,
            mac_machine_id=triple.mac_machine_id,
            dev_device_id=triple.dev_device_id,
            record_path=str(path),
            snapshot_path=str(snapshot) if snapshot else None,
            reset_count=len(history),
            snapshots=[entry.name for entry in history],
        )
        logger.info("reset.done run_id=%s path=%s count=%d", self.run_id, path, summary.reset_count)
        self.console.report(summary)
        uni_write("reset.done", self.run_id, reset_count=summary.reset_count)
        return ResetOutcome(ResetStatus.SUCCESS, summary)

    def _clear_running_process(self) -> bool:
        """Return ``False`` when the user declines to stop the editor."""
        self.console.info(f"Checking whether {self.app_name} is running...")
        if self.guard.detect() is GuardState.NOT_RUNNING:
            self.console.success(f"{self.app_name} is not running")
            return True

        question = f"{self.app_name} is running. Close it automatically?"
        if not (self.assume_yes or self.console.confirm(question)):
            self.console.error(f"Close {self.app_name} before running this tool.")
            return False

        self.console.info(f"Closing {self.app_name}...")
        if self.guard.terminate() is TerminationResult.STILL_RUNNING:
            uni_write("reset.still_running", self.run_id)
            raise ProcessStillRunning(
                f"{self.app_name} is still running; close it manually and try again"
            )
        self.console.success(f"{self.app_name} closed")
        uni_write("reset.terminated", self.run_id)
        return True


__all__ = ["Console", "ResetOrchestrator", "ResetOutcome", "ResetStatus", "ResetSummary"]

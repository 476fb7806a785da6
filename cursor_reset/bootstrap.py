# SPDX-License-Identifier: AGPL-3.0-or-later
"""Bootstrap helpers to build the orchestrator and its collaborators."""

from __future__ import annotations

from typing import Optional

from resetcore.appdata.paths import HostEnvironment
from resetcore.backup.snapshot import BackupStore
from resetcore.identity.store import IdentityStore
from resetcore.install import is_installed
from resetcore.orchestrator import Console, ResetOrchestrator
from resetcore.process.guard import ProcessGuard
from resetcore.process.table import ProcessTable, process_table_for

from .settings import Settings


def build_store(settings: Settings, env: HostEnvironment) -> IdentityStore:
    return IdentityStore(env, settings.app_name, settings.record_path)


def build_guard(
    settings: Settings, env: HostEnvironment, table: Optional[ProcessTable] = None
) -> ProcessGuard:
    return ProcessGuard(
        table or process_table_for(env),
        settings.process_pattern,
        self_pattern=settings.self_pattern,
        current_pid=env.pid,
        grace_seconds=settings.grace_seconds,
    )


def bootstrap_orchestrator(
    settings: Settings,
    console: Console,
    env: Optional[HostEnvironment] = None,
    table: Optional[ProcessTable] = None,
) -> ResetOrchestrator:
    """Build an orchestrator wired to the real OS unless fakes are supplied."""

    env = env or HostEnvironment.current()
    return ResetOrchestrator(
        guard=build_guard(settings, env, table),
        store=build_store(settings, env),
        backups=BackupStore(),
        console=console,
        installed=lambda: is_installed(env, settings.app_name),
        assume_yes=settings.assume_yes,
        app_name=settings.app_name,
    )

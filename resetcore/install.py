# SPDX-License-Identifier: AGPL-3.0-or-later
"""Best-effort check that the guarded editor is installed."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from resetcore.appdata.paths import LINUX, MACOS, WINDOWS, HostEnvironment
from resetcore.errors import UnsupportedPlatform


def install_candidates(env: HostEnvironment, app_name: str) -> List[Path]:
    slug = app_name.lower()
    if env.platform == WINDOWS:
        return [env.local_appdata() / "Programs" / app_name / f"{app_name}.exe"]
    if env.platform == MACOS:
        return [
            Path("/Applications") / f"{app_name}.app",
            env.home / "Applications" / f"{app_name}.app",
        ]
    if env.platform == LINUX:
        return [
            Path("/usr/share") / slug,
            Path("/opt") / slug,
            env.home / ".local" / "share" / slug,
        ]
    raise UnsupportedPlatform(env.platform)


def find_installation(env: HostEnvironment, app_name: str) -> Optional[Path]:
    for candidate in install_candidates(env, app_name):
        if candidate.exists():
            return candidate
    return None


def is_installed(env: HostEnvironment, app_name: str) -> bool:
    return find_installation(env, app_name) is not None

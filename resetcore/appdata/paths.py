# SPDX-License-Identifier: AGPL-3.0-or-later
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from resetcore.errors import UnsupportedPlatform

__doc__ = r"""
Per-user application data conventions for the guarded editor:
  Windows: %APPDATA%\<App>\User\globalStorage\storage.json
  macOS:   ~/Library/Application Support/<App>/User/globalStorage/storage.json
  Linux:   ~/.config/<App>/User/globalStorage/storage.json

Lookups go through a HostEnvironment captured once at startup so that path
resolution can be exercised with any platform/home combination.
"""

WINDOWS = "win32"
MACOS = "darwin"
LINUX = "linux"
SUPPORTED_PLATFORMS = (WINDOWS, MACOS, LINUX)

RECORD_FILENAME = "storage.json"


def normalize_platform(value: str) -> str:
    if value.startswith("win"):
        return WINDOWS
    if value.startswith("linux"):
        return LINUX
    return value


@dataclass(frozen=True)
class HostEnvironment:
    """Snapshot of the ambient OS facts the engine depends on."""

    platform: str
    home: Path
    env: Mapping[str, str] = field(default_factory=dict)
    pid: int = 0

    @classmethod
    def current(cls) -> "HostEnvironment":
        return cls(
            platform=normalize_platform(sys.platform),
            home=Path.home(),
            env=dict(os.environ),
            pid=os.getpid(),
        )

    def get(self, key: str) -> Optional[str]:
        value = self.env.get(key)
        return value or None

    def roaming_appdata(self) -> Path:
        appdata = self.get("APPDATA")
        if appdata:
            return Path(appdata)
        return self.home / "AppData" / "Roaming"

    def local_appdata(self) -> Path:
        lad = self.get("LOCALAPPDATA")
        if lad:
            return Path(lad)
        return self.home / "AppData" / "Local"

    def is_windows(self) -> bool:
        return self.platform == WINDOWS

    def is_supported(self) -> bool:
        return self.platform in SUPPORTED_PLATFORMS


def app_config_root(env: HostEnvironment, app_name: str) -> Path:
    if env.platform == WINDOWS:
        return env.roaming_appdata() / app_name
    if env.platform == MACOS:
        return env.home / "Library" / "Application Support" / app_name
    if env.platform == LINUX:
        return env.home / ".config" / app_name
    raise UnsupportedPlatform(env.platform)


def resolve_record_path(env: HostEnvironment, app_name: str, override: Optional[str] = None) -> Path:
    """Return the identity record location for ``app_name`` on ``env``.

    ``override`` wins when set; otherwise the platform convention applies and
    unsupported platforms raise :class:`UnsupportedPlatform`.
    """
    if override:
        return Path(override).expanduser()
    return app_config_root(env, app_name) / "User" / "globalStorage" / RECORD_FILENAME


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.parent

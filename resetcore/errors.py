# SPDX-License-Identifier: AGPL-3.0-or-later
"""Fatal error kinds raised by the reset engine."""

from __future__ import annotations


class ResetError(RuntimeError):
    code = "reset_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class UnsupportedPlatform(ResetError):
    code = "unsupported_platform"

    def __init__(self, platform: str) -> None:
        super().__init__(f"unsupported operating system: {platform}")
        self.platform = platform


class DetectionFailed(ResetError):
    code = "process_query_failed"


class ProcessStillRunning(ResetError):
    code = "process_still_running"


class BackupFailed(ResetError):
    code = "backup_failed"


class WriteFailed(ResetError):
    code = "write_failed"


__all__ = [
    "BackupFailed",
    "DetectionFailed",
    "ProcessStillRunning",
    "ResetError",
    "UnsupportedPlatform",
    "WriteFailed",
]

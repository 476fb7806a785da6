# SPDX-License-Identifier: AGPL-3.0-or-later
"""Timestamped byte copies of the identity record taken before it changes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from resetcore.errors import BackupFailed

SNAPSHOT_SUFFIX = ".bak"

_TIMESTAMP_PATTERN = re.compile(r"^\.(\d{17})\.bak$")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotEntry:
    name: str
    path: Path
    taken_at: datetime


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ``YYYYMMDDHHMMSSmmm``."""
    return moment.strftime("%Y%m%d%H%M%S") + f"{moment.microsecond // 1000:03d}"


def parse_timestamp(text: str) -> Optional[datetime]:
    if len(text) != 17 or not text.isdigit():
        return None
    try:
        base = datetime.strptime(text[:14], "%Y%m%d%H%M%S")
    except ValueError:
        return None
    return base.replace(microsecond=int(text[14:]) * 1000)


def snapshot_name(record_path: Path, moment: datetime) -> str:
    return f"{record_path.name}.{format_timestamp(moment)}{SNAPSHOT_SUFFIX}"


class BackupStore:
    """Create and enumerate snapshots that sit next to the record file."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def snapshot(self, path: Path, now: Optional[datetime] = None) -> Optional[Path]:
        """Copy ``path`` to a new snapshot and return the snapshot path.

        Returns ``None`` when there is no record yet. Existing snapshots are
        never overwritten: a name collision is reported as ``BackupFailed``.
        """
        path = Path(path)
        if not path.exists():
            logger.info("snapshot.skipped_missing_source path=%s", path)
            return None

        moment = now or self._clock()
        target = path.with_name(snapshot_name(path, moment))
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise BackupFailed(f"cannot read {path}: {exc}") from exc
        try:
            with target.open("xb") as handle:
                handle.write(payload)
        except OSError as exc:
            raise BackupFailed(f"cannot write snapshot {target}: {exc}") from exc

        logger.info("snapshot.created path=%s bytes=%d", target, len(payload))
        return target

    def list_snapshots(self, path: Path) -> List[SnapshotEntry]:
        """Return snapshots of ``path``, most recent first."""
        path = Path(path)
        base = path.name
        try:
            names = [entry.name for entry in path.parent.iterdir()]
        except OSError as exc:
            logger.warning("snapshot.list_failed dir=%s", path.parent, exc_info=exc)
            return []

        entries: List[SnapshotEntry] = []
        for name in names:
            if not name.startswith(base) or SNAPSHOT_SUFFIX not in name:
                continue
            match = _TIMESTAMP_PATTERN.match(name[len(base):])
            taken_at = parse_timestamp(match.group(1)) if match else None
            if taken_at is None:
                logger.debug("snapshot.unparseable name=%s", name)
                continue
            entries.append(SnapshotEntry(name=name, path=path.parent / name, taken_at=taken_at))

        entries.sort(key=lambda item: (item.taken_at, item.name), reverse=True)
        return entries


__all__ = ["BackupStore", "SnapshotEntry", "format_timestamp", "parse_timestamp", "snapshot_name"]

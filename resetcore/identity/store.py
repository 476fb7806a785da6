# SPDX-License-Identifier: AGPL-3.0-or-later
"""Read-merge-write access to the editor's ``storage.json`` record."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from resetcore.appdata.paths import HostEnvironment, resolve_record_path
from resetcore.errors import WriteFailed
from resetcore.identity.generator import IdentityTriple

logger = logging.getLogger(__name__)


class IdentityStore:
    """Owns the three telemetry keys and passes every other key through."""

    def __init__(self, env: HostEnvironment, app_name: str, record_path: Optional[str] = None) -> None:
        self.env = env
        self.app_name = app_name
        self.record_path = record_path

    def resolve_path(self) -> Path:
        return resolve_record_path(self.env, self.app_name, self.record_path)

    def load(self, path: Path) -> Dict[str, Any]:
        """Return the parsed record, or ``{}`` when it is missing or unreadable."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("record.missing path=%s", path)
            return {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("record.unreadable path=%s error=%s", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("record.not_an_object path=%s type=%s", path, type(data).__name__)
            return {}
        return data

    def merge_and_save(self, record: Dict[str, Any], triple: IdentityTriple, path: Path) -> Dict[str, Any]:
        merged = dict(record)
        merged.update(triple.as_record_fields())
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(merged, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise WriteFailed(f"cannot write {path}: {exc}") from exc
        logger.info("record.saved path=%s keys=%d", path, len(merged))
        return merged


__all__ = ["IdentityStore"]

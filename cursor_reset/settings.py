# SPDX-License-Identifier: AGPL-3.0-or-later
from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings
from platformdirs import PlatformDirs

APP_SLUG = "cursor-reset"


class Settings(BaseSettings):
    app_name: str = "Cursor"
    process_pattern: str = "cursor"
    self_pattern: str = APP_SLUG
    grace_seconds: float = Field(default=1.5, ge=0)
    assume_yes: bool = False
    record_path: str | None = None
    log_dir: str | None = Field(default=None, alias="CURSOR_RESET_LOG_DIR")

    model_config = {
        "env_prefix": "CURSOR_RESET_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def dirs(self) -> PlatformDirs:
        return PlatformDirs(appname=APP_SLUG, appauthor=False)

    def resolve_log_dir(self) -> Path:
        base = Path(self.log_dir).expanduser() if self.log_dir else Path(self.dirs().user_log_path)
        base.mkdir(parents=True, exist_ok=True)
        return base

    def log_file(self) -> Path:
        return self.resolve_log_dir() / f"{APP_SLUG}.log"


def load_settings(**overrides) -> Settings:
    return Settings(**{k: v for k, v in overrides.items() if v is not None})

# SPDX-License-Identifier: AGPL-3.0-or-later
"""Terminal implementation of the orchestrator's console port."""

from __future__ import annotations

import json
import os
import sys
from typing import Callable, Mapping, Optional, TextIO

from resetcore.orchestrator import ResetSummary


class TerminalConsole:
    def __init__(
        self,
        stream: Optional[TextIO] = None,
        prompt: Callable[[str], str] = input,
        *,
        as_json: bool = False,
    ) -> None:
        self.stream = stream or sys.stdout
        self._prompt = prompt
        self.as_json = as_json

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def info(self, message: str) -> None:
        if not self.as_json:
            self._write(f"[info] {message}")

    def success(self, message: str) -> None:
        if not self.as_json:
            self._write(f"[ok] {message}")

    def error(self, message: str) -> None:
        sys.stderr.write(f"[error] {message}\n")
        sys.stderr.flush()

    def confirm(self, question: str) -> bool:
        text = f"{question} (y/N): "
        try:
            if self.as_json:
                # stdout carries only the JSON summary
                sys.stderr.write(text)
                sys.stderr.flush()
                answer = self._prompt("")
            else:
                answer = self._prompt(text)
        except EOFError:
            return False
        return answer.strip().lower() == "y"

    def report(self, summary: ResetSummary) -> None:
        if self.as_json:
            self._write(summary.model_dump_json(indent=2, by_alias=True))
            return
        self._write("")
        self._write("Device identifiers reset. New values:")
        self._write(json.dumps(summary.identity(), indent=2))
        self._write("")
        self._write(f"Record: {summary.record_path}")
        self._write(f"Resets so far: {summary.reset_count}")
        if summary.snapshots:
            self._write("Backups (newest first):")
            for index, name in enumerate(summary.snapshots, start=1):
                self._write(f"  {index}. {name}")
        self._write("")
        self._write("You can start the editor again now.")


def needs_exit_pause(platform: str, env: Mapping[str, str]) -> bool:
    """Return ``True`` on Windows when ``TERM`` is unset."""
    return platform == "win32" and not env.get("TERM")


def wait_for_keypress(stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    out.write("\nPress any key to exit...\n")
    out.flush()
    if os.name == "nt":
        import msvcrt

        msvcrt.getwch()
        return
    try:
        input()
    except EOFError:
        pass

"""
Audit session — the per-run driver.

Owns the error/warning counters, reads pathnames, lstat()s each entry,
evaluates it against the policy, prints findings and applies remediation.
"""

from __future__ import annotations

import logging
import os
from typing import BinaryIO, Callable, Iterator

from rich.console import Console

from checkperms.checks.base import Finding, entry_kind, error, note
from checkperms.checks.policy import evaluate
from checkperms.fixer.executor import FixSettings, run_fix
from checkperms.ui.report import print_finding, print_summary

logger = logging.getLogger(__name__)


class InputError(Exception):
    """Malformed input that aborts the whole run."""


# ── Input ─────────────────────────────────────────────────────────────────────

def read_paths(stream: BinaryIO) -> Iterator[str]:
    """
    Yield one pathname per input line, without its trailing newline.

    Lines are decoded with the filesystem encoding so undecodable bytes
    survive the round trip to lstat(). An unterminated last line is still
    yielded. Raises InputError on the first line holding a NUL byte; lines
    before it have already been yielded.
    """
    for raw in stream:
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        if b"\0" in raw:
            raise InputError("NUL character in input.")
        yield os.fsdecode(raw)


# ── Session ───────────────────────────────────────────────────────────────────

class AuditSession:
    """
    Accumulates findings across one run.

    Every finding passes through emit(), which is the only place the
    counters change.
    """

    def __init__(
        self,
        console: Console,
        content_check: bool = False,
        fix: FixSettings | None = None,
        lstat: Callable[[str], os.stat_result] = os.lstat,
        chmod: Callable[[str, int], None] = os.chmod,
    ) -> None:
        self.console = console
        self.content_check = content_check
        self.fix = fix or FixSettings()
        self._lstat = lstat
        self._chmod = chmod
        self.errors = 0
        self.warnings = 0

    def emit(self, finding: Finding) -> None:
        if finding.severity == "error":
            self.errors += 1
        elif finding.severity == "warning":
            self.warnings += 1
        print_finding(self.console, finding)

    def check_path(self, path: str) -> None:
        """Audit one path: lstat, evaluate, report, remediate."""
        try:
            st = self._lstat(path)
        except OSError as e:
            self.emit(error(path, e.strerror or str(e)))
            return

        kind = entry_kind(st.st_mode)
        logger.debug("%s: %s %04o", path, kind, st.st_mode & 0o7777)

        result = evaluate(path, kind, st.st_mode, content_check=self.content_check)

        for finding in result.findings:
            self.emit(finding)
            if not finding.auto_fixable and self.fix.tier >= 2:
                self.emit(note(None, "won't fix this."))

        outcome = run_fix(result, self.fix, chmod=self._chmod)
        if outcome is not None:
            self.emit(outcome)

    def run(self, paths: Iterator[str]) -> None:
        for path in paths:
            self.check_path(path)

    def print_summary(self) -> None:
        print_summary(self.console, self.errors, self.warnings)

    def exit_code(self, error_on_warnings: bool = False) -> int:
        """1 if any error occurred, or any warning under error_on_warnings; else 0."""
        if self.errors:
            return 1
        if error_on_warnings and self.warnings:
            return 1
        return 0

"""
Fix executor — applies (or only reports) a remediation candidate.

Each call:
  - Receives an AuditResult and the active fix settings
  - Picks the candidate mode for the tier
  - chmod()s the path, or describes the change in dry-run mode
  - Returns the Finding to report, or None when nothing changes

Tiers:
  0  — no remediation
  1  — repair errors only            (-f / -n)
  2+ — repair errors and warnings    (-ff / -nn)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

from checkperms.checks.base import AuditResult, Finding, error, note, octal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixSettings:
    fix: int = 0        # number of -f options
    dry_run: int = 0    # number of -n options

    @property
    def enabled(self) -> bool:
        return bool(self.fix or self.dry_run)

    @property
    def tier(self) -> int:
        """2 when either option was repeated, 1 when given once, else 0."""
        if self.fix >= 2 or self.dry_run >= 2:
            return 2
        return 1 if self.enabled else 0

    @property
    def reports_only(self) -> bool:
        return self.dry_run > 0


def run_fix(
    result: AuditResult,
    settings: FixSettings,
    chmod: Callable[[str, int], None] = os.chmod,
) -> Optional[Finding]:
    """
    Apply the remediation candidate for settings.tier to result.path.

    Returns a note describing the change, an error if chmod() failed, or
    None when remediation is disabled or the candidate equals the original.
    """
    if not settings.enabled:
        return None

    fixed = result.fixed_mode(settings.tier)
    if fixed == result.unfixed:
        return None

    before, after = octal(result.unfixed), octal(fixed)

    if settings.reports_only:
        return note(result.path, f"would fix permissions from {before} to {after}.")

    try:
        chmod(result.path, fixed)
    except OSError as e:
        logger.debug("%s: chmod %s failed: %s", result.path, after, e)
        return error(result.path, f"Cannot fix permissions: {e.strerror}.")

    return note(result.path, f"fixed permissions from {before} to {after}.")

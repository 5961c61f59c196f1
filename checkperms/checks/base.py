"""
Core data model for checkperms.

Finding     — one diagnostic about one path.
AuditResult — everything a single evaluation pass derives from a mode.
EntryKind   — the file type that selects which rule subset applies.

Mode bits are plain ints in the 12-bit range (0o7777); the constants below
name the bits the policy reasons about.
"""

import stat
from dataclasses import dataclass, field
from typing import Literal, Optional


# ── Mode bits ─────────────────────────────────────────────────────────────────

S_ISUID = 0o4000
S_ISGID = 0o2000
S_ISVTX = 0o1000

S_IWUSR = 0o200
S_IXUSR = 0o100
S_IWGRP = 0o020
S_IXGRP = 0o010
S_IWOTH = 0o002
S_IXOTH = 0o001

PERM_MASK = 0o7777
EXEC_BITS = S_IXUSR | S_IXGRP | S_IXOTH     # 0o111
WRITE_BITS = 0o222
SETID_BITS = S_ISUID | S_ISGID              # 0o6000

# Read-only residuals the policy accepts once irrelevant bits are stripped.
ACCEPTED_RESIDUALS = frozenset((0o444, 0o440, 0o400, 0o000))

_RWX = ("---", "--x", "-w-", "-wx", "r--", "r-x", "rw-", "rwx")


def rwx(perms: int) -> str:
    """Render a 3-bit permission class, e.g. 6 → 'rw-'."""
    return _RWX[perms & 0o7]


def octal(mode: int) -> str:
    """Render a mode the way chmod(1) spells it, e.g. 0o644 → '0644'."""
    return f"{mode & PERM_MASK:04o}"


def split_classes(mode: int) -> tuple[int, int, int]:
    """Return the (owner, group, other) 3-bit permission classes."""
    return (mode >> 6) & 0o7, (mode >> 3) & 0o7, mode & 0o7


# ── Entry kinds ───────────────────────────────────────────────────────────────

EntryKind = Literal["regular", "directory", "symlink", "socket", "device", "fifo", "other"]


def entry_kind(st_mode: int) -> EntryKind:
    """Classify a full st_mode (as returned by lstat) into an EntryKind."""
    if stat.S_ISREG(st_mode):
        return "regular"
    if stat.S_ISDIR(st_mode):
        return "directory"
    if stat.S_ISLNK(st_mode):
        return "symlink"
    if stat.S_ISSOCK(st_mode):
        return "socket"
    if stat.S_ISCHR(st_mode) or stat.S_ISBLK(st_mode):
        return "device"
    if stat.S_ISFIFO(st_mode):
        return "fifo"
    return "other"


# ── Findings ──────────────────────────────────────────────────────────────────

Severity = Literal["error", "warning", "note"]


@dataclass(frozen=True)
class Finding:
    severity: Severity
    message: str                    # "group-writable file."
    path: Optional[str] = None      # None for session-level notes

    # False for warnings whose fix would widen a permission; those are
    # reported but never applied, even at the highest fix tier.
    auto_fixable: bool = True

    @property
    def text(self) -> str:
        """The finding as printed after the severity prefix."""
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


def error(path: Optional[str], message: str) -> Finding:
    return Finding("error", message, path)


def warning(path: Optional[str], message: str, auto_fixable: bool = True) -> Finding:
    return Finding("warning", message, path, auto_fixable=auto_fixable)


def note(path: Optional[str], message: str) -> Finding:
    return Finding("note", message, path)


# ── Audit result ──────────────────────────────────────────────────────────────

@dataclass
class AuditResult:
    path: str
    kind: EntryKind
    unfixed: int                # mode snapshot taken at audit time
    error_fixed: int            # unfixed with error-tier repairs applied
    warn_fixed: int             # error_fixed plus warning-tier repairs
    findings: list[Finding] = field(default_factory=list)

    def fixed_mode(self, tier: int) -> int:
        """
        Return the candidate mode for a remediation tier.

        Tier 0 and 1 repair errors only; tier 2 and above also repair
        warnings.
        """
        return self.warn_fixed if tier >= 2 else self.error_fixed

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "error"]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "warning"]

"""
Permission policy — the fixed rule set applied to every audited entry.

evaluate() is a pure function of (path, kind, mode, sniff verdict). It
never touches the mode it was given: the working copy `m` is only used for
the final residual comparison, while `err` and `warn` accumulate the two
remediation candidates.
"""

from typing import Callable

from checkperms.checks.base import (
    ACCEPTED_RESIDUALS,
    EXEC_BITS,
    PERM_MASK,
    S_ISGID,
    S_ISUID,
    S_ISVTX,
    S_IWGRP,
    S_IWOTH,
    S_IWUSR,
    S_IXGRP,
    S_IXOTH,
    S_IXUSR,
    SETID_BITS,
    WRITE_BITS,
    AuditResult,
    EntryKind,
    Finding,
    error,
    octal,
    rwx,
    split_classes,
    warning,
)
from checkperms.checks.magic import SniffVerdict, sniff

Sniffer = Callable[[str, int], SniffVerdict]

# Entry kinds the policy has no opinion on.
_UNCHECKED_KINDS = frozenset(("symlink", "socket", "device", "fifo"))


# ── Public API ────────────────────────────────────────────────────────────────

def evaluate(
    path: str,
    kind: EntryKind,
    mode: int,
    content_check: bool = False,
    sniffer: Sniffer = sniff,
) -> AuditResult:
    """
    Audit one entry against the policy.

    Args:
        path:          Path as given on input; used in messages and by the sniffer.
        kind:          Entry kind from lstat().
        mode:          Permission bits; anything above 0o7777 is ignored.
        content_check: If True, regular files with execute bits are sniffed.
        sniffer:       Content sniffer, replaceable for tests.

    Returns:
        An AuditResult holding the findings in detection order and both
        remediation candidates.
    """
    unfixed = mode & PERM_MASK
    result = AuditResult(
        path=path, kind=kind, unfixed=unfixed,
        error_fixed=unfixed, warn_fixed=unfixed,
    )

    if kind == "regular":
        _check_regular(result, content_check, sniffer)
    elif kind == "directory":
        _check_directory(result)
    elif kind in _UNCHECKED_KINDS:
        pass
    else:
        result.findings.append(warning(path, "unchecked file type."))

    return result


# ── Shared rules ──────────────────────────────────────────────────────────────

def _check_monotonic(path: str, mode: int, m: int, findings: list[Finding]) -> int:
    """
    Warn when group has rights the owner lacks, or other has rights group lacks.

    Fixing these would widen the owner or group class, so neither candidate
    changes; the returned working mode carries the widened classes so the
    residual check judges the mode as if it had been fixed.
    """
    u, g, o = split_classes(mode)

    if g & ~u:
        findings.append(warning(
            path,
            f"group permissions ({rwx(g)}) are higher than owner permissions ({rwx(u)}).",
            auto_fixable=False,
        ))
        m |= g << 6

    if o & ~g:
        findings.append(warning(
            path,
            f"other permissions ({rwx(o)}) are higher than group permissions ({rwx(g)}).",
            auto_fixable=False,
        ))
        m |= o << 3

    return m


def _check_residual(result: AuditResult, m: int, what: str) -> None:
    if m not in ACCEPTED_RESIDUALS:
        result.findings.append(warning(
            result.path,
            f"unchecked mode {octal(result.unfixed)}/{octal(m)} for {what}.",
        ))


# ── Regular files ─────────────────────────────────────────────────────────────

def _check_regular(result: AuditResult, content_check: bool, sniffer: Sniffer) -> None:
    path, findings = result.path, result.findings
    m = err = warn = result.unfixed

    if content_check and m & EXEC_BITS:
        verdict = sniffer(path, m)
        findings.extend(verdict.findings)
        if verdict.clear_exec_bit:
            m &= ~EXEC_BITS
            warn &= ~EXEC_BITS

    m = _check_monotonic(path, result.unfixed, m, findings)

    if m & SETID_BITS and m & WRITE_BITS:
        findings.append(warning(path, "set-uid or set-gid files should not be writable by anyone."))
        warn &= ~WRITE_BITS

    # Owner write access is not policed.
    m &= ~S_IWUSR

    if m & S_IWGRP:
        if m & SETID_BITS:
            findings.append(error(path, "group-writable set-uid/set-gid file."))
            err &= ~S_IWGRP
        else:
            findings.append(warning(path, "group-writable file."))
        warn &= ~S_IWGRP
        m &= ~S_IWGRP

    if m & S_IWOTH:
        if m & SETID_BITS:
            findings.append(error(path, "world-writable set-uid/set-gid file."))
        else:
            findings.append(error(path, "world-writable file."))
        err &= ~S_IWOTH
        warn &= ~S_IWOTH
        m &= ~S_IWOTH

    m &= ~EXEC_BITS
    m &= ~SETID_BITS

    _check_residual(result, m, "file")
    result.error_fixed, result.warn_fixed = err, warn


# ── Directories ───────────────────────────────────────────────────────────────

_CLASS_EXEC_BITS = (("owner", 6, S_IXUSR), ("group", 3, S_IXGRP), ("other", 0, S_IXOTH))


def _check_directory(result: AuditResult) -> None:
    path, findings = result.path, result.findings
    m = err = warn = result.unfixed

    # Read or write access on a directory requires search access.
    for name, shift, xbit in _CLASS_EXEC_BITS:
        perms = (m >> shift) & 0o7
        if perms & 0o6 and not perms & 0o1:
            findings.append(error(
                path, f"inconsistent {name} permissions ({rwx(perms)}) for directory.",
            ))
            err |= xbit
            warn |= xbit

    m = _check_monotonic(path, result.unfixed, m, findings)

    m &= ~EXEC_BITS
    m &= ~S_IWUSR

    # Sticky directories (e.g. /tmp) may be group- or world-writable.
    if not m & S_ISVTX and m & S_IWGRP:
        findings.append(warning(path, "group-writable directory."))
        warn &= ~S_IWGRP
    m &= ~S_IWGRP

    if not m & S_ISVTX and m & S_IWOTH:
        findings.append(error(path, "world-writable directory."))
        err &= ~S_IWOTH
        warn &= ~S_IWOTH
    m &= ~S_IWOTH

    m &= ~S_ISVTX
    m &= ~(S_ISGID | S_ISUID)

    _check_residual(result, m, "directory")
    result.error_fixed, result.warn_fixed = err, warn

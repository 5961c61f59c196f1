"""
Content sniffer — decides whether an executable bit is justified.

Reads the first four bytes of a file and compares them against an ordered
table of known executable signatures. Anything unrecognised is flagged and
its executable bits are proposed for removal.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal

from checkperms.checks.base import EXEC_BITS, SETID_BITS, Finding, warning

logger = logging.getLogger(__name__)

MAGIC_LENGTH = 4


# ── Verdict ───────────────────────────────────────────────────────────────────

@dataclass
class SniffVerdict:
    clear_exec_bit: bool = False
    findings: list[Finding] = field(default_factory=list)


# ── Signature table ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MagicSignature:
    name: str
    matches: Callable[[str, bytes], bool]   # (path, 4-byte prefix) -> bool
    verdict: Literal["keep", "warn"]
    message: str = ""                       # warning text for verdict="warn"


def _prefix(magic: bytes) -> Callable[[str, bytes], bool]:
    return lambda path, buf: buf.startswith(magic)


def _word(value: int) -> Callable[[str, bytes], bool]:
    """Match the prefix read as one big-endian 32-bit word."""
    return lambda path, buf: int.from_bytes(buf[:4], "big") == value


def _shebang_with_slash(path: str, buf: bytes) -> bool:
    return buf[:3] == b"#!/" or buf[:4] == b"#! /"


def _libtool_archive(path: str, buf: bytes) -> bool:
    # libtool .la files start with "# libfoo.la - a libtool library file"
    # and are commonly installed with a spurious executable bit.
    return path.endswith(".la") and buf.startswith(b"# ")


SIGNATURES: tuple[MagicSignature, ...] = (
    MagicSignature("elf", _prefix(b"\x7fELF"), "keep"),
    MagicSignature("script", _shebang_with_slash, "keep"),
    MagicSignature(
        "script_without_slash", _prefix(b"#!"), "warn",
        "#! without a following slash.",
    ),
    MagicSignature("dos", _prefix(b"MZ"), "keep"),
    MagicSignature("aix_binary", _word(0x01DF0004), "keep"),
    MagicSignature("aix_library", _prefix(b"<big"), "keep"),
    MagicSignature("macho_ppc", _word(0xFEEDFACE), "keep"),
    MagicSignature("macho_ppc64", _word(0xFEEDFACF), "keep"),
    MagicSignature("macho_i386", _word(0xCEFAEDFE), "keep"),
    MagicSignature("macho_x86_64", _word(0xCFFAEDFE), "keep"),
    # Universal binaries share their magic with Java class files.
    MagicSignature("macho_universal", _word(0xCAFEBABE), "keep"),
    MagicSignature("libtool_archive", _libtool_archive, "keep"),
)


# ── Public API ────────────────────────────────────────────────────────────────

def classify(path: str, buf: bytes) -> SniffVerdict:
    """
    Classify a 4-byte content prefix against SIGNATURES.

    The first "keep" match wins. A "warn" match records its warning and
    evaluation continues with the remaining signatures.
    """
    verdict = SniffVerdict()
    for sig in SIGNATURES:
        if not sig.matches(path, buf):
            continue
        if sig.verdict == "keep":
            logger.debug("%s: matched %s signature", path, sig.name)
            return verdict
        verdict.findings.append(warning(path, sig.message))

    verdict.findings.append(
        warning(path, "executable bit is set on non-executable file.")
    )
    verdict.clear_exec_bit = True
    return verdict


def sniff(path: str, mode: int) -> SniffVerdict:
    """
    Decide whether the executable bits of a regular file should be cleared.

    Args:
        path: Path of a regular file.
        mode: Its permission bits (0o7777 range).

    Returns:
        A SniffVerdict. Files that cannot be opened are never cleared;
        set-uid / set-gid files may be unreadable on purpose, so they are
        not reported either.
    """
    if not mode & EXEC_BITS:
        return SniffVerdict()

    try:
        with open(path, "rb") as fh:
            buf = fh.read(MAGIC_LENGTH)
    except OSError as e:
        logger.debug("%s: open failed: %s", path, e)
        if mode & SETID_BITS:
            return SniffVerdict()
        return SniffVerdict(findings=[warning(path, "could not be read.")])

    if len(buf) < MAGIC_LENGTH:
        return SniffVerdict(
            clear_exec_bit=True,
            findings=[warning(path, "too small to be a valid executable file.")],
        )

    return classify(path, buf)

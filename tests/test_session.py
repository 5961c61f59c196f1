"""
Tests for session.py.

Covers:
  - read_paths:   newline stripping, NUL rejection, undecodable bytes
  - AuditSession: counters, lstat failures, won't-fix notes, remediation,
                  exit codes
"""

import io
import os
import stat
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from checkperms.checks.base import error, warning
from checkperms.fixer.executor import FixSettings
from checkperms.session import AuditSession, InputError, read_paths


def _session(console, modes: dict, **kwargs) -> AuditSession:
    """Build a session whose lstat() answers from a {path: st_mode} table."""
    def lstat(path):
        if path not in modes:
            raise FileNotFoundError(2, "No such file or directory", path)
        return SimpleNamespace(st_mode=modes[path])

    kwargs.setdefault("chmod", MagicMock())
    return AuditSession(console, lstat=lstat, **kwargs)


# ── read_paths ────────────────────────────────────────────────────────────────

class TestReadPaths:
    def test_strips_trailing_newline(self):
        assert list(read_paths(io.BytesIO(b"/a\n/b c\n"))) == ["/a", "/b c"]

    def test_unterminated_last_line_is_kept(self):
        assert list(read_paths(io.BytesIO(b"/a\n/b"))) == ["/a", "/b"]

    def test_empty_input(self):
        assert list(read_paths(io.BytesIO(b""))) == []

    def test_nul_byte_is_fatal(self):
        paths = read_paths(io.BytesIO(b"/ok\n/bad\0path\n/never\n"))
        assert next(paths) == "/ok"
        with pytest.raises(InputError):
            next(paths)

    def test_undecodable_bytes_survive(self):
        [path] = read_paths(io.BytesIO(b"/tmp/\xff\n"))
        assert os.fsencode(path) == b"/tmp/\xff"


# ── AuditSession ──────────────────────────────────────────────────────────────

class TestAuditSession:
    def test_emit_counts_by_severity(self, capture):
        con, _ = capture
        s = AuditSession(con)
        s.emit(error("/a", "e."))
        s.emit(warning("/a", "w."))
        s.emit(warning("/b", "w."))
        assert (s.errors, s.warnings) == (1, 2)

    def test_clean_file_prints_nothing(self, capture):
        con, buf = capture
        s = _session(con, {"/f": stat.S_IFREG | 0o644})
        s.check_path("/f")
        assert buf.getvalue() == ""
        assert (s.errors, s.warnings) == (0, 0)

    def test_lstat_failure_is_an_error_and_continues(self, capture):
        con, buf = capture
        s = _session(con, {"/f": stat.S_IFREG | 0o666})
        s.run(iter(["/missing", "/f"]))
        lines = buf.getvalue().splitlines()
        assert lines[0] == "error: /missing: No such file or directory"
        assert "error: /f: world-writable file." in lines
        assert s.errors == 2

    def test_findings_printed_in_order(self, capture):
        con, buf = capture
        s = _session(con, {"/d": stat.S_IFDIR | 0o644})
        s.check_path("/d")
        assert buf.getvalue().splitlines() == [
            "error: /d: inconsistent owner permissions (rw-) for directory.",
            "error: /d: inconsistent group permissions (r--) for directory.",
        ]

    def test_no_wont_fix_note_at_tier_one(self, capture):
        con, buf = capture
        s = _session(con, {"/f": stat.S_IFREG | 0o044}, fix=FixSettings(dry_run=1))
        s.check_path("/f")
        assert "won't fix this." not in buf.getvalue()

    def test_wont_fix_note_at_tier_two(self, capture):
        con, buf = capture
        s = _session(con, {"/f": stat.S_IFREG | 0o044}, fix=FixSettings(dry_run=2))
        s.check_path("/f")
        assert buf.getvalue().splitlines() == [
            "warning: /f: group permissions (r--) are higher than owner permissions (---).",
            "note: won't fix this.",
        ]

    def test_notes_are_not_counted(self, capture):
        con, _ = capture
        s = _session(con, {"/f": stat.S_IFREG | 0o664}, fix=FixSettings(dry_run=2))
        s.check_path("/f")
        assert (s.errors, s.warnings) == (0, 1)

    def test_fix_applies_chmod(self, capture):
        con, buf = capture
        chmod = MagicMock()
        s = _session(con, {"/f": stat.S_IFREG | 0o666}, fix=FixSettings(fix=1), chmod=chmod)
        s.check_path("/f")
        chmod.assert_called_once_with("/f", 0o664)
        assert buf.getvalue().splitlines()[-1] == "note: /f: fixed permissions from 0666 to 0664."

    def test_dry_run_does_not_chmod(self, capture):
        con, buf = capture
        chmod = MagicMock()
        s = _session(con, {"/f": stat.S_IFREG | 0o666}, fix=FixSettings(dry_run=2), chmod=chmod)
        s.check_path("/f")
        chmod.assert_not_called()
        assert buf.getvalue().splitlines()[-1] == "note: /f: would fix permissions from 0666 to 0644."

    def test_chmod_failure_counts_as_error(self, capture):
        con, _ = capture
        chmod = MagicMock(side_effect=PermissionError(1, "Operation not permitted"))
        s = _session(con, {"/f": stat.S_IFREG | 0o666}, fix=FixSettings(fix=1), chmod=chmod)
        s.check_path("/f")
        assert s.errors == 2

    def test_content_check_sniffs_real_file(self, capture, tmp_path):
        con, buf = capture
        f = tmp_path / "notes.txt"
        f.write_text("just text\n")
        os.chmod(f, 0o755)
        s = AuditSession(con, content_check=True)
        s.check_path(str(f))
        assert f"warning: {f}: executable bit is set on non-executable file." in buf.getvalue()
        assert s.warnings == 1

    def test_symlink_is_not_followed(self, capture, tmp_path):
        con, buf = capture
        target = tmp_path / "target"
        target.write_text("x")
        os.chmod(target, 0o666)
        link = tmp_path / "link"
        link.symlink_to(target)
        s = AuditSession(con)
        s.check_path(str(link))
        assert buf.getvalue() == ""


class TestExitCode:
    @pytest.mark.parametrize(
        "errors, warnings, strict, code",
        [(0, 0, False, 0), (0, 1, False, 0), (0, 1, True, 1), (1, 0, False, 1), (1, 0, True, 1)],
    )
    def test_exit_code(self, capture, errors, warnings, strict, code):
        con, _ = capture
        s = AuditSession(con)
        s.errors, s.warnings = errors, warnings
        assert s.exit_code(error_on_warnings=strict) == code

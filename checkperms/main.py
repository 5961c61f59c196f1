"""
checkperms — entry point.

CLI flags, stdin loop, exit status.
"""

import io
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from checkperms import __version__
from checkperms.config import apply_config
from checkperms.fixer.executor import FixSettings
from checkperms.session import AuditSession, InputError, read_paths
from checkperms.ui.theme import CHECKPERMS_THEME


# ── Console (shared across the tool) ─────────────────────────────────────────

console = Console(theme=CHECKPERMS_THEME)


# ── CLI ───────────────────────────────────────────────────────────────────────

@click.command(name="checkperms", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name="checkperms")
@click.option("-c", "content_check", is_flag=True, default=False,
              help="Check file contents to decide whether executable bits are justified.")
@click.option("-e", "error_on_warnings", is_flag=True, default=False,
              help="Exit with failure status if any warnings occurred.")
@click.option("-f", "fix", count=True,
              help="Fix permissions. Once: errors only. Twice: errors and warnings.")
@click.option("-n", "dry_run", count=True,
              help="Like -f, but only report what would be fixed.")
@click.option("-q", "quiet", is_flag=True, default=False,
              help="Do not print the closing summary line.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    is_eager=True,
    expose_value=False,
    callback=apply_config,
    help="Read default options from this TOML file.",
)
@click.option("--debug", is_flag=True, default=False, help="Log diagnostics to stderr.")
def cli(
    content_check: bool,
    error_on_warnings: bool,
    fix: int,
    dry_run: int,
    quiet: bool,
    debug: bool,
) -> None:
    """Audit file permissions against a fixed security policy.

    Reads one pathname per line from standard input. Symbolic links are
    never followed.

    \b
    Examples:
      find /usr/pkg -print | checkperms -c
      find /etc -print | checkperms -nn
    """
    if debug:
        _configure_logging()

    _accept_raw_paths(sys.stdout)

    session = AuditSession(
        console,
        content_check=content_check,
        fix=FixSettings(fix=fix, dry_run=dry_run),
    )

    try:
        session.run(read_paths(sys.stdin.buffer))
    except InputError as e:
        click.echo(f"<stdin>: error: {e}", err=True)
        raise SystemExit(1)

    if not quiet:
        session.print_summary()

    raise SystemExit(session.exit_code(error_on_warnings=error_on_warnings))


# ── Output encoding ───────────────────────────────────────────────────────────

def _accept_raw_paths(stream) -> None:
    """
    Let stdout re-encode undecodable pathname bytes unchanged.

    read_paths() decodes with os.fsdecode, which maps such bytes to lone
    surrogates; surrogateescape turns them back into the original bytes.
    """
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(errors="surrogateescape")


# ── Logging ───────────────────────────────────────────────────────────────────

def _configure_logging() -> None:
    """Send debug logs to stderr so the report on stdout stays parseable."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ── Entry ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    cli()

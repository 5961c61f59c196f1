"""
Report renderer.

One line per finding:

    error: /usr/bin/foo: world-writable file.
    warning: /etc/motd: group-writable file.
    note: /etc/motd: would fix permissions from 0664 to 0644.

and an optional closing summary:

    1 errors and 1 warnings.

On a terminal only the severity prefix goes through rich. The finding text
holds the pathname exactly as read from input (tabs, carriage returns and
undecodable bytes included), so it is written straight to the console file.
"""

from rich.console import Console
from rich.text import Text

from checkperms.checks.base import Finding
from checkperms.ui.theme import SEVERITY_STYLES, STYLE_DIM


def render_prefix(finding: Finding) -> Text:
    """Return the `severity: ` prefix styled by severity."""
    return Text(f"{finding.severity}: ", style=SEVERITY_STYLES[finding.severity])


def print_finding(console: Console, finding: Finding) -> None:
    if not console.is_terminal:
        console.file.write(f"{finding.severity}: {finding.text}\n")
        return
    console.print(render_prefix(finding), end="", soft_wrap=True, highlight=False)
    console.file.write(f"{finding.text}\n")


def render_summary(errors: int, warnings: int) -> Text:
    return Text(f"{errors} errors and {warnings} warnings.", style=STYLE_DIM)


def print_summary(console: Console, errors: int, warnings: int) -> None:
    """Print the closing summary; nothing when the run was clean."""
    if errors == 0 and warnings == 0:
        return
    console.print(render_summary(errors, warnings), soft_wrap=True, highlight=False)

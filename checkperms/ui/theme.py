"""
checkperms visual design system.

All colors and styles as named constants.
Import from here — never hardcode markup strings in other modules.

Colour is only emitted when stdout is a terminal; piped output stays the
plain `severity: text` format other tools parse.
"""

from rich.style import Style
from rich.theme import Theme


# ── Color palette ─────────────────────────────────────────────────────────────

COLOR_ERROR    = "#E05252"      # Warm severity red
COLOR_WARNING  = "#D4870A"      # Amber
COLOR_NOTE     = "#5BA3C9"      # Slate blue
COLOR_DIM      = "#787878"      # Medium gray


# ── Rich styles ───────────────────────────────────────────────────────────────

STYLE_ERROR   = Style(color=COLOR_ERROR,   bold=True)
STYLE_WARNING = Style(color=COLOR_WARNING, bold=True)
STYLE_NOTE    = Style(color=COLOR_NOTE)
STYLE_DIM     = Style(color=COLOR_DIM)

SEVERITY_STYLES: dict[str, Style] = {
    "error": STYLE_ERROR,
    "warning": STYLE_WARNING,
    "note": STYLE_NOTE,
}


# ── Rich Theme ────────────────────────────────────────────────────────────────

CHECKPERMS_THEME = Theme(
    {
        "error":   f"{COLOR_ERROR} bold",
        "warning": f"{COLOR_WARNING} bold",
        "note":    COLOR_NOTE,
        "dim":     COLOR_DIM,
    }
)

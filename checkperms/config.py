"""
Option defaults for checkperms.

~/.config/checkperms/config.toml may switch on `-c`, `-e` or `-q` by
default:

    content_check = true
    error_on_warnings = false
    quiet = true

The file feeds click's default_map, so a flag given on the command line
still wins. The policy itself is not configurable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "checkperms" / "config.toml"

# Config keys are the click parameter names of the flags they default.
OPTION_KEYS = ("content_check", "error_on_warnings", "quiet")


def load_defaults(path: Optional[Path] = None) -> dict[str, bool]:
    """
    Return the boolean option defaults found in a TOML file.

    Missing, unreadable or malformed files give {}; keys that are unknown
    or not booleans are dropped one by one.
    """
    config_path = path or CONFIG_PATH
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("ignoring %s: %s", config_path, e)
        return {}

    return {
        key: data[key]
        for key in OPTION_KEYS
        if isinstance(data.get(key), bool)
    }


def apply_config(ctx: click.Context, param: click.Parameter, value: Optional[Path]) -> Optional[Path]:
    """Eager --config callback: merge the file's defaults into ctx.default_map."""
    ctx.default_map = {**(ctx.default_map or {}), **load_defaults(value)}
    return value

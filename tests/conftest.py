"""
Shared pytest fixtures.
"""
from io import StringIO

import pytest
from rich.console import Console

from checkperms import main
from checkperms.ui.theme import CHECKPERMS_THEME


def _plain_console(**kwargs) -> Console:
    return Console(
        theme=CHECKPERMS_THEME, no_color=True, highlight=False, force_terminal=False, **kwargs
    )


@pytest.fixture(autouse=True)
def plain_console(monkeypatch):
    """Keep CLI output free of escape codes regardless of the test environment."""
    monkeypatch.setattr(main, "console", _plain_console())


@pytest.fixture
def capture() -> tuple[Console, StringIO]:
    """Return a Console that captures plain output in a StringIO buffer."""
    buf = StringIO()
    return _plain_console(file=buf), buf

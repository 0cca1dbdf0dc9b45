"""Plain-text output for the envgate CLI.

Colour is used only for the OK/FAIL markers, only on a terminal, and never
when ``--no-color`` is passed or ``NO_COLOR`` is set.
"""

from __future__ import annotations

import os
import sys
from typing import Final

_GREEN: Final[str] = "\x1b[32m"
_RED: Final[str] = "\x1b[31m"
_RESET: Final[str] = "\x1b[0m"


def _use_color(no_color: bool) -> bool:
    if no_color or os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


class CLIRenderer:
    """Writes human-readable CLI output to stdout."""

    def __init__(self, *, no_color: bool = False, verbose: bool = False) -> None:
        self.verbose = verbose
        self._color = _use_color(no_color)

    def heading(self, text: str) -> None:
        print(text)

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def text(self, line: str) -> None:
        print(line)

    def ok(self, label: str) -> None:
        print(f"  {self._marker('OK', _GREEN)}  {label}")

    def fail(self, label: str) -> None:
        print(f"  {self._marker('FAIL', _RED)}  {label}")

    def _marker(self, text: str, color: str) -> str:
        return f"{color}{text}{_RESET}" if self._color else text


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]

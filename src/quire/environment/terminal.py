"""ANSI styling for Quire error reports.

Colours are on when FORCE_COLOR is set, off when NO_COLOR is set, and
otherwise follow whether stdout is a TTY. Styles are named by the part of
the report they mark, not by colour.
"""

from __future__ import annotations

import os
import sys
from typing import Literal

Role = Literal["code", "location", "lineno", "error", "dim", "url"]

_RESET = "\033[0m"

_STYLES: dict[str, str] = {
    "code": "\033[91m\033[1m",
    "location": "\033[36m",
    "lineno": "\033[33m",
    "error": "\033[91m",
    "dim": "\033[2m",
    "url": "\033[94m",
}


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def style(text: str, role: Role) -> str:
    """Wrap ``text`` in the escape codes for ``role`` when colours are on."""
    if not _USE_COLORS:
        return text
    return f"{_STYLES[role]}{text}{_RESET}"


def format_error_header(code: str | None, message: str) -> str:
    return f"{style(code, 'code')}: {message}" if code else message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """One numbered source line; the failing line is marked with ``>``.

    Example:
        >>> format_source_line(3, "emit(1 / 0)", is_error=True)  # colours off
        '>  3 | emit(1 / 0)'
    """
    marker = ">" if is_error else " "
    number = style(f"{marker}{lineno:>3}", "lineno")
    return f"{number} | {style(content, 'error' if is_error else 'dim')}"

"""
Terminal output helpers for gh-signoff.

Provides the status glyphs and ANSI color helpers used for every line the CLI
prints. Respects NO_COLOR, FORCE_COLOR, and TTY detection.

Usage:
    from gh_signoff.colors import Symbol, success, error

    print(success(f"{Symbol.SUCCESS} Signed off on abc1234"))
    print(error(f"{Symbol.FAILURE} tests"), file=sys.stderr)

Environment Variables:
    NO_COLOR=1      Disable all colors (https://no-color.org/)
    FORCE_COLOR=1   Force colors even in non-TTY
    TERM=dumb       Disable colors for dumb terminals
"""
import os
import sys
from enum import Enum


class Symbol(str, Enum):
    """Status glyphs."""

    SUCCESS = '✓'
    FAILURE = '✗'
    PENDING = '⏳'

    def __str__(self) -> str:
        return self.value


class Colors:
    """ANSI escape code constants."""

    RESET = '\033[0m'
    BOLD = '\033[1m'
    GRAY = '\033[90m'
    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'


def _supports_color() -> bool:
    """
    Check if terminal supports colors.

    Checks in order:
    1. NO_COLOR env var - disables colors
    2. FORCE_COLOR env var - forces colors on
    3. stdout.isatty() - must be a TTY
    4. TERM != 'dumb'
    """
    if os.environ.get('NO_COLOR'):
        return False

    if os.environ.get('FORCE_COLOR'):
        return True

    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False

    return os.environ.get('TERM', '') != 'dumb'


# Cache the result (can be reset for testing by setting to None)
_color_enabled = None


def colors_enabled() -> bool:
    """Check if colors are enabled (cached)."""
    global _color_enabled
    if _color_enabled is None:
        _color_enabled = _supports_color()
    return _color_enabled


def _wrap(text: str, color: str) -> str:
    if not colors_enabled():
        return text
    return f"{color}{text}{Colors.RESET}"


def success(text: str) -> str:
    """Green text for success lines (✓)."""
    return _wrap(text, Colors.BRIGHT_GREEN)


def error(text: str) -> str:
    """Red text for failures and errors (✗)."""
    return _wrap(text, Colors.BRIGHT_RED)


def warning(text: str) -> str:
    return _wrap(text, Colors.BRIGHT_YELLOW)


def dim(text: str) -> str:
    return _wrap(text, Colors.GRAY)



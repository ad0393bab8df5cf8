"""
Interactive prompts for gh-signoff.

Only used where a command is about to do more than the user may expect
(``uninstall`` drops the whole branch protection). Prompts are skipped when
stdin is not a terminal, so scripts and CI run unattended.
"""
import sys

from InquirerPy import inquirer


def is_interactive() -> bool:
    """True if stdin is attached to a terminal."""
    return hasattr(sys.stdin, 'isatty') and sys.stdin.isatty()


def confirm(message: str, default: bool = False) -> bool:
    """
    Yes/no confirmation prompt.

    Args:
        message: Prompt message to display
        default: Value used when the user just presses Enter

    Returns:
        True for yes, False for no
    """
    return inquirer.confirm(message=message, default=default).execute()

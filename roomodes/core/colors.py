"""
Terminal color utilities for the roomodes validator.

ANSI color codes and formatting helpers for the validation transcript.
Colors are only emitted when stdout is a TTY, so piped output and captured
test output stay plain.
"""

import sys


class Colors:
    """ANSI color codes for terminal output."""
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'

    BOLD = '\033[1m'

    RESET = '\033[0m'


def colorize(text: str, color: str) -> str:
    """
    Add color to text if stdout is a TTY.

    Args:
        text: Text to colorize
        color: ANSI color code from Colors class

    Returns:
        Colored text if TTY, plain text otherwise
    """
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text


def success(text: str) -> str:
    """Format text as success (green)."""
    return colorize(text, Colors.GREEN)


def error(text: str) -> str:
    """Format text as error (red)."""
    return colorize(text, Colors.RED)


def warning(text: str) -> str:
    """Format text as warning (yellow)."""
    return colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    """Format text as info (blue)."""
    return colorize(text, Colors.BLUE)


def bold(text: str) -> str:
    return colorize(text, Colors.BOLD)

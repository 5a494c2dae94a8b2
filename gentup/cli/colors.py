"""Color output support for gentup CLI.

Color palette:
  - Red: errors and alerts
  - Orange: warnings, things that need attention
  - Green: success/ok, workflow steps
  - Blue: nothing to do

Status lines are prefixed with chevrons: ">>>" announces a step, "<<<"
reports what a step found.
"""

import os
import sys

# ANSI color codes
_COLORS = {
    'reset': '\033[0m',
    # Palette
    'red': '\033[91m',      # Bright red for errors/alerts
    'orange': '\033[93m',   # Yellow/orange for warnings (no true orange in ANSI)
    'green': '\033[92m',    # Bright green for success
    'blue': '\033[94m',     # Bright blue for info
}

# Global state
_colors_enabled = True


def init(nocolor: bool = False):
    """Initialize color support.

    Args:
        nocolor: If True, disable colors unconditionally
    """
    global _colors_enabled

    if nocolor:
        _colors_enabled = False
    elif os.environ.get('NO_COLOR'):
        # Respect NO_COLOR environment variable (https://no-color.org/)
        _colors_enabled = False
    elif not sys.stdout.isatty():
        _colors_enabled = False
    else:
        _colors_enabled = True


def _wrap(text: str, color: str) -> str:
    if not _colors_enabled:
        return text
    code = _COLORS.get(color, '')
    reset = _COLORS['reset']
    return f"{code}{text}{reset}"


def error(text: str) -> str:
    """Format text as error (red)."""
    return _wrap(text, 'red')


def warning(text: str) -> str:
    """Format text as warning (orange/yellow)."""
    return _wrap(text, 'orange')


def success(text: str) -> str:
    """Format text as success (green)."""
    return _wrap(text, 'green')


def info(text: str) -> str:
    """Format text as info (blue)."""
    return _wrap(text, 'blue')


def chevrons(color_func=success) -> str:
    """">>>" in the given color, prefix for a workflow step."""
    return color_func('>>>')


def revchevrons(color_func=success) -> str:
    """"<<<" in the given color, prefix for a step result."""
    return color_func('<<<')


def step(text: str) -> str:
    return f"{chevrons()} {text}"


def found(text: str, color_func=success) -> str:
    return f"{revchevrons(color_func)} {text}"

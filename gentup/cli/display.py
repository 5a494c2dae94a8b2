"""Display utilities for gentup CLI.

Pending updates are shown as short package names laid out in columns that
fit the terminal:

    sys-apps/portage    sys-devel/gcc       dev-lang/python
    app-misc/tmux
"""

import re
import shutil
from typing import Callable, List, Optional

_VERSION_RE = re.compile(r'(.*?)-[0-9].*')


def get_terminal_width() -> int:
    """Get terminal width, with fallback to 80 columns."""
    try:
        return shutil.get_terminal_size().columns
    except Exception:
        return 80


def shorten(atom: str) -> str:
    """Drop version and repository from a package atom.

    e.g. sys-cluster/kube-scheduler-1.29.1::gentoo -> sys-cluster/kube-scheduler
    """
    match = _VERSION_RE.match(atom)
    if match:
        return match.group(1)
    return atom.split('::', 1)[0]


def format_package_list(
    packages: List[str],
    indent: int = 0,
    column_gap: int = 4,
    color_func: Optional[Callable[[str], str]] = None,
    terminal_width: Optional[int] = None
) -> List[str]:
    """Format package atoms in a multi-column layout.

    Args:
        packages: Package atoms, shortened before display
        indent: Spaces to indent
        column_gap: Gap between columns
        color_func: Optional colorize function
        terminal_width: Override terminal width (for testing)

    Returns:
        List of formatted lines ready to print
    """
    if not packages:
        return []

    names = [shorten(p) for p in packages]
    width = terminal_width or get_terminal_width()
    usable_width = width - indent

    col_width = max(len(n) for n in names) + column_gap
    num_cols = max(1, usable_width // col_width)

    result = []
    prefix = " " * indent
    for start in range(0, len(names), num_cols):
        cols = []
        for name in names[start:start + num_cols]:
            padding = " " * (col_width - len(name))
            cols.append((color_func(name) if color_func else name) + padding)
        result.append(prefix + "".join(cols).rstrip())

    return result


def print_package_list(packages: List[str], **kwargs) -> None:
    """Print package atoms in columns, surrounded by blank lines."""
    print()
    for line in format_package_list(packages, **kwargs):
        print(line)
    print()

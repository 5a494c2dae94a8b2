"""
Classifiers for Portage tool output.

All functions here are pure: they take text already captured by the runner
and return plain values. Unexpected input degrades to the "nothing found"
answer instead of raising, so the workflow decides what a miss means.
"""

from dataclasses import dataclass
from typing import List, Tuple

# emerge -p output: "[ebuild     U  ] sys-apps/portage-3.0.63::gentoo [3.0.62::gentoo]"
EBUILD_MARKER = '[ebuild'

# emerge -p --depclean output: "Number to remove:     3"
DEPCLEAN_COUNT_MARKER = 'Number to remove'
DEPCLEAN_COUNT_FIELD = 3

# depclean lists versions of a package on an indented "selected:" line
DEPCLEAN_SELECTED_MARKER = 'selected:'

KERNEL_MARKERS = ('gentoo-kernel', 'gentoo-sources')

# revdep-rebuild -ip output
CONSISTENT_MARKER = 'Your system is consistent'


@dataclass(frozen=True)
class OrphanReport:
    """What a depclean dry run says it would remove."""
    count: int = 0
    kernel_lines: int = 0
    kernel_tokens: Tuple[str, ...] = ()

    @property
    def has_kernels(self) -> bool:
        return self.kernel_lines > 0

    def involves_kernel(self, running_kernel: str) -> bool:
        """True if a kernel package in the report matches running_kernel.

        An unknown (empty) running kernel matches any kernel line.
        """
        if not self.has_kernels:
            return False
        if not running_kernel:
            return True
        return any(running_kernel in token for token in self.kernel_tokens)


def strip_non_numeric(text: str) -> str:
    """Keep only the digits of text ("6.6.58-gentoo-dist" -> "6658")."""
    return ''.join(c for c in text if c.isdigit())


def pending_updates(text: str) -> List[str]:
    """Extract package atoms from `emerge -puDv @world` output.

    Returns:
        Package atoms in output order, e.g. ['sys-apps/portage-3.0.63::gentoo'].
        An empty list means nothing is pending.
    """
    packages = []
    for line in text.splitlines():
        if not line.startswith(EBUILD_MARKER):
            continue
        parts = line.split(']', 2)
        words = parts[1].split() if len(parts) > 1 else []
        if not words:
            break
        packages.append(words[0])
    return packages


def _count_from(line: str) -> int:
    words = line.split()
    if len(words) <= DEPCLEAN_COUNT_FIELD:
        return 0
    try:
        return int(words[DEPCLEAN_COUNT_FIELD])
    except ValueError:
        return 0


def orphans(text: str) -> OrphanReport:
    """Classify `emerge -p --depclean` output.

    A missing count line means zero orphans.
    """
    count = 0
    kernel_lines = 0
    tokens = []
    waiting_for_version = False

    for line in text.splitlines():
        if any(marker in line for marker in KERNEL_MARKERS):
            kernel_lines += 1
            digits = strip_non_numeric(line)
            if digits:
                tokens.append(digits)
                waiting_for_version = False
            else:
                waiting_for_version = True
            continue

        if waiting_for_version and line.strip().startswith(DEPCLEAN_SELECTED_MARKER):
            digits = strip_non_numeric(line)
            if digits:
                tokens.append(digits)
            waiting_for_version = False

        if line.startswith(DEPCLEAN_COUNT_MARKER):
            count = _count_from(line)

    return OrphanReport(count=count, kernel_lines=kernel_lines, kernel_tokens=tuple(tokens))


def system_consistent(text: str) -> bool:
    """True if revdep-rebuild reported a consistent system anywhere in text."""
    return any(line.startswith(CONSISTENT_MARKER) for line in text.splitlines())


def news_count(text: str) -> int:
    """Parse `eselect news count new` output, 0 if it is not a number."""
    try:
        return int(text.strip())
    except ValueError:
        return 0

"""Kernel preservation for dependency cleanup.

`emerge --depclean` happily lists the package that provides the running
kernel once a newer kernel is installed. The guard decides, from a dry-run
OrphanReport and the identity of the running kernel, whether a real depclean
may be issued.
"""

import logging
from enum import Enum

from .classify import OrphanReport

logger = logging.getLogger(__name__)


class CleanupPlan(Enum):
    """What the workflow may do after a depclean dry run."""
    NO_ACTION = "no-action"
    EXCLUDE_KERNEL_PACKAGES = "exclude-kernel-packages"
    FULL_CLEANUP = "full-cleanup"


def guard_cleanup(orphans: OrphanReport, running_kernel: str,
                  cleanup_requested: bool) -> CleanupPlan:
    """Choose the cleanup plan.

    Any kernel package among the orphans blocks a real depclean unless the
    operator asked for cleanup explicitly (--cleanup). --force has no say
    here. The running kernel identity only feeds the diagnostics.

    Args:
        orphans: Result of the depclean dry run
        running_kernel: Digits of the running kernel release
        cleanup_requested: Operator asked for cleanup explicitly

    Returns:
        CleanupPlan
    """
    if orphans.count <= 0:
        return CleanupPlan.NO_ACTION

    if orphans.has_kernels:
        if not cleanup_requested:
            logger.debug("%d kernel package(s) among %d orphans (running %s)",
                         orphans.kernel_lines, orphans.count, running_kernel)
            return CleanupPlan.EXCLUDE_KERNEL_PACKAGES
        if orphans.involves_kernel(running_kernel):
            logger.warning("Cleanup requested: running kernel %s may be removed",
                           running_kernel)

    return CleanupPlan.FULL_CLEANUP

"""CLI command modules."""

from .update import (
    cmd_update,
    Updater,
    WorkflowState,
)
from .setup import (
    cmd_setup,
)

__all__ = [
    # Update cycle
    'cmd_update',
    'Updater',
    'WorkflowState',
    # Setup
    'cmd_setup',
]

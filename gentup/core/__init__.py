"""Core modules for gentup"""

from .errors import GentupError, EnvironmentCheckError, CommandFailed, OperatorQuit
from .runner import CommandSpec, ExecutionMode, ShellOutResult, run, must_succeed
from .classify import OrphanReport
from .guard import CleanupPlan, guard_cleanup

__all__ = [
    'GentupError', 'EnvironmentCheckError', 'CommandFailed', 'OperatorQuit',
    'CommandSpec', 'ExecutionMode', 'ShellOutResult', 'run', 'must_succeed',
    'OrphanReport', 'CleanupPlan', 'guard_cleanup',
]

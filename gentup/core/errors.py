"""Exceptions raised by gentup.

Every fatal condition derives from GentupError so the CLI can report it once
and exit with status 1.
"""


class GentupError(Exception):
    """Base class for fatal gentup errors."""


class EnvironmentCheckError(GentupError):
    """The host is not fit for an update run (wrong distro, not root...)."""


class CommandFailed(GentupError):
    """An external command could not be spawned or exited non-zero."""

    def __init__(self, spec, result):
        self.spec = spec
        self.result = result
        if result.error is not None:
            message = f"There was a problem executing '{spec}': {result.error}"
        else:
            message = f"'{spec}' exited with status {result.returncode}"
        super().__init__(message)


class OperatorQuit(Exception):
    """The operator answered 'quit' at a confirmation prompt."""

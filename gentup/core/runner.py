"""
External command execution.

Every package-manager call goes through run(), under one of three modes:

- INTERACTIVE: the child inherits the terminal, nothing is captured
- CAPTURED:    stdout is captured, a spinner is drawn while the child runs
- SILENT:      stdout and stderr are captured, nothing reaches the terminal

run() never turns a non-zero exit status into an error; callers decide what
the status means. must_succeed() is the uniform fatal policy for callers that
need the command to have worked.
"""

import itertools
import logging
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .errors import CommandFailed

logger = logging.getLogger(__name__)

SPINNER_FRAMES = '|/-\\'
SPINNER_INTERVAL = 0.1  # seconds


class ExecutionMode(Enum):
    """How a child process is attached to the terminal."""
    INTERACTIVE = "interactive"
    CAPTURED = "captured"
    SILENT = "silent"


@dataclass(frozen=True)
class CommandSpec:
    """A program, its arguments and a status label for the operator."""
    program: str
    args: Tuple[str, ...] = ()
    label: str = ""

    @classmethod
    def parse(cls, command_line: str, label: str = "") -> 'CommandSpec':
        """Build a spec from a whitespace-separated command line.

        No quoting and no shell expansion: compound arguments must be
        pre-split by the caller.
        """
        words = command_line.split()
        if not words:
            raise ValueError("empty command line")
        return cls(program=words[0], args=tuple(words[1:]), label=label)

    @property
    def argv(self) -> list:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return ' '.join(self.argv)


@dataclass
class ShellOutResult:
    """Outcome of run().

    When the program could not be spawned, error holds the OSError and
    returncode is meaningless.
    """
    output: str = ""
    returncode: int = 0
    error: Optional[OSError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None


class Spinner:
    """Single-line progress indicator drawn by a background thread."""

    def __init__(self, label: str, stream=None):
        self.label = label
        self.stream = stream or sys.stderr
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join()
        self.stream.write("\r\033[K")
        self.stream.flush()

    def _spin(self):
        for frame in itertools.cycle(SPINNER_FRAMES):
            self.stream.write(f"\r\033[K{frame} {self.label}")
            self.stream.flush()
            if self._stop.wait(SPINNER_INTERVAL):
                break

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


def _spinner_wanted(spec: CommandSpec, progress: bool) -> bool:
    return progress and bool(spec.label) and sys.stderr.isatty()


def run(spec: CommandSpec, mode: ExecutionMode, progress: bool = True) -> ShellOutResult:
    """Run a command and wait for it to finish.

    Args:
        spec: Command to run
        mode: Terminal attachment, see ExecutionMode
        progress: Draw a spinner in CAPTURED mode (only on a TTY)

    Returns:
        ShellOutResult with captured stdout and exit status, or the spawn error
    """
    logger.debug("Running [%s]: %s", mode.value, spec)

    try:
        if mode == ExecutionMode.INTERACTIVE:
            completed = subprocess.run(spec.argv)
            result = ShellOutResult(output="", returncode=completed.returncode)

        elif mode == ExecutionMode.CAPTURED:
            proc = subprocess.Popen(
                spec.argv, stdout=subprocess.PIPE, text=True, errors='replace'
            )
            if _spinner_wanted(spec, progress):
                with Spinner(spec.label):
                    stdout, _ = proc.communicate()
            else:
                stdout, _ = proc.communicate()
            result = ShellOutResult(output=stdout or "", returncode=proc.returncode)

        else:
            completed = subprocess.run(
                spec.argv, capture_output=True, text=True, errors='replace'
            )
            result = ShellOutResult(output=completed.stdout or "",
                                    returncode=completed.returncode)

    except OSError as e:
        logger.debug("Could not spawn %s: %s", spec.program, e)
        return ShellOutResult(output="", returncode=1, error=e)

    logger.debug("%s exited with status %d", spec.program, result.returncode)
    return result


def must_succeed(result: ShellOutResult, spec: CommandSpec) -> str:
    """Return the captured output, or raise CommandFailed.

    Spawn errors and non-zero exit statuses are both fatal. Call sites that
    read the exit status as an answer (installed check, outdated check,
    consistency check) must not route their result through here.
    """
    if not result.ok or result.returncode != 0:
        raise CommandFailed(spec, result)
    return result.output

"""Operator confirmation.

The workflow only sees a `confirm(prompt) -> Answer` callable. The terminal
implementation lives here; unattended runs and tests pass their own.
"""

from enum import Enum

from . import colors


class Answer(Enum):
    PROCEED = "proceed"
    SKIP = "skip"
    QUIT = "quit"


def parse_answer(response: str) -> Answer:
    """Map operator input to an Answer. Anything but s/q means proceed."""
    response = response.strip().lower()
    if response in ('q', 'quit'):
        return Answer.QUIT
    if response in ('s', 'skip', 'n', 'no'):
        return Answer.SKIP
    return Answer.PROCEED


def confirm(prompt: str) -> Answer:
    """Ask the operator on the terminal.

    EOF on stdin (no terminal) is treated as quit.
    """
    print(f"{colors.chevrons()} {prompt}: Press return to continue, s to skip, q to quit")
    try:
        response = input()
    except EOFError:
        return Answer.QUIT
    answer = parse_answer(response)
    if answer == Answer.QUIT:
        print(f"{colors.chevrons()} Quitting at user request")
    elif answer == Answer.SKIP:
        print(f"{colors.chevrons()} Skipping at user request")
    return answer


def auto_confirm(prompt: str) -> Answer:
    """Unattended mode: every step proceeds."""
    print(f"{colors.chevrons()} {prompt}: proceeding (unattended)")
    return Answer.PROCEED


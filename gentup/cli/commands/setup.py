"""Interactive setup: operator config and optional package list."""

import logging
from typing import Optional

from .. import colors
from ..prompt import Answer, confirm as terminal_confirm
from ...core import portage
from ...core.config import (
    DEFAULT_CONFIG, Settings, read_config, write_config, write_package_list,
)
from ...core.runner import ExecutionMode, run

logger = logging.getLogger(__name__)


def _edit(path, confirm, runner) -> bool:
    """Offer to open path in an editor. Returns False if the operator quit."""
    answer = confirm(f"Edit {path}?")
    if answer == Answer.QUIT:
        return False
    if answer == Answer.PROCEED:
        runner(portage.edit_file(path), ExecutionMode.INTERACTIVE)
    return True


def cmd_setup(args, settings: Optional[Settings] = None, confirm=None, runner=run) -> int:
    """Handle --setup - create, show and edit the configuration files."""
    settings = settings or Settings()
    confirm = confirm or terminal_confirm

    print(colors.step("Entering setup"))

    config_file = settings.config_file
    if not config_file.exists():
        print(colors.found("Creating new configuration file", colors.warning))
        if not write_config(DEFAULT_CONFIG, config_file):
            print(colors.error(f"Error: could not create {config_file}"))
            return 1
    else:
        print(colors.found(f"Reading existing configuration file ({config_file})"))

    config = read_config(config_file)
    print(colors.found("The running configuration contains:"))
    print()
    for key, value in config.items():
        print(f"  {key}: {'true' if value else 'false'}")
    print()
    if not _edit(config_file, confirm, runner):
        return 0

    package_file = settings.package_file
    if not package_file.exists():
        print(colors.found(f"Creating {package_file} with the default package list",
                           colors.warning))
        try:
            write_package_list(package_file, settings.optional_packages)
        except OSError as e:
            print(colors.error(f"Error: could not create {package_file}: {e}"))
            return 1

    print(colors.found("Optional package list contains:"))
    print()
    print(package_file.read_text())
    if not _edit(package_file, confirm, runner):
        return 0

    print(colors.step("Setup complete"))
    return 0

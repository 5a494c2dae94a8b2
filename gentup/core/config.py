"""
Central configuration for gentup.

Settings carries every fixed path and constant the updater depends on, so the
workflow can be pointed at a temporary tree in tests:

    /etc/os-release                           - Distribution identity
    /var/db/repos/gentoo/metadata/timestamp   - Package tree sync stamp
    /etc/default/gentup                       - Optional package list
    /etc/conf.d/gentup                        - Operator preferences
    /etc/portage/make.conf                    - Portage configuration

/etc/conf.d/gentup format (one setting per line):
    clean_default: false
    trim_default: true
    # Comments start with #
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)

CONFIG_FILE = Path('/etc/conf.d/gentup')
PACKAGE_FILE = Path('/etc/default/gentup')

# Tools the updater cannot run without: (package, binary, post-install command)
REQUIRED_TOOLS = (
    ('app-portage/eix', '/usr/bin/eix', 'eix-update'),
    ('app-portage/gentoolkit', '/usr/bin/equery', ''),
    ('app-portage/elogv', '/usr/bin/elogv', ''),
    ('app-admin/eclean-kernel', '/usr/bin/eclean-kernel', ''),
)

# Upgraded on their own before @world
PRIORITY_PACKAGES = (
    'sys-apps/portage',
    'sys-devel/gcc',
)

# Written to PACKAGE_FILE the first time --optional is used
DEFAULT_OPTIONAL_PACKAGES = (
    'app-portage/cpuid2cpuflags',
    'app-portage/pfl',
    'app-portage/ufed',
    'app-admin/sysstat',
    'app-editors/vim',
    'net-dns/bind-tools',
    'app-misc/tmux',
    'net-misc/netkit-telnetd',
    'sys-apps/mlocate',
    'sys-apps/inxi',
    'sys-apps/pciutils',
    'sys-apps/usbutils',
    'sys-process/nmon',
    'dev-lang/rust-bin',
    'dev-vcs/git',
)

DEFAULT_CONFIG = {
    'clean_default': False,
    'trim_default': False,
}

_BOOLEAN_KEYS = ('clean_default', 'trim_default')


@dataclass(frozen=True)
class Settings:
    """Paths and constants used by one update run."""
    os_release: Path = Path('/etc/os-release')
    tree_timestamp: Path = Path('/var/db/repos/gentoo/metadata/timestamp')
    package_file: Path = PACKAGE_FILE
    config_file: Path = CONFIG_FILE
    make_conf: Path = Path('/etc/portage/make.conf')
    proc_mounts: Path = Path('/proc/mounts')
    sys_block: Path = Path('/sys/dev/block')
    required_distro: str = 'Gentoo'
    sync_interval: timedelta = timedelta(hours=24)
    required_tools: Tuple[Tuple[str, str, str], ...] = REQUIRED_TOOLS
    priority_packages: Tuple[str, ...] = PRIORITY_PACKAGES
    optional_packages: Tuple[str, ...] = DEFAULT_OPTIONAL_PACKAGES


def _parse_bool(value: str):
    value = value.strip().lower()
    if value == 'true':
        return True
    if value == 'false':
        return False
    return None


def read_config(path: Path = CONFIG_FILE) -> dict:
    """Read the operator configuration file.

    Returns:
        Dict with 'clean_default' and 'trim_default' (bools). Missing file or
        keys keep the defaults.
    """
    config = dict(DEFAULT_CONFIG)

    if not path.exists():
        return config

    try:
        text = path.read_text()
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return config

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or ':' not in line:
            continue
        key, value = line.split(':', 1)
        key = key.strip().lower()
        if key not in _BOOLEAN_KEYS:
            continue
        parsed = _parse_bool(value)
        if parsed is None:
            logger.warning("Syntax error in %s: %s", path, line)
            continue
        config[key] = parsed

    return config


def write_config(config: dict, path: Path = CONFIG_FILE) -> bool:
    """Write the operator configuration file.

    Returns:
        True on success
    """
    lines = ['# Configuration options for gentup', '']
    for key in _BOOLEAN_KEYS:
        value = config.get(key, DEFAULT_CONFIG[key])
        lines.append(f"{key}: {'true' if value else 'false'}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('\n'.join(lines) + '\n')
        return True
    except PermissionError:
        logger.error("Permission denied writing to %s", path)
        return False
    except OSError as e:
        logger.error("Error writing config %s: %s", path, e)
        return False


def read_package_list(path: Path) -> list:
    """Read a newline-delimited package list, skipping blanks and comments."""
    packages = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            packages.append(line)
    return packages


def write_package_list(path: Path, packages) -> None:
    """Create a package list file, one atom per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(''.join(f"{pkg}\n" for pkg in packages))

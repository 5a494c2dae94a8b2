"""Host inspection helpers: distro identity, running kernel, storage."""

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from .classify import strip_non_numeric
from .errors import EnvironmentCheckError

logger = logging.getLogger(__name__)


def read_distro(os_release: Path) -> str:
    """Return the value of the first KEY=value line of os-release.

    Raises:
        EnvironmentCheckError if the file is unreadable or malformed
    """
    try:
        with open(os_release) as f:
            first_line = f.readline().strip()
    except OSError as e:
        raise EnvironmentCheckError(f"{os_release} should be readable: {e}")

    if '=' not in first_line:
        raise EnvironmentCheckError(f"Could not read the distribution from {os_release}")

    return first_line.split('=', 1)[1].strip().strip('"\'')


def check_distro(os_release: Path, required: str) -> str:
    """Ensure we are running on the required distribution.

    Returns:
        The detected distribution name

    Raises:
        EnvironmentCheckError on mismatch
    """
    detected = read_distro(os_release)
    if detected != required:
        raise EnvironmentCheckError(
            f"This updater only works on {required} Linux (detected {detected})"
        )
    return detected


def running_kernel() -> str:
    """Identity of the running kernel, reduced to its digits.

    "6.6.58-gentoo-dist" gives "6658", comparable with the digits found on
    kernel package lines.
    """
    release = os.uname().release
    return strip_non_numeric(release)


def tree_too_recent(timestamp: Path, now: Optional[datetime] = None,
                    threshold: timedelta = timedelta(hours=24)) -> bool:
    """Check if the package tree was synced less than `threshold` ago.

    A missing timestamp file means the tree was never synced.
    """
    try:
        mtime = timestamp.stat().st_mtime
    except OSError:
        logger.debug("No tree timestamp at %s", timestamp)
        return False

    if now is None:
        now = datetime.now(timezone.utc)
    synced = datetime.fromtimestamp(mtime, timezone.utc)
    return now - synced < threshold


def root_device(proc_mounts: Path) -> Optional[str]:
    """Device node mounted on / according to /proc/mounts."""
    try:
        lines = proc_mounts.read_text().splitlines()
    except OSError as e:
        logger.debug("Could not read %s: %s", proc_mounts, e)
        return None

    for line in lines:
        fields = line.split()
        if len(fields) >= 2 and fields[1] == '/':
            return fields[0]
    return None


def device_major(device: str) -> Optional[int]:
    """Major number of a block device node, None if it cannot be read."""
    try:
        return os.major(os.stat(device).st_rdev)
    except OSError as e:
        logger.debug("Could not stat %s: %s", device, e)
        return None


def is_rotational(proc_mounts: Path, sys_block: Path) -> bool:
    """Check if the root filesystem lives on spinning media.

    Anything we cannot determine counts as rotational, so no trim is issued.
    """
    device = root_device(proc_mounts)
    if not device or not device.startswith('/'):
        return True

    major = device_major(device)
    if major is None:
        return True

    flag = sys_block / f"{major}:0" / 'queue' / 'rotational'
    try:
        return int(flag.read_text().strip()) != 0
    except (OSError, ValueError):
        return True


def is_root() -> bool:
    """Check the invoking account from the USER environment variable."""
    return os.environ.get('USER') == 'root'

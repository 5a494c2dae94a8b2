"""
Command lines for Portage and its companion tools.

Each function returns the CommandSpec for one call; how it is run and how its
output is read is up to the workflow.
"""

import logging
from pathlib import Path

from .errors import EnvironmentCheckError
from .runner import CommandSpec

logger = logging.getLogger(__name__)

ELOG_SETTINGS = (
    '# Logging\n'
    'PORTAGE_ELOG_CLASSES="warn error log"\n'
    'PORTAGE_ELOG_SYSTEM="save"\n'
)


def install_tool(package: str) -> CommandSpec:
    return CommandSpec.parse(f"emerge --quiet -v {package}", f"Installing {package}")


def install_optional(package: str) -> CommandSpec:
    return CommandSpec.parse(
        f"emerge --quiet --autounmask y --autounmask-write y -av {package}",
        "Installing missing package",
    )


def post_install(command_line: str) -> CommandSpec:
    return CommandSpec.parse(command_line, "Post installation configuration")


def package_installed(package: str) -> CommandSpec:
    """equery exits non-zero when the package is not installed."""
    return CommandSpec.parse(f"equery l {package}")


def package_outdated(package: str) -> CommandSpec:
    """eix -u exits 0 when an upgrade is available."""
    return CommandSpec.parse(f"eix -u {package}")


def eix_update() -> CommandSpec:
    return CommandSpec.parse("eix-update", "Initialising package database")


def sync_tree() -> CommandSpec:
    return CommandSpec.parse("eix-sync", "Syncing package tree")


def news_count() -> CommandSpec:
    return CommandSpec.parse("eselect news count new")


def news_list() -> CommandSpec:
    return CommandSpec.parse("eselect news list", "News listing")


def news_read() -> CommandSpec:
    return CommandSpec.parse("eselect news read", "Reading news")


def upgrade_package(package: str) -> CommandSpec:
    return CommandSpec.parse(f"emerge --quiet -1v {package}", f"Upgrading {package}")


def world_pretend() -> CommandSpec:
    return CommandSpec.parse("emerge -puDv @world", "Checking for updates")


def fetch_source(atom: str) -> CommandSpec:
    return CommandSpec.parse(f"emerge --fetchonly --nodeps ={atom}", f"Downloading {atom}")


def world_upgrade() -> CommandSpec:
    return CommandSpec.parse(
        "emerge --quiet -uNDv --with-bdeps y --changed-use --complete-graph @world",
        "Updating world set",
    )


def elog_viewer() -> CommandSpec:
    return CommandSpec.parse("elogv", "Checking for new ebuild logs")


def dispatch_conf() -> CommandSpec:
    return CommandSpec.parse("dispatch-conf", "Merge config file changes")


def depclean_pretend() -> CommandSpec:
    return CommandSpec.parse("emerge -p --depclean", "Checking for orphaned dependencies")


def depclean(ask: bool = True) -> CommandSpec:
    if ask:
        return CommandSpec.parse("emerge --ask --depclean", "Removing orphaned dependencies")
    return CommandSpec.parse("emerge --depclean", "Removing orphaned dependencies")


def revdep_pretend() -> CommandSpec:
    return CommandSpec.parse("revdep-rebuild -ip", "Checking reverse dependencies")


def revdep_rebuild() -> CommandSpec:
    return CommandSpec.parse("revdep-rebuild", "Rebuilding reverse dependencies")


def obsolete_check() -> CommandSpec:
    return CommandSpec.parse("eix-test-obsolete", "Checking obsolete configs")


def eclean_kernel() -> CommandSpec:
    return CommandSpec.parse("eclean-kernel -Aa", "Cleaning old kernels")


def eclean_distfiles() -> CommandSpec:
    return CommandSpec.parse("eclean -d distfiles", "Cleaning unused distfiles")


def fstrim() -> CommandSpec:
    return CommandSpec.parse("fstrim -a -v", "Reclaiming free blocks")


def edit_file(path: Path) -> CommandSpec:
    return CommandSpec.parse(f"vi {path}", "Launching editor")


def ensure_elog_config(make_conf: Path) -> bool:
    """Make Portage save elog messages so elogv has something to show.

    Returns:
        True if make.conf was changed

    Raises:
        EnvironmentCheckError if make.conf cannot be appended to
    """
    try:
        contents = make_conf.read_text()
    except OSError as e:
        logger.debug("Could not read %s: %s", make_conf, e)
        return False

    if 'PORTAGE_ELOG_SYSTEM' in contents:
        return False

    try:
        with open(make_conf, 'a') as f:
            if contents and not contents.endswith('\n'):
                f.write('\n')
            f.write(ELOG_SETTINGS)
    except OSError as e:
        raise EnvironmentCheckError(f"Could not configure elog in {make_conf}: {e}")
    logger.info("Configured elog in %s", make_conf)
    return True

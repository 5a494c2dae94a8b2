"""
gentup - Gentoo system updater

Drives Portage through a full upgrade cycle:
- Package tree sync (at most once a day)
- Pending update detection and source prefetch
- World upgrade, config file merge
- Orphan cleanup that never removes the running kernel
"""

__version__ = "0.14.0"
__author__ = "gentup contributors"

"""
Main CLI entry point for gentup

    gentup              full update: sync, upgrade, cleanup
    gentup --cleanup    cleanup steps only (after an interrupted run)
    gentup --setup      create and edit the configuration files
"""

import argparse
import logging
import sys

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""

    parser = argparse.ArgumentParser(
        prog='gentup',
        description='Gentoo system updater',
        epilog='Must be run as root.'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'gentup version {__version__}'
    )

    parser.add_argument(
        '--background', '-b',
        action='store_true',
        help='Fetch sources in the background during the update'
    )

    parser.add_argument(
        '--cleanup', '-c',
        action='store_true',
        help='Perform cleanup tasks only; also allows removing the running kernel'
    )

    parser.add_argument(
        '--force', '-f',
        action='store_true',
        help='Force eix-sync, bypassing the timestamp check'
    )

    parser.add_argument(
        '--optional', '-o',
        action='store_true',
        help='Install optional packages from /etc/default/gentup'
    )

    parser.add_argument(
        '--notrim', '-n', '-t',
        action='store_true',
        help='Do not perform an fstrim after the upgrade'
    )

    parser.add_argument(
        '--unattended', '-u',
        action='store_true',
        help='Answer every confirmation with "continue"'
    )

    parser.add_argument(
        '--setup', '-s',
        action='store_true',
        help='Create and edit the configuration files, then exit'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--nocolor',
        action='store_true',
        help='Disable colored output'
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Configure logging based on verbose flag
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
            stream=sys.stderr
        )

    from . import colors
    colors.init(nocolor=args.nocolor)

    from ..core.system import is_root
    if not is_root():
        print(colors.error("You need to be root to run this"), file=sys.stderr)
        return 1

    try:
        if args.setup:
            from .commands import cmd_setup
            return cmd_setup(args)

        print(f"\nWelcome to the Gentoo Updater v{__version__}\n")
        from .commands import cmd_update
        return cmd_update(args)

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    except Exception as e:
        if args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(colors.error(f"Error: {e}"), file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())

"""Command-line interface for downgrade-build.

This module provides the command-line entry point: it snapshots a project into a
scratch directory with a downgraded package.json, then installs and runs a script
there with npm.

Exit Codes:
    0: Successful completion (or a nested invocation, which does nothing)
    1: Runtime error during execution
    2: Command-line syntax error
    126: Permission denied
    130: Interrupted by SIGINT (Ctrl+C)
    141: Broken pipe while printing a dry run
    Any other code: the exit status of the failed npm command

Example:
    # Run the project's test script against its minimum dependency versions
    $ downgrade-build test
"""

import argparse
import json
import logging
import os
import sys
from typing import Mapping, Optional, Sequence

from downgrade_build.cli.argparser import create_parser, validate_args
from downgrade_build.exceptions import CommandFailedError
from downgrade_build.package_manager import is_nested_invocation, run_npm_install, run_npm_script
from downgrade_build.snapshot import create_snapshot, downgraded_manifest, snapshot_files
from downgrade_build.traversal.permission_action import PermissionAction

# Map CLI permission actions to internal enum
PERMISSION_ACTIONS = {
    "warn": PermissionAction.IGNORE,
    "fail": PermissionAction.RAISE,
}


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr at the level selected on the command line."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def print_dry_run(args: argparse.Namespace) -> None:
    """Print the snapshot file list and the rewritten manifest to stdout."""
    permission_action = PERMISSION_ACTIONS[args.permission_action]
    manifest = downgraded_manifest(args.directory)
    for relative in snapshot_files(
        args.directory, permission_action=permission_action, follow_symlinks=args.follow_symlinks
    ):
        sys.stdout.write(relative + "\n")
    sys.stdout.write(json.dumps(manifest, indent=2) + "\n")
    sys.stdout.flush()


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> None:
    """Main entry point for the downgrade-build command-line interface.

    Args:
        argv: Command-line arguments. sys.argv[1:] if None.
        environ: Process environment. os.environ if None. A nested invocation,
            marked by the guard variable that run_npm_script sets, returns
            immediately.
    """
    if environ is None:
        environ = os.environ
    if is_nested_invocation(environ):
        return

    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        validate_args(args)

        if args.dry_run:
            print_dry_run(args)
            return

        permission_action = PERMISSION_ACTIONS[args.permission_action]

        target = create_snapshot(
            args.directory,
            args.work_dir,
            permission_action=permission_action,
            follow_symlinks=args.follow_symlinks,
        )
        run_npm_install(target, npm=args.npm)
        run_npm_script(target, args.script, npm=args.npm, environ=environ)

    except CommandFailedError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(e.exit_code or 1)
    except PermissionError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(126)
    except BrokenPipeError:
        # Keep the interpreter from complaining while flushing stdout at exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(141)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Command-line argument parsing for downgrade-build.

This module defines the command-line interface for downgrade-build,
handling argument parsing and validation.
"""

import argparse
from pathlib import Path

from downgrade_build import __version__
from downgrade_build.manifest.package_file import PACKAGE_FILE


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Returns:
        An ArgumentParser instance configured with downgrade-build's options.
    """
    description = """
    downgrade-build: Build and test a project against its lowest supported dependencies.

    The project is copied into a scratch directory, honoring every .gitignore file
    between the filesystem root and each copied file (the .git and node_modules
    directories and package-lock.json are never copied). Its package.json is then
    rewritten so that every dependency, development dependency and peer dependency
    is pinned to the minimum version its declared range allows, and overrides force
    the same versions onto transitive installs. Finally `npm install` and
    `npm run <script>` are run in the scratch directory.

    Running downgrade-build from inside the script it launches is a no-op, so a
    project's test script may itself invoke downgrade-build.
    """

    epilog = """
    Examples:
      # Run the test script of the current project against minimum versions
      downgrade-build

      # Run a different script, passing arguments through to it
      downgrade-build build -- --production

      # Process another project and keep the snapshot in a known place
      downgrade-build -d ../my-lib -w /tmp/my-lib-downgraded test

      # Show which files would be copied and the rewritten package.json
      downgrade-build -n

      # Display version information and exit
      downgrade-build -V
    """

    parser = argparse.ArgumentParser(
        prog="downgrade-build",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version", action="version", version=f"downgrade-build {__version__}", help="Show the version and exit"
    )
    parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=Path("."),
        help=f"Project directory containing {PACKAGE_FILE} (default: current directory).",
    )
    parser.add_argument(
        "-w",
        "--work-dir",
        type=Path,
        metavar="DIR",
        help="Scratch directory for the snapshot (default: a new temporary directory).",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help=f"Print the files that would be copied and the rewritten {PACKAGE_FILE}, then exit.",
    )
    parser.add_argument(
        "-L",
        "--follow-symlinks",
        action="store_true",
        help="Descend into symbolic links to directories instead of copying them as links.",
    )
    parser.add_argument(
        "-P",
        "--permission-action",
        choices=["warn", "fail"],
        default="warn",
        help="How to handle directories that can't be read (default: warn).",
    )
    parser.add_argument(
        "--npm",
        default="npm",
        metavar="EXECUTABLE",
        help="The npm executable to run (default: npm).",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debugging information.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    parser.add_argument(
        "script",
        nargs=argparse.REMAINDER,
        help="Script to run with `npm run`, followed by its arguments (default: test).",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Performs additional validation beyond what argparse can handle.

    Args:
        args: Parsed command-line arguments.

    Raises:
        ValueError: If any arguments fail validation.
    """
    if not args.directory.is_dir():
        raise ValueError(f"'{args.directory}' is not a valid directory")
    if not (args.directory / PACKAGE_FILE).is_file():
        raise ValueError(f"'{args.directory}' does not contain a {PACKAGE_FILE}")
    if args.work_dir is not None and args.work_dir.exists():
        if not args.work_dir.is_dir():
            raise ValueError(f"'{args.work_dir}' is not a directory")
        if any(args.work_dir.iterdir()):
            raise ValueError(f"Scratch directory '{args.work_dir}' is not empty")
    if args.dry_run and args.work_dir is not None:
        raise ValueError("--dry-run does not use a scratch directory; drop -w/--work-dir")

    # A leading "--" separates our options from the script's
    if args.script and args.script[0] == "--":
        args.script = args.script[1:]
    if not args.script:
        args.script = ["test"]

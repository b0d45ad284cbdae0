"""Invocation of the npm package manager against a snapshot."""

import logging
import os
import shutil
import subprocess
from typing import Mapping, Optional, Sequence

from downgrade_build.exceptions import CommandFailedError
from downgrade_build.types import PathType

logger = logging.getLogger(__name__)

# Set in the environment of the build command so that a nested invocation of
# downgrade-build (e.g. from the project's own test script) exits immediately
NESTED_ENV_VAR = "DOWNGRADE_BUILD_NESTED"


def is_nested_invocation(environ: Mapping[str, str], guard: str = NESTED_ENV_VAR) -> bool:
    """Check whether `environ` marks a run started by another downgrade build."""
    return bool(environ.get(guard))


def _executable(name: str) -> str:
    # On Windows npm is a .cmd shim that subprocess can't find by bare name
    return shutil.which(name) or name


def run_command(args: Sequence[str], cwd: PathType, env: Optional[Mapping[str, str]] = None) -> None:
    """Run a command with inherited standard streams.

    The executable is looked up on PATH before running. Errors report the command
    as given.

    Args:
        args: Command line.
        cwd: Working directory.
        env: Complete environment for the child. The current one if None.

    Raises:
        CommandFailedError: If the command exits non-zero or is killed by a signal.
        FileNotFoundError: If the executable does not exist.
    """
    logger.debug("Running %s in %s", " ".join(args), cwd)
    command = [_executable(args[0]), *args[1:]]
    completed = subprocess.run(command, cwd=cwd, env=None if env is None else dict(env), check=False)
    if completed.returncode != 0:
        raise CommandFailedError(args, completed.returncode)


def run_npm_install(directory: PathType, npm: str = "npm") -> None:
    """Install the snapshot's dependencies."""
    run_command([npm, "install"], cwd=directory)


def run_npm_script(
    directory: PathType,
    script_args: Sequence[str],
    npm: str = "npm",
    guard: str = NESTED_ENV_VAR,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Run `npm run <script_args>` in the snapshot.

    The child receives `environ` (the current environment by default) with `guard`
    set, which is how a nested downgrade-build learns that it must not start
    another snapshot.

    Args:
        directory: The snapshot directory.
        script_args: Script name followed by its arguments.
        npm: The npm executable.
        guard: Name of the environment variable marking nested runs.
        environ: Base environment for the child.
    """
    env = dict(os.environ if environ is None else environ)
    env[guard] = "1"
    run_command([npm, "run", *script_args], cwd=directory, env=env)

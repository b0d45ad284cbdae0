from typing import Optional, Sequence


class MinimumVersionError(ValueError):
    """
    Exception raised when a dependency range has no computable minimum version.

    A snapshot whose dependency floor is undefined cannot exercise a
    lowest-supported-versions build, so this error is fatal for the whole
    manifest rewrite.

    Attributes:
        name (Optional[str]): Name of the dependency, when known.
        version_range (str): The declared range that could not be minimized.

    Example:
        >>> error = MinimumVersionError("not-a-range", name="left-pad")
        >>> str(error)
        "No semver minimum for 'not-a-range' (dependency 'left-pad')"
    """

    def __init__(self, version_range: str, name: Optional[str] = None) -> None:
        """
        Initialize the exception with the offending range.

        Args:
            version_range (str): The declared range that could not be minimized.
            name (Optional[str]): Name of the dependency declaring the range.
        """
        self.version_range = version_range
        self.name = name
        message = f"No semver minimum for {version_range!r}"
        if name is not None:
            message += f" (dependency {name!r})"
        super().__init__(message)


class CommandFailedError(RuntimeError):
    """
    Exception raised when a package manager command does not exit successfully.

    A negative return code means the child was terminated by a signal, following
    the convention of the subprocess module.

    Attributes:
        args_list (List[str]): The command line that was run.
        returncode (int): The raw return code reported by subprocess.
        exit_code (Optional[int]): The exit status, or None if killed by a signal.
        signal (Optional[int]): The terminating signal number, or None.

    Example:
        >>> str(CommandFailedError(["npm", "install"], 1))
        'npm install exited with status code 1'
        >>> str(CommandFailedError(["npm", "run", "test"], -9))
        'npm run test was terminated by signal 9'
    """

    def __init__(self, args: Sequence[str], returncode: int) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.exit_code: Optional[int] = returncode if returncode >= 0 else None
        self.signal: Optional[int] = -returncode if returncode < 0 else None
        command = " ".join(self.args_list)
        if self.signal is not None:
            message = f"{command} was terminated by signal {self.signal}"
        else:
            message = f"{command} exited with status code {self.exit_code}"
        super().__init__(message)


class ManifestError(ValueError):
    """
    Exception raised when a package manifest cannot be read or has the wrong shape.

    Example:
        >>> error = ManifestError("package.json must contain a JSON object")
        >>> str(error)
        'package.json must contain a JSON object'
    """

    pass

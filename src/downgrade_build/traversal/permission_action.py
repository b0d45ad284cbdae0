"""Permission action enum for handling unreadable directories during traversal."""

from enum import Enum


class PermissionAction(str, Enum):
    """Action to take when a directory cannot be listed during traversal.

    Values:
        IGNORE: Log a warning and skip the directory's contents (default behavior)
        RAISE: Raise a PermissionError immediately when access is denied
    """

    IGNORE = "ignore"
    RAISE = "raise"

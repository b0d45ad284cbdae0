"""Lazy traversal of a project tree honoring nested .gitignore files.

This module provides the TreeWalker class, which lists every file that belongs
in a project snapshot. Each directory is visited with the IgnoreStack that
governs it, so every file is tested against exactly the rule files between the
filesystem root and its own directory.
"""

import logging
import os
import posixpath
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, Optional, Set

from downgrade_build.traversal.file_identifier import FileIdentifier
from downgrade_build.traversal.ignore_stack import DEFAULT_RULES_FILENAME, IgnoreStack
from downgrade_build.traversal.permission_action import PermissionAction
from downgrade_build.types import PathType

logger = logging.getLogger(__name__)

# Version-control metadata and the dependency cache are never part of a snapshot
RESERVED_DIRECTORIES = (".git", "node_modules")


class TreeWalker:
    """Walks a directory tree and yields the files its rule files keep.

    Reserved directories (".git" and "node_modules" by default) are skipped
    without consulting any rule file. Every other directory is descended into,
    even one matched by an exclusion pattern, because a rule file further down
    may re-include some of its contents. Files are tested against the stack of
    their own directory.

    Symbolic Link Behavior:
        By default, symbolic links are never followed: a link is yielded like a
        regular file, whatever it points to. When follow_symlinks is True, links
        to directories are descended into, and a link leading back into a
        directory that is already being walked is skipped.

    Permission Handling:
        A directory that cannot be listed is handled according to
        permission_action:
        - IGNORE (default): Log a warning and skip the directory's contents
        - RAISE: Raise PermissionError

    Attributes:
        root_path (Path): The directory being walked.
        permission_action (PermissionAction): How to handle unreadable directories.
        follow_symlinks (bool): Whether to descend into symlinked directories.
        rules_filename (str): Name of the per-directory rule files.
        reserved_names (FrozenSet[str]): Directory names that are never walked.

    Example:
        >>> walker = TreeWalker("my-project")  # doctest: +SKIP
        >>> for path in walker.traverse():  # doctest: +SKIP
        ...     print(path)
        package.json
        src/index.ts
    """

    def __init__(
        self,
        root_path: PathType,
        permission_action: PermissionAction = PermissionAction.IGNORE,
        follow_symlinks: bool = False,
        rules_filename: str = DEFAULT_RULES_FILENAME,
        reserved_names: Iterable[str] = RESERVED_DIRECTORIES,
    ) -> None:
        self.root_path = Path(root_path)
        self.permission_action = permission_action
        self.follow_symlinks = follow_symlinks
        self.rules_filename = rules_filename
        self.reserved_names: FrozenSet[str] = frozenset(reserved_names)

    def traverse(self) -> Iterator[str]:
        """Yield the path of every file that is not excluded.

        Paths are relative to the root and always use forward slashes. Entries are
        visited in sorted order within each directory. The filesystem is read as
        the generator advances; calling traverse() again starts a fresh walk.

        Yields:
            Relative file paths.

        Raises:
            FileNotFoundError: If the root path doesn't exist.
            NotADirectoryError: If the root path isn't a directory.
            PermissionError: If a directory can't be listed and permission_action is RAISE.
        """
        if not self.root_path.exists():
            raise FileNotFoundError(f"Root path does not exist: {self.root_path}")
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Root path is not a directory: {self.root_path}")

        stack = IgnoreStack.for_directory(self.root_path, self.rules_filename)
        visited: Set[FileIdentifier] = set()
        root_id = FileIdentifier.for_path(self.root_path)
        if root_id is not None:
            visited.add(root_id)

        yield from self._walk(self.root_path, "", stack, visited)

    def _walk(
        self, directory: Path, relative: str, stack: IgnoreStack, visited: Set[FileIdentifier]
    ) -> Iterator[str]:
        """Recursive helper for traverse()."""
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            if self.permission_action == PermissionAction.RAISE:
                raise PermissionError(f"Error accessing {directory}: {e}")
            logger.warning("Skipping unreadable directory %s: %s", directory, e)
            return

        for entry in entries:
            child_relative = posixpath.join(relative, entry.name) if relative else entry.name

            if self._is_directory(entry):
                if entry.name in self.reserved_names:
                    continue

                child_path = directory / entry.name
                identifier = FileIdentifier.for_path(child_path) if self.follow_symlinks else None
                if identifier is not None and identifier in visited:
                    logger.debug("Skipping symlink loop at %s", child_path)
                    continue

                child_stack = stack.descend(entry.name, child_path, self.rules_filename)
                if identifier is not None:
                    visited.add(identifier)
                try:
                    yield from self._walk(child_path, child_relative, child_stack, visited)
                finally:
                    if identifier is not None:
                        visited.discard(identifier)
            elif not stack.ignored(entry.name):
                yield child_relative

    def _is_directory(self, entry: "os.DirEntry[str]") -> bool:
        try:
            return entry.is_dir(follow_symlinks=self.follow_symlinks)
        except OSError:
            return False


def traverse(
    root: PathType,
    *,
    permission_action: PermissionAction = PermissionAction.IGNORE,
    follow_symlinks: bool = False,
    rules_filename: str = DEFAULT_RULES_FILENAME,
    reserved_names: Optional[Iterable[str]] = None,
) -> Iterator[str]:
    """List the files of `root` that its .gitignore files keep.

    Convenience wrapper around TreeWalker(...).traverse().

    Args:
        root: Directory to walk.
        permission_action: How to handle unreadable directories.
        follow_symlinks: Whether to descend into symlinked directories.
        rules_filename: Name of the per-directory rule files.
        reserved_names: Directory names that are never walked. Defaults to
            RESERVED_DIRECTORIES.

    Returns:
        A generator of forward-slash paths relative to `root`.
    """
    walker = TreeWalker(
        root,
        permission_action=permission_action,
        follow_symlinks=follow_symlinks,
        rules_filename=rules_filename,
        reserved_names=RESERVED_DIRECTORIES if reserved_names is None else reserved_names,
    )
    return walker.traverse()

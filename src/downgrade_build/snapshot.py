"""Creation of project snapshots for downgrade-test builds.

A snapshot is a filtered copy of a project tree in a scratch directory, holding
every file the project's .gitignore files keep, with a package.json rewritten so
that every dependency is pinned to the lowest version its range allows.
"""

import logging
import os
import posixpath
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from downgrade_build.manifest.package_file import LOCK_FILE, dump_package_file, load_package_file, rewrite_manifest
from downgrade_build.traversal.permission_action import PermissionAction
from downgrade_build.traversal.tree_walker import traverse
from downgrade_build.types import PathType

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "downgrade-build-"

# Lock files pin the current versions and would defeat the downgrade
SKIPPED_FILES = (LOCK_FILE,)


def snapshot_files(
    source: PathType,
    *,
    permission_action: PermissionAction = PermissionAction.IGNORE,
    follow_symlinks: bool = False,
    skipped_files: Iterable[str] = SKIPPED_FILES,
) -> Iterator[str]:
    """Yield the relative paths of the files that belong in a snapshot of `source`.

    Args:
        source: Project root.
        permission_action: How to handle unreadable directories.
        follow_symlinks: Whether to descend into symlinked directories.
        skipped_files: File names left out wherever they appear.

    Yields:
        Forward-slash paths relative to `source`.
    """
    skipped = frozenset(skipped_files)
    for relative in traverse(source, permission_action=permission_action, follow_symlinks=follow_symlinks):
        if posixpath.basename(relative) not in skipped:
            yield relative


def copy_project(
    source: PathType,
    target: PathType,
    *,
    permission_action: PermissionAction = PermissionAction.IGNORE,
    follow_symlinks: bool = False,
) -> List[str]:
    """Copy the snapshot files of `source` into `target`.

    Intermediate directories are created as needed. Symbolic links are copied as
    links. A file that cannot be copied is logged and skipped; the rest of the
    snapshot proceeds.

    Args:
        source: Project root.
        target: Existing scratch directory.
        permission_action: How to handle unreadable directories.
        follow_symlinks: Whether to descend into symlinked directories.

    Returns:
        The relative paths that were copied.
    """
    source_path = Path(source)
    target_path = Path(target)
    copied = []
    for relative in snapshot_files(source_path, permission_action=permission_action, follow_symlinks=follow_symlinks):
        destination = target_path / relative
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source_path / relative, destination, follow_symlinks=False)
        except OSError as e:
            logger.warning("Could not copy %s: %s", relative, e)
            continue
        copied.append(relative)

    logger.debug("Copied %d files into %s", len(copied), target_path)
    return copied


def downgraded_manifest(source: PathType) -> Dict[str, Any]:
    """Read the package.json of `source` and pin every dependency to its minimum.

    Returns:
        The rewritten manifest. The file on disk is left unchanged.

    Raises:
        FileNotFoundError: If `source` has no package.json.
        ManifestError: If the manifest is malformed.
        MinimumVersionError: If a dependency range has no computable minimum.
    """
    return rewrite_manifest(load_package_file(source))


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def create_snapshot(
    source: PathType,
    target: Optional[PathType] = None,
    *,
    permission_action: PermissionAction = PermissionAction.IGNORE,
    follow_symlinks: bool = False,
) -> Path:
    """Snapshot a project into a scratch directory.

    The manifest is rewritten before any file is copied, so an invalid
    dependency range aborts the snapshot without leaving a partial copy behind.

    Args:
        source: Project root; must contain package.json.
        target: Scratch directory. A fresh temporary directory is created if None.
        permission_action: How to handle unreadable directories.
        follow_symlinks: Whether to descend into symlinked directories.

    Returns:
        The scratch directory.

    Raises:
        ValueError: If `target` lies inside `source`.
        FileNotFoundError: If `source` has no package.json.
        ManifestError: If the manifest is malformed.
        MinimumVersionError: If a dependency range has no computable minimum.
    """
    source_path = Path(os.path.abspath(source))
    manifest = downgraded_manifest(source_path)

    if target is None:
        target_path = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX))
    else:
        target_path = Path(os.path.abspath(target))
        if _is_within(target_path, source_path):
            raise ValueError(f"Scratch directory {target_path} must not be inside {source_path}")
        target_path.mkdir(parents=True, exist_ok=True)
    logger.info("Working in: %s", target_path)

    copy_project(source_path, target_path, permission_action=permission_action, follow_symlinks=follow_symlinks)
    dump_package_file(manifest, target_path)
    return target_path

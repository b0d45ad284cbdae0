"""Device and inode identity used to detect symlink loops."""

import os
from dataclasses import dataclass
from typing import Optional

from downgrade_build.types import PathType


@dataclass(frozen=True)
class FileIdentifier:
    """Identity of a directory on disk, independent of the path used to reach it.

    Two paths reaching the same directory (for instance through a symbolic link)
    share a FileIdentifier, which is what lets the walker notice that following a
    link would lead back into a directory it is already inside.

    Attributes:
        device_id (int): The device ID from stat information.
        inode_number (int): The inode number from stat information.
    """

    device_id: int
    inode_number: int

    @classmethod
    def for_path(cls, path: PathType) -> Optional["FileIdentifier"]:
        """Stat a path, following symlinks.

        Returns:
            The identifier, or None if the target is missing or cannot be stat'ed.
        """
        try:
            stat_info = os.stat(path)
        except OSError:
            return None
        return cls(stat_info.st_dev, stat_info.st_ino)

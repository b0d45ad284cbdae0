import os

import pytest

from downgrade_build.traversal.file_identifier import FileIdentifier


def test_file_identifier_equality():
    assert FileIdentifier(1, 2) == FileIdentifier(1, 2)
    assert FileIdentifier(1, 2) != FileIdentifier(1, 3)
    assert FileIdentifier(1, 2) != (1, 2)


def test_file_identifier_is_hashable():
    assert len({FileIdentifier(1, 2), FileIdentifier(1, 2), FileIdentifier(2, 2)}) == 2


def test_for_path_matches_stat(tmp_path):
    stat_info = os.stat(tmp_path)
    assert FileIdentifier.for_path(tmp_path) == FileIdentifier(stat_info.st_dev, stat_info.st_ino)


def test_for_path_missing_target(tmp_path):
    assert FileIdentifier.for_path(tmp_path / "missing") is None


def test_for_path_follows_symlinks(tmp_path):
    target = tmp_path / "target"
    target.mkdir()
    try:
        os.symlink(target, tmp_path / "link")
    except (OSError, NotImplementedError):
        pytest.skip("Symlinks are not supported on this platform")
    assert FileIdentifier.for_path(tmp_path / "link") == FileIdentifier.for_path(target)

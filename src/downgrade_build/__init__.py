"""Lowest-supported-versions build fixtures.

This package snapshots a project tree while honoring nested .gitignore files,
rewrites its package manifest so that every dependency is pinned to the minimum
version its declared range allows, and runs the package manager against the
result.
"""

from importlib.metadata import PackageNotFoundError, version

# Expose the version for both programmatic use and CLI
try:
    __version__ = version("downgrade-build")
except PackageNotFoundError:
    __version__ = "unknown"

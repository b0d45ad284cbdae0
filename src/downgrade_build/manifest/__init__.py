"""Dependency minimization and package.json rewriting."""

from .minimizer import minimize, minimum_version
from .package_file import dump_package_file, load_package_file, rewrite_manifest

__all__ = [
    "dump_package_file",
    "load_package_file",
    "minimize",
    "minimum_version",
    "rewrite_manifest",
]

"""Reading, rewriting and writing package.json manifests."""

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from downgrade_build.exceptions import ManifestError
from downgrade_build.manifest.minimizer import minimize
from downgrade_build.types import PathType

PACKAGE_FILE = "package.json"
LOCK_FILE = "package-lock.json"
VERSION_SUFFIX = "-downgraded-build"

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")


def load_package_file(directory: PathType) -> Dict[str, Any]:
    """Parse the package.json in a directory.

    Raises:
        FileNotFoundError: If the directory has no package.json.
        ManifestError: If the file is not valid JSON or not a JSON object.
    """
    path = Path(directory) / PACKAGE_FILE
    with open(path, "r", encoding="utf-8") as f:
        try:
            manifest = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(manifest, dict):
        raise ManifestError(f"{path} must contain a JSON object")
    return manifest


def dump_package_file(manifest: Mapping[str, Any], directory: PathType) -> Path:
    """Write a manifest as package.json into a directory and return its path."""
    path = Path(directory) / PACKAGE_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)
        f.write("\n")
    return path


def _dependency_section(manifest: Mapping[str, Any], key: str) -> Optional[Mapping[str, str]]:
    section = manifest.get(key)
    if section is None:
        return None
    if not isinstance(section, Mapping) or not all(isinstance(v, str) for v in section.values()):
        raise ManifestError(f"'{key}' must map dependency names to version ranges")
    return section


def downgraded_version(version: Optional[str]) -> str:
    """Mark a package version as belonging to a downgrade-test build.

    Example:
        >>> downgraded_version("3.1.0")
        '3.1.0-downgraded-build'
        >>> downgraded_version(None)
        '0-downgraded-build'
    """
    return f"{version or '0'}{VERSION_SUFFIX}"


def rewrite_manifest(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    """Pin every dependency of a manifest to its minimum supported version.

    The returned manifest is a copy of the input in which:
    - dependencies, devDependencies and peerDependencies hold minimum versions
    - the minimized peer dependencies are merged into devDependencies, peer
      versions winning, so that a scratch install resolves them
    - overrides holds the union of the runtime and development dependencies,
      forcing transitive installs onto the same floor
    - version carries the "-downgraded-build" suffix

    Args:
        manifest: Parsed package.json contents.

    Returns:
        The rewritten manifest. The input is not modified.

    Raises:
        MinimumVersionError: If any declared range has no computable minimum.
        ManifestError: If a dependency section is not a mapping of strings.

    Example:
        >>> rewritten = rewrite_manifest({"version": "3.1.0", "dependencies": {"x": "^1.2.0"}})
        >>> rewritten["dependencies"], rewritten["overrides"], rewritten["version"]
        ({'x': '1.2.0'}, {'x': '1.2.0'}, '3.1.0-downgraded-build')
    """
    dependencies, dev_dependencies, peer_dependencies = (
        minimize(_dependency_section(manifest, key)) for key in DEPENDENCY_SECTIONS
    )

    if peer_dependencies:
        dev_dependencies = {**(dev_dependencies or {}), **peer_dependencies}

    rewritten = dict(manifest)
    for key, section in zip(DEPENDENCY_SECTIONS, (dependencies, dev_dependencies, peer_dependencies)):
        if section is not None:
            rewritten[key] = section
    rewritten["overrides"] = {**(dependencies or {}), **(dev_dependencies or {})}
    rewritten["version"] = downgraded_version(manifest.get("version"))
    return rewritten

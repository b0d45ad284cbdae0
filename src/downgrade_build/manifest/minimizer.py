"""Minimum satisfying versions for npm dependency ranges.

Ranges are parsed with node-semver, the Python port of npm's own semver
implementation, so every range syntax npm accepts (carets, tildes, x-ranges,
hyphen ranges, unions with ||) resolves the way npm would resolve it.
"""

from typing import Dict, Mapping, Optional, Sequence, Union

import nodesemver
from nodesemver import SemVer

from downgrade_build.exceptions import MinimumVersionError

_LOOSE = False


def _semver(version: str) -> SemVer:
    return nodesemver.make_semver(version, _LOOSE)


def _format(major: int, minor: int, patch: int, prerelease: Sequence[Union[int, str]] = ()) -> str:
    version = f"{major}.{minor}.{patch}"
    if prerelease:
        version += "-" + ".".join(str(part) for part in prerelease)
    return version


def _lower_bound(bound: SemVer, exclusive: bool) -> SemVer:
    """Lowest version admitted by a ">=" bound, or by a ">" bound if `exclusive`."""
    prerelease = list(bound.prerelease)
    patch = bound.patch
    if exclusive:
        if prerelease:
            prerelease.append(0)
        else:
            patch += 1
    return _semver(_format(bound.major, bound.minor, patch, prerelease))


def minimum_version(version_range: str, name: Optional[str] = None) -> str:
    """Compute the lowest concrete version satisfying an npm range.

    The candidates are "0.0.0", then "0.0.0-0", then the lowest bound of each
    comparator set of the range (a strict ">" bound is bumped to the next
    version). The smallest candidate is returned only if the range accepts it.

    Args:
        version_range: The declared range, e.g. "^1.2.3" or ">=1.2.0 <2.0.0".
        name: Name of the dependency, used in error messages.

    Returns:
        The minimum version, formatted without build metadata.

    Raises:
        MinimumVersionError: If the range is invalid or no version satisfies it.

    Example:
        >>> minimum_version(">=1.2.0 <2.0.0")
        '1.2.0'
        >>> minimum_version("^3.1.4")
        '3.1.4'
    """
    try:
        parsed = nodesemver.make_range(version_range, _LOOSE)
    except (TypeError, ValueError) as e:
        raise MinimumVersionError(version_range, name) from e

    for floor in ("0.0.0", "0.0.0-0"):
        if parsed.test(floor):
            return floor

    minimum: Optional[SemVer] = None
    for comparators in parsed.set:
        set_minimum: Optional[SemVer] = None
        for comparator in comparators:
            bound = comparator.semver
            # "*" comparators carry no version
            if not isinstance(bound, SemVer):
                continue
            if comparator.operator not in ("", "=", ">=", ">"):
                continue
            candidate = _lower_bound(bound, exclusive=comparator.operator == ">")
            if set_minimum is None or nodesemver.gt(candidate, set_minimum, _LOOSE):
                set_minimum = candidate
        if set_minimum is not None and (minimum is None or nodesemver.gt(minimum, set_minimum, _LOOSE)):
            minimum = set_minimum

    if minimum is None:
        raise MinimumVersionError(version_range, name)
    result = _format(minimum.major, minimum.minor, minimum.patch, minimum.prerelease)
    if not parsed.test(result):
        raise MinimumVersionError(version_range, name)
    return result


def minimize(dependencies: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
    """Replace every range of a dependency mapping with its minimum version.

    The input is not modified. A missing section (None) stays missing.

    Args:
        dependencies: Mapping of dependency name to declared range.

    Returns:
        A new mapping with the same keys and minimum versions as values.

    Raises:
        MinimumVersionError: If any range has no computable minimum. Nothing is
            returned for the other entries in that case.

    Example:
        >>> minimize({"x": ">=1.2.0 <2.0.0"})
        {'x': '1.2.0'}
    """
    if dependencies is None:
        return None
    return {name: minimum_version(version_range, name) for name, version_range in dependencies.items()}

from abc import ABC, abstractmethod
from enum import Enum


class MatchStatus(str, Enum):
    """Outcome of testing a path against one set of exclusion rules.

    Values:
        EXCLUDED: The last matching pattern excludes the path
        INCLUDED: The last matching pattern is a negated (re-inclusion) pattern
        UNMATCHED: No pattern matches the path
    """

    EXCLUDED = "excluded"
    INCLUDED = "included"
    UNMATCHED = "unmatched"


class BaseExclusionRules(ABC):
    """
    Abstract base class defining the interface for file exclusion rules.

    A rule set answers a single question for a path relative to the directory the
    rules belong to: does the path match an exclusion, an explicit re-inclusion, or
    nothing at all? The three-way answer is what lets nested rule sets override
    each other; the boolean exclude() view is provided for callers that only care
    about a single rule set.

    Example:
        >>> class TmpRules(BaseExclusionRules):
        ...     def check(self, path: str) -> MatchStatus:
        ...         if path.endswith('.tmp'):
        ...             return MatchStatus.EXCLUDED
        ...         return MatchStatus.UNMATCHED
        >>> rules = TmpRules()
        >>> rules.exclude("build/temp.tmp")
        True
        >>> rules.check("main.py")
        <MatchStatus.UNMATCHED: 'unmatched'>
    """

    @abstractmethod
    def check(self, path: str) -> MatchStatus:
        """
        Classify a path against the loaded rules.

        Args:
            path (str): Path relative to the directory owning the rules, using
                forward slashes as separators.

        Returns:
            MatchStatus: EXCLUDED, INCLUDED or UNMATCHED.
        """
        pass

    def exclude(self, path: str) -> bool:
        """
        Determine if a given path is excluded by these rules alone.

        Args:
            path (str): Path relative to the directory owning the rules.

        Returns:
            bool: True if the path should be excluded, False otherwise.
        """
        return self.check(path) is MatchStatus.EXCLUDED

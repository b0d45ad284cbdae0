"""Implementation of exclusion rules using .gitignore pattern syntax."""

import logging
from os import PathLike
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pathspec.patterns import GitWildMatchPattern  # type: ignore
from pathspec.util import normalize_file

from downgrade_build.types import PathType

from .base_rules import BaseExclusionRules, MatchStatus

logger = logging.getLogger(__name__)


class GitIgnoreExclusionRules(BaseExclusionRules):
    """Compiled contents of one .gitignore-style rule file.

    Patterns are compiled with pathspec's gitwildmatch implementation, so the
    usual .gitignore syntax is supported:
    - Basic globs (*, ?, [abc], [0-9], etc.)
    - Directory-specific patterns (ending in /)
    - Negation patterns (starting with !)
    - Double-asterisk matching (**)
    - Comment lines (starting with #) and blank lines, which are ignored

    Lines that cannot be compiled are skipped rather than treated as fatal, so a
    single malformed line never hides the rest of the file.

    Unlike pathspec's PathSpec, check() keeps the distinction between "matched a
    negated pattern" and "matched nothing". Nested rule files need that
    distinction: an inner file's explicit re-inclusion must be able to override
    an outer file's exclusion.

    Example:
        >>> rules = GitIgnoreExclusionRules.from_text("*.log\\n!keep.log\\n")
        >>> rules.check("debug.log")
        <MatchStatus.EXCLUDED: 'excluded'>
        >>> rules.check("keep.log")
        <MatchStatus.INCLUDED: 'included'>
        >>> rules.check("main.py")
        <MatchStatus.UNMATCHED: 'unmatched'>

    Note:
        Paths are normalized to forward slashes before matching, since rule
        patterns are always written in that convention.
    """

    def __init__(self, rules_files: Optional[Union[PathType, Sequence[PathType]]] = None):
        """Initialize GitIgnoreExclusionRules with patterns from specified files.

        Args:
            rules_files: Path(s) to the file(s) containing .gitignore patterns.

        Raises:
            FileNotFoundError: If any rules file does not exist.
        """
        self._patterns: List[GitWildMatchPattern] = []

        if rules_files is not None:
            self.load_rules(rules_files)

    @classmethod
    def from_text(cls, text: str) -> "GitIgnoreExclusionRules":
        """Compile the raw text of a rule file.

        Args:
            text: Newline separated .gitignore patterns.

        Returns:
            A new rule set holding every pattern that compiled.

        Example:
            >>> rules = GitIgnoreExclusionRules.from_text("# comment\\n\\nbuild/\\n")
            >>> len(rules.patterns)
            1
            >>> rules.exclude("build/output.txt")
            True
        """
        rules = cls()
        rules.add_lines(text.splitlines())
        return rules

    @property
    def patterns(self) -> Tuple[GitWildMatchPattern, ...]:
        """The compiled, non-empty patterns in file order."""
        return tuple(self._patterns)

    def check(self, path: str) -> MatchStatus:
        """Classify a path using the last pattern that matches it.

        Args:
            path: Path relative to the rule file's directory.

        Returns:
            MatchStatus.EXCLUDED if the last matching pattern is a normal pattern,
            MatchStatus.INCLUDED if it is a negated one, MatchStatus.UNMATCHED if
            no pattern matches.

        Example:
            >>> rules = GitIgnoreExclusionRules.from_text("*.pyc\\n!important.pyc\\n")
            >>> rules.exclude("test.pyc")
            True
            >>> rules.exclude("important.pyc")
            False
        """
        normalized = normalize_file(path)
        for pattern in reversed(self._patterns):
            if pattern.match_file(normalized) is not None:
                return MatchStatus.EXCLUDED if pattern.include else MatchStatus.INCLUDED
        return MatchStatus.UNMATCHED

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """Load and append .gitignore patterns from one or more files.

        Patterns are processed in the order they are added, with later patterns
        overriding earlier ones.

        Args:
            rules_files: Path(s) to file(s) containing .gitignore patterns.

        Raises:
            FileNotFoundError: If any rules file does not exist.
            OSError: If a rules file exists but cannot be read.
        """
        if isinstance(rules_files, (str, PathLike)):
            rules_files = [rules_files]

        for rules_file in rules_files:
            path = Path(rules_file)
            # Undecodable bytes are replaced so the remaining lines still apply
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                self.add_lines(f.read().splitlines())

    def add_lines(self, lines: Iterable[str]) -> None:
        """Add several .gitignore pattern lines, in order."""
        for line in lines:
            self.add_rule(line)

    def add_rule(self, rule: str) -> None:
        """Add a single .gitignore pattern directly.

        Blank lines and comments are accepted and ignored. A pattern that fails to
        compile is logged at debug level and skipped.

        Args:
            rule: A single .gitignore pattern (e.g. "*.pyc", "node_modules/",
                "!important.txt").

        Example:
            >>> rules = GitIgnoreExclusionRules()
            >>> rules.add_rule("build/")
            >>> rules.exclude("build/output.txt")
            True
        """
        try:
            pattern = GitWildMatchPattern(rule)
        except ValueError as e:
            logger.debug("Skipping malformed pattern %r: %s", rule, e)
            return

        # Comments and blank lines compile to null patterns
        if pattern.include is None:
            return

        self._patterns.append(pattern)

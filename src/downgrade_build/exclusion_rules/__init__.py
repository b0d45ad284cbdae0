"""Exclusion rules for filtering files in a project snapshot."""

from .base_rules import BaseExclusionRules, MatchStatus
from .git_rules import GitIgnoreExclusionRules

__all__ = [
    "BaseExclusionRules",
    "GitIgnoreExclusionRules",
    "MatchStatus",
]

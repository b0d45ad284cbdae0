"""Resolution of nested .gitignore files into a single ignore decision.

An IgnoreStack holds one frame per rule file governing a directory, ordered from
the filesystem root down to the directory itself. Each frame remembers the path
leading from its own directory to the next inner frame's directory (or to the
current directory, for the innermost frame), which is all that is needed to turn
a bare file name into the path each rule file expects.
"""

import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from downgrade_build.exclusion_rules.base_rules import BaseExclusionRules, MatchStatus
from downgrade_build.exclusion_rules.git_rules import GitIgnoreExclusionRules
from downgrade_build.types import PathType

logger = logging.getLogger(__name__)

DEFAULT_RULES_FILENAME = ".gitignore"


@dataclass(frozen=True)
class StackFrame:
    """One rule file and its position relative to the traversal.

    Attributes:
        child (str): Forward-slash path from the rule file's directory to the next
            inner frame's directory, or to the current directory for the innermost
            frame. A freshly pushed frame uses ".".
        rules (BaseExclusionRules): The compiled rule file.
    """

    child: str
    rules: BaseExclusionRules

    def descend(self, name: str) -> "StackFrame":
        """Return a copy of this frame positioned one directory deeper."""
        return StackFrame(posixpath.normpath(posixpath.join(self.child, name)), self.rules)


def load_rules_file(
    directory: PathType, rules_filename: str = DEFAULT_RULES_FILENAME
) -> Optional[GitIgnoreExclusionRules]:
    """Compile the rule file in a directory, if there is one.

    A missing file is the common case and yields None silently. Any other
    failure to read the file (permission denied, a directory in its place, a
    symlink loop) is logged and also yields None, so one unreadable file never
    aborts a traversal.

    Args:
        directory: Directory that may contain a rule file.
        rules_filename: Name of the rule file. Defaults to ".gitignore".

    Returns:
        The compiled rules, or None if the directory has no readable rule file.
    """
    rules_path = Path(directory) / rules_filename
    try:
        return GitIgnoreExclusionRules(rules_path)
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Could not read %s: %s", rules_path, e)
        return None


class IgnoreStack:
    """Immutable chain of rule files governing one directory.

    Stacks are never modified in place: descend() returns a new stack that shares
    the outer frames with its parent. Sibling directories therefore never see each
    other's rule files, and a stack can be handed to any branch of a traversal
    without copying.

    Example:
        >>> outer = GitIgnoreExclusionRules.from_text("build/\\n")
        >>> inner = GitIgnoreExclusionRules.from_text("!keep.txt\\n")
        >>> stack = IgnoreStack([StackFrame("build", outer), StackFrame(".", inner)])
        >>> stack.ignored("keep.txt")
        False
        >>> stack.ignored("other.txt")
        True
    """

    def __init__(self, frames: Sequence[StackFrame] = ()) -> None:
        self._frames: Tuple[StackFrame, ...] = tuple(frames)

    @property
    def frames(self) -> Tuple[StackFrame, ...]:
        """Frames ordered from the outermost rule file to the innermost."""
        return self._frames

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f"IgnoreStack({[frame.child for frame in self._frames]!r})"

    @classmethod
    def for_directory(cls, directory: PathType, rules_filename: str = DEFAULT_RULES_FILENAME) -> "IgnoreStack":
        """Build the stack governing a directory.

        Every ancestor of the directory, from the filesystem root down to the
        directory itself, is checked for a rule file. Ancestors without one add no
        frame; their names are folded into the path of the nearest frame above
        them.

        Args:
            directory: The directory whose governing rule files are wanted.
            rules_filename: Name of the rule files. Defaults to ".gitignore".

        Returns:
            The stack. It is empty if no rule file exists on the path.
        """
        absolute = Path(os.path.abspath(directory))
        lineage = list(absolute.parents)[::-1] + [absolute]

        root = lineage[0]
        stack = cls()
        rules = load_rules_file(root, rules_filename)
        if rules is not None:
            stack = cls([StackFrame(".", rules)])

        for current in lineage[1:]:
            stack = stack.descend(current.name, current, rules_filename)
        return stack

    def descend(self, name: str, directory: PathType, rules_filename: str = DEFAULT_RULES_FILENAME) -> "IgnoreStack":
        """Return the stack for the subdirectory `name`.

        The innermost frame's path is extended by `name`, and if the subdirectory
        carries its own rule file, a new frame for it is pushed.

        Args:
            name: Name of the subdirectory, relative to the current directory.
            directory: Filesystem path of that subdirectory.
            rules_filename: Name of the rule files. Defaults to ".gitignore".

        Returns:
            A new stack; this one is left unchanged.
        """
        frames = list(self._frames)
        if frames:
            frames[-1] = frames[-1].descend(name)

        rules = load_rules_file(directory, rules_filename)
        if rules is not None:
            frames.append(StackFrame(".", rules))
        return IgnoreStack(frames)

    def status(self, name: str) -> MatchStatus:
        """Resolve the combined status of a name in the current directory.

        Frames are folded from the innermost outward, carrying the candidate path
        and the decision made so far. At each step the frame's path is prepended
        to the candidate, so every rule file sees the path relative to its own
        directory, and combine() merges the frame's verdict with the carried one.

        Args:
            name: File name (or relative path) below the current directory.

        Returns:
            EXCLUDED or INCLUDED as decided by the outermost frame, UNMATCHED if
            that frame matched nothing or cancelled the decision carried to it.
        """
        path = name
        status = MatchStatus.UNMATCHED
        for frame in reversed(self._frames):
            path = posixpath.normpath(posixpath.join(frame.child, path))
            status = combine(status, frame.rules.check(path))
        return status

    def ignored(self, name: str) -> bool:
        """Check whether a name in the current directory is excluded."""
        return self.status(name) is MatchStatus.EXCLUDED


def combine(inner: MatchStatus, outer: MatchStatus) -> MatchStatus:
    """Apply an outer frame's verdict to the decision carried from the inner frames.

    The outer frame excludes the path unless the inner frames re-included it, and
    re-includes it unless the inner frames excluded it. Opposite verdicts cancel,
    and an outer frame that matches nothing carries no decision further out.

    Example:
        >>> combine(MatchStatus.UNMATCHED, MatchStatus.EXCLUDED)
        <MatchStatus.EXCLUDED: 'excluded'>
        >>> combine(MatchStatus.INCLUDED, MatchStatus.EXCLUDED)
        <MatchStatus.UNMATCHED: 'unmatched'>
        >>> combine(MatchStatus.EXCLUDED, MatchStatus.UNMATCHED)
        <MatchStatus.UNMATCHED: 'unmatched'>
    """
    if outer is MatchStatus.EXCLUDED and inner is not MatchStatus.INCLUDED:
        return MatchStatus.EXCLUDED
    if outer is MatchStatus.INCLUDED and inner is not MatchStatus.EXCLUDED:
        return MatchStatus.INCLUDED
    return MatchStatus.UNMATCHED

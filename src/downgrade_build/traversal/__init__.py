"""Directory traversal governed by nested .gitignore files.

This package provides the ignore stack that resolves the combined effect of every
rule file between the filesystem root and a directory, and the walker that uses it
to list the files belonging in a project snapshot.
"""

from .ignore_stack import IgnoreStack, StackFrame
from .permission_action import PermissionAction
from .tree_walker import RESERVED_DIRECTORIES, TreeWalker, traverse

__all__ = [
    "IgnoreStack",
    "PermissionAction",
    "RESERVED_DIRECTORIES",
    "StackFrame",
    "TreeWalker",
    "traverse",
]

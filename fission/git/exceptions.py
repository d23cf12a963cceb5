"""Git-related exception classes.

Contains all exception classes for Git operations:
- GitError: Base exception for git-related errors
- InvalidRefError: Raised when a commit reference cannot be resolved
- DirtyWorkingTreeError: Raised when the working tree has uncommitted changes
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    pass


class InvalidRefError(GitError):
    """Raised when a commit reference cannot be resolved."""

    pass


class DirtyWorkingTreeError(GitError):
    """Raised when the working tree has uncommitted changes."""

    pass

"""Git access for fission.

This package provides:
- exceptions: GitError, InvalidRefError, DirtyWorkingTreeError
- runner: _run_git_command, get_repo_root
- commits: CommitInfo, resolve_ref, get_commit_info, get_unpushed_commits
- ops: get_file_at_ref, is_working_tree_clean, apply_patch, stage_all,
       create_commit, reset_to, get_log_oneline
"""

# Exceptions
from fission.git.exceptions import (
    DirtyWorkingTreeError,
    GitError,
    InvalidRefError,
)

# Runner utilities
from fission.git.runner import (
    _run_git_command,
    get_repo_root,
)

# Commit inspection
from fission.git.commits import (
    CommitInfo,
    get_commit_info,
    get_unpushed_commits,
    resolve_ref,
)

# Working tree operations
from fission.git.ops import (
    apply_patch,
    create_commit,
    get_file_at_ref,
    get_log_oneline,
    is_working_tree_clean,
    reset_to,
    stage_all,
)


__all__ = [
    # Exceptions
    "GitError",
    "InvalidRefError",
    "DirtyWorkingTreeError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Commits
    "CommitInfo",
    "get_commit_info",
    "get_unpushed_commits",
    "resolve_ref",
    # Operations
    "apply_patch",
    "create_commit",
    "get_file_at_ref",
    "get_log_oneline",
    "is_working_tree_clean",
    "reset_to",
    "stage_all",
]

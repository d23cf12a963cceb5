"""Working tree and history operations used when rewriting a commit.

Contains:
- get_file_at_ref: File content at a commit
- is_working_tree_clean: Whether there are uncommitted changes
- apply_patch: Check or apply a patch file to the working tree
- stage_all: Stage every change
- create_commit: Commit staged changes
- reset_to: Hard or soft reset
- get_log_oneline: Recent history, one line per commit
"""

from pathlib import Path
from typing import Optional

from fission.git.exceptions import GitError
from fission.git.runner import _run_git_command


def get_file_at_ref(ref: str, path: str, cwd: Optional[Path] = None) -> str:
    """Get a file's content at a commit.

    Returns:
        The file content, or an empty string if the file does not exist there.
    """
    try:
        return _run_git_command(["show", f"{ref}:{path}"], cwd=cwd, strip=False)
    except GitError:
        return ""


def is_working_tree_clean(cwd: Optional[Path] = None) -> bool:
    """Whether the working tree and index match HEAD (untracked files ignored)."""
    status = _run_git_command(["status", "--porcelain", "--untracked-files=no"], cwd=cwd)
    return status == ""


def apply_patch(patch_file: Path, check: bool = False, cwd: Optional[Path] = None) -> None:
    """Apply a patch file to the working tree.

    Args:
        patch_file: Path to the patch.
        check: Only verify that the patch applies.
        cwd: Repository directory.

    Raises:
        GitError: If the patch does not apply.
    """
    args = ["apply", "--whitespace=nowarn"]
    if check:
        args.append("--check")
    args.append(str(patch_file))
    _run_git_command(args, cwd=cwd)


def stage_all(cwd: Optional[Path] = None) -> None:
    """Stage every change in the working tree."""
    _run_git_command(["add", "-A"], cwd=cwd)


def create_commit(message: str, cwd: Optional[Path] = None) -> str:
    """Commit staged changes.

    Returns:
        The new commit's short hash.
    """
    _run_git_command(["commit", "-m", message], cwd=cwd)
    return _run_git_command(["rev-parse", "--short", "HEAD"], cwd=cwd)


def reset_to(ref: str, hard: bool = True, cwd: Optional[Path] = None) -> None:
    """Reset the current branch to a commit."""
    _run_git_command(["reset", "--hard" if hard else "--soft", ref], cwd=cwd)


def get_log_oneline(count: int, cwd: Optional[Path] = None) -> str:
    """Recent history, one line per commit."""
    return _run_git_command(["log", "--oneline", f"-{count}"], cwd=cwd)

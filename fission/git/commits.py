"""Commit inspection utilities.

Contains:
- CommitInfo: Summary of one commit, optionally with its full diff
- resolve_ref: Resolve a reference to a full commit hash
- get_commit_info: Collect metadata and diff for a commit
- get_unpushed_commits: List commits not yet on the upstream branch
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from fission.config import MAX_DIFF_CHARS
from fission.git.exceptions import GitError, InvalidRefError
from fission.git.runner import _run_git_command


@dataclass
class CommitInfo:
    """Summary of one commit."""

    hash: str
    short_hash: str
    message: str  # Subject line
    author: str
    date: str
    files: list[str] = field(default_factory=list)
    insertions: int = 0
    deletions: int = 0
    diff: str = ""  # Only filled when requested


def resolve_ref(ref: str, cwd: Optional[Path] = None) -> str:
    """Resolve a reference to a full commit hash.

    Raises:
        InvalidRefError: If the reference does not name a commit.
    """
    try:
        return _run_git_command(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=cwd)
    except GitError:
        raise InvalidRefError(f"Not a valid commit reference: {ref}")


def _parse_numstat(output: str) -> tuple[list[str], int, int]:
    """Parse 'git show --numstat' lines into files and totals.

    Binary files report '-' for both counts.
    """
    files: list[str] = []
    insertions = 0
    deletions = 0
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) != 3:
            continue
        added, removed, path = parts
        files.append(path)
        if added.isdigit():
            insertions += int(added)
        if removed.isdigit():
            deletions += int(removed)
    return files, insertions, deletions


def get_commit_info(
    ref: str = "HEAD",
    with_diff: bool = False,
    cwd: Optional[Path] = None,
    max_diff_chars: int = MAX_DIFF_CHARS,
    truncate: bool = False,
) -> CommitInfo:
    """Collect metadata, file stats and optionally the full diff of a commit.

    Args:
        ref: Commit reference.
        with_diff: Also fetch the full diff (with binary patch data).
        cwd: Repository directory.
        max_diff_chars: Largest diff accepted when with_diff is set.
        truncate: Cut an oversized diff to max_diff_chars instead of raising.

    Returns:
        CommitInfo for the commit.

    Raises:
        InvalidRefError: If the reference does not name a commit.
        GitError: If the diff is larger than max_diff_chars and truncate is off.
    """
    commit_hash = resolve_ref(ref, cwd=cwd)

    header = _run_git_command(
        ["show", "-s", "--format=%H%x00%h%x00%s%x00%an%x00%ad", "--date=short", commit_hash],
        cwd=cwd,
    )
    full, short, subject, author, date = header.split("\x00")

    numstat = _run_git_command(
        ["show", "--numstat", "--format=", "--no-renames", commit_hash], cwd=cwd
    )
    files, insertions, deletions = _parse_numstat(numstat)

    info = CommitInfo(
        hash=full,
        short_hash=short,
        message=subject,
        author=author,
        date=date,
        files=files,
        insertions=insertions,
        deletions=deletions,
    )

    if with_diff:
        diff = _run_git_command(
            ["show", "--format=", "--binary", "--no-color", "--no-ext-diff", commit_hash],
            cwd=cwd,
            strip=False,
        )
        if len(diff) > max_diff_chars and truncate:
            diff = diff[:max_diff_chars] + "\n... (truncated)"
        elif len(diff) > max_diff_chars:
            raise GitError(
                f"Diff of {info.short_hash} is too large to split "
                f"({len(diff)} chars, limit {max_diff_chars})"
            )
        info.diff = diff

    return info


def _upstream_ref(cwd: Optional[Path]) -> Optional[str]:
    """Find the branch to compare against: upstream, then origin/main, then origin/master."""
    try:
        return _run_git_command(
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"], cwd=cwd
        )
    except GitError:
        pass
    for candidate in ("origin/main", "origin/master"):
        try:
            resolve_ref(candidate, cwd=cwd)
            return candidate
        except InvalidRefError:
            continue
    return None


def get_unpushed_commits(count: Optional[int] = None, cwd: Optional[Path] = None) -> list[CommitInfo]:
    """List commits on the current branch that are not on its upstream.

    Falls back to the last `count` commits (default 1) when no upstream
    branch exists.

    Args:
        count: Maximum number of commits to return, newest first.
        cwd: Repository directory.

    Returns:
        CommitInfo list, newest first.
    """
    upstream = _upstream_ref(cwd)
    if upstream:
        rev_range = f"{upstream}..HEAD"
        args = ["rev-list", rev_range]
        if count:
            args.insert(1, f"--max-count={count}")
    else:
        args = ["rev-list", f"--max-count={count or 1}", "HEAD"]

    output = _run_git_command(args, cwd=cwd)
    return [get_commit_info(sha, cwd=cwd) for sha in output.splitlines() if sha]

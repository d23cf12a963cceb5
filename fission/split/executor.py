"""Rewrite history: replace a commit with the commits of a split plan.

Contains:
- SplitResult: What the executor did
- save_patches: Write patches to a directory as NN-<message>.patch
- execute_split: Reset the commit away and apply the patches as new commits
"""

import re
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from fission.git.commits import CommitInfo, resolve_ref
from fission.git.exceptions import DirtyWorkingTreeError, GitError
from fission.git.ops import (
    apply_patch,
    create_commit,
    get_log_oneline,
    is_working_tree_clean,
    reset_to,
    stage_all,
)
from fission.split.exceptions import SplitError, SplitExecutionError
from fission.split.models import PatchSplit, SplitPlan


@dataclass
class SplitResult:
    """What the executor did."""

    created: list[str] = field(default_factory=list)  # Short hashes, in order
    patch_dir: Optional[Path] = None  # Kept only when the split failed
    failed_index: Optional[int] = None  # 0-based index of the failing patch
    log: str = ""


def _patch_filename(index: int, message: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]", "_", message[:30])
    return f"{index + 1:02d}-{slug}.patch"


def save_patches(splits: list[PatchSplit], directory: Path) -> list[Path]:
    """Write each patch to the directory as NN-<sanitized message>.patch.

    Returns:
        Paths of the written files, in order
    """
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, split in enumerate(splits):
        path = directory / _patch_filename(i, split.message)
        path.write_text(split.diff)
        paths.append(path)
    return paths


def _commit_message(split: PatchSplit) -> str:
    if split.description.strip():
        return f"{split.message}\n\n{split.description.strip()}"
    return split.message


def execute_split(
    commit: CommitInfo,
    plan: SplitPlan,
    cwd: Optional[Path] = None,
    progress: Callable[[str], None] = lambda message: None,
) -> SplitResult:
    """Replace the HEAD commit with one commit per patch.

    The patches are saved to a temporary directory first. The commit is
    then hard reset away and each patch is checked, applied, staged and
    committed in order. Commits created before a failure are kept and the
    patch directory is left in place for manual recovery.

    Args:
        commit: The commit being split (must be HEAD)
        plan: Validated split plan
        cwd: Repository directory
        progress: Status callback

    Returns:
        SplitResult for a completed split

    Raises:
        DirtyWorkingTreeError: If there are uncommitted changes
        SplitError: If the commit is not HEAD
        SplitExecutionError: If resetting or applying a patch fails
    """
    if not is_working_tree_clean(cwd=cwd):
        raise DirtyWorkingTreeError("Working directory has uncommitted changes.")
    if resolve_ref("HEAD", cwd=cwd) != commit.hash:
        raise SplitError(f"Only the HEAD commit can be split, {commit.short_hash} is not HEAD")

    result = SplitResult(patch_dir=Path(tempfile.mkdtemp(prefix="fission-")))
    progress(f"Saving patches to {result.patch_dir}")
    patch_files = save_patches(plan.splits, result.patch_dir)

    progress("Hard resetting HEAD~1...")
    try:
        reset_to("HEAD~1", hard=True, cwd=cwd)
    except GitError as e:
        raise SplitExecutionError(f"Failed to hard reset: {e}", result=result)

    total = len(plan.splits)
    for i, (split, patch_file) in enumerate(zip(plan.splits, patch_files)):
        progress(f"Applying patch {i + 1}/{total}: {split.message[:40]}")
        try:
            apply_patch(patch_file, check=True, cwd=cwd)
            apply_patch(patch_file, cwd=cwd)
            stage_all(cwd=cwd)
            short_hash = create_commit(_commit_message(split), cwd=cwd)
        except GitError as e:
            result.failed_index = i
            raise SplitExecutionError(f"Patch {i + 1} failed to apply: {e}", result=result)
        result.created.append(short_hash)
        progress(f"  Created {short_hash}: {split.message[:50]}")

    shutil.rmtree(result.patch_dir, ignore_errors=True)
    result.patch_dir = None
    result.log = get_log_oneline(total + 1, cwd=cwd)
    return result

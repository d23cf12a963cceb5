"""Commit splitting for fission.

This package provides:
- models: CommitPlan, SplitPlanResult, HunkClassificationResult, CommitChanges,
          AssembledPatch, HunkSplitPlan, SplitPlan
- hunks / lines / materialize: Patch reconstruction from a parsed diff
- validation: Patch validator/fixer and hunk plan validation
- plan / classify / extract: Line mode phases
- pipeline: Mode dispatch and the retry-with-feedback loop
- executor: Rewriting history with the planned patches
"""

# Exceptions
from fission.split.exceptions import (
    PatchValidationError,
    PlanGenerationError,
    SplitError,
    SplitExecutionError,
)

# Models
from fission.split.models import (
    AssembledPatch,
    CommitChanges,
    CommitPlan,
    FileChanges,
    HunkClassificationResult,
    HunkCommit,
    HunkSplitPlan,
    LineClassification,
    LineRange,
    PatchSplit,
    SplitPlan,
    SplitPlanResult,
)

# Reconstruction
from fission.split.hunks import build_hunk_patch, build_hunk_patches
from fission.split.lines import build_line_patch, build_patches, filter_hunk
from fission.split.materialize import (
    build_content_patch,
    build_content_patches,
    materialize_file,
)

# Validation
from fission.split.validation import (
    PatchValidationResult,
    fix_patch,
    validate_and_fix_patch,
    validate_hunk_plan,
    validate_patches,
)

# Line mode phases
from fission.split.classify import classify_all_hunks, classify_hunk_lines
from fission.split.extract import extract_changes, validate_extraction
from fission.split.plan import generate_commit_plan

# Orchestration
from fission.split.executor import SplitResult, execute_split, save_patches
from fission.split.pipeline import SplitMode, SplitOutcome, plan_split, run_with_retries


__all__ = [
    # Exceptions
    "PatchValidationError",
    "PlanGenerationError",
    "SplitError",
    "SplitExecutionError",
    # Models
    "AssembledPatch",
    "CommitChanges",
    "CommitPlan",
    "FileChanges",
    "HunkClassificationResult",
    "HunkCommit",
    "HunkSplitPlan",
    "LineClassification",
    "LineRange",
    "PatchSplit",
    "SplitPlan",
    "SplitPlanResult",
    # Reconstruction
    "build_hunk_patch",
    "build_hunk_patches",
    "build_line_patch",
    "build_patches",
    "filter_hunk",
    "build_content_patch",
    "build_content_patches",
    "materialize_file",
    # Validation
    "PatchValidationResult",
    "fix_patch",
    "validate_and_fix_patch",
    "validate_hunk_plan",
    "validate_patches",
    # Line mode phases
    "classify_all_hunks",
    "classify_hunk_lines",
    "extract_changes",
    "validate_extraction",
    "generate_commit_plan",
    # Orchestration
    "SplitResult",
    "execute_split",
    "save_patches",
    "SplitMode",
    "SplitOutcome",
    "plan_split",
    "run_with_retries",
]

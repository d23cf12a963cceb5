"""Patch validation and repair.

Contains:
- PatchValidationResult: Outcome of validating one patch
- fix_patch: Apply the automatic fixes to a patch text
- validate_and_fix_patch: Fix a patch and check its structure
- validate_patches: Validate a sequence of patches
- validate_hunk_plan: Check a hunk-mode plan against the parsed hunks
"""

from dataclasses import dataclass, field

from fission.split.models import HunkSplitPlan


@dataclass
class PatchValidationResult:
    """Outcome of validating one patch."""

    valid: bool
    fixed: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def fix_patch(patch: str) -> str:
    """Apply automatic fixes to a patch text.

    Fixes, in order: literal '\\n' sequences in text with no real newline
    are unescaped, a trailing newline is ensured, and leading whitespace
    and trailing newlines are trimmed. A final empty context line is a
    single space and survives. The result ends with exactly one newline.
    Applying it twice gives the same text.
    """
    if "\\n" in patch and "\n" not in patch:
        patch = patch.replace("\\n", "\n")
    if not patch.endswith("\n"):
        patch += "\n"
    return patch.lstrip().rstrip("\n") + "\n"


def validate_and_fix_patch(patch: str, index: int) -> PatchValidationResult:
    """Fix a patch, then check its structure.

    Hunk line counts are not checked; git apply is the authority on those.

    Args:
        patch: Candidate patch text
        index: 0-based position of the patch, used in messages

    Returns:
        PatchValidationResult with the fixed text and any errors
    """
    errors: list[str] = []
    warnings: list[str] = []
    label = f"Patch {index + 1}"

    fixed = fix_patch(patch)
    if fixed != patch:
        warnings.append(f"{label}: Patch text was normalized")

    lines = fixed.split("\n")
    if not fixed.startswith("diff --git"):
        errors.append(f'{label}: Missing "diff --git" header')
    if not any(line.startswith("--- ") for line in lines) or not any(
        line.startswith("+++ ") for line in lines
    ):
        errors.append(f"{label}: Missing --- or +++ file headers")
    if not any(line.startswith("@@") and "@@" in line[2:] for line in lines):
        errors.append(f"{label}: Missing hunk header (@@ ... @@)")

    return PatchValidationResult(valid=not errors, fixed=fixed, errors=errors, warnings=warnings)


def validate_patches(patches: list[str]) -> tuple[list[str], list[str]]:
    """Fix and validate every patch of a split.

    Args:
        patches: Candidate patch texts in commit order

    Returns:
        Tuple of (fixed patch texts, accumulated error messages)
    """
    fixed: list[str] = []
    errors: list[str] = []
    for i, patch in enumerate(patches):
        result = validate_and_fix_patch(patch, i)
        fixed.append(result.fixed)
        errors.extend(result.errors)
    return fixed, errors


def validate_hunk_plan(plan: HunkSplitPlan, hunk_ids: list[int]) -> tuple[list[str], list[int]]:
    """Validate a hunk-mode plan against the parsed hunk ids.

    Args:
        plan: The plan returned by the oracle
        hunk_ids: Every hunk id of the parsed diff

    Returns:
        Tuple of (validation errors, unassigned hunk ids in order)
    """
    errors: list[str] = []
    known = set(hunk_ids)

    if not plan.commits:
        errors.append("Plan has no commits")

    used: set[int] = set()
    for i, commit in enumerate(plan.commits, 1):
        if not commit.message.strip():
            errors.append(f"Commit {i} has no message")
        if not commit.hunk_ids:
            errors.append(f"Commit {i} has no hunks")
        for hunk_id in commit.hunk_ids:
            if hunk_id not in known:
                errors.append(f"Commit {i} references unknown hunk: {hunk_id}")
            elif hunk_id in used:
                errors.append(f"Hunk {hunk_id} is used in multiple commits")
            else:
                used.add(hunk_id)

    unassigned = [hunk_id for hunk_id in hunk_ids if hunk_id not in used]
    if unassigned:
        shown = ", ".join(str(h) for h in unassigned[:5])
        more = f" and {len(unassigned) - 5} more" if len(unassigned) > 5 else ""
        errors.append(f"Unassigned hunks: {shown}{more}")

    return errors, unassigned

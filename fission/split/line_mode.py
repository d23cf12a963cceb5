"""Line mode: plan, classify, extract, assemble.

The oracle decides which commits exist and which commit each changed line
belongs to. All patch text is built locally from the parsed diff.

Contains:
- LineSplitArtifacts: The four-artifact chain of one line mode run
- assemble_line_patches: Extract and assemble from given classifications
- run_line_attempt: One attempt of the line mode retry loop
"""

from dataclasses import dataclass, field, replace

from fission.split.classify import classify_all_hunks
from fission.split.context import AttemptResult, SplitContext
from fission.split.debug import hunks_snapshot
from fission.split.exceptions import PlanGenerationError
from fission.split.extract import extract_changes, validate_extraction
from fission.split.lines import build_patches
from fission.split.materialize import build_content_patches
from fission.split.models import (
    AssembledPatch,
    CommitChanges,
    CommitPlan,
    HunkClassificationResult,
    PatchSplit,
    SplitPlan,
)
from fission.split.plan import generate_commit_plan
from fission.split.validation import validate_patches


@dataclass
class LineSplitArtifacts:
    """Intermediate values of a line mode run."""

    plans: list[CommitPlan]
    classifications: list[HunkClassificationResult]
    changes: list[CommitChanges] = field(default_factory=list)
    patches: list[AssembledPatch] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def assemble_line_patches(
    ctx: SplitContext,
    plans: list[CommitPlan],
    classifications: list[HunkClassificationResult],
) -> LineSplitArtifacts:
    """Extract per-commit ranges and assemble one patch per commit.

    Exhaustiveness problems are reported as warnings. With the "content"
    strategy patches are rebuilt from materialized file contents.

    Args:
        ctx: Split context
        plans: Planned commits in order
        classifications: One classification per hunk

    Returns:
        LineSplitArtifacts
    """
    artifacts = LineSplitArtifacts(plans=plans, classifications=classifications)
    artifacts.changes = extract_changes(ctx.file_diffs, plans, classifications, artifacts.warnings)
    artifacts.warnings.extend(validate_extraction(ctx.file_diffs, artifacts.changes))

    if ctx.strategy == "content" and ctx.read_base is not None:
        artifacts.patches = build_content_patches(
            ctx.file_diffs,
            artifacts.changes,
            ctx.read_base,
            context_lines=ctx.context_lines,
            warnings=artifacts.warnings,
        )
    else:
        artifacts.patches = build_patches(ctx.file_diffs, artifacts.changes, artifacts.warnings)
    return artifacts


def _write_debug(ctx: SplitContext, artifacts: LineSplitArtifacts) -> None:
    if not ctx.debug:
        return
    ctx.debug.write_json("02-hunks.json", hunks_snapshot(ctx.file_diffs))
    ctx.debug.write_json("03-classifications.json", artifacts.classifications)
    ctx.debug.write_json("04-extracted.json", artifacts.changes)
    for i, patch in enumerate(artifacts.patches):
        ctx.debug.write_patch(i, patch.commit_id, patch.patch)
    ctx.debug.write_json(
        "05-patches-summary.json",
        [
            {
                "commit_id": patch.commit_id,
                "message": patch.message,
                "lines": len(patch.patch.splitlines()),
            }
            for patch in artifacts.patches
        ],
    )


def run_line_attempt(
    ctx: SplitContext, previous_errors: list[str], final: bool
) -> AttemptResult:
    """Run one line mode attempt.

    When filtered patches fail validation and base contents are available,
    the patches are rebuilt in content mode before giving up on the attempt.

    Args:
        ctx: Split context
        previous_errors: Errors fed back to the oracle
        final: Whether this is the last attempt (unused in this mode)

    Returns:
        AttemptResult
    """
    try:
        plan_result = generate_commit_plan(ctx.provider, ctx.commit, ctx.instruction, previous_errors)
    except PlanGenerationError as e:
        return AttemptResult(errors=[str(e)], plan_failed=True)

    if ctx.debug:
        ctx.debug.write_json("01-plan.json", plan_result)

    if len(plan_result.commits) < 2:
        return AttemptResult(already_atomic=True)

    ctx.progress(f"Planned {len(plan_result.commits)} commits, classifying lines...")
    classifications = classify_all_hunks(
        ctx.provider, ctx.file_diffs, plan_result.commits, concurrency=ctx.concurrency
    )
    fallbacks = sum(1 for result in classifications if result.fallback)

    artifacts = assemble_line_patches(ctx, plan_result.commits, classifications)
    if fallbacks:
        artifacts.warnings.append(
            f"{fallbacks} hunk(s) could not be classified and went to {plan_result.commits[0].id}"
        )
    _write_debug(ctx, artifacts)

    fixed, errors = validate_patches([patch.patch for patch in artifacts.patches])
    if errors and ctx.strategy != "content" and ctx.read_base is not None:
        ctx.progress("Filtered patches failed validation, rebuilding from file contents...")
        content_ctx = replace(ctx, strategy="content", debug=None)
        artifacts = assemble_line_patches(content_ctx, plan_result.commits, classifications)
        fixed, errors = validate_patches([patch.patch for patch in artifacts.patches])
    if errors:
        return AttemptResult(errors=errors, warnings=artifacts.warnings)

    splits = [
        PatchSplit(message=patch.message, description=patch.description, diff=fixed[i])
        for i, patch in enumerate(artifacts.patches)
    ]
    return AttemptResult(
        plan=SplitPlan(reasoning=plan_result.reasoning, splits=splits),
        warnings=artifacts.warnings,
    )

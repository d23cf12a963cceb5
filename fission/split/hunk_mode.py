"""Hunk mode: the oracle assigns whole hunks to commits.

Contains:
- generate_hunk_plan: Request a HunkSplitPlan from the oracle
- assign_unassigned: Append hunks missing from a plan to its last commit
- run_hunk_attempt: One attempt of the hunk mode retry loop
"""

from typing import Optional

from pydantic import ValidationError

from fission.config import PLAN_MAX_TOKENS
from fission.diff.models import iter_hunks
from fission.llm import BaseLLMProvider, LLMError, MissingAPIKeyError, parse_json_response
from fission.split.context import AttemptResult, SplitContext
from fission.split.exceptions import PlanGenerationError
from fission.split.hunks import build_hunk_patches
from fission.split.models import HunkSplitPlan, PatchSplit, SplitPlan
from fission.split.prompt import HUNK_PLAN_SYSTEM_PROMPT, build_hunk_plan_prompt
from fission.split.validation import validate_hunk_plan, validate_patches


def generate_hunk_plan(
    provider: BaseLLMProvider,
    ctx: SplitContext,
    previous_errors: Optional[list[str]] = None,
) -> HunkSplitPlan:
    """Ask the oracle to assign the parsed hunks to commits.

    Raises:
        PlanGenerationError: If the oracle fails or returns an unusable plan
    """
    user_prompt = build_hunk_plan_prompt(ctx.commit, ctx.file_diffs, ctx.instruction, previous_errors)
    try:
        result = provider.generate_raw(HUNK_PLAN_SYSTEM_PROMPT, user_prompt, max_tokens=PLAN_MAX_TOKENS)
        parsed = parse_json_response(result.raw_response)
        return HunkSplitPlan.model_validate(parsed)
    except MissingAPIKeyError:
        raise
    except LLMError as e:
        raise PlanGenerationError(f"Failed to generate hunk plan: {e}")
    except ValidationError as e:
        raise PlanGenerationError(f"Invalid hunk plan structure: {e}")


def assign_unassigned(plan: HunkSplitPlan, unassigned: list[int]) -> None:
    """Append hunk ids missing from the plan to its last commit."""
    if plan.commits and unassigned:
        plan.commits[-1].hunk_ids.extend(unassigned)


def run_hunk_attempt(
    ctx: SplitContext, previous_errors: list[str], final: bool
) -> AttemptResult:
    """Run one hunk mode attempt.

    On the final attempt, a plan whose only problem is unassigned hunks is
    repaired by appending them to the last commit.

    Args:
        ctx: Split context
        previous_errors: Errors fed back to the oracle
        final: Whether this is the last attempt

    Returns:
        AttemptResult
    """
    try:
        hunk_plan = generate_hunk_plan(ctx.provider, ctx, previous_errors)
    except PlanGenerationError as e:
        return AttemptResult(errors=[str(e)], plan_failed=True)

    if ctx.debug:
        ctx.debug.write_json("01-plan.json", hunk_plan)

    if len(hunk_plan.commits) < 2:
        return AttemptResult(already_atomic=True)

    hunk_ids = [hunk.id for hunk in iter_hunks(ctx.file_diffs)]
    errors, unassigned = validate_hunk_plan(hunk_plan, hunk_ids)
    warnings: list[str] = []

    only_unassigned = unassigned and len(errors) == 1 and errors[0].startswith("Unassigned hunks")
    if final and only_unassigned:
        assign_unassigned(hunk_plan, unassigned)
        warnings.append(
            f"Appended {len(unassigned)} unassigned hunk(s) to the last commit"
        )
        errors = []
    if errors:
        return AttemptResult(errors=errors)

    patches = build_hunk_patches(ctx.file_diffs, [commit.hunk_ids for commit in hunk_plan.commits])
    splits: list[PatchSplit] = []
    for commit, patch in zip(hunk_plan.commits, patches):
        if not patch:
            warnings.append(f"Commit {commit.message!r} has no changes and was dropped")
            continue
        splits.append(PatchSplit(message=commit.message, description=commit.description, diff=patch))

    fixed, errors = validate_patches([split.diff for split in splits])
    if errors:
        return AttemptResult(errors=errors, warnings=warnings)

    for i, split in enumerate(splits):
        split.diff = fixed[i]
        if ctx.debug:
            ctx.debug.write_patch(i, f"commit_{i + 1}", split.diff)

    return AttemptResult(plan=SplitPlan(reasoning=hunk_plan.reasoning, splits=splits), warnings=warnings)

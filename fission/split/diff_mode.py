"""Diff mode: the oracle writes each split's diff text itself.

Every patch goes through the validator/fixer; structural errors are fed
back to the oracle on the next attempt.

Contains:
- generate_split_plan: Request a SplitPlan with diff texts
- run_diff_attempt: One attempt of the diff mode retry loop
"""

from typing import Optional

from pydantic import ValidationError

from fission.config import PLAN_MAX_TOKENS
from fission.llm import BaseLLMProvider, LLMError, MissingAPIKeyError, parse_json_response
from fission.split.context import AttemptResult, SplitContext
from fission.split.exceptions import PlanGenerationError
from fission.split.models import SplitPlan
from fission.split.prompt import DIFF_SPLIT_SYSTEM_PROMPT, build_diff_split_prompt
from fission.split.validation import validate_patches


def generate_split_plan(
    provider: BaseLLMProvider,
    ctx: SplitContext,
    previous_errors: Optional[list[str]] = None,
) -> SplitPlan:
    """Ask the oracle to split the commit's diff into patches.

    Raises:
        PlanGenerationError: If the oracle fails or returns an unusable plan
    """
    user_prompt = build_diff_split_prompt(ctx.commit, ctx.instruction, previous_errors)
    try:
        result = provider.generate_raw(DIFF_SPLIT_SYSTEM_PROMPT, user_prompt, max_tokens=PLAN_MAX_TOKENS)
        parsed = parse_json_response(result.raw_response)
        return SplitPlan.model_validate(parsed)
    except MissingAPIKeyError:
        raise
    except LLMError as e:
        raise PlanGenerationError(f"Failed to generate split plan: {e}")
    except ValidationError as e:
        raise PlanGenerationError(f"Invalid split plan structure: {e}")


def run_diff_attempt(
    ctx: SplitContext, previous_errors: list[str], final: bool
) -> AttemptResult:
    """Run one diff mode attempt.

    Args:
        ctx: Split context
        previous_errors: Errors fed back to the oracle
        final: Whether this is the last attempt (unused in this mode)

    Returns:
        AttemptResult
    """
    try:
        plan = generate_split_plan(ctx.provider, ctx, previous_errors)
    except PlanGenerationError as e:
        return AttemptResult(errors=[str(e)], plan_failed=True)

    if ctx.debug:
        ctx.debug.write_json("01-plan.json", plan)

    if len(plan.splits) < 2:
        return AttemptResult(already_atomic=True)

    fixed, errors = validate_patches([split.diff for split in plan.splits])
    if errors:
        return AttemptResult(errors=errors)

    for i, split in enumerate(plan.splits):
        split.diff = fixed[i]
        if ctx.debug:
            ctx.debug.write_patch(i, f"split_{i + 1}", split.diff)

    return AttemptResult(plan=plan)

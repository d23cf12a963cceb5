"""Line mode phase 1: ask the oracle what commits to create.

Contains:
- generate_commit_plan: Request and validate a SplitPlanResult
"""

from typing import Optional

from pydantic import ValidationError

from fission.config import PLAN_MAX_TOKENS
from fission.git.commits import CommitInfo
from fission.llm import BaseLLMProvider, LLMError, MissingAPIKeyError, parse_json_response
from fission.split.exceptions import PlanGenerationError
from fission.split.models import SplitPlanResult
from fission.split.prompt import PLAN_SYSTEM_PROMPT, build_plan_prompt


def generate_commit_plan(
    provider: BaseLLMProvider,
    commit: CommitInfo,
    instruction: Optional[str] = None,
    previous_errors: Optional[list[str]] = None,
) -> SplitPlanResult:
    """Ask the oracle how to split a commit.

    The oracle only decides which commits to create; it never writes diff
    content.

    Args:
        provider: LLM provider
        commit: The commit to split, with its diff
        instruction: Optional free text from the user
        previous_errors: Errors of the previous attempt, if retrying

    Returns:
        SplitPlanResult with commits in dependency order

    Raises:
        PlanGenerationError: If the oracle fails or returns an unusable plan
        MissingAPIKeyError: If the provider has no API key
    """
    user_prompt = build_plan_prompt(commit, instruction, previous_errors)
    try:
        result = provider.generate_raw(PLAN_SYSTEM_PROMPT, user_prompt, max_tokens=PLAN_MAX_TOKENS)
        parsed = parse_json_response(result.raw_response)
    except MissingAPIKeyError:
        raise
    except LLMError as e:
        raise PlanGenerationError(f"Failed to generate commit plan: {e}")

    if not isinstance(parsed.get("commits"), list):
        raise PlanGenerationError("Invalid plan structure: missing commits array")

    try:
        plan = SplitPlanResult.model_validate(parsed)
    except ValidationError as e:
        raise PlanGenerationError(f"Invalid plan structure: {e}")

    if not plan.commits:
        raise PlanGenerationError("Plan has no commits")

    ids = [commit_plan.id for commit_plan in plan.commits]
    if len(set(ids)) != len(ids):
        raise PlanGenerationError(f"Plan has duplicate commit ids: {', '.join(ids)}")

    return plan

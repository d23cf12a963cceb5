"""Split orchestration: mode dispatch and the retry-with-feedback loop.

Contains:
- SplitMode: Available split modes
- SplitOutcome: Result of planning a split
- run_with_retries: Bounded attempt loop with accumulated errors
- plan_split: Parse a commit's diff and plan its split in the given mode
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from fission.config import (
    DEFAULT_CLASSIFY_CONCURRENCY,
    DEFAULT_CONTEXT_LINES,
    DEFAULT_MAX_RETRIES,
)
from fission.diff.models import FileDiff
from fission.diff.parser import parse_unified_diff
from fission.git.commits import CommitInfo
from fission.llm import BaseLLMProvider
from fission.split.context import AttemptResult, SplitContext
from fission.split.debug import DebugWriter
from fission.split.diff_mode import run_diff_attempt
from fission.split.exceptions import PatchValidationError, PlanGenerationError
from fission.split.hunk_mode import run_hunk_attempt
from fission.split.line_mode import run_line_attempt
from fission.split.models import SplitPlan


class SplitMode(str, Enum):
    """How patches for the new commits are produced."""

    HUNK = "hunk"
    LINE = "line"
    DIFF = "diff"


_ATTEMPTS = {
    SplitMode.HUNK: run_hunk_attempt,
    SplitMode.LINE: run_line_attempt,
    SplitMode.DIFF: run_diff_attempt,
}


@dataclass
class SplitOutcome:
    """Result of planning a split."""

    plan: Optional[SplitPlan] = None
    already_atomic: bool = False
    warnings: list[str] = field(default_factory=list)
    attempts: int = 0


def run_with_retries(
    attempt: Callable[[list[str], bool], AttemptResult],
    max_retries: int = DEFAULT_MAX_RETRIES,
    progress: Callable[[str], None] = lambda message: None,
) -> tuple[AttemptResult, int]:
    """Run an attempt up to max_retries + 1 times.

    Each attempt receives every distinct error reported so far. The loop
    stops at the first attempt without errors.

    Args:
        attempt: Callable taking (accumulated errors, is final attempt)
        max_retries: Retries after the first attempt
        progress: Status callback

    Returns:
        Tuple of (last AttemptResult, number of attempts made)
    """
    accumulated: list[str] = []
    total = max_retries + 1
    result = AttemptResult()

    for number in range(1, total + 1):
        if number > 1:
            progress(f"Retrying (attempt {number}/{total})...")
        result = attempt(list(accumulated), number == total)
        if not result.errors:
            return result, number

        progress("Patch validation found issues:")
        for error in result.errors:
            progress(f"  - {error}")
            if error not in accumulated:
                accumulated.append(error)

    return result, total


def plan_split(
    commit: CommitInfo,
    provider: BaseLLMProvider,
    mode: SplitMode = SplitMode.HUNK,
    instruction: Optional[str] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    debug_dir: Optional[Path] = None,
    progress: Callable[[str], None] = lambda message: None,
    strategy: str = "filter",
    read_base: Optional[Callable[[FileDiff], str]] = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    concurrency: int = DEFAULT_CLASSIFY_CONCURRENCY,
) -> SplitOutcome:
    """Plan the split of a commit into validated patches.

    No repository state is touched.

    Args:
        commit: The commit to split, with its diff
        provider: LLM provider
        mode: Split mode
        instruction: Optional free text forwarded to the plan prompt
        max_retries: Retries after structural validation failures
        debug_dir: Directory for debug artifacts, if any
        progress: Status callback
        strategy: Line mode patch construction, "filter" or "content"
        read_base: Returns a file's content at the parent commit (content strategy)
        context_lines: Context lines for content strategy patches
        concurrency: Classification requests in flight (line mode)

    Returns:
        SplitOutcome

    Raises:
        PlanGenerationError: If the oracle never produced a plan
        PatchValidationError: If patches still failed validation after all retries
    """
    file_diffs, parse_warnings = parse_unified_diff(commit.diff)

    debug = None
    if debug_dir is not None:
        debug = DebugWriter(debug_dir, on_write=lambda path: progress(f"Debug: {path}"))
        debug.write_text("00-original.diff", commit.diff)

    ctx = SplitContext(
        commit=commit,
        provider=provider,
        file_diffs=file_diffs,
        instruction=instruction,
        debug=debug,
        progress=progress,
        strategy=strategy,
        read_base=read_base,
        context_lines=context_lines,
        concurrency=concurrency,
    )

    progress(f"Generating split plan ({SplitMode(mode).value} mode)...")
    result, attempts = run_with_retries(
        lambda errors, final: _ATTEMPTS[SplitMode(mode)](ctx, errors, final),
        max_retries=max_retries,
        progress=progress,
    )
    warnings = parse_warnings + result.warnings

    if result.errors:
        if result.plan_failed:
            raise PlanGenerationError(result.errors[-1])
        raise PatchValidationError(
            f"Failed to generate valid patches after {attempts} attempts",
            errors=result.errors,
        )

    if result.already_atomic or result.plan is None or len(result.plan.splits) < 2:
        return SplitOutcome(already_atomic=True, warnings=warnings, attempts=attempts)

    return SplitOutcome(plan=result.plan, warnings=warnings, attempts=attempts)

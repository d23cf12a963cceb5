"""Shared state for one split attempt loop.

Contains:
- SplitContext: Inputs shared by every attempt of a split
- AttemptResult: Outcome of one attempt
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from fission.config import DEFAULT_CLASSIFY_CONCURRENCY, DEFAULT_CONTEXT_LINES
from fission.diff.models import FileDiff
from fission.git.commits import CommitInfo
from fission.llm import BaseLLMProvider
from fission.split.debug import DebugWriter
from fission.split.models import SplitPlan


@dataclass
class SplitContext:
    """Inputs shared by every attempt of a split."""

    commit: CommitInfo
    provider: BaseLLMProvider
    file_diffs: list[FileDiff]
    instruction: Optional[str] = None
    debug: Optional[DebugWriter] = None
    progress: Callable[[str], None] = lambda message: None
    strategy: str = "filter"  # "filter" or "content" (line mode only)
    read_base: Optional[Callable[[FileDiff], str]] = None
    context_lines: int = DEFAULT_CONTEXT_LINES
    concurrency: int = DEFAULT_CLASSIFY_CONCURRENCY


@dataclass
class AttemptResult:
    """Outcome of one attempt.

    errors drive the retry loop; warnings are reported but never retried.
    """

    plan: Optional[SplitPlan] = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    already_atomic: bool = False
    plan_failed: bool = False

"""Line mode phase 2: classify every changed line of every hunk.

One oracle request is issued per hunk. Requests run in batches on a thread
pool; results are returned in hunk order regardless of completion order.

Contains:
- fallback_classification: All changed lines of a hunk to the first commit
- classify_hunk_lines: Classify one hunk
- classify_all_hunks: Classify every hunk with bounded concurrency
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

import fission.config as _config
from fission.config import CLASSIFY_MAX_TOKENS, DEFAULT_CLASSIFY_CONCURRENCY
from fission.diff.models import FileDiff, Hunk, iter_hunks
from fission.llm import BaseLLMProvider, LLMError, extract_json
from fission.split.models import CommitPlan, HunkClassificationResult, LineClassification
from fission.split.prompt import CLASSIFY_SYSTEM_PROMPT, build_classify_prompt


def fallback_classification(hunk: Hunk, plans: list[CommitPlan]) -> HunkClassificationResult:
    """Assign every changed line of a hunk to the first planned commit."""
    return HunkClassificationResult(
        hunk_id=hunk.id,
        file_path=hunk.file_path,
        lines=[LineClassification(line_index=i, commit_id=plans[0].id) for i in hunk.changed_indices()],
        fallback=True,
    )


def _parse_classification(
    raw_response: str, hunk: Hunk, plans: list[CommitPlan]
) -> list[LineClassification]:
    """Turn the oracle's [{"line", "commit"}] array into classifications.

    Unknown commit ids and unclassified changed lines go to the first plan
    entry. Entries for context lines are dropped.
    """
    parsed = extract_json(raw_response, opener="[")
    valid_ids = {plan.id for plan in plans}
    changed = hunk.changed_indices()
    changed_set = set(changed)

    assigned: dict[int, str] = {}
    for item in parsed:
        if not isinstance(item, dict):
            continue
        line = item.get("line")
        commit_id = item.get("commit")
        if not isinstance(line, int) or isinstance(line, bool) or not isinstance(commit_id, str):
            continue
        if line not in changed_set or line in assigned:
            continue
        assigned[line] = commit_id if commit_id in valid_ids else plans[0].id

    return [
        LineClassification(line_index=i, commit_id=assigned.get(i, plans[0].id)) for i in changed
    ]


def classify_hunk_lines(
    provider: BaseLLMProvider, hunk: Hunk, plans: list[CommitPlan]
) -> HunkClassificationResult:
    """Classify the changed lines of one hunk.

    With a single planned commit no request is made. A failed request or
    unparseable response falls back to the first planned commit.

    Args:
        provider: LLM provider
        hunk: The hunk to classify
        plans: Planned commits in dependency order

    Returns:
        HunkClassificationResult covering every changed line
    """
    if len(plans) == 1:
        result = fallback_classification(hunk, plans)
        result.fallback = False
        return result

    try:
        response = provider.generate_raw(
            CLASSIFY_SYSTEM_PROMPT,
            build_classify_prompt(hunk, plans),
            max_tokens=CLASSIFY_MAX_TOKENS,
        )
        lines = _parse_classification(response.raw_response, hunk, plans)
    except LLMError:
        return fallback_classification(hunk, plans)

    return HunkClassificationResult(hunk_id=hunk.id, file_path=hunk.file_path, lines=lines)


def classify_all_hunks(
    provider: BaseLLMProvider,
    file_diffs: list[FileDiff],
    plans: list[CommitPlan],
    concurrency: int = DEFAULT_CLASSIFY_CONCURRENCY,
    timeout: Optional[float] = None,
) -> list[HunkClassificationResult]:
    """Classify every hunk, at most `concurrency` requests in flight.

    Args:
        provider: LLM provider
        file_diffs: Parsed diff
        plans: Planned commits in dependency order
        concurrency: Batch size
        timeout: Seconds to wait for each request. Defaults to LLM_TIMEOUT_SECONDS.

    Returns:
        One HunkClassificationResult per hunk, in hunk order
    """
    hunks = list(iter_hunks(file_diffs))
    if not hunks:
        return []
    if timeout is None:
        timeout = _config.LLM_TIMEOUT_SECONDS

    results: list[HunkClassificationResult] = []
    pool = ThreadPoolExecutor(max_workers=max(1, concurrency))
    try:
        for start in range(0, len(hunks), max(1, concurrency)):
            batch = hunks[start:start + max(1, concurrency)]
            futures = [
                (hunk, pool.submit(classify_hunk_lines, provider, hunk, plans)) for hunk in batch
            ]
            for hunk, future in futures:
                try:
                    results.append(future.result(timeout=timeout))
                except FutureTimeoutError:
                    future.cancel()
                    results.append(fallback_classification(hunk, plans))
    finally:
        # Do not wait for requests that already timed out
        pool.shutdown(wait=False, cancel_futures=True)

    return results

"""Atomicity check for commits.

Contains:
- ATOMICITY_SYSTEM_PROMPT, build_atomicity_prompt: Oracle prompt
- analyze_with_llm: Ask the oracle whether a commit is atomic
- check_commit_atomicity: Combine heuristics and the optional oracle opinion
"""

from typing import Optional

from pydantic import ValidationError

from fission.check.analysis import analyze_file_relatedness, analyze_message
from fission.check.models import AtomicityReport, LLMAnalysis
from fission.config import CHECK_THRESHOLDS
from fission.git.commits import CommitInfo
from fission.llm import BaseLLMProvider, JSONParseError, parse_json_response


ATOMICITY_SYSTEM_PROMPT = """You are a git expert reviewing commits for atomicity.
An atomic commit does exactly one logical thing.
Output ONLY valid JSON. No markdown fences or commentary."""


def build_atomicity_prompt(commit: CommitInfo, max_files: int = 20) -> str:
    """Build the user prompt asking whether a commit is atomic."""
    files_summary = "\n".join(f"- {path}" for path in commit.files[:max_files])
    if len(commit.files) > max_files:
        files_summary += f"\n- ... and {len(commit.files) - max_files} more"

    return f"""Analyze this git commit and determine if it is ATOMIC (does exactly one logical thing).

**Commit Message:** {commit.message}
**Stats:** {len(commit.files)} files changed, +{commit.insertions}/-{commit.deletions} lines
**Files Changed:**
{files_summary}

**Diff (may be truncated):**
```
{commit.diff or '(diff not available)'}
```

Respond in JSON format:
{{
  "is_atomic": true/false,
  "confidence": 0.0-1.0,
  "reasoning": "Brief explanation",
  "concerns": ["list of concerns if not atomic"],
  "split_suggestion": "How to split, or null if atomic"
}}

Only output the JSON."""


def analyze_with_llm(provider: BaseLLMProvider, commit: CommitInfo) -> LLMAnalysis:
    """Ask the oracle whether a commit is atomic.

    Raises:
        LLMError: If the call fails or the answer cannot be parsed
    """
    result = provider.generate_raw(ATOMICITY_SYSTEM_PROMPT, build_atomicity_prompt(commit))
    parsed = parse_json_response(result.raw_response)
    try:
        return LLMAnalysis.model_validate(parsed)
    except ValidationError as e:
        raise JSONParseError(f"LLM analysis does not match expected schema: {e}")


def check_commit_atomicity(
    commit: CommitInfo,
    strict: bool = False,
    llm_analysis: Optional[LLMAnalysis] = None,
) -> AtomicityReport:
    """Score a commit's atomicity.

    Each criterion contributes a score between 0 and 1; the report score is
    their mean on a 0-100 scale. With an oracle opinion, the commit is
    atomic if the oracle says so with confidence above 0.6 and at most two
    issues were found. Otherwise it needs no issues and a score of 70.

    Args:
        commit: Commit to check
        strict: Use the strict thresholds
        llm_analysis: Oracle opinion, if one was requested

    Returns:
        AtomicityReport
    """
    thresholds = CHECK_THRESHOLDS["strict" if strict else "normal"]
    issues: list[str] = []
    suggestions: list[str] = []
    scores: list[float] = []

    # File count
    file_count = len(commit.files)
    max_files = thresholds["max_files"]
    if file_count > max_files:
        issues.append(f"Too many files: {file_count} (max: {max_files})")
        scores.append(max(0.0, 1 - (file_count - max_files) / max_files))
    else:
        scores.append(1.0)

    # Line count
    total_lines = commit.insertions + commit.deletions
    max_lines = thresholds["max_insertions"] + thresholds["max_deletions"]
    if total_lines > max_lines:
        issues.append(f"Too many lines: +{commit.insertions}/-{commit.deletions} (max: {max_lines})")
        scores.append(max(0.0, 1 - (total_lines - max_lines) / max_lines))
    else:
        scores.append(1.0)

    relatedness, related_issues = analyze_file_relatedness(commit.files, thresholds["max_dirs"])
    issues.extend(related_issues)
    scores.append(relatedness)

    message_score, message_issues, message_suggestions = analyze_message(
        commit.message, thresholds["min_msg_len"]
    )
    issues.extend(message_issues)
    suggestions.extend(message_suggestions)
    scores.append(message_score)

    if llm_analysis is not None:
        scores.append((1.0 if llm_analysis.is_atomic else 0.3) * llm_analysis.confidence)
        if not llm_analysis.is_atomic:
            issues.extend(llm_analysis.concerns)
            if llm_analysis.split_suggestion:
                suggestions.append(f"LLM: {llm_analysis.split_suggestion}")

    score = sum(scores) / len(scores) * 100
    if llm_analysis is not None:
        is_atomic = llm_analysis.is_atomic and llm_analysis.confidence > 0.6 and len(issues) <= 2
    else:
        is_atomic = not issues and score >= 70

    return AtomicityReport(
        short_hash=commit.short_hash,
        message=commit.message,
        files=commit.files,
        insertions=commit.insertions,
        deletions=commit.deletions,
        is_atomic=is_atomic,
        score=score,
        issues=issues,
        suggestions=suggestions,
        llm_analysis=llm_analysis,
    )

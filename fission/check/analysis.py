"""Heuristic commit analysis.

Contains:
- analyze_file_relatedness: Score how related a commit's files are
- analyze_message: Score a commit message
"""

import re
from posixpath import dirname


_GOOD_PREFIXES = [
    re.compile(r"^(feat|fix|docs|style|refactor|test|chore|perf|ci|build|revert)(\(.+\))?:", re.I),
    re.compile(r"^(Add|Fix|Update|Remove|Refactor|Implement|Improve|Clean)", re.I),
]

_BAD_PATTERNS = [
    re.compile(r"^wip", re.I),
    re.compile(r"^(fix|update|change)$", re.I),
    re.compile(r"^.{1,5}$"),
]


def analyze_file_relatedness(files: list[str], max_dirs: int = 3) -> tuple[float, list[str]]:
    """Score how closely related a set of files is.

    Files spread over many directories or extensions score lower.

    Args:
        files: Repository-relative paths
        max_dirs: Directories allowed before an issue is reported

    Returns:
        Tuple of (score between 0 and 1, issues)
    """
    if len(files) <= 1:
        return 1.0, []

    dirs = {dirname(path) or "." for path in files}
    exts = {path.rsplit(".", 1)[-1] for path in files}

    issues = []
    if len(dirs) > max_dirs:
        issues.append(f"Changes span {len(dirs)} directories")

    dir_score = max(0.0, 1 - (len(dirs) - 1) * 0.15)
    ext_score = max(0.0, 1 - (len(exts) - 1) * 0.1)
    return dir_score * 0.7 + ext_score * 0.3, issues


def analyze_message(message: str, min_length: int = 10) -> tuple[float, list[str], list[str]]:
    """Score a commit message subject.

    Args:
        message: Commit subject
        min_length: Shortest acceptable message

    Returns:
        Tuple of (score between 0 and 1, issues, suggestions)
    """
    issues: list[str] = []
    suggestions: list[str] = []
    score = 0.5

    if len(message) < min_length:
        issues.append("Commit message too short")
        score -= 0.3
    elif len(message) >= 20:
        score += 0.1

    if any(pattern.search(message) for pattern in _GOOD_PREFIXES):
        score += 0.2
    else:
        suggestions.append("Consider using conventional commit format")

    if any(pattern.search(message) for pattern in _BAD_PATTERNS):
        issues.append("Commit message is vague or WIP")
        score -= 0.2

    return max(0.0, min(1.0, score)), issues, suggestions

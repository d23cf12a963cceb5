"""Extraction of per-commit line ranges from classifications.

Contains:
- resolve_assignments: Map every changed line of a hunk to exactly one commit
- extract_changes: Group assigned lines into per-commit ranges
- validate_extraction: Check that every changed line was extracted exactly once
"""

from typing import Optional

from fission.diff.models import FileDiff, Hunk, iter_hunks
from fission.split.models import (
    CommitChanges,
    CommitPlan,
    FileChanges,
    HunkClassificationResult,
    LineRange,
)


def resolve_assignments(
    hunk: Hunk,
    classification: Optional[HunkClassificationResult],
    plans: list[CommitPlan],
    warnings: Optional[list[str]] = None,
) -> dict[int, str]:
    """Assign every changed line of a hunk to one commit id.

    Unknown commit ids and unclassified lines go to the first plan entry.
    Classifications of context lines are ignored.

    Args:
        hunk: The hunk
        classification: Oracle classification for the hunk, if any
        plans: Planned commits in order
        warnings: List to append warnings to

    Returns:
        Dictionary of line index to commit id
    """
    if warnings is None:
        warnings = []
    valid_ids = {plan.id for plan in plans}
    default_id = plans[0].id
    changed = set(hunk.changed_indices())

    assignments: dict[int, str] = {}
    if classification is not None:
        for item in classification.lines:
            if item.line_index not in changed or item.line_index in assignments:
                continue
            if item.commit_id in valid_ids:
                assignments[item.line_index] = item.commit_id
            else:
                warnings.append(
                    f"Hunk {hunk.id}: unknown commit {item.commit_id!r}, using {default_id}"
                )
                assignments[item.line_index] = default_id

    missing = [index for index in sorted(changed) if index not in assignments]
    if missing:
        warnings.append(f"Hunk {hunk.id}: {len(missing)} unclassified line(s) assigned to {default_id}")
        for index in missing:
            assignments[index] = default_id

    return assignments


def _ranges_for(hunk: Hunk, indices: list[int]) -> list[LineRange]:
    """Group sorted line indices into runs of adjacent same-kind lines."""
    ranges: list[LineRange] = []
    for index in indices:
        line = hunk.lines[index]
        kind = line[0]
        last = ranges[-1] if ranges else None
        if last is not None and last.kind == kind and last.end_line_index == index - 1:
            last.end_line_index = index
            last.lines.append(line[1:])
        else:
            ranges.append(
                LineRange(
                    hunk_id=hunk.id,
                    kind=kind,
                    start_line_index=index,
                    end_line_index=index,
                    lines=[line[1:]],
                )
            )
    return ranges


def extract_changes(
    file_diffs: list[FileDiff],
    plans: list[CommitPlan],
    classifications: list[HunkClassificationResult],
    warnings: Optional[list[str]] = None,
) -> list[CommitChanges]:
    """Group classified lines into per-commit, per-file ranges.

    Args:
        file_diffs: Parsed diff
        plans: Planned commits in order
        classifications: One classification per hunk (missing hunks fall
            back to the first plan entry)
        warnings: List to append warnings to

    Returns:
        CommitChanges per plan entry, in plan order
    """
    if not plans:
        return []
    if warnings is None:
        warnings = []

    by_hunk = {result.hunk_id: result for result in classifications}
    commits = {
        plan.id: CommitChanges(commit_id=plan.id, message=plan.message, description=plan.description)
        for plan in plans
    }

    for file_diff in file_diffs:
        per_commit: dict[str, list[LineRange]] = {}
        for hunk in file_diff.hunks:
            assignments = resolve_assignments(hunk, by_hunk.get(hunk.id), plans, warnings)
            for plan in plans:
                indices = sorted(i for i, commit_id in assignments.items() if commit_id == plan.id)
                if indices:
                    per_commit.setdefault(plan.id, []).extend(_ranges_for(hunk, indices))

        for commit_id, ranges in per_commit.items():
            commits[commit_id].file_changes.append(
                FileChanges(file_path=file_diff.file_path, ranges=ranges)
            )

    return [commits[plan.id] for plan in plans]


def validate_extraction(
    file_diffs: list[FileDiff], commit_changes: list[CommitChanges]
) -> list[str]:
    """Check that every changed line appears in exactly one commit.

    Args:
        file_diffs: Parsed diff
        commit_changes: Output of extract_changes

    Returns:
        List of errors (empty if the partition is exhaustive and disjoint)
    """
    errors: list[str] = []
    expected = {
        (hunk.id, line.line_index) for hunk in iter_hunks(file_diffs) for line in hunk.changed
    }

    seen: dict[tuple[int, int], str] = {}
    for changes in commit_changes:
        for hunk_id, indices in changes.selected_indices().items():
            for index in indices:
                key = (hunk_id, index)
                if key not in expected:
                    errors.append(f"{changes.commit_id}: line {index} of hunk {hunk_id} is not a changed line")
                elif key in seen:
                    errors.append(
                        f"Line {index} of hunk {hunk_id} is in both {seen[key]} and {changes.commit_id}"
                    )
                else:
                    seen[key] = changes.commit_id

    missing = expected - set(seen)
    if missing:
        errors.append(f"{len(missing)} changed line(s) not assigned to any commit")

    total_expected = len(expected)
    total_extracted = sum(sum(changes.line_counts()) for changes in commit_changes)
    if total_extracted != total_expected:
        errors.append(f"Extracted {total_extracted} lines, expected {total_expected}")

    return errors

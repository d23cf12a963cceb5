"""Content-mode reconstruction.

Instead of filtering hunk text, a commit's patch can be rebuilt from file
contents: apply the lines owned by earlier commits to the base text, apply
those plus the commit's own lines, and diff the two results with the
synthesizer.

Contains:
- materialize_file: Apply a subset of a file diff's changed lines to a base text
- build_content_patch: Patch text for one commit from materialized contents
- build_content_patches: Patches for every commit of a split
"""

from typing import Callable, Optional

from fission.config import DEFAULT_CONTEXT_LINES
from fission.diff.models import NO_NEWLINE_MARKER, FileDiff
from fission.diff.synthesize import synthesize_diff
from fission.split.headers import is_header_only, render_file
from fission.split.models import AssembledPatch, CommitChanges


def _split_keepends(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def materialize_file(
    base_text: str, file_diff: FileDiff, included: dict[int, set[int]]
) -> str:
    """Apply the included changed lines of a file diff to its base text.

    Included deletions remove their base line, included additions are
    inserted. Everything else keeps the base content.

    Args:
        base_text: File content before the diff
        file_diff: Parsed diff of the file
        included: Line indices to apply, keyed by hunk id

    Returns:
        The resulting file content
    """
    base = _split_keepends(base_text)
    result: list[str] = []
    cursor = 0  # Next base line (0-based) not yet copied

    for hunk in file_diff.hunks:
        old_count, _ = hunk.counts()
        first = hunk.old_start - 1 if old_count > 0 else hunk.old_start
        result.extend(base[cursor:first])
        cursor = max(cursor, first)

        owned = included.get(hunk.id, set())
        for index, line in enumerate(hunk.lines):
            tag = line[:1]
            if tag == "\\":
                continue
            if tag == "+":
                if index in owned:
                    ends_file = index + 1 < len(hunk.lines) and hunk.lines[index + 1] == NO_NEWLINE_MARKER
                    result.append(line[1:] if ends_file else line[1:] + "\n")
                continue
            # Context and deletions consume a base line
            if cursor < len(base):
                if not (tag == "-" and index in owned):
                    result.append(base[cursor])
                cursor += 1

    result.extend(base[cursor:])
    return "".join(result)


def build_content_patch(
    file_diffs: list[FileDiff],
    read_base: Callable[[FileDiff], str],
    selected: dict[int, set[int]],
    applied: Optional[dict[int, set[int]]] = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    include_header_only: bool = False,
) -> str:
    """Build one commit's patch by re-diffing materialized file contents.

    Args:
        file_diffs: Parsed diff
        read_base: Returns a file's content before the diff ('' if new)
        selected: Line indices owned by this commit, keyed by hunk id
        applied: Line indices owned by earlier commits, keyed by hunk id
        context_lines: Context lines around each change
        include_header_only: Also emit hunk-less entries, unchanged

    Returns:
        Patch text, or an empty string if nothing changes
    """
    applied = applied or {}
    parts: list[str] = []

    for file_diff in file_diffs:
        if include_header_only and is_header_only(file_diff):
            lines = render_file(list(file_diff.header_lines), [], file_diff.is_binary)
            parts.append("\n".join(lines) + "\n")
            continue
        if file_diff.is_renamed or file_diff.is_binary:
            continue
        hunk_ids = [hunk.id for hunk in file_diff.hunks]
        if not any(selected.get(hunk_id) for hunk_id in hunk_ids):
            continue

        base_text = "" if file_diff.is_new_file else read_base(file_diff)
        before_sets = {h: set(applied.get(h, set())) for h in hunk_ids}
        after_sets = {h: before_sets[h] | set(selected.get(h, set())) for h in hunk_ids}
        old_text = materialize_file(base_text, file_diff, before_sets)
        new_text = materialize_file(base_text, file_diff, after_sets)

        all_changed = all(
            set(hunk.changed_indices()) <= after_sets[hunk.id] for hunk in file_diff.hunks
        )
        creates = file_diff.is_new_file and not any(before_sets.values())
        deletes = file_diff.is_deleted_file and all_changed

        patch = synthesize_diff(
            old_text,
            new_text,
            file_path=file_diff.file_path,
            context_lines=context_lines,
            is_new_file=creates,
            is_deleted_file=deletes,
        )
        if patch:
            parts.append(patch)

    return "".join(parts)


def build_content_patches(
    file_diffs: list[FileDiff],
    commit_changes: list[CommitChanges],
    read_base: Callable[[FileDiff], str],
    context_lines: int = DEFAULT_CONTEXT_LINES,
    warnings: Optional[list[str]] = None,
) -> list[AssembledPatch]:
    """Build one content-mode patch per commit, in commit order.

    Hunk-less entries (empty files, mode changes, pure renames, binary
    patches) are carried unchanged by the first patch. Renamed files with
    hunks and binary stubs cannot be materialized and are reported as
    warnings.

    Args:
        file_diffs: Parsed diff
        commit_changes: Extracted changes in commit order
        read_base: Returns a file's content before the diff
        context_lines: Context lines around each change
        warnings: List to append warnings to

    Returns:
        AssembledPatch list in commit order
    """
    if warnings is None:
        warnings = []
    for file_diff in file_diffs:
        if is_header_only(file_diff):
            continue
        if file_diff.is_renamed or not file_diff.hunks:
            warnings.append(f"{file_diff.file_path}: not representable in content mode, skipped")

    applied: dict[int, set[int]] = {}
    patches: list[AssembledPatch] = []
    for i, changes in enumerate(commit_changes):
        selected = changes.selected_indices()
        patch = build_content_patch(
            file_diffs, read_base, selected, applied, context_lines, include_header_only=(i == 0)
        )
        for hunk_id, indices in selected.items():
            applied.setdefault(hunk_id, set()).update(indices)

        if not patch:
            warnings.append(f"Commit {changes.commit_id} has no changes and was dropped")
            continue
        patches.append(
            AssembledPatch(
                commit_id=changes.commit_id,
                message=changes.message,
                description=changes.description,
                patch=patch,
            )
        )
    return patches

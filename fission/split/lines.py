"""Line-level patch reconstruction.

Builds a patch for one commit by filtering every hunk down to the lines
classified into that commit. Patches of a split are built in commit order
and apply in sequence: lines claimed by earlier commits are already part of
the file, lines of later commits are not there yet.

Per changed line:

    owner            addition          deletion
    this commit      kept              kept
    later commit     omitted           becomes context
    earlier commit   becomes context   omitted

Contains:
- filter_hunk: Filter one hunk's content for one commit
- build_line_patch: Patch text for one commit
- build_patches: Patches for every commit of a split
"""

from typing import Collection, Optional

from fission.diff.models import NO_NEWLINE_MARKER, FileDiff, Hunk, format_hunk_header
from fission.split.headers import is_header_only, relocate_hunk, render_file, rewrite_file_header
from fission.split.models import AssembledPatch, CommitChanges


_EMPTY: frozenset[int] = frozenset()


def filter_hunk(
    hunk: Hunk, selected: Collection[int], applied: Collection[int] = _EMPTY
) -> Optional[list[str]]:
    """Filter a hunk's content lines for one commit.

    Each source line is present in the file before this commit, after it,
    both (context) or neither (omitted). A line that carried a no-newline
    marker in the source lacks its newline whenever it ends the file; every
    other line keeps its newline. A context line whose newline state differs
    between the two sides is emitted as a deletion and re-addition.

    Args:
        hunk: The hunk to filter
        selected: Line indices owned by this commit
        applied: Line indices owned by earlier commits

    Returns:
        Filtered prefixed lines, or None if no change survives
    """
    marked = {i - 1 for i, line in enumerate(hunk.lines) if line.startswith("\\")}
    entries: list[tuple[int, str, bool, bool]] = []
    has_change = False

    for index, line in enumerate(hunk.lines):
        tag = line[:1]
        if tag == "\\":
            continue
        if tag == "+":
            before = index in applied
            after = before or index in selected
        elif tag == "-":
            before = index not in applied
            after = before and index not in selected
        else:
            before = after = True
        has_change = has_change or before != after
        if before or after:
            entries.append((index, line[1:], before, after))

    if not has_change:
        return None
    return _render(entries, marked)


def _render(entries: list[tuple[int, str, bool, bool]], marked: set[int]) -> list[str]:
    last_before = max((index for index, _, before, _ in entries if before), default=None)
    last_after = max((index for index, _, _, after in entries if after), default=None)

    lines: list[str] = []
    for index, text, before, after in entries:
        cut_before = before and index == last_before and index in marked
        cut_after = after and index == last_after and index in marked
        if before and after and cut_before == cut_after:
            lines.append(" " + text)
            if cut_before:
                lines.append(NO_NEWLINE_MARKER)
            continue
        if before:
            lines.append("-" + text)
            if cut_before:
                lines.append(NO_NEWLINE_MARKER)
        if after:
            lines.append("+" + text)
            if cut_after:
                lines.append(NO_NEWLINE_MARKER)
    return lines


def _counts(lines: list[str]) -> tuple[int, int]:
    old_count = sum(1 for line in lines if line[:1] in (" ", "-"))
    new_count = sum(1 for line in lines if line[:1] in (" ", "+"))
    return old_count, new_count


def build_line_patch(
    file_diffs: list[FileDiff],
    selected: dict[int, set[int]],
    created_files: set[str],
    applied: Optional[dict[int, set[int]]] = None,
    pending_files: Optional[set[str]] = None,
    include_header_only: bool = False,
) -> str:
    """Build the patch for one commit from per-hunk line selections.

    Args:
        file_diffs: Parsed diff
        selected: Line indices owned by this commit, keyed by hunk id
        created_files: Files whose creation, rename or mode change was
            already emitted by an earlier patch. Updated in place.
        applied: Line indices owned by earlier commits, keyed by hunk id
        pending_files: Files touched by later commits
        include_header_only: Also emit hunk-less entries

    Returns:
        Patch text, or an empty string if no line survives
    """
    applied = applied or {}
    pending = pending_files or set()

    lines: list[str] = []
    for file_diff in file_diffs:
        body: list[str] = []
        offset = 0
        for hunk in file_diff.hunks:
            kept = filter_hunk(hunk, selected.get(hunk.id, _EMPTY), applied.get(hunk.id, _EMPTY))
            if kept is None:
                continue
            old_count, new_count = _counts(kept)
            original_old_count, _ = hunk.counts()
            old_start, new_start = relocate_hunk(
                hunk.old_start, original_old_count, old_count, new_count, offset
            )
            body.append(format_hunk_header(old_start, old_count, new_start, new_count, hunk.label))
            body.extend(kept)
            offset += new_count - old_count

        if not body and not (include_header_only and is_header_only(file_diff)):
            continue

        path = file_diff.file_path
        header = rewrite_file_header(
            file_diff,
            first_touch=path not in created_files,
            last_touch=path not in pending,
        )
        lines.extend(render_file(header, body, file_diff.is_binary))
        created_files.add(path)

    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def _files_touched(file_diffs: list[FileDiff], selected: dict[int, set[int]]) -> set[str]:
    touched = set()
    for file_diff in file_diffs:
        for hunk in file_diff.hunks:
            owned = selected.get(hunk.id)
            if owned and any(line.line_index in owned for line in hunk.changed):
                touched.add(file_diff.file_path)
                break
    return touched


def build_patches(
    file_diffs: list[FileDiff],
    commit_changes: list[CommitChanges],
    warnings: Optional[list[str]] = None,
) -> list[AssembledPatch]:
    """Build one patch per commit, in commit order.

    Hunk-less entries attach to the first patch. Commits that end up with
    an empty patch are dropped with a warning.

    Args:
        file_diffs: Parsed diff
        commit_changes: Extracted changes in commit order
        warnings: List to append warnings to

    Returns:
        AssembledPatch list in commit order
    """
    if warnings is None:
        warnings = []

    selections = [changes.selected_indices() for changes in commit_changes]
    touched = [_files_touched(file_diffs, selection) for selection in selections]

    created_files: set[str] = set()
    applied: dict[int, set[int]] = {}
    patches: list[AssembledPatch] = []

    for i, changes in enumerate(commit_changes):
        pending = set().union(*touched[i + 1:]) if i + 1 < len(touched) else set()
        patch = build_line_patch(
            file_diffs,
            selections[i],
            created_files,
            applied=applied,
            pending_files=pending,
            include_header_only=(i == 0),
        )
        for hunk_id, indices in selections[i].items():
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

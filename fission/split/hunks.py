"""Hunk-level patch reconstruction.

Builds patch text from whole hunks of a parsed diff. Hunks of a file are
always emitted in their original order, and the new-side start of each
emitted hunk is shifted by the net delta of the hunks emitted before it
in the same patch.

Contains:
- build_hunk_patch: Patch text for one set of hunk ids
- build_hunk_patches: Patch texts for an ordered partition of hunk ids
"""

from typing import Iterable, Optional

from fission.diff.models import FileDiff, Hunk, format_hunk_header
from fission.split.headers import is_header_only, relocate_hunk, render_file, rewrite_file_header


def _render_hunks(hunks: list[Hunk]) -> list[str]:
    """Render hunks of one file with running new-side offsets."""
    rendered: list[str] = []
    offset = 0
    for hunk in hunks:
        old_count, new_count = hunk.counts()
        old_start, new_start = relocate_hunk(
            hunk.old_start, old_count, old_count, new_count, offset
        )
        rendered.append(format_hunk_header(old_start, old_count, new_start, new_count, hunk.label))
        rendered.extend(hunk.lines)
        offset += new_count - old_count
    return rendered


def build_hunk_patch(
    file_diffs: list[FileDiff],
    hunk_ids: Iterable[int],
    touched_files: Optional[set[str]] = None,
    pending_files: Optional[set[str]] = None,
    include_header_only: bool = False,
) -> str:
    """Build a patch containing only the selected hunks.

    Args:
        file_diffs: Parsed diff
        hunk_ids: Ids of the hunks to include
        touched_files: Files already emitted by earlier patches of the same
            sequence. Updated in place with the files this patch touches.
        pending_files: Files touched by later patches of the same sequence
        include_header_only: Also emit hunk-less entries (mode changes,
            renames, binary patches)

    Returns:
        Patch text, or an empty string if nothing was selected
    """
    selected = set(hunk_ids)
    if touched_files is None:
        touched_files = set()
    pending = pending_files or set()

    lines: list[str] = []
    for file_diff in file_diffs:
        hunks = [h for h in file_diff.hunks if h.id in selected]
        if not hunks and not (include_header_only and is_header_only(file_diff)):
            continue

        path = file_diff.file_path
        header = rewrite_file_header(
            file_diff,
            first_touch=path not in touched_files,
            last_touch=path not in pending,
        )
        lines.extend(render_file(header, _render_hunks(hunks), file_diff.is_binary))
        touched_files.add(path)

    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def build_hunk_patches(
    file_diffs: list[FileDiff], hunk_groups: list[list[int]]
) -> list[str]:
    """Build one patch per group of hunk ids, in group order.

    Hunk-less entries attach to the first patch. The groups are expected
    to partition the hunk ids; this function does not check that.

    Args:
        file_diffs: Parsed diff
        hunk_groups: Ordered hunk id groups, one per commit

    Returns:
        One patch text per group (possibly empty)
    """
    hunk_files = {hunk.id: hunk.file_path for fd in file_diffs for hunk in fd.hunks}
    group_files = [{hunk_files[h] for h in group if h in hunk_files} for group in hunk_groups]

    touched: set[str] = set()
    patches = []
    for i, group in enumerate(hunk_groups):
        pending = set().union(*group_files[i + 1:]) if i + 1 < len(group_files) else set()
        patches.append(
            build_hunk_patch(
                file_diffs,
                group,
                touched_files=touched,
                pending_files=pending,
                include_header_only=(i == 0),
            )
        )
    return patches

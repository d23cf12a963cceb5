"""File and hunk header bookkeeping shared by the reconstructors.

Contains:
- relocate_hunk: Compute start lines for a hunk emitted with a running offset
- rewrite_file_header: Adapt a file header when a file's changes span patches
- is_header_only: Whether a hunk-less entry carries an applicable change
- render_file: Join a file header and its hunk lines
"""

from fission.diff.models import FileDiff

# Header lines that describe a one-time change to the file itself
_ONE_TIME_PREFIXES = (
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
)


def relocate_hunk(
    old_start: int,
    original_old_count: int,
    old_count: int,
    new_count: int,
    offset: int,
) -> tuple[int, int]:
    """Compute the old and new start lines of an emitted hunk.

    The old side keeps the original position. The new side is shifted by
    the net line delta of hunks already emitted for the same file in the
    same patch. A side with zero lines points at the line before the hunk.

    Args:
        old_start: Old start from the original header
        original_old_count: Old count from the original hunk content
        old_count: Old count of the emitted hunk
        new_count: New count of the emitted hunk
        offset: Running net delta of earlier emitted hunks

    Returns:
        Tuple of (old_start, new_start)
    """
    # First old line covered by the hunk, 1-based
    anchor = old_start if original_old_count > 0 else old_start + 1
    emitted_old_start = anchor if old_count > 0 else anchor - 1
    new_first = anchor + offset
    new_start = new_first if new_count > 0 else new_first - 1
    return emitted_old_start, new_start


def rewrite_file_header(
    file_diff: FileDiff, first_touch: bool, last_touch: bool
) -> list[str]:
    """Build the file header for one patch touching this file.

    Only the first patch touching a file may create it, rename it or change
    its mode, and only the last patch may delete it. Every other patch
    presents as a plain modification of the file at its new path.

    Args:
        file_diff: The parsed file diff
        first_touch: No earlier patch in the sequence touched this file
        last_touch: No later patch in the sequence touches this file

    Returns:
        Header lines for this patch
    """
    keeps_creation = first_touch or not file_diff.is_new_file
    keeps_deletion = last_touch or not file_diff.is_deleted_file
    keeps_one_time = first_touch or not (file_diff.is_renamed or _has_one_time_lines(file_diff))
    if keeps_creation and keeps_deletion and keeps_one_time:
        return list(file_diff.header_lines)

    path = file_diff.file_path
    header: list[str] = []
    for line in file_diff.header_lines:
        if line.startswith("diff --git "):
            if keeps_one_time:
                header.append(line)
            else:
                header.append(f"diff --git a/{path} b/{path}")
        elif line.startswith("index "):
            # Blob ids no longer describe the partial file states
            continue
        elif line.startswith("new file mode"):
            if keeps_creation:
                header.append(line)
        elif line.startswith("deleted file mode"):
            if keeps_deletion:
                header.append(line)
        elif line.startswith(_ONE_TIME_PREFIXES):
            if keeps_one_time:
                header.append(line)
        elif line.startswith("--- "):
            if line.startswith("--- /dev/null") and keeps_creation:
                header.append(line)
            elif file_diff.is_renamed and keeps_one_time:
                header.append(line)
            elif file_diff.is_deleted_file and keeps_deletion and not file_diff.is_new_file:
                header.append(line)
            else:
                header.append(f"--- a/{path}")
        elif line.startswith("+++ "):
            if line.startswith("+++ /dev/null") and not keeps_deletion:
                header.append(f"+++ b/{path}")
            else:
                header.append(line)
        else:
            header.append(line)
    return header


def _has_one_time_lines(file_diff: FileDiff) -> bool:
    return any(line.startswith(_ONE_TIME_PREFIXES) for line in file_diff.header_lines)


def is_header_only(file_diff: FileDiff) -> bool:
    """Whether a hunk-less file entry still carries an applicable change.

    Mode changes, pure renames, empty files and binary files with patch
    data qualify. 'Binary files differ' stubs do not.
    """
    if file_diff.hunks:
        return False
    if file_diff.is_binary:
        return any(line.startswith("GIT binary patch") for line in file_diff.header_lines)
    return True


def render_file(header: list[str], body: list[str], is_binary: bool = False) -> list[str]:
    """Join a file header and its hunk lines, keeping binary blocks terminated."""
    rendered = header + body
    if is_binary:
        rendered.append("")
    return rendered

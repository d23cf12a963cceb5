"""Content-diff synthesizer.

Computes a unified diff between two text blobs. Used when a commit's
patch is rebuilt from materialized file content instead of by filtering
existing hunk text.

The line matcher is greedy: each old line is paired with the first
identical new line after the previous match. This is not a minimal edit
script, but inputs only differ by a bounded set of localized edits.

Contains:
- EditOp: One keep/delete/insert operation
- compute_edit_ops: Greedy line matching
- group_hunks: Group operations into context-padded hunks
- synthesize_diff: Full file diff text for two blobs
"""

from dataclasses import dataclass
from typing import Optional

from fission.diff.models import NO_NEWLINE_MARKER, format_hunk_header


DEFAULT_FILE_MODE = "100644"


@dataclass(frozen=True)
class EditOp:
    """A single line operation.

    old_index/new_index are 0-based positions of the line before which the
    op sits on each side.
    """

    tag: str  # " " keep, "-" delete, "+" insert
    text: str  # Line text including its newline, if any
    old_index: int
    new_index: int


def _split_lines(text: str) -> list[str]:
    """Split on \\n only, keeping line endings."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def compute_edit_ops(old_lines: list[str], new_lines: list[str]) -> list[EditOp]:
    """Greedily match identical lines and emit keep/delete/insert ops.

    Lines are compared with their line endings, so a final line that only
    differs by a missing newline is a change.

    Args:
        old_lines: Old side lines (with endings)
        new_lines: New side lines (with endings)

    Returns:
        Ordered list of EditOp
    """
    pairs: list[tuple[int, int]] = []
    last_new = -1
    for i, line in enumerate(old_lines):
        for j in range(last_new + 1, len(new_lines)):
            if new_lines[j] == line:
                pairs.append((i, j))
                last_new = j
                break

    ops: list[EditOp] = []
    old_pos = 0
    new_pos = 0
    for old_match, new_match in pairs + [(len(old_lines), len(new_lines))]:
        while old_pos < old_match:
            ops.append(EditOp("-", old_lines[old_pos], old_pos, new_pos))
            old_pos += 1
        while new_pos < new_match:
            ops.append(EditOp("+", new_lines[new_pos], old_pos, new_pos))
            new_pos += 1
        if old_match < len(old_lines):
            ops.append(EditOp(" ", old_lines[old_match], old_pos, new_pos))
            old_pos += 1
            new_pos += 1

    return ops


def group_hunks(ops: list[EditOp], context_lines: int = 3) -> list[list[EditOp]]:
    """Group change ops into hunks padded with context.

    Change regions separated by at most 2 * context_lines unchanged lines
    share a hunk.

    Args:
        ops: Output of compute_edit_ops
        context_lines: Context lines on each side of a change

    Returns:
        List of op slices, one per hunk
    """
    change_positions = [i for i, op in enumerate(ops) if op.tag != " "]
    if not change_positions:
        return []

    regions: list[list[int]] = [[change_positions[0], change_positions[0]]]
    for pos in change_positions[1:]:
        gap = pos - regions[-1][1] - 1
        if gap <= 2 * context_lines:
            regions[-1][1] = pos
        else:
            regions.append([pos, pos])

    hunks: list[list[EditOp]] = []
    for first, last in regions:
        start = max(0, first - context_lines)
        end = min(len(ops), last + context_lines + 1)
        hunks.append(ops[start:end])
    return hunks


def _render_hunk(hunk_ops: list[EditOp]) -> list[str]:
    """Render one hunk, header first.

    A side with no lines uses the position of the line before the hunk
    (0 at the start of the file).
    """
    first = hunk_ops[0]
    old_count = sum(1 for op in hunk_ops if op.tag != "+")
    new_count = sum(1 for op in hunk_ops if op.tag != "-")
    old_start = first.old_index + 1 if old_count else first.old_index
    new_start = first.new_index + 1 if new_count else first.new_index

    rendered = [format_hunk_header(old_start, old_count, new_start, new_count)]
    for op in hunk_ops:
        if op.text.endswith("\n"):
            rendered.append(op.tag + op.text[:-1])
        else:
            rendered.append(op.tag + op.text)
            rendered.append(NO_NEWLINE_MARKER)
    return rendered


def _file_header(
    file_path: str, is_new_file: bool, is_deleted_file: bool, mode: str
) -> list[str]:
    header = [f"diff --git a/{file_path} b/{file_path}"]
    if is_new_file:
        header.append(f"new file mode {mode}")
        header.append("--- /dev/null")
        header.append(f"+++ b/{file_path}")
    elif is_deleted_file:
        header.append(f"deleted file mode {mode}")
        header.append(f"--- a/{file_path}")
        header.append("+++ /dev/null")
    else:
        header.append(f"--- a/{file_path}")
        header.append(f"+++ b/{file_path}")
    return header


def synthesize_diff(
    old_text: str,
    new_text: str,
    file_path: str = "file",
    context_lines: int = 3,
    is_new_file: Optional[bool] = None,
    is_deleted_file: Optional[bool] = None,
    mode: str = DEFAULT_FILE_MODE,
) -> str:
    """Compute a unified diff between two blobs.

    Args:
        old_text: Old file content
        new_text: New file content
        file_path: Repository-relative path used in the headers
        context_lines: Context lines around each change
        is_new_file: Emit a creation header. Defaults to old_text being empty.
        is_deleted_file: Emit a deletion header. Defaults to new_text being empty.
        mode: File mode for creation/deletion headers

    Returns:
        Patch text, or an empty string if the blobs are identical
    """
    ops = compute_edit_ops(_split_lines(old_text), _split_lines(new_text))
    hunks = group_hunks(ops, context_lines)
    if not hunks:
        return ""

    if is_new_file is None:
        is_new_file = old_text == "" and new_text != ""
    if is_deleted_file is None:
        is_deleted_file = new_text == "" and old_text != ""

    lines = _file_header(file_path, is_new_file, is_deleted_file, mode)
    for hunk_ops in hunks:
        lines.extend(_render_hunk(hunk_ops))

    return "\n".join(lines) + "\n"

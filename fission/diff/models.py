"""Data models for parsed unified diffs.

Contains:
- LineKind: Addition or deletion marker
- ChangedLine: A single added/removed line with a diff-wide id
- Hunk: A contiguous block of a file diff
- FileDiff: Diff for a single file containing multiple hunks
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


NO_NEWLINE_MARKER = "\\ No newline at end of file"


class LineKind(str, Enum):
    """Kind of a tracked line inside a hunk."""

    ADDITION = "+"
    DELETION = "-"


@dataclass(frozen=True)
class ChangedLine:
    """A single added or removed line.

    Ids are unique and increase in parse order across the whole diff.
    """

    id: int
    file_path: str
    hunk_index: int  # Position of the owning hunk within its file
    line_index: int  # Index into Hunk.lines
    kind: LineKind
    text: str  # Line text without the +/- prefix


@dataclass
class Hunk:
    """A contiguous block of changes in one file."""

    id: int
    file_path: str
    index: int  # Position within the file
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    label: str  # Everything after the closing @@, leading space included
    lines: list[str]  # Prefixed content lines, header excluded
    changed: list[ChangedLine] = field(default_factory=list)

    @property
    def header(self) -> str:
        """The @@ header line as parsed."""
        return format_hunk_header(
            self.old_start, self.old_count, self.new_start, self.new_count, self.label
        )

    @property
    def start_line(self) -> int:
        """First line of the hunk on the new side."""
        return self.new_start

    @property
    def content(self) -> str:
        return "\n".join(self.lines)

    @property
    def net_delta(self) -> int:
        """Net number of lines this hunk adds to the file."""
        old_count, new_count = self.counts()
        return new_count - old_count

    def counts(self) -> tuple[int, int]:
        """Old and new line counts derived from the hunk content.

        Returns:
            Tuple of (old_count, new_count)
        """
        old_count = 0
        new_count = 0
        for line in self.lines:
            if line.startswith("+"):
                new_count += 1
            elif line.startswith("-"):
                old_count += 1
            elif line.startswith(" "):
                old_count += 1
                new_count += 1
        return old_count, new_count

    def changed_indices(self) -> list[int]:
        """Indices into self.lines of every addition and deletion."""
        return [line.line_index for line in self.changed]

    def snippet(self, max_lines: int = 5) -> str:
        """Get a snippet of the hunk changes for display."""
        content_lines = [f"{c.kind.value}{c.text}" for c in self.changed]
        if len(content_lines) <= max_lines:
            return "\n".join(content_lines)
        return "\n".join(content_lines[:max_lines]) + f"\n... ({len(content_lines) - max_lines} more lines)"


@dataclass
class FileDiff:
    """Diff for a single file containing multiple hunks."""

    file_path: str
    header_lines: list[str]  # From 'diff --git' up to the first @@
    hunks: list[Hunk] = field(default_factory=list)
    is_binary: bool = False
    is_new_file: bool = False
    is_deleted_file: bool = False
    is_renamed: bool = False
    old_path: Optional[str] = None  # For renames

    @property
    def changed_lines(self) -> list[ChangedLine]:
        return [line for hunk in self.hunks for line in hunk.changed]


def format_hunk_header(
    old_start: int, old_count: int, new_start: int, new_count: int, label: str = ""
) -> str:
    """Build an @@ header line with explicit counts."""
    return f"@@ -{old_start},{old_count} +{new_start},{new_count} @@{label}"


def iter_hunks(file_diffs: list[FileDiff]):
    """Yield every hunk in file order, then hunk order."""
    for file_diff in file_diffs:
        yield from file_diff.hunks


def iter_changed_lines(file_diffs: list[FileDiff]):
    """Yield every changed line in parse order."""
    for hunk in iter_hunks(file_diffs):
        yield from hunk.changed

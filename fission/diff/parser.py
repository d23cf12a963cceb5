"""Unified diff parser.

Contains functions for parsing unified diff output:
- parse_unified_diff: Parse a (multi-file) unified diff into FileDiff records
- parse_hunk_header: Parse a single @@ header line
- _parse_file_block: Parse a single file block from the diff
- _parse_hunks: Parse hunks from the hunk portion of a file diff
"""

import re
from dataclasses import dataclass
from typing import Optional

from fission.diff.models import (
    ChangedLine,
    FileDiff,
    Hunk,
    LineKind,
)


_HUNK_HEADER_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))?"
    r" \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))?"
    r" @@(?P<label>.*)$"
)

_DIFF_GIT_RE = re.compile(r"^diff --git (?P<old>\"?a/.*?\"?) (?P<new>\"?b/.*\"?)$")


@dataclass
class HunkHeader:
    """Parsed fields of an @@ header line."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    label: str


@dataclass
class _Counters:
    """Running id counters shared across files."""

    next_hunk_id: int = 1
    next_line_id: int = 1


def parse_hunk_header(line: str) -> Optional[HunkHeader]:
    """Parse an @@ -a,b +c,d @@ header.

    Missing counts default to 1.

    Args:
        line: The header line

    Returns:
        HunkHeader, or None if the line is malformed
    """
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        return None

    def _count(name: str) -> int:
        value = match.group(name)
        return int(value) if value is not None else 1

    return HunkHeader(
        old_start=int(match.group("old_start")),
        old_count=_count("old_count"),
        new_start=int(match.group("new_start")),
        new_count=_count("new_count"),
        label=match.group("label"),
    )


def parse_unified_diff(diff_output: str) -> tuple[list[FileDiff], list[str]]:
    """Parse unified diff output such as 'git show -p' or 'git diff'.

    Malformed hunks and files are skipped with a warning rather than
    aborting the parse.

    Args:
        diff_output: Raw unified diff text

    Returns:
        Tuple of (list of FileDiff objects, list of warning messages)
    """
    files: list[FileDiff] = []
    warnings: list[str] = []
    counters = _Counters()

    if not diff_output.strip():
        return files, warnings

    file_blocks = re.split(r"(?=^diff --git )", diff_output, flags=re.MULTILINE)

    for block in file_blocks:
        if not block.startswith("diff --git"):
            continue

        lines = block.split("\n")
        # Drop the empty tail produced by the final newline
        while lines and lines[-1] == "":
            lines.pop()

        file_diff = _parse_file_block(lines, counters, warnings)
        if file_diff:
            files.append(file_diff)

    return files, warnings


def _strip_path_prefix(raw: str, prefix: str) -> Optional[str]:
    """Turn 'b/src/x.py' (possibly quoted, possibly with a tab suffix) into 'src/x.py'."""
    path = raw.split("\t", 1)[0].strip()
    if path.startswith('"') and path.endswith('"') and len(path) >= 2:
        path = path[1:-1]
    if path == "/dev/null":
        return None
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _parse_file_block(
    lines: list[str], counters: _Counters, warnings: list[str]
) -> Optional[FileDiff]:
    """Parse a single file block from the diff.

    The canonical path comes from the new-file side ('+++ b/...'), falling
    back to the b/ side of the 'diff --git' line for deletions and
    header-only entries.

    Args:
        lines: Lines of the file block
        counters: Shared id counters
        warnings: List to append warnings to

    Returns:
        FileDiff object or None if the header is unparseable
    """
    match = _DIFF_GIT_RE.match(lines[0])
    if not match:
        warnings.append(f"Unparseable file header skipped: {lines[0]}")
        return None

    old_path = _strip_path_prefix(match.group("old"), "a/")
    git_new_path = _strip_path_prefix(match.group("new"), "b/")

    header_lines: list[str] = []
    hunk_start_idx: Optional[int] = None
    plus_path: Optional[str] = None
    is_binary = False
    is_new_file = False
    is_deleted_file = False

    for i, line in enumerate(lines):
        if line.startswith("@@"):
            hunk_start_idx = i
            break
        header_lines.append(line)

        if line.startswith("+++ /dev/null") or line.startswith("deleted file mode"):
            is_deleted_file = True
        elif line.startswith("+++ "):
            plus_path = _strip_path_prefix(line[4:], "b/")
        elif line.startswith("--- /dev/null") or line.startswith("new file mode"):
            is_new_file = True
        elif line.startswith("GIT binary patch") or line.startswith("Binary files"):
            is_binary = True

    file_path = plus_path or git_new_path or old_path
    if not file_path:
        warnings.append(f"No file path found in header: {lines[0]}")
        return None

    is_renamed = old_path is not None and old_path != file_path and not is_new_file

    file_diff = FileDiff(
        file_path=file_path,
        header_lines=header_lines,
        is_binary=is_binary,
        is_new_file=is_new_file,
        is_deleted_file=is_deleted_file,
        is_renamed=is_renamed,
        old_path=old_path if is_renamed else None,
    )

    if is_binary:
        if not any(line.startswith("GIT binary patch") for line in header_lines):
            warnings.append(f"Binary file without patch data cannot be split: {file_path}")
        return file_diff

    if hunk_start_idx is None:
        # Mode change, pure rename, or empty file
        return file_diff

    file_diff.hunks = _parse_hunks(lines[hunk_start_idx:], file_path, counters, warnings)
    if not file_diff.hunks:
        warnings.append(f"No usable hunks in {file_path}")
    return file_diff


def _parse_hunks(
    lines: list[str], file_path: str, counters: _Counters, warnings: list[str]
) -> list[Hunk]:
    """Parse hunks from the hunk portion of a file diff.

    Args:
        lines: Lines starting from the first @@
        file_path: Path to the file
        counters: Shared id counters
        warnings: List to append warnings to

    Returns:
        List of Hunk objects
    """
    blocks: list[tuple[str, list[str]]] = []
    for line in lines:
        if line.startswith("@@"):
            blocks.append((line, []))
        elif blocks:
            blocks[-1][1].append(line)

    hunks: list[Hunk] = []
    for header_line, body in blocks:
        header = parse_hunk_header(header_line)
        if header is None:
            warnings.append(f"Malformed hunk header in {file_path}: {header_line}")
            continue

        content = _normalize_hunk_lines(body, file_path, warnings)
        hunk = _create_hunk(header, content, file_path, len(hunks), counters, warnings)
        if hunk:
            hunks.append(hunk)

    return hunks


def _normalize_hunk_lines(body: list[str], file_path: str, warnings: list[str]) -> list[str]:
    """Keep only lines that belong to a hunk body.

    A bare empty line is an empty context line whose leading space was
    stripped by an editor or transport.
    """
    content: list[str] = []
    for line in body:
        if line == "":
            content.append(" ")
        elif line[0] in " +-\\":
            content.append(line)
        else:
            warnings.append(f"Ignored stray line in {file_path}: {line[:60]}")
    return content


def _create_hunk(
    header: HunkHeader,
    content: list[str],
    file_path: str,
    index: int,
    counters: _Counters,
    warnings: list[str],
) -> Optional[Hunk]:
    """Create a Hunk and assign ids to its changed lines.

    Context-only hunks carry no change and are dropped.
    """
    if not any(line[:1] in ("+", "-") for line in content):
        warnings.append(f"Context-only hunk dropped in {file_path}: {header.old_start}")
        return None

    hunk = Hunk(
        id=counters.next_hunk_id,
        file_path=file_path,
        index=index,
        old_start=header.old_start,
        old_count=header.old_count,
        new_start=header.new_start,
        new_count=header.new_count,
        label=header.label,
        lines=content,
    )

    for line_index, line in enumerate(content):
        if line.startswith("+"):
            kind = LineKind.ADDITION
        elif line.startswith("-"):
            kind = LineKind.DELETION
        else:
            continue
        hunk.changed.append(
            ChangedLine(
                id=counters.next_line_id,
                file_path=file_path,
                hunk_index=index,
                line_index=line_index,
                kind=kind,
                text=line[1:],
            )
        )
        counters.next_line_id += 1

    old_count, new_count = hunk.counts()
    if (old_count, new_count) != (header.old_count, header.new_count):
        warnings.append(
            f"Hunk header counts in {file_path} do not match content "
            f"({header.old_count},{header.new_count} vs {old_count},{new_count})"
        )

    counters.next_hunk_id += 1
    return hunk

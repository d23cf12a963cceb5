"""Unified diff handling for fission.

This package provides:
- models: ChangedLine, Hunk, FileDiff, LineKind
- parser: parse_unified_diff, parse_hunk_header
- synthesize: synthesize_diff, compute_edit_ops, group_hunks
"""

# Models
from fission.diff.models import (
    NO_NEWLINE_MARKER,
    ChangedLine,
    FileDiff,
    Hunk,
    LineKind,
    format_hunk_header,
    iter_changed_lines,
    iter_hunks,
)

# Parser
from fission.diff.parser import (
    HunkHeader,
    parse_hunk_header,
    parse_unified_diff,
)

# Synthesizer
from fission.diff.synthesize import (
    EditOp,
    compute_edit_ops,
    group_hunks,
    synthesize_diff,
)


__all__ = [
    # Models
    "NO_NEWLINE_MARKER",
    "ChangedLine",
    "FileDiff",
    "Hunk",
    "LineKind",
    "format_hunk_header",
    "iter_changed_lines",
    "iter_hunks",
    # Parser
    "HunkHeader",
    "parse_hunk_header",
    "parse_unified_diff",
    # Synthesizer
    "EditOp",
    "compute_edit_ops",
    "group_hunks",
    "synthesize_diff",
]

"""Data models for the split pipeline.

Contains:
- CommitPlan, SplitPlanResult: Phase 1 output (what commits to create)
- LineClassification, HunkClassificationResult: Phase 2 output
- LineRange, FileChanges, CommitChanges: Phase 3 output
- AssembledPatch: Phase 4 output
- HunkCommit, HunkSplitPlan: Hunk-mode oracle output
- PatchSplit, SplitPlan: Patches ready for execution
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommitPlan(BaseModel):
    """A planned commit with metadata used for classification."""

    model_config = ConfigDict(populate_by_name=True)

    id: str  # e.g., "commit_1"
    message: str
    description: str = ""
    content_hint: str = Field(default="", alias="contentHint")
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")


class SplitPlanResult(BaseModel):
    """Result of the planning phase, in dependency order."""

    reasoning: str = ""
    commits: list[CommitPlan] = []

    @model_validator(mode="before")
    @classmethod
    def fill_missing_commit_fields(cls, data):
        """Fill ids and messages the oracle left out.

        Oracles sometimes omit ids or messages on individual entries. Ids
        default to commit_<n> and messages to "Commit <n>".
        """
        if not isinstance(data, dict):
            return data
        commits = data.get("commits")
        if not isinstance(commits, list):
            return data
        filled = []
        for i, commit in enumerate(commits, 1):
            if isinstance(commit, dict):
                commit = dict(commit)
                if not commit.get("id"):
                    commit["id"] = f"commit_{i}"
                if not commit.get("message"):
                    commit["message"] = f"Commit {i}"
            filled.append(commit)
        return {**data, "commits": filled}


class LineClassification(BaseModel):
    """Assignment of one changed line to one planned commit."""

    line_index: int  # Index into Hunk.lines
    commit_id: str


class HunkClassificationResult(BaseModel):
    """Classification of every changed line of a hunk."""

    hunk_id: int
    file_path: str
    lines: list[LineClassification]
    fallback: bool = False  # True when the oracle call failed


class LineRange(BaseModel):
    """A run of same-kind changed lines in one hunk assigned to one commit."""

    hunk_id: int
    kind: Literal["+", "-"]
    start_line_index: int
    end_line_index: int  # Inclusive
    lines: list[str]  # Text without the +/- prefix


class FileChanges(BaseModel):
    """All ranges of one file assigned to one commit."""

    file_path: str
    ranges: list[LineRange] = []


class CommitChanges(BaseModel):
    """Everything extracted for one planned commit."""

    commit_id: str
    message: str
    description: str = ""
    file_changes: list[FileChanges] = []

    def selected_indices(self) -> dict[int, set[int]]:
        """Line indices selected per hunk id."""
        selected: dict[int, set[int]] = {}
        for file_change in self.file_changes:
            for line_range in file_change.ranges:
                indices = selected.setdefault(line_range.hunk_id, set())
                indices.update(range(line_range.start_line_index, line_range.end_line_index + 1))
        return selected

    def line_counts(self) -> tuple[int, int]:
        """Number of (added, deleted) lines."""
        added = 0
        deleted = 0
        for file_change in self.file_changes:
            for line_range in file_change.ranges:
                if line_range.kind == "+":
                    added += len(line_range.lines)
                else:
                    deleted += len(line_range.lines)
        return added, deleted


class AssembledPatch(BaseModel):
    """A patch built for one planned commit."""

    commit_id: str
    message: str
    description: str = ""
    patch: str


class HunkCommit(BaseModel):
    """One commit of a hunk-mode plan."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    description: str = ""
    hunk_ids: list[int] = Field(default_factory=list, alias="hunkIds")


class HunkSplitPlan(BaseModel):
    """Hunk-mode oracle output."""

    reasoning: str = ""
    commits: list[HunkCommit] = []


class PatchSplit(BaseModel):
    """A single patch ready to be applied and committed."""

    message: str
    description: str = ""
    diff: str


class SplitPlan(BaseModel):
    """Ordered patches for a split, shared by every mode."""

    reasoning: str = ""
    splits: list[PatchSplit] = []

"""Debug artifacts for a split run.

Each artifact is a plain snapshot of an intermediate value, written under
.fission-debug/<short-hash>/ when --debug is given.

Contains:
- DebugWriter: Writes numbered artifacts to one directory
- hunks_snapshot: Serializable view of parsed hunks
"""

import json
import re
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel

from fission.diff.models import FileDiff


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, set):
        return sorted(value)
    return value


def hunks_snapshot(file_diffs: list[FileDiff]) -> list[dict]:
    """Serializable view of every parsed hunk."""
    return [
        {
            "id": hunk.id,
            "file_path": hunk.file_path,
            "index": hunk.index,
            "header": hunk.header,
            "lines": hunk.lines,
            "changed": [
                {"id": line.id, "line_index": line.line_index, "kind": line.kind.value}
                for line in hunk.changed
            ],
        }
        for file_diff in file_diffs
        for hunk in file_diff.hunks
    ]


class DebugWriter:
    """Writes debug artifacts into a single directory.

    Args:
        root: Directory for the artifacts, created on first write
        on_write: Called with each written path
    """

    def __init__(self, root: Path, on_write: Optional[Callable[[Path], None]] = None):
        self.root = root
        self.on_write = on_write
        self.written: list[Path] = []

    def _path(self, name: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root / name

    def _record(self, path: Path) -> Path:
        self.written.append(path)
        if self.on_write:
            self.on_write(path)
        return path

    def write_text(self, name: str, text: str) -> Path:
        """Write a text artifact."""
        path = self._path(name)
        path.write_text(text)
        return self._record(path)

    def write_json(self, name: str, value: Any) -> Path:
        """Write a JSON artifact. Pydantic models and sets are converted."""
        path = self._path(name)
        path.write_text(json.dumps(_to_jsonable(value), indent=2) + "\n")
        return self._record(path)

    def write_patch(self, index: int, commit_id: str, patch: str) -> Path:
        """Write one assembled patch as 05-patch-<n>-<commit id>.patch."""
        safe_id = re.sub(r"[^A-Za-z0-9_-]", "_", commit_id)
        return self.write_text(f"05-patch-{index + 1}-{safe_id}.patch", patch)

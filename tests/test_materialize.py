"""Tests for fission.split.materialize module."""

import subprocess

from fission.diff import parse_unified_diff
from fission.split import (
    CommitPlan,
    HunkClassificationResult,
    LineClassification,
    build_content_patches,
    extract_changes,
    materialize_file,
)


def _changes(file_diffs, owners, ids=("A", "B")):
    plans = [CommitPlan(id=commit_id, message=f"Commit {commit_id}") for commit_id in ids]
    classifications = [
        HunkClassificationResult(
            hunk_id=hunk.id,
            file_path=hunk.file_path,
            lines=[
                LineClassification(line_index=i, commit_id=owners.get(hunk.id, {}).get(i, "A"))
                for i in hunk.changed_indices()
            ],
        )
        for file_diff in file_diffs
        for hunk in file_diff.hunks
    ]
    return extract_changes(file_diffs, plans, classifications)


def _apply_all(repo, patches):
    for i, patch in enumerate(patches):
        patch_file = repo.parent / f"content-{i:02d}.patch"
        patch_file.write_text(patch.patch)
        result = subprocess.run(
            ["git", "apply", str(patch_file)], cwd=repo, capture_output=True, text=True
        )
        assert result.returncode == 0, f"patch {i + 1}: {result.stderr}\n{patch.patch}"


class TestMaterializeFile:
    """Tests for materialize_file function."""

    def test_everything_included(self, three_hunk_diff, three_hunk_result, numbered):
        """Test that applying every change reproduces the new content."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)
        included = {hunk.id: set(hunk.changed_indices()) for hunk in file_diffs[0].hunks}

        assert materialize_file(numbered(120), file_diffs[0], included) == three_hunk_result

    def test_nothing_included(self, three_hunk_diff, numbered):
        """Test that applying nothing keeps the base content."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        assert materialize_file(numbered(120), file_diffs[0], {}) == numbered(120)

    def test_partial_replacement(self, three_hunk_diff, numbered):
        """Test applying a deletion without its replacement line."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        result = materialize_file(numbered(120), file_diffs[0], {3: {1}})

        lines = result.splitlines()
        assert "line 101" not in lines
        assert "changed 101" not in lines
        assert len(lines) == 119

    def test_new_file(self, new_file_diff):
        """Test materializing part of a new file from an empty base."""
        file_diffs, _ = parse_unified_diff(new_file_diff)

        assert materialize_file("", file_diffs[0], {1: {0, 1}}) == "import os\n\n"

    def test_missing_final_newline(self):
        """Test that an added last line without newline stays without one."""
        diff = """diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1,1 +1,2 @@
 one
+two
\\ No newline at end of file
"""
        file_diffs, _ = parse_unified_diff(diff)

        assert materialize_file("one\n", file_diffs[0], {1: {1}}) == "one\ntwo"


class TestBuildContentPatches:
    """Tests for build_content_patches function."""

    def test_interleaved_split_applies(self, temp_repo, git, numbered, three_hunk_diff, three_hunk_result):
        """Test that content-mode patches apply in sequence."""
        (temp_repo / "numbers.txt").write_text(numbered(120))
        git(temp_repo, "add", "numbers.txt")
        git(temp_repo, "commit", "-m", "Add numbers")
        file_diffs, _ = parse_unified_diff(three_hunk_diff)
        changes = _changes(file_diffs, {1: {3: "B"}, 2: {1: "B", 3: "B"}, 3: {1: "B"}})

        patches = build_content_patches(file_diffs, changes, lambda fd: numbered(120))

        assert [p.commit_id for p in patches] == ["A", "B"]
        _apply_all(temp_repo, patches)
        assert (temp_repo / "numbers.txt").read_text() == three_hunk_result

    def test_new_file_created_by_first_patch(self, temp_repo, new_file_diff):
        """Test that only the first content patch creates a new file."""
        file_diffs, _ = parse_unified_diff(new_file_diff)
        changes = _changes(file_diffs, {1: {2: "B", 3: "B"}})

        patches = build_content_patches(file_diffs, changes, lambda fd: "")

        assert "new file mode" in patches[0].patch
        assert "new file mode" not in patches[1].patch
        _apply_all(temp_repo, patches)
        assert (temp_repo / "new.py").read_text() == "import os\n\ndef main():\n    return os.getcwd()\n"

    def test_deleted_file_removed_by_last_patch(self, temp_repo, git, deleted_file_diff):
        """Test that only the last content patch deletes the file."""
        (temp_repo / "old.txt").write_text("a\nb\nc\n")
        git(temp_repo, "add", "old.txt")
        git(temp_repo, "commit", "-m", "Add old.txt")
        file_diffs, _ = parse_unified_diff(deleted_file_diff)
        changes = _changes(file_diffs, {1: {1: "B", 2: "B"}})

        patches = build_content_patches(file_diffs, changes, lambda fd: "a\nb\nc\n")

        assert "deleted file mode" not in patches[0].patch
        assert "deleted file mode" in patches[1].patch
        _apply_all(temp_repo, patches)
        assert not (temp_repo / "old.txt").exists()

    def test_renamed_file_with_hunks_skipped_with_warning(self):
        """Test that edited renames are reported as not representable."""
        diff = """diff --git a/a.py b/b.py
similarity index 80%
rename from a.py
rename to b.py
--- a/a.py
+++ b/b.py
@@ -1 +1 @@
-x = 1
+x = 2
"""
        file_diffs, _ = parse_unified_diff(diff)
        warnings = []

        patches = build_content_patches(file_diffs, _changes(file_diffs, {}), lambda fd: "x = 1\n", warnings=warnings)

        assert patches == []
        assert "b.py: not representable in content mode, skipped" in warnings

    def test_hunkless_entries_carried_by_first_patch(self, temp_repo, git):
        """Test that empty files, mode changes and pure renames are not lost."""
        (temp_repo / "run.sh").write_text("echo hi\n")
        (temp_repo / "old_name.txt").write_text("same\n")
        (temp_repo / "notes.txt").write_text("one\nthree\n")
        git(temp_repo, "add", ".")
        git(temp_repo, "commit", "-m", "Add files")
        diff = """diff --git a/empty.txt b/empty.txt
new file mode 100644
index 0000000..e69de29
diff --git a/run.sh b/run.sh
old mode 100644
new mode 100755
diff --git a/old_name.txt b/new_name.txt
similarity index 100%
rename from old_name.txt
rename to new_name.txt
diff --git a/notes.txt b/notes.txt
--- a/notes.txt
+++ b/notes.txt
@@ -1,2 +1,4 @@
 one
+two
 three
+four
"""
        file_diffs, _ = parse_unified_diff(diff)
        warnings = []

        patches = build_content_patches(
            file_diffs, _changes(file_diffs, {1: {3: "B"}}), lambda fd: "one\nthree\n", warnings=warnings
        )

        assert warnings == []
        assert "new file mode 100644" in patches[0].patch
        assert "rename to new_name.txt" in patches[0].patch
        assert "new mode 100755" not in patches[1].patch
        _apply_all(temp_repo, patches)
        assert (temp_repo / "empty.txt").read_text() == ""
        assert (temp_repo / "new_name.txt").read_text() == "same\n"
        assert not (temp_repo / "old_name.txt").exists()
        assert (temp_repo / "run.sh").stat().st_mode & 0o111
        assert (temp_repo / "notes.txt").read_text() == "one\ntwo\nthree\nfour\n"

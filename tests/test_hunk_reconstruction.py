"""Tests for fission.split.hunks and fission.split.headers modules."""

import subprocess

import pytest

from fission.diff import parse_unified_diff
from fission.split import build_hunk_patch, build_hunk_patches
from fission.split.headers import is_header_only, relocate_hunk, rewrite_file_header


def _apply(repo, patch_text, name="test.patch", check_only=False):
    patch_file = repo.parent / name
    patch_file.write_text(patch_text)
    args = ["git", "apply"] + (["--check"] if check_only else []) + [str(patch_file)]
    return subprocess.run(args, cwd=repo, capture_output=True, text=True)


@pytest.fixture
def numbers_repo(temp_repo, git, numbered):
    """Repository with numbers.txt holding 'line 1' .. 'line 120'."""
    (temp_repo / "numbers.txt").write_text(numbered(120))
    git(temp_repo, "add", "numbers.txt")
    git(temp_repo, "commit", "-m", "Add numbers")
    return temp_repo


class TestRelocateHunk:
    """Tests for relocate_hunk function."""

    def test_no_offset(self):
        """Test that the first emitted hunk keeps its position."""
        assert relocate_hunk(10, 5, 5, 8, 0) == (10, 10)

    def test_offset_shifts_new_side_only(self):
        """Test that the running offset moves only the new start."""
        assert relocate_hunk(100, 4, 4, 4, 3) == (100, 103)

    def test_pure_insertion_at_file_start(self):
        """Test a hunk with an empty old side at the start of a file."""
        assert relocate_hunk(0, 0, 0, 2, 0) == (0, 1)

    def test_empty_new_side(self):
        """Test a hunk whose new side ends up empty."""
        assert relocate_hunk(1, 3, 2, 0, 0) == (1, 0)


class TestBuildHunkPatch:
    """Tests for build_hunk_patch function."""

    def test_offset_from_selected_hunks_only(self, three_hunk_diff):
        """Test that skipped hunks do not contribute to the new-side offset."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        patch = build_hunk_patch(file_diffs, [1, 3])

        headers = [line for line in patch.splitlines() if line.startswith("@@")]
        assert headers == ["@@ -10,5 +10,8 @@", "@@ -100,4 +103,4 @@"]

    def test_all_hunks_reproduce_original(self, three_hunk_diff):
        """Test that selecting every hunk reproduces the original diff."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        patch = build_hunk_patch(file_diffs, [1, 2, 3])

        assert patch == three_hunk_diff

    def test_hunks_keep_original_order(self, three_hunk_diff):
        """Test that hunk order follows the file, not the selection."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        patch = build_hunk_patch(file_diffs, [3, 1])

        assert patch.index("added a1") < patch.index("changed 101")

    def test_nothing_selected(self, three_hunk_diff):
        """Test that an empty selection yields an empty string."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        assert build_hunk_patch(file_diffs, []) == ""

    def test_files_never_interleaved(self, multi_file_diff):
        """Test that each file appears once with its own header."""
        file_diffs, _ = parse_unified_diff(multi_file_diff)

        patch = build_hunk_patch(file_diffs, [1, 2, 3])

        assert patch.count("diff --git a/src/main.py") == 1
        assert patch.count("diff --git a/tests/test_main.py") == 1
        assert patch.index("# New comment") < patch.index("diff --git a/tests/test_main.py")

    def test_header_only_entries(self):
        """Test that mode changes are emitted only when requested."""
        diff = """diff --git a/script.sh b/script.sh
old mode 100644
new mode 100755
diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1,1 +1,2 @@
 one
+two
"""
        file_diffs, _ = parse_unified_diff(diff)

        without = build_hunk_patch(file_diffs, [1])
        with_header_only = build_hunk_patch(file_diffs, [1], include_header_only=True)

        assert "new mode 100755" not in without
        assert "new mode 100755" in with_header_only


class TestBuildHunkPatches:
    """Tests for build_hunk_patches function."""

    def test_partition_covers_every_hunk_once(self, three_hunk_diff):
        """Test that a partition's patches contain each change once."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        patches = build_hunk_patches(file_diffs, [[1, 3], [2]])

        changed = [
            line
            for patch in patches
            for line in patch.splitlines()
            if line[:1] in ("+", "-") and not line.startswith(("+++", "---"))
        ]
        expected = [
            f"{line.kind.value}{line.text}" for fd in file_diffs for line in fd.changed_lines
        ]
        assert sorted(changed) == sorted(expected)

    def test_new_file_created_once(self, new_file_diff):
        """Test that only the first patch touching a new file creates it."""
        diff = new_file_diff + """@@ -0,0 +10,1 @@
+extra
"""
        file_diffs, _ = parse_unified_diff(diff)

        first, second = build_hunk_patches(file_diffs, [[1], [2]])

        assert "new file mode" in first and "--- /dev/null" in first
        assert "new file mode" not in second
        assert "--- a/new.py" in second and "+++ b/new.py" in second

    def test_mode_change_attaches_to_first_patch(self):
        """Test that header-only entries land in the first patch."""
        diff = """diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1,1 +1,2 @@
 one
+two
diff --git a/b.txt b/b.txt
--- a/b.txt
+++ b/b.txt
@@ -1,1 +1,2 @@
 uno
+dos
diff --git a/script.sh b/script.sh
old mode 100644
new mode 100755
"""
        file_diffs, _ = parse_unified_diff(diff)

        first, second = build_hunk_patches(file_diffs, [[1], [2]])

        assert "new mode 100755" in first
        assert "new mode 100755" not in second


class TestRewriteFileHeader:
    """Tests for rewrite_file_header function."""

    def test_unchanged_for_plain_modification(self, three_hunk_diff):
        """Test that modification headers are kept as is."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        header = rewrite_file_header(file_diffs[0], first_touch=False, last_touch=False)

        assert header == file_diffs[0].header_lines

    def test_deleted_file_only_on_last_touch(self, deleted_file_diff):
        """Test that a deletion header is only emitted by the last patch."""
        file_diffs, _ = parse_unified_diff(deleted_file_diff)

        early = rewrite_file_header(file_diffs[0], first_touch=True, last_touch=False)
        last = rewrite_file_header(file_diffs[0], first_touch=False, last_touch=True)

        assert "deleted file mode 100644" not in early
        assert "+++ b/old.txt" in early
        assert not any(line.startswith("index ") for line in early)
        assert "deleted file mode 100644" in last
        assert "+++ /dev/null" in last

    def test_rename_only_on_first_touch(self):
        """Test that later patches edit the file at its new path."""
        diff = """diff --git a/old.py b/new.py
similarity index 90%
rename from old.py
rename to new.py
index 1234567..abcdefg 100644
--- a/old.py
+++ b/new.py
@@ -1,2 +1,2 @@
-x
+y
 z
"""
        file_diffs, _ = parse_unified_diff(diff)

        later = rewrite_file_header(file_diffs[0], first_touch=False, last_touch=True)

        assert later == ["diff --git a/new.py b/new.py", "--- a/new.py", "+++ b/new.py"]


class TestIsHeaderOnly:
    """Tests for is_header_only function."""

    def test_binary_stub_is_not_applicable(self):
        """Test that 'Binary files differ' entries carry nothing to apply."""
        diff = """diff --git a/image.png b/image.png
index 1234567..abcdefg 100644
Binary files a/image.png and b/image.png differ
"""
        file_diffs, _ = parse_unified_diff(diff)

        assert is_header_only(file_diffs[0]) is False

    def test_file_with_hunks(self, three_hunk_diff):
        """Test that entries with hunks are not header-only."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        assert is_header_only(file_diffs[0]) is False


class TestApplyInSequence:
    """End-to-end: hunk patches apply in order against the original base."""

    def test_round_trip_applies(self, numbers_repo, three_hunk_diff, three_hunk_result):
        """Test that the all-hunks patch applies and matches the full change."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)

        result = _apply(numbers_repo, build_hunk_patch(file_diffs, [1, 2, 3]))

        assert result.returncode == 0, result.stderr
        assert (numbers_repo / "numbers.txt").read_text() == three_hunk_result

    def test_non_contiguous_split_applies(self, numbers_repo, three_hunk_diff, three_hunk_result):
        """Test hunks {1, 3} then {2}: both apply, final content is complete."""
        file_diffs, _ = parse_unified_diff(three_hunk_diff)
        first, second = build_hunk_patches(file_diffs, [[1, 3], [2]])

        check = _apply(numbers_repo, first, "first.patch", check_only=True)
        assert check.returncode == 0, check.stderr
        assert _apply(numbers_repo, first, "first.patch").returncode == 0

        check = _apply(numbers_repo, second, "second.patch", check_only=True)
        assert check.returncode == 0, check.stderr
        assert _apply(numbers_repo, second, "second.patch").returncode == 0

        assert (numbers_repo / "numbers.txt").read_text() == three_hunk_result

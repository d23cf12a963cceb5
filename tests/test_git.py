"""Tests for fission.git module."""

import pytest

from fission.git import (
    GitError,
    InvalidRefError,
    get_commit_info,
    get_file_at_ref,
    get_repo_root,
    get_unpushed_commits,
    is_working_tree_clean,
    resolve_ref,
)


@pytest.fixture
def history_repo(temp_repo, git):
    """Repository with three commits after the initial one."""
    for name in ("a", "b", "c"):
        (temp_repo / f"{name}.txt").write_text(f"{name}\n" * 3)
        git(temp_repo, "add", f"{name}.txt")
        git(temp_repo, "commit", "-m", f"Add {name}")
    return temp_repo


class TestResolveRef:
    """Tests for resolve_ref function."""

    def test_resolves_head(self, temp_repo, git):
        """Test that HEAD resolves to the full hash."""
        assert resolve_ref("HEAD", cwd=temp_repo) == git(temp_repo, "rev-parse", "HEAD").strip()

    def test_invalid_ref(self, temp_repo):
        """Test that an unknown ref raises InvalidRefError."""
        with pytest.raises(InvalidRefError, match="no-such-branch"):
            resolve_ref("no-such-branch", cwd=temp_repo)


class TestGetCommitInfo:
    """Tests for get_commit_info function."""

    def test_metadata_and_stats(self, history_repo):
        """Test subject, author and numstat totals."""
        info = get_commit_info("HEAD", cwd=history_repo)

        assert info.message == "Add c"
        assert info.author == "Test User"
        assert info.files == ["c.txt"]
        assert (info.insertions, info.deletions) == (3, 0)
        assert info.diff == ""
        assert len(info.short_hash) < len(info.hash)

    def test_with_diff(self, history_repo):
        """Test that the diff is fetched on request."""
        info = get_commit_info("HEAD~1", with_diff=True, cwd=history_repo)

        assert "diff --git a/b.txt b/b.txt" in info.diff
        assert "+b" in info.diff

    def test_oversized_diff_raises(self, history_repo):
        """Test that a diff over the limit is refused."""
        with pytest.raises(GitError, match="too large to split"):
            get_commit_info("HEAD", with_diff=True, cwd=history_repo, max_diff_chars=10)

    def test_oversized_diff_truncated(self, history_repo):
        """Test that truncation cuts the diff instead of raising."""
        info = get_commit_info(
            "HEAD", with_diff=True, cwd=history_repo, max_diff_chars=10, truncate=True
        )

        assert info.diff.endswith("\n... (truncated)")
        assert len(info.diff) == 10 + len("\n... (truncated)")


class TestGetUnpushedCommits:
    """Tests for get_unpushed_commits function."""

    def test_without_upstream_defaults_to_head(self, history_repo):
        """Test that without an upstream only HEAD is listed."""
        commits = get_unpushed_commits(cwd=history_repo)

        assert [c.message for c in commits] == ["Add c"]

    def test_without_upstream_with_count(self, history_repo):
        """Test that a count lists that many commits, newest first."""
        commits = get_unpushed_commits(count=3, cwd=history_repo)

        assert [c.message for c in commits] == ["Add c", "Add b", "Add a"]

    def test_with_upstream(self, history_repo, git, tmp_path):
        """Test that only commits after the upstream are listed."""
        remote = tmp_path / "remote.git"
        git(tmp_path, "init", "--bare", str(remote))
        git(history_repo, "remote", "add", "origin", str(remote))
        git(history_repo, "push", "origin", "HEAD~1:refs/heads/main")
        git(history_repo, "branch", "--set-upstream-to=origin/main")

        commits = get_unpushed_commits(cwd=history_repo)

        assert [c.message for c in commits] == ["Add c"]


class TestWorkingTree:
    """Tests for working tree helpers."""

    def test_clean_and_dirty(self, temp_repo):
        """Test detecting uncommitted changes to tracked files."""
        assert is_working_tree_clean(cwd=temp_repo) is True

        (temp_repo / "untracked.txt").write_text("x\n")
        assert is_working_tree_clean(cwd=temp_repo) is True

        (temp_repo / "README.md").write_text("changed\n")
        assert is_working_tree_clean(cwd=temp_repo) is False

    def test_file_at_ref(self, history_repo):
        """Test reading a file as of an earlier commit."""
        assert get_file_at_ref("HEAD", "a.txt", cwd=history_repo) == "a\na\na\n"
        assert get_file_at_ref("HEAD~2", "c.txt", cwd=history_repo) == ""

    def test_repo_root(self, temp_repo):
        """Test finding the repository root from a subdirectory."""
        sub = temp_repo / "sub"
        sub.mkdir()

        assert get_repo_root(cwd=sub).resolve() == temp_repo.resolve()

    def test_repo_root_outside_repo(self, tmp_path):
        """Test that a plain directory is reported as not a repository."""
        plain = tmp_path / "plain"
        plain.mkdir()

        with pytest.raises(GitError, match="Not in a git repository"):
            get_repo_root(cwd=plain)

"""Shared test fixtures and configuration."""

import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional, Union

import pytest

from fission.git import CommitInfo
from fission.llm import BaseLLMProvider, LLMError, RawLLMResult


class StubProvider(BaseLLMProvider):
    """LLM provider returning canned responses.

    responses is either a list consumed in order (an Exception instance is
    raised instead of returned) or a callable taking (system_prompt,
    user_prompt) and returning the response text.
    """

    def __init__(self, responses: Union[list, Callable[[str, str], str]], model: str = "stub-model"):
        self.model = model
        self.responses = responses
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def get_api_key(self) -> str:
        return "stub-key"

    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        with self._lock:
            self.calls.append(
                {"system": system_prompt, "user": user_prompt, "max_tokens": max_tokens}
            )
            if callable(self.responses):
                respond = self.responses
            elif self.responses:
                response = self.responses.pop(0)
                respond = None
            else:
                raise LLMError("No more stub responses")

        # Callables run unlocked so concurrent requests overlap
        if respond is not None:
            response = respond(system_prompt, user_prompt)

        if isinstance(response, Exception):
            raise response
        return RawLLMResult(raw_response=response, model=self.model, input_tokens=10, output_tokens=20)


@pytest.fixture
def stub_provider():
    """Factory for StubProvider instances."""
    return StubProvider


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def run_git(repo: Path, *args: str) -> str:
    """Run a git command in a test repository and return stdout."""
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def git():
    """The run_git helper, for tests that drive a repository directly."""
    return run_git


@pytest.fixture
def temp_repo(tmp_path):
    """Create a temporary git repository with one commit."""
    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    run_git(repo_dir, "init")
    run_git(repo_dir, "config", "user.email", "test@example.com")
    run_git(repo_dir, "config", "user.name", "Test User")
    run_git(repo_dir, "config", "commit.gpgsign", "false")

    (repo_dir / "README.md").write_text("# Test Repo\n")
    run_git(repo_dir, "add", "README.md")
    run_git(repo_dir, "commit", "-m", "Initial commit")

    return repo_dir


def numbered_lines(count: int, prefix: str = "line") -> str:
    """File content with one numbered line per row: 'line 1' .. 'line N'."""
    return "".join(f"{prefix} {i}\n" for i in range(1, count + 1))


@pytest.fixture
def numbered():
    """The numbered_lines helper."""
    return numbered_lines


def _count_changed(diff: str, tag: str) -> int:
    return sum(
        1 for line in diff.splitlines() if line.startswith(tag) and not line.startswith(tag * 3)
    )


@pytest.fixture
def make_commit():
    """Factory for CommitInfo objects wrapping a diff."""

    def _make(diff: str = "", message: str = "Add several things", files: Optional[list] = None):
        return CommitInfo(
            hash="a" * 40,
            short_hash="aaaaaaa",
            message=message,
            author="Test User",
            date="2026-01-01",
            files=files if files is not None else ["numbers.txt"],
            insertions=_count_changed(diff, "+"),
            deletions=_count_changed(diff, "-"),
            diff=diff,
        )

    return _make


@pytest.fixture
def three_hunk_diff():
    """One file, three hunks: net +3, net +3 and net 0.

    Applies to numbered_lines(120).
    """
    return """diff --git a/numbers.txt b/numbers.txt
index 1111111..2222222 100644
--- a/numbers.txt
+++ b/numbers.txt
@@ -10,5 +10,8 @@
 line 10
 line 11
+added a1
+added a2
+added a3
 line 12
 line 13
 line 14
@@ -50,3 +53,6 @@
 line 50
+added b1
+added b2
+added b3
 line 51
 line 52
@@ -100,4 +106,4 @@
 line 100
-line 101
+changed 101
 line 102
 line 103
"""


@pytest.fixture
def three_hunk_result():
    """numbered_lines(120) with every change of three_hunk_diff applied."""
    lines = [f"line {i}\n" for i in range(1, 121)]
    lines[100] = "changed 101\n"
    lines[50:50] = ["added b1\n", "added b2\n", "added b3\n"]
    lines[11:11] = ["added a1\n", "added a2\n", "added a3\n"]
    return "".join(lines)


@pytest.fixture
def split_repo(temp_repo, numbered, three_hunk_result):
    """Repository whose HEAD commit applies three_hunk_diff to numbers.txt."""
    (temp_repo / "numbers.txt").write_text(numbered(120))
    run_git(temp_repo, "add", "numbers.txt")
    run_git(temp_repo, "commit", "-m", "Add numbers")
    (temp_repo / "numbers.txt").write_text(three_hunk_result)
    run_git(temp_repo, "commit", "-am", "Change numbers in three places")
    return temp_repo


@pytest.fixture
def new_file_diff():
    """A single new file of four lines."""
    return """diff --git a/new.py b/new.py
new file mode 100644
index 0000000..1111111
--- /dev/null
+++ b/new.py
@@ -0,0 +1,4 @@
+import os
+
+def main():
+    return os.getcwd()
"""


@pytest.fixture
def deleted_file_diff():
    """A deleted file of three lines."""
    return """diff --git a/old.txt b/old.txt
deleted file mode 100644
index 1111111..0000000
--- a/old.txt
+++ /dev/null
@@ -1,3 +0,0 @@
-a
-b
-c
"""


@pytest.fixture
def multi_file_diff():
    """A modification and a new file."""
    return """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -10,2 +10,4 @@ def main():
     print("Hello")
+    print("World")
+    print("!")
     return 0
@@ -20,1 +22,3 @@ def helper():
     pass
+    # New comment
+    return True
diff --git a/tests/test_main.py b/tests/test_main.py
new file mode 100644
index 0000000..1234567
--- /dev/null
+++ b/tests/test_main.py
@@ -0,0 +1,4 @@
+import pytest
+
+def test_main():
+    assert True
"""

"""Prompt builders for the split oracle calls.

Contains:
- PLAN_SYSTEM_PROMPT, build_plan_prompt: Line mode phase 1 (what commits to create)
- CLASSIFY_SYSTEM_PROMPT, build_classify_prompt: Line mode phase 2 (one hunk)
- HUNK_PLAN_SYSTEM_PROMPT, build_hunk_plan_prompt: Hunk mode plan
- DIFF_SPLIT_SYSTEM_PROMPT, build_diff_split_prompt: Diff mode plan
- format_hunk_inventory: Numbered hunk listing for hunk mode
- format_error_feedback: Feedback block listing a previous attempt's errors
"""

from typing import Optional

from fission.diff.models import FileDiff, Hunk
from fission.git.commits import CommitInfo
from fission.split.models import CommitPlan


PLAN_SYSTEM_PROMPT = """You are a git expert planning how to split a commit into atomic commits.
You decide WHAT commits to create. You never write diff content.
Output ONLY valid JSON. No markdown fences or commentary."""


CLASSIFY_SYSTEM_PROMPT = """You are classifying the changed lines of a git diff hunk into planned commits.
Output ONLY a JSON array. No markdown fences or commentary."""


HUNK_PLAN_SYSTEM_PROMPT = """You are a git expert splitting a commit into atomic commits.
You assign whole hunks to commits by their numeric ids.
Reference ONLY hunk ids from the inventory, and use each id exactly once.
Output ONLY valid JSON. No markdown fences or commentary."""


DIFF_SPLIT_SYSTEM_PROMPT = """You are a git expert splitting a commit's diff into atomic commits.
Each split you produce must be a unified diff that applies with `git apply`.
Output ONLY valid JSON. No markdown fences or commentary."""


def format_error_feedback(errors: list[str]) -> str:
    """Format a previous attempt's errors for inclusion in a retry prompt."""
    if not errors:
        return ""
    listed = "\n".join(f"- {error}" for error in errors)
    return f"\n\n**IMPORTANT - Previous attempt had these errors, please fix them:**\n{listed}\n"


def _custom_instruction(instruction: Optional[str]) -> str:
    return f"\n**Custom Instruction:** {instruction}\n" if instruction else ""


def build_plan_prompt(
    commit: CommitInfo,
    instruction: Optional[str] = None,
    previous_errors: Optional[list[str]] = None,
) -> str:
    """Build the user prompt for the line mode plan.

    Args:
        commit: The commit to split, with its diff
        instruction: Optional free text from the user
        previous_errors: Errors of the previous attempt, if retrying

    Returns:
        User prompt string
    """
    return f"""Analyze this commit and plan how to split it into atomic commits.

**Original Commit Message:** {commit.message}
**Files Changed:** {len(commit.files)}
**Stats:** +{commit.insertions}/-{commit.deletions} lines

**Full Diff:**
```diff
{commit.diff or '(diff not available)'}
```
{_custom_instruction(instruction)}{format_error_feedback(previous_errors or [])}
TASK: Plan how to split this into 2-5 atomic commits. Each commit should do ONE logical thing.

Rules:
1. Order commits by dependency - if commit B uses code from commit A, A must come first
2. Each commit must be independently buildable (no dangling references)
3. Group related changes together (a function and its callers, a type and its usage)
4. Import statements should go with the code that uses them

Output a JSON plan (DO NOT output any diff content, only the plan):

{{
  "reasoning": "Brief explanation of how you're splitting",
  "commits": [
    {{
      "id": "commit_1",
      "message": "feat(auth): Add login function",
      "description": "Adds the core login functionality",
      "contentHint": "login function, auth imports, login-related helpers",
      "dependsOn": []
    }},
    {{
      "id": "commit_2",
      "message": "feat(api): Add login endpoint",
      "description": "Adds API endpoint that uses the login function",
      "contentHint": "API route handler, endpoint registration",
      "dependsOn": ["commit_1"]
    }}
  ]
}}

If the commit is already atomic, return a single commit with all changes.
Only output the JSON, nothing else."""


def _format_hunk_lines(hunk: Hunk) -> str:
    return "\n".join(f"  {index}: {line}" for index, line in enumerate(hunk.lines))


def _format_commit_options(plans: list[CommitPlan]) -> str:
    return "\n".join(f'- {plan.id}: "{plan.message}" - {plan.content_hint}' for plan in plans)


def build_classify_prompt(hunk: Hunk, plans: list[CommitPlan]) -> str:
    """Build the user prompt classifying one hunk's changed lines.

    Args:
        hunk: The hunk to classify
        plans: Planned commits in dependency order

    Returns:
        User prompt string
    """
    return f"""**File:** {hunk.file_path}
**Hunk starting at line {hunk.start_line}:**
```
{_format_hunk_lines(hunk)}
```

**Available commits (in dependency order):**
{_format_commit_options(plans)}

TASK: For each changed line (starting with + or -), decide which commit it belongs to.
Rules:
1. Related code should go together (e.g., a function definition and its usage)
2. Imports should go with the code that uses them
3. If unsure, prefer putting dependent code in later commits

Only classify lines that start with + or - (not context lines starting with space).

Output JSON array only:
[{{"line": 0, "commit": "commit_1"}}, {{"line": 3, "commit": "commit_2"}}]

Only output the JSON array, nothing else."""


def format_hunk_inventory(file_diffs: list[FileDiff], max_lines: int = 40) -> str:
    """Format every hunk with its numeric id for the hunk mode prompt.

    Args:
        file_diffs: Parsed diff
        max_lines: Content lines shown per hunk before truncation

    Returns:
        Inventory text
    """
    sections = ["[HUNK INVENTORY]"]
    for file_diff in file_diffs:
        if not file_diff.hunks:
            continue
        status = "new file" if file_diff.is_new_file else "deleted file" if file_diff.is_deleted_file else "modified"
        sections.append(f"\n### {file_diff.file_path} ({status})")
        for hunk in file_diff.hunks:
            sections.append(f"[{hunk.id}] {hunk.header}")
            shown = hunk.lines[:max_lines]
            sections.extend(shown)
            if len(hunk.lines) > max_lines:
                sections.append(f"... ({len(hunk.lines) - max_lines} more lines)")
    return "\n".join(sections)


def build_hunk_plan_prompt(
    commit: CommitInfo,
    file_diffs: list[FileDiff],
    instruction: Optional[str] = None,
    previous_errors: Optional[list[str]] = None,
) -> str:
    """Build the user prompt for the hunk mode plan.

    Args:
        commit: The commit to split
        file_diffs: Parsed diff of the commit
        instruction: Optional free text from the user
        previous_errors: Errors of the previous attempt, if retrying

    Returns:
        User prompt string
    """
    hunk_ids = [hunk.id for file_diff in file_diffs for hunk in file_diff.hunks]
    return f"""Split this commit into atomic commits by assigning its hunks to commits.

**Original Commit Message:** {commit.message}
**Stats:** {len(commit.files)} files, +{commit.insertions}/-{commit.deletions} lines
**Total hunks:** {len(hunk_ids)}

{format_hunk_inventory(file_diffs)}
{_custom_instruction(instruction)}{format_error_feedback(previous_errors or [])}
[OUTPUT SCHEMA]
{{
  "reasoning": "Brief explanation of how you're splitting",
  "commits": [
    {{
      "message": "feat(auth): Add login function",
      "description": "What this commit does",
      "hunkIds": [1, 3]
    }}
  ]
}}

[RULES]
1. Reference ONLY hunk ids from the inventory above
2. Each hunk id must appear in exactly ONE commit
3. Order commits by dependency
4. Use 2-5 commits, or one commit if the change is already atomic

Output ONLY the JSON object:"""


def build_diff_split_prompt(
    commit: CommitInfo,
    instruction: Optional[str] = None,
    previous_errors: Optional[list[str]] = None,
) -> str:
    """Build the user prompt for diff mode, where the oracle writes each patch.

    Args:
        commit: The commit to split, with its diff
        instruction: Optional free text from the user
        previous_errors: Errors of the previous attempt, if retrying

    Returns:
        User prompt string
    """
    return f"""Split this commit's diff into multiple atomic commits.

**Original Commit Message:** {commit.message}

**Full Diff:**
```diff
{commit.diff or '(diff not available)'}
```
{_custom_instruction(instruction)}{format_error_feedback(previous_errors or [])}
Split this into 2-5 atomic commits. For each commit, output the EXACT unified diff format that can be applied with `git apply`.

CRITICAL RULES:
1. Each split must contain a valid unified diff (starting with "diff --git")
2. The diffs must be complete - include all headers (diff --git, index, ---, +++)
3. Every hunk from the original diff must appear in exactly ONE split
4. Do not modify the diff content, just partition it
5. Hunk headers (@@ -X,Y +A,B @@) must have ACCURATE line counts:
   - Y = number of lines starting with '-' or ' ' (context) in the hunk
   - B = number of lines starting with '+' or ' ' (context) in the hunk
6. Each diff must end with a newline

Respond in JSON format:
{{
  "reasoning": "Brief explanation of how you're splitting this",
  "splits": [
    {{
      "message": "feat(auth): Add login endpoint",
      "description": "What this commit does",
      "diff": "diff --git a/file.ts b/file.ts\\n--- a/file.ts\\n+++ b/file.ts\\n@@ -1,3 +1,4 @@\\n+new line\\n existing"
    }}
  ]
}}

IMPORTANT: In the JSON, escape newlines as \\n in the diff field.
Only output the JSON."""

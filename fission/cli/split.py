"""CLI command for splitting a commit into atomic commits."""

from typing import Optional

import typer

from fission import config
from fission.git import (
    DirtyWorkingTreeError,
    GitError,
    get_commit_info,
    get_repo_root,
)
from fission.llm import LLMError
from fission.split import (
    PatchValidationError,
    PlanGenerationError,
    SplitError,
    SplitExecutionError,
    SplitMode,
    execute_split,
    plan_split,
)
from fission.cli.utils import (
    base_reader,
    echo_progress,
    print_split_plan,
    print_warnings,
    resolve_provider,
)


def split_command(
    ref: str = typer.Argument("HEAD", help="Commit to split (only HEAD can be rewritten)"),
    mode: SplitMode = typer.Option(
        SplitMode.HUNK,
        "--mode",
        "-m",
        help="hunk: whole hunks per commit; line: per changed line; diff: LLM writes each patch",
        case_sensitive=False,
    ),
    strategy: str = typer.Option(
        "filter",
        "--strategy",
        help="Line mode patch construction: 'filter' hunk text or rebuild from file 'content'",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show the split plan without rewriting history",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
    instruction: Optional[str] = typer.Option(
        None,
        "--instruction",
        "-i",
        help="Extra guidance for the split (e.g. 'keep tests with their code')",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help=f"Write intermediate artifacts to {config.DEBUG_DIR_NAME}/<hash>/",
    ),
    max_retries: int = typer.Option(
        config.DEFAULT_MAX_RETRIES,
        "--max-retries",
        help="Retries when generated patches fail validation",
        min=0,
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        "-p",
        help="LLM provider (defaults to the configured one)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        help="Model name (defaults to the configured one)",
    ),
) -> None:
    """Split a commit into atomic commits."""
    if strategy not in ("filter", "content"):
        typer.echo(f"Invalid strategy: {strategy}", err=True)
        typer.echo("Valid strategies: filter, content", err=True)
        raise typer.Exit(1)

    try:
        repo_root = get_repo_root()
        commit = get_commit_info(ref, with_diff=True, cwd=repo_root)
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Commit: {commit.short_hash} - {commit.message[:50]}", err=True)
    typer.echo(
        f"Files: {len(commit.files)}, Lines: +{commit.insertions}/-{commit.deletions}", err=True
    )

    llm = resolve_provider(provider, model)
    debug_dir = repo_root / config.DEBUG_DIR_NAME / commit.short_hash if debug else None

    try:
        outcome = plan_split(
            commit,
            llm,
            mode=mode,
            instruction=instruction,
            max_retries=max_retries,
            debug_dir=debug_dir,
            progress=echo_progress,
            strategy=strategy,
            read_base=base_reader(commit, cwd=repo_root),
        )
    except LLMError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except PlanGenerationError as e:
        typer.echo(f"Failed to generate a split plan: {e}", err=True)
        raise typer.Exit(1)
    except PatchValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        for error in e.errors:
            typer.echo(f"  - {error}", err=True)
        raise typer.Exit(1)

    print_warnings(outcome.warnings)

    if outcome.already_atomic:
        typer.echo("This commit is already atomic, nothing to split.")
        raise typer.Exit(0)

    print_split_plan(outcome.plan)

    if dry_run:
        typer.echo("")
        typer.echo("Dry run: no changes made.")
        raise typer.Exit(0)

    if not yes:
        typer.echo("")
        if not typer.confirm(f"Replace {commit.short_hash} with {len(outcome.plan.splits)} commits?"):
            typer.echo("Aborted.")
            raise typer.Exit(0)

    try:
        result = execute_split(commit, outcome.plan, cwd=repo_root, progress=echo_progress)
    except DirtyWorkingTreeError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo("Commit or stash your changes first.", err=True)
        raise typer.Exit(1)
    except SplitExecutionError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.result.created:
            typer.echo(f"Commits created before the failure: {', '.join(e.result.created)}", err=True)
        if e.result.patch_dir:
            typer.echo(f"Patches kept for manual recovery in {e.result.patch_dir}", err=True)
        raise typer.Exit(1)
    except (SplitError, GitError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("")
    typer.echo(f"✓ Split into {len(result.created)} commits")
    typer.echo("")
    typer.echo("New commits:")
    for line in result.log.splitlines():
        typer.echo(f"  {line}")

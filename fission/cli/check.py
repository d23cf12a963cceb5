"""CLI command for checking commit atomicity."""

import typer

from fission import config
from fission.check import analyze_with_llm, check_commit_atomicity
from fission.git import GitError, get_commit_info, get_repo_root, get_unpushed_commits
from fission.llm import LLMError
from fission.cli.utils import print_report, resolve_provider


def check_command(
    number: int = typer.Option(
        None,
        "--number",
        "-n",
        help="Check the last N unpushed commits",
        min=1,
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Use stricter thresholds",
    ),
    llm: bool = typer.Option(
        False,
        "--llm",
        help="Ask the LLM for a semantic opinion",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show suggestions and files for every commit",
    ),
    provider: str = typer.Option(
        None,
        "--provider",
        "-p",
        help="LLM provider for --llm (defaults to the configured one)",
    ),
    model: str = typer.Option(
        None,
        "--model",
        help="Model for --llm (defaults to the configured one)",
    ),
) -> None:
    """Check whether unpushed commits are atomic.

    Exits with status 1 if any checked commit is not atomic.
    """
    try:
        repo_root = get_repo_root()
        commits = get_unpushed_commits(number, cwd=repo_root)
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not commits:
        typer.echo("✓ No unpushed commits to check")
        raise typer.Exit(0)

    oracle = resolve_provider(provider, model) if llm else None
    mode = f"LLM ({oracle.model})" if oracle else "heuristic"
    typer.echo(f"Checking {len(commits)} unpushed commit(s)... [{mode}]")

    all_atomic = True
    total_score = 0.0
    for commit in reversed(commits):
        warnings = []
        analysis = None
        if oracle is not None:
            try:
                with_diff = get_commit_info(
                    commit.hash,
                    with_diff=True,
                    cwd=repo_root,
                    max_diff_chars=config.CHECK_DIFF_CHARS,
                    truncate=True,
                )
                analysis = analyze_with_llm(oracle, with_diff)
            except (LLMError, GitError) as e:
                warnings.append(f"LLM analysis failed: {e}")

        report = check_commit_atomicity(commit, strict=strict, llm_analysis=analysis)
        report.warnings.extend(warnings)
        print_report(report, verbose=verbose)

        all_atomic = all_atomic and report.is_atomic
        total_score += report.score

    average = total_score / len(commits)
    typer.echo("")
    typer.echo("─" * 50)
    if all_atomic:
        typer.echo(f"✓ All {len(commits)} commits are atomic! (avg score: {average:.0f}/100)")
        raise typer.Exit(0)

    typer.echo(f"✗ Some commits are not atomic (avg score: {average:.0f}/100)")
    typer.echo("")
    typer.echo("Tip: Use 'fission split HEAD' to split the last commit.")
    raise typer.Exit(1)

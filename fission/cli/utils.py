"""Shared utility functions for CLI commands."""

from pathlib import Path
from typing import Callable, Optional

import typer

from fission import config
from fission.check.models import AtomicityReport
from fission.config import LLMProvider
from fission.diff.models import FileDiff
from fission.git import CommitInfo, get_file_at_ref
from fission.llm import BaseLLMProvider, get_provider
from fission.split.models import SplitPlan


def echo_progress(message: str) -> None:
    """Progress callback for library code: status lines go to stderr."""
    typer.echo(message, err=True)


def resolve_provider(provider: Optional[str], model: Optional[str]) -> BaseLLMProvider:
    """Load the global configuration and build the requested provider.

    Args:
        provider: Provider name from the command line, or None for the active one.
        model: Model name from the command line, or None for the default.

    Returns:
        A provider instance.

    Raises:
        typer.Exit: If the provider name is not valid.
    """
    config.load_config()
    if provider is None:
        return get_provider(model=model)

    try:
        llm_provider = LLMProvider(provider.lower())
    except ValueError:
        valid = ", ".join(p.value for p in LLMProvider)
        typer.echo(f"Invalid provider: {provider}", err=True)
        typer.echo(f"Valid providers: {valid}", err=True)
        raise typer.Exit(1)
    if model is None and llm_provider == config.ACTIVE_PROVIDER:
        model = config.ACTIVE_MODEL
    if model is None:
        model = config.AVAILABLE_MODELS[llm_provider][0]
    return get_provider(llm_provider, model)


def base_reader(commit: CommitInfo, cwd: Optional[Path] = None) -> Callable[[FileDiff], str]:
    """Return a reader for a file's content at the commit's parent."""

    def read_base(file_diff: FileDiff) -> str:
        return get_file_at_ref(f"{commit.hash}~1", file_diff.old_path or file_diff.file_path, cwd=cwd)

    return read_base


def print_split_plan(plan: SplitPlan, preview_chars: int = config.PATCH_PREVIEW_CHARS) -> None:
    """Print a split plan with a preview of each patch."""
    typer.echo("")
    typer.echo(f"Split plan: {len(plan.splits)} commits")
    if plan.reasoning:
        typer.echo(f"Reasoning: {plan.reasoning}")
    for i, split in enumerate(plan.splits, 1):
        typer.echo("")
        typer.echo(f"  {i}. {split.message}")
        if split.description:
            typer.echo(f"     {split.description}")
        preview = split.diff[:preview_chars]
        if len(split.diff) > preview_chars:
            preview += "\n... (truncated)"
        for line in preview.splitlines():
            typer.echo(f"     {line}")


def print_warnings(warnings: list[str]) -> None:
    """Print warnings to stderr."""
    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)


def print_report(report: AtomicityReport, verbose: bool = False) -> None:
    """Print one commit's atomicity report."""
    status = typer.style("ATOMIC", fg=typer.colors.GREEN) if report.is_atomic else typer.style(
        "NOT ATOMIC", fg=typer.colors.RED
    )
    message = report.message[:60] + ("..." if len(report.message) > 60 else "")

    typer.echo("")
    typer.echo(f"{report.short_hash} {status} (score: {report.score:.0f}/100)")
    typer.echo(f"  {message}")
    typer.echo(f"  Files: {len(report.files)}, Lines: +{report.insertions}/-{report.deletions}")

    if report.llm_analysis is not None:
        analysis = report.llm_analysis
        typer.echo(f"  LLM: {analysis.confidence * 100:.0f}% confident")
        if analysis.reasoning:
            typer.echo(f"  {analysis.reasoning}")

    if report.issues:
        typer.echo("  Issues:")
        for issue in report.issues:
            typer.echo(f"    - {issue}")

    if report.warnings:
        typer.echo("  Warnings:")
        for warning in report.warnings:
            typer.echo(f"    - {warning}")

    if report.suggestions and (verbose or not report.is_atomic):
        typer.echo("  Suggestions:")
        for suggestion in report.suggestions:
            typer.echo(f"    - {suggestion}")

    if verbose and report.files:
        typer.echo("  Files changed:")
        for path in report.files[:10]:
            typer.echo(f"    - {path}")
        if len(report.files) > 10:
            typer.echo(f"    ... and {len(report.files) - 10} more")

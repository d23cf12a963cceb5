"""Root callback: version flag and help when no command is given."""

import typer

from fission import __version__


def main_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the fission version and exit",
    ),
) -> None:
    """Split commits into atomic commits and check commit atomicity."""
    if version:
        typer.echo(f"fission {__version__}")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)

"""CLI entry point for fission.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from fission.cli.check import check_command
from fission.cli.config import config_app
from fission.cli.main import main_command
from fission.cli.split import split_command

# Main application
app = typer.Typer(
    name="fission",
    help="fission: split git commits into atomic commits",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("split")(split_command)
app.command("check")(check_command)

# Set the main callback for default behavior (includes --version flag)
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "config_app",
    "check_command",
    "main_command",
    "split_command",
]

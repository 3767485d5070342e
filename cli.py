#!/usr/bin/env python3
"""
PCE Client CLI.

Command-line client for the PCE REST API.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                                          # Show help

    # Label groups
    python cli.py label-groups list                               # Draft label groups
    python cli.py label-groups list --status active -f name=web   # Filtered, active policy
    python cli.py label-groups expand <href>                      # Labels behind a group

    # System info
    python cli.py system config                                   # Show configuration
    python cli.py system version                                  # Show version

Options:
    --verbose, -v     Trace every HTTP request, poll and backoff
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from pceclient.cli.commands import label_groups_app, system_app
from pceclient.core.config import validate_project_root
from pceclient.core.logging import setup_logging

console = Console()


# Create main app
app = typer.Typer(
    name="cli",
    help="PCE Client CLI - Label groups and configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(label_groups_app, name="label-groups")
app.add_typer(system_app, name="system")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Trace every HTTP request, poll and backoff (DEBUG level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    PCE Client CLI.

    Lists and expands label groups on a PCE.
    Built with Typer for type-safe commands and Rich for formatted output.
    """
    validate_project_root()

    ctx.obj = {"verbose": verbose}

    # Log lines share stdout with command output; INFO and below only with -v/-d
    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="DEBUG", format_type="console")
    else:
        setup_logging(level="WARNING", format_type="console")


if __name__ == "__main__":
    app()

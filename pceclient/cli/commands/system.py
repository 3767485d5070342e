"""
System Commands.

Commands for version and configuration information.
"""

import typer
from rich.console import Console
from rich.tree import Tree

app = typer.Typer(help="System information commands")
console = Console()


@app.command()
def config() -> None:
    """
    Display configuration settings.

    Shows the PCE connection settings and runtime toggles. Credentials are never shown.
    """
    try:
        from pceclient.core.config import get_app_config, get_runtime_toggles

        app_config = get_app_config()
        toggles = get_runtime_toggles()

    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    _display_config_section("pce", app_config.pce.model_dump())
    console.print()
    _display_config_section("toggles", toggles.model_dump())


def _display_config_section(name: str, data: dict) -> None:
    """Display a configuration section as a tree."""
    tree = Tree(f"[bold cyan]{name}[/bold cyan]")

    def add_items(parent: Tree, items: dict) -> None:
        for key, value in items.items():
            if isinstance(value, dict):
                branch = parent.add(f"[cyan]{key}[/cyan]")
                add_items(branch, value)
            else:
                parent.add(f"[cyan]{key}[/cyan]: {value}")

    add_items(tree, data)
    console.print(tree)


@app.command()
def version() -> None:
    """
    Display version information.
    """
    from pceclient import __version__

    console.print(f"[bold]{__version__}[/bold]")

"""
Label Group Commands.

Commands for listing and expanding label groups.
"""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from pceclient.api.client import PCEClient
from pceclient.core.exceptions import ApplicationError
from pceclient.services.label_group import LabelGroupService

app = typer.Typer(help="Label group commands")
console = Console()


def _parse_filters(filters: list[str]) -> dict[str, str]:
    """Turn repeated key=value options into query parameters."""
    query: dict[str, str] = {}
    for item in filters:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Filter must be key=value, got {item!r}")
        query[key] = value
    return query


def _build_client(ctx: typer.Context) -> PCEClient:
    """Create a client from project configuration, honoring the global --verbose flag."""
    kwargs = {}
    if ctx.obj and ctx.obj.get("verbose"):
        kwargs["verbose"] = True
    return PCEClient.from_config(**kwargs)


@app.command("list")
def list_groups(
    ctx: typer.Context,
    status: str = typer.Option("draft", "--status", "-s", help="Policy version: draft or active"),
    filters: list[str] = typer.Option([], "--filter", "-f", help="Query filter as key=value (repeatable)"),
    use_async: bool = typer.Option(False, "--async", help="Fetch through the async job protocol"),
) -> None:
    """
    List label groups of a policy version.

    Examples:
        cli.py label-groups list
        cli.py label-groups list --status active -f name=web
        cli.py label-groups list --async
    """
    query = _parse_filters(filters)
    asyncio.run(_list(ctx, status, query, use_async))


async def _list(ctx: typer.Context, status: str, query: dict[str, str], use_async: bool) -> None:
    """Async implementation of list command."""
    try:
        async with _build_client(ctx) as client:
            service = LabelGroupService(client)
            await service.get_label_groups(status, query=query, async_=use_async)
    except ApplicationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except (RuntimeError, ValueError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Label Groups ({status.lower()})", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Key")
    table.add_column("Labels", justify="right")
    table.add_column("Subgroups", justify="right")
    table.add_column("Href", style="dim")

    for group in service.label_groups:
        table.add_row(
            group.name or "",
            group.key or "",
            str(len(group.labels or [])),
            str(len(group.sub_groups or [])),
            group.href or "",
        )
    console.print(table)


@app.command()
def expand(
    ctx: typer.Context,
    href: str = typer.Argument(..., help="Href of the label group to expand"),
    status: str = typer.Option("draft", "--status", "-s", help="Policy version: draft or active"),
) -> None:
    """
    Expand a label group into every label it covers, including nested subgroups.

    Examples:
        cli.py label-groups expand /orgs/1/sec_policy/draft/label_groups/7
    """
    asyncio.run(_expand(ctx, href, status))


async def _expand(ctx: typer.Context, href: str, status: str) -> None:
    """Async implementation of expand command."""
    try:
        async with _build_client(ctx) as client:
            service = LabelGroupService(client)
            await service.get_label_groups(status)
    except ApplicationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except (RuntimeError, ValueError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    if href not in service.table:
        console.print(f"[yellow]Label group not found: {href}[/yellow]")

    for label_href in sorted(service.expand_label_group(href)):
        console.print(label_href)

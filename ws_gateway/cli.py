"""
WebSocket registry CLI.

Operational commands over the configured store:

    ws-registry cleanup --max-age 60
    ws-registry stats
    ws-registry connections
    ws-registry broadcast "deploy finished" --type notice
    ws-registry send abc= "hello"
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from shared.config.logging import setup_logging
from shared.config.settings import get_settings
from shared.utils.exceptions import WebSocketError
from ws_gateway.components.core.dependencies import open_manager
from ws_gateway.connection_manager import ConnectionManager

app = typer.Typer(
    name="ws-registry",
    help="WebSocket connection registry CLI",
    add_completion=False,
)
console = Console()


def _run(operation: Callable[[ConnectionManager], Awaitable[Any]]) -> Any:
    """Open a manager from settings, run one operation and close it."""
    settings = get_settings()
    setup_logging(settings)

    async def _main() -> Any:
        async with open_manager(settings) as manager:
            return await operation(manager)

    try:
        return asyncio.run(_main())
    except WebSocketError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)


def _outbound(message: str, message_type: Optional[str]) -> dict[str, Any]:
    return {"message": message, "type": message_type}


def _print_results(title: str, results: dict[str, bool]) -> None:
    table = Table(title=title)
    table.add_column("Connection", style="cyan")
    table.add_column("Delivered")

    for connection_id, ok in results.items():
        table.add_row(connection_id, "[green]yes[/green]" if ok else "[red]no[/red]")

    console.print(table)


# =============================================================================
# Maintenance
# =============================================================================


@app.command()
def cleanup(
    max_age: Optional[int] = typer.Option(
        None, "--max-age", "-m", help="Maximum age in minutes (defaults to WS_STALE_AFTER_MINUTES)"
    ),
):
    """Remove stale connections."""
    removed = _run(lambda manager: manager.cleanup(max_age))
    console.print(f"[green]✓ Cleaned up {removed} stale connections[/green]")


# =============================================================================
# Inspection
# =============================================================================


@app.command()
def stats():
    """Show connection statistics."""
    data = _run(lambda manager: manager.get_stats())

    table = Table(title="WebSocket Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Total connections", str(data["total_connections"]))
    table.add_row("Total channels", str(data["total_channels"]))
    for channel, count in sorted(data["per_channel_member_count"].items()):
        table.add_row(f"  {channel}", str(count))

    console.print(table)


@app.command()
def connections():
    """List open connections."""
    ids = _run(lambda manager: manager.get_all_connections())

    if not ids:
        console.print("[yellow]No open connections[/yellow]")
        return

    table = Table(title=f"Connections ({len(ids)})")
    table.add_column("Connection", style="cyan")
    for connection_id in ids:
        table.add_row(connection_id)

    console.print(table)


# =============================================================================
# Delivery
# =============================================================================


@app.command()
def broadcast(
    message: str = typer.Argument(..., help="Message text"),
    message_type: Optional[str] = typer.Option(None, "--type", "-t", help="Message type"),
):
    """Send a message to every open connection."""
    results = _run(lambda manager: manager.broadcast(_outbound(message, message_type)))

    if not results:
        console.print("[yellow]No open connections[/yellow]")
        return

    _print_results("Broadcast", results)
    delivered = sum(1 for ok in results.values() if ok)
    console.print(f"[green]✓ Delivered to {delivered}/{len(results)} connections[/green]")


@app.command()
def send(
    connection_id: str = typer.Argument(..., help="Target connection id"),
    message: str = typer.Argument(..., help="Message text"),
    message_type: Optional[str] = typer.Option(None, "--type", "-t", help="Message type"),
):
    """Send a message to one connection."""
    ok = _run(
        lambda manager: manager.send_to_connection(
            connection_id, _outbound(message, message_type)
        )
    )

    if ok:
        console.print(f"[green]✓ Message sent to {connection_id}[/green]")
    else:
        console.print(f"[red]✗ Failed to send message to {connection_id}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

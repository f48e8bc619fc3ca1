"""hive down — stop Docker infrastructure."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import WorkspaceNotFoundError
from hive.utils import docker
from hive.utils.monorepo import get_apps, get_workspace

console = Console()


def down_cmd(
    workspace: Optional[str] = typer.Argument(None, help="App to stop (omit for all)."),
    volumes: bool = typer.Option(False, "--volumes", help="Also remove named volumes (deletes data)."),
) -> None:
    """Stop Docker infrastructure."""
    from hive.main import banner

    banner()

    _, _, workspaces = common.load_workspaces(console)

    if workspace:
        try:
            candidates = [get_workspace(workspaces, workspace)]
        except WorkspaceNotFoundError as exc:
            common.fail(exc, console)
    else:
        candidates = get_apps(workspaces)

    targets = [ws for ws in candidates if docker.has_compose_file(ws.path)]
    if not targets:
        console.print("  [dim]No Docker infrastructure to stop.[/dim]\n")
        return

    console.print("  [bold]→[/bold] Stopping infrastructure...\n")

    failed = False
    for ws in targets:
        if not volumes and not docker.running_services(ws.path):
            console.print(f"    [yellow]○[/yellow] {ws.name:<20} [dim]already stopped[/dim]")
            continue
        if docker.compose_down(ws.path, volumes=volumes):
            suffix = " [dim](volumes removed)[/dim]" if volumes else ""
            console.print(f"    [green]✓[/green] {ws.name:<20} stopped{suffix}")
        else:
            failed = True
            console.print(f"    [red]✗[/red] {ws.name:<20} docker compose down failed")

    console.print()
    if failed:
        raise typer.Exit(1)

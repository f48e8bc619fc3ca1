"""hive status — dashboard showing workspace and container status."""

from __future__ import annotations

import os

import typer
from rich.console import Console
from rich.table import Table

from hive.commands import common
from hive.utils import docker
from hive.utils.monorepo import detect_framework

console = Console()


def status_cmd() -> None:
    """Show workspace and container status dashboard."""
    from hive.main import banner

    banner()

    root, _, workspaces = common.load_workspaces(console)

    if not workspaces:
        console.print("  [yellow]No workspaces found in this monorepo[/yellow]")
        console.print("  [dim]Create one with: hive make:app <name>[/dim]\n")
        raise typer.Exit(1)

    # -- Workspaces table ---------------------------------------------------
    ws_table = Table(
        title="WORKSPACES",
        title_style="bold",
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        padding=(0, 2),
        expand=False,
    )
    ws_table.add_column("Workspace", style="bold", min_width=16)
    ws_table.add_column("Type", min_width=8)
    ws_table.add_column("Framework", min_width=10)
    ws_table.add_column("Path")

    for ws in workspaces:
        kind = "[cyan]app[/cyan]" if ws.is_app else "[magenta]package[/magenta]"
        framework = detect_framework(ws) or "[dim]—[/dim]"
        ws_table.add_row(ws.name, kind, framework, os.path.relpath(ws.path, root))

    console.print()
    console.print(ws_table)
    console.print()

    # -- Services table -----------------------------------------------------
    stacks = [ws for ws in workspaces if ws.is_app and docker.has_compose_file(ws.path)]
    if not stacks:
        console.print("  [dim]No Docker infrastructure configured.[/dim]\n")
        return

    docker_up = docker.is_running()

    svc_table = Table(
        title="SERVICES",
        title_style="bold",
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        padding=(0, 2),
        expand=False,
    )
    svc_table.add_column("App", style="bold", min_width=16)
    svc_table.add_column("Containers", min_width=20)
    svc_table.add_column("Status", min_width=12)

    for ws in stacks:
        running = docker.running_services(ws.path) if docker_up else []
        if running:
            svc_table.add_row(ws.name, ", ".join(running), "[green]● running[/green]")
        else:
            svc_table.add_row(ws.name, "[dim]—[/dim]", "[dim]○ stopped[/dim]")

    console.print(svc_table)
    if not docker_up:
        console.print("\n  [yellow]○[/yellow] [dim]Docker daemon is not running[/dim]")
    console.print()

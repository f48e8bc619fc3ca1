"""hive up — start the Docker infrastructure of one or all apps."""

from __future__ import annotations

from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel

from hive.commands import common
from hive.errors import WorkspaceNotFoundError
from hive.utils import docker
from hive.utils.compose import load_compose
from hive.utils.monorepo import Workspace, get_apps, get_workspace

console = Console()


def up_cmd(
    workspace: Optional[str] = typer.Argument(None, help="App to start (omit for all)."),
    no_wait: bool = typer.Option(False, "--no-wait", help="Do not wait for services to become ready."),
) -> None:
    """Start Docker infrastructure (all apps or a specific one)."""
    from hive.main import banner, state

    banner()

    _, settings, workspaces = common.load_workspaces(console)

    if workspace:
        try:
            targets = [get_workspace(workspaces, workspace)]
        except WorkspaceNotFoundError as exc:
            common.fail(exc, console)
        if not docker.has_compose_file(targets[0].path):
            console.print(
                f"\n  [yellow]○[/yellow] [bold]{targets[0].name}[/bold] has no {docker.COMPOSE_FILENAME} "
                f"[dim](add one with: hive infra:add <category> -w {targets[0].name})[/dim]\n"
            )
            raise typer.Exit(1)
    else:
        targets = [ws for ws in get_apps(workspaces) if docker.has_compose_file(ws.path)]

    if not targets:
        console.print("  [yellow]No apps with Docker infrastructure found.[/yellow]\n")
        raise typer.Exit(1)

    if not docker.is_available():
        console.print("  [red]✗[/red] Docker is not available (installed, running, with compose).")
        docker.show_install_guidance(console)
        raise typer.Exit(1)

    # -- Start stacks ------------------------------------------------------
    console.print("  [bold]→[/bold] Starting infrastructure...\n")

    started: list[Workspace] = []
    failed = False
    for ws in targets:
        if docker.compose_up(ws.path):
            console.print(f"    {ws.name:<20} [cyan]●[/cyan] started")
            started.append(ws)
        else:
            failed = True
            console.print(f"    {ws.name:<20} [red]✗[/red] failed to start")
            _show_error_panel(ws)

    # -- Wait for services ------------------------------------------------
    if started and not no_wait:
        console.print()
        health = settings.health_check
        for ws in started:
            for service in _services(ws):
                ready = docker.wait_for_service(
                    ws.path, service, max_attempts=health.max_attempts, interval=health.interval
                )
                label = f"{ws.name}/{service}"
                if ready:
                    console.print(f"    {label:<30} [green]✓[/green] ready")
                else:
                    failed = True
                    console.print(f"    {label:<30} [yellow]●[/yellow] not ready [dim](check docker compose logs)[/dim]")

    console.print()
    if failed:
        raise typer.Exit(1)
    if not state.quiet:
        console.print("  All services running. Stop them with [bold cyan]hive down[/bold cyan].\n")


def _services(ws: Workspace) -> list[str]:
    try:
        data = load_compose(ws.path)
    except (OSError, ValueError, yaml.YAMLError):
        return []
    services = data.get("services") or {}
    return list(services) if isinstance(services, dict) else []


def _show_error_panel(ws: Workspace) -> None:
    """Show an actionable error panel for a stack that failed to start."""
    lines = [
        "docker compose up exited with an error.\n",
        "A port may already be in use, or an image could not be pulled.",
        f"Try: [bold]cd {ws.path} && docker compose up[/bold] to see the full output",
        " or: run [bold]hive --verbose up[/bold] for more detail.",
    ]
    panel = Panel(
        "\n".join(lines),
        title=f"{ws.name} error",
        border_style="red",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)

"""hive infra:add — provision one more backend for an existing app."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hive.commands import common
from hive.errors import HiveError
from hive.provisioning import CATEGORIES, ConnectionConfig, Provisioner
from hive.provisioning.backends import CATEGORY_BACKENDS
from hive.utils.envfile import update_env
from hive.utils.monorepo import Workspace, get_apps, get_workspace

console = Console()


def infra_add_cmd(
    category: str = typer.Argument(..., help=f"One of: {', '.join(CATEGORIES)}."),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="App to provision (default: current)."),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Backend key, e.g. mysql or redis."),
    use_docker: Optional[bool] = typer.Option(
        None, "--docker/--no-docker", help="Force or skip Docker (default: ask)."
    ),
) -> None:
    """Provision a backend for an app and update its .env."""
    from hive.main import banner, make_prompts, state

    banner()
    prompts = make_prompts()

    if category not in CATEGORIES:
        prompts.error(f"Unknown category '{category}'")
        console.print(f"  [dim]Available: {', '.join(CATEGORIES)}[/dim]\n")
        raise typer.Exit(1)
    if backend and backend not in CATEGORY_BACKENDS[category]:
        prompts.error(f"'{backend}' is not a {category} backend")
        console.print(f"  [dim]Available: {', '.join(CATEGORY_BACKENDS[category])}[/dim]\n")
        raise typer.Exit(1)

    _, settings, workspaces = common.load_workspaces(console)
    try:
        app = _resolve_app(prompts, workspaces, workspace)
    except HiveError as exc:
        common.fail(exc, console)

    provisioner = Provisioner(prompts, app.name, app.path, prefer_docker=use_docker, settings=settings)
    try:
        config = provisioner.provision(category, backend)
    except HiveError as exc:
        common.fail(exc, console, title="infra:add failed")
    except KeyboardInterrupt:
        prompts.warning("Cancelled")
        raise typer.Exit(130)

    env = config.to_env()
    changed = update_env(app.path / ".env", env) if env else []

    if not state.quiet:
        _print_config(app, config, changed)
    prompts.success(f"{config.backend.label} configured for {app.name}")
    if config.using_docker:
        console.print(f"  [dim]Start it later with:[/dim] [cyan]hive up {app.name}[/cyan]\n")


def _resolve_app(prompts, workspaces: list[Workspace], name: str | None) -> Workspace:
    """The named app, the app containing the cwd, or one picked from a list."""
    apps = get_apps(workspaces)
    if name:
        ws = get_workspace(workspaces, name)
        if not ws.is_app:
            raise HiveError(f"'{ws.name}' is a package; infrastructure belongs to apps")
        return ws

    cwd = Path.cwd().resolve()
    for ws in apps:
        path = ws.path.resolve()
        if cwd == path or path in cwd.parents:
            return ws

    if not apps:
        raise HiveError("No apps found in this monorepo", ["Create one with: hive make:app <name>"])
    if len(apps) == 1:
        return apps[0]
    chosen = prompts.select("Which app?", {ws.name: ws.name for ws in apps}, default=apps[0].name)
    return get_workspace(apps, chosen)


def _print_config(app: Workspace, config: ConnectionConfig, changed: list[str]) -> None:
    secrets = {f.env for f in config.backend.fields if f.secret and f.env}
    table = Table(
        title=f"{config.backend.label.upper()} → {app.name}/.env",
        title_style="bold",
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        padding=(0, 2),
        expand=False,
    )
    table.add_column("Variable", style="bold")
    table.add_column("Value")
    table.add_column("")
    for key, value in config.to_env().items():
        shown = "********" if key in secrets and value else value
        marker = "[green]updated[/green]" if key in changed else "[dim]unchanged[/dim]"
        table.add_row(key, shown, marker)
    console.print()
    console.print(table)
    console.print()

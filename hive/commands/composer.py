"""hive require / update / composer — Composer inside one workspace."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError, WorkspaceNotFoundError
from hive.utils import process
from hive.utils.monorepo import Workspace, get_workspace
from hive.utils.prompts import Prompts

console = Console()


def select_workspace(prompts: Prompts, workspaces: list[Workspace], name: Optional[str]) -> Workspace:
    """Resolve the workspace Composer should run in.

    Only workspaces with a composer.json qualify. A single candidate is used
    as-is; several are offered interactively or must be named with
    ``--workspace``.
    """
    if name:
        try:
            target = get_workspace(workspaces, name)
        except WorkspaceNotFoundError as exc:
            common.fail(exc, prompts.console)
        if not target.has_composer:
            common.fail(HiveError(f"Workspace '{target.name}' has no composer.json"), prompts.console)
        return target

    candidates = [ws for ws in workspaces if ws.has_composer]
    if not candidates:
        common.fail(
            HiveError("No workspaces with a composer.json found", ["Create one with: hive make:package <name>"]),
            prompts.console,
        )
    if len(candidates) == 1:
        return candidates[0]

    if not prompts.interactive:
        common.fail(
            HiveError(
                "Multiple workspaces found; choose one with --workspace",
                [f"--workspace {candidates[0].name}"],
            ),
            prompts.console,
        )

    options = {ws.name: f"{ws.name} [dim]({ws.type})[/dim]" for ws in candidates}
    return get_workspace(candidates, prompts.select("Select workspace", options, default=candidates[0].name))


def _composer(args: list[str], workspace: Optional[str], headline: str = "") -> int:
    from hive.main import banner, make_prompts

    banner()
    if headline:
        console.print(f"  [bold]→[/bold] {headline}")
    prompts = make_prompts()
    _, _, workspaces = common.load_workspaces(prompts.console)
    target = select_workspace(prompts, workspaces, workspace)

    prompts.info(f"Workspace: [cyan]{target.name}[/cyan]")
    return process.run_streaming(["composer", *args], target.path)


def require_cmd(
    package: str = typer.Argument(..., help="Package to add, e.g. guzzlehttp/guzzle or monolog/monolog:^3.0."),
    dev: bool = typer.Option(False, "--dev", "-d", help="Add it as a development dependency."),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Workspace to add it to."),
) -> None:
    """Add a Composer package to a workspace."""
    args = ["require", package] + (["--dev"] if dev else [])
    kind = " [dim](dev)[/dim]" if dev else ""

    exit_code = _composer(args, workspace, f"Adding package: [cyan]{package}[/cyan]{kind}")

    if exit_code != 0:
        console.print(f"\n  [red]✗[/red] Failed to add {package}\n")
        raise typer.Exit(exit_code)
    console.print(f"\n  [green]✓[/green] Package '{package}' added successfully\n")


def update_cmd(
    package: Optional[str] = typer.Argument(None, help="Only update this package."),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Workspace to update."),
) -> None:
    """Update Composer dependencies in a workspace."""
    what = f"package: [cyan]{package}[/cyan]" if package else "all dependencies"
    exit_code = _composer(["update", package] if package else ["update"], workspace, f"Updating {what}")

    if exit_code != 0:
        console.print("\n  [red]✗[/red] Update failed\n")
        raise typer.Exit(exit_code)
    done = f"Package '{package}' updated" if package else "Dependencies updated"
    console.print(f"\n  [green]✓[/green] {done} successfully\n")


def composer_cmd(
    args: Optional[List[str]] = typer.Argument(None, help="Arguments passed to composer unchanged."),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Workspace to run in."),
) -> None:
    """Run any Composer command in a workspace."""
    args = list(args or [])
    if not args:
        common.fail(HiveError("No Composer command given", ["hive composer show --workspace api"]), console)

    exit_code = _composer(args, workspace)
    if exit_code != 0:
        raise typer.Exit(exit_code)

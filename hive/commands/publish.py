"""hive publish — publish a package through its turbo ``publish`` task."""

from __future__ import annotations

import time
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hive.commands import common
from hive.errors import HiveError, WorkspaceNotFoundError
from hive.utils.monorepo import Workspace, get_packages, get_workspace
from hive.utils.turbo import TurboOptions, run_turbo

console = Console()

PUBLISH_TASK = "publish"
TAG_ENV = "HIVE_PUBLISH_TAG"


def publish_cmd(
    workspace: Optional[str] = typer.Argument(None, help="Package to publish."),
    tag: str = typer.Option("latest", "--tag", help="Distribution tag."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be published."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
    summary: bool = typer.Option(False, "--summary", help="Print a summary table when done."),
) -> None:
    """Publish a package."""
    from hive.main import banner, make_prompts, state

    if not as_json:
        banner()
    prompts = make_prompts(machine_output=as_json)
    out = prompts.console

    root, _, workspaces = common.load_workspaces(out)
    packages = get_packages(workspaces)

    if not packages:
        common.fail(
            HiveError("No packages found in this monorepo", ["Create one with: hive make:package <name>"]),
            out,
            as_json=as_json,
        )

    target = _select_package(prompts, workspaces, packages, workspace, as_json)

    if prompts.interactive and not dry_run:
        if not prompts.confirm(f"Publish {target.package_name or target.name} with tag '{tag}'?", default=False):
            prompts.warning("Publish cancelled")
            raise typer.Exit(0)

    options = TurboOptions(filter=target.package_name or target.name, dry=dry_run)
    if not as_json and not state.quiet:
        mode = " [dim](dry run)[/dim]" if dry_run else ""
        console.print(f"  [bold]→[/bold] Publishing [cyan]{target.name}[/cyan] [dim]@{tag}[/dim]{mode}\n")

    started = time.monotonic()
    exit_code = run_turbo(root, PUBLISH_TASK, options, env={TAG_ENV: tag}, capture=as_json)
    duration = round(time.monotonic() - started, 2)
    success = exit_code == 0

    if as_json:
        common.emit_json({
            "success": success,
            "workspace": target.name,
            "package_name": target.package_name,
            "version": target.version,
            "tag": tag,
            "dry_run": dry_run,
            "duration": duration,
            "exit_code": exit_code,
        })
    elif success:
        if not state.quiet:
            console.print(f"\n  [green]✓[/green] Published {target.name} in {duration:.1f}s\n")
    else:
        console.print(f"\n  [red]✗[/red] Publish failed [dim](exit code {exit_code})[/dim]\n")

    if summary and not as_json:
        _print_summary(target, tag, dry_run, success, duration)

    if not success:
        raise typer.Exit(exit_code)


def _select_package(prompts, workspaces: list[Workspace], packages: list[Workspace], name, as_json: bool) -> Workspace:
    """Resolve which package to publish.

    A single package is chosen automatically; otherwise interactive runs are
    asked and non-interactive runs must name one.
    """
    if name:
        try:
            target = get_workspace(workspaces, name)
        except WorkspaceNotFoundError as exc:
            common.fail(exc, prompts.console, as_json=as_json)
        if not target.is_package:
            common.fail(
                HiveError(f"'{target.name}' is an app, only packages can be published"),
                prompts.console,
                as_json=as_json,
            )
        return target

    if len(packages) == 1:
        prompts.info(f"Using the only package: {packages[0].name}")
        return packages[0]

    if not prompts.interactive:
        common.fail(
            HiveError(
                "Multiple packages found; name the one to publish",
                [f"hive publish {packages[0].name}"],
            ),
            prompts.console,
            as_json=as_json,
        )

    options = {ws.name: f"{ws.name} [dim]{ws.package_name}[/dim]" for ws in packages}
    chosen = prompts.select("Which package do you want to publish?", options, default=packages[0].name)
    return get_workspace(packages, chosen)


def _print_summary(target: Workspace, tag: str, dry_run: bool, success: bool, duration: float) -> None:
    table = Table(
        title="PUBLISH SUMMARY",
        title_style="bold",
        show_header=False,
        border_style="dim",
        padding=(0, 2),
        expand=False,
    )
    table.add_column("Field", style="bold dim")
    table.add_column("Value")
    table.add_row("Package", target.package_name or target.name)
    table.add_row("Version", target.version or "[dim]—[/dim]")
    table.add_row("Tag", tag)
    table.add_row("Dry run", "yes" if dry_run else "no")
    table.add_row("Result", "[green]✓ published[/green]" if success else "[red]✗ failed[/red]")
    table.add_row("Duration", f"{duration:.1f}s")
    console.print(table)
    console.print()

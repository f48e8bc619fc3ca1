"""hive deploy — run lint, typecheck, test and build in order, stopping at the first failure."""

from __future__ import annotations

import time
from typing import Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError, WorkspaceNotFoundError
from hive.utils.monorepo import get_apps, get_workspace, turbo_tasks
from hive.utils.turbo import TurboOptions, has_turbo, run_turbo

console = Console()

PIPELINE = ("lint", "typecheck", "test", "build")


def deploy_cmd(
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Only deploy this workspace."),
    skip_tests: bool = typer.Option(False, "--skip-tests", help="Skip the test step (not recommended)."),
    force: bool = typer.Option(False, "--force", help="Ignore cached results."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Run the full deployment pipeline."""
    from hive.main import banner, state

    out = Console(stderr=True) if as_json else console
    if not as_json:
        banner()

    root, _, workspaces = common.load_workspaces(out)

    target = None
    if workspace:
        try:
            target = get_workspace(workspaces, workspace)
        except WorkspaceNotFoundError as exc:
            common.fail(exc, out, as_json=as_json)

    if not has_turbo(root):
        missing = HiveError("Turborepo is not available in this monorepo", ["Install dependencies: pnpm install"])
        common.fail(missing, out, as_json=as_json, title="Turborepo not found")

    quiet = as_json or state.quiet
    if not quiet:
        scope = target.name if target else f"{len(get_apps(workspaces))} app(s)"
        console.print(f"  [bold]Deployment pipeline[/bold] [dim]({scope})[/dim]\n")
        if skip_tests:
            console.print("  [yellow]⚠[/yellow] Skipping tests - use with caution!\n")

    declared = turbo_tasks(root)
    options = TurboOptions(filter=(target.package_name or target.name) if target else None, force=force)
    steps = []
    started = time.monotonic()

    for number, task in enumerate(PIPELINE, 1):
        label = f"[{number}/{len(PIPELINE)}] {task}"
        if task == "test" and skip_tests:
            steps.append({"task": task, "status": "skipped", "reason": "--skip-tests"})
            continue
        # turbo rejects tasks turbo.json does not declare
        if declared and task not in declared:
            steps.append({"task": task, "status": "skipped", "reason": "not defined in turbo.json"})
            if not quiet:
                console.print(f"  [dim]{label} not defined in turbo.json, skipped[/dim]")
            continue

        if not quiet:
            console.print(f"  [bold]→[/bold] {label}")
        step_started = time.monotonic()
        exit_code = run_turbo(root, task, options, capture=as_json)
        steps.append({
            "task": task,
            "status": "success" if exit_code == 0 else "failed",
            "duration": round(time.monotonic() - step_started, 2),
            "exit_code": exit_code,
        })
        if exit_code != 0:
            break

    failed = next((step for step in steps if step["status"] == "failed"), None)
    duration = round(time.monotonic() - started, 2)

    if as_json:
        common.emit_json({
            "success": failed is None,
            "workspace": target.name if target else None,
            "steps": steps,
            "duration": duration,
        })
    elif failed:
        console.print(f"\n  [red]✗[/red] Deployment pipeline failed at {failed['task']}\n")
    elif not state.quiet:
        console.print(f"\n  [green]✓[/green] Deployment pipeline completed in {duration:.1f}s\n")

    if failed:
        raise typer.Exit(failed["exit_code"])

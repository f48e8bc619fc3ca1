"""Turborepo pass-throughs: build, dev, test, lint, install, run and the other turbo tasks."""

from __future__ import annotations

import time
from typing import Callable, Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError, WorkspaceNotFoundError
from hive.utils.monorepo import get_workspace, turbo_tasks
from hive.utils.turbo import TurboOptions, has_turbo, run_turbo

console = Console()


def _run_task(
    task: str,
    workspace: Optional[str],
    force: bool,
    no_cache: bool,
    parallel: bool,
    continue_on_error: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
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
        missing = HiveError(
            "Turborepo is not available in this monorepo",
            ["Install dependencies: pnpm install", "Or add turbo: pnpm add -Dw turbo"],
        )
        common.fail(missing, out, as_json=as_json, title="Turborepo not found")

    options = TurboOptions(
        filter=(target.package_name or target.name) if target else None,
        force=force,
        cache=not no_cache,
        parallel=parallel,
        continue_on_error=continue_on_error,
        dry="json" if dry_run and as_json else dry_run,
    )

    if not as_json and not state.quiet:
        scope = f" [dim]({target.name})[/dim]" if target else ""
        console.print(f"  [bold]→[/bold] Running [cyan]{task}[/cyan]{scope}\n")

    started = time.monotonic()
    exit_code = run_turbo(root, task, options, capture=as_json)
    duration = round(time.monotonic() - started, 2)

    if as_json:
        common.emit_json({
            "task": task,
            "status": "success" if exit_code == 0 else "failed",
            "workspace": target.name if target else None,
            "duration": duration,
            "exit_code": exit_code,
        })
    elif exit_code == 0:
        if not state.quiet:
            console.print(f"\n  [green]✓[/green] {task} finished in {duration:.1f}s\n")
    else:
        console.print(f"\n  [red]✗[/red] {task} failed [dim](exit code {exit_code})[/dim]\n")

    if exit_code != 0:
        raise typer.Exit(exit_code)


def _task_command(task: str, summary: str) -> Callable[..., None]:
    """Build a Typer command that delegates *task* to turbo."""

    def command(
        workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Only run in this workspace."),
        force: bool = typer.Option(False, "--force", help="Ignore cached results."),
        no_cache: bool = typer.Option(False, "--no-cache", help="Do not write to the cache."),
        parallel: bool = typer.Option(False, "--parallel", help="Run tasks in parallel, ignoring dependencies."),
        continue_on_error: bool = typer.Option(False, "--continue", help="Keep going after a failure."),
        dry_run: bool = typer.Option(False, "--dry-run", help="Show what would run without running it."),
        as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
    ) -> None:
        _run_task(task, workspace, force, no_cache, parallel, continue_on_error, dry_run, as_json)

    command.__doc__ = summary
    command.__name__ = task.replace(":", "_") + "_cmd"
    return command


build_cmd = _task_command("build", "Build workspaces.")
dev_cmd = _task_command("dev", "Start development servers.")
test_cmd = _task_command("test", "Run tests.")
lint_cmd = _task_command("lint", "Lint workspaces.")
format_cmd = _task_command("format", "Format code.")
typecheck_cmd = _task_command("typecheck", "Run static analysis.")
clean_cmd = _task_command("clean", "Clean build artifacts and caches.")
install_cmd = _task_command("composer:install", "Install Composer dependencies.")


def run_cmd(
    task: str = typer.Argument(..., help="Task name from turbo.json."),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Only run in this workspace."),
    force: bool = typer.Option(False, "--force", help="Ignore cached results."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not write to the cache."),
    parallel: bool = typer.Option(False, "--parallel", help="Run tasks in parallel, ignoring dependencies."),
    continue_on_error: bool = typer.Option(False, "--continue", help="Keep going after a failure."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would run without running it."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Run any task defined in turbo.json."""
    out = Console(stderr=True) if as_json else console
    root, _ = common.load_monorepo(out)
    known = turbo_tasks(root)
    if known and task not in known:
        unknown = HiveError(f"Unknown task '{task}'", [f"Available: {', '.join(known)}"])
        common.fail(unknown, out, as_json=as_json)
    _run_task(task, workspace, force, no_cache, parallel, continue_on_error, dry_run, as_json)

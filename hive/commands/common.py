"""Helpers shared by the hive commands."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable

import typer
from rich.console import Console

from hive.errors import HiveError, MonorepoNotFoundError, ScaffoldError, show_error
from hive.utils import docker, process
from hive.utils.config import HiveSettings, load_settings
from hive.utils.monorepo import Workspace, discover_workspaces, find_monorepo_root
from hive.utils.names import best_suggestion, suggest_names, validate_name
from hive.utils.preflight import run_preflight
from hive.utils.prompts import Prompts

console = Console()


def emit_json(data: Any) -> None:
    """Write machine-readable output to stdout, without Rich markup."""
    typer.echo(json.dumps(data, indent=2, default=str))


def load_monorepo(out: Console | None = None) -> tuple[Path, HiveSettings]:
    """Locate the monorepo root and its settings, or exit with an error panel."""
    try:
        root = find_monorepo_root()
    except MonorepoNotFoundError as exc:
        show_error(out or console, exc)
        raise typer.Exit(1)
    return root, load_settings(root)


def load_workspaces(out: Console | None = None) -> tuple[Path, HiveSettings, list[Workspace]]:
    root, settings = load_monorepo(out)
    return root, settings, discover_workspaces(root, settings.apps_dir)


# ---------------------------------------------------------------------------
# make:* helpers
# ---------------------------------------------------------------------------

def check_preflight(prompts: Prompts, target: Path, settings: HiveSettings, *, require_php: bool = True) -> None:
    """Run the preflight checks; print the first failure and exit."""
    for result in run_preflight(target, min_php_version=settings.min_php_version, require_php=require_php):
        if result.passed:
            if not prompts.quiet:
                prompts.console.print(f"    [green]✓[/green] {result.message}")
            continue
        fixes = [result.fix] if result.fix else []
        show_error(prompts.console, HiveError(result.message, fixes), title=f"{result.name} check failed")
        raise typer.Exit(1)


def resolve_name(prompts: Prompts, name: str | None, parent: Path, kind: str) -> str:
    """Validate *name* and make sure parent/name is free.

    Offers alternatives when the directory already exists. Exits when no
    usable name can be settled on.
    """
    if not name:
        name = prompts.text(f"{kind.title()} name", validate=validate_name)

    error = validate_name(name)
    if error:
        prompts.error(f"Invalid {kind} name '{name}': {error}")
        raise typer.Exit(1)

    if not (parent / name).exists():
        return name

    suggestions = suggest_names(name, kind, lambda candidate: not (parent / candidate).exists())
    prompts.error(f"{parent.name}/{name} already exists")
    if not suggestions:
        raise typer.Exit(1)

    best = best_suggestion(suggestions)
    if not prompts.interactive:
        prompts.console.print(f"  [dim]Try: {', '.join(suggestions)}[/dim]")
        raise typer.Exit(1)

    options = {s: s + (" (recommended)" if s == best else "") for s in suggestions}
    return prompts.select("Pick another name", options, default=best)


Step = tuple[str, Callable[[], None]]


def run_steps(prompts: Prompts, steps: list[Step]) -> None:
    """Run steps in order; the first failure raises ScaffoldError."""
    for label, action in steps:
        prompts.info(f"{label}...")
        try:
            action()
        except HiveError:
            raise
        except (OSError, subprocess.SubprocessError) as exc:
            raise ScaffoldError(f"{label} failed: {exc}") from exc
        prompts.success(label)


def run_commands(commands: list[str], cwd: Path, *, stream: bool = False) -> None:
    """Run shell commands in *cwd*, raising ScaffoldError on the first failure."""
    for command in commands:
        result = process.run_shell(command, cwd, stream=stream)
        if result.returncode != 0:
            detail = (result.stderr or "").strip().splitlines()[-5:]
            raise ScaffoldError(f"Command failed ({result.returncode}): {process.redact(command)}", detail)


def cleanup_failed(path: Path, prompts: Prompts) -> None:
    """Tear down whatever a failed make:* run left behind."""
    if not path.exists():
        return
    prompts.warning(f"Cleaning up {path.name}...")
    if docker.has_compose_file(path):
        docker.compose_down(path, volumes=True)
    shutil.rmtree(path, ignore_errors=True)


def show_next_steps(prompts: Prompts, title: str, created: Path, steps: list[str]) -> None:
    if prompts.quiet:
        return
    out = prompts.console
    out.print()
    out.print(f"  [bold green]{title}[/bold green] [dim]{created}[/dim]\n")
    out.print("  [bold]Next steps:[/bold]")
    for i, step in enumerate(steps, 1):
        out.print(f"    {i}. [cyan]{step}[/cyan]")
    out.print()


def fail(exc: HiveError, out: Console, *, as_json: bool = False, title: str = "Error") -> None:
    """Report *exc* as JSON or a panel, then exit 1."""
    if as_json:
        emit_json({"success": False, "error": exc.message, "suggestions": exc.suggestions})
    else:
        show_error(out, exc, title=title)
    raise typer.Exit(1)

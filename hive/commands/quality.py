"""hive mutate / refactor — Infection and Rector at the monorepo root."""

from __future__ import annotations

import shutil

import typer
from rich.console import Console

from hive.commands import common
from hive.utils import process

console = Console()

RECTOR_CACHE = ".rector.cache"


def _run_tool(args: list[str], title: str, passed: str, failed: str) -> None:
    from hive.main import banner, state

    banner()
    root, _ = common.load_monorepo()

    if not state.quiet:
        console.print(f"  [bold]→[/bold] {title}")
        console.print(f"    [dim]Running: {' '.join(args)}[/dim]\n")

    exit_code = process.run_streaming(args, root)

    if exit_code != 0:
        console.print(f"\n  [red]✗[/red] {failed}\n")
        raise typer.Exit(exit_code)
    if not state.quiet:
        console.print(f"\n  [green]✓[/green] {passed}\n")


def mutate_cmd(
    min_msi: int = typer.Option(80, "--min-msi", help="Minimum Mutation Score Indicator, in percent."),
    min_covered_msi: int = typer.Option(85, "--min-covered-msi", help="Minimum covered code MSI, in percent."),
    threads: int = typer.Option(4, "--threads", "-t", min=1, help="Number of Infection worker threads."),
    show_mutations: bool = typer.Option(False, "--show-mutations", help="Print every escaped mutant."),
) -> None:
    """Run Infection mutation testing."""
    args = [
        "vendor/bin/infection",
        f"--threads={threads}",
        f"--min-msi={min_msi}",
        f"--min-covered-msi={min_covered_msi}",
    ]
    if show_mutations:
        args.append("--show-mutations")

    _run_tool(
        args,
        f"Running mutation testing [dim](MSI ≥ {min_msi}%, covered ≥ {min_covered_msi}%)[/dim]",
        "Mutation testing passed",
        "Mutation testing failed - improve your tests!",
    )


def refactor_cmd(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the changes without applying them."),
    clear_cache: bool = typer.Option(False, "--clear-cache", help="Delete the Rector cache first."),
) -> None:
    """Run Rector for automated refactoring."""
    if clear_cache:
        root, _ = common.load_monorepo()
        cache = root / RECTOR_CACHE
        if cache.is_dir():
            shutil.rmtree(cache)
            console.print(f"  [dim]Cleared {RECTOR_CACHE}[/dim]")

    args = ["vendor/bin/rector", "process"] + (["--dry-run"] if dry_run else [])
    _run_tool(
        args,
        "Previewing refactoring changes" if dry_run else "Running Rector refactoring",
        "Refactoring preview complete" if dry_run else "Refactoring complete",
        "Refactoring failed",
    )

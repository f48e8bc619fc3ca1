"""hive doctor — check that the toolchain a PHP monorepo needs is present."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hive.commands import common
from hive.errors import MonorepoNotFoundError
from hive.utils import docker, process
from hive.utils.config import load_settings
from hive.utils.monorepo import discover_workspaces, find_monorepo_root, get_apps, get_packages
from hive.utils.preflight import check_composer, check_php
from hive.utils.turbo import turbo_version

console = Console()

REQUIRED_EXTENSIONS = ("json", "mbstring", "xml")


@dataclass
class HealthCheck:
    component: str
    status: str
    details: str
    severity: str = "error"  # "error" or "warning"
    passed: bool = True


def _from_preflight(result, severity: str = "error") -> HealthCheck:
    return HealthCheck(
        component=result.name,
        status="ok" if result.passed else "missing",
        details=result.message if result.passed else f"{result.message}. {result.fix or ''}".strip(),
        severity=severity,
        passed=result.passed,
    )


def check_extensions() -> HealthCheck:
    modules = process.output(["php", "-m"])
    if modules is None:
        return HealthCheck("PHP extensions", "unknown", "PHP is not available", passed=False)
    loaded = {line.strip().lower() for line in modules.splitlines()}
    missing = [ext for ext in REQUIRED_EXTENSIONS if ext not in loaded]
    if missing:
        return HealthCheck("PHP extensions", "missing", f"Missing: {', '.join(missing)}", passed=False)
    return HealthCheck("PHP extensions", "ok", ", ".join(REQUIRED_EXTENSIONS))


def check_node() -> HealthCheck:
    version = process.output(["node", "--version"])
    if version is None:
        return HealthCheck("Node.js", "missing", "Install Node.js 18+: https://nodejs.org/", passed=False)
    return HealthCheck("Node.js", "ok", version)


def check_pnpm() -> HealthCheck:
    version = process.output(["pnpm", "--version"])
    if version is None:
        return HealthCheck("pnpm", "missing", "Install pnpm: npm install -g pnpm", passed=False)
    return HealthCheck("pnpm", "ok", version)


def check_turbo(root: Path | None) -> HealthCheck:
    if root is None:
        return HealthCheck("Turborepo", "skipped", "Not inside a monorepo", severity="warning")
    version = turbo_version(root)
    if version is None:
        return HealthCheck("Turborepo", "missing", "Run pnpm install at the monorepo root", passed=False)
    return HealthCheck("Turborepo", "ok", version)


def check_docker() -> HealthCheck:
    if not docker.is_installed():
        return HealthCheck("Docker", "missing", "Optional; needed for Docker infrastructure", "warning", False)
    if not docker.is_running():
        return HealthCheck("Docker", "stopped", "The Docker daemon is not running", "warning", False)
    if not docker.is_compose_available():
        return HealthCheck("Docker", "no compose", "docker compose is not available", "warning", False)
    return HealthCheck("Docker", "ok", "daemon running, compose available", "warning")


def check_workspaces(root: Path | None) -> HealthCheck:
    if root is None:
        return HealthCheck(
            "Workspaces", "missing", "turbo.json and pnpm-workspace.yaml not found", passed=False
        )
    workspaces = discover_workspaces(root, load_settings(root).apps_dir)
    apps, packages = len(get_apps(workspaces)), len(get_packages(workspaces))
    return HealthCheck("Workspaces", "ok", f"{apps} app(s), {packages} package(s) in {root}")


def run_checks() -> list[HealthCheck]:
    try:
        root: Path | None = find_monorepo_root()
    except MonorepoNotFoundError:
        root = None
    min_php = load_settings(root).min_php_version if root else "8.2"

    return [
        _from_preflight(check_php(min_php)),
        check_extensions(),
        _from_preflight(check_composer()),
        check_node(),
        check_pnpm(),
        check_turbo(root),
        check_docker(),
        check_workspaces(root),
    ]


def doctor_cmd(
    as_json: bool = typer.Option(False, "--json", help="Output results as JSON."),
) -> None:
    """Check that the required tools are installed."""
    from hive.main import banner, state

    if not as_json:
        banner()

    checks = run_checks()
    has_errors = any(not c.passed and c.severity == "error" for c in checks)

    if as_json:
        common.emit_json({"healthy": not has_errors, "checks": [asdict(c) for c in checks]})
        if has_errors:
            raise typer.Exit(1)
        return

    shown = [c for c in checks if not c.passed] if state.quiet else checks

    if shown:
        table = Table(
            title="SYSTEM HEALTH",
            title_style="bold",
            show_header=True,
            header_style="bold dim",
            border_style="dim",
            padding=(0, 2),
            expand=False,
        )
        table.add_column("Component", style="bold", min_width=16)
        table.add_column("Status", min_width=12)
        table.add_column("Details")
        for check in shown:
            table.add_row(check.component, _status_cell(check), check.details)
        console.print(table)
        console.print()

    if has_errors:
        console.print("  [red]✗[/red] Some required tools are missing.\n")
        raise typer.Exit(1)
    if not state.quiet:
        console.print("  [green]✓[/green] Everything looks good.\n")


def _status_cell(check: HealthCheck) -> str:
    if check.passed:
        return f"[green]✓[/green] {check.status}"
    if check.severity == "warning":
        return f"[yellow]○[/yellow] {check.status}"
    return f"[red]✗[/red] {check.status}"

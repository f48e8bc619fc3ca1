"""hive version — versions of hive and the tools it drives."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from hive import __version__
from hive.commands import common
from hive.errors import MonorepoNotFoundError
from hive.utils import process
from hive.utils.monorepo import find_monorepo_root
from hive.utils.preflight import php_version
from hive.utils.turbo import turbo_version

console = Console()


def _first_line(text: str | None) -> str | None:
    return text.splitlines()[0] if text else None


def collect_versions() -> dict[str, str | None]:
    """Tool name -> version string, or None when it is not installed."""
    try:
        root = find_monorepo_root()
    except MonorepoNotFoundError:
        root = None

    return {
        "hive": __version__,
        "PHP": php_version(),
        "Composer": _first_line(process.output(["composer", "--version"])),
        "Turbo": turbo_version(root) if root else process.output(["turbo", "--version"]),
        "Node.js": process.output(["node", "--version"]),
        "pnpm": process.output(["pnpm", "--version"]),
    }


def version_cmd(
    as_json: bool = typer.Option(False, "--json", help="Output versions as JSON."),
) -> None:
    """Show version information."""
    versions = collect_versions()

    if as_json:
        common.emit_json(versions)
        return

    table = Table(show_header=False, border_style="dim", padding=(0, 2), expand=False)
    table.add_column("Tool", style="bold")
    table.add_column("Version")
    for tool, version in versions.items():
        table.add_row(tool, version or "[dim]not installed[/dim]")
    console.print(table)

"""hive list / info — inspect the apps and packages of the monorepo."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hive.commands import common
from hive.errors import WorkspaceNotFoundError
from hive.utils.monorepo import Workspace, detect_framework, get_workspace

console = Console()

COLUMNS = ("name", "type", "package", "version", "framework", "composer", "path")
DEFAULT_COLUMNS = "name,type,package,version,path"
SORT_KEYS = ("name", "type", "package")


def _cell(ws: Workspace, column: str, root: Path, absolute: bool) -> str:
    if column == "name":
        return ws.name
    if column == "type":
        return "[cyan]app[/cyan]" if ws.is_app else "[magenta]package[/magenta]"
    if column == "package":
        return ws.package_name or "[dim]—[/dim]"
    if column == "version":
        return ws.version or "[dim]—[/dim]"
    if column == "framework":
        return detect_framework(ws) or "[dim]—[/dim]"
    if column == "composer":
        return "[green]✓[/green]" if ws.has_composer else "[dim]○[/dim]"
    return _display_path(ws, root, absolute)


def _display_path(ws: Workspace, root: Path, absolute: bool) -> str:
    if absolute:
        return str(ws.path)
    try:
        return str(ws.path.relative_to(root))
    except ValueError:
        return os.path.relpath(ws.path, root)


def _sort_key(sort: str):
    if sort == "type":
        return lambda ws: (ws.type, ws.name)
    if sort == "package":
        return lambda ws: (ws.package_name or ws.name, ws.name)
    return lambda ws: ws.name


# ---------------------------------------------------------------------------
# hive list
# ---------------------------------------------------------------------------

def list_cmd(
    apps: bool = typer.Option(False, "--apps", help="Only show apps."),
    packages: bool = typer.Option(False, "--packages", help="Only show packages."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
    compact: bool = typer.Option(False, "--compact", help="One workspace name per line."),
    absolute: bool = typer.Option(False, "--absolute", help="Show absolute paths."),
    sort: str = typer.Option("name", "--sort", help="Sort by name, type or package."),
    columns: str = typer.Option(DEFAULT_COLUMNS, "--columns", help=f"Comma-separated: {','.join(COLUMNS)}."),
) -> None:
    """List apps and packages in the monorepo."""
    from hive.main import banner, state

    out = Console(stderr=True) if as_json or compact else console
    root, _, workspaces = common.load_workspaces(out)

    if sort not in SORT_KEYS:
        out.print(f"  [red]✗[/red] Unknown sort key: [bold]{sort}[/bold] [dim](use {', '.join(SORT_KEYS)})[/dim]")
        raise typer.Exit(1)

    selected = [c.strip() for c in columns.split(",") if c.strip()]
    unknown = [c for c in selected if c not in COLUMNS]
    if unknown:
        out.print(f"  [red]✗[/red] Unknown column(s): [bold]{', '.join(unknown)}[/bold]")
        out.print(f"  [dim]Available: {', '.join(COLUMNS)}[/dim]")
        raise typer.Exit(1)

    if apps and not packages:
        workspaces = [ws for ws in workspaces if ws.is_app]
    elif packages and not apps:
        workspaces = [ws for ws in workspaces if ws.is_package]
    workspaces = sorted(workspaces, key=_sort_key(sort))

    if as_json:
        common.emit_json([_json_entry(ws, root, absolute) for ws in workspaces])
        return

    if compact:
        for ws in workspaces:
            typer.echo(ws.name)
        return

    banner()

    app_count = sum(1 for ws in workspaces if ws.is_app)
    package_count = len(workspaces) - app_count

    if not workspaces:
        console.print("  [yellow]○[/yellow] No workspaces found.")
        console.print("  [dim]Create one with: hive make:app <name> or hive make:package <name>[/dim]\n")
        return

    table = Table(
        title="WORKSPACES",
        title_style="bold",
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        padding=(0, 2),
        expand=False,
    )
    for column in selected:
        table.add_column(column.title(), style="bold" if column == "name" else None)
    for ws in workspaces:
        table.add_row(*(_cell(ws, c, root, absolute) for c in selected))

    console.print(table)
    if not state.quiet:
        console.print(f"\n  [dim]Found {app_count} app(s) and {package_count} package(s)[/dim]\n")


def _json_entry(ws: Workspace, root: Path, absolute: bool) -> dict:
    data = ws.to_dict()
    data["path"] = _display_path(ws, root, absolute)
    data["version"] = ws.version
    data["framework"] = detect_framework(ws)
    return data


# ---------------------------------------------------------------------------
# hive info
# ---------------------------------------------------------------------------

def info_cmd(
    workspace: Optional[str] = typer.Argument(None, help="Workspace name (default: the one you are in)."),
    fmt: str = typer.Option("text", "--format", "-f", help="text, table or json."),
) -> None:
    """Show details about a workspace."""
    from hive.main import banner

    as_json = fmt == "json"
    out = Console(stderr=True) if as_json else console
    if fmt not in ("text", "table", "json"):
        out.print(f"  [red]✗[/red] Unknown format: [bold]{fmt}[/bold] [dim](use text, table or json)[/dim]")
        raise typer.Exit(1)

    root, _, workspaces = common.load_workspaces(out)

    try:
        ws = _resolve(workspaces, workspace)
    except WorkspaceNotFoundError as exc:
        common.fail(exc, out, as_json=as_json)

    composer = ws.composer_json or {}
    package = ws.package_json or {}

    if as_json:
        data = ws.to_dict()
        data.update({
            "version": ws.version,
            "framework": detect_framework(ws),
            "description": composer.get("description") or package.get("description"),
            "scripts": sorted((package.get("scripts") or {}).keys()),
            "composer": composer or None,
            "package": package or None,
        })
        common.emit_json(data)
        return

    banner()
    rows = _info_rows(ws, root, composer, package)

    if fmt == "table":
        table = Table(
            title=ws.name.upper(),
            title_style="bold",
            show_header=False,
            border_style="dim",
            padding=(0, 2),
            expand=False,
        )
        table.add_column("Field", style="bold dim")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(label, value)
        console.print(table)
        console.print()
        return

    body = "\n".join(f"[bold]{label + ':':<14}[/bold] {value}" for label, value in rows)
    console.print(Panel(body, title=ws.name, border_style="cyan", padding=(1, 2)))
    console.print()


def _resolve(workspaces: list[Workspace], name: str | None) -> Workspace:
    """Look up *name*, or the workspace containing the current directory."""
    if name:
        return get_workspace(workspaces, name)
    cwd = Path.cwd().resolve()
    for ws in workspaces:
        path = ws.path.resolve()
        if cwd == path or path in cwd.parents:
            return ws
    raise WorkspaceNotFoundError(str(cwd.name))


def _info_rows(ws: Workspace, root: Path, composer: dict, package: dict) -> list[tuple[str, str]]:
    scripts = sorted((package.get("scripts") or {}).keys())
    return [
        ("Name", ws.name),
        ("Type", ws.type),
        ("Package", ws.package_name or "—"),
        ("Composer", composer.get("name") or "—"),
        ("Version", ws.version or "—"),
        ("Framework", detect_framework(ws) or "—"),
        ("Description", composer.get("description") or package.get("description") or "—"),
        ("Path", _display_path(ws, root, False)),
        ("Scripts", ", ".join(scripts) if scripts else "—"),
    ]

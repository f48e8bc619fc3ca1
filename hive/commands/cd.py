"""hive cd — resolve a target directory for shell navigation."""

from __future__ import annotations

import sys
from typing import Optional

import typer

from hive.errors import MonorepoNotFoundError
from hive.utils.config import load_settings
from hive.utils.monorepo import discover_workspaces, find_monorepo_root, has_workspace, get_workspace


def cd_cmd(
    target: Optional[str] = typer.Argument(None, help="Workspace name or relative path (omit for monorepo root)."),
) -> None:
    """Navigate to the monorepo root or a workspace directory.

    Prints the resolved path to stdout for shell integration, e.g.
    ``cd "$(hive cd api)"``.
    """
    try:
        root = find_monorepo_root()
    except MonorepoNotFoundError as exc:
        sys.stderr.write(f"{exc.message}\n")
        raise typer.Exit(1)

    if not target:
        typer.echo(str(root))
        return

    # Try as a workspace name first
    workspaces = discover_workspaces(root, load_settings(root).apps_dir)
    if has_workspace(workspaces, target):
        typer.echo(str(get_workspace(workspaces, target).path))
        return

    # Try as a relative path from the monorepo root
    resolved = root / target
    if resolved.is_dir():
        typer.echo(str(resolved))
        return

    sys.stderr.write(f"Not found: '{target}' (not a workspace name or valid path)\n")
    raise typer.Exit(1)

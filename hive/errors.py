"""Exceptions raised by hive and the panel used to report them."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel


class HiveError(Exception):
    """Base error carrying optional follow-up suggestions for the user."""

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []


class MonorepoNotFoundError(HiveError, FileNotFoundError):
    def __init__(self, start: object = None) -> None:
        super().__init__(
            "Could not find monorepo root (turbo.json and pnpm-workspace.yaml not found)",
            [
                "Run this command from inside a PhpHive monorepo",
                "Create one with: hive make:workspace <name>",
            ],
        )
        self.start = start


class WorkspaceNotFoundError(HiveError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Workspace '{name}' not found",
            ["List available workspaces with: hive list"],
        )
        self.name = name

    def __str__(self) -> str:
        return self.message


class ProvisioningError(HiveError):
    """Raised when an infrastructure backend could not be configured."""


class ScaffoldError(HiveError):
    """Raised when an app, package or workspace could not be generated."""


class PreflightError(HiveError):
    """Raised when the environment is missing a required tool."""


def show_error(console: Console, error: HiveError, title: str = "Error") -> None:
    """Render *error* as a red panel with its suggestions."""
    lines = [error.message]
    if error.suggestions:
        lines.append("")
        for suggestion in error.suggestions:
            lines.append(f"[dim]→[/dim] {suggestion}")
    console.print()
    console.print(Panel("\n".join(lines), title=title, border_style="red", padding=(1, 2)))
    console.print()

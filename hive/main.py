"""PhpHive CLI — main application definition."""

from __future__ import annotations

import sys
from typing import Optional

import typer
from rich.console import Console

from hive import __version__
from hive.commands import (
    cd,
    composer,
    deploy,
    doctor,
    down,
    infra,
    make_app,
    make_package,
    make_workspace,
    publish,
    quality,
    status,
    tasks,
    up,
    version,
    workspaces,
)
from hive.utils import process
from hive.utils.prompts import Prompts

app = typer.Typer(
    name="hive",
    help="PhpHive CLI — scaffold and manage PHP monorepos with Turborepo.",
    no_args_is_help=True,
    add_completion=False,
)

# Shared console instance
console = Console()

# ---------------------------------------------------------------------------
# Global state — set by the main callback, read by all commands
# ---------------------------------------------------------------------------

class _State:
    quiet: bool = False
    verbose: bool = False
    interactive: bool = True

state = _State()


def banner() -> None:
    """Print the startup banner (unless --quiet)."""
    if not state.quiet:
        console.print(f"\n  [bold cyan]hive[/bold cyan] [dim]v{__version__}[/dim]\n")


def make_prompts(machine_output: bool = False) -> Prompts:
    """Prompts bound to the global flags.

    With *machine_output* (``--json``) all chatter goes to stderr so stdout
    stays parseable.
    """
    if machine_output:
        return Prompts(Console(stderr=True), interactive=state.interactive, quiet=True)
    return Prompts(console, interactive=state.interactive, quiet=state.quiet)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hive {__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Main callback — handles global flags
# ---------------------------------------------------------------------------

@app.callback(invoke_without_command=True)
def main(
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output for scripts and CI."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show underlying commands and debug info."),
    no_interaction: bool = typer.Option(
        False, "--no-interaction", "-n", help="Never prompt; use defaults for every question."
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    """PhpHive CLI for PHP monorepos."""
    state.quiet = quiet
    state.verbose = verbose
    state.interactive = not no_interaction and sys.stdin.isatty()
    process.verbose = verbose


# ---------------------------------------------------------------------------
# Register commands
# ---------------------------------------------------------------------------

# Unknown options after "hive composer" belong to composer
_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

# Scaffolding
app.command(name="make:app", help="Create a new application in apps/.")(make_app.make_app_cmd)
app.command(name="create:app", hidden=True)(make_app.make_app_cmd)
app.command(name="new:app", hidden=True)(make_app.make_app_cmd)
app.command(name="make:package", help="Create a new package in packages/.")(make_package.make_package_cmd)
app.command(name="create:package", hidden=True)(make_package.make_package_cmd)
app.command(name="new:package", hidden=True)(make_package.make_package_cmd)
app.command(name="make:workspace", help="Create a new monorepo from the template.")(make_workspace.make_workspace_cmd)
app.command(name="init", hidden=True)(make_workspace.make_workspace_cmd)
app.command(name="new", hidden=True)(make_workspace.make_workspace_cmd)

# Workspaces
app.command(name="list", help="List apps and packages in the monorepo.")(workspaces.list_cmd)
app.command(name="workspace:list", hidden=True)(workspaces.list_cmd)
app.command(name="info", help="Show details about a workspace.")(workspaces.info_cmd)
app.command(name="workspace:info", hidden=True)(workspaces.info_cmd)
app.command(name="cd", help="Print the path of the monorepo root or a workspace.")(cd.cd_cmd)

# Turborepo tasks
app.command(name="build", help="Build workspaces via Turborepo.")(tasks.build_cmd)
app.command(name="dev", help="Start development servers via Turborepo.")(tasks.dev_cmd)
app.command(name="test", help="Run tests via Turborepo.")(tasks.test_cmd)
app.command(name="lint", help="Lint workspaces via Turborepo.")(tasks.lint_cmd)
app.command(name="format", help="Format code via Turborepo.")(tasks.format_cmd)
app.command(name="typecheck", help="Run static analysis via Turborepo.")(tasks.typecheck_cmd)
app.command(name="clean", help="Clean build artifacts via Turborepo.")(tasks.clean_cmd)
app.command(name="run", help="Run any turbo.json task.")(tasks.run_cmd)
app.command(name="publish", help="Publish a package.")(publish.publish_cmd)
app.command(name="deploy:publish", hidden=True)(publish.publish_cmd)
app.command(name="deploy", help="Run lint, typecheck, test and build in order.")(deploy.deploy_cmd)

# Composer
app.command(name="install", help="Install Composer dependencies via Turborepo.")(tasks.install_cmd)
app.command(name="i", hidden=True)(tasks.install_cmd)
app.command(name="composer:install", hidden=True)(tasks.install_cmd)
app.command(name="require", help="Add a Composer package to a workspace.")(composer.require_cmd)
app.command(name="req", hidden=True)(composer.require_cmd)
app.command(name="add", hidden=True)(composer.require_cmd)
app.command(name="composer:require", hidden=True)(composer.require_cmd)
app.command(name="update", help="Update Composer dependencies in a workspace.")(composer.update_cmd)
app.command(name="upgrade", hidden=True)(composer.update_cmd)
app.command(name="composer:update", hidden=True)(composer.update_cmd)
app.command(name="composer", help="Run any Composer command in a workspace.", context_settings=_PASSTHROUGH)(
    composer.composer_cmd
)
app.command(name="comp", hidden=True, context_settings=_PASSTHROUGH)(composer.composer_cmd)

# Quality
app.command(name="mutate", help="Run Infection mutation testing.")(quality.mutate_cmd)
app.command(name="infection", hidden=True)(quality.mutate_cmd)
app.command(name="quality:mutate", hidden=True)(quality.mutate_cmd)
app.command(name="refactor", help="Run Rector for automated refactoring.")(quality.refactor_cmd)
app.command(name="rector", hidden=True)(quality.refactor_cmd)
app.command(name="quality:refactor", hidden=True)(quality.refactor_cmd)

# Infrastructure
app.command(name="infra:add", help="Provision a backend (database, cache, ...) for an app.")(infra.infra_add_cmd)
app.command(name="up", help="Start Docker infrastructure for all apps or one app.")(up.up_cmd)
app.command(name="down", help="Stop Docker infrastructure.")(down.down_cmd)
app.command(name="status", help="Show workspace and container status dashboard.")(status.status_cmd)

# Diagnostics
app.command(name="doctor", help="Check that the required tools are installed.")(doctor.doctor_cmd)
app.command(name="system:doctor", hidden=True)(doctor.doctor_cmd)
app.command(name="version", help="Show versions of hive and the tools it drives.")(version.version_cmd)
app.command(name="ver", hidden=True)(version.version_cmd)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def run() -> None:
    app()

"""hive make:app — scaffold a new application with its infrastructure."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError
from hive.provisioning import ConnectionConfig, Provisioner, merge_config, merge_env, setup_infrastructure
from hive.scaffold.app_types import APP_TYPES, get_app_type
from hive.scaffold.stubs import copy_stubs, register_workspace
from hive.utils.envfile import update_env

console = Console()


def make_app_cmd(
    name: Optional[str] = typer.Argument(None, help="App name (lowercase, hyphenated)."),
    app_type: Optional[str] = typer.Option(None, "--type", "-t", help="laravel, symfony, magento or skeleton."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Short description."),
    use_docker: Optional[bool] = typer.Option(
        None, "--docker/--no-docker", help="Force or skip Docker for infrastructure (default: ask)."
    ),
    no_infra: bool = typer.Option(False, "--no-infra", help="Skip infrastructure provisioning."),
    skip_install: bool = typer.Option(False, "--skip-install", help="Skip composer and post-install commands."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Create a new application in apps/."""
    from hive.main import banner, make_prompts, state

    if not as_json:
        banner()
    started = time.monotonic()
    prompts = make_prompts(machine_output=as_json)

    root, settings = common.load_monorepo(prompts.console)
    apps_dir = root / settings.apps_dir

    name = common.resolve_name(prompts, name, apps_dir, "app")

    type_key = app_type or prompts.select(
        "Which type of app?",
        {key: f"{t.name} — {t.description}" for key, t in APP_TYPES.items()},
        default="laravel",
    )
    try:
        kind = get_app_type(type_key)
    except KeyError as exc:
        prompts.error(str(exc.args[0]))
        raise typer.Exit(1)

    prompts.info("Checking environment...")
    common.check_preflight(prompts, apps_dir, settings, require_php=not skip_install)

    config = kind.collect_configuration(prompts, name, description)
    app_path = apps_dir / name
    infra: list[ConnectionConfig] = []

    # -- Steps --------------------------------------------------------------

    def create_directory() -> None:
        app_path.mkdir(parents=True)

    def install_framework() -> None:
        common.run_commands([kind.install_command(config)], app_path, stream=state.verbose)

    def provision() -> None:
        provisioner = Provisioner(prompts, name, app_path, prefer_docker=use_docker, settings=settings)
        infra.extend(setup_infrastructure(provisioner, kind))
        config.update(merge_config(infra))

    def process_stubs() -> None:
        copy_stubs(kind.stub_dir(), app_path, kind.stub_variables(config, settings.vendor))
        register_workspace(app_path, f"@{settings.vendor}/{name}", kind.scripts, config["description"])

    def write_env() -> None:
        values = kind.env_values(config, merge_env(infra))
        if values:
            update_env(app_path / ".env", values)

    def post_install() -> None:
        common.run_commands(kind.post_install_commands(config), app_path, stream=state.verbose)

    steps: list[common.Step] = [("Creating app directory", create_directory)]
    if kind.install_command(config) and not skip_install:
        steps.append((f"Installing {kind.name}", install_framework))
    if kind.has_infrastructure and not no_infra:
        steps.append(("Provisioning infrastructure", provision))
    steps.append(("Processing templates", process_stubs))
    steps.append(("Writing .env", write_env))
    if not skip_install and kind.post_install_commands(config):
        steps.append(("Running post-install commands", post_install))

    try:
        common.run_steps(prompts, steps)
    except HiveError as exc:
        common.cleanup_failed(app_path, prompts)
        common.fail(exc, prompts.console, as_json=as_json, title="make:app failed")
    except KeyboardInterrupt:
        common.cleanup_failed(app_path, prompts)
        prompts.warning("Cancelled")
        raise typer.Exit(130)

    duration = round(time.monotonic() - started, 2)
    next_steps = kind.next_steps(name, settings.apps_dir)
    if any(c.using_docker for c in infra):
        next_steps.insert(1, f"hive up {name}")

    if as_json:
        common.emit_json(_result(kind.key, name, app_path, duration, next_steps, infra))
        return

    if infra and not state.quiet:
        _print_infrastructure(infra)
    common.show_next_steps(prompts, f"✓ {kind.name} app created", app_path, next_steps)
    if state.verbose:
        console.print(f"  [dim]Done in {duration:.1f}s[/dim]\n")


def _result(
    type_key: str,
    name: str,
    path: Path,
    duration: float,
    next_steps: list[str],
    infra: list[ConnectionConfig],
) -> dict[str, Any]:
    return {
        "success": True,
        "type": type_key,
        "name": name,
        "path": str(path),
        "duration": duration,
        "infrastructure": {c.category: c.backend.key for c in infra},
        "next_steps": next_steps,
    }


def _print_infrastructure(infra: list[ConnectionConfig]) -> None:
    console.print("\n  [bold]Infrastructure:[/bold]")
    for config in infra:
        where = _location(config)
        host = config.values.get("host") or config.values.get("endpoint") or ""
        port = config.values.get("port")
        target = f"{host}:{port}" if host and port else host
        console.print(
            f"    [green]✓[/green] {config.category:<10} {config.backend.label:<18} [dim]{where} {target}[/dim]"
        )


def _location(config: ConnectionConfig) -> str:
    if config.using_docker:
        return "docker"
    if config.backend.kind == "container":
        return "local"
    return config.backend.kind

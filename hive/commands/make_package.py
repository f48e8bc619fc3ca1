"""hive make:package — scaffold a new reusable package."""

from __future__ import annotations

import time
from typing import Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError
from hive.scaffold.package_types import PACKAGE_TYPES, get_package_type
from hive.scaffold.stubs import copy_stubs

console = Console()


def make_package_cmd(
    name: Optional[str] = typer.Argument(None, help="Package name (lowercase, hyphenated)."),
    package_type: Optional[str] = typer.Option(None, "--type", "-t", help="laravel, symfony, magento or skeleton."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Short description."),
    skip_install: bool = typer.Option(False, "--skip-install", help="Skip composer install."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Create a new package in packages/."""
    from hive.main import banner, make_prompts, state

    if not as_json:
        banner()
    started = time.monotonic()
    prompts = make_prompts(machine_output=as_json)

    root, settings = common.load_monorepo(prompts.console)
    packages_dir = root / settings.packages_dir

    name = common.resolve_name(prompts, name, packages_dir, "package")

    type_key = package_type or prompts.select(
        "Which type of package?",
        {key: f"{t.name} — {t.description}" for key, t in PACKAGE_TYPES.items()},
        default="skeleton",
    )
    try:
        kind = get_package_type(type_key)
    except KeyError as exc:
        prompts.error(str(exc.args[0]))
        raise typer.Exit(1)

    if not skip_install:
        prompts.info("Checking environment...")
        common.check_preflight(prompts, packages_dir, settings)

    description = description or prompts.text("Description", f"{kind.name} package: {name}")
    package_path = packages_dir / name
    variables = kind.variables(name, description, settings.vendor)
    created: list[str] = []

    def create_directory() -> None:
        package_path.mkdir(parents=True)

    def process_stubs() -> None:
        created.extend(copy_stubs(kind.stub_dir(), package_path, variables, kind.renames))

    def install() -> None:
        common.run_commands(kind.post_create_commands(), package_path, stream=state.verbose)

    steps: list[common.Step] = [
        ("Creating package directory", create_directory),
        ("Processing templates", process_stubs),
    ]
    if not skip_install:
        steps.append(("Installing dependencies", install))

    try:
        common.run_steps(prompts, steps)
    except HiveError as exc:
        common.cleanup_failed(package_path, prompts)
        common.fail(exc, prompts.console, as_json=as_json, title="make:package failed")
    except KeyboardInterrupt:
        common.cleanup_failed(package_path, prompts)
        prompts.warning("Cancelled")
        raise typer.Exit(130)

    duration = round(time.monotonic() - started, 2)
    next_steps = [
        f"cd {settings.packages_dir}/{name}",
        f"hive test --workspace {name}",
        f"hive publish {name}",
    ]

    if as_json:
        common.emit_json({
            "success": True,
            "type": kind.key,
            "name": name,
            "package_name": variables["COMPOSER_PACKAGE_NAME"],
            "path": str(package_path),
            "files": created,
            "duration": duration,
            "next_steps": next_steps,
        })
        return

    if not state.quiet:
        console.print("\n  [bold green]Created:[/bold green]\n")
        for f in created:
            console.print(f"    [green]✓[/green] {f}")
    common.show_next_steps(prompts, f"✓ {kind.name} package created", package_path, next_steps)

"""hive make:workspace — create a new monorepo from the template repository."""

from __future__ import annotations

import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from hive.commands import common
from hive.errors import HiveError, ScaffoldError
from hive.utils import git
from hive.utils.config import CONFIG_FILENAME, HiveSettings, save_settings
from hive.utils.monorepo import is_monorepo_root, read_json, write_json

console = Console()


def make_workspace_cmd(
    name: Optional[str] = typer.Argument(None, help="Workspace (directory) name."),
    template: Optional[str] = typer.Option(None, "--template", help="Git URL of the template repository."),
    no_git: bool = typer.Option(False, "--no-git", help="Do not initialise a git repository."),
    as_json: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Create a new PhpHive monorepo."""
    from hive.main import banner, make_prompts

    if not as_json:
        banner()
    started = time.monotonic()
    prompts = make_prompts(machine_output=as_json)
    settings = HiveSettings()
    cwd = Path.cwd()

    name = common.resolve_name(prompts, name, cwd, "workspace")
    template_url = template or settings.template_url
    target = cwd / name

    prompts.info("Checking environment...")
    common.check_preflight(prompts, cwd, settings, require_php=False)

    def clone_template() -> None:
        try:
            git.clone(template_url, target)
        except subprocess.CalledProcessError as exc:
            raise ScaffoldError(
                f"Could not clone {template_url}",
                [line for line in (exc.stderr or "").strip().splitlines()[-3:]],
            ) from exc
        shutil.rmtree(target / ".git", ignore_errors=True)

    def configure() -> None:
        _rename(target, name, settings.vendor)
        if not (target / CONFIG_FILENAME).exists():
            save_settings(settings, target)
        if not is_monorepo_root(target):
            raise ScaffoldError(
                "The template is missing turbo.json or pnpm-workspace.yaml",
                [f"Check the template repository: {template_url}"],
            )

    def init_git() -> None:
        git.init(target)
        if not git.initial_commit(target, "Initial commit from PhpHive template"):
            prompts.warning("Could not create the initial commit (is git user.name/user.email set?)")

    steps: list[common.Step] = [
        ("Cloning template", clone_template),
        ("Configuring workspace", configure),
    ]
    if not no_git:
        steps.append(("Initialising git repository", init_git))

    try:
        common.run_steps(prompts, steps)
    except HiveError as exc:
        common.cleanup_failed(target, prompts)
        common.fail(exc, prompts.console, as_json=as_json, title="make:workspace failed")
    except KeyboardInterrupt:
        common.cleanup_failed(target, prompts)
        prompts.warning("Cancelled")
        raise typer.Exit(130)

    next_steps = [f"cd {name}", "pnpm install", "hive make:app <name>"]
    if as_json:
        common.emit_json({
            "success": True,
            "type": "workspace",
            "name": name,
            "path": str(target),
            "duration": round(time.monotonic() - started, 2),
            "next_steps": next_steps,
        })
        return

    common.show_next_steps(prompts, "✓ Workspace created", target, next_steps)


def _rename(target: Path, name: str, vendor: str) -> None:
    """Point the template's package.json and composer.json at the new name."""
    package_file = target / "package.json"
    package = read_json(package_file)
    if package is not None:
        package["name"] = name
        write_json(package_file, package)

    composer_file = target / "composer.json"
    composer = read_json(composer_file)
    if composer is not None:
        composer["name"] = f"{vendor}/{name}"
        write_json(composer_file, composer)

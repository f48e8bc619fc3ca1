"""Shared fixtures: a throwaway monorepo and prompts with scripted answers."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from hive.utils.monorepo import clear_root_cache
from hive.utils.prompts import Prompts


def write_package(path: Path, name: str, composer: dict | None = None, **extra) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    (path / "package.json").write_text(json.dumps({"name": name, **extra}))
    if composer is not None:
        (path / "composer.json").write_text(json.dumps(composer))
    return path


@pytest.fixture(autouse=True)
def _fresh_root_cache():
    clear_root_cache()
    yield
    clear_root_cache()


@pytest.fixture
def monorepo(tmp_path, monkeypatch) -> Path:
    """An empty monorepo (turbo.json + pnpm-workspace.yaml) as the cwd."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "turbo.json").write_text(
        json.dumps({"tasks": {"build": {}, "test": {}, "lint": {}, "publish": {}}})
    )
    (root / "pnpm-workspace.yaml").write_text("packages:\n  - apps/*\n  - packages/*\n")
    (root / "apps").mkdir()
    (root / "packages").mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def populated(monorepo) -> Path:
    """The monorepo fixture with one Laravel app and two packages."""
    write_package(
        monorepo / "apps" / "api",
        "@phphive/api",
        composer={"name": "phphive/api", "require": {"laravel/framework": "^12.0"}},
        version="1.0.0",
        scripts={"dev": "php artisan serve", "test": "php artisan test"},
    )
    write_package(monorepo / "packages" / "utils", "@phphive/utils", composer={"name": "phphive/utils"}, version="0.2.0")
    write_package(monorepo / "packages" / "logger", "@phphive/logger")
    return monorepo


class ScriptedPrompts(Prompts):
    """Prompts whose answers come from a dict keyed by label substring.

    Anything not scripted falls back to the question's default.
    """

    def __init__(self, answers: dict[str, object] | None = None) -> None:
        super().__init__(Console(file=io.StringIO(), width=120), interactive=True, quiet=False)
        self.answers = answers or {}
        self.asked: list[str] = []

    def _answer(self, label: str, default):
        self.asked.append(label)
        for key, value in self.answers.items():
            if key in label:
                return value
        return default

    def text(self, label, default="", validate=None):
        return self._answer(label, default)

    def secret(self, label, default=""):
        return self._answer(label, default)

    def confirm(self, label, default=True):
        return self._answer(label, default)

    def select(self, label, options, default=None):
        return self._answer(label, default if default in options else next(iter(options)))

    @property
    def output(self) -> str:
        return self.console.file.getvalue()


@pytest.fixture
def quiet_prompts() -> Prompts:
    return Prompts(Console(file=io.StringIO()), interactive=False, quiet=True)

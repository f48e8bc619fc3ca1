"""
hive/utils/monorepo.py - Monorepo root and workspace discovery

A monorepo root is the first directory (walking upward) holding both
turbo.json and pnpm-workspace.yaml. Workspaces are the immediate
subdirectories of each pnpm workspace pattern that contain a package.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hive.errors import MonorepoNotFoundError, WorkspaceNotFoundError

MARKER_FILES = ("turbo.json", "pnpm-workspace.yaml")


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class Workspace:
    """A single app or package inside the monorepo."""

    name: str
    path: Path
    type: str = "package"  # "app" or "package"
    package_name: str = ""
    has_composer: bool = False
    has_package_json: bool = True

    @property
    def is_app(self) -> bool:
        return self.type == "app"

    @property
    def is_package(self) -> bool:
        return self.type == "package"

    @property
    def composer_json(self) -> dict[str, Any] | None:
        return read_json(self.path / "composer.json")

    @property
    def package_json(self) -> dict[str, Any] | None:
        return read_json(self.path / "package.json")

    @property
    def version(self) -> str | None:
        data = self.package_json or {}
        version = data.get("version")
        return str(version) if version else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "type": self.type,
            "packageName": self.package_name,
            "hasComposer": self.has_composer,
            "hasPackageJson": self.has_package_json,
        }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_root_cache: dict[Path, Path] = {}


def _strip_glob(pattern: str) -> str:
    for suffix in ("/**", "/*"):
        if pattern.endswith(suffix):
            return pattern[: -len(suffix)]
    return pattern


def _workspace_from_dir(directory: Path, apps_dir: str) -> Workspace | None:
    package_file = directory / "package.json"
    if not package_file.is_file():
        return None
    data = read_json(package_file) or {}
    package_name = data.get("name") if isinstance(data.get("name"), str) else None
    return Workspace(
        name=directory.name,
        path=directory,
        type="app" if directory.parent.name == apps_dir else "package",
        package_name=package_name or directory.name,
        has_composer=(directory / "composer.json").is_file(),
        has_package_json=True,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_json(path: Path) -> dict[str, Any] | None:
    """Read a JSON object from *path*. Returns None on any failure."""
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def write_json(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def is_monorepo_root(path: Path) -> bool:
    return all((path / marker).is_file() for marker in MARKER_FILES)


def find_monorepo_root(start: Path | None = None) -> Path:
    """Walk upward from *start* (default: cwd) to find the monorepo root.

    Raises MonorepoNotFoundError if no ancestor holds both marker files.
    """
    origin = (start or Path.cwd()).resolve()
    if origin in _root_cache:
        return _root_cache[origin]

    current = origin
    while True:
        if is_monorepo_root(current):
            _root_cache[origin] = current
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    raise MonorepoNotFoundError(origin)


def clear_root_cache() -> None:
    _root_cache.clear()


def workspace_patterns(root: Path) -> list[str]:
    """Return the pnpm workspace directories with trailing globs removed."""
    try:
        with open(root / "pnpm-workspace.yaml", "r") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return []
    if not isinstance(raw, dict):
        return []
    packages = raw.get("packages") or []
    if not isinstance(packages, list):
        return []
    return [_strip_glob(str(p).strip()) for p in packages if str(p).strip() and not str(p).startswith("!")]


def discover_workspaces(root: Path, apps_dir: str = "apps") -> list[Workspace]:
    """Enumerate every workspace declared in pnpm-workspace.yaml."""
    workspaces: list[Workspace] = []
    seen: set[Path] = set()

    for pattern in workspace_patterns(root):
        base = root / pattern
        if not base.is_dir():
            continue
        candidates = sorted((d for d in base.iterdir() if d.is_dir()), key=lambda d: d.name)
        # A pattern without a glob may point at a single workspace directly
        if (base / "package.json").is_file():
            candidates = [base]
        for directory in candidates:
            resolved = directory.resolve()
            if resolved in seen:
                continue
            ws = _workspace_from_dir(directory, apps_dir)
            if ws is None:
                continue
            seen.add(resolved)
            workspaces.append(ws)

    return workspaces


def get_workspace(workspaces: list[Workspace], name: str) -> Workspace:
    """Find a workspace by directory name or package name.

    Raises WorkspaceNotFoundError if nothing matches.
    """
    for ws in workspaces:
        if ws.name == name or ws.package_name == name:
            return ws
    raise WorkspaceNotFoundError(name)


def has_workspace(workspaces: list[Workspace], name: str) -> bool:
    return any(ws.name == name or ws.package_name == name for ws in workspaces)


def get_apps(workspaces: list[Workspace]) -> list[Workspace]:
    return [ws for ws in workspaces if ws.is_app]


def get_packages(workspaces: list[Workspace]) -> list[Workspace]:
    return [ws for ws in workspaces if ws.is_package]


def detect_framework(workspace: Workspace) -> str | None:
    """Detect the PHP framework from composer.json requirements."""
    composer = workspace.composer_json
    if not composer:
        return None
    require = composer.get("require") or {}
    if not isinstance(require, dict):
        return None
    if "laravel/framework" in require:
        return "Laravel"
    if "symfony/framework-bundle" in require:
        return "Symfony"
    if any(dep.startswith("magento/") for dep in require):
        return "Magento"
    return None


def turbo_tasks(root: Path) -> list[str]:
    """Return the task names declared in turbo.json."""
    data = read_json(root / "turbo.json") or {}
    tasks = data.get("tasks") or data.get("pipeline") or {}
    return list(tasks) if isinstance(tasks, dict) else []

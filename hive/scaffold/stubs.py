"""Render stub directories into new apps and packages."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from hive.utils.compose import STUBS_DIR, render_stub
from hive.utils.monorepo import read_json, write_json

APPEND_SUFFIX = ".append.stub"
STUB_SUFFIX = ".stub"


def studly(name: str) -> str:
    """my-cool-app -> MyCoolApp"""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^A-Za-z0-9]+", name) if part)


def _json_safe(variables: dict[str, Any]) -> dict[str, Any]:
    """Escape backslashes (PHP namespaces) for values written into JSON."""
    return {k: str(v).replace("\\", "\\\\") for k, v in variables.items()}


def _target_name(rel: str) -> tuple[str, bool]:
    if rel.endswith(APPEND_SUFFIX):
        return rel[: -len(APPEND_SUFFIX)], True
    if rel.endswith(STUB_SUFFIX):
        return rel[: -len(STUB_SUFFIX)], False
    return rel, False


def copy_stubs(
    source: Path,
    dest: Path,
    variables: dict[str, Any],
    renames: dict[str, str] | None = None,
) -> list[str]:
    """Render every file under *source* into *dest*.

    ``*.stub`` files replace their target; ``*.append.stub`` files are added
    to the end of an existing target unless already present. Returns the
    relative paths written.
    """
    renames = renames or {}
    written: list[str] = []

    for src_file in sorted(source.rglob("*")):
        if not src_file.is_file():
            continue
        rel, append = _target_name(src_file.relative_to(source).as_posix())
        rel = render_stub(renames.get(rel, rel), variables)
        target = dest / rel

        values = _json_safe(variables) if target.suffix == ".json" else variables
        content = render_stub(src_file.read_text(), values)

        if append and target.exists():
            existing = target.read_text()
            if content.strip() in existing:
                continue
            separator = "" if existing.endswith("\n") else "\n"
            content = f"{existing}{separator}\n{content}"

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        written.append(rel)

    return written


def stub_path(*parts: str) -> Path:
    return STUBS_DIR.joinpath(*parts)


def register_workspace(path: Path, package_name: str, scripts: dict[str, str], description: str = "") -> Path:
    """Make sure *path* has a package.json so pnpm and turbo pick it up.

    An existing package.json (Laravel ships one) keeps its scripts; only
    missing ones are added.
    """
    package_file = path / "package.json"
    data = read_json(package_file) or {}
    data["name"] = package_name
    data.setdefault("version", "0.1.0")
    data.setdefault("private", True)
    if description:
        data.setdefault("description", description)
    existing_scripts = data.get("scripts") if isinstance(data.get("scripts"), dict) else {}
    for name, command in scripts.items():
        existing_scripts.setdefault(name, command)
    data["scripts"] = existing_scripts
    write_json(package_file, data)
    return package_file

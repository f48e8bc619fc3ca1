"""
hive/utils/compose.py - Docker Compose fragments

Each backend ships a compose fragment under stubs/docker with {{PLACEHOLDER}}
markers. Fragments are rendered, parsed, and merged into the app's
docker-compose.yml: services already present are left untouched, so running
the same provisioning twice changes nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hive.utils.docker import COMPOSE_FILENAME

STUBS_DIR = Path(__file__).parent.parent / "stubs"
DOCKER_STUBS_DIR = STUBS_DIR / "docker"

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Z0-9_]+)\s*\}\}")


@dataclass
class MergeResult:
    """Outcome of merging a fragment into docker-compose.yml."""

    path: Path
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added)


def normalize_name(name: str, separator: str = "-") -> str:
    """Lowercase *name* and replace every non-alphanumeric with *separator*."""
    return re.sub(r"[^a-z0-9]", separator, name.lower())


def render_stub(text: str, variables: dict[str, Any]) -> str:
    """Replace {{KEY}} placeholders. Unknown placeholders are kept as-is."""

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, text)


def compose_variables(app_name: str, prefix: str = "phphive") -> dict[str, str]:
    base = f"{prefix}-{normalize_name(app_name)}"
    return {
        "CONTAINER_PREFIX": base,
        "VOLUME_PREFIX": base,
        "NETWORK_NAME": base,
    }


def render_fragment(stub_name: str, variables: dict[str, Any]) -> dict[str, Any]:
    """Render stubs/docker/<stub_name> and parse it into a compose dict.

    Placeholders missing from *variables* survive as {{KEY}} strings.
    """
    stub_path = DOCKER_STUBS_DIR / stub_name
    content = render_stub(stub_path.read_text(), variables)
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Compose stub {stub_name} did not render to a mapping")
    return data


def extract_values(template: Any, actual: Any) -> dict[str, str]:
    """Read placeholder values back out of a rendered compose definition.

    *template* is the parsed stub with its {{KEY}} markers still in place,
    *actual* the same definition as found in docker-compose.yml. Both are
    walked in step; strings carrying markers are matched against their
    counterpart and every marker that matches yields a value.
    """
    found: dict[str, str] = {}
    if isinstance(template, dict) and isinstance(actual, dict):
        for key, value in template.items():
            if key in actual:
                found.update(extract_values(value, actual[key]))
    elif isinstance(template, list) and isinstance(actual, list):
        for value, other in zip(template, actual):
            found.update(extract_values(value, other))
    elif isinstance(template, str) and _PLACEHOLDER.search(template) and actual is not None:
        match = _template_pattern(template).fullmatch(str(actual))
        if match:
            found.update(match.groupdict())
    return found


def _template_pattern(template: str) -> re.Pattern[str]:
    parts: list[str] = []
    seen: set[str] = set()
    pos = 0
    for match in _PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[pos:match.start()]))
        key = match.group(1)
        parts.append(f"(?P={key})" if key in seen else f"(?P<{key}>.+?)")
        seen.add(key)
        pos = match.end()
    parts.append(re.escape(template[pos:]))
    return re.compile("".join(parts), re.DOTALL)


def load_compose(app_path: Path) -> dict[str, Any]:
    compose_path = app_path / COMPOSE_FILENAME
    if not compose_path.is_file():
        return {}
    with open(compose_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{compose_path} is not a valid compose file")
    return data


def merge_fragment(
    app_path: Path,
    fragment: dict[str, Any],
    exclude: tuple[str, ...] | list[str] = (),
) -> MergeResult:
    """Merge *fragment* into app_path/docker-compose.yml.

    Existing services, volumes and networks always win. The file is only
    written when at least one service was added.
    """
    compose_path = app_path / COMPOSE_FILENAME
    existing = load_compose(app_path)
    result = MergeResult(path=compose_path)

    services = existing.setdefault("services", {}) or {}
    existing["services"] = services

    for name, definition in (fragment.get("services") or {}).items():
        if name in exclude:
            continue
        if name in services:
            result.skipped.append(name)
            continue
        services[name] = definition
        result.added.append(name)

    if not result.added:
        return result

    for section in ("volumes", "networks"):
        entries = fragment.get(section) or {}
        if not entries:
            continue
        current = existing.get(section) or {}
        for key, value in entries.items():
            current.setdefault(key, value)
        existing[section] = current

    app_path.mkdir(parents=True, exist_ok=True)
    with open(compose_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False, sort_keys=False)
    return result

"""Read and update dotenv files without disturbing unrelated lines."""

from __future__ import annotations

import re
from pathlib import Path

_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
_NEEDS_QUOTES = re.compile(r"[\s#\"'$]")


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = ""
    else:
        text = str(value)
    if text and _NEEDS_QUOTES.search(text):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


def _unquote(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        inner = raw[1:-1]
        if raw[0] == '"':
            inner = inner.replace('\\"', '"').replace("\\\\", "\\")
        return inner
    return raw.split(" #", 1)[0].strip()


def parse_env(path: Path) -> dict[str, str]:
    """Return the key/value pairs of a dotenv file ({} if missing)."""
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text().splitlines():
        match = _LINE.match(line)
        if match:
            values[match.group(1)] = _unquote(match.group(2))
    return values


def update_env(path: Path, values: dict[str, object]) -> list[str]:
    """Set *values* in the dotenv file at *path*.

    Existing keys are rewritten in place, new keys are appended. Returns the
    keys whose value actually changed.
    """
    lines = path.read_text().splitlines() if path.is_file() else []
    pending = {key: _format_value(value) for key, value in values.items()}
    current = parse_env(path)
    changed: list[str] = []

    for i, line in enumerate(lines):
        match = _LINE.match(line)
        if not match or match.group(1) not in pending:
            continue
        key = match.group(1)
        formatted = pending.pop(key)
        if _unquote(formatted) != current.get(key):
            lines[i] = f"{key}={formatted}"
            changed.append(key)

    if pending:
        if lines and lines[-1].strip():
            lines.append("")
        for key, formatted in pending.items():
            lines.append(f"{key}={formatted}")
            changed.append(key)

    if changed:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n")
    return changed

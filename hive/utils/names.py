"""Suggest alternative names when a workspace directory is already taken."""

from __future__ import annotations

import hashlib
import re
import time
from datetime import date
from typing import Callable

NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

SUFFIXES = ("app", "dev", "workspace", "kit", "core", "project")
PREFIXES = ("my", "new", "fx")
MAX_SUGGESTIONS = 5

_HASH_SUFFIX = re.compile(r"-[a-f0-9]{3}$")


def validate_name(name: str) -> str | None:
    """Return an error message for an invalid workspace name, else None."""
    if not name:
        return "Name cannot be empty"
    if not NAME_PATTERN.match(name):
        return "Name must be lowercase letters, numbers and single hyphens (e.g. my-app)"
    return None


def _candidates(name: str, kind: str) -> list[str]:
    candidates = [f"{name}-{suffix}" for suffix in SUFFIXES]
    now = str(time.time())
    for i in range(3):
        digest = hashlib.md5(f"{name}{now}{i}".encode()).hexdigest()
        candidates.append(f"{name}-{digest[:3]}")
    candidates.append(f"{name}-{date.today().year}")
    candidates.extend(f"{prefix}-{name}" for prefix in PREFIXES)
    candidates.append(f"{name}-{kind}")
    return candidates


def suggest_names(name: str, kind: str, is_available: Callable[[str], bool]) -> list[str]:
    """Up to five available alternatives for *name*, in preference order."""
    suggestions: list[str] = []
    for candidate in _candidates(name, kind):
        if candidate in suggestions or not is_available(candidate):
            continue
        suggestions.append(candidate)
        if len(suggestions) == MAX_SUGGESTIONS:
            break
    return suggestions


def score(name: str) -> int:
    """Shorter names win; known suffixes beat random hash suffixes."""
    value = -len(name)
    if any(name.endswith(f"-{suffix}") for suffix in SUFFIXES):
        value += 10
    if _HASH_SUFFIX.search(name):
        value -= 5
    return value


def best_suggestion(suggestions: list[str]) -> str | None:
    if not suggestions:
        return None
    return max(suggestions, key=score)

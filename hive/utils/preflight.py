"""Environment checks run before anything is generated."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from hive.utils import process


@dataclass
class CheckResult:
    """Outcome of a single preflight check."""

    name: str
    passed: bool
    message: str
    fix: str | None = None


def _version_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r"\d+", version)[:3])


def php_version() -> str | None:
    return process.output(["php", "-r", "echo PHP_VERSION;"])


def check_php(min_version: str = "8.2") -> CheckResult:
    version = php_version()
    if version is None:
        return CheckResult("PHP", False, "PHP is not installed", "Install PHP 8.2+ (macOS: brew install php)")
    if _version_tuple(version) < _version_tuple(min_version):
        return CheckResult(
            "PHP",
            False,
            f"PHP {version} is too old (requires {min_version}+)",
            f"Upgrade PHP to {min_version} or newer",
        )
    return CheckResult("PHP", True, f"PHP {version}")


def check_composer() -> CheckResult:
    version = process.output(["composer", "--version"])
    if version is None:
        return CheckResult(
            "Composer", False, "Composer is not installed", "Install Composer: https://getcomposer.org/download/"
        )
    return CheckResult("Composer", True, version.splitlines()[0])


def check_git() -> CheckResult:
    version = process.output(["git", "--version"])
    if version is None:
        return CheckResult("Git", False, "Git is not installed", "Install Git: https://git-scm.com/downloads")
    return CheckResult("Git", True, version)


def check_writable(path: Path) -> CheckResult:
    target = path if path.exists() else path.parent
    if target.exists() and os.access(target, os.W_OK):
        return CheckResult("Permissions", True, f"{target} is writable")
    return CheckResult("Permissions", False, f"Cannot write to {target}", f"Check permissions on {target}")


def run_preflight(
    target: Path | None = None,
    *,
    min_php_version: str = "8.2",
    require_php: bool = True,
) -> list[CheckResult]:
    """Run the checks in order, stopping after the first failure."""
    checks = []
    if require_php:
        checks += [lambda: check_php(min_php_version), check_composer]
    checks.append(check_git)
    if target is not None:
        checks.append(lambda: check_writable(target))

    results: list[CheckResult] = []
    for check in checks:
        result = check()
        results.append(result)
        if not result.passed:
            break
    return results

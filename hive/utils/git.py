"""Git operations used when creating a workspace."""

from __future__ import annotations

import subprocess
from pathlib import Path


def _run(args: list[str], cwd: Path, *, check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run a git command in *cwd* and return the result."""
    return subprocess.run(
        args,
        cwd=cwd,
        capture_output=True,
        text=True,
        check=check,
    )


def clone(url: str, dest: Path, depth: int | None = 1) -> None:
    """Clone *url* into *dest*. Raises CalledProcessError on failure."""
    args = ["git", "clone"]
    if depth:
        args += ["--depth", str(depth)]
    _run([*args, url, str(dest)], cwd=dest.parent)


def init(repo_path: Path, branch: str = "main") -> None:
    result = _run(["git", "init", "-b", branch], cwd=repo_path, check=False)
    if result.returncode != 0:
        # git < 2.28 has no -b
        _run(["git", "init"], cwd=repo_path)


def initial_commit(repo_path: Path, message: str = "Initial commit") -> bool:
    """Stage everything and commit. Returns False if git refused (e.g. no identity)."""
    _run(["git", "add", "-A"], cwd=repo_path)
    result = _run(["git", "commit", "-m", message], cwd=repo_path, check=False)
    return result.returncode == 0


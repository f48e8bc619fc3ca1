"""Subprocess and network helpers for driving external tools."""

from __future__ import annotations

import os
import re
import shlex
import shutil
import socket
import subprocess
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)

# Set by the main callback; echoes every command before it runs
verbose = False

MASK = "********"

_SENSITIVE = re.compile(r"auth|key|password|secret|token", re.IGNORECASE)


def redact(command: list[str] | str) -> str:
    """*command* as display text, with the values of credential arguments masked.

    Covers ``NAME=value`` assignments and ``--flag=value`` options whose
    name mentions an auth, key, password, secret or token.
    """
    if isinstance(command, str):
        try:
            args = shlex.split(command)
        except ValueError:
            return " ".join(command.split()[:2]) + " ..."
    else:
        args = list(command)

    parts = []
    for arg in args:
        name, sep, value = arg.partition("=")
        if sep and value and _SENSITIVE.search(name):
            parts.append(f"{shlex.quote(name)}={MASK}")
        else:
            parts.append(shlex.quote(arg))
    return " ".join(parts)


def _echo(args: list[str] | str, cwd: Path | None) -> None:
    if not verbose:
        return
    where = f" [dim](in {cwd})[/dim]" if cwd else ""
    console.print(f"    [dim]Executing: {escape(redact(args))}[/dim]{where}")


def _echo_stderr(result: subprocess.CompletedProcess[str]) -> subprocess.CompletedProcess[str]:
    if verbose and result.stderr and result.stderr.strip():
        for line in result.stderr.strip().splitlines():
            console.print(f"      [dim]{escape(line)}[/dim]")
    return result


def _env(extra: dict[str, str] | None) -> dict[str, str] | None:
    if not extra:
        return None
    return {**os.environ, **extra}


# ---------------------------------------------------------------------------
# Running commands
# ---------------------------------------------------------------------------

def run(
    args: list[str],
    cwd: Path | None = None,
    *,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *args* and capture its output.

    A missing binary or a timeout is reported as a failed CompletedProcess
    (exit code 127 or 124) instead of raising.
    """
    _echo(args, cwd)
    try:
        return _echo_stderr(
            subprocess.run(
                args,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=_env(env),
            )
        )
    except FileNotFoundError as exc:
        return subprocess.CompletedProcess(args, 127, "", str(exc))
    except subprocess.TimeoutExpired:
        return subprocess.CompletedProcess(args, 124, "", f"Timed out after {timeout}s")


def succeeds(args: list[str], cwd: Path | None = None, *, timeout: float | None = 30) -> bool:
    return run(args, cwd, timeout=timeout).returncode == 0


def output(args: list[str], cwd: Path | None = None, *, timeout: float | None = 30) -> str | None:
    """Return stripped stdout of *args*, or None if it failed."""
    result = run(args, cwd, timeout=timeout)
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def run_shell(
    command: str,
    cwd: Path,
    *,
    stream: bool = False,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a shell command line, capturing output unless *stream* is set."""
    _echo(command, cwd)
    try:
        return _echo_stderr(
            subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                capture_output=not stream,
                text=True,
                env=_env(env),
                timeout=timeout,
            )
        )
    except subprocess.TimeoutExpired:
        return subprocess.CompletedProcess(command, 124, "", f"Timed out after {timeout}s")


def run_streaming(args: list[str], cwd: Path, env: dict[str, str] | None = None) -> int:
    """Run *args* attached to the terminal. Returns the exit code."""
    _echo(args, cwd)
    try:
        return subprocess.run(args, cwd=cwd, env=_env(env)).returncode
    except FileNotFoundError:
        console.print(f"  [red]✗[/red] Command not found: [bold]{args[0]}[/bold]")
        return 127


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


# ---------------------------------------------------------------------------
# Network probes
# ---------------------------------------------------------------------------

def port_open(host: str, port: int, timeout: float = 1.0) -> bool:
    """True if something accepts TCP connections on host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def http_ok(url: str, timeout: float = 2.0) -> bool:
    """True if *url* answers with a 2xx or 3xx status."""
    try:
        resp = urlopen(url, timeout=timeout)
        return 200 <= resp.status < 400
    except (URLError, OSError, ValueError):
        return False


def find_available_port(start: int, host: str = "127.0.0.1", attempts: int = 100) -> int:
    """Return the first port at or above *start* that nothing listens on."""
    for port in range(start, start + attempts):
        if not port_open(host, port, timeout=0.2):
            return port
    return start

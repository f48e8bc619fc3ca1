"""Docker detection and ``docker compose`` lifecycle helpers."""

from __future__ import annotations

import platform
import time
from pathlib import Path

from rich.console import Console

from hive.utils import process

COMPOSE_FILENAME = "docker-compose.yml"

UP_TIMEOUT = 300
DOWN_TIMEOUT = 120

INSTALL_GUIDANCE: dict[str, list[str]] = {
    "macos": [
        "Install Docker Desktop for Mac:",
        "  https://docs.docker.com/desktop/install/mac-install/",
        "Or with Homebrew: [bold]brew install --cask docker[/bold]",
        "Then start Docker Desktop from Applications.",
    ],
    "linux": [
        "Install Docker Engine with the convenience script:",
        "  [bold]curl -fsSL https://get.docker.com | sh[/bold]",
        "Allow your user to run docker: [bold]sudo usermod -aG docker $USER[/bold]",
        "Start the daemon: [bold]sudo systemctl start docker[/bold]",
    ],
    "windows": [
        "Install Docker Desktop for Windows (WSL 2 backend recommended):",
        "  https://docs.docker.com/desktop/install/windows-install/",
        "Then start Docker Desktop from the Start menu.",
    ],
    "unknown": [
        "See the Docker installation guide for your platform:",
        "  https://docs.docker.com/get-docker/",
    ],
}


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def is_installed() -> bool:
    return process.succeeds(["docker", "--version"])


def is_running() -> bool:
    """True if the Docker daemon answers."""
    return process.succeeds(["docker", "ps"])


def is_compose_available() -> bool:
    return process.succeeds(["docker", "compose", "version"]) or process.succeeds(
        ["docker-compose", "--version"]
    )


def is_available() -> bool:
    """Docker is installed, the daemon is running, and compose works."""
    return is_installed() and is_running() and is_compose_available()


def detect_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    if system in ("linux", "windows"):
        return system
    return "unknown"


def show_install_guidance(console: Console) -> None:
    console.print("\n  [bold]Installing Docker[/bold]\n")
    for line in INSTALL_GUIDANCE[detect_os()]:
        console.print(f"    {line}")
    console.print()


# ---------------------------------------------------------------------------
# Compose lifecycle
# ---------------------------------------------------------------------------

def has_compose_file(path: Path) -> bool:
    return (path / COMPOSE_FILENAME).is_file()


def compose_up(path: Path) -> bool:
    """Start the stack in *path* detached."""
    return process.run(["docker", "compose", "up", "-d"], path, timeout=UP_TIMEOUT).returncode == 0


def compose_down(path: Path, volumes: bool = False) -> bool:
    args = ["docker", "compose", "down"]
    if volumes:
        args.append("-v")
    return process.run(args, path, timeout=DOWN_TIMEOUT).returncode == 0


def running_services(path: Path) -> list[str]:
    """Names of compose services currently running in *path*."""
    result = process.run(
        ["docker", "compose", "ps", "--services", "--filter", "status=running"], path, timeout=30
    )
    if result.returncode != 0:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def compose_exec(path: Path, service: str, args: list[str], timeout: float = 60):
    return process.run(["docker", "compose", "exec", "-T", service, *args], path, timeout=timeout)


def wait_for_service(
    path: Path,
    service: str,
    max_attempts: int = 30,
    interval: float = 2.0,
) -> bool:
    """Poll until *service* accepts an exec, up to *max_attempts* tries.

    Returns False once the attempts are exhausted.
    """
    for attempt in range(max_attempts):
        if compose_exec(path, service, ["echo", "ready"], timeout=10).returncode == 0:
            return True
        if attempt < max_attempts - 1:
            time.sleep(interval)
    return False

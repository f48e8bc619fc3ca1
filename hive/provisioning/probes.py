"""Local health checks and post-start hooks for infrastructure backends."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from hive.utils import docker, process


def _port(values: Mapping[str, str], default: int) -> int:
    try:
        return int(values.get("port") or default)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Probes: values -> reachable?
# ---------------------------------------------------------------------------

def tcp(default_port: int):
    def _probe(values: Mapping[str, str]) -> bool:
        return process.port_open(values.get("host") or "127.0.0.1", _port(values, default_port))

    return _probe


def redis(values: Mapping[str, str]) -> bool:
    """PING via redis-cli, or a plain TCP connect when the client is absent."""
    host = values.get("host") or "127.0.0.1"
    port = _port(values, 6379)
    if not process.command_exists("redis-cli"):
        return process.port_open(host, port)
    args = ["redis-cli", "-h", host, "-p", str(port)]
    if values.get("password"):
        args += ["-a", values["password"], "--no-auth-warning"]
    return process.output([*args, "ping"], timeout=5) == "PONG"


def mysql(values: Mapping[str, str]) -> bool:
    """mysqladmin ping answers even when the app user does not exist yet."""
    host = values.get("host") or "127.0.0.1"
    port = _port(values, 3306)
    if not process.command_exists("mysqladmin"):
        return process.port_open(host, port)
    return process.succeeds(["mysqladmin", "ping", "-h", host, "-P", str(port), "--silent"], timeout=10)


def postgres(values: Mapping[str, str]) -> bool:
    host = values.get("host") or "127.0.0.1"
    port = _port(values, 5432)
    if not process.command_exists("pg_isready"):
        return process.port_open(host, port)
    return process.succeeds(["pg_isready", "-h", host, "-p", str(port)], timeout=10)


def http(path: str, default_port: int):
    """Probe an HTTP health endpoint relative to host:port."""

    def _probe(values: Mapping[str, str]) -> bool:
        host = values.get("host") or "127.0.0.1"
        if not host.startswith("http"):
            host = f"http://{host}"
        return process.http_ok(f"{host}:{_port(values, default_port)}{path}")

    return _probe


# ---------------------------------------------------------------------------
# Post-start hooks: (app_path, values) -> ok?
# ---------------------------------------------------------------------------

def create_minio_bucket(app_path: Path, values: Mapping[str, str]) -> bool:
    """Create the configured bucket inside the running minio container."""
    alias = docker.compose_exec(
        app_path,
        "minio",
        ["mc", "alias", "set", "local", "http://localhost:9000", values["access_key"], values["secret_key"]],
    )
    if alias.returncode != 0:
        return False
    made = docker.compose_exec(app_path, "minio", ["mc", "mb", f"local/{values['bucket']}"])
    return made.returncode == 0 or "already" in (made.stdout + made.stderr).lower()


def create_mysql_database(values: Mapping[str, str], admin_user: str, admin_password: str) -> bool:
    """Create the database and user on a local MySQL/MariaDB server."""
    name, user, password = values["name"], values["user"], values["password"].replace("'", "''")
    statements = [
        f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;",
        f"CREATE USER IF NOT EXISTS '{user}'@'%' IDENTIFIED BY '{password}';",
        f"GRANT ALL PRIVILEGES ON `{name}`.* TO '{user}'@'%';",
        "FLUSH PRIVILEGES;",
    ]
    args = ["mysql", "-h", values.get("host") or "127.0.0.1", "-P", str(_port(values, 3306)), "-u", admin_user]
    if admin_password:
        args.append(f"-p{admin_password}")
    return process.succeeds([*args, "-e", " ".join(statements)], timeout=30)

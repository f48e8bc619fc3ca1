"""The Docker-first provisioning decision tree."""

from __future__ import annotations

import re

import pytest

from hive.errors import ProvisioningError
from hive.provisioning import (
    BACKENDS,
    ConnectionConfig,
    Provisioner,
    generate_secret,
    get_backend,
    merge_config,
    merge_env,
    setup_infrastructure,
)
from hive.scaffold.app_types import get_app_type
from hive.utils import docker, process
from hive.utils.compose import load_compose
from hive.utils.config import HealthCheckSettings, HiveSettings
from tests.conftest import ScriptedPrompts


@pytest.fixture
def docker_ok(monkeypatch):
    """Docker is available and every compose call succeeds."""
    calls = {"up": 0, "wait": []}

    def compose_up(path):
        calls["up"] += 1
        return True

    def wait_for_service(path, service, max_attempts=30, interval=2.0):
        calls["wait"].append((service, max_attempts, interval))
        return True

    monkeypatch.setattr(docker, "is_available", lambda: True)
    monkeypatch.setattr(docker, "is_installed", lambda: True)
    monkeypatch.setattr(docker, "compose_up", compose_up)
    monkeypatch.setattr(docker, "wait_for_service", wait_for_service)
    monkeypatch.setattr(process, "find_available_port", lambda start, host="127.0.0.1", attempts=100: start)
    return calls


@pytest.fixture
def no_docker(monkeypatch):
    monkeypatch.setattr(docker, "is_available", lambda: False)
    monkeypatch.setattr(docker, "is_installed", lambda: False)


def _provisioner(tmp_path, answers=None, **kwargs):
    prompts = ScriptedPrompts(answers)
    return Provisioner(prompts, "shop", tmp_path / "shop", **kwargs), prompts


def test_generate_secret():
    secret = generate_secret()
    assert re.fullmatch(r"[0-9a-f]{32}", secret)
    assert secret != generate_secret()


def test_get_backend_unknown():
    with pytest.raises(KeyError):
        get_backend("oracle")


class TestDockerFlow:

    def test_redis_in_docker(self, tmp_path, docker_ok):
        provisioner, _ = _provisioner(tmp_path, prefer_docker=True)

        config = provisioner.provision("cache", "redis")

        assert config.using_docker
        assert config.values["host"] == "localhost"
        assert config.values["port"] == "6379"
        assert re.fullmatch(r"[0-9a-f]{32}", config.values["password"])
        env = config.to_env()
        assert env["CACHE_STORE"] == "redis"
        assert env["REDIS_PASSWORD"] == config.values["password"]

        services = load_compose(tmp_path / "shop")["services"]
        assert services["redis"]["container_name"] == "phphive-shop-redis"
        assert config.values["password"] in " ".join(services["redis"]["command"])

    def test_health_check_settings_are_used(self, tmp_path, docker_ok):
        settings = HiveSettings(health_check=HealthCheckSettings(max_attempts=5, interval=0.5))
        provisioner, _ = _provisioner(tmp_path, prefer_docker=True, settings=settings)
        provisioner.provision("cache", "redis")
        assert docker_ok["wait"] == [("redis", 5, 0.5)]

    def test_mysql_with_admin_tool(self, tmp_path, docker_ok):
        provisioner, _ = _provisioner(tmp_path, {"Database name": "shop_db"}, prefer_docker=True)

        config = provisioner.provision("database", "mysql")

        assert config.values["name"] == "shop_db"
        assert config.values["user"] == "shop_user"
        services = load_compose(tmp_path / "shop")["services"]
        assert set(services) == {"mysql", "phpmyadmin"}
        assert services["mysql"]["environment"]["MYSQL_DATABASE"] == "shop_db"
        assert config.to_dict()["database_backend"] == "mysql"
        assert config.to_dict()["db_name"] == "shop_db"

    def test_admin_tool_can_be_declined(self, tmp_path, docker_ok):
        provisioner, _ = _provisioner(tmp_path, {"Include phpMyAdmin": False}, prefer_docker=True)
        provisioner.provision("database", "mysql")
        assert set(load_compose(tmp_path / "shop")["services"]) == {"mysql"}

    def test_second_run_keeps_existing_service(self, tmp_path, docker_ok, monkeypatch):
        provisioner, prompts = _provisioner(tmp_path, prefer_docker=True)
        first = provisioner.provision("cache", "redis")
        compose = (tmp_path / "shop" / "docker-compose.yml").read_text()

        # the first container now holds 6379
        monkeypatch.setattr(process, "find_available_port", lambda start, host="127.0.0.1", attempts=100: start + 1)
        second = provisioner.provision("cache", "redis")

        assert (tmp_path / "shop" / "docker-compose.yml").read_text() == compose
        assert "Reusing the 'redis' service" in prompts.output
        assert second.using_docker
        assert second.values == first.values
        redis = load_compose(tmp_path / "shop")["services"]["redis"]
        assert second.values["password"] in redis["command"]
        assert redis["ports"] == [f"{second.values['port']}:6379"]
        assert docker_ok["up"] == 2

    def test_existing_database_service_is_read_back(self, tmp_path, docker_ok):
        provisioner, _ = _provisioner(
            tmp_path, {"Database name": "shop_db", "Include phpMyAdmin": False}, prefer_docker=True
        )
        first = provisioner.provision("database", "mysql")

        rerun, prompts = _provisioner(tmp_path, prefer_docker=True)
        second = rerun.provision("database", "mysql")

        assert second.values == first.values
        assert second.to_env()["DB_DATABASE"] == "shop_db"
        assert not any("Database name" in label for label in prompts.asked)

    def test_existing_service_without_readable_secret(self, tmp_path, docker_ok):
        app = tmp_path / "shop"
        app.mkdir()
        (app / "docker-compose.yml").write_text(
            "services:\n  redis:\n    image: redis:7-alpine\n    ports:\n      - '6400:6379'\n"
        )
        provisioner, _ = _provisioner(tmp_path, prefer_docker=True)

        with pytest.raises(ProvisioningError, match="password could not be read"):
            provisioner.provision("cache", "redis")
        assert docker_ok["up"] == 0

    def test_failed_start_falls_back_to_manual(self, tmp_path, docker_ok, monkeypatch):
        monkeypatch.setattr(docker, "compose_up", lambda path: False)
        provisioner, prompts = _provisioner(tmp_path, prefer_docker=True)

        config = provisioner.provision("cache", "redis")

        assert not config.using_docker
        assert config.values["host"] == "127.0.0.1"
        assert "Falling back" in prompts.output

    def test_declining_docker_uses_local(self, tmp_path, docker_ok):
        provisioner, prompts = _provisioner(tmp_path, {"Use Docker": False})
        config = provisioner.provision("cache", "redis")
        assert not config.using_docker
        assert docker_ok["up"] == 0
        assert any("already running locally" in label for label in prompts.asked)


class TestLocalFlow:

    def test_reachable_local_server(self, tmp_path, no_docker, monkeypatch):
        monkeypatch.setattr(process, "command_exists", lambda name: False)
        monkeypatch.setattr(process, "port_open", lambda host, port, timeout=1.0: True)
        provisioner, prompts = _provisioner(tmp_path, {"already running locally": True})

        config = provisioner.provision("database", "mysql")

        assert not config.using_docker
        assert config.values["host"] == "127.0.0.1"
        assert config.values["port"] == "3306"
        assert any("Create database" in label for label in prompts.asked)

    def test_unreachable_local_server_asks_manually(self, tmp_path, no_docker, monkeypatch):
        monkeypatch.setattr(process, "command_exists", lambda name: False)
        monkeypatch.setattr(process, "port_open", lambda host, port, timeout=1.0: False)
        monkeypatch.setattr(docker, "detect_os", lambda: "linux")
        provisioner, prompts = _provisioner(
            tmp_path, {"already running locally": True, "Database host": "db.internal"}
        )

        config = provisioner.provision("database", "postgresql")

        assert config.values["host"] == "db.internal"
        assert "Could not connect" in prompts.output
        assert "sudo apt-get install postgresql" in prompts.output

    def test_managed_backend_skips_docker(self, tmp_path, docker_ok):
        provisioner, prompts = _provisioner(tmp_path, {"Bucket name": "assets"})

        config = provisioner.provision("storage", "s3")

        assert docker_ok["up"] == 0
        assert config.to_env()["FILESYSTEM_DISK"] == "s3"
        assert config.to_env()["AWS_BUCKET"] == "assets"
        assert "managed service" in prompts.output

    def test_no_docker_flag(self, tmp_path, docker_ok):
        provisioner, _ = _provisioner(tmp_path, prefer_docker=False)
        config = provisioner.provision("cache", "redis")
        assert not config.using_docker
        assert docker_ok["up"] == 0


class TestSetupInfrastructure:

    def test_laravel_defaults(self, tmp_path, no_docker):
        provisioner, _ = _provisioner(tmp_path)
        configs = setup_infrastructure(provisioner, get_app_type("laravel"))
        assert [(c.category, c.backend.key) for c in configs] == [("database", "mysql"), ("cache", "redis")]

    def test_queue_reuses_cache_redis(self, tmp_path, no_docker):
        provisioner, _ = _provisioner(tmp_path, {"Configure a queue backend": True})

        configs = setup_infrastructure(provisioner, get_app_type("laravel"))

        cache, queue = configs[1], configs[2]
        assert queue.category == "queue"
        assert queue.values == cache.values
        env = merge_env(configs)
        assert env["QUEUE_CONNECTION"] == "redis"
        assert env["CACHE_STORE"] == "redis"

    def test_skeleton_needs_nothing(self, tmp_path, no_docker):
        provisioner, prompts = _provisioner(tmp_path)
        assert setup_infrastructure(provisioner, get_app_type("skeleton")) == []
        assert prompts.asked == []

    def test_merge_config(self):
        redis = BACKENDS["redis"]
        configs = [
            ConnectionConfig(redis, "cache", redis.defaults("shop"), using_docker=True),
            ConnectionConfig(BACKENDS["sqlite"], "database", {"name": "database/database.sqlite"}),
        ]
        data = merge_config(configs)
        assert data["cache_backend"] == "redis"
        assert data["database_backend"] == "sqlite"
        assert data["db_name"] == "database/database.sqlite"
        assert data["using_docker"] is True

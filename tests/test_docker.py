"""Docker detection and service readiness polling."""

from __future__ import annotations

import subprocess

import pytest

from hive.utils import docker, process


@pytest.fixture
def sleeps(monkeypatch):
    calls: list[float] = []
    monkeypatch.setattr(docker.time, "sleep", calls.append)
    return calls


def _exec_results(monkeypatch, codes):
    codes = iter(codes)
    calls = []

    def fake_exec(path, service, args, timeout=60):
        calls.append((service, args))
        return subprocess.CompletedProcess(args, next(codes), "", "")

    monkeypatch.setattr(docker, "compose_exec", fake_exec)
    return calls


class TestComposeAvailable:

    def test_plugin_is_tried_first(self, monkeypatch):
        calls = []
        monkeypatch.setattr(process, "succeeds", lambda args, cwd=None, **kw: calls.append(args) or True)

        assert docker.is_compose_available()
        assert calls == [["docker", "compose", "version"]]

    def test_falls_back_to_standalone_binary(self, monkeypatch):
        calls = []

        def succeeds(args, cwd=None, **kw):
            calls.append(args)
            return args[0] == "docker-compose"

        monkeypatch.setattr(process, "succeeds", succeeds)

        assert docker.is_compose_available()
        assert calls == [["docker", "compose", "version"], ["docker-compose", "--version"]]

    def test_neither_available(self, monkeypatch):
        monkeypatch.setattr(process, "succeeds", lambda args, cwd=None, **kw: False)
        assert not docker.is_compose_available()


class TestWaitForService:

    def test_ready_after_retries(self, monkeypatch, tmp_path, sleeps):
        calls = _exec_results(monkeypatch, [1, 1, 0])

        assert docker.wait_for_service(tmp_path, "redis", max_attempts=5, interval=0.5)
        assert len(calls) == 3
        assert calls[0] == ("redis", ["echo", "ready"])
        assert sleeps == [0.5, 0.5]

    def test_gives_up_after_max_attempts(self, monkeypatch, tmp_path, sleeps):
        calls = _exec_results(monkeypatch, [1] * 10)

        assert docker.wait_for_service(tmp_path, "mysql", max_attempts=4, interval=0.25) is False
        assert len(calls) == 4
        assert sleeps == [0.25, 0.25, 0.25]

    def test_missing_docker_binary_returns_false(self, monkeypatch, tmp_path, sleeps):
        def missing(*args, **kwargs):
            raise FileNotFoundError("docker")

        monkeypatch.setattr(subprocess, "run", missing)

        assert docker.wait_for_service(tmp_path, "redis", max_attempts=2, interval=1.0) is False
        assert sleeps == [1.0]

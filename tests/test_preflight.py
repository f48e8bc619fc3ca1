"""Environment checks."""

from __future__ import annotations

from hive.utils import process
from hive.utils.preflight import check_php, check_writable, run_preflight


def _tools(monkeypatch, **versions):
    """Pretend the given tools answer with the given version output."""
    lookup = {"php": versions.get("php"), "composer": versions.get("composer"), "git": versions.get("git")}
    monkeypatch.setattr(process, "output", lambda args, cwd=None, **kw: lookup.get(args[0]))


def test_php_ok(monkeypatch):
    _tools(monkeypatch, php="8.3.4")
    result = check_php("8.2")
    assert result.passed
    assert result.message == "PHP 8.3.4"


def test_php_too_old(monkeypatch):
    _tools(monkeypatch, php="8.1.27")
    result = check_php("8.2")
    assert not result.passed
    assert "8.1.27" in result.message
    assert result.fix


def test_php_missing(monkeypatch):
    _tools(monkeypatch)
    assert not check_php().passed


def test_stops_at_first_failure(monkeypatch, tmp_path):
    _tools(monkeypatch, php="8.3.0", git="git version 2.44.0")
    results = run_preflight(tmp_path, min_php_version="8.2")
    assert [r.name for r in results] == ["PHP", "Composer"]
    assert not results[-1].passed


def test_all_pass(monkeypatch, tmp_path):
    _tools(monkeypatch, php="8.3.0", composer="Composer version 2.7.1", git="git version 2.44.0")
    results = run_preflight(tmp_path / "new-app", min_php_version="8.2")
    assert [r.name for r in results] == ["PHP", "Composer", "Git", "Permissions"]
    assert all(r.passed for r in results)


def test_without_php(monkeypatch, tmp_path):
    _tools(monkeypatch, git="git version 2.44.0")
    results = run_preflight(tmp_path, require_php=False)
    assert [r.name for r in results] == ["Git", "Permissions"]


def test_writable_checks_parent(tmp_path):
    assert check_writable(tmp_path / "not-yet").passed

"""Monorepo root detection and workspace discovery."""

from __future__ import annotations

import pytest

from hive.errors import MonorepoNotFoundError, WorkspaceNotFoundError
from hive.utils.monorepo import (
    detect_framework,
    discover_workspaces,
    find_monorepo_root,
    get_apps,
    get_packages,
    get_workspace,
    has_workspace,
    turbo_tasks,
    workspace_patterns,
)
from tests.conftest import write_package


class TestFindMonorepoRoot:

    def test_finds_root_from_nested_directory(self, populated):
        nested = populated / "apps" / "api" / "src"
        nested.mkdir(parents=True)
        assert find_monorepo_root(nested) == populated.resolve()

    def test_defaults_to_cwd(self, monorepo):
        assert find_monorepo_root() == monorepo.resolve()

    def test_requires_both_marker_files(self, tmp_path):
        (tmp_path / "turbo.json").write_text("{}")
        with pytest.raises(MonorepoNotFoundError) as exc_info:
            find_monorepo_root(tmp_path)
        assert "turbo.json and pnpm-workspace.yaml" in str(exc_info.value)

    def test_not_found_is_a_file_not_found_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_monorepo_root(tmp_path)


class TestWorkspacePatterns:

    def test_strips_globs_and_skips_negations(self, monorepo):
        (monorepo / "pnpm-workspace.yaml").write_text(
            "packages:\n  - apps/*\n  - packages/**\n  - '!packages/ignored'\n  - tools\n"
        )
        assert workspace_patterns(monorepo) == ["apps", "packages", "tools"]

    def test_invalid_yaml_yields_no_patterns(self, monorepo):
        (monorepo / "pnpm-workspace.yaml").write_text("packages: [unclosed")
        assert workspace_patterns(monorepo) == []


class TestDiscoverWorkspaces:

    def test_discovers_apps_and_packages(self, populated):
        workspaces = discover_workspaces(populated)
        assert [ws.name for ws in workspaces] == ["api", "logger", "utils"]
        assert [ws.name for ws in get_apps(workspaces)] == ["api"]
        assert [ws.name for ws in get_packages(workspaces)] == ["logger", "utils"]

    def test_workspace_fields(self, populated):
        api = get_workspace(discover_workspaces(populated), "api")
        assert api.type == "app"
        assert api.package_name == "@phphive/api"
        assert api.has_composer is True
        assert api.version == "1.0.0"
        assert api.to_dict()["packageName"] == "@phphive/api"

    def test_ignores_directories_without_package_json(self, populated):
        (populated / "packages" / "empty").mkdir()
        assert not has_workspace(discover_workspaces(populated), "empty")

    def test_package_name_defaults_to_directory(self, monorepo):
        path = monorepo / "packages" / "nameless"
        path.mkdir()
        (path / "package.json").write_text("{}")
        ws = get_workspace(discover_workspaces(monorepo), "nameless")
        assert ws.package_name == "nameless"

    def test_custom_apps_dir(self, monorepo):
        (monorepo / "pnpm-workspace.yaml").write_text("packages:\n  - services/*\n")
        write_package(monorepo / "services" / "billing", "billing")
        workspaces = discover_workspaces(monorepo, apps_dir="services")
        assert workspaces[0].is_app


class TestLookup:

    def test_lookup_by_package_name(self, populated):
        ws = get_workspace(discover_workspaces(populated), "@phphive/utils")
        assert ws.name == "utils"

    def test_missing_workspace_raises(self, populated):
        with pytest.raises(WorkspaceNotFoundError) as exc_info:
            get_workspace(discover_workspaces(populated), "nope")
        assert str(exc_info.value) == "Workspace 'nope' not found"

    def test_missing_workspace_is_a_key_error(self, populated):
        with pytest.raises(KeyError):
            get_workspace(discover_workspaces(populated), "nope")


class TestDetectFramework:

    def test_laravel(self, populated):
        api = get_workspace(discover_workspaces(populated), "api")
        assert detect_framework(api) == "Laravel"

    def test_symfony_and_magento(self, monorepo):
        write_package(
            monorepo / "apps" / "shop",
            "shop",
            composer={"require": {"magento/product-community-edition": "2.4.7"}},
        )
        write_package(
            monorepo / "apps" / "admin",
            "admin",
            composer={"require": {"symfony/framework-bundle": "^7.2"}},
        )
        workspaces = discover_workspaces(monorepo)
        assert detect_framework(get_workspace(workspaces, "shop")) == "Magento"
        assert detect_framework(get_workspace(workspaces, "admin")) == "Symfony"

    def test_no_composer(self, populated):
        logger = get_workspace(discover_workspaces(populated), "logger")
        assert detect_framework(logger) is None


def test_turbo_tasks(monorepo):
    assert turbo_tasks(monorepo) == ["build", "test", "lint", "publish"]

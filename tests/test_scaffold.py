"""Stub processing and the app and package types."""

from __future__ import annotations

import json

import pytest

from hive.provisioning import BACKENDS, ConnectionConfig, merge_config
from hive.scaffold.app_types import APP_TYPES, get_app_type
from hive.scaffold.package_types import get_package_type
from hive.scaffold.stubs import copy_stubs, register_workspace, studly


def test_studly():
    assert studly("my-cool-app") == "MyCoolApp"
    assert studly("api") == "Api"


class TestCopyStubs:

    def test_renders_and_strips_suffix(self, tmp_path):
        source = tmp_path / "stubs"
        (source / "src").mkdir(parents=True)
        (source / "src" / "Thing.php.stub").write_text("namespace {{NAMESPACE}};\n")
        (source / "README.md.stub").write_text("# {{NAME}}\n")

        written = copy_stubs(source, tmp_path / "out", {"NAMESPACE": "Acme\\Thing", "NAME": "thing"})

        assert sorted(written) == ["README.md", "src/Thing.php"]
        assert (tmp_path / "out" / "src" / "Thing.php").read_text() == "namespace Acme\\Thing;\n"

    def test_json_values_are_escaped(self, tmp_path):
        source = tmp_path / "stubs"
        source.mkdir()
        (source / "composer.json.stub").write_text('{"autoload": {"psr-4": {"{{NAMESPACE}}\\\\": "src/"}}}')

        copy_stubs(source, tmp_path / "out", {"NAMESPACE": "Acme\\Thing"})

        data = json.loads((tmp_path / "out" / "composer.json").read_text())
        assert data["autoload"]["psr-4"] == {"Acme\\Thing\\": "src/"}

    def test_append_is_idempotent(self, tmp_path):
        source = tmp_path / "stubs"
        source.mkdir()
        (source / ".gitignore.append.stub").write_text("/.hive\n")
        out = tmp_path / "out"
        out.mkdir()
        (out / ".gitignore").write_text("/vendor\n")

        assert copy_stubs(source, out, {}) == [".gitignore"]
        assert copy_stubs(source, out, {}) == []
        assert (out / ".gitignore").read_text() == "/vendor\n\n/.hive\n"

    def test_renames(self, tmp_path):
        source = tmp_path / "stubs"
        (source / "src").mkdir(parents=True)
        (source / "src" / "Package.php.stub").write_text("class {{CLASS}} {}\n")

        written = copy_stubs(source, tmp_path / "out", {"CLASS": "Logger"}, {"src/Package.php": "src/{{CLASS}}.php"})

        assert written == ["src/Logger.php"]


def test_register_workspace_keeps_existing_scripts(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({"name": "laravel", "scripts": {"dev": "vite"}}))

    register_workspace(tmp_path, "@phphive/shop", {"dev": "php artisan serve", "test": "php artisan test"}, "Shop")

    data = json.loads((tmp_path / "package.json").read_text())
    assert data["name"] == "@phphive/shop"
    assert data["scripts"] == {"dev": "vite", "test": "php artisan test"}
    assert data["private"] is True
    assert data["description"] == "Shop"


class TestPackageTypes:

    def test_variables(self):
        variables = get_package_type("skeleton").variables("http-client", vendor="acme")
        assert variables["COMPOSER_PACKAGE_NAME"] == "acme/http-client"
        assert variables["NPM_PACKAGE_NAME"] == "@acme/http-client"
        assert variables["NAMESPACE"] == "Acme\\HttpClient"

    def test_default_vendor_namespace(self):
        assert get_package_type("laravel").variables("logger")["NAMESPACE"] == "PhpHive\\Logger"

    def test_magento_module_name(self):
        assert get_package_type("magento").variables("checkout")["MODULE_NAME"] == "PhpHive_Checkout"

    @pytest.mark.parametrize("key", ["laravel", "symfony", "magento", "skeleton"])
    def test_stubs_render(self, key, tmp_path):
        kind = get_package_type(key)
        written = copy_stubs(kind.stub_dir(), tmp_path, kind.variables("logger"), kind.renames)
        assert "composer.json" in written
        assert json.loads((tmp_path / "composer.json").read_text())["name"] == "phphive/logger"
        assert json.loads((tmp_path / "package.json").read_text())["name"] == "@phphive/logger"
        assert not list(tmp_path.rglob("*.stub"))

    def test_unknown(self):
        with pytest.raises(KeyError):
            get_package_type("wordpress")


class TestAppTypes:

    def test_registry(self):
        assert list(APP_TYPES) == ["laravel", "symfony", "magento", "skeleton"]
        with pytest.raises(KeyError):
            get_app_type("drupal")

    def test_infrastructure_support(self):
        assert get_app_type("laravel").has_infrastructure
        assert not get_app_type("skeleton").has_infrastructure
        assert get_app_type("magento").databases == ("mysql", "mariadb")

    def test_laravel_migrates_only_with_database(self, quiet_prompts):
        kind = get_app_type("laravel")
        config = kind.collect_configuration(quiet_prompts, "shop")
        assert "php artisan migrate --force" not in kind.post_install_commands(config)
        config["database_backend"] = "mysql"
        assert kind.post_install_commands(config)[-1] == "php artisan migrate --force"
        assert kind.install_command(config).startswith("composer create-project laravel/laravel:12.x")

    def test_laravel_env(self, quiet_prompts):
        kind = get_app_type("laravel")
        redis = ConnectionConfig(BACKENDS["redis"], "cache", BACKENDS["redis"].defaults("shop"))
        config = kind.collect_configuration(quiet_prompts, "shop")
        config.update(merge_config([redis]))

        env = kind.env_values(config, redis.to_env())

        assert env["APP_NAME"] == "shop"
        assert env["CACHE_STORE"] == "redis"
        assert env["SESSION_DRIVER"] == "redis"

    def test_symfony_database_url(self, quiet_prompts):
        kind = get_app_type("symfony")
        mysql = BACKENDS["mysql"]
        values = mysql.defaults("shop")
        values["password"] = "pw"
        db = ConnectionConfig(mysql, "database", values)
        config = kind.collect_configuration(quiet_prompts, "shop")
        config.update(merge_config([db]))

        env = kind.env_values(config, db.to_env())

        assert env["DATABASE_URL"] == (
            "mysql://shop_user:pw@127.0.0.1:3306/shop?serverVersion=8.0&charset=utf8mb4"
        )
        assert not any(key.startswith("DB_") for key in env)

    def test_magento_writes_no_env(self, quiet_prompts):
        kind = get_app_type("magento")
        config = kind.collect_configuration(quiet_prompts, "store")
        assert kind.env_values(config, {"DB_HOST": "x"}) == {}
        assert kind.post_install_commands(config)[0].startswith("bin/magento setup:install")

    def test_skeleton_stubs(self, quiet_prompts, tmp_path):
        kind = get_app_type("skeleton")
        config = kind.collect_configuration(quiet_prompts, "tool-box")
        written = copy_stubs(kind.stub_dir(), tmp_path, kind.stub_variables(config))
        assert "composer.json" in written
        composer = json.loads((tmp_path / "composer.json").read_text())
        assert composer["name"] == "phphive/tool-box"
        assert kind.post_install_commands(config) == ["composer install --no-interaction", "composer test"]

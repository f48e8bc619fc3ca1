"""
hive/scaffold/app_types.py - Application types for make:app

An app type decides which questions to ask, how the framework is installed,
what runs afterwards, and which infrastructure it can use.
"""

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Any

from hive.provisioning import generate_secret
from hive.scaffold.stubs import stub_path, studly
from hive.utils.compose import normalize_name
from hive.utils.prompts import Prompts


class AppType:
    """Base class; subclasses fill in the framework specifics."""

    key = ""
    name = ""
    description = ""
    databases: tuple[str, ...] = ()
    supports_cache = False
    supports_queue = False
    supports_search = False
    supports_storage = False
    scripts: dict[str, str] = {}

    # -- Configuration ------------------------------------------------------

    def collect_configuration(self, prompts: Prompts, name: str, description: str | None = None) -> dict[str, Any]:
        return {
            "name": name,
            "description": description or f"Application: {name}",
        }

    @property
    def has_infrastructure(self) -> bool:
        return bool(self.databases) or any(
            (self.supports_cache, self.supports_queue, self.supports_search, self.supports_storage)
        )

    # -- Installation -------------------------------------------------------

    def install_command(self, config: dict[str, Any]) -> str | None:
        return None

    def post_install_commands(self, config: dict[str, Any]) -> list[str]:
        return []

    # -- Templates ----------------------------------------------------------

    def stub_dir(self) -> Path:
        return stub_path("apps", self.key)

    def stub_variables(self, config: dict[str, Any], vendor: str = "phphive") -> dict[str, str]:
        name = config["name"]
        normalized = normalize_name(name)
        return {
            "APP_NAME": name,
            "APP_NAME_NORMALIZED": normalized,
            "NAMESPACE": studly(name),
            "PACKAGE_NAME": f"{vendor}/{normalized}",
            "DESCRIPTION": config.get("description") or f"Application: {name}",
            "PHP_VERSION": config.get("php_version", "8.3"),
        }

    def env_values(self, config: dict[str, Any], infra_env: dict[str, str]) -> dict[str, str]:
        """Values written to the app's .env after provisioning."""
        return dict(infra_env)

    def next_steps(self, name: str, apps_dir: str = "apps") -> list[str]:
        return [f"cd {apps_dir}/{name}", "hive dev --workspace " + name]


# ---------------------------------------------------------------------------
# Laravel
# ---------------------------------------------------------------------------

class LaravelAppType(AppType):
    key = "laravel"
    name = "Laravel"
    description = "Full-stack PHP framework with Eloquent ORM and Artisan"
    databases = ("mysql", "postgresql", "sqlite")
    supports_cache = True
    supports_queue = True
    supports_storage = True
    scripts = {"dev": "php artisan serve", "test": "php artisan test", "lint": "vendor/bin/pint --test"}

    OPTIONAL_PACKAGES = {
        "horizon": ("laravel/horizon", "php artisan horizon:install"),
        "telescope": ("laravel/telescope", "php artisan telescope:install"),
        "sanctum": ("laravel/sanctum", None),
        "octane": ("laravel/octane", "php artisan octane:install --server=frankenphp"),
    }

    def collect_configuration(self, prompts, name, description=None):
        config = super().collect_configuration(prompts, name, description)
        config["laravel_version"] = prompts.select(
            "Laravel version",
            {"12": "Laravel 12 (latest)", "11": "Laravel 11", "10": "Laravel 10"},
            default="12",
        )
        config["starter_kit"] = prompts.select(
            "Starter kit",
            {"none": "None", "breeze": "Laravel Breeze", "jetstream": "Laravel Jetstream"},
            default="none",
        )
        for package in self.OPTIONAL_PACKAGES:
            config[f"install_{package}"] = prompts.confirm(f"Install Laravel {package.title()}?", False)
        return config

    def install_command(self, config):
        version = config.get("laravel_version", "12")
        return f"composer create-project laravel/laravel:{version}.x . --prefer-dist --no-interaction"

    def post_install_commands(self, config):
        commands = ["php artisan key:generate --ansi"]
        kit = config.get("starter_kit", "none")
        if kit == "breeze":
            commands += ["composer require laravel/breeze --dev", "php artisan breeze:install blade"]
        elif kit == "jetstream":
            commands += ["composer require laravel/jetstream", "php artisan jetstream:install livewire"]
        for package, (requirement, setup) in self.OPTIONAL_PACKAGES.items():
            if config.get(f"install_{package}"):
                commands.append(f"composer require {requirement}")
                if setup:
                    commands.append(setup)
        if config.get("database_backend"):
            commands.append("php artisan migrate --force")
        return commands

    def env_values(self, config, infra_env):
        env = {
            "APP_NAME": config["name"],
            "APP_ENV": "local",
            "APP_DEBUG": "true",
            "APP_URL": config.get("app_url", "http://localhost"),
        }
        env.update(infra_env)
        if config.get("cache_backend") == "redis":
            env["SESSION_DRIVER"] = "redis"
        return env


# ---------------------------------------------------------------------------
# Symfony
# ---------------------------------------------------------------------------

class SymfonyAppType(AppType):
    key = "symfony"
    name = "Symfony"
    description = "Flexible PHP framework built from reusable components"
    databases = ("mysql", "postgresql", "sqlite")
    supports_cache = True
    supports_queue = True
    supports_storage = True
    scripts = {"dev": "php -S localhost:8000 -t public", "test": "php bin/phpunit"}

    def collect_configuration(self, prompts, name, description=None):
        config = super().collect_configuration(prompts, name, description)
        config["symfony_version"] = prompts.select(
            "Symfony version",
            {"7.2": "Symfony 7.2", "7.1": "Symfony 7.1", "6.4": "Symfony 6.4 (LTS)"},
            default="7.1",
        )
        config["project_type"] = prompts.select(
            "Project type",
            {"webapp": "Full web application", "skeleton": "Microservice or API"},
            default="webapp",
        )
        config["install_maker"] = prompts.confirm("Install Maker bundle?", True)
        config["install_security"] = prompts.confirm("Install Security bundle?", config["project_type"] == "webapp")
        return config

    def install_command(self, config):
        version = config.get("symfony_version", "7.1")
        return f"composer create-project symfony/skeleton:{version}.* . --no-interaction"

    def post_install_commands(self, config):
        commands = []
        if config.get("project_type") == "webapp":
            commands.append("composer require webapp --no-interaction")
        if config.get("install_maker"):
            commands.append("composer require --dev symfony/maker-bundle --no-interaction")
        if config.get("install_security"):
            commands.append("composer require symfony/security-bundle --no-interaction")
        if config.get("database_backend"):
            commands += [
                "composer require symfony/orm-pack --no-interaction",
                "php bin/console doctrine:database:create --if-not-exists",
                "php bin/console doctrine:migrations:migrate --no-interaction",
            ]
        return commands

    def env_values(self, config, infra_env):
        env = {"APP_ENV": "dev", "APP_SECRET": generate_secret()}
        database_url = _symfony_database_url(config)
        if database_url:
            env["DATABASE_URL"] = database_url
        if config.get("cache_backend") == "redis":
            auth = f":{config['redis_password']}@" if config.get("redis_password") else ""
            env["REDIS_URL"] = f"redis://{auth}{config['redis_host']}:{config['redis_port']}"
        if config.get("queue_backend") == "rabbitmq":
            env["MESSENGER_TRANSPORT_DSN"] = (
                f"amqp://{config['queue_user']}:{config['queue_password']}"
                f"@{config['queue_host']}:{config['queue_port']}/%2f/messages"
            )
        env.update({k: v for k, v in infra_env.items() if not k.startswith("DB_")})
        return env


def _symfony_database_url(config: dict[str, Any]) -> str | None:
    backend = config.get("database_backend")
    if backend == "sqlite":
        return "sqlite:///%kernel.project_dir%/var/data.db"
    if backend not in ("mysql", "mariadb", "postgresql"):
        return None
    scheme = "postgresql" if backend == "postgresql" else "mysql"
    server = {"mysql": "8.0", "mariadb": "11.0.0-MariaDB", "postgresql": "16"}[backend]
    return (
        f"{scheme}://{config['db_user']}:{config['db_password']}@{config['db_host']}:{config['db_port']}"
        f"/{config['db_name']}?serverVersion={server}&charset=utf8mb4"
    )


# ---------------------------------------------------------------------------
# Magento
# ---------------------------------------------------------------------------

class MagentoAppType(AppType):
    key = "magento"
    name = "Magento"
    description = "Adobe Commerce open source e-commerce platform"
    databases = ("mysql", "mariadb")
    supports_cache = True
    supports_queue = True
    supports_search = True
    scripts = {"dev": "bin/magento setup:upgrade", "test": "vendor/bin/phpunit -c dev/tests/unit/phpunit.xml.dist"}

    def collect_configuration(self, prompts, name, description=None):
        config = super().collect_configuration(prompts, name, description)
        config["magento_version"] = prompts.select(
            "Magento version", {"2.4.7": "Magento 2.4.7", "2.4.6": "Magento 2.4.6"}, default="2.4.7"
        )
        prompts.note(
            "Magento needs Marketplace access keys.\n"
            "Create them at https://commercemarketplace.adobe.com/customer/accessKeys/",
            title="Magento Marketplace",
        )
        config["public_key"] = prompts.text("Marketplace public key")
        config["private_key"] = prompts.secret("Marketplace private key")
        config["admin_firstname"] = prompts.text("Admin first name", "Admin")
        config["admin_lastname"] = prompts.text("Admin last name", "User")
        config["admin_email"] = prompts.text("Admin email", "admin@example.com")
        config["admin_user"] = prompts.text("Admin username", "admin")
        config["admin_password"] = prompts.secret("Admin password", "Admin123!" + generate_secret()[:8])
        config["base_url"] = prompts.text("Base URL", "http://localhost/")
        config["language"] = prompts.text("Default language", "en_US")
        config["currency"] = prompts.text("Default currency", "USD")
        config["timezone"] = prompts.text("Default timezone", "America/Chicago")
        config["sample_data"] = prompts.confirm("Install sample data?", False)
        return config

    def install_command(self, config):
        auth = {"http-basic": {"repo.magento.com": {
            "username": config.get("public_key", ""),
            "password": config.get("private_key", ""),
        }}}
        version = config.get("magento_version", "2.4.7")
        return (
            f"COMPOSER_AUTH={shlex.quote(json.dumps(auth))} composer create-project "
            f"--repository-url=https://repo.magento.com/ magento/project-community-edition={version} . "
            "--no-interaction"
        )

    def post_install_commands(self, config):
        args = [
            f"--base-url={config.get('base_url', 'http://localhost/')}",
            f"--db-host={config.get('db_host', '127.0.0.1')}:{config.get('db_port', '3306')}",
            f"--db-name={config.get('db_name', 'magento')}",
            f"--db-user={config.get('db_user', 'root')}",
            f"--db-password={config.get('db_password', '')}",
            f"--admin-firstname={config.get('admin_firstname', 'Admin')}",
            f"--admin-lastname={config.get('admin_lastname', 'User')}",
            f"--admin-email={config.get('admin_email', 'admin@example.com')}",
            f"--admin-user={config.get('admin_user', 'admin')}",
            f"--admin-password={config.get('admin_password', '')}",
            f"--language={config.get('language', 'en_US')}",
            f"--currency={config.get('currency', 'USD')}",
            f"--timezone={config.get('timezone', 'America/Chicago')}",
            "--use-rewrites=1",
        ]
        search = config.get("search_backend")
        if search == "elasticsearch":
            args += [
                "--search-engine=elasticsearch8",
                f"--elasticsearch-host={config['elasticsearch_host']}",
                f"--elasticsearch-port={config['elasticsearch_port']}",
                "--elasticsearch-enable-auth=1",
                f"--elasticsearch-username={config['elasticsearch_user']}",
                f"--elasticsearch-password={config['elasticsearch_password']}",
            ]
        elif search == "opensearch":
            args += ["--search-engine=opensearch", f"--opensearch-host={config['opensearch_endpoint']}"]
        if config.get("cache_backend") == "redis":
            host, port = config["redis_host"], config["redis_port"]
            args += [
                "--session-save=redis",
                f"--session-save-redis-host={host}",
                f"--session-save-redis-port={port}",
                "--cache-backend=redis",
                f"--cache-backend-redis-server={host}",
                f"--cache-backend-redis-port={port}",
            ]
            if config.get("redis_password"):
                args += [
                    f"--session-save-redis-password={config['redis_password']}",
                    f"--cache-backend-redis-password={config['redis_password']}",
                ]
        if config.get("queue_backend") == "rabbitmq":
            args += [
                f"--amqp-host={config['queue_host']}",
                f"--amqp-port={config['queue_port']}",
                f"--amqp-user={config['queue_user']}",
                f"--amqp-password={config['queue_password']}",
                f"--amqp-virtualhost={config['queue_vhost']}",
            ]

        commands = ["bin/magento setup:install " + " ".join(shlex.quote(a) for a in args)]
        if config.get("sample_data"):
            commands += ["bin/magento sampledata:deploy", "bin/magento setup:upgrade"]
        commands += ["bin/magento deploy:mode:set developer", "bin/magento cache:flush"]
        return commands

    def env_values(self, config, infra_env):
        # Magento keeps its settings in app/etc/env.php via setup:install
        return {}


# ---------------------------------------------------------------------------
# Skeleton
# ---------------------------------------------------------------------------

class SkeletonAppType(AppType):
    key = "skeleton"
    name = "Skeleton"
    description = "Minimal PHP application with Composer and PHPUnit"
    scripts = {"dev": "php -S localhost:8000 -t public", "test": "composer test"}

    def collect_configuration(self, prompts, name, description=None):
        config = super().collect_configuration(prompts, name, description)
        config["php_version"] = prompts.select(
            "PHP version", {"8.3": "PHP 8.3", "8.2": "PHP 8.2", "8.4": "PHP 8.4"}, default="8.3"
        )
        config["include_tests"] = prompts.confirm("Run the test suite after install?", True)
        return config

    def post_install_commands(self, config):
        commands = ["composer install --no-interaction"]
        if config.get("include_tests", True):
            commands.append("composer test")
        return commands


APP_TYPES: dict[str, AppType] = {
    t.key: t for t in (LaravelAppType(), SymfonyAppType(), MagentoAppType(), SkeletonAppType())
}


def get_app_type(key: str) -> AppType:
    if key not in APP_TYPES:
        raise KeyError(f"Unknown app type '{key}'. Available: {', '.join(APP_TYPES)}")
    return APP_TYPES[key]

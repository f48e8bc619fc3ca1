"""
hive/provisioning/provisioner.py - Docker-first provisioning with fallbacks

For each backend the same decision tree runs:

    Docker available?  -> confirm -> compose fragment -> up -> wait -> config
    otherwise / failed -> already running locally? -> probe -> config
                       -> Docker instead? -> install guidance -> manual prompts
"""

from __future__ import annotations

import secrets
from pathlib import Path

import yaml

from hive.errors import ProvisioningError
from hive.provisioning.backends import (
    BACKENDS,
    CATEGORY_BACKENDS,
    Backend,
    ConnectionConfig,
    Field,
    get_backend,
)
from hive.provisioning import probes
from hive.utils import docker, process
from hive.utils.compose import (
    compose_variables,
    extract_values,
    load_compose,
    merge_fragment,
    render_fragment,
)
from hive.utils.config import HiveSettings
from hive.utils.prompts import Prompts


def generate_secret() -> str:
    """32 hex characters, used for every generated password and key."""
    return secrets.token_hex(16)


class Provisioner:
    """Provision infrastructure backends for a single app."""

    def __init__(
        self,
        prompts: Prompts,
        app_name: str,
        app_path: Path,
        *,
        prefer_docker: bool | None = None,
        settings: HiveSettings | None = None,
    ) -> None:
        self.prompts = prompts
        self.app_name = app_name
        self.app_path = app_path
        self.prefer_docker = prefer_docker
        self.settings = settings or HiveSettings()

    # -- Entry point --------------------------------------------------------

    def provision(self, category: str, backend_key: str | None = None) -> ConnectionConfig:
        """Run the decision tree for one backend and return its connection details."""
        backend = get_backend(backend_key) if backend_key else self.select_backend(category)

        if not backend.uses_docker:
            return self.configure_manually(backend, category)

        if self.prefer_docker is not False and docker.is_available():
            if self.prefer_docker or self._confirm_docker(backend):
                config = self.provision_docker(backend, category)
                if config is not None:
                    return config
                self.prompts.warning("Docker setup failed. Falling back to local setup...")
        elif self.prefer_docker is not False and not docker.is_installed():
            if self.prompts.confirm("Docker is not installed. Show installation instructions?", False):
                docker.show_install_guidance(self.prompts.console)

        return self.provision_local(backend, category)

    def select_backend(self, category: str, options: tuple[str, ...] | None = None) -> Backend:
        keys = options or CATEGORY_BACKENDS[category]
        choice = self.prompts.select(
            f"Which {category} backend?",
            {key: BACKENDS[key].label for key in keys},
            default=keys[0],
        )
        return get_backend(choice)

    def _confirm_docker(self, backend: Backend) -> bool:
        self.prompts.note(
            f"Docker is available. {backend.label} can run in a container managed by "
            f"docker-compose.yml in {self.app_path.name}/.",
            title=backend.label,
        )
        return self.prompts.confirm(f"Use Docker for {backend.label}? (recommended)", True)

    # -- Docker -------------------------------------------------------------

    def provision_docker(self, backend: Backend, category: str | None = None) -> ConnectionConfig | None:
        """Add *backend* to the app's compose stack and start it.

        Returns None when any step fails, so the caller can fall back. A
        service already defined in docker-compose.yml is reused as-is and
        its connection values are read back from that definition.

        Raises:
            ProvisioningError: The existing service's credentials could not
                be read from docker-compose.yml.
        """
        category = category or backend.category
        values = self._existing_values(backend)
        reused = values is not None

        if values is None:
            values = self._docker_defaults(backend)
            for f in backend.fields:
                if f.generate:
                    values[f.key] = generate_secret()
                if f.port:
                    values[f.key] = str(process.find_available_port(int(f.default_for(self.app_name))))
            for f in backend.fields:
                if f.docker_prompt:
                    values[f.key] = self._ask(f, values[f.key])
        else:
            self.prompts.info(f"Reusing the '{backend.service}' service already in docker-compose.yml")

        try:
            if not reused:
                self._write_compose(backend, values)

            self.prompts.info(f"Starting {backend.label} container...")
            if not docker.compose_up(self.app_path):
                raise ProvisioningError(f"docker compose up failed for {backend.label}")

            self.prompts.info(f"Waiting for {backend.label} to be ready...")
            ready = docker.wait_for_service(
                self.app_path,
                backend.service,
                max_attempts=self.settings.health_check.max_attempts,
                interval=self.settings.health_check.interval,
            )
            if ready:
                self.prompts.success(f"{backend.label} is ready")
            else:
                self.prompts.warning(f"{backend.label} did not report ready in time; it may still be starting")

            if backend.post_start and not backend.post_start(self.app_path, values):
                self.prompts.warning(f"{backend.label} started but post-start setup did not complete")
        except (ProvisioningError, OSError, ValueError, yaml.YAMLError) as exc:
            self.prompts.error(str(exc))
            return None

        return ConnectionConfig(backend, category, values, using_docker=True)

    def _docker_defaults(self, backend: Backend) -> dict[str, str]:
        values = backend.defaults(self.app_name)
        if "host" in values:
            values["host"] = backend.docker_host
        return values

    def _existing_values(self, backend: Backend) -> dict[str, str] | None:
        """Connection values of *backend*'s service if docker-compose.yml already has it."""
        try:
            services = load_compose(self.app_path).get("services") or {}
            if backend.service not in services:
                return None
            variables = compose_variables(self.app_name, self.settings.container_prefix)
            template = (render_fragment(backend.stub, variables).get("services") or {}).get(backend.service)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ProvisioningError(f"Could not read docker-compose.yml: {exc}") from exc

        found = extract_values(template, services[backend.service])
        values = self._docker_defaults(backend)
        unreadable = []
        for f in backend.fields:
            key = f"{backend.stub_prefix}_{f.key.upper()}"
            if key in found:
                values[f.key] = found[key]
            elif f.generate:
                unreadable.append(f.label.lower())

        if unreadable:
            raise ProvisioningError(
                f"Service '{backend.service}' already exists in docker-compose.yml, "
                f"but its {', '.join(unreadable)} could not be read from it",
                [
                    f"Remove the '{backend.service}' service from {self.app_path.name}/docker-compose.yml and retry",
                    "Or configure the connection manually with --no-docker",
                ],
            )
        return values

    def _write_compose(self, backend: Backend, values: dict[str, str]) -> None:
        variables = compose_variables(self.app_name, self.settings.container_prefix)
        for key, value in values.items():
            variables[f"{backend.stub_prefix}_{key.upper()}"] = value

        result = merge_fragment(self.app_path, render_fragment(backend.stub, variables))
        for name in result.skipped:
            self.prompts.warning(
                f"Service '{name}' already exists in docker-compose.yml, leaving it unchanged"
            )

        if backend.admin_stub and self.prompts.confirm(f"Include {backend.admin_label}?", True):
            variables["DB_SERVICE"] = backend.service
            variables["ADMIN_PORT"] = str(process.find_available_port(8080))
            merge_fragment(self.app_path, render_fragment(backend.admin_stub, variables))
            self.prompts.success(f"{backend.admin_label} on http://localhost:{variables['ADMIN_PORT']}")

    # -- Local --------------------------------------------------------------

    def provision_local(self, backend: Backend, category: str | None = None) -> ConnectionConfig:
        """Use a locally installed server, or fall back to manual configuration."""
        category = category or backend.category

        if self.prompts.confirm(f"Is {backend.label} already running locally?", False):
            values = self._ask_all(backend)
            if backend.probe is None or backend.probe(values):
                self.prompts.success(f"Connected to {backend.label} at {values.get('host')}:{values.get('port')}")
                if backend.creates_database:
                    self._offer_database_creation(values)
                return ConnectionConfig(backend, category, values)

            self.prompts.error(f"Could not connect to {backend.label} at {values.get('host')}:{values.get('port')}")
            if self.prefer_docker is not False and docker.is_available():
                if self.prompts.confirm(f"Use Docker for {backend.label} instead?", True):
                    config = self.provision_docker(backend, category)
                    if config is not None:
                        return config

        self.show_install_guidance(backend)
        return self.configure_manually(backend, category)

    def _offer_database_creation(self, values: dict[str, str]) -> None:
        if not self.prompts.confirm(f"Create database '{values['name']}' and user '{values['user']}' now?", False):
            return
        admin_user = self.prompts.text("Admin user", "root")
        admin_password = self.prompts.secret("Admin password")
        if probes.create_mysql_database(values, admin_user, admin_password):
            self.prompts.success(f"Database '{values['name']}' is ready")
        else:
            self.prompts.warning("Could not create the database; create it manually before migrating")

    def show_install_guidance(self, backend: Backend) -> None:
        if self.prompts.quiet or not backend.install:
            return
        os_name = docker.detect_os()
        steps = backend.install.get(os_name, ())
        console = self.prompts.console
        console.print(f"\n  [bold]Installing {backend.label}[/bold]\n")
        for step in steps:
            console.print(f"    [cyan]{step}[/cyan]")
        if backend.docs_url:
            console.print(f"    [dim]Docs: {backend.docs_url}[/dim]")
        console.print()

    # -- Manual -------------------------------------------------------------

    def configure_manually(self, backend: Backend, category: str | None = None) -> ConnectionConfig:
        """Prompt for every field. Non-interactive runs take the defaults."""
        category = category or backend.category
        if backend.kind == "managed":
            self.prompts.note(
                f"{backend.label} is a managed service; hive will only record its connection details.\n"
                f"[dim]{backend.docs_url}[/dim]",
                title=backend.label,
            )
        return ConnectionConfig(backend, category, self._ask_all(backend))

    def _ask_all(self, backend: Backend) -> dict[str, str]:
        values = backend.defaults(self.app_name)
        for f in backend.fields:
            values[f.key] = self._ask(f, values[f.key])
        return values

    def _ask(self, f: Field, default: str) -> str:
        if f.secret:
            return self.prompts.secret(f.label, default)
        if f.port:
            return self.prompts.text(f.label, default, validate=_validate_port)
        return self.prompts.text(f.label, default)


def _validate_port(value: str) -> str | None:
    if value.isdigit() and 0 < int(value) < 65536:
        return None
    return "Enter a port between 1 and 65535"

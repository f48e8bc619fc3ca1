"""Subprocess helpers: redaction and verbose echoing."""

from __future__ import annotations

import io
import subprocess

import pytest
from rich.console import Console

from hive.commands import common
from hive.errors import ScaffoldError
from hive.scaffold.app_types import get_app_type
from hive.utils import process


@pytest.fixture
def verbose_console(monkeypatch):
    out = Console(file=io.StringIO(), width=200)
    monkeypatch.setattr(process, "console", out)
    monkeypatch.setattr(process, "verbose", True)
    return out


def _fail_shell(monkeypatch, stderr="composer: authentication failed"):
    def fake_run_shell(command, cwd, *, stream=False, env=None, timeout=None):
        return subprocess.CompletedProcess(command, 1, "", stderr)

    monkeypatch.setattr(process, "run_shell", fake_run_shell)


class TestRedact:

    def test_masks_password_flags(self):
        assert process.redact(["mysql", "--user=root", "--password=hunter2"]) == (
            "mysql --user=root --password=********"
        )

    def test_masks_quoted_env_assignment(self):
        command = "COMPOSER_AUTH='{\"http-basic\": {\"password\": \"abc\"}}' composer install"
        assert process.redact(command) == "COMPOSER_AUTH=******** composer install"

    def test_leaves_plain_commands_alone(self):
        assert process.redact("php artisan key:generate") == "php artisan key:generate"

    def test_unbalanced_quotes_show_only_the_start(self):
        assert process.redact("FOO='open composer install") == "FOO='open composer ..."


class TestRunCommandsRedaction:

    def test_magento_marketplace_key_stays_hidden(self, monkeypatch, tmp_path):
        _fail_shell(monkeypatch)
        command = get_app_type("magento").install_command(
            {"public_key": "PUBKEY123", "private_key": "PRIVKEY456"}
        )

        with pytest.raises(ScaffoldError) as info:
            common.run_commands([command], tmp_path)

        assert "PRIVKEY456" not in info.value.message
        assert "COMPOSER_AUTH=********" in info.value.message
        assert "composer create-project" in info.value.message
        assert info.value.suggestions == ["composer: authentication failed"]

    def test_setup_install_passwords_stay_hidden(self, monkeypatch, tmp_path):
        _fail_shell(monkeypatch)
        commands = get_app_type("magento").post_install_commands(
            {"db_password": "dbpass789", "admin_password": "Admin123!xyz"}
        )

        with pytest.raises(ScaffoldError) as info:
            common.run_commands(commands, tmp_path)

        assert "dbpass789" not in info.value.message
        assert "Admin123!xyz" not in info.value.message
        assert "--db-password=********" in info.value.message


class TestVerbose:

    def test_run_echoes_command_and_stderr(self, monkeypatch, verbose_console):
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda args, **kw: subprocess.CompletedProcess(args, 1, "", "warning: [deprecated] option\n"),
        )

        process.run(["composer", "validate", "--token=abc"])

        out = verbose_console.file.getvalue()
        assert "Executing: composer validate --token=********" in out
        assert "warning: [deprecated] option" in out
        assert "abc" not in out

    def test_run_shell_echoes_stderr(self, monkeypatch, verbose_console, tmp_path):
        monkeypatch.setattr(
            subprocess, "run", lambda command, **kw: subprocess.CompletedProcess(command, 0, "", "notice: cached")
        )

        process.run_shell("composer install", tmp_path)

        assert "notice: cached" in verbose_console.file.getvalue()

    def test_quiet_by_default(self, monkeypatch):
        out = Console(file=io.StringIO())
        monkeypatch.setattr(process, "console", out)
        monkeypatch.setattr(process, "verbose", False)
        monkeypatch.setattr(
            subprocess, "run", lambda args, **kw: subprocess.CompletedProcess(args, 1, "", "boom")
        )

        result = process.run(["composer", "install"])

        assert result.stderr == "boom"
        assert out.file.getvalue() == ""

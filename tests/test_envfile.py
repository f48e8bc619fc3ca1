"""Dotenv parsing and in-place updates."""

from __future__ import annotations

from hive.utils.envfile import parse_env, update_env


def test_parse_env(tmp_path):
    env = tmp_path / ".env"
    env.write_text(
        "# comment\n"
        "APP_NAME=shop\n"
        'APP_TITLE="My Shop"\n'
        "export DB_HOST=127.0.0.1\n"
        "CACHE=redis # inline\n"
        "\n"
    )
    assert parse_env(env) == {
        "APP_NAME": "shop",
        "APP_TITLE": "My Shop",
        "DB_HOST": "127.0.0.1",
        "CACHE": "redis",
    }


def test_parse_missing_file(tmp_path):
    assert parse_env(tmp_path / ".env") == {}


def test_update_rewrites_in_place_and_appends(tmp_path):
    env = tmp_path / ".env"
    env.write_text("# app\nAPP_NAME=shop\nDB_HOST=localhost\n")

    changed = update_env(env, {"DB_HOST": "127.0.0.1", "DB_PORT": 3307})

    assert changed == ["DB_HOST", "DB_PORT"]
    assert env.read_text() == "# app\nAPP_NAME=shop\nDB_HOST=127.0.0.1\n\nDB_PORT=3307\n"


def test_update_quotes_values_with_spaces(tmp_path):
    env = tmp_path / ".env"
    update_env(env, {"APP_TITLE": "My Shop", "DEBUG": True})
    assert parse_env(env) == {"APP_TITLE": "My Shop", "DEBUG": "true"}
    assert 'APP_TITLE="My Shop"' in env.read_text()


def test_update_without_changes_leaves_file_alone(tmp_path):
    env = tmp_path / ".env"
    env.write_text("A=1\n")
    assert update_env(env, {"A": "1"}) == []
    assert env.read_text() == "A=1\n"

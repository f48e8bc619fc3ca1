"""Compose fragment rendering and idempotent merging."""

from __future__ import annotations

import yaml

from hive.utils.compose import (
    compose_variables,
    extract_values,
    load_compose,
    merge_fragment,
    normalize_name,
    render_fragment,
    render_stub,
)


def _redis_fragment(app_name="shop"):
    variables = compose_variables(app_name, "phphive")
    variables.update({"REDIS_PASSWORD": "s3cret", "REDIS_PORT": "6380"})
    return render_fragment("redis.yml", variables)


def test_normalize_name():
    assert normalize_name("My App.v2") == "my-app-v2"
    assert normalize_name("my-app", "_") == "my_app"


def test_render_stub_keeps_unknown_placeholders():
    assert render_stub("{{A}}-{{ B }}-{{C}}", {"A": 1, "B": "two"}) == "1-two-{{C}}"


def test_compose_variables():
    assert compose_variables("My Shop") == {
        "CONTAINER_PREFIX": "phphive-my-shop",
        "VOLUME_PREFIX": "phphive-my-shop",
        "NETWORK_NAME": "phphive-my-shop",
    }


def test_render_fragment_substitutes_values():
    fragment = _redis_fragment()
    redis = fragment["services"]["redis"]
    assert redis["container_name"] == "phphive-shop-redis"
    assert redis["ports"] == ["6380:6379"]
    assert "phphive-shop-redis-data" in fragment["volumes"]
    assert "phphive-shop" in fragment["networks"]


def test_merge_creates_compose_file(tmp_path):
    result = merge_fragment(tmp_path, _redis_fragment())
    assert result.added == ["redis"]
    assert result.changed
    data = load_compose(tmp_path)
    assert list(data["services"]) == ["redis"]
    assert "phphive-shop-redis-data" in data["volumes"]


def test_merge_is_idempotent(tmp_path):
    merge_fragment(tmp_path, _redis_fragment())
    before = (tmp_path / "docker-compose.yml").read_text()

    result = merge_fragment(tmp_path, _redis_fragment())

    assert result.added == []
    assert result.skipped == ["redis"]
    assert not result.changed
    assert (tmp_path / "docker-compose.yml").read_text() == before


def test_existing_services_win(tmp_path):
    (tmp_path / "docker-compose.yml").write_text(
        yaml.dump({"services": {"redis": {"image": "redis:6"}, "app": {"image": "php:8.3"}}})
    )
    merge_fragment(tmp_path, _redis_fragment())
    data = load_compose(tmp_path)
    assert data["services"]["redis"] == {"image": "redis:6"}
    assert "app" in data["services"]


def test_merge_adds_alongside_existing_services(tmp_path):
    merge_fragment(tmp_path, _redis_fragment())
    variables = compose_variables("shop")
    variables.update({
        "MYSQL_ROOT_PASSWORD": "root",
        "MYSQL_NAME": "shop",
        "MYSQL_USER": "shop",
        "MYSQL_PASSWORD": "pw",
        "MYSQL_PORT": "3306",
    })
    result = merge_fragment(tmp_path, render_fragment("mysql.yml", variables))
    assert result.added == ["mysql"]
    assert set(load_compose(tmp_path)["services"]) == {"redis", "mysql"}


def test_exclude(tmp_path):
    result = merge_fragment(tmp_path, _redis_fragment(), exclude=("redis",))
    assert result.added == []
    assert not (tmp_path / "docker-compose.yml").exists()


def test_extract_values_reads_placeholders_back():
    template = render_fragment("redis.yml", compose_variables("shop", "phphive"))["services"]["redis"]
    actual = _redis_fragment()["services"]["redis"]

    assert extract_values(template, actual) == {"REDIS_PASSWORD": "s3cret", "REDIS_PORT": "6380"}


def test_extract_values_ignores_edited_entries():
    template = {"ports": ["{{PORT}}:6379"], "command": ["--requirepass", "{{PASSWORD}}"]}
    actual = {"ports": ["6379"], "command": ["--requirepass", "kept"]}

    assert extract_values(template, actual) == {"PASSWORD": "kept"}


def test_elasticsearch_fragment_only_adds_elasticsearch():
    variables = compose_variables("shop", "phphive")
    variables.update({"ELASTICSEARCH_PASSWORD": "s3cret", "ELASTICSEARCH_PORT": "9200"})

    fragment = render_fragment("elasticsearch.yml", variables)

    assert list(fragment["services"]) == ["elasticsearch"]
    assert fragment["services"]["elasticsearch"]["environment"]["ELASTIC_PASSWORD"] == "s3cret"

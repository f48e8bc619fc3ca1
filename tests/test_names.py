"""Name validation and suggestions for taken directories."""

from __future__ import annotations

from datetime import date

import pytest

from hive.utils.names import MAX_SUGGESTIONS, best_suggestion, score, suggest_names, validate_name


@pytest.mark.parametrize("name", ["api", "my-app", "shop2", "a-b-c"])
def test_valid_names(name):
    assert validate_name(name) is None


@pytest.mark.parametrize("name", ["", "My-App", "my_app", "-app", "app-", "my--app", "my app"])
def test_invalid_names(name):
    assert validate_name(name) is not None


def test_suggestions_prefer_suffixes():
    suggestions = suggest_names("api", "app", lambda candidate: True)
    assert suggestions == ["api-app", "api-dev", "api-workspace", "api-kit", "api-core"]
    assert len(suggestions) == MAX_SUGGESTIONS


def test_suggestions_skip_taken_names():
    taken = {"api-app", "api-dev", "api-workspace", "api-kit", "api-core", "api-project"}
    suggestions = suggest_names("api", "app", lambda candidate: candidate not in taken)
    assert len(suggestions) == MAX_SUGGESTIONS
    assert not taken.intersection(suggestions)
    assert all(s.startswith("api-") for s in suggestions[:3])


def test_year_and_prefix_fallbacks():
    year = str(date.today().year)
    allowed = {f"api-{year}", "my-api", "new-api"}
    assert suggest_names("api", "app", allowed.__contains__) == [f"api-{year}", "my-api", "new-api"]


def test_nothing_available():
    assert suggest_names("api", "app", lambda candidate: False) == []


def test_scoring():
    assert score("api-dev") > score("api-a1f")
    assert best_suggestion(["api-a1f", "api-workspace", "api-dev"]) == "api-dev"
    assert best_suggestion([]) is None

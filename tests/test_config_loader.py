"""Tests for configuration loading."""

import pytest

from recordgate.config import loader
from recordgate.config.loader import DEFAULT_CONFIG, get_database_url, get_query_settings, load_config


def _write(tmp_path, text):
    path = tmp_path / "recordgate.config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_partial_file_is_merged_over_defaults(tmp_path):
    path = _write(
        tmp_path,
        "localization:\n  default_language_id: 2\nmessages:\n  de:\n    not_found: Nicht gefunden.\n",
    )

    config = load_config(path)

    assert config["localization"] == {"default_language_id": 2, "default_locale": "en"}
    assert config["query"]["max_limit"] == 500
    assert config["messages"]["de"]["not_found"] == "Nicht gefunden."


def test_missing_explicit_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_missing_default_path_returns_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", tmp_path / "recordgate.config.yaml")

    config = load_config()

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_empty_file_returns_defaults(tmp_path):
    assert load_config(_write(tmp_path, "")) == DEFAULT_CONFIG


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "query: 5\n",
        "localization:\n  default_language_id: 0\n",
        "localization:\n  default_language_id: two\n",
        "query:\n  max_limit: -3\n",
        "query:\n  max_limit: true\n",
        "messages:\n  de: hello\n",
    ],
)
def test_invalid_documents_raise_value_error(tmp_path, text):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, text))


def test_null_max_limit_disables_cap(tmp_path):
    config = load_config(_write(tmp_path, "query:\n  max_limit: null\n"))

    assert get_query_settings(config).max_limit is None


def test_query_settings_and_database_url():
    config = {
        "storage": {"database_url": "sqlite:///other.db"},
        "localization": {"default_language_id": 3, "default_locale": "de"},
        "query": {"max_limit": 20},
    }

    settings = get_query_settings(config)

    assert settings.default_language_id == 3
    assert settings.default_locale == "de"
    assert settings.max_limit == 20
    assert get_database_url(config) == "sqlite:///other.db"
    assert get_database_url({}) == DEFAULT_CONFIG["storage"]["database_url"]
    assert get_query_settings({}).default_language_id == 1

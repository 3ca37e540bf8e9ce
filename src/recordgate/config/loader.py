from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("recordgate.config.yaml")

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "database_url": "sqlite:///recordgate.db",
    },
    "localization": {
        "default_language_id": 1,
        "default_locale": "en",
    },
    "query": {
        "max_limit": 500,
    },
    "messages": {},
}


class QuerySettings(BaseModel):
    """Settings the query composer and mutation layer read on every request."""

    default_language_id: int = Field(default=1, ge=1)
    default_locale: str = Field(default="en", min_length=1)
    max_limit: int | None = Field(default=500, ge=1)


def _merge_sections(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge one level deep so a partial section keeps the other defaults."""
    merged = deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _validate(config: Dict[str, Any]) -> None:
    for section in ("storage", "localization", "query", "messages"):
        if not isinstance(config.get(section), dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")

    language_id = config["localization"].get("default_language_id")
    if isinstance(language_id, bool) or not isinstance(language_id, int) or language_id < 1:
        raise ValueError("Config 'localization.default_language_id' must be a positive integer")

    max_limit = config["query"].get("max_limit")
    if max_limit is not None and (isinstance(max_limit, bool) or not isinstance(max_limit, int) or max_limit < 1):
        raise ValueError("Config 'query.max_limit' must be a positive integer or null")

    for locale, catalog in config["messages"].items():
        if not isinstance(catalog, dict):
            raise ValueError(f"Messages for locale '{locale}' must be a dictionary")


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load recordgate configuration from YAML, merged over built-in defaults.

    Args:
        path: Optional path to the YAML file. When omitted, the default path is
            used if it exists, otherwise the built-in defaults are returned.

    Returns:
        Configuration dictionary with every section present

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the document or one of its values is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return deepcopy(DEFAULT_CONFIG)

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Config must be a dictionary")

    config = _merge_sections(DEFAULT_CONFIG, raw)
    _validate(config)
    return config


def get_query_settings(config: Dict[str, Any] | None = None) -> QuerySettings:
    """Extract the query/localization settings from a loaded config."""
    if config is None:
        config = load_config()
    localization = config.get("localization") or {}
    query = config.get("query") or {}
    return QuerySettings(
        default_language_id=localization.get("default_language_id", 1),
        default_locale=localization.get("default_locale", "en"),
        max_limit=query.get("max_limit", 500),
    )


def get_database_url(config: Dict[str, Any] | None = None) -> str:
    if config is None:
        config = load_config()
    return (config.get("storage") or {}).get("database_url") or DEFAULT_CONFIG["storage"]["database_url"]

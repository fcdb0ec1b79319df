"""Config Loader - Loads factory profiles from YAML.

A profile names the method, base URL and the headers/query parameters every
request built from it should carry. String values may reference
environment variables as ${NAME}, or ${NAME:-fallback} to use a default
when NAME is unset, so secrets stay out of the file:

    method: GET
    base_url: https://api.example.com/v1/
    user_agent: inventory-sync/2.0
    headers:
      Authorization: Bearer ${API_TOKEN}
      Accept: [application/json, application/xml]
    query:
      region: ${API_REGION:-eu}
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from request_factory.factory import Factory
from request_factory.models import FactoryConfig

# ${NAME} or ${NAME:-fallback}
_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def load_factory_config(config_path: Path) -> FactoryConfig:
    """Load a factory profile from YAML, expanding ${NAME} and ${NAME:-fallback}."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _expand_env(raw_config)

    try:
        return FactoryConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def factory_from_config(config: FactoryConfig) -> Factory:
    """Build a Factory carrying the profile's method, base URL, headers and query."""
    factory = Factory(config.method, config.base_url)
    for key, values in config.headers.items():
        factory.header(key, *values)
    for key, values in config.query.items():
        factory.query_parameter(key, *values)
    if config.user_agent:
        factory.user_agent(config.user_agent)
    if config.content_type:
        factory.content_type(config.content_type)
    return factory


def load_factory(config_path: Path) -> Factory:
    """Shorthand for factory_from_config(load_factory_config(config_path))."""
    return factory_from_config(load_factory_config(config_path))


def _expand_env(node: Any, where: str = "config") -> Any:
    """Expand environment references in every string of a parsed YAML tree.

    Only values are expanded, never mapping keys. where names the current
    location for error messages (e.g. ``config.headers.Authorization``).
    """
    if isinstance(node, dict):
        return {key: _expand_env(value, f"{where}.{key}") for key, value in node.items()}
    if isinstance(node, list):
        return [_expand_env(item, f"{where}[{index}]") for index, item in enumerate(node)]
    if not isinstance(node, str):
        return node

    def lookup(match: re.Match) -> str:
        value = os.environ.get(match["name"], match["fallback"])
        if value is None:
            raise ConfigError(
                f"Environment variable '{match['name']}' referenced at {where} is not set"
            )
        return value

    return _ENV_REFERENCE.sub(lookup, node)

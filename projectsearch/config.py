"""Configuration loading from YAML files and the environment."""

import logging
import os
from pathlib import Path
from typing import Any

import msgspec
import yaml

from .search.indexing.hooks import index_name_for
from .search.options import DEFAULT_FACET_LIMIT, DEFAULT_PER_PAGE
from .search.query import RETIRED_PLATFORMS

logger = logging.getLogger(__name__)


class SearchSettings(
    msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True
):
    """Settings of the search subsystem."""

    environment: str = "development"
    facet_limit: int = DEFAULT_FACET_LIMIT
    per_page: int = DEFAULT_PER_PAGE
    facet_cache_ttl: float = 3600
    retired_platforms: tuple[str, ...] = RETIRED_PLATFORMS

    @property
    def index_name(self) -> str:
        return index_name_for(self.environment)

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> "SearchSettings":
        """Validate a configuration mapping.

        Raises:
            ValueError: If a value has the wrong type or a key is unknown
        """
        config = dict(config or {})
        platforms = config.get("retired_platforms")
        if isinstance(platforms, str):
            config["retired_platforms"] = _split_list(platforms)

        try:
            return msgspec.convert(config, cls)
        except msgspec.ValidationError as e:
            raise ValueError(f"Invalid search configuration: {e}") from e


class Config:
    """Configuration file handling."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths, lowest precedence first."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "projectsearch" / "config.yaml")

        # Project config
        paths.append(Path(".projectsearch.yaml"))
        paths.append(Path("projectsearch.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Args:
        path: Explicit config file; replaces the default locations

    Returns:
        Merged configuration, environment variables taking precedence
    """
    config: dict[str, Any] = {}

    paths = [path] if path else get_config_paths()
    for candidate in paths:
        if candidate.exists():
            logger.debug(f"Loading configuration from {candidate}")
            config = Config.merge_configs(config, Config.from_file(candidate))
        elif path:
            raise ValueError(f"Config file not found: {candidate}")

    # Override with environment variables
    env_overrides: dict[str, Any] = {}
    if environment := os.environ.get("PROJECTSEARCH_ENV"):
        env_overrides["environment"] = environment
    if facet_limit := os.environ.get("PROJECTSEARCH_FACET_LIMIT"):
        try:
            env_overrides["facet_limit"] = int(facet_limit)
        except ValueError:
            raise ValueError(
                f"PROJECTSEARCH_FACET_LIMIT must be an integer, got {facet_limit!r}"
            ) from None
    if platforms := os.environ.get("PROJECTSEARCH_RETIRED_PLATFORMS"):
        env_overrides["retired_platforms"] = _split_list(platforms)

    return Config.merge_configs(config, {"search": env_overrides})


def load_settings(path: Path | None = None) -> SearchSettings:
    """Load and validate the ``search`` section of the configuration."""
    return SearchSettings.from_config(load_config(path).get("search"))


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result

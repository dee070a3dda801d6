"""Configuration loader for analytics settings."""

from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from typing import Any, Dict

from ..config import get_settings_dir

logger = logging.getLogger(__name__)


def load_config(config_name: str) -> Dict[str, Any]:
    """Load a configuration file by name.

    Args:
        config_name: Name of the config file (without .json extension)

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        json.JSONDecodeError: If the configuration file is invalid JSON

    Example:
        >>> config = load_config('analytics')
        >>> config['spending_intensity']['low']
        5000
    """
    config_path = get_settings_dir() / f"{config_name}.json"

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug("Loading configuration from %s", config_path)
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


@lru_cache(maxsize=None)
def _cached_analytics_config() -> Dict[str, Any]:
    return load_config('analytics')


def get_analytics_config() -> Dict[str, Any]:
    """Get the analytics configuration.

    The file is read once per process; call :func:`reload_settings` after
    editing it or changing ``FININSIGHTS_SETTINGS_DIR``.  Each call returns
    its own copy, so callers may modify the result freely.

    Returns:
        Analytics configuration dictionary with thresholds, categories,
        goal defaults and scoring policy
    """
    return copy.deepcopy(_cached_analytics_config())


def reload_settings() -> None:
    """Drop the cached analytics configuration."""
    _cached_analytics_config.cache_clear()


def get_config_value(config_name: str, *keys: str, default: Any = None) -> Any:
    """Get a nested configuration value by key path.

    Args:
        config_name: Name of the config file
        *keys: Path to the nested value (e.g., 'goal_scoring', 'encouraging_ratio')
        default: Default value if key path doesn't exist

    Returns:
        The configuration value at the specified path, or default if not found

    Example:
        >>> get_config_value('analytics', 'goal_scoring', 'encouraging_ratio')
        0.7
    """
    try:
        config = load_config(config_name)
        value = config
        for key in keys:
            value = value[key]
        return value
    except (KeyError, FileNotFoundError):
        return default

"""Configuration management for finance insights.

This module centralizes environment driven configuration: where the
analytics settings live and how verbose logging should be.  The settings
themselves (thresholds, default allocations, category catalog) are JSON
data loaded through :mod:`finance_insights.settings`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Packaged settings directory - assumes this file is in finance_insights/
_PACKAGE_ROOT = Path(__file__).parent.resolve()
DEFAULT_SETTINGS_DIR = _PACKAGE_ROOT / "settings"

SETTINGS_DIR = Path(
    os.getenv("FININSIGHTS_SETTINGS_DIR", DEFAULT_SETTINGS_DIR)
).resolve()

LOG_LEVEL = os.getenv("FININSIGHTS_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_settings_dir() -> Path:
    """Return the settings directory, honouring a late environment override."""
    override = os.getenv("FININSIGHTS_SETTINGS_DIR")
    if override:
        return Path(override).resolve()
    return SETTINGS_DIR


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and interactive use.

    The library itself never calls this on import; applications embedding
    the analytics decide how their logs are handled.
    """
    name = (level or LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)

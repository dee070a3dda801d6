"""Analytics settings files and loaders.

Thresholds, default goal allocations, the built-in category catalog and
the expense-to-goal classification table are stored as JSON so they can
be adjusted without code changes.
"""

from .defaults import get_analytics_config, get_config_value, load_config, reload_settings

__all__ = ['load_config', 'get_analytics_config', 'get_config_value', 'reload_settings']

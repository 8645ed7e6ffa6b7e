"""
servicenow-alert configuration.

Provides the immutable Configuration value and the YAML loader.
"""

from servicenow_alert.config.loader import (
    DEFAULT_CONFIG_PATH,
    get_config_path,
    load_config,
    resolve_store_path,
)
from servicenow_alert.config.settings import (
    DEFAULT_CLOSURE_FIELDS,
    Configuration,
    Field,
    Protocol,
    ProxySettings,
    ServiceNowSettings,
    UpdateMethod,
)

__all__ = [
    "Configuration",
    "Field",
    "Protocol",
    "ProxySettings",
    "ServiceNowSettings",
    "UpdateMethod",
    "DEFAULT_CLOSURE_FIELDS",
    "DEFAULT_CONFIG_PATH",
    "get_config_path",
    "load_config",
    "resolve_store_path",
]

"""
Configuration file loading.

The monitoring platform runs the command from the extension directory, so
the default location is ./conf/config.yaml relative to the working directory.
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml

from servicenow_alert.config.settings import Configuration
from servicenow_alert.core.errors import ConfigurationError

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path("conf") / "config.yaml"
DEFAULT_STORE_FILENAME = "servicenow-incidents.tsv"


def get_config_path(explicit_path: str | Path | None = None) -> Path:
    """Return the config path to use: the explicit one, else ./conf/config.yaml."""
    if explicit_path:
        return Path(explicit_path).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> Configuration:
    """
    Load and validate the YAML configuration.

    Args:
        path: Optional explicit config file path

    Returns:
        Configuration instance

    Raises:
        ConfigurationError: if the file is missing, is not valid YAML or
            lacks required settings
    """
    config_path = get_config_path(path)
    if not config_path.is_file():
        raise ConfigurationError("Config file not found", {"path": str(config_path)})

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            "Failed to read config file", {"path": str(config_path), "error": str(e)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", {"path": str(config_path)})

    try:
        config = Configuration.from_dict(data)
    except ValueError as e:
        raise ConfigurationError(
            "Invalid configuration", {"path": str(config_path), "error": str(e)}
        ) from e

    logger.debug("loaded_config", path=str(config_path))
    return config


def resolve_store_path(
    config: Configuration,
    config_path: str | Path | None = None,
    explicit_path: str | Path | None = None,
) -> Path:
    """
    Pick the id store file.

    Search order:
    1. Explicit path (--store flag)
    2. store.path from the config file (relative paths resolve against the config dir)
    3. servicenow-incidents.tsv next to the config file
    """
    if explicit_path:
        return Path(explicit_path).expanduser()
    config_dir = get_config_path(config_path).parent
    if config.store_path:
        store_path = Path(config.store_path).expanduser()
        return store_path if store_path.is_absolute() else config_dir / store_path
    return config_dir / DEFAULT_STORE_FILENAME

from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences as JSON in the user data
directory, with defaults merged in for missing keys and a fallback to
defaults when the file is unreadable.
"""

import json
import logging
import os
from typing import Any, Dict

from skimap.domain import constants as const
from skimap.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


def get_config_path() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Viewport used when computing the treemap
        "viewport_width": 1200,
        "viewport_height": 800,
        "max_depth": const.DEFAULT_MAX_DEPTH,

        # Scanning & caching
        "use_cache": True,
        "progress_interval": const.PROGRESS_REPORT_INTERVAL,

        # Reporting
        "top_entries": 10,

        # Diagnostics
        "log_level": "INFO",
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Load the persisted configuration merged over the defaults.

    Returns:
        Dict[str, Any]: The loaded configuration, or defaults on failure.
    """
    config = get_default_config()
    path = get_config_path()

    if not os.path.exists(path):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    settings = data.get("settings", {})
    if isinstance(settings, dict):
        config.update(settings)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist the configuration to disk.

    Args:
        config: The configuration dictionary to save.
    """
    path = get_config_path()
    state = {"version": const.CURRENT_CONFIG_VERSION, "settings": config}
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")

# workstation_init/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the workstation initialisation run.

Builds the frozen settings object once, applying this order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (WSINIT_ prefix, loaded by BaseSettings)
3. YAML Configuration File
4. Explicit overrides passed by the caller (highest precedence)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "workstation-init.yaml"


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates `source` with values from `overrides`.

    Nested dictionaries are merged key by key; any other value replaces the
    one in `source`. A None override never replaces an existing value.

    Parameters:
        source: The dictionary to update in place.
        overrides: The values to merge into `source`.

    Returns:
        The updated `source` dictionary.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _read_yaml_config(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    """Return the mapping stored in a YAML file, or an empty dict if unusable."""
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults and environment variables."
        )
        return {}

    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data and isinstance(yaml_data, dict):
        logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
        return yaml_data
    if yaml_data is not None:
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
    return {}


def load_app_settings(
    config_file_path: Union[str, Path] = DEFAULT_CONFIG_FILE,
    overrides: Optional[Dict[str, Any]] = None,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads the settings for one run.

    Args:
        config_file_path: Path to the YAML configuration file. A missing file
            is not an error; defaults and environment variables apply.
        overrides: Nested mapping applied last, e.g. ``{"ssh_port": 2222}``.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        A frozen AppSettings instance with the fully resolved configuration.

    Raises:
        SystemExit: If the merged values fail validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # BaseSettings reads WSINIT_* environment variables here.
    try:
        settings_after_env_and_defaults = AppSettings()
    except ValidationError as e:
        logger_to_use.error(f"Environment configuration is invalid: {e}")
        raise SystemExit(f"Configuration error: {e}") from e
    current_values_dict = settings_after_env_and_defaults.model_dump()

    yaml_data = _read_yaml_config(Path(config_file_path), logger_to_use)
    if yaml_data:
        current_values_dict = _deep_update(current_values_dict, yaml_data)

    if overrides:
        current_values_dict = _deep_update(current_values_dict, overrides)

    try:
        final_settings = AppSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.debug("Successfully loaded and validated application settings")
    return final_settings

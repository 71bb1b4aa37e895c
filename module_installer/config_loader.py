# module_installer/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the module installer.

Applies the following order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (loaded by Pydantic's BaseSettings)
3. YAML Configuration File
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .config_models import InstallerSettings
from .exceptions import ConfigurationError

module_logger = logging.getLogger(__name__)

CONFIG_FILE_DEFAULT = "module-installer.yaml"

# Maps argparse destinations onto InstallerSettings fields.
CLI_FIELD_MAP: Dict[str, str] = {
    "installed_packages": "installed_packages_filepath",
    "installation_errors": "installation_errors_filepath",
    "gitignore": "gitignore_filepath",
    "force": "force_installation",
}


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates `source` with the non-None values from `overrides`.

    Nested dictionaries are merged key by key rather than replaced.

    Args:
        source: The dictionary to update in place.
        overrides: The dictionary containing values to update or add.

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
    return source


def _load_yaml_config(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI args."
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

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}

    logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
    return yaml_data


def load_installer_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: str = CONFIG_FILE_DEFAULT,
    current_logger: Optional[logging.Logger] = None,
) -> InstallerSettings:
    """
    Loads the installer settings.

    Args:
        cli_args: Parsed command-line arguments. Only the destinations listed
            in CLI_FIELD_MAP are considered, and None values are skipped.
        config_file_path: Path to the YAML configuration file.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of InstallerSettings with the fully resolved configuration.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    try:
        # Model defaults < environment variables
        settings_after_env_and_defaults = InstallerSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Configuration error: {e}") from e
    current_values_dict = settings_after_env_and_defaults.model_dump()

    yaml_data = _load_yaml_config(Path(config_file_path), logger_to_use)
    current_values_dict = _deep_update(current_values_dict, yaml_data)
    # An explicit null in YAML clears an optional setting such as gitignore_filepath.
    for key, value in yaml_data.items():
        if value is None:
            current_values_dict[key] = None

    if cli_args:
        mapped_cli_values: Dict[str, Any] = {}
        for cli_key, cli_value in vars(cli_args).items():
            if cli_value is None or cli_key not in CLI_FIELD_MAP:
                continue
            # store_true flags only override when set
            if cli_value is False:
                continue
            mapped_cli_values[CLI_FIELD_MAP[cli_key]] = cli_value
        current_values_dict = _deep_update(
            current_values_dict, mapped_cli_values
        )

    try:
        final_settings = InstallerSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise ConfigurationError(f"Configuration error: {e}") from e

    logger_to_use.debug("Successfully loaded and validated installer settings")
    return final_settings

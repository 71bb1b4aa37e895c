# module_installer/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for module installer configuration.

Settings are read from model defaults and `MODULE_INSTALLER_*` environment
variables; `config_loader.load_installer_settings` layers a YAML file and
command-line arguments on top.
"""

from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
INSTALLED_PACKAGES_FILEPATH_DEFAULT: Path = Path(
    "environment/installed-packages.json"
)
INSTALLATION_ERRORS_FILEPATH_DEFAULT: Path = Path(
    "environment/installation-errors.log"
)
GITIGNORE_FILEPATH_DEFAULT: Path = Path(".gitignore")
GITIGNORE_GROUP_DEFAULT: str = "module-installer"
LOG_PREFIX_DEFAULT: str = "module-installer"
LOG_LEVEL_DEFAULT: str = "INFO"

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class InstallerSettings(BaseSettings):
    """Main module installer settings."""

    model_config = SettingsConfigDict(
        env_prefix="MODULE_INSTALLER_", extra="ignore"
    )

    installed_packages_filepath: Path = Field(
        default=INSTALLED_PACKAGES_FILEPATH_DEFAULT,
        description="JSON log of installed packages, keyed by package id.",
    )
    installation_errors_filepath: Path = Field(
        default=INSTALLATION_ERRORS_FILEPATH_DEFAULT,
        description="Append-only text log of fatal installer errors.",
    )
    gitignore_filepath: Optional[Path] = Field(
        default=GITIGNORE_FILEPATH_DEFAULT,
        description="Ignore file both logs are added to. None disables it.",
    )
    gitignore_group: str = Field(
        default=GITIGNORE_GROUP_DEFAULT,
        description="Comment tag grouping the installer entries in the ignore file.",
    )
    force_installation: bool = Field(
        default=False,
        description="Run pending installers even if every package looks installed.",
    )
    log_prefix: str = Field(
        default=LOG_PREFIX_DEFAULT,
        description="Prefix for console lines written by the installer.",
    )
    log_level: str = Field(
        default=LOG_LEVEL_DEFAULT,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )

    symbols: Dict[str, str] = Field(
        default_factory=lambda: dict(SYMBOLS_DEFAULT)
    )

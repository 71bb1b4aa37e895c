# module_installer/env.py
# -*- coding: utf-8 -*-
"""
Queries against the installed packages log.
"""

import logging
from typing import Optional

from .config_models import InstallerSettings
from .installation_log import file_exists, read_installed_packages
from .registry import InstallerRegistry


def package_installed(
    package_id: str,
    settings: InstallerSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """True if the package has a record with a truthy result."""
    installed_packages = read_installed_packages(
        settings.installed_packages_filepath,
        warn=False,
        current_logger=current_logger,
    )
    record = installed_packages.get(package_id)
    return record is not None and record.installed


def require_installation(
    registry: InstallerRegistry,
    settings: InstallerSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Decides whether the installers have to run.

    Installation is required when it is forced in the settings, when the
    installed packages log does not exist yet, or when any registered package
    lacks a successful record.
    """
    if settings.force_installation:
        return True
    if not file_exists(settings.installed_packages_filepath):
        return True

    installed_packages = read_installed_packages(
        settings.installed_packages_filepath,
        warn=False,
        current_logger=current_logger,
    )
    for package_id in registry.package_ids():
        record = installed_packages.get(package_id)
        if record is None or not record.installed:
            return True
    return False

"""
Run-once module installer.

Register installer functions with priorities and optional test functions;
`check_installation` runs the pending ones in priority order and records each
outcome, so successful packages are never installed twice.
"""

from .api import ModuleInstaller
from .config_models import InstallerSettings
from .exceptions import (
    ConfigurationError,
    InstallationError,
    InstallationLogError,
    InstallerValidationError,
    ModuleInstallerError,
)
from .installation_log import DataFileStatus, install_data_file
from .models import InstallationOutcome, InstallerDescriptor, OutcomeStatus
from .orchestrator import InstallationOrchestrator
from .registry import InstallerRegistry

__all__ = [
    "ConfigurationError",
    "DataFileStatus",
    "InstallationError",
    "InstallationLogError",
    "InstallationOrchestrator",
    "InstallationOutcome",
    "InstallerDescriptor",
    "InstallerRegistry",
    "InstallerSettings",
    "InstallerValidationError",
    "ModuleInstaller",
    "ModuleInstallerError",
    "OutcomeStatus",
    "install_data_file",
]

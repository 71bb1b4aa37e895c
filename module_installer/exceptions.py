# module_installer/exceptions.py
# -*- coding: utf-8 -*-
"""
Exception types raised by the module installer.
"""

from typing import Any, List, Optional


class ModuleInstallerError(Exception):
    """Base class for all module installer errors."""


class InstallerValidationError(ModuleInstallerError, ValueError):
    """
    Raised when a package id or its installer props fail validation.

    Attributes:
        package_id: The package id that was being registered.
        errors: Human-readable descriptions of each failed check.
    """

    def __init__(self, package_id: Any, errors: List[str]):
        self.package_id = package_id
        self.errors = list(errors)
        super().__init__(
            f"Invalid installer for package {package_id!r}: "
            + "; ".join(self.errors)
        )


class InstallationError(ModuleInstallerError):
    """
    Raised when an installer routine throws or its test predicate fails.

    Attributes:
        package_id: The package whose installer failed.
        error: The exception raised by the installer, or the raw result value
            that did not pass the test predicate.
    """

    def __init__(self, package_id: str, error: Any):
        self.package_id = package_id
        self.error = error
        super().__init__(f"Installer for package '{package_id}' failed: {error}")


class InstallationLogError(ModuleInstallerError):
    """Raised when the installed packages log cannot be parsed."""

    def __init__(self, path: Any, reason: Optional[str] = None):
        self.path = path
        message = f"Installed packages log '{path}' is malformed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigurationError(ModuleInstallerError):
    """Raised when the installer settings fail validation."""

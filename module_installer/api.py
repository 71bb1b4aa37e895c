# module_installer/api.py
# -*- coding: utf-8 -*-
"""
Caller-facing entry points.

Usage:
    installer = ModuleInstaller()
    installer.register_installer("my-package", {"installer_f": install_my_package, "priority": 10})
    outcome = installer.check_installation()
"""

import logging
from typing import Any, Callable, Mapping, Optional

from .config_models import InstallerSettings
from .env import package_installed, require_installation
from .models import InstallationOutcome, InstallerDescriptor, TestFunction
from .orchestrator import InstallationOrchestrator
from .registry import InstallerRegistry


class ModuleInstaller:
    """
    Holds one installer registry together with the settings it runs under.
    """

    def __init__(
        self,
        settings: Optional[InstallerSettings] = None,
        logger: Optional[logging.Logger] = None,
        require_installation_f: Optional[Callable[[], bool]] = None,
    ):
        self.settings = settings or InstallerSettings()
        self.logger = logger or logging.getLogger("module_installer")
        self.registry = InstallerRegistry(self.logger)
        self.require_installation_f = require_installation_f

    def register_installer(
        self, package_id: str, installer_props: Mapping[str, Any]
    ) -> InstallerDescriptor:
        """
        Registers an installer that runs on the next `check_installation`.

        The value returned by `installer_f` is passed to `test_f` (default
        `bool`). A falsy outcome counts as an installation failure and the
        package is reinstalled on the next run. Higher `priority` values run
        sooner (default 0).

        Raises:
            InstallerValidationError: If the package id or props are invalid.
        """
        return self.registry.register(package_id, installer_props)

    def installer(
        self,
        package_id: str,
        *,
        priority: Optional[int] = None,
        test_f: Optional[TestFunction] = None,
        installer_name: Optional[str] = None,
    ):
        """Decorator form of `register_installer`."""
        return self.registry.installer(
            package_id,
            priority=priority,
            test_f=test_f,
            installer_name=installer_name,
        )

    def orchestrator(self) -> InstallationOrchestrator:
        return InstallationOrchestrator(
            self.registry,
            self.settings,
            logger=self.logger,
            require_installation_f=self.require_installation_f,
        )

    def check_installation(self) -> InstallationOutcome:
        return self.orchestrator().check_installation()

    def package_installed(self, package_id: str) -> bool:
        return package_installed(package_id, self.settings, self.logger)

    def require_installation(self) -> bool:
        if self.require_installation_f is not None:
            return bool(self.require_installation_f())
        return require_installation(self.registry, self.settings, self.logger)

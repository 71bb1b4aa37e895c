# module_installer/orchestrator.py
# -*- coding: utf-8 -*-
"""
Runs the registered installers once and keeps the installed packages log
up to date.

`InstallationOrchestrator.check_installation` either reports the current
installation state or installs every pending package, highest priority
first. A failing installer stops the run; its package is recorded so that
the next run retries it. The outcome is returned to the caller, which decides
whether and how to exit.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .config_models import InstallerSettings
from .env import require_installation
from .exceptions import InstallationError, InstallationLogError
from .gitignore import ignore_path
from .installation_log import (
    append_error_log,
    create_file,
    read_installed_packages,
    swap_installed_package,
    timestamp_string,
)
from .models import (
    InstallationOutcome,
    InstallationRecord,
    InstallationState,
    OutcomeStatus,
)
from .registry import InstallerRegistry


class InstallationOrchestrator:
    """Decides whether to install, runs the installers and reports the result."""

    def __init__(
        self,
        registry: InstallerRegistry,
        settings: InstallerSettings,
        logger: Optional[logging.Logger] = None,
        require_installation_f: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            registry: The registered installers.
            settings: The installer settings.
            logger: Optional logger instance. If not provided, a new logger will be created.
            require_installation_f: Optional zero-argument callable deciding
                whether installation is required. Defaults to
                `env.require_installation` for the registry and settings.
        """
        self.registry = registry
        self.settings = settings
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.require_installation_f = require_installation_f or (
            lambda: require_installation(
                self.registry, self.settings, self.logger
            )
        )
        self.state = InstallationState()

    def _symbol(self, name: str, fallback: str) -> str:
        return self.settings.symbols.get(name, fallback)

    def _message(self, text: str) -> str:
        prefix = self.settings.log_prefix
        return f"{prefix} {text}" if prefix else text

    def check_installation(self) -> InstallationOutcome:
        """
        Installs the pending packages if installation is required, otherwise
        reports how many packages have been installed so far.
        """
        if self.require_installation_f():
            return self.install_packages()
        return self.print_installation_state()

    def print_installation_state(self) -> InstallationOutcome:
        installed_packages = read_installed_packages(
            self.settings.installed_packages_filepath,
            warn=False,
            current_logger=self.logger,
        )
        installed = {
            package_id: record
            for package_id, record in installed_packages.items()
            if record.installed
        }
        timestamps = [
            record.installed_at
            for record in installed.values()
            if record.installed_at
        ]
        first_package_installed_at = min(timestamps) if timestamps else None

        if first_package_installed_at:
            self.logger.info(
                self._message(
                    f"installed {len(installed)} packages since {first_package_installed_at}"
                )
            )
        else:
            self.logger.info(
                self._message(f"installed {len(installed)} packages")
            )

        return InstallationOutcome(
            status=OutcomeStatus.REPORTED,
            installed_count=len(installed),
            installed_packages=list(installed),
            first_installed_at=first_package_installed_at,
        )

    def install_packages(self) -> InstallationOutcome:
        """
        Runs every registered installer that has not succeeded yet.

        Packages without a record are installed, packages whose last result
        was unsuccessful are reinstalled and successful ones are skipped.
        """
        self.logger.info(
            self._message(
                f"{self._symbol('rocket', '🚀')} installing packages ..."
            )
        )
        self.state = InstallationState()

        installed_packages_filepath = self.settings.installed_packages_filepath
        create_file(installed_packages_filepath, current_logger=self.logger)
        for filepath in (
            installed_packages_filepath,
            self.settings.installation_errors_filepath,
        ):
            ignore_path(
                filepath,
                self.settings.gitignore_group,
                self.settings.gitignore_filepath,
                current_logger=self.logger,
            )

        installed_packages = read_installed_packages(
            installed_packages_filepath,
            warn=False,
            current_logger=self.logger,
        )
        installation_order = self.registry.installation_order()
        self.logger.debug(
            f"Installation order: {', '.join(installation_order)}"
        )

        for package_id in installation_order:
            try:
                self._process_package(
                    package_id, installed_packages.get(package_id)
                )
            except InstallationError as e:
                return self._on_installation_error(e.package_id, e.error)

        self.logger.info(
            self._message(
                f"{self._symbol('success', '✅')} successfully installed: {self.state.installed_package_count} packages"
            )
        )
        self.logger.info(self._message("installation finished, exiting ..."))
        return InstallationOutcome(
            status=OutcomeStatus.INSTALLED,
            installed_count=self.state.installed_package_count,
            installed_packages=list(self.state.installed_packages),
        )

    def _process_package(
        self, package_id: str, record: Optional[InstallationRecord]
    ) -> None:
        if record is None or record.result is None:
            self.logger.info(
                self._message(
                    f"{self._symbol('package', '📦')} installing: {package_id} ..."
                )
            )
            self.install_package(package_id)
        elif not record.installed:
            self.logger.info(
                self._message(
                    f"{self._symbol('package', '📦')} reinstalling: {package_id} ..."
                )
            )
            self.install_package(package_id)
        else:
            self.logger.debug(
                f"Package {package_id} is already installed, skipping"
            )

    def install_package(self, package_id: str) -> bool:
        """
        Runs one installer and records its outcome.

        The installer's return value is passed to its test function and the
        boolean outcome is stored in the installed packages log, whether or
        not it is truthy.

        Returns:
            True if the package was installed.

        Raises:
            InstallationError: If the installer or its test function raises,
                the outcome cannot be written to the log, or the outcome is
                falsy.
        """
        descriptor = self.registry.get_installer(package_id)
        try:
            result = descriptor.installer_f()
            output = bool(descriptor.test_f(result))
        except Exception as e:
            raise InstallationError(package_id, e) from e

        try:
            swap_installed_package(
                self.settings.installed_packages_filepath,
                package_id,
                InstallationRecord(
                    result=output, installed_at=timestamp_string()
                ),
                current_logger=self.logger,
            )
        except (OSError, InstallationLogError) as e:
            raise InstallationError(package_id, e) from e

        if output:
            self.state.installed_package_count += 1
            self.state.installed_packages.append(package_id)
            self.logger.info(
                self._message(
                    f"{self._symbol('success', '✅')} installed: {package_id}"
                )
            )

        if not output:
            raise InstallationError(
                package_id,
                f"installer '{descriptor.installer_name}' returned {result!r}, which did not pass its test",
            )
        return True

    def _on_installation_error(
        self, package_id: str, error: Any
    ) -> InstallationOutcome:
        """
        Writes the error into the installation errors log, reports it and
        ends the run.
        """
        append_error_log(
            self.settings.installation_errors_filepath, package_id, error
        )

        self.logger.critical(
            self._message(
                f"{self._symbol('critical', '🔥')} error caught in package installer: {package_id}"
            )
        )
        self.logger.error(
            str(error),
            exc_info=error if isinstance(error, BaseException) else False,
        )
        self.logger.critical(self._message("installation aborted, exiting ..."))

        return InstallationOutcome(
            status=OutcomeStatus.FAILED,
            installed_count=self.state.installed_package_count,
            installed_packages=list(self.state.installed_packages),
            failed_package=package_id,
            error=error,
        )

    def describe_installers(self) -> Dict[str, Dict[str, Any]]:
        """Display names and priorities of the registered installers, in run order."""
        installers: Dict[str, Dict[str, Any]] = {}
        for package_id in self.registry.installation_order():
            descriptor = self.registry.get_installer(package_id)
            installers[package_id] = {
                "installer_name": descriptor.installer_name,
                "priority": descriptor.priority,
            }
        return installers

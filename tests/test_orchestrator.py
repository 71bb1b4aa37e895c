# tests/test_orchestrator.py
# -*- coding: utf-8 -*-
"""
Tests for the installation orchestrator.
"""

import json
from unittest.mock import MagicMock

import pytest

from module_installer.models import OutcomeStatus
from module_installer.orchestrator import InstallationOrchestrator
from module_installer.registry import InstallerRegistry


def write_log(settings, data):
    path = settings.installed_packages_filepath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def read_log(settings):
    return json.loads(settings.installed_packages_filepath.read_text(encoding="utf-8"))


def is_even(value):
    return value % 2 == 0


@pytest.fixture
def registry():
    return InstallerRegistry()


class TestCheckInstallation:
    """Tests for choosing between installing and reporting."""

    def test_installs_when_required(self, registry, settings, logger):
        installer_f = MagicMock(return_value=True)
        registry.register("a", {"installer_f": installer_f})
        orchestrator = InstallationOrchestrator(
            registry, settings, logger, require_installation_f=lambda: True
        )

        outcome = orchestrator.check_installation()

        assert outcome.status is OutcomeStatus.INSTALLED
        installer_f.assert_called_once_with()

    def test_reports_when_not_required(self, registry, settings, logger):
        installer_f = MagicMock(return_value=True)
        registry.register("a", {"installer_f": installer_f})
        orchestrator = InstallationOrchestrator(
            registry, settings, logger, require_installation_f=lambda: False
        )

        outcome = orchestrator.check_installation()

        assert outcome.status is OutcomeStatus.REPORTED
        assert outcome.installed_count == 0
        installer_f.assert_not_called()
        assert not settings.installed_packages_filepath.exists()

    def test_second_run_reports(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: 42, "priority": 10, "test_f": is_even})
        registry.register("b", {"installer_f": lambda: "x"})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        first = orchestrator.check_installation()
        second = orchestrator.check_installation()

        assert first.status is OutcomeStatus.INSTALLED
        assert first.installed_count == 2
        assert second.status is OutcomeStatus.REPORTED
        assert second.installed_count == 2
        assert second.first_installed_at == min(
            record["installed_at"] for record in read_log(settings).values()
        )

    def test_force_installation_setting(self, registry, settings, logger):
        installer_f = MagicMock(return_value=True)
        registry.register("a", {"installer_f": installer_f})
        write_log(settings, {"a": {"result": True, "installed_at": "t"}})
        settings.force_installation = True
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.check_installation()

        # Forced runs still skip packages that already succeeded
        assert outcome.status is OutcomeStatus.INSTALLED
        assert outcome.installed_count == 0
        installer_f.assert_not_called()


class TestInstallPackages:
    """Tests for running the pending installers."""

    def test_priority_and_default_test(self, registry, settings, logger):
        registry.register("b", {"installer_f": lambda: "x"})
        registry.register("a", {"installer_f": lambda: 42, "priority": 10, "test_f": is_even})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.INSTALLED
        assert outcome.installed_packages == ["a", "b"]
        assert outcome.installed_count == 2
        log = read_log(settings)
        assert log["a"]["result"] is True
        assert log["b"]["result"] is True
        assert log["a"]["installed_at"]
        assert log["b"]["installed_at"]

    def test_runs_in_priority_order(self, registry, settings, logger):
        calls = []
        for package_id, priority in [("low", -1), ("mid", 0), ("top", 9), ("mid2", 0)]:
            registry.register(
                package_id,
                {
                    "installer_f": lambda package_id=package_id: calls.append(package_id) or True,
                    "priority": priority,
                },
            )
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        orchestrator.install_packages()

        assert calls == ["top", "mid", "mid2", "low"]

    def test_skips_installed_packages(self, registry, settings, logger):
        installer_f = MagicMock(return_value=True)
        registry.register("a", {"installer_f": installer_f})
        write_log(settings, {"a": {"result": True, "installed_at": "2024-01-01T00:00:00+00:00"}})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        installer_f.assert_not_called()
        assert outcome.installed_count == 0
        assert read_log(settings)["a"]["installed_at"] == "2024-01-01T00:00:00+00:00"

    def test_reinstalls_failed_packages(self, registry, settings, logger):
        installer_f = MagicMock(return_value=True)
        registry.register("a", {"installer_f": installer_f})
        write_log(settings, {"a": {"result": False, "installed_at": "2024-01-01T00:00:00+00:00"}})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        installer_f.assert_called_once_with()
        assert outcome.installed_count == 1
        record = read_log(settings)["a"]
        assert record["result"] is True
        assert record["installed_at"] != "2024-01-01T00:00:00+00:00"
        logger.info.assert_any_call("module-installer 📦 reinstalling: a ...")

    def test_keeps_records_of_unregistered_packages(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: True})
        write_log(settings, {"old": {"result": True, "installed_at": "t"}})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        orchestrator.install_packages()

        assert set(read_log(settings)) == {"a", "old"}

    def test_creates_log_and_ignores_both_files(self, registry, settings, logger):
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.INSTALLED
        assert read_log(settings) == {}
        gitignore = settings.gitignore_filepath.read_text(encoding="utf-8")
        assert gitignore == (
            "# module-installer\n"
            "environment/installed-packages.json\n"
            "environment/installation-errors.log\n"
        )

    def test_without_ignore_file(self, registry, settings, logger):
        settings.gitignore_filepath = None
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.INSTALLED

    def test_logs_run_summary(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: True})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        orchestrator.install_packages()

        logger.info.assert_any_call("module-installer 🚀 installing packages ...")
        logger.info.assert_any_call("module-installer 📦 installing: a ...")
        logger.info.assert_any_call("module-installer ✅ installed: a")
        logger.info.assert_any_call("module-installer ✅ successfully installed: 1 packages")


class TestInstallationErrors:
    """Tests for the fatal installer error path."""

    def test_falsy_outcome_is_recorded_and_stops_the_run(self, registry, settings, logger):
        later = MagicMock(return_value=True)
        registry.register("a", {"installer_f": lambda: 0, "priority": 10})
        registry.register("b", {"installer_f": later})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.succeeded is False
        assert outcome.failed_package == "a"
        later.assert_not_called()
        assert read_log(settings) == {"a": {"result": False, "installed_at": read_log(settings)["a"]["installed_at"]}}
        errors = settings.installation_errors_filepath.read_text(encoding="utf-8")
        assert "\na\n" in errors
        assert "0" in errors

    def test_failed_test_function_is_retried_next_run(self, registry, settings, logger):
        results = iter([3, 4])
        registry.register("a", {"installer_f": lambda: next(results), "test_f": is_even})

        first = InstallationOrchestrator(registry, settings, logger).check_installation()
        second = InstallationOrchestrator(registry, settings, logger).check_installation()
        third = InstallationOrchestrator(registry, settings, logger).check_installation()

        assert first.status is OutcomeStatus.FAILED
        assert second.status is OutcomeStatus.INSTALLED
        assert second.installed_packages == ["a"]
        assert third.status is OutcomeStatus.REPORTED

    def test_exception_is_fatal_and_not_recorded(self, registry, settings, logger):
        error = RuntimeError("boom")
        later = MagicMock(return_value=True)
        registry.register("a", {"installer_f": MagicMock(side_effect=error), "priority": 1})
        registry.register("b", {"installer_f": later})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.failed_package == "a"
        assert outcome.error is error
        later.assert_not_called()
        assert read_log(settings) == {}
        assert "boom" in settings.installation_errors_filepath.read_text(encoding="utf-8")

    def test_test_function_exception_is_fatal(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: "odd", "test_f": is_even})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.FAILED
        assert isinstance(outcome.error, TypeError)

    def test_log_write_failure_is_fatal(self, registry, settings, logger, mocker):
        mocker.patch(
            "module_installer.orchestrator.swap_installed_package",
            side_effect=OSError("disk full"),
        )
        later = MagicMock(return_value=True)
        registry.register("a", {"installer_f": lambda: True, "priority": 1})
        registry.register("b", {"installer_f": later})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.failed_package == "a"
        assert outcome.installed_count == 0
        later.assert_not_called()
        assert "OSError: disk full" in settings.installation_errors_filepath.read_text(encoding="utf-8")

    def test_counts_packages_installed_before_the_failure(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: True, "priority": 2})
        registry.register("b", {"installer_f": lambda: False, "priority": 1})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.install_packages()

        assert outcome.installed_count == 1
        assert outcome.installed_packages == ["a"]
        log = read_log(settings)
        assert log["a"]["result"] is True
        assert log["b"]["result"] is False

    def test_logs_error_banner(self, registry, settings, logger):
        registry.register("a", {"installer_f": lambda: None})
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        orchestrator.install_packages()

        logger.critical.assert_any_call(
            "module-installer 🔥 error caught in package installer: a"
        )
        logger.critical.assert_any_call("module-installer installation aborted, exiting ...")
        logger.error.assert_called_once()


class TestPrintInstallationState:
    """Tests for the status report."""

    def test_counts_successful_records(self, registry, settings, logger):
        write_log(
            settings,
            {
                "a": {"result": True, "installed_at": "2024-03-01T00:00:00+00:00"},
                "b": {"result": True, "installed_at": "2024-01-01T00:00:00+00:00"},
                "c": {"result": False, "installed_at": "2023-01-01T00:00:00+00:00"},
            },
        )
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.print_installation_state()

        assert outcome.status is OutcomeStatus.REPORTED
        assert outcome.installed_count == 2
        assert outcome.first_installed_at == "2024-01-01T00:00:00+00:00"
        logger.info.assert_called_once_with(
            "module-installer installed 2 packages since 2024-01-01T00:00:00+00:00"
        )

    def test_nothing_installed(self, registry, settings, logger):
        orchestrator = InstallationOrchestrator(registry, settings, logger)

        outcome = orchestrator.print_installation_state()

        assert outcome.installed_count == 0
        assert outcome.first_installed_at is None
        logger.info.assert_called_once_with("module-installer installed 0 packages")
        logger.warning.assert_not_called()


class TestDescribeInstallers:
    def test_lists_in_installation_order(self, registry, settings):
        registry.register("a", {"installer_f": lambda: True, "installer_name": "A"})
        registry.register("b", {"installer_f": is_even, "priority": 3})
        orchestrator = InstallationOrchestrator(registry, settings)

        assert orchestrator.describe_installers() == {
            "b": {"installer_name": "is_even", "priority": 3},
            "a": {"installer_name": "A", "priority": 0},
        }

    def test_looks_up_each_installer_once(self, registry, settings, mocker):
        registry.register("a", {"installer_f": lambda: True})
        registry.register("b", {"installer_f": is_even})
        get_installer = mocker.spy(registry, "get_installer")
        orchestrator = InstallationOrchestrator(registry, settings)

        orchestrator.describe_installers()

        assert get_installer.call_count == 2

# tests/conftest.py
import logging
import os
from unittest.mock import MagicMock

import pytest

from module_installer.config_models import InstallerSettings


@pytest.fixture(autouse=True)
def _clean_installer_env(monkeypatch):
    """Keep MODULE_INSTALLER_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("MODULE_INSTALLER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings(tmp_path):
    return InstallerSettings(
        installed_packages_filepath=tmp_path
        / "environment"
        / "installed-packages.json",
        installation_errors_filepath=tmp_path
        / "environment"
        / "installation-errors.log",
        gitignore_filepath=tmp_path / ".gitignore",
    )


@pytest.fixture
def logger():
    return MagicMock(spec=logging.Logger)

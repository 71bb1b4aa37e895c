# module_installer/models.py
# -*- coding: utf-8 -*-
"""
Data types shared by the registry, the installation log and the orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

InstallerFunction = Callable[[], Any]
TestFunction = Callable[[Any], Any]


class InstallerProps(BaseModel):
    """Raw installer props as passed to `InstallerRegistry.register`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    installer_f: InstallerFunction
    priority: Optional[StrictInt] = None
    test_f: Optional[TestFunction] = None
    installer_name: Optional[StrictStr] = None


@dataclass(frozen=True)
class InstallerDescriptor:
    """A normalized, registered installer."""

    package_id: str
    installer_f: InstallerFunction
    priority: int
    test_f: TestFunction
    installer_name: str


class InstallationRecord(BaseModel):
    """One entry of the installed packages log."""

    model_config = ConfigDict(extra="allow")

    result: Any = None
    installed_at: Optional[str] = None

    @property
    def installed(self) -> bool:
        return bool(self.result)


@dataclass
class InstallationState:
    """Bookkeeping for a single installation run."""

    installed_package_count: int = 0
    installed_packages: List[str] = field(default_factory=list)


class OutcomeStatus(str, Enum):
    """How a call to `check_installation` ended."""

    REPORTED = "REPORTED"
    INSTALLED = "INSTALLED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class InstallationOutcome:
    status: OutcomeStatus
    installed_count: int
    installed_packages: List[str] = field(default_factory=list)
    failed_package: Optional[str] = None
    error: Any = None
    first_installed_at: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

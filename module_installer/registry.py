# module_installer/registry.py
# -*- coding: utf-8 -*-
"""
Registry for package installers.

Installers are registered under a package id, either directly with
`InstallerRegistry.register` or with the `InstallerRegistry.installer`
decorator, and are later run by the orchestrator in priority order.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .exceptions import InstallerValidationError
from .models import InstallerDescriptor, InstallerProps, TestFunction
from .prototypes import installer_props_prototype

module_logger = logging.getLogger(__name__)

PACKAGE_ID_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-/]*$")

INSTALLER_PROPS_ERRORS: Dict[str, str] = {
    "installer_f": "installer_f must be a function",
    "priority": "priority must be an integer",
    "test_f": "test_f must be a function",
    "installer_name": "installer_name must be a string",
}


def validate_package_id(package_id: Any) -> None:
    """
    Raises InstallerValidationError unless `package_id` is a symbol-like string.
    """
    if not isinstance(package_id, str) or not PACKAGE_ID_PATTERN.match(
        package_id
    ):
        raise InstallerValidationError(
            package_id, ["package_id must be an identifier"]
        )


def validate_installer_props(
    package_id: str, installer_props: Any
) -> InstallerProps:
    """
    Checks the shape of raw installer props.

    Returns:
        The props as an InstallerProps model.

    Raises:
        InstallerValidationError: With one message per failed field.
    """
    if isinstance(installer_props, InstallerProps):
        return installer_props
    if not isinstance(installer_props, Mapping):
        raise InstallerValidationError(
            package_id, ["installer props must be a mapping"]
        )

    try:
        return InstallerProps.model_validate(dict(installer_props))
    except ValidationError as e:
        errors: List[str] = []
        for error in e.errors():
            field_name = str(error["loc"][0]) if error["loc"] else ""
            if error["type"] == "extra_forbidden":
                message = f"unknown installer prop '{field_name}'"
            else:
                message = INSTALLER_PROPS_ERRORS.get(
                    field_name, f"{field_name}: {error['msg']}"
                )
            if message not in errors:
                errors.append(message)
        raise InstallerValidationError(package_id, errors) from e


class InstallerRegistry:
    """
    Mapping of package ids to installer descriptors.

    Registering a package id a second time replaces its descriptor but keeps
    its original position among packages of equal priority.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or module_logger
        self._installers: Dict[str, InstallerDescriptor] = {}

    def register(
        self, package_id: str, installer_props: Mapping[str, Any]
    ) -> InstallerDescriptor:
        """
        Registers an installer for `package_id`.

        Args:
            package_id: Symbol-like identifier of the package.
            installer_props: Mapping with the required `installer_f` callable
                and the optional `priority` (int), `test_f` (callable) and
                `installer_name` (str) keys.

        Returns:
            The normalized descriptor.

        Raises:
            InstallerValidationError: If the package id or the props are invalid.
        """
        validate_package_id(package_id)
        props = validate_installer_props(package_id, installer_props)
        descriptor = installer_props_prototype(package_id, props)

        if package_id in self._installers:
            self.logger.debug(
                f"Replacing installer registered for package '{package_id}'"
            )
        self._installers[package_id] = descriptor
        self.logger.debug(
            f"Registered installer '{descriptor.installer_name}' for package '{package_id}' (priority {descriptor.priority})"
        )
        return descriptor

    def installer(
        self,
        package_id: str,
        *,
        priority: Optional[int] = None,
        test_f: Optional[TestFunction] = None,
        installer_name: Optional[str] = None,
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
        """
        Decorator for registering an installer function.

        Usage:
            @registry.installer("my-package", priority=10)
            def install_my_package():
                ...
        """

        def decorator(installer_f: Callable[[], Any]) -> Callable[[], Any]:
            props: Dict[str, Any] = {"installer_f": installer_f}
            if priority is not None:
                props["priority"] = priority
            if test_f is not None:
                props["test_f"] = test_f
            if installer_name is not None:
                props["installer_name"] = installer_name
            self.register(package_id, props)
            return installer_f

        return decorator

    def get_installer(self, package_id: str) -> InstallerDescriptor:
        """
        Raises:
            KeyError: If no installer is registered for the package id.
        """
        if package_id not in self._installers:
            raise KeyError(f"No installer registered for package '{package_id}'")
        return self._installers[package_id]

    def get_all_installers(self) -> Dict[str, InstallerDescriptor]:
        return self._installers.copy()

    def package_ids(self) -> List[str]:
        return list(self._installers)

    def installation_order(self) -> List[str]:
        """
        Returns the registered package ids, highest priority first.

        Ties keep registration order.
        """
        return sorted(
            self._installers,
            key=lambda package_id: self._installers[package_id].priority,
            reverse=True,
        )

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._installers

    def __len__(self) -> int:
        return len(self._installers)

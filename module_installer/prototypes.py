# module_installer/prototypes.py
# -*- coding: utf-8 -*-
"""
Fills in the defaults of validated installer props.
"""

import functools
from typing import Any, Callable

from .models import InstallerDescriptor, InstallerProps

DEFAULT_PRIORITY = 0
ANONYMOUS_INSTALLER_NAME = "anonymous-installer"


def installer_f_to_installer_name(installer_f: Callable[..., Any]) -> str:
    """
    Derives a display name from an installer function.

    Partials are unwrapped to the function they wrap and nested functions
    lose their enclosing scope. Lambdas and callables without a usable name
    get ANONYMOUS_INSTALLER_NAME.
    """
    while isinstance(installer_f, functools.partial):
        installer_f = installer_f.func

    name = getattr(installer_f, "__qualname__", None) or getattr(
        installer_f, "__name__", None
    )
    if not name:
        # Callable instances: fall back to the class name
        name = getattr(type(installer_f), "__qualname__", None)
        if name in (None, "function", "builtin_function_or_method"):
            return ANONYMOUS_INSTALLER_NAME
    if "<lambda>" in name:
        return ANONYMOUS_INSTALLER_NAME
    # Functions defined inside another function: keep the local name only
    return name.rsplit("<locals>.", 1)[-1]


def installer_props_prototype(
    package_id: str, installer_props: InstallerProps
) -> InstallerDescriptor:
    """
    Builds the complete descriptor for validated installer props.

    Defaults: priority 0, test_f `bool`, and a display name derived from the
    installer function unless `installer_name` was given explicitly.
    """
    priority = installer_props.priority
    test_f = installer_props.test_f
    installer_name = installer_props.installer_name

    return InstallerDescriptor(
        package_id=package_id,
        installer_f=installer_props.installer_f,
        priority=DEFAULT_PRIORITY if priority is None else priority,
        test_f=bool if test_f is None else test_f,
        installer_name=installer_name
        or installer_f_to_installer_name(installer_props.installer_f),
    )

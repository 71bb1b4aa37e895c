# module_installer/cli.py
# -*- coding: utf-8 -*-
"""
Command-line interface for the module installer.

Installer modules are plain Python modules exposing a hook:

    def register_installers(installer):
        installer.register_installer("my-package", {"installer_f": ...})
"""

import argparse
import importlib
import logging
import sys
from typing import List, Optional

from .api import ModuleInstaller
from .config_loader import CONFIG_FILE_DEFAULT, load_installer_settings
from .exceptions import ModuleInstallerError
from .logging_config import resolve_log_level, setup_logging

REGISTER_HOOK = "register_installers"


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="module-installer",
        description="Run-once installer for registered packages",
    )

    # General options
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--config",
        default=CONFIG_FILE_DEFAULT,
        help="Path to the YAML configuration file",
    )
    parser.add_argument(
        "--installed-packages",
        dest="installed_packages",
        default=None,
        help="Path to the installed packages log",
    )
    parser.add_argument(
        "--installation-errors",
        dest="installation_errors",
        default=None,
        help="Path to the installation errors log",
    )
    parser.add_argument(
        "--gitignore",
        default=None,
        help="Ignore file the logs are added to",
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        dest="command", help="Command to execute"
    )

    check_parser = subparsers.add_parser(
        "check", help="Install pending packages if installation is required"
    )
    check_parser.add_argument(
        "--force",
        action="store_true",
        help="Run pending installers even if every package looks installed",
    )
    check_parser.add_argument(
        "modules", nargs="+", help="Modules that register installers"
    )

    subparsers.add_parser(  # noqa: F841
        "status", help="Report how many packages have been installed"
    )

    list_parser = subparsers.add_parser(
        "list", help="List registered installers in installation order"
    )
    list_parser.add_argument(
        "modules", nargs="+", help="Modules that register installers"
    )

    return parser.parse_args(args)


def load_installer_modules(
    installer: ModuleInstaller, module_names: List[str]
) -> None:
    """
    Imports each module and calls its `register_installers` hook.

    Raises:
        ImportError: If a module cannot be imported.
        ModuleInstallerError: If a module has no `register_installers` hook.
    """
    for module_name in module_names:
        module = importlib.import_module(module_name)
        hook = getattr(module, REGISTER_HOOK, None)
        if not callable(hook):
            raise ModuleInstallerError(
                f"Module '{module_name}' does not define {REGISTER_HOOK}()"
            )
        hook(installer)
        installer.logger.debug(f"Loaded installers from {module_name}")


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the module installer.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Exit code: 0 when packages were reported or installed, 1 when an
        installer failed or the command could not run.
    """
    parsed_args = parse_args(args)

    setup_logging(logging.DEBUG if parsed_args.verbose else logging.INFO)
    logger = logging.getLogger("module_installer")

    if not parsed_args.command:
        logger.error("No command specified. Use --help for usage information.")
        return 1

    try:
        settings = load_installer_settings(
            parsed_args, parsed_args.config, current_logger=logger
        )
        if not parsed_args.verbose:
            logging.getLogger().setLevel(resolve_log_level(settings.log_level))

        installer = ModuleInstaller(settings, logger)

        if parsed_args.command == "status":
            installer.orchestrator().print_installation_state()
            return 0

        load_installer_modules(installer, parsed_args.modules)

        if parsed_args.command == "list":
            logger.info("Registered installers:")
            for package_id, info in (
                installer.orchestrator().describe_installers().items()
            ):
                logger.info(
                    f"  {package_id}: {info['installer_name']} (priority {info['priority']})"
                )
            return 0

        outcome = installer.check_installation()
        return 0 if outcome.succeeded else 1

    except Exception as e:
        logger.exception(f"Error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

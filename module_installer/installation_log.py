# module_installer/installation_log.py
# -*- coding: utf-8 -*-
"""
File helpers for the installed packages log and the installation errors log.

The installed packages log is a JSON object keyed by package id:

    {
      "my-package": {"installed_at": "2024-01-01T12:00:00+00:00", "result": true}
    }

The installation errors log is an append-only, human-readable text file.
"""

import datetime
import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import InstallationLogError
from .models import InstallationRecord

module_logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DataFileStatus(str, Enum):
    """Result of `install_data_file`."""

    CREATED = "CREATED"
    ALREADY_EXISTS = "ALREADY_EXISTS"


def timestamp_string() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def file_exists(path: PathLike) -> bool:
    return Path(path).is_file()


def _write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_file_path = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as temp_f:
            temp_f.write(content)
        os.replace(temp_file_path, path)
    finally:
        if os.path.exists(temp_file_path):
            os.unlink(temp_file_path)


def _dump_installed_packages(installed_packages: Dict[str, Any]) -> str:
    return json.dumps(installed_packages, indent=2, sort_keys=True) + "\n"


def create_file(
    path: PathLike, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Creates an empty installed packages log if none exists.

    Returns:
        True if the file was created, False if it already existed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    p = Path(path)
    if p.exists():
        return False
    _write_text_atomic(p, _dump_installed_packages({}))
    logger_to_use.debug(f"Created installed packages log: {p}")
    return True


def read_installed_packages(
    path: PathLike,
    warn: bool = True,
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, InstallationRecord]:
    """
    Reads the installed packages log.

    Args:
        path: Path to the log.
        warn: Whether to log a warning if the file does not exist.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        A mapping of package ids to their records. Empty if the file is
        missing or empty.

    Raises:
        InstallationLogError: If the file is not a JSON object.
    """
    logger_to_use = current_logger if current_logger else module_logger
    p = Path(path)

    if not p.is_file():
        if warn:
            logger_to_use.warning(f"Installed packages log not found: {p}")
        return {}

    try:
        content = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InstallationLogError(p, "not valid UTF-8") from e
    if not content.strip():
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InstallationLogError(p, f"not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InstallationLogError(
            p, f"expected an object, got {type(data).__name__}"
        )

    installed_packages: Dict[str, InstallationRecord] = {}
    for package_id, record in data.items():
        if not isinstance(record, dict):
            raise InstallationLogError(
                p, f"record for '{package_id}' is not an object"
            )
        installed_packages[package_id] = InstallationRecord(**record)
    return installed_packages


def swap_installed_package(
    path: PathLike,
    package_id: str,
    record: InstallationRecord,
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, InstallationRecord]:
    """
    Stores `record` under `package_id`, keeping every other entry of the log.

    Returns:
        The log contents after the update.
    """
    installed_packages = read_installed_packages(
        path, warn=False, current_logger=current_logger
    )
    installed_packages[package_id] = record
    _write_text_atomic(
        Path(path),
        _dump_installed_packages(
            {
                key: value.model_dump(mode="json")
                for key, value in installed_packages.items()
            }
        ),
    )
    return installed_packages


def _format_error(error: Any) -> str:
    if isinstance(error, BaseException):
        message = str(error)
        name = type(error).__name__
        return f"{name}: {message}" if message else name
    return str(error)


def append_error_log(path: PathLike, package_id: str, error: Any) -> None:
    """
    Appends a timestamped block describing an installer failure.

    Exceptions are written with their type name, e.g. `KeyError: 'x'`.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "a", encoding="utf-8") as f:
        f.write(f"\n[{timestamp_string()}]\n{package_id}\n{_format_error(error)}\n")


def install_data_file(
    filepath: PathLike,
    body: Any,
    header: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> DataFileStatus:
    """
    Creates a JSON or YAML data file, unless it already exists.

    The format follows the file extension (.yaml/.yml for YAML, anything else
    is JSON). A header is written as leading comment lines, which only YAML
    supports.

    Args:
        filepath: Where to create the file.
        body: Data to serialize. None writes an empty document.
        header: Optional text placed above the body.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        DataFileStatus.CREATED or DataFileStatus.ALREADY_EXISTS.

    Raises:
        ValueError: If a header is given for a JSON file.
    """
    logger_to_use = current_logger if current_logger else module_logger
    p = Path(filepath)

    if p.exists():
        logger_to_use.debug(f"Data file already exists: {p}")
        return DataFileStatus.ALREADY_EXISTS

    is_yaml = p.suffix.lower() in {".yaml", ".yml"}
    if header and not is_yaml:
        raise ValueError(f"Headers are only supported for YAML files: {p}")

    content = ""
    if header:
        content += (
            "\n".join(f"# {line}".rstrip() for line in header.splitlines())
            + "\n"
        )
    if body is not None:
        if is_yaml:
            content += yaml.safe_dump(body, sort_keys=False)
        else:
            content += json.dumps(body, indent=2, sort_keys=True) + "\n"

    _write_text_atomic(p, content)
    logger_to_use.info(f"Created data file: {p}")
    return DataFileStatus.CREATED

# module_installer/gitignore.py
# -*- coding: utf-8 -*-
"""
Keeps the installer's log files out of version control.

Entries are grouped under a ``# <group>`` comment so that repeated runs
find and reuse the same block.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

module_logger = logging.getLogger(__name__)


def _group_header(group: str) -> str:
    return f"# {group}"


def _ignore_entry(path: Path, gitignore: Path) -> str:
    """Absolute paths under the ignore file's directory are made relative to it."""
    if path.is_absolute():
        for base in (gitignore.parent, gitignore.parent.resolve()):
            try:
                return path.relative_to(base).as_posix()
            except ValueError:
                continue
    return path.as_posix()


def ignore_path(
    path: Union[str, Path],
    group: str,
    gitignore_filepath: Optional[Union[str, Path]],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Adds `path` to the ignore file under the `group` block.

    Args:
        path: The path to ignore, written with POSIX separators. Absolute
            paths inside the ignore file's directory are written relative
            to it.
        group: Name of the comment block the entry belongs to.
        gitignore_filepath: The ignore file. None disables ignore management.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        True if the ignore file was changed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if gitignore_filepath is None:
        return False

    gitignore = Path(gitignore_filepath)
    entry = _ignore_entry(Path(path), gitignore)
    lines: List[str] = (
        gitignore.read_text(encoding="utf-8").splitlines()
        if gitignore.is_file()
        else []
    )

    if entry in (line.strip() for line in lines):
        return False

    header = _group_header(group)
    if header in lines:
        # Insert at the end of the existing block
        index = lines.index(header) + 1
        while index < len(lines) and lines[index].strip():
            index += 1
        lines.insert(index, entry)
    else:
        if lines and lines[-1].strip():
            lines.append("")
        lines.extend([header, entry])

    gitignore.parent.mkdir(parents=True, exist_ok=True)
    gitignore.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger_to_use.debug(f"Added '{entry}' to {gitignore} ({group})")
    return True

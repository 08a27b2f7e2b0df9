"""
File Collector Module

Resolves the input path given by the user into the list of C source files to
analyze or fix.
"""

import os
import stat
from typing import List
from dataclasses import dataclass
from enum import Enum
import logging

from ..config import C_EXTENSIONS

logger = logging.getLogger(__name__)


class EpicstyleError(Exception):
    """Base class for epicstyle errors."""


class InputPathError(EpicstyleError):
    """The top-level input path does not exist or cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class InputKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class InputTarget:
    """A resolved input path."""
    path: str
    kind: InputKind


def is_c_file(path: str) -> bool:
    return os.path.splitext(path)[1] in C_EXTENSIONS


def resolve_input(path: str) -> InputTarget:
    """
    Stat the input path once and tag it as a file or a directory.

    Raises:
        InputPathError: If the path cannot be stat'ed
    """
    try:
        info = os.stat(path)
    except OSError as e:
        raise InputPathError(path, e.strerror or str(e)) from e

    if stat.S_ISDIR(info.st_mode):
        return InputTarget(path, InputKind.DIRECTORY)
    return InputTarget(path, InputKind.FILE)


def collect_files(path: str) -> List[str]:
    """
    Collect the C files to process.

    Args:
        path: A .c/.h file or a directory to walk recursively

    Returns:
        Sorted list of file paths; empty when nothing matches

    Raises:
        InputPathError: If the path does not exist
    """
    target = resolve_input(path)

    if target.kind is InputKind.FILE:
        if is_c_file(target.path):
            return [target.path]
        logger.warning(f"Skipping non-C file: {target.path}")
        return []

    files = []
    for root, _dirs, names in os.walk(target.path, onerror=_log_walk_error):
        for name in names:
            full_path = os.path.join(root, name)
            if is_c_file(name) and os.path.isfile(full_path):
                files.append(full_path)

    files.sort()
    logger.info(f"Found {len(files)} C/H files under {target.path}")
    return files


def _log_walk_error(error: OSError):
    logger.error(f"Cannot read directory {error.filename}: {error.strerror}")

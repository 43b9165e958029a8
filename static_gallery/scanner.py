"""
Module: scanner
Purpose: Directory listing utilities.
"""

import os
from typing import List

from .exceptions import ScanError
from .utils import log_debug, log_error

SUPPORTED_FORMATS = {"jpeg", "jpg"}


def list_dir(path: str) -> List[str]:
    """
    List the regular files of a directory, non-recursively.

    Args:
        path: Directory to list.

    Returns:
        Sorted absolute file paths; subdirectories are ignored.

    Raises:
        ScanError: If the directory cannot be read.
    """
    normalized = os.path.abspath(path)
    if not os.path.isdir(normalized):
        log_error(f"Path is not a directory: {normalized}")
        raise ScanError(f"Path is not a directory: {normalized}")
    try:
        names = sorted(os.listdir(normalized))
    except OSError as exc:
        log_error(f"Failed to list directory {normalized}: {exc}")
        raise ScanError(f"Failed to list directory {normalized}") from exc
    files = []
    for name in names:
        file_path = os.path.join(normalized, name)
        if os.path.isfile(file_path):
            files.append(file_path)
    return files


def is_supported(path: str) -> bool:
    _, ext = os.path.splitext(path)
    return bool(ext) and ext.lstrip(".").lower() in SUPPORTED_FORMATS


def filter_supported_files(files: List[str]) -> List[str]:
    """
    Return only supported files based on extension.

    Args:
        files: File paths to filter.

    Returns:
        Filtered list containing only supported image files.

    Raises:
        None
    """
    supported: List[str] = []
    for path in files:
        if is_supported(path):
            supported.append(os.path.abspath(path))
        else:
            log_debug(f"Ignoring unsupported file: {path}")
    return supported


def contains_images(path: str) -> bool:
    """Whether a directory holds at least one supported image."""
    if not os.path.isdir(path):
        return False
    try:
        return any(is_supported(file_path) for file_path in list_dir(path))
    except ScanError:
        return False

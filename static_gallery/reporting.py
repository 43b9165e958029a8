"""
Module: reporting
Purpose: Run log and console echo utilities.
"""

import os
import sys
from datetime import datetime, timezone
from typing import List, TextIO

LOG_FILE_NAME = "static_gallery.log"
LOG_FILE_ENV = "STATIC_GALLERY_LOG"

LEVEL_ERROR = 1
LEVEL_WARNING = 2
LEVEL_INFO = 3
LEVEL_DEBUG = 4
LEVEL_TAGS = {
    "ERROR": LEVEL_ERROR,
    "WARNING": LEVEL_WARNING,
    "INFO": LEVEL_INFO,
    "DEBUG": LEVEL_DEBUG,
}

_VERBOSITY = LEVEL_ERROR
_ECHO_STREAM: TextIO | None = None


def configure_verbosity(level: int, stream: TextIO | None = None) -> int:
    """
    Set the console echo level once at startup.

    Args:
        level: 0 silences the console, 1 shows errors, 2 warnings, 3 info, 4 debug.
        stream: Optional echo target; defaults to stderr at write time.

    Returns:
        The clamped level that was applied.
    """
    global _VERBOSITY, _ECHO_STREAM
    _VERBOSITY = max(0, min(level, LEVEL_DEBUG))
    _ECHO_STREAM = stream
    return _VERBOSITY


def verbosity() -> int:
    return _VERBOSITY


def log_path() -> str:
    """Absolute path of the run log, honouring the environment override."""
    return os.path.abspath(os.getenv(LOG_FILE_ENV) or LOG_FILE_NAME)


def ensure_log_initialized() -> str:
    """Ensure the run log exists and return its absolute path."""
    path = log_path()
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass
    return path


def _level_of(entry: str) -> int:
    if entry.startswith("["):
        tag = entry[1:].split("]", 1)[0]
        return LEVEL_TAGS.get(tag, LEVEL_INFO)
    return LEVEL_INFO


def write_log(entries: List[str], outfile: str | None = None):
    """
    Append entries to the logfile and echo them to the console when the
    configured verbosity allows it.
    """
    target = outfile or log_path()
    directory = os.path.dirname(os.path.abspath(target)) or "."
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat()
    stream = _ECHO_STREAM or sys.stderr
    with open(target, "a", encoding="utf-8") as handle:
        for entry in entries:
            normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
            handle.write(f"[{timestamp}] {normalized}\n")
            if _level_of(normalized) <= _VERBOSITY:
                stream.write(normalized + "\n")

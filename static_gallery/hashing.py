"""Content identity helpers used for deduplication and artifact names."""

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
import hashlib
import os
from typing import List, Optional, Tuple

from .exceptions import IdentityError
from .utils import executor_mode, log_error, log_warning

IDENTITY_BYTES = 8
CHUNK_SIZE = 65536


def compute_identity(path: str) -> int:
    """
    Compute the 64-bit content identity of a file.

    Args:
        path: Path to the file.

    Returns:
        Unsigned integer derived from the file bytes only.

    Raises:
        IdentityError: If the file cannot be read.
    """
    try:
        normalized = os.path.abspath(path)
        digest = hashlib.blake2b(digest_size=IDENTITY_BYTES)
        with open(normalized, "rb") as handle:
            for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
                digest.update(chunk)
        return int.from_bytes(digest.digest(), "big")
    except Exception as exc:
        raise IdentityError(f"Failed to compute identity for {path}: {exc}") from exc


def _identify_file(path: str) -> Tuple[str, Optional[int], str]:
    """
    Helper function to identify a single file.
    Designed to be used with a process pool; errors are returned for the
    caller to log.
    """
    try:
        return path, compute_identity(path), ""
    except IdentityError as exc:
        return path, None, str(exc)


def _keep_identified(results: List[Tuple[str, Optional[int], str]]) -> List[Tuple[str, int]]:
    identified = []
    for path, identity, error in results:
        if identity is None:
            log_error(f"Skipping file during identification: {path} ({error})")
            continue
        identified.append((path, identity))
    return identified


def identify_paths(paths: List[str]) -> List[Tuple[str, int]]:
    """
    Identify files in parallel, keeping input order.

    Args:
        paths: File paths to identify.

    Returns:
        List of (path, identity) pairs; unreadable files are left out.
    """
    if not paths:
        return []
    results = []
    if len(paths) == 1:
        results = [_identify_file(paths[0])]
        return _keep_identified(results)
    mode = executor_mode()
    if mode == "process":
        try:
            with ProcessPoolExecutor() as executor:
                results = list(executor.map(_identify_file, paths))
        except (NotImplementedError, PermissionError, OSError, RuntimeError) as exc:
            log_warning(f"ProcessPool unavailable, falling back to ThreadPool for identification: {exc}")
            with ThreadPoolExecutor() as executor:
                results = list(executor.map(_identify_file, paths))
    else:
        with ThreadPoolExecutor() as executor:
            results = list(executor.map(_identify_file, paths))

    return _keep_identified(results)

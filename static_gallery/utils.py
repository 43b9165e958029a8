"""
Module: utils
Purpose: Shared helper utilities for static-gallery.
"""

import os
import shutil
from concurrent.futures import ProcessPoolExecutor

from .exceptions import StaticGalleryError, TemplateError

DEFAULT_PIXEL_LIMIT = 50_000_000  # ≤50 MP safety default
MAX_OVERRIDE_LIMIT = 200_000_000  # Hard cap for expert override
PIXEL_LIMIT_ENV = "STATIC_GALLERY_MAX_PIXELS"
EXECUTOR_ENV = "STATIC_GALLERY_EXECUTOR"
_PIXEL_LIMIT = DEFAULT_PIXEL_LIMIT
_EXECUTOR_MODE: str | None = None
_EXECUTOR_LOGGED = False
_PROCESS_POOL_SUPPORTED: bool | None = None


def _apply_pillow_limit(limit: int) -> None:
    try:
        from PIL import Image
        Image.MAX_IMAGE_PIXELS = limit
    except Exception as exc:
        log_warning(
            f"Unable to update Pillow pixel safety limit to {limit:,} pixels: {exc}"
        )


def _validate_pixel_limit(value: int) -> int:
    if value < DEFAULT_PIXEL_LIMIT or value > MAX_OVERRIDE_LIMIT:
        raise ValueError(
            f"Pixel limit must be between {DEFAULT_PIXEL_LIMIT:,} and {MAX_OVERRIDE_LIMIT:,}."
        )
    return value


def configure_pixel_limit(cli_override: int | None = None) -> tuple[int, str]:
    """
    Determine and apply the effective Pillow pixel limit.
    Preference order: CLI override > environment variable > default.
    Returns tuple of (limit, source).
    """
    global _PIXEL_LIMIT
    source = "default"
    limit = DEFAULT_PIXEL_LIMIT

    if cli_override is not None:
        limit = _validate_pixel_limit(cli_override)
        source = "cli"
    else:
        env_value = os.getenv(PIXEL_LIMIT_ENV)
        if env_value:
            try:
                limit = _validate_pixel_limit(int(env_value))
                source = "env"
            except ValueError:
                log_warning(
                    f"Ignoring invalid {PIXEL_LIMIT_ENV} value '{env_value}'. "
                    f"Expected integer between {DEFAULT_PIXEL_LIMIT} and {MAX_OVERRIDE_LIMIT}."
                )

    # Worker processes re-read the limit from the environment on import.
    if source == "cli":
        os.environ[PIXEL_LIMIT_ENV] = str(limit)

    _PIXEL_LIMIT = limit
    _apply_pillow_limit(limit)
    return limit, source


def current_pixel_limit() -> int:
    return _PIXEL_LIMIT


def enforce_pixel_limit() -> None:
    try:
        from PIL import Image
    except Exception:
        return
    limit = current_pixel_limit()
    if Image.MAX_IMAGE_PIXELS != limit:
        Image.MAX_IMAGE_PIXELS = limit


def _process_pool_ping() -> int:
    return 1


def _supports_process_pool() -> bool:
    global _PROCESS_POOL_SUPPORTED
    if _PROCESS_POOL_SUPPORTED is not None:
        return _PROCESS_POOL_SUPPORTED
    try:
        with ProcessPoolExecutor(max_workers=1) as executor:
            future = executor.submit(_process_pool_ping)
            future.result(timeout=2)
        _PROCESS_POOL_SUPPORTED = True
    except Exception:
        _PROCESS_POOL_SUPPORTED = False
    return _PROCESS_POOL_SUPPORTED


def configure_executor_mode(cli_override: str | None = None) -> tuple[str, str]:
    """
    Determine executor mode for identification and rendering.
    Preference order: CLI override > environment variable > auto.
    Returns tuple of (mode, source), where mode is "process" or "thread".
    """
    global _EXECUTOR_MODE, _EXECUTOR_LOGGED
    source = "auto"
    requested = "auto"
    if cli_override:
        requested = cli_override.lower()
        source = "cli"
    else:
        env_value = os.getenv(EXECUTOR_ENV)
        if env_value:
            requested = env_value.lower()
            source = "env"

    if requested not in {"auto", "process", "thread"}:
        log_warning(
            f"Ignoring invalid {EXECUTOR_ENV} value '{requested}'. Expected auto, process, or thread."
        )
        requested = "auto"
        source = "auto"

    if requested == "process":
        if _supports_process_pool():
            mode = "process"
        else:
            log_warning(
                "ProcessPool unavailable; falling back to ThreadPool for executor selection."
            )
            mode = "thread"
    elif requested == "thread":
        mode = "thread"
    else:
        mode = "process" if _supports_process_pool() else "thread"

    _EXECUTOR_MODE = mode
    if not _EXECUTOR_LOGGED:
        log_info(f"Executor selected: {mode} (source={source}, requested={requested})")
        _EXECUTOR_LOGGED = True
    return mode, source


def executor_mode() -> str:
    if _EXECUTOR_MODE is None:
        configure_executor_mode(None)
    return _EXECUTOR_MODE or "thread"


def resolve_worker_count(requested: int) -> int:
    """
    Map a requested worker count to a concrete one; 0 means one worker
    per logical core.
    """
    if requested < 0:
        raise ValueError("Worker count must not be negative")
    if requested == 0:
        return os.cpu_count() or 1
    return requested


def sanitize(value: str) -> str:
    """
    Derive a stable, filesystem-friendly name from a title.

    Args:
        value: Human readable title.

    Returns:
        Trimmed, lower-cased name where whitespace becomes "_" and every other
        character that is not an ASCII letter, digit, "." or "_" becomes "-".

    Raises:
        None
    """
    cleaned = []
    for char in value.strip():
        char = char.lower() if char.isascii() else char
        if char in "._":
            pass
        elif char.isspace():
            char = "_"
        elif not (char.isascii() and char.isalnum()):
            char = "-"
        cleaned.append(char)
    return "".join(cleaned)


def ensure_directory(path: str):
    """
    Create directory if it does not exist.

    Args:
        path: Directory path to create.

    Returns:
        None

    Raises:
        StaticGalleryError: If the directory cannot be created.
    """
    normalized = os.path.abspath(path)
    try:
        os.makedirs(normalized, exist_ok=True)
    except OSError as exc:
        log_error(f"Failed to create directory: {normalized} ({exc})")
        raise StaticGalleryError(f"Unable to create directory: {normalized}") from exc


def copy_template(template_dir: str, output_dir: str):
    """
    Copy the template skeleton recursively into the output directory.

    Args:
        template_dir: Template directory containing index.html.
        output_dir: Gallery output directory; existing files are overwritten.

    Returns:
        None

    Raises:
        TemplateError: If the copy operation fails.
    """
    normalized_src = os.path.abspath(template_dir)
    normalized_dst = os.path.abspath(output_dir)
    try:
        shutil.copytree(normalized_src, normalized_dst, dirs_exist_ok=True)
        if not os.path.isfile(os.path.join(normalized_dst, "index.html")):
            raise FileNotFoundError(f"Template copy verification failed for {normalized_dst}")
    except Exception as exc:
        log_error(f"Failed to copy template {normalized_src} to {normalized_dst}: {exc}")
        raise TemplateError(f"Failed to copy template {normalized_src} to {normalized_dst}") from exc


COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.

    Returns:
        None

    Raises:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.

    Args:
        message: Warning message to log.

    Returns:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    """
    Log an informational message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])


def log_debug(message: str):
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[DEBUG] {message}"])


# Apply initial pixel limit (default or env) on import.
configure_pixel_limit(None)

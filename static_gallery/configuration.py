"""
Module: configuration
Purpose: Run settings, validation and output directory preparation.
"""

import os
import shutil
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import ConfigurationError
from .imaging import DEFAULT_RESIZE_METHOD, RESIZE_METHODS
from .models.collection import CollectionInput
from .models.gallery import (
    DEFAULT_RESOLUTION_BACKGROUND,
    DEFAULT_RESOLUTION_DISPLAY,
    DEFAULT_RESOLUTION_THUMB,
)
from .models.resolution import Resolution
from .scanner import contains_images
from .utils import log_info, resolve_worker_count

DEFAULT_JPEG_QUALITY = 75


@dataclass
class RunConfig:
    """
    Validated settings for one gallery generation run.
    """

    collections: List[CollectionInput]
    output_dir: str
    template_dir: Optional[str] = None
    clean_output: bool = False
    update: bool = False
    create_full_archive: bool = False
    image_name_titles: bool = False
    res_thumb: Resolution = DEFAULT_RESOLUTION_THUMB
    res_display: Resolution = DEFAULT_RESOLUTION_DISPLAY
    res_background: Resolution = DEFAULT_RESOLUTION_BACKGROUND
    resize_method: str = DEFAULT_RESIZE_METHOD
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    threads: int = 0
    create_output_dir: bool = field(default=False, init=False)
    delete_output_dir: bool = field(default=False, init=False)


def _validate_collections(config: RunConfig, errors: List[str]) -> None:
    if not config.collections:
        errors.append("No collections specified")
    for col in config.collections:
        if not col.title or col.title == "-":
            errors.append("Collections must have valid titles")
        if not config.update and col.input_dir is None:
            errors.append(f"New collection \"{col.title}\" does not have an input directory")
        if col.input_dir is None and col.background_dir is None:
            errors.append(f"Collection \"{col.title}\" has neither an input nor background directory")
        if col.input_dir is not None and not contains_images(col.input_dir):
            errors.append(
                f"Input directory for collection \"{col.title}\" does not contain images: {col.input_dir}"
            )
        if col.background_dir is not None and not contains_images(col.background_dir):
            errors.append(
                f"Background directory for collection \"{col.title}\" does not contain images: "
                f"{col.background_dir}"
            )


def validate(config: RunConfig) -> RunConfig:
    """
    Check a RunConfig and resolve derived settings.

    All problems are collected before failing.

    Returns:
        The same config with threads resolved and output directory flags set.

    Raises:
        ConfigurationError: If any setting is invalid.
    """
    errors: List[str] = []

    if config.threads < 0:
        errors.append("Thread count must not be negative")
    else:
        requested = config.threads
        config.threads = resolve_worker_count(config.threads)
        if requested == 0:
            log_info(f"Using {config.threads} threads for image resizing")

    if config.jpeg_quality < 1 or config.jpeg_quality > 100:
        errors.append("Jpeg quality must be between 1 and 100")

    if config.resize_method not in RESIZE_METHODS:
        valid = ", ".join(f'"{name}"' for name in RESIZE_METHODS)
        errors.append(f"Invalid resize method \"{config.resize_method}\". Valid options: {valid}")

    _validate_collections(config, errors)

    if not config.update:
        template = config.template_dir
        if not template or not os.path.isdir(template):
            errors.append(f"Template directory is not a directory: {template}")
        elif not os.path.isfile(os.path.join(template, "index.html")):
            errors.append(f"Template directory does not contain an index.html: {template}")

    if config.update and config.clean_output:
        errors.append("Options --remove-output and --update are mutually exclusive. Choose only one of them.")

    output_dir = config.output_dir
    output_exists = os.path.isdir(output_dir)
    output_empty = not output_exists or not os.listdir(output_dir)

    if config.update and not os.path.isfile(os.path.join(output_dir, "index.html")):
        errors.append(f"No index.html found in the output folder ({output_dir}), cannot update.")

    if config.update:
        config.delete_output_dir = False
        config.create_output_dir = not output_exists
    elif config.clean_output:
        config.delete_output_dir = output_exists
        config.create_output_dir = True
    elif output_empty:
        config.create_output_dir = not output_exists
    else:
        errors.append(f"Output directory already exists: {output_dir}")

    if errors:
        raise ConfigurationError("\n".join(errors))
    return config


def prepare_output(config: RunConfig) -> None:
    """
    Remove and/or create the output directory as decided by validate().

    Raises:
        ConfigurationError: If the directory cannot be removed or created.
    """
    if config.delete_output_dir:
        try:
            shutil.rmtree(config.output_dir)
            log_info("Output directory removed")
        except OSError as exc:
            raise ConfigurationError(f"Could not remove output directory: {exc}") from exc
    if config.create_output_dir:
        try:
            os.makedirs(config.output_dir, exist_ok=True)
            log_info("Output directory created")
        except OSError as exc:
            raise ConfigurationError(f"Output directory could not be created: {exc}") from exc


def _parse_resolution(value: Optional[str], default: Resolution, label: str, errors: List[str]) -> Resolution:
    if value is None:
        return default
    try:
        return Resolution.parse(value)
    except ValueError as exc:
        errors.append(f"Invalid {label} size: {exc}")
        return default


def from_args(args) -> RunConfig:
    """
    Build and validate a RunConfig from parsed command line arguments.

    Args:
        args: argparse.Namespace produced by the CLI parser.

    Returns:
        Validated RunConfig.

    Raises:
        ConfigurationError: If any argument is invalid; every problem is reported.
    """
    errors: List[str] = []
    collections: List[CollectionInput] = []
    for raw in args.collections or []:
        try:
            collections.append(CollectionInput.parse(raw))
        except ValueError as exc:
            errors.append(f"{exc}: {raw}")

    config = RunConfig(
        collections=collections,
        output_dir=args.output,
        template_dir=args.template,
        clean_output=args.remove_output,
        update=args.update,
        create_full_archive=args.archive,
        image_name_titles=args.image_name_titles,
        res_thumb=_parse_resolution(args.thumb_size, DEFAULT_RESOLUTION_THUMB, "thumbnail", errors),
        res_display=_parse_resolution(args.display_size, DEFAULT_RESOLUTION_DISPLAY, "display", errors),
        res_background=_parse_resolution(
            args.background_size, DEFAULT_RESOLUTION_BACKGROUND, "background", errors
        ),
        resize_method=args.resize_method,
        jpeg_quality=args.jpeg_quality,
        threads=args.threads,
    )
    try:
        validate(config)
    except ConfigurationError as exc:
        errors.append(str(exc))
    if errors:
        raise ConfigurationError("\n".join(errors))
    return config

"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import sys
from typing import List, Optional

from . import duplicates, gallery as gallery_ops, reporting, render_engine
from .archive import build_full_archive
from .cli_formatter import CLIFormatter, detect_terminal_capabilities
from .configuration import DEFAULT_JPEG_QUALITY, RunConfig, from_args, prepare_output
from .exceptions import StaticGalleryError
from .imaging import DEFAULT_RESIZE_METHOD, RESIZE_METHODS
from .models.gallery import Gallery
from .render_engine import RenderSummary
from .utils import (
    DEFAULT_PIXEL_LIMIT,
    EXECUTOR_ENV,
    MAX_OVERRIDE_LIMIT,
    PIXEL_LIMIT_ENV,
    configure_executor_mode,
    configure_pixel_limit,
    copy_template,
    log_info,
)


def _pixel_limit_arg(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Pixel limit must be an integer.") from exc
    if parsed < DEFAULT_PIXEL_LIMIT or parsed > MAX_OVERRIDE_LIMIT:
        raise argparse.ArgumentTypeError(
            f"Pixel limit must be between {DEFAULT_PIXEL_LIMIT} and {MAX_OVERRIDE_LIMIT}."
        )
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="static-gallery",
        description="Generate a static web gallery from directories of JPEG pictures.",
    )
    parser.add_argument("-o", "--output", required=True, help="Output directory of the gallery")
    parser.add_argument(
        "-p",
        "--template",
        default=None,
        help="Template directory containing index.html (not needed with --update)",
    )
    parser.add_argument(
        "-c",
        "--collection",
        dest="collections",
        action="append",
        default=[],
        metavar="PICTURES;BACKGROUNDS;TITLE",
        help='Collection to add, e.g. "in/;bg/;Title". Use "-" for a missing directory. Repeatable.',
    )
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "-u",
        "--update",
        action="store_true",
        help="Add to an existing gallery in the output directory",
    )
    mode_group.add_argument(
        "-r",
        "--remove-output",
        action="store_true",
        help="Remove the output directory before generating",
    )
    parser.add_argument(
        "-a",
        "--archive",
        action="store_true",
        help="Create a zip archive with all original pictures",
    )
    parser.add_argument(
        "--image-name-titles",
        action="store_true",
        help="Use picture file names as picture titles",
    )
    parser.add_argument("--thumb-size", default=None, metavar="WxH", help="Thumbnail resolution (default 960x540)")
    parser.add_argument("--display-size", default=None, metavar="WxH", help="Display resolution (default 2560x1440)")
    parser.add_argument(
        "--background-size",
        default=None,
        metavar="WxH",
        help="Background resolution (default 2560x1440)",
    )
    parser.add_argument(
        "--resize-method",
        default=DEFAULT_RESIZE_METHOD,
        help=f"Resize filter: {', '.join(RESIZE_METHODS)} (default {DEFAULT_RESIZE_METHOD})",
    )
    parser.add_argument(
        "--jpeg-quality",
        type=int,
        default=DEFAULT_JPEG_QUALITY,
        help=f"JPEG quality 1-100 (default {DEFAULT_JPEG_QUALITY})",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=0,
        help="Concurrent render workers; 0 uses one per logical core (default 0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase console log output (-v warnings, -vv info, -vvv debug)",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    parser.add_argument(
        "--executor",
        choices=["auto", "process", "thread"],
        default=None,
        help=(
            "Executor mode for identification and rendering: auto (default), process, or thread. "
            f"Also configurable via ${EXECUTOR_ENV}."
        ),
    )
    parser.add_argument(
        "--max-pixels",
        type=_pixel_limit_arg,
        default=None,
        help=(
            f"Override Pillow decompression guard (default {DEFAULT_PIXEL_LIMIT} pixels). "
            f"Maximum allowed is {MAX_OVERRIDE_LIMIT}. Also configurable via ${PIXEL_LIMIT_ENV}."
        ),
    )
    return parser


def _open_gallery(config: RunConfig) -> Gallery:
    if config.update:
        # Stored resolutions win so existing artifacts stay consistent.
        return gallery_ops.load_gallery(config.output_dir)
    gallery = gallery_ops.new_gallery()
    gallery.res_thumb = config.res_thumb
    gallery.res_display = config.res_display
    gallery.res_background = config.res_background
    return gallery


def run(config: RunConfig, formatter: CLIFormatter) -> RenderSummary:
    """
    Execute one gallery generation run.

    Args:
        config: Validated run configuration.
        formatter: Console output target.

    Returns:
        RenderSummary of the render phase.

    Raises:
        StaticGalleryError: On any process-fatal failure.
    """
    prepare_output(config)
    gallery = _open_gallery(config)

    formatter.info("Reading pictures...")
    gallery_ops.fill(gallery, config.collections, config.image_name_titles)
    duplicates.deduplicate(gallery)

    formatter.info("Rendering pictures...")
    summary = render_engine.render_all(
        gallery,
        config.output_dir,
        config.jpeg_quality,
        config.resize_method,
        config.threads,
        progress=formatter.progress,
    )
    formatter.end_progress()

    if not config.update:
        copy_template(config.template_dir, config.output_dir)
    if config.create_full_archive:
        formatter.info("Creating archive...")
        build_full_archive(gallery, config.output_dir)
    page = gallery_ops.persist(gallery, config.output_dir)

    pictures = sum(len(collection.pictures) for collection in gallery.collections.values())
    backgrounds = sum(len(collection.backgrounds) for collection in gallery.collections.values())
    for failure in summary.failures:
        formatter.warning(f"Skipped {failure.source}: {failure.reason}")
    formatter.line()
    formatter.summary(
        [
            ("Collections", str(len(gallery.collection_keys))),
            ("Pictures", str(pictures)),
            ("Backgrounds", str(backgrounds)),
            ("Rendered", str(summary.rendered)),
            ("Failed", str(len(summary.failures))),
            ("Gallery", page),
        ]
    )
    formatter.success("Gallery generated.")
    log_info(f"Gallery written to {page}")
    return summary


def main(argv: Optional[List[str]] = None):
    """
    Argument parser entry point.

    Args:
        argv: Optional argument list; defaults to sys.argv.

    Returns:
        None

    Raises:
        SystemExit: When execution fails, with the error's exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    reporting.configure_verbosity(reporting.LEVEL_ERROR + args.verbose)
    reporting.ensure_log_initialized()
    formatter = CLIFormatter(detect_terminal_capabilities(no_color_flag=args.no_color))

    try:
        pixel_limit, pixel_source = configure_pixel_limit(args.max_pixels)
        if pixel_source != "default":
            origin = "CLI flag" if pixel_source == "cli" else f"${PIXEL_LIMIT_ENV}"
            reporting.write_log(
                [f"[WARNING] Pixel safety limit set to {pixel_limit:,} via {origin}."]
            )
        configure_executor_mode(args.executor)
        reporting.write_log(["[INFO] Gallery generation started"])
        config = from_args(args)
        run(config, formatter)
    except KeyboardInterrupt:
        formatter.end_progress()
        reporting.write_log(["[WARNING] Operation aborted via Ctrl+C"])
        formatter.error("Interrupted by user (Ctrl+C).")
        sys.exit(1)
    except StaticGalleryError as exc:
        formatter.end_progress()
        reporting.write_log([f"[ERROR] {exc}"])
        formatter.error(str(exc))
        formatter.muted(f"See {reporting.log_path()} for details.")
        sys.exit(exc.exit_code)


if __name__ == "__main__":
    main()

"""
Module: imaging
Purpose: Pillow-based rendition codec (resize and recode to JPEG).
"""

import os

from PIL import Image, ImageOps

from .exceptions import CodecError
from .models.resolution import Resolution
from .utils import enforce_pixel_limit

RESIZE_METHODS = {
    "lanczos3": Image.Resampling.LANCZOS,
    # Pillow has no gaussian kernel; Hamming is its closest smoothing window.
    "gaussian": Image.Resampling.HAMMING,
    "nearest": Image.Resampling.NEAREST,
    "cubic": Image.Resampling.BICUBIC,
    "linear": Image.Resampling.BILINEAR,
}
DEFAULT_RESIZE_METHOD = "lanczos3"


def cover_size(size: tuple[int, int], resolution: Resolution) -> tuple[int, int]:
    """
    Size that covers the target box while keeping the aspect ratio.
    Images smaller than the box are left at their size.
    """
    width, height = size
    scale = max(resolution.width / width, resolution.height / height)
    if scale >= 1:
        return width, height
    return max(1, round(width * scale)), max(1, round(height * scale))


def _load_oriented(source: str) -> Image.Image:
    enforce_pixel_limit()
    with Image.open(source) as img:
        oriented = ImageOps.exif_transpose(img)
        if oriented.mode != "RGB":
            oriented = oriented.convert("RGB")
        else:
            oriented.load()
        return oriented


def _save_jpeg(image: Image.Image, target: str, quality: int) -> None:
    try:
        image.save(target, "JPEG", quality=quality)
    except Exception as exc:
        if os.path.exists(target):
            try:
                os.remove(target)
            except OSError as cleanup_exc:
                raise CodecError(f"{exc}; partial rendition {target} left behind: {cleanup_exc}") from exc
        raise


def render_resized(source: str, target: str, resolution: Resolution, quality: int, method: str) -> None:
    """
    Write a resized JPEG rendition of `source` to `target`.

    Args:
        source: Source image path.
        target: Output JPEG path.
        resolution: Box the rendition must cover.
        quality: JPEG quality, 1-100.
        method: Resize filter name, one of RESIZE_METHODS.

    Raises:
        CodecError: If decoding, resizing or encoding fails.
    """
    try:
        resample = RESIZE_METHODS[method]
    except KeyError as exc:
        raise CodecError(f"Invalid resize method: {method}") from exc
    try:
        image = _load_oriented(source)
        new_size = cover_size(image.size, resolution)
        if new_size != image.size:
            image = image.resize(new_size, resample)
        _save_jpeg(image, target, quality)
    except Image.DecompressionBombError as exc:
        raise CodecError(f"Decompression bomb detected for {source}") from exc
    except Exception as exc:
        raise CodecError(f"Could not resize {source}: {exc}") from exc


def recode(source: str, target: str, quality: int) -> None:
    """
    Re-encode `source` as a full-resolution JPEG at `target`.

    Raises:
        CodecError: If decoding or encoding fails.
    """
    try:
        _save_jpeg(_load_oriented(source), target, quality)
    except Image.DecompressionBombError as exc:
        raise CodecError(f"Decompression bomb detected for {source}") from exc
    except Exception as exc:
        raise CodecError(f"Could not recode {source}: {exc}") from exc

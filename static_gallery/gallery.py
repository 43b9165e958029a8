"""
Module: gallery
Purpose: Create, load, fill and persist galleries.
"""

import os
from typing import Iterable

from . import manifest
from .exceptions import CollectionError, ManifestDecodeError, ManifestError, ManifestReadError
from .models.collection import Collection, CollectionInput
from .models.gallery import Gallery
from .scanner import list_dir
from .utils import log_error, log_info

INDEX_FILE = "index.html"


def index_path(output_dir: str) -> str:
    return os.path.join(os.path.abspath(output_dir), INDEX_FILE)


def new_gallery() -> Gallery:
    """Empty gallery with default resolutions and the current format version."""
    return Gallery()


def load_gallery(output_dir: str) -> Gallery:
    """
    Read an existing gallery back from its output page.

    Args:
        output_dir: Output directory containing index.html.

    Returns:
        Gallery rebuilt from the embedded manifest.

    Raises:
        ManifestReadError: If the page cannot be read.
        ManifestDecodeError: If the manifest is missing or cannot be decoded.
    """
    path = index_path(output_dir)
    try:
        with open(path, "rb") as handle:
            document = handle.read()
    except OSError as exc:
        log_error(f"Cannot update existing gallery. Error: {exc}")
        raise ManifestReadError(f"Cannot read existing gallery page {path}: {exc}") from exc

    blob = manifest.between(document)
    if blob is None:
        log_error(f"Cannot update existing gallery. No manifest markers in {path}")
        raise ManifestDecodeError(f"No gallery data found in {path}")
    try:
        gallery = manifest.decode_gallery(blob)
    except ManifestDecodeError as exc:
        log_error(f"Cannot update existing gallery. Invalid Data. Error: {exc}")
        raise
    log_info(f"Loaded gallery with {len(gallery.collection_keys)} collection(s) from {path}")
    return gallery


def fill(
    gallery: Gallery,
    collection_inputs: Iterable[CollectionInput],
    use_filenames_as_titles: bool = False,
) -> None:
    """
    Create new collections or append to existing ones, in input order.

    Inputs applied before a failing one stay applied.

    Raises:
        CollectionError: If a new collection has no picture directory.
    """
    for item in collection_inputs:
        exists = item.name in gallery.collections
        if not exists and item.input_dir is None:
            log_error(f"Cannot create new collection without input directory: {item.title}")
            raise CollectionError(
                f"Cannot create new collection without input directory: {item.title}"
            )

        picture_paths = list_dir(item.input_dir) if item.input_dir is not None else []
        background_paths = list_dir(item.background_dir) if item.background_dir is not None else []
        collection = Collection.construct(
            item.name,
            item.title,
            picture_paths,
            background_paths,
            use_filenames_as_titles,
        )

        if exists:
            gallery.collections[item.name].append(collection)
            log_info(
                f"Appended {len(collection.pictures)} picture(s) and {len(collection.backgrounds)} "
                f"background(s) to collection '{item.name}'"
            )
        else:
            gallery.add_collection(collection)
            log_info(
                f"Created collection '{item.name}' with {len(collection.pictures)} picture(s) "
                f"and {len(collection.backgrounds)} background(s)"
            )


def persist(gallery: Gallery, output_dir: str) -> str:
    """
    Splice the serialized gallery into the output page.

    Returns:
        Path of the written page.

    Raises:
        ManifestError: If the page cannot be read, lacks markers, or cannot be written.
    """
    path = index_path(output_dir)
    try:
        with open(path, "rb") as handle:
            document = handle.read()
    except OSError as exc:
        log_error(f"Could not read from {path}: {exc}")
        raise ManifestError(f"Could not read from {path}") from exc

    if manifest.between(document) is None:
        log_error(f"No manifest markers found in {path}")
        raise ManifestError(f"No manifest markers found in {path}")

    updated = manifest.replace_between(
        document, manifest.DATA_START, manifest.DATA_END, manifest.encode_gallery(gallery)
    )
    try:
        with open(path, "wb") as handle:
            handle.write(updated)
    except OSError as exc:
        log_error(f"Could not write to {path}: {exc}")
        raise ManifestError(f"Could not write to {path}") from exc
    return path

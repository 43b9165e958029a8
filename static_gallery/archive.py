"""
Module: archive
Purpose: Downloadable zip archive of the gallery's original pictures.
"""

import os
import zipfile
from typing import Set

from .exceptions import ArchiveError
from .models.gallery import FULL_ARCHIVE_KEY, FULL_ARCHIVE_PATH, Gallery
from .render_engine import KIND_FULL, artifact_dir, artifact_name
from .utils import log_info, log_error, log_warning


def _unique_arcname(directory: str, filename: str, identity: int, used: Set[str]) -> str:
    arcname = f"{directory}/{filename}"
    if arcname in used:
        base, ext = os.path.splitext(filename)
        arcname = f"{directory}/{base}-{identity}{ext}"
    used.add(arcname)
    return arcname


def build_full_archive(gallery: Gallery, output_dir: str) -> str:
    """
    Write every picture's original bytes into one compressed archive.

    Pictures are grouped in one directory per collection name. Pictures
    carried over from an earlier run have no known source, so their
    full-resolution artifact is archived instead.

    Args:
        gallery: Gallery to archive; its archive registry is updated.
        output_dir: Gallery output directory.

    Returns:
        Absolute path of the written archive.

    Raises:
        ArchiveError: If the archive cannot be written.
    """
    archive_path = os.path.join(os.path.abspath(output_dir), FULL_ARCHIVE_PATH)
    pictures_dir = artifact_dir(output_dir)
    written = 0
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for collection in gallery.ordered_collections():
                directory = collection.name
                archive.writestr(zipfile.ZipInfo(f"{directory}/"), b"")
                used: Set[str] = set()
                for picture in collection.pictures:
                    if picture.source_path:
                        source = picture.source_path
                        filename = os.path.basename(source)
                    else:
                        filename = artifact_name(picture.identity, KIND_FULL, gallery.extension)
                        source = os.path.join(pictures_dir, filename)
                        if not os.path.exists(source):
                            log_warning(f"No source for picture {picture.stem}; left out of the archive")
                            continue
                    archive.write(source, _unique_arcname(directory, filename, picture.identity, used))
                    written += 1
    except (OSError, zipfile.BadZipFile) as exc:
        log_error(f"Failed to write archive {archive_path}: {exc}")
        raise ArchiveError(f"Failed to write archive {archive_path}") from exc

    gallery.archives[FULL_ARCHIVE_KEY] = FULL_ARCHIVE_PATH
    log_info(f"Archived {written} picture(s) to {archive_path}")
    return archive_path

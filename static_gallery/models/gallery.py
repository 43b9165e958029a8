"""
Module: gallery
Purpose: Top-level gallery dataclass.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from .collection import Collection
from .image import Image
from .resolution import Resolution

GALLERY_CONFIGURATION_VERSION = 1
PICTURE_EXTENSION = "jpg"
FULL_ARCHIVE_KEY = "_full_"
FULL_ARCHIVE_PATH = "Gallery.zip"

DEFAULT_RESOLUTION_THUMB = Resolution(960, 540)
DEFAULT_RESOLUTION_DISPLAY = Resolution(2560, 1440)
DEFAULT_RESOLUTION_BACKGROUND = Resolution(2560, 1440)


@dataclass
class Gallery:
    """
    Ordered set of named collections plus output settings.

    `collection_keys` holds the display order; `collections` maps each key to
    its Collection. Both always carry the same key set.
    """

    version: int = GALLERY_CONFIGURATION_VERSION
    extension: str = PICTURE_EXTENSION
    archives: Dict[str, str] = field(default_factory=dict)
    collection_keys: List[str] = field(default_factory=list)
    collections: Dict[str, Collection] = field(default_factory=dict)
    res_thumb: Resolution = DEFAULT_RESOLUTION_THUMB
    res_display: Resolution = DEFAULT_RESOLUTION_DISPLAY
    res_background: Resolution = DEFAULT_RESOLUTION_BACKGROUND

    def add_collection(self, collection: Collection) -> None:
        if collection.name in self.collections:
            raise KeyError(f"Collection already exists: {collection.name}")
        self.collection_keys.append(collection.name)
        self.collections[collection.name] = collection

    def ordered_collections(self) -> List[Collection]:
        return [self.collections[key] for key in self.collection_keys]

    def iter_images(self) -> Iterator[Tuple[str, Image]]:
        """
        Yield (collection key, image) in gallery order: collections in key
        order, backgrounds before pictures within a collection.
        """
        for key in self.collection_keys:
            for image in self.collections[key].images():
                yield key, image

"""
Module: collection
Purpose: Collection dataclasses and their merge/removal operations.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from ..hashing import identify_paths
from ..scanner import filter_supported_files
from ..utils import sanitize
from .image import Image, Picture

NO_DIRECTORY = "-"


@dataclass
class CollectionInput:
    """
    One requested collection: picture directory, background directory and title.
    """

    title: str
    name: str
    input_dir: Optional[str]
    background_dir: Optional[str]

    @classmethod
    def parse(cls, value: str) -> "CollectionInput":
        """
        Parse "<pictures>;<backgrounds>;<title>" where "-" means no directory.

        Raises:
            ValueError: If the value does not have three parts.
        """
        parts = value.split(";", 2)
        if len(parts) != 3:
            raise ValueError(
                "Invalid collection argument, must have three parts (input;backgrounds;title)"
            )
        input_dir = None if parts[0] == NO_DIRECTORY else parts[0]
        background_dir = None if parts[1] == NO_DIRECTORY else parts[1]
        title = parts[2]
        return cls(title=title, name=sanitize(title), input_dir=input_dir, background_dir=background_dir)


def _pictures_from(paths: List[str], use_filenames_as_titles: bool) -> List[Picture]:
    pictures = []
    for path, identity in identify_paths(paths):
        title = os.path.splitext(os.path.basename(path))[0] if use_filenames_as_titles else ""
        pictures.append(Picture(identity=identity, source_path=path, title=title))
    return pictures


def _images_from(paths: List[str]) -> List[Image]:
    return [Image(identity=identity, source_path=path) for path, identity in identify_paths(paths)]


@dataclass
class Collection:
    """
    Ordered group of pictures and backgrounds sharing a title.
    """

    title: str
    name: str
    pictures: List[Picture] = field(default_factory=list)
    backgrounds: List[Image] = field(default_factory=list)

    @classmethod
    def construct(
        cls,
        name: str,
        title: str,
        picture_paths: List[str],
        background_paths: List[str],
        use_filenames_as_titles: bool = False,
    ) -> "Collection":
        """
        Build a collection from directory listings.

        Unsupported extensions are dropped silently and unreadable files are
        skipped; every created image needs rendering.
        """
        pictures = _pictures_from(filter_supported_files(picture_paths), use_filenames_as_titles)
        backgrounds = _images_from(filter_supported_files(background_paths))
        return cls(title=title, name=name, pictures=pictures, backgrounds=backgrounds)

    def append(self, other: "Collection") -> None:
        self.pictures.extend(other.pictures)
        self.backgrounds.extend(other.backgrounds)

    def remove_by_identity(self, identity: int, pictures: bool = True, backgrounds: bool = True) -> int:
        """
        Remove every picture and background with the given identity.

        Args:
            identity: Identity to drop.
            pictures: Whether pictures are searched.
            backgrounds: Whether backgrounds are searched.

        Returns:
            Number of removed entries.
        """
        before = len(self.pictures) + len(self.backgrounds)
        if backgrounds:
            self.backgrounds = [image for image in self.backgrounds if image.identity != identity]
        if pictures:
            self.pictures = [picture for picture in self.pictures if picture.identity != identity]
        return before - len(self.pictures) - len(self.backgrounds)

    def images(self) -> List[Image]:
        """Backgrounds followed by pictures, the gallery-wide iteration order."""
        return [*self.backgrounds, *self.pictures]

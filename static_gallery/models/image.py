"""
Module: image
Purpose: Dataclasses representing source images and pictures.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Image:
    """
    A source image known to the gallery by its content identity.
    """

    identity: int
    source_path: Optional[str]
    needs_render: bool = True

    @property
    def stem(self) -> str:
        """Artifact filename stem derived from the identity."""
        return str(self.identity)


@dataclass
class Picture(Image):
    """
    An Image shown in a collection, with an optional display title.
    """

    title: str = ""

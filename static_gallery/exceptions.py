"""
Module: exceptions
Purpose: Custom exception hierarchy for static-gallery.
"""


class StaticGalleryError(Exception):
    """Base exception for static-gallery."""

    exit_code = 1


class ConfigurationError(StaticGalleryError):
    exit_code = 2


class CollectionError(StaticGalleryError):
    exit_code = 2


class ScanError(StaticGalleryError):
    pass


class IdentityError(StaticGalleryError):
    pass


class CodecError(StaticGalleryError):
    pass


class ManifestError(StaticGalleryError):
    pass


class ManifestReadError(ManifestError):
    exit_code = 3


class ManifestDecodeError(ManifestError):
    exit_code = 4


class TemplateError(StaticGalleryError):
    pass


class ArchiveError(StaticGalleryError):
    pass

"""
Module: manifest
Purpose: Embed the gallery manifest into the output page and read it back.

The manifest lives between two literal markers inside an otherwise opaque
document. Marker lookup is an exact byte search (`bytes.find`), so a
lookup costs O(n * m) in the worst case for a document of n bytes and a
marker of m bytes; both helpers are pure.
"""

import json
from typing import Any, Dict, Optional

from .exceptions import ManifestDecodeError
from .models.collection import Collection
from .models.gallery import Gallery
from .models.image import Image, Picture
from .models.resolution import Resolution

DATA_START = b"/*{{BEGIN:data*/"
DATA_END = b"/*END:data}}*/"


def _span(document: bytes, start: bytes, end: bytes) -> Optional[tuple[int, int]]:
    if not start or not end:
        return None
    index_start = document.find(start)
    if index_start < 0:
        return None
    content_start = index_start + len(start)
    index_end = document.find(end, content_start)
    if index_end < 0:
        return None
    return content_start, index_end


def between(document: bytes, start: bytes = DATA_START, end: bytes = DATA_END) -> Optional[bytes]:
    """
    Return the bytes between the first start marker and the first end marker
    after it, or None when either marker is missing.
    """
    span = _span(document, start, end)
    if span is None:
        return None
    return document[span[0]:span[1]]


def replace_between(document: bytes, start: bytes, end: bytes, replacement: bytes) -> bytes:
    """
    Replace what sits between the first marker pair, keeping the markers.
    The document is returned unchanged when a marker is missing.
    """
    span = _span(document, start, end)
    if span is None:
        return document
    return document[:span[0]] + replacement + document[span[1]:]


def _resolution_dict(resolution: Resolution) -> Dict[str, int]:
    return {"width": resolution.width, "height": resolution.height}


def gallery_to_dict(gallery: Gallery) -> Dict[str, Any]:
    # Identities are written as strings: 64-bit values exceed the integer
    # precision of the JavaScript reading the page.
    collections = {}
    for key in gallery.collection_keys:
        collection = gallery.collections[key]
        collections[key] = {
            "title": collection.title,
            "name": collection.name,
            "pictures": [
                {"title": picture.title, "path": picture.stem} for picture in collection.pictures
            ],
            "backgrounds": [{"path": image.stem} for image in collection.backgrounds],
        }
    return {
        "version": gallery.version,
        "extension": gallery.extension,
        "archives": dict(gallery.archives),
        "collection_keys": list(gallery.collection_keys),
        "collections": collections,
        "res_background": _resolution_dict(gallery.res_background),
        "res_display": _resolution_dict(gallery.res_display),
        "res_thumb": _resolution_dict(gallery.res_thumb),
    }


def encode_gallery(gallery: Gallery) -> bytes:
    return json.dumps(gallery_to_dict(gallery), indent=2, ensure_ascii=False).encode("utf-8")


def _identity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid identity: {value!r}")
    identity = int(value)
    if identity < 0 or identity >= 2**64:
        raise ValueError(f"Identity out of range: {value!r}")
    return identity


def _resolution(value: Dict[str, Any]) -> Resolution:
    return Resolution(int(value["width"]), int(value["height"]))


def gallery_from_dict(payload: Dict[str, Any]) -> Gallery:
    """
    Rebuild a Gallery from its manifest form.

    Loaded images carry no source path and do not need rendering.

    Raises:
        ManifestDecodeError: If fields are missing or inconsistent.
    """
    try:
        keys = [str(key) for key in payload["collection_keys"]]
        raw_collections = payload["collections"]
        if len(set(keys)) != len(keys) or set(keys) != set(raw_collections):
            raise ValueError("collection_keys do not match collections")
        collections = {}
        for key in keys:
            raw = raw_collections[key]
            pictures = [
                Picture(
                    identity=_identity(entry["path"]),
                    source_path=None,
                    needs_render=False,
                    title=str(entry.get("title") or ""),
                )
                for entry in raw["pictures"]
            ]
            backgrounds = [
                Image(identity=_identity(entry["path"]), source_path=None, needs_render=False)
                for entry in raw["backgrounds"]
            ]
            collections[key] = Collection(
                title=str(raw["title"]),
                name=str(raw.get("name") or key),
                pictures=pictures,
                backgrounds=backgrounds,
            )
        return Gallery(
            version=int(payload["version"]),
            extension=str(payload["extension"]),
            archives={str(k): str(v) for k, v in dict(payload.get("archives") or {}).items()},
            collection_keys=keys,
            collections=collections,
            res_thumb=_resolution(payload["res_thumb"]),
            res_display=_resolution(payload["res_display"]),
            res_background=_resolution(payload["res_background"]),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ManifestDecodeError(f"Invalid gallery data: {exc}") from exc


def decode_gallery(blob: bytes) -> Gallery:
    """
    Parse the serialized manifest blob.

    Raises:
        ManifestDecodeError: If the blob is not valid manifest JSON.
    """
    try:
        payload = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestDecodeError(f"Invalid gallery data: {exc}") from exc
    if not isinstance(payload, dict):
        raise ManifestDecodeError("Invalid gallery data: manifest is not an object")
    return gallery_from_dict(payload)

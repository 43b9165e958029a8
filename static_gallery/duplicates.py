"""
Module: duplicates
Purpose: Gallery-wide duplicate elimination before rendering.
"""

from typing import Dict, List

from .models.gallery import Gallery
from .models.image import Image, Picture
from .utils import log_debug, log_info


def group_by_identity(gallery: Gallery) -> Dict[int, List[Image]]:
    """
    Group every image by identity, in gallery iteration order.

    Args:
        gallery: Gallery whose collections are scanned in key order,
            backgrounds before pictures.

    Returns:
        Mapping of identity to members; the first member of each list is the
        canonical representative.
    """
    groups: Dict[int, List[Image]] = {}
    for _, image in gallery.iter_images():
        groups.setdefault(image.identity, []).append(image)
    return groups


def _settle_role(members: List[Image]) -> None:
    """
    Leave at most one member of a role schedulable.

    If any member was already rendered in a previous run, nobody renders;
    otherwise only the first member keeps its flag.
    """
    if not members:
        return
    already_rendered = any(not member.needs_render for member in members)
    for index, member in enumerate(members):
        if already_rendered or index > 0:
            member.needs_render = False


def deduplicate(gallery: Gallery) -> int:
    """
    Collapse images with identical content across the whole gallery.

    Every member after the first in each identity group is rewritten to
    reference the canonical image (identity and, when known, source path).
    Pictures and backgrounds produce different artifacts, so each role keeps
    its own schedulable member.

    Returns:
        Number of rewritten duplicate references.
    """
    log_info("Searching for duplicates...")
    rewritten = 0
    for identity, members in group_by_identity(gallery).items():
        if len(members) < 2:
            continue
        canonical = members[0]
        source = canonical.source_path or next(
            (member.source_path for member in members if member.source_path), None
        )
        for member in members[1:]:
            log_debug(f"Replacing {member.source_path or member.stem} with {source or canonical.stem}")
            member.identity = canonical.identity
            if source is not None:
                member.source_path = source
            rewritten += 1

        _settle_role([member for member in members if isinstance(member, Picture)])
        _settle_role([member for member in members if not isinstance(member, Picture)])

    if rewritten:
        log_info(f"Resolved {rewritten} duplicate image reference(s)")
    return rewritten

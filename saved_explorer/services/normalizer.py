"""Map raw saved posts and comments onto the uniform ``SavedItem`` record."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from saved_explorer.core.errors import MalformedItemError
from saved_explorer.models.reddit import RawComment, RawItem, RawPost, SavedItem

logger = logging.getLogger(__name__)

# Values Reddit puts in ``thumbnail`` when there is no image to show.
_PLACEHOLDER_THUMBNAILS = frozenset({"self", "default", "nsfw", "spoiler", "image"})


def _thumbnail(value: Optional[str]) -> Optional[str]:
    if not value or value in _PLACEHOLDER_THUMBNAILS:
        return None
    if not value.startswith(("http://", "https://")):
        return None
    return value


def normalize(raw: RawItem) -> SavedItem:
    """Convert one raw item; raises ``MalformedItemError`` without a ``name``."""
    match raw:
        case RawPost():
            thumbnail = _thumbnail(raw.thumbnail)
            kind = "post"
        case RawComment():
            thumbnail = None
            kind = "comment"
        case _:
            raise MalformedItemError(f"Unsupported saved item type {type(raw).__name__}.")

    if not raw.name:
        raise MalformedItemError("Saved item is missing its name.")

    return SavedItem(
        author=raw.author or "[deleted]",
        created_utc=raw.created_utc or 0.0,
        name=raw.name,
        over18=raw.over_18,
        permalink=raw.permalink or "",
        subreddit=raw.subreddit or "",
        thumbnail=thumbnail,
        title=raw.title or raw.link_title or "",
        kind=kind,
    )


def normalize_page(items: Iterable[RawItem]) -> List[SavedItem]:
    """Normalize a page, logging and dropping items that cannot be converted."""
    normalized: List[SavedItem] = []
    for raw in items:
        try:
            normalized.append(normalize(raw))
        except MalformedItemError as exc:
            logger.warning("Dropping malformed saved item: %s", exc)
    return normalized


__all__ = ["normalize", "normalize_page"]

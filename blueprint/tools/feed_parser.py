"""
Feed markup -> ContentItem extraction.

Kept apart from the fetching logic so the adapters only ever see
``extract_items`` / ``extract_profile`` and never the markup itself.
"""
import html
import re
from typing import List

import feedparser

from blueprint.config import settings
from blueprint.feeds_config import AVATAR_FALLBACK_TEMPLATE
from blueprint.models.items import ContentItem, SourceProfile

TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")
IMAGE_URL_RE = re.compile(r"^https://\S+?\.(?:jpg|png|jpeg|webp)", re.IGNORECASE)
REPOST_MARKER = "RT @"
BIO_MAX_CHARS = 160


class MalformedFeedError(ValueError):
    pass


def clean_text(text: str | None) -> str:
    """Strip tags, decode entities, collapse whitespace."""
    if not text:
        return ""
    text = TAG_RE.sub("", text)
    text = html.unescape(text)
    return WHITESPACE_RE.sub(" ", text).strip()


def parse_feed(markup: str | bytes) -> feedparser.FeedParserDict:
    parsed = feedparser.parse(markup)
    # feedparser leaves version empty for anything it could not identify as a
    # feed, e.g. an HTML error page served with a 200
    if not parsed.get("version"):
        raise MalformedFeedError("response is not an RSS/Atom feed")
    return parsed


def extract_items(markup: str | bytes, min_chars: int | None = None) -> List[ContentItem]:
    """Ordered content items, reposts and near-empty posts dropped."""
    min_chars = min_chars if min_chars is not None else settings.MIN_ITEM_CHARS
    parsed = parse_feed(markup)

    items = []
    for entry in parsed.entries:
        # The description carries the full post; the title is often truncated
        text = clean_text(entry.get("summary") or entry.get("title"))
        if len(text) < min_chars or text.startswith(REPOST_MARKER):
            continue
        published = entry.get("published")
        items.append(ContentItem(text=text, timestamp=published.strip() if published else None))
    return items


def extract_profile(markup: str | bytes, handle: str) -> SourceProfile:
    parsed = parse_feed(markup)
    channel = parsed.feed

    display_name = clean_text(channel.get("title"))
    display_name = re.sub(r" / @.*$", "", display_name)
    display_name = re.sub(r"@\w+$", "", display_name).strip()

    image = channel.get("image") or {}
    image_url = image.get("href") or image.get("url") or ""
    avatar_url = image_url if IMAGE_URL_RE.match(image_url) else AVATAR_FALLBACK_TEMPLATE.format(handle=handle)

    return SourceProfile(
        handle=handle,
        display_name=display_name or handle,
        avatar_url=avatar_url,
        bio=clean_text(channel.get("subtitle") or channel.get("description"))[:BIO_MAX_CHARS],
    )

"""RSS/Atom/JSON feed parsing and normalization for czytaj."""

import io
import json
import logging
import re
from typing import Iterator, Optional

import feedparser

from .models import DEFAULT_TITLE, NO_LINK, Article, FeedSummary
from .sanitizer import sanitize

logger = logging.getLogger(__name__)

JSON_FEED_VERSION_PREFIX = "https://jsonfeed.org/version/"

_IMG_SRC_RE = re.compile(r"""<img[^>]+src\s*=\s*(?:"([^"]+)"|'([^']+)')""", re.IGNORECASE)


def parse_feed(raw_text: str, source_url: str) -> FeedSummary:
    """Parse feed text into a FeedSummary.

    Entries keep their document order. Entries missing a title or link are
    kept with default values; only an entry that cannot be normalized at all
    is dropped.

    Args:
        raw_text: Feed document as text
        source_url: URL the document was fetched from, used as the title
            fallback

    Returns:
        FeedSummary with the feed title and its articles

    Raises:
        ParseError: If the text is not a recognizable RSS, Atom or JSON feed
    """
    if raw_text.lstrip().startswith("{"):
        feed_title, entries = _parse_json_feed(raw_text)
    else:
        feed_title, entries = _parse_xml_feed(raw_text)

    articles = []
    for index, entry in enumerate(entries):
        try:
            articles.append(_entry_to_article(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed entry %d in %s: %s", index, source_url, e)

    title = (feed_title or "").strip() or source_url
    return FeedSummary(title=title, articles=articles)


def _parse_xml_feed(raw_text: str) -> tuple[Optional[str], list]:
    """Parse an RSS/Atom/RDF document with feedparser.

    The explicit charset keeps feedparser from re-decoding the UTF-8 bytes
    with an encoding declared inside the document.
    """
    feed = feedparser.parse(
        io.BytesIO(raw_text.encode("utf-8")),
        response_headers={"content-type": "application/xml; charset=utf-8"},
    )

    if not feed.get("version"):
        cause = feed.get("bozo_exception") or "unrecognized document format"
        raise ParseError(f"Failed to parse feed: {cause}")

    return feed.feed.get("title"), feed.entries


def _parse_json_feed(raw_text: str) -> tuple[Optional[str], list]:
    """Parse a JSON Feed document into feedparser-shaped entry dicts."""
    try:
        document = json.loads(raw_text)
    except ValueError as e:
        raise ParseError(f"Failed to parse feed: {e}") from e

    version = document.get("version") if isinstance(document, dict) else None
    if not isinstance(version, str) or not version.startswith(JSON_FEED_VERSION_PREFIX):
        raise ParseError("Failed to parse feed: not a JSON Feed document")

    items = document.get("items") or []
    if not isinstance(items, list):
        raise ParseError("Failed to parse feed: JSON Feed items must be a list")

    title = document.get("title")
    return (title if isinstance(title, str) else None), [_json_item_to_entry(item) for item in items]


def _json_item_to_entry(item) -> Optional[dict]:
    """Map a JSON Feed item onto the keys used for feedparser entries.

    Non-object items are passed through as None so normalization drops them.
    """
    if not isinstance(item, dict):
        return None

    def _strings(*keys: str) -> list[str]:
        return [item[key] for key in keys if isinstance(item.get(key), str) and item[key]]

    return {
        "title": item.get("title") if isinstance(item.get("title"), str) else None,
        "links": [{"href": url} for url in _strings("url", "external_url")],
        "summary": item.get("summary") if isinstance(item.get("summary"), str) else None,
        "content": [{"value": value} for value in _strings("content_html", "content_text")],
        "media_content": [{"url": url} for url in _strings("image")],
        "media_thumbnail": [{"url": url} for url in _strings("banner_image")],
    }

def extract_image(entry: dict) -> Optional[str]:
    """Find a representative image URL for a feed entry.

    Tries, in order: a media:content attachment, a media:thumbnail, and the
    first <img src> found in the entry body. The last rule is a plain text
    scan and takes the first image even if it is decorative.

    Args:
        entry: feedparser entry dict

    Returns:
        Image URL if one was found, None otherwise
    """
    for key in ("media_content", "media_thumbnail"):
        for url in _entry_media(entry, key):
            return url

    body = _entry_body(entry)
    if body:
        match = _IMG_SRC_RE.search(body)
        if match:
            return match.group(1) or match.group(2)

    return None


def _entry_to_article(entry: dict) -> Article:
    """Normalize a feedparser entry into an Article."""
    title = (entry.get("title") or "").strip() or DEFAULT_TITLE
    link = next(_entry_links(entry), NO_LINK)

    excerpt = None
    excerpt_source = entry.get("summary") or _first_content(entry)
    if excerpt_source:
        excerpt = sanitize(excerpt_source)

    return Article(
        title=title,
        link=link,
        excerpt=excerpt,
        image_url=extract_image(entry),
    )


def _entry_links(entry: dict) -> Iterator[str]:
    """Yield the entry's link hrefs in declaration order."""
    for link in entry.get("links") or []:
        href = (link.get("href") or "").strip()
        if href:
            yield href

    fallback = (entry.get("link") or "").strip()
    if fallback:
        yield fallback


def _entry_media(entry: dict, key: str) -> Iterator[str]:
    """Yield URLs of the entry's media attachments stored under key."""
    for media in entry.get(key) or []:
        url = (media.get("url") or "").strip()
        if url:
            yield url


def _first_content(entry: dict) -> Optional[str]:
    for content in entry.get("content") or []:
        value = content.get("value")
        if value:
            return value
    return None


def _entry_body(entry: dict) -> Optional[str]:
    """Return the entry's raw content body, or its summary if it has none."""
    return _first_content(entry) or entry.get("summary")


class ParseError(Exception):
    """Raised when a document is not a recognizable feed."""

    pass

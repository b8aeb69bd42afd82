"""Operations exposed to the UI layer of czytaj."""

import asyncio
import dataclasses
import logging
from typing import Optional

from .db import ViewedStore
from .fetcher import DEFAULT_TIMEOUT, fetch_text
from .models import NO_LINK, Feed, FeedSummary
from .rss import parse_feed

logger = logging.getLogger(__name__)


async def fetch_feed(url: str, timeout: Optional[float] = None) -> FeedSummary:
    """Fetch and parse a feed.

    The network request runs in a worker thread. Cancelling the awaiting
    task abandons the fetch; nothing is parsed and no state is changed.

    Args:
        url: Feed URL
        timeout: Request timeout in seconds

    Returns:
        FeedSummary with articles in document order

    Raises:
        FetchError: If the feed cannot be retrieved
        DecodeError: If the body is not decodable as text
        ParseError: If the body is not a recognizable feed
    """
    raw_text = await asyncio.to_thread(fetch_text, url, timeout or DEFAULT_TIMEOUT)
    summary = parse_feed(raw_text, url)
    logger.info("Feed '%s': %d articles", summary.title, len(summary.articles))
    return summary


async def refresh_feed(feed: Feed, timeout: Optional[float] = None) -> tuple[Feed, FeedSummary]:
    """Refetch a known feed.

    On failure the exception propagates and the caller keeps its existing
    feed and articles.

    Args:
        feed: The feed to refresh
        timeout: Request timeout in seconds

    Returns:
        Tuple of (feed with its current title, fetched summary)
    """
    summary = await fetch_feed(feed.url, timeout)
    return dataclasses.replace(feed, title=summary.title), summary


def mark_viewed(store: ViewedStore, url: str, title: str) -> None:
    """Record that an article was opened.

    Raises:
        ValueError: If url is empty or the "No link" placeholder
        StoreError: If the write fails
    """
    if not url or url == NO_LINK:
        raise ValueError("Article has no link to record")
    store.mark_viewed(url, title)


def is_viewed(store: ViewedStore, url: str) -> bool:
    """Check whether an article was opened."""
    if url == NO_LINK:
        return False
    return store.is_viewed(url)


def list_viewed(store: ViewedStore) -> list[str]:
    """List viewed article URLs, most recent first."""
    return store.list_viewed()

"""Data models for czytaj."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

DEFAULT_TITLE = "Untitled"
NO_LINK = "No link"


@dataclass(frozen=True)
class Article:
    """Represents one entry from a syndication feed.

    ``link`` holds the ``NO_LINK`` sentinel when the source entry had no
    link; it is not a usable URL and must not be used as a viewed-state key.
    """

    title: str = DEFAULT_TITLE
    link: str = NO_LINK
    excerpt: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def has_link(self) -> bool:
        return self.link != NO_LINK


@dataclass(frozen=True)
class FeedSummary:
    """Result of fetching and parsing one feed."""

    title: str
    articles: list[Article] = field(default_factory=list)


@dataclass(frozen=True)
class Feed:
    """A feed the caller is following."""

    url: str
    title: str


@dataclass
class ViewedRecord:
    """Represents an article the user has opened."""

    article_url: str
    title: str
    viewed_at: Optional[datetime] = None

"""RSS/Atom feed scraper.

Handles both RSS ``item`` and Atom ``entry`` shapes through feedparser. Some
feed dialects (WordPress ``content:encoded``, Atom ``content``) carry the full
article body next to a short description; when present the full body becomes
the draft's content and the description its excerpt.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import feedparser

from src.config.settings import Settings
from src.config.sources import SourceDescriptor, SourceMode
from src.engines.article_normalizer import (
    ArticleDraft,
    normalize_url,
    normalize_whitespace,
    parse_date,
    resolve_url,
    strip_tags,
)
from src.engines.http_client import FetchGateway
from src.engines.recency import is_recent


logger = logging.getLogger(__name__)


class FeedScraper:
    """Scraper for RSS and Atom feeds.

    Attributes:
        gateway: Fetch gateway used for the feed request
        settings: Configuration providing window and excerpt length
    """

    def __init__(self, gateway: FetchGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    @property
    def mode(self) -> SourceMode:
        """Return the retrieval mode handled by this scraper."""
        return SourceMode.FEED

    def fetch(self, source: SourceDescriptor) -> list[ArticleDraft]:
        """Fetch and parse the feed of ``source``.

        Args:
            source: Feed source descriptor

        Returns:
            Drafts for feed entries inside the recency window

        Raises:
            ValueError: If the payload is not a parseable feed
        """
        content = self.gateway.fetch(source.url)
        if not content:
            return []

        drafts = self.parse_feed(content, source)
        logger.info(f"Found {len(drafts)} articles in {source.name} feed")
        return drafts

    def parse_feed(self, content: str, source: SourceDescriptor) -> list[ArticleDraft]:
        """Parse feed XML into drafts.

        Raises:
            ValueError: If feedparser cannot extract any entries from a malformed feed
        """
        feed = feedparser.parse(content)

        if feed.bozo and not feed.entries:
            raise ValueError(f"Failed to parse feed: {feed.bozo_exception}")

        scraped_at = datetime.now(timezone.utc)
        drafts: list[ArticleDraft] = []
        for entry in feed.entries:
            draft = self._parse_entry(entry, source, scraped_at)
            if draft:
                drafts.append(draft)

        return drafts

    def _parse_entry(
        self,
        entry: Any,
        source: SourceDescriptor,
        scraped_at: datetime,
    ) -> ArticleDraft | None:
        """Parse a single feed entry into an ArticleDraft.

        Args:
            entry: feedparser entry object
            source: Descriptor of the feed being parsed
            scraped_at: Extraction time shared by the whole feed

        Returns:
            ArticleDraft or None if the entry lacks a title or link or is stale
        """
        title = normalize_whitespace(entry.get("title"))
        link = resolve_url(entry.get("link"), source.url)
        if not title or not link:
            return None

        published_at = _entry_date(entry)
        if published_at and not is_recent(published_at, self.settings.lookback_hours):
            return None

        excerpt = strip_tags(entry.get("summary"))[:self.settings.excerpt_max_length] or None
        full_text = _full_body(entry)

        return ArticleDraft(
            title=title,
            source=source.name,
            source_url=normalize_url(link),
            author=normalize_whitespace(entry.get("author")) or None,
            published_at=published_at,
            excerpt=excerpt,
            content=full_text or excerpt or "",
            scraped_at=scraped_at,
        )


def _full_body(entry: Any) -> str:
    """Return the cleaned full-body field of an entry, or an empty string."""
    for block in entry.get("content") or []:
        text = strip_tags(block.get("value"))
        if text:
            return text
    return ""


def _entry_date(entry: Any) -> datetime | None:
    """Return the entry's publish time in UTC.

    feedparser's ``*_parsed`` tuples are already normalized to UTC and cover
    RFC-822 zone names such as ``CDT``; the raw string is the fallback.
    """
    for field in ("published_parsed", "updated_parsed"):
        time_tuple = entry.get(field)
        if time_tuple:
            try:
                return datetime(*time_tuple[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return parse_date(entry.get("published") or entry.get("updated"))

"""Scraper for structured JSON news APIs (ESPN-style news endpoints)."""

import logging
from datetime import datetime, timezone
from typing import Any

from src.config.settings import Settings
from src.config.sources import SourceDescriptor, SourceMode
from src.engines.article_normalizer import (
    ArticleDraft,
    normalize_url,
    normalize_whitespace,
    parse_date,
    strip_tags,
)
from src.engines.http_client import FetchGateway
from src.engines.recency import is_recent


logger = logging.getLogger(__name__)


class ApiScraper:
    """Maps entries of a JSON news endpoint directly onto article drafts.

    The endpoint is expected to return an object with an ``articles`` list.
    Each entry may carry ``headline``, ``byline``, ``description``,
    ``story``, ``published``/``lastModified``, ``links.web.href`` and ``id``.

    Attributes:
        gateway: Fetch gateway used for the API request
        settings: Configuration providing the lookback window
    """

    def __init__(self, gateway: FetchGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    @property
    def mode(self) -> SourceMode:
        """Return the retrieval mode handled by this scraper."""
        return SourceMode.API

    def fetch(self, source: SourceDescriptor) -> list[ArticleDraft]:
        """Fetch recent drafts from the API endpoint of ``source``.

        Args:
            source: API source descriptor

        Returns:
            Drafts for entries inside the recency window
        """
        data = self.gateway.fetch_json(source.url)
        if data is None:
            return []

        entries = data.get("articles") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning(f"{source.name}: API response has no article list")
            return []

        scraped_at = datetime.now(timezone.utc)
        drafts: list[ArticleDraft] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            # Entries with no usable date are kept, as in the other modes
            timestamp = entry.get("published") or entry.get("lastModified")
            if not is_recent(timestamp, self.settings.lookback_hours):
                continue
            draft = self._parse_entry(entry, source.name, scraped_at)
            if draft:
                drafts.append(draft)

        logger.info(f"Found {len(drafts)} recent articles from {source.name} API")
        return drafts

    def _parse_entry(
        self,
        entry: dict[str, Any],
        source_name: str,
        scraped_at: datetime,
    ) -> ArticleDraft | None:
        """Parse a single API entry into an ArticleDraft.

        Returns:
            ArticleDraft or None if the entry has no headline
        """
        title = normalize_whitespace(entry.get("headline"))
        if not title:
            return None

        links = entry.get("links") or {}
        web = links.get("web") if isinstance(links, dict) else None
        href = web.get("href") if isinstance(web, dict) else None

        native_id = entry.get("id")
        excerpt = normalize_whitespace(entry.get("description")) or None
        content = strip_tags(entry.get("story")) or excerpt or ""

        return ArticleDraft(
            title=title,
            source=source_name,
            source_url=normalize_url(href) if href else None,
            author=normalize_whitespace(entry.get("byline")) or None,
            published_at=parse_date(entry.get("published") or entry.get("lastModified")),
            excerpt=excerpt,
            content=content,
            scraped_at=scraped_at,
            native_id=str(native_id) if native_id is not None else None,
        )

"""Generic HTML listing page scraper driven by a source's selector set."""

import logging
from datetime import datetime, timezone
from typing import Any

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.config.sources import SelectorSet, SourceDescriptor, SourceMode
from src.engines.article_normalizer import (
    ArticleDraft,
    normalize_url,
    normalize_whitespace,
    parse_date,
    resolve_url,
)
from src.engines.http_client import FetchGateway
from src.engines.recency import is_recent


logger = logging.getLogger(__name__)


class HtmlListingScraper:
    """Extracts article drafts from a single listing page.

    Item containers are located with ``selectors.items``; title, link, date,
    author and excerpt are looked up inside each container. A selector that
    matches nothing yields None for that field instead of failing the page.

    Attributes:
        gateway: Fetch gateway used for the listing request
        settings: Configuration providing window and title length limits
    """

    def __init__(self, gateway: FetchGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    @property
    def mode(self) -> SourceMode:
        """Return the retrieval mode handled by this scraper."""
        return SourceMode.HTML_LISTING

    def fetch(self, source: SourceDescriptor) -> list[ArticleDraft]:
        """Fetch the listing page of ``source`` and parse its items.

        Args:
            source: HTML listing source descriptor

        Returns:
            One draft per distinct, recent article URL on the page
        """
        html = self.gateway.fetch(source.url)
        if not html:
            return []

        drafts = self.parse_listing(html, source)
        logger.info(f"Found {len(drafts)} articles on {source.name} listing page")
        return drafts

    def parse_listing(self, html: str, source: SourceDescriptor) -> list[ArticleDraft]:
        """Parse listing HTML into drafts.

        Args:
            html: Listing page markup
            source: Descriptor carrying the page URL and selectors

        Returns:
            Drafts in page order, de-duplicated by URL
        """
        soup = BeautifulSoup(html, "lxml")
        scraped_at = datetime.now(timezone.utc)
        seen: set[str] = set()

        drafts: list[ArticleDraft] = []
        for element in soup.select(source.selectors.items):
            draft = self._parse_item(element, source, seen, scraped_at)
            if draft:
                drafts.append(draft)

        return drafts

    def _parse_item(
        self,
        element: Any,
        source: SourceDescriptor,
        seen: set[str],
        scraped_at: datetime,
    ) -> ArticleDraft | None:
        """Parse a single item container into an ArticleDraft.

        Args:
            element: BeautifulSoup element for the item container
            source: Descriptor of the source being scraped
            seen: URLs already emitted for this listing; updated in place
            scraped_at: Extraction time shared by the whole page

        Returns:
            ArticleDraft or None if the item is unusable, a duplicate or stale
        """
        selectors: SelectorSet = source.selectors

        title = _first_text(element, selectors.title)
        if not title or len(title) < self.settings.min_title_length:
            return None

        url = resolve_url(_find_href(element, selectors.link or "a"), source.url)
        if not url:
            return None
        url = normalize_url(url)
        if url in seen:
            return None
        seen.add(url)

        published_raw = _find_date(element, selectors.date or "time")
        if published_raw and not is_recent(published_raw, self.settings.lookback_hours):
            return None

        author = _first_text(element, selectors.author) if selectors.author else None
        excerpt = _first_text(element, selectors.excerpt) if selectors.excerpt else None

        return ArticleDraft(
            title=title,
            source=source.name,
            source_url=url,
            author=author or None,
            published_at=parse_date(published_raw),
            excerpt=excerpt or None,
            content=excerpt or "",
            scraped_at=scraped_at,
        )


def _first_text(element: Any, selector: str) -> str:
    match = element.select_one(selector)
    if match is None:
        return ""
    return normalize_whitespace(match.get_text(separator=" "))


def _find_href(element: Any, selector: str) -> str | None:
    """Find the article link inside an item, else on its nearest enclosing anchor."""
    link = element.select_one(selector)
    if link is not None and link.get("href"):
        return link.get("href")

    anchor = element if element.name == "a" else element.find_parent("a")
    if anchor is not None:
        return anchor.get("href")
    return None


def _find_date(element: Any, selector: str) -> str | None:
    """Prefer machine-readable date attributes over visible text."""
    date_elem = element.select_one(selector)
    if date_elem is None:
        return None
    return (
        date_elem.get("datetime")
        or date_elem.get("data-date")
        or normalize_whitespace(date_elem.get_text(separator=" "))
        or None
    )

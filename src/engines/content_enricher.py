"""Follows article links to replace excerpts with full body text."""

import logging
import time

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.engines.article_normalizer import ArticleDraft, normalize_whitespace
from src.engines.http_client import FetchGateway


logger = logging.getLogger(__name__)


# Elements removed from a body container before its text is taken
NOISE_SELECTOR = (
    'script, style, figure, figcaption, .ad, [class*="ad-"], '
    '[class*="promo"], [class*="related"]'
)


class ContentEnricher:
    """Fetches article pages and extracts body text for the first N drafts.

    Pages are fetched strictly one after another with a fixed delay in
    between. Drafts past the follow limit keep their excerpt as content.

    Attributes:
        gateway: Fetch gateway used for article pages
        settings: Configuration providing follow limit, delay and minimum length
    """

    def __init__(self, gateway: FetchGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    def enrich(
        self,
        drafts: list[ArticleDraft],
        body_selector: str,
        max_follow: int | None = None,
    ) -> list[ArticleDraft]:
        """Replace draft content with full body text where it can be found.

        Args:
            drafts: Drafts to enrich, updated in place
            body_selector: CSS selector for the article body container
            max_follow: Follow limit for this source (defaults to the configured one)

        Returns:
            The same drafts, in the same order
        """
        limit = self.settings.max_follow_per_source if max_follow is None else max_follow
        fetched = 0
        enriched = 0

        for draft in drafts[:limit]:
            if not draft.source_url:
                continue

            if fetched:
                time.sleep(self.settings.request_delay_seconds)
            fetched += 1

            try:
                if self._enrich_one(draft, body_selector):
                    enriched += 1
            except Exception as e:
                logger.warning(f"Failed to extract body from {draft.source_url}: {e}")

        logger.info(
            f"Enriched {enriched} of {fetched} followed articles "
            f"({len(drafts) - min(len(drafts), limit)} beyond follow limit)"
        )
        return drafts

    def _enrich_one(self, draft: ArticleDraft, body_selector: str) -> bool:
        """Fetch one article page and update its content.

        Returns:
            True if the draft's content was replaced
        """
        html = self.gateway.fetch(draft.source_url)
        if not html:
            return False

        text = extract_body_text(html, body_selector)
        if len(text) <= self.settings.min_body_length:
            return False

        draft.content = text
        return True


def extract_body_text(html: str, body_selector: str) -> str:
    """Return the cleaned text of the first element matching ``body_selector``.

    Scripts, styles, figures and ad/promo/related blocks inside the container
    are dropped. An unmatched selector yields an empty string.
    """
    soup = BeautifulSoup(html, "lxml")
    body = soup.select_one(body_selector)
    if body is None:
        return ""

    for noise in body.select(NOISE_SELECTOR):
        noise.extract()

    return normalize_whitespace(body.get_text(separator=" "))

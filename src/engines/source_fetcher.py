"""Extraction strategy protocol shared by the per-mode scrapers."""

from typing import Protocol, runtime_checkable

from src.config.sources import SourceDescriptor, SourceMode
from src.engines.article_normalizer import ArticleDraft


@runtime_checkable
class ExtractionStrategy(Protocol):
    """Protocol defining the interface for extraction strategies.

    One strategy exists per retrieval mode. A strategy fetches the payload
    described by a source descriptor and turns it into article drafts.

    Attributes:
        mode: The retrieval mode this strategy handles
    """

    @property
    def mode(self) -> SourceMode:
        """Return the retrieval mode handled by this strategy."""
        ...

    def fetch(self, source: SourceDescriptor) -> list[ArticleDraft]:
        """Fetch and parse drafts for one source.

        Args:
            source: Descriptor of the source to scrape

        Returns:
            List of ArticleDraft objects, empty when the payload is unavailable

        Raises:
            May raise exceptions on unexpected payload shapes,
            which should be handled by the caller.
        """
        ...

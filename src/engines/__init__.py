"""Engines module - core processing components."""

from src.engines.api_scraper import ApiScraper
from src.engines.article_normalizer import (
    ArticleDraft,
    ArticleRecord,
    Dataset,
    compute_id,
    normalize_whitespace,
    resolve_url,
)
from src.engines.content_enricher import ContentEnricher
from src.engines.dataset_store import DatasetWriteError, load_dataset, save_dataset
from src.engines.feed_scraper import FeedScraper
from src.engines.html_listing_scraper import HtmlListingScraper
from src.engines.http_client import FetchGateway
from src.engines.merge import MergeResult, merge, merge_datasets
from src.engines.recency import is_recent

__all__ = [
    # Data model and normalization
    "ArticleDraft",
    "ArticleRecord",
    "Dataset",
    "compute_id",
    "normalize_whitespace",
    "resolve_url",
    "is_recent",
    # Retrieval
    "FetchGateway",
    "ApiScraper",
    "HtmlListingScraper",
    "FeedScraper",
    "ContentEnricher",
    # Merge and persistence
    "merge",
    "merge_datasets",
    "MergeResult",
    "load_dataset",
    "save_dataset",
    # Exceptions
    "DatasetWriteError",
]

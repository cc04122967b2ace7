"""Workflow orchestrator for the article aggregation pipeline.

This module drives one run end to end: every configured source is scraped
with the strategy matching its retrieval mode, drafts are optionally enriched
with full body text, and the result is merged into the persisted dataset.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from src.config.settings import ConfigurationError, Settings
from src.config.sources import SourceDescriptor, SourceMode
from src.engines.api_scraper import ApiScraper
from src.engines.article_normalizer import ArticleDraft, Dataset
from src.engines.content_enricher import ContentEnricher
from src.engines.dataset_store import DatasetWriteError, load_dataset, save_dataset
from src.engines.feed_scraper import FeedScraper
from src.engines.html_listing_scraper import HtmlListingScraper
from src.engines.http_client import FetchGateway
from src.engines.merge import merge_datasets
from src.engines.observability import (
    RunMetrics,
    create_run_metrics,
    log_stage_counts,
    write_run_log,
)
from src.engines.source_fetcher import ExtractionStrategy


logger = logging.getLogger(__name__)


StrategyFactory = Callable[[SourceDescriptor, FetchGateway, Settings], ExtractionStrategy]


@dataclass
class WorkflowResult:
    """Result of a pipeline workflow execution.

    Attributes:
        success: Whether the merged dataset was written
        output_path: Path to the written dataset, or None if the write failed
        dataset: The merged dataset
        metrics: Run metrics collected during execution
    """
    success: bool
    output_path: str | None
    dataset: Dataset
    metrics: RunMetrics


def build_strategy(
    source: SourceDescriptor,
    gateway: FetchGateway,
    settings: Settings,
) -> ExtractionStrategy:
    """Return the extraction strategy for a source's retrieval mode.

    Raises:
        ConfigurationError: If the source has an unknown mode
    """
    if source.mode is SourceMode.API:
        return ApiScraper(gateway, settings)
    elif source.mode is SourceMode.HTML_LISTING:
        return HtmlListingScraper(gateway, settings)
    elif source.mode is SourceMode.FEED:
        return FeedScraper(gateway, settings)
    raise ConfigurationError(f"No strategy for mode {source.mode!r} of source '{source.name}'")


def collect_drafts(
    sources: list[SourceDescriptor],
    settings: Settings,
    gateway: FetchGateway | None = None,
    strategy_factory: StrategyFactory = build_strategy,
    enricher: ContentEnricher | None = None,
) -> tuple[list[ArticleDraft], dict[str, int], list[str]]:
    """Scrape all sources one after another, handling failures gracefully.

    Each source is scraped independently. If one source fails, it contributes
    zero drafts and the run continues with the remaining sources. Drafts are
    not de-duplicated here; that happens in the merge.

    Args:
        sources: Source descriptors in processing order
        settings: Configuration settings
        gateway: Fetch gateway shared by all strategies
        strategy_factory: Builds the strategy for a source
        enricher: Content enricher for sources that follow links

    Returns:
        Tuple of (all_drafts, counts_by_source, errors)
    """
    gateway = gateway or FetchGateway(settings)
    enricher = enricher or ContentEnricher(gateway, settings)

    all_drafts: list[ArticleDraft] = []
    counts_by_source: dict[str, int] = {}
    errors: list[str] = []

    for source in sources:
        try:
            logger.info(f"Scraping {source.name} ({source.mode.value})...")
            strategy = strategy_factory(source, gateway, settings)
            drafts = strategy.fetch(source)

            if source.follow_links and source.body_selector and drafts:
                limit = (
                    source.max_follow
                    if source.max_follow is not None
                    else settings.max_follow_per_source
                )
                logger.info(f"Fetching full content for up to {limit} {source.name} articles...")
                drafts = enricher.enrich(drafts, source.body_selector, limit)

            all_drafts.extend(drafts)
            counts_by_source[source.name] = len(drafts)
            logger.info(f"Collected {len(drafts)} articles from {source.name}")
        except Exception as e:
            error_msg = f"Error scraping {source.name}: {str(e)}"
            logger.error(error_msg)
            errors.append(error_msg)
            counts_by_source[source.name] = 0

    return all_drafts, counts_by_source, errors


def run_pipeline(
    settings: Settings,
    sources: list[SourceDescriptor],
    gateway: FetchGateway | None = None,
) -> WorkflowResult:
    """Execute one aggregation run.

    Orchestrates all pipeline stages:
    1. Scrape every source (with enrichment where requested)
    2. Load the previous dataset
    3. Merge, evicting stale records
    4. Write the merged dataset
    5. Write run log

    Only a failure to write the dataset makes the run unsuccessful.

    Args:
        settings: Configuration settings for the pipeline
        sources: Source descriptors, built-in sources included
        gateway: Fetch gateway (defaults to one built from settings)

    Returns:
        WorkflowResult containing success status, dataset and metrics
    """
    run_timestamp = datetime.now()
    errors: list[str] = []

    logger.info("Starting article aggregation pipeline...")
    logger.info(f"Lookback window: {settings.lookback_hours} hours")

    # Stage 1: Scrape all sources
    drafts, fetched_counts, fetch_errors = collect_drafts(sources, settings, gateway)
    errors.extend(fetch_errors)
    log_stage_counts("collected", len(drafts))

    # Stage 2: Load previous dataset
    existing = load_dataset(settings.output_path)
    log_stage_counts("existing", len(existing.articles))

    # Stage 3: Merge
    merged = merge_datasets(existing, drafts, settings.lookback_hours)
    dataset = merged.dataset
    log_stage_counts("merged", len(dataset.articles))

    # Stage 4: Write dataset
    output_path: str | None = None
    try:
        output_path = save_dataset(dataset, settings.output_path)
    except DatasetWriteError as e:
        error_msg = str(e)
        logger.error(error_msg)
        errors.append(error_msg)

    # Stage 5: Run log
    metrics = create_run_metrics(
        fetched_count_by_source=fetched_counts,
        collected_count=len(drafts),
        existing_count=len(existing.articles),
        merged_count=len(dataset.articles),
        evicted_count=merged.evicted_count,
        output_path=output_path,
        errors=errors,
        run_timestamp=run_timestamp,
    )

    if settings.run_log_dir:
        try:
            write_run_log(metrics, settings.run_log_dir)
        except OSError as e:
            logger.error(f"Failed to write run log: {str(e)}")

    success = output_path is not None

    logger.info(
        f"Pipeline completed. Success: {success}, "
        f"Saved: {len(dataset.articles)} articles"
    )

    return WorkflowResult(
        success=success,
        output_path=output_path,
        dataset=dataset,
        metrics=metrics,
    )

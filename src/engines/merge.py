"""Merge engine combining new drafts with the previously persisted dataset."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from src.engines.article_normalizer import (
    ArticleDraft,
    ArticleRecord,
    Dataset,
    draft_to_record,
)
from src.engines.recency import is_recent


logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Result of a merge operation.

    Attributes:
        dataset: The merged dataset
        kept_count: Existing records that survived eviction
        evicted_count: Existing records dropped as stale
        inserted_count: Drafts added under a new id
        overwritten_count: Drafts that replaced a record with the same id
        skipped_count: Drafts without a title or identity key
    """
    dataset: Dataset
    kept_count: int
    evicted_count: int
    inserted_count: int
    overwritten_count: int
    skipped_count: int


def is_retained(record: ArticleRecord, window_hours: float, now: datetime) -> bool:
    """Return True if an existing record survives eviction.

    Dated records are judged by their publish time. Undated records (no date
    on the source, or one that could not be parsed) are judged by when they
    were last scraped, so they age out once their source stops listing them.
    """
    if record.published_at is not None:
        return is_recent(record.published_at, window_hours, now=now)
    return is_recent(record.scraped_at, window_hours, now=now)


def merge_datasets(
    existing: Dataset,
    drafts: list[ArticleDraft],
    window_hours: float,
    now: datetime | None = None,
) -> MergeResult:
    """Merge new drafts into an existing dataset.

    1. Existing records are kept only while ``is_retained`` holds; this is
       how the dataset prunes itself across daily runs.
    2. Each draft with a title and an identity key is inserted by id,
       overwriting any existing record with the same id.
    3. Records are ordered newest first, undated records counting as
       ``now``; ties are ordered by id.

    For a fixed ``now`` the result is deterministic, and merging the same
    drafts a second time returns an equal dataset.

    Args:
        existing: Dataset loaded from the previous run
        drafts: Drafts collected in this run
        window_hours: Lookback window in hours
        now: Reference time (defaults to the current UTC time)

    Returns:
        MergeResult with the new dataset, stamped ``last_updated = now``
    """
    now = now or datetime.now(timezone.utc)
    by_id: dict[str, ArticleRecord] = {}

    for record in existing.articles:
        if is_retained(record, window_hours, now):
            by_id[record.id] = record
    kept = len(by_id)
    evicted = len(existing.articles) - kept

    inserted = 0
    overwritten = 0
    skipped = 0
    for draft in drafts:
        record = draft_to_record(draft) if draft.title else None
        if record is None:
            skipped += 1
            continue
        if record.id in by_id:
            overwritten += 1
        else:
            inserted += 1
        by_id[record.id] = record

    articles = sorted(by_id.values(), key=lambda r: _sort_key(r, now))

    logger.info(
        f"Merged dataset: kept {kept}, evicted {evicted}, "
        f"inserted {inserted}, overwritten {overwritten}, skipped {skipped}"
    )

    return MergeResult(
        dataset=Dataset(articles=articles, last_updated=now),
        kept_count=kept,
        evicted_count=evicted,
        inserted_count=inserted,
        overwritten_count=overwritten,
        skipped_count=skipped,
    )


def merge(
    existing: Dataset,
    drafts: list[ArticleDraft],
    window_hours: float,
    now: datetime | None = None,
) -> Dataset:
    """Merge new drafts into an existing dataset and return the new dataset.

    Example:
        >>> merged = merge(Dataset(), [ArticleDraft(title="X", source="S",
        ...     source_url="https://s/x")], 26)
        >>> len(merged.articles)
        1
    """
    return merge_datasets(existing, drafts, window_hours, now=now).dataset


def _sort_key(record: ArticleRecord, now: datetime) -> tuple[float, str]:
    """Sort key placing newer records first; undated records count as ``now``."""
    effective = record.published_at or now
    return (-effective.timestamp(), record.id)

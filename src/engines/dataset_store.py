"""Reading and writing the persisted article dataset.

The dataset file is the contract with the presentation layer::

    {
      "lastUpdated": "2024-01-16T12:00:00.000Z",
      "articles": [
        {"id": ..., "title": ..., "author": ..., "source": ..., "sourceUrl": ...,
         "publishedAt": ..., "excerpt": ..., "content": ..., "scrapedAt": ...}
      ]
    }
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from src.engines.article_normalizer import (
    ArticleRecord,
    Dataset,
    format_timestamp,
    parse_date,
)


logger = logging.getLogger(__name__)


class DatasetWriteError(Exception):
    """Raised when the dataset file cannot be written."""

    pass


def record_to_dict(record: ArticleRecord) -> dict[str, Any]:
    """Convert an ArticleRecord to its JSON file representation."""
    return {
        "id": record.id,
        "title": record.title,
        "author": record.author,
        "source": record.source,
        "sourceUrl": record.source_url or "",
        "publishedAt": format_timestamp(record.published_at),
        "excerpt": record.excerpt,
        "content": record.content or record.excerpt or "",
        "scrapedAt": format_timestamp(record.scraped_at),
    }


def record_from_dict(data: Any) -> ArticleRecord | None:
    """Build an ArticleRecord from a persisted entry.

    Any field may be absent except ``id`` and ``title``; entries without
    them are rejected.

    Returns:
        ArticleRecord or None if the entry is unusable
    """
    if not isinstance(data, dict):
        return None

    record_id = data.get("id")
    title = data.get("title")
    if not record_id or not title or not isinstance(record_id, str) or not isinstance(title, str):
        return None

    excerpt = data.get("excerpt") if isinstance(data.get("excerpt"), str) else None
    content = data.get("content") if isinstance(data.get("content"), str) else None

    record = ArticleRecord(
        id=record_id,
        title=title,
        source=data.get("source") or "",
        source_url=data.get("sourceUrl") or None,
        author=data.get("author") or None,
        published_at=parse_date(data.get("publishedAt")),
        excerpt=excerpt,
        content=content or excerpt or "",
    )
    scraped_at = parse_date(data.get("scrapedAt"))
    if scraped_at is not None:
        record.scraped_at = scraped_at
    return record


def dataset_to_dict(dataset: Dataset) -> dict[str, Any]:
    """Convert a Dataset to a JSON-serializable dictionary."""
    return {
        "lastUpdated": format_timestamp(dataset.last_updated),
        "articles": [record_to_dict(record) for record in dataset.articles],
    }


def load_dataset(path: str | Path) -> Dataset:
    """Load the previous run's dataset.

    A missing, unreadable or malformed file is treated as an empty dataset
    so the merge proceeds as if this were the first run.

    Args:
        path: Path of the dataset file

    Returns:
        Dataset with every usable record from the file
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No existing dataset at {path}, starting fresh")
        return Dataset()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable dataset {path}: {e}")
        return Dataset()

    if not isinstance(data, dict) or not isinstance(data.get("articles"), list):
        logger.warning(f"Ignoring dataset {path}: unexpected structure")
        return Dataset()

    articles: list[ArticleRecord] = []
    for entry in data["articles"]:
        record = record_from_dict(entry)
        if record is None:
            logger.debug(f"Skipping malformed dataset entry: {entry!r}")
            continue
        articles.append(record)

    logger.info(f"Loaded {len(articles)} existing articles from {path}")
    return Dataset(articles=articles, last_updated=parse_date(data.get("lastUpdated")))


def save_dataset(dataset: Dataset, path: str | Path) -> str:
    """Write the dataset, replacing the previous file atomically.

    Args:
        dataset: Dataset to persist
        path: Destination file path; parent directories are created

    Returns:
        The filepath of the written dataset

    Raises:
        DatasetWriteError: If the directory or file cannot be written
    """
    path = Path(path)
    payload = dataset_to_dict(dataset)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise DatasetWriteError(f"Failed to write dataset to {path}: {e}") from e

    logger.info(f"Saved {len(dataset.articles)} articles to {path}")
    return str(path)

"""Observability and run metrics for the article aggregation pipeline.

This module provides data structures and functions for tracking pipeline
execution metrics, logging stage counts, and writing run logs.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


@dataclass
class RunMetrics:
    """Metrics collected during a pipeline run.

    Attributes:
        fetched_count_by_source: Count of drafts collected per source
        collected_count: Total drafts collected across sources
        existing_count: Records loaded from the previous dataset
        merged_count: Records in the merged dataset
        evicted_count: Previous records dropped by the recency window
        output_path: Path of the written dataset, or None if the write failed
        errors: List of error messages encountered during the run
        run_timestamp: Timestamp when the run started
    """
    fetched_count_by_source: dict[str, int] = field(default_factory=dict)
    collected_count: int = 0
    existing_count: int = 0
    merged_count: int = 0
    evicted_count: int = 0
    output_path: str | None = None
    errors: list[str] = field(default_factory=list)
    run_timestamp: datetime = field(default_factory=datetime.now)


def create_run_metrics(
    fetched_count_by_source: dict[str, int] | None = None,
    collected_count: int = 0,
    existing_count: int = 0,
    merged_count: int = 0,
    evicted_count: int = 0,
    output_path: str | None = None,
    errors: list[str] | None = None,
    run_timestamp: datetime | None = None,
) -> RunMetrics:
    """Create a RunMetrics instance with aggregated counts from pipeline stages.

    Example:
        >>> metrics = create_run_metrics(
        ...     fetched_count_by_source={"ESPN": 12, "AP News": 8},
        ...     collected_count=20,
        ...     merged_count=31,
        ... )
        >>> metrics.merged_count
        31
    """
    return RunMetrics(
        fetched_count_by_source=fetched_count_by_source or {},
        collected_count=collected_count,
        existing_count=existing_count,
        merged_count=merged_count,
        evicted_count=evicted_count,
        output_path=output_path,
        errors=errors or [],
        run_timestamp=run_timestamp or datetime.now(),
    )


def write_run_log(metrics: RunMetrics, output_dir: str = "output") -> str:
    """Write run metrics to a JSON log file.

    Creates a JSON file in the specified output directory with filename format:
    run_log_YYYYMMDD_HHMMSS.json

    Args:
        metrics: RunMetrics instance to write
        output_dir: Directory path for output file (default: "output")

    Returns:
        The filepath of the written JSON file

    Raises:
        OSError: If the output directory cannot be created or file cannot be written
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = metrics.run_timestamp.strftime('%Y%m%d_%H%M%S')
    filepath = output_path / f"run_log_{timestamp}.json"

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(_metrics_to_dict(metrics), f, indent=2, ensure_ascii=False)

    logger.info(f"Run log written to {filepath}")
    return str(filepath)


def _metrics_to_dict(metrics: RunMetrics) -> dict[str, Any]:
    """Convert RunMetrics to a JSON-serializable dictionary."""
    return {
        "fetched_count_by_source": metrics.fetched_count_by_source,
        "collected_count": metrics.collected_count,
        "existing_count": metrics.existing_count,
        "merged_count": metrics.merged_count,
        "evicted_count": metrics.evicted_count,
        "output_path": metrics.output_path,
        "errors": metrics.errors,
        "run_timestamp": metrics.run_timestamp.isoformat(),
    }


def log_stage_counts(stage: str, count: int) -> None:
    """Log the count for a pipeline stage.

    Example:
        >>> log_stage_counts("collected", 45)
        # Logs: "Pipeline stage 'collected': 45 articles"
    """
    logger.info(f"Pipeline stage '{stage}': {count} articles")

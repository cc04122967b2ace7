"""Runner module for the article aggregation pipeline.

This module wires together all components and executes the workflow.
"""

import logging
import sys
from dataclasses import replace

from src.agent.workflow import run_pipeline
from src.config.settings import ConfigurationError, load_settings
from src.config.sources import load_sources, with_builtin_sources


# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_PIPELINE_ERROR = 2


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def run(
    verbose: bool = False,
    output_path: str | None = None,
    sources_path: str | None = None,
) -> int:
    """Run the article aggregation pipeline.

    Loads settings and source descriptors, configures logging, and executes
    the workflow. The previous dataset at the output path is read and
    overwritten with the merged result.

    Args:
        verbose: If True, enable verbose/debug logging.
        output_path: Override for the dataset path from settings.
        sources_path: Override for the sources JSON file from settings.

    Returns:
        Exit code:
        - 0: Success
        - 1: Configuration error
        - 2: Pipeline execution error (dataset not written)
    """
    _setup_logging(verbose)
    logger = logging.getLogger(__name__)

    logger.info("Article scraper starting...")

    try:
        settings = load_settings(validate=False)
        if output_path:
            settings = replace(settings, output_path=output_path)
        if sources_path:
            settings = replace(settings, sources_path=sources_path)
        settings.validate()
        sources = with_builtin_sources(load_sources(settings.sources_path))
        logger.info(f"Configuration loaded successfully ({len(sources)} sources)")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    try:
        result = run_pipeline(settings, sources)
    except Exception as e:
        logger.exception(f"Pipeline failed with unexpected error: {e}")
        return EXIT_PIPELINE_ERROR

    if result.success:
        logger.info(f"Done. Saved {len(result.dataset.articles)} total articles to {result.output_path}")
        if result.metrics.errors:
            logger.warning(f"{len(result.metrics.errors)} sources reported errors")
        return EXIT_SUCCESS

    logger.error("Pipeline failed: dataset was not written")
    for error in result.metrics.errors:
        logger.error(f"  - {error}")
    return EXIT_PIPELINE_ERROR

#!/usr/bin/env python3
"""Main entry point for the article scraper.

This module provides the CLI interface for running the aggregation pipeline.

Usage:
    python -m src.main                      # Scrape and merge into the default dataset
    python -m src.main -o data/articles.json
    python -m src.main --sources sources.json
    python -m src.main -v                   # Run with verbose logging
"""

import argparse
import sys

from src.agent.runner import run


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="bears-news-scraper",
        description="Scrape recent articles from configured news sources into a JSON dataset",
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Dataset file to merge into (default: OUTPUT_PATH or public/data/articles.json)",
    )

    parser.add_argument(
        "--sources",
        default=None,
        help="JSON file with source descriptors (default: built-in source list)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    return parser.parse_args(args)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the article scraper.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parsed = parse_args(args)
    return run(
        verbose=parsed.verbose,
        output_path=parsed.output,
        sources_path=parsed.sources,
    )


if __name__ == "__main__":
    sys.exit(main())

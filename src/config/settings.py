"""Configuration settings for the article aggregation pipeline."""

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv


DEFAULT_OUTPUT_PATH = "public/data/articles.json"
DEFAULT_RUN_LOG_DIR = "output"


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class Settings:
    """Configuration settings for the article aggregation pipeline.

    Attributes:
        lookback_hours: Width of the recency window in hours
        max_follow_per_source: Maximum article pages followed per source
        request_timeout_seconds: Hard timeout for a single HTTP request
        request_delay_seconds: Delay between article page fetches
        max_retries: Extra attempts after a transport failure (0 disables retry)
        min_body_length: Minimum characters for enriched body text to be kept
        excerpt_max_length: Maximum characters kept from a feed description
        min_title_length: Minimum characters for a listing headline
        output_path: Path of the persisted dataset file
        sources_path: Optional JSON file with source descriptors
        run_log_dir: Directory for run logs (empty string disables run logs)
    """

    lookback_hours: float = 26
    max_follow_per_source: int = 10
    request_timeout_seconds: float = 15.0
    request_delay_seconds: float = 0.6
    max_retries: int = 0
    min_body_length: int = 200
    excerpt_max_length: int = 400
    min_title_length: int = 5
    output_path: str = DEFAULT_OUTPUT_PATH
    sources_path: str = ""
    run_log_dir: str = DEFAULT_RUN_LOG_DIR

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.
        """
        errors: list[str] = []

        if self.lookback_hours <= 0:
            errors.append("lookback_hours must be positive")

        if self.max_follow_per_source < 0:
            errors.append("max_follow_per_source must be non-negative")

        if self.request_timeout_seconds <= 0.0:
            errors.append("request_timeout_seconds must be positive")

        if self.request_delay_seconds < 0.0:
            errors.append("request_delay_seconds must be non-negative")

        if self.max_retries < 0:
            errors.append("max_retries must be non-negative")

        if self.min_body_length < 0:
            errors.append("min_body_length must be non-negative")

        if self.excerpt_max_length < 1:
            errors.append("excerpt_max_length must be at least 1")

        if self.min_title_length < 1:
            errors.append("min_title_length must be at least 1")

        if not self.output_path:
            errors.append("output_path must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))


def _parse_float(value: str | None, default: float) -> float:
    """Parse a string to float, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str | None, default: int) -> int:
    """Parse a string to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_settings(env_path: str | Path | None = None, validate: bool = True) -> Settings:
    """Load settings from environment variables and .env file.

    Args:
        env_path: Optional path to .env file. If None, searches for .env
                  in current directory and parent directories.
        validate: If True, validate settings after loading.

    Returns:
        Settings instance with loaded configuration.

    Raises:
        ConfigurationError: If validate=True and configuration is invalid.
    """
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    settings = Settings(
        lookback_hours=_parse_float(os.getenv("LOOKBACK_HOURS"), 26),
        max_follow_per_source=_parse_int(
            os.getenv("MAX_FOLLOW_PER_SOURCE"), 10
        ),
        request_timeout_seconds=_parse_float(
            os.getenv("REQUEST_TIMEOUT_SECONDS"), 15.0
        ),
        request_delay_seconds=_parse_float(
            os.getenv("REQUEST_DELAY_SECONDS"), 0.6
        ),
        max_retries=_parse_int(os.getenv("MAX_RETRIES"), 0),
        min_body_length=_parse_int(os.getenv("MIN_BODY_LENGTH"), 200),
        excerpt_max_length=_parse_int(os.getenv("EXCERPT_MAX_LENGTH"), 400),
        min_title_length=_parse_int(os.getenv("MIN_TITLE_LENGTH"), 5),
        output_path=os.getenv("OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
        sources_path=os.getenv("SOURCES_PATH", ""),
        run_log_dir=os.getenv("RUN_LOG_DIR", DEFAULT_RUN_LOG_DIR),
    )

    if validate:
        settings.validate()

    return settings

"""Configuration module - settings, environment and source descriptors."""

from src.config.settings import (
    ConfigurationError,
    Settings,
    load_settings,
)
from src.config.sources import (
    DEFAULT_SOURCES,
    ESPN_SOURCE,
    ApiSource,
    FeedSource,
    HtmlListingSource,
    SelectorSet,
    SourceDescriptor,
    SourceMode,
    load_sources,
    parse_source,
    with_builtin_sources,
)

__all__ = [
    "ConfigurationError",
    "Settings",
    "load_settings",
    "DEFAULT_SOURCES",
    "ESPN_SOURCE",
    "ApiSource",
    "FeedSource",
    "HtmlListingSource",
    "SelectorSet",
    "SourceDescriptor",
    "SourceMode",
    "load_sources",
    "parse_source",
    "with_builtin_sources",
]

"""Source descriptors and the configured news source list.

A source descriptor tells the pipeline how to retrieve one news source. The
retrieval mode is the tag: each mode has its own descriptor class carrying only
the fields that mode needs, so callers dispatch on ``source.mode`` explicitly.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Union

from src.config.settings import ConfigurationError


logger = logging.getLogger(__name__)


class SourceMode(str, Enum):
    """Retrieval mode of a news source."""

    API = "api"
    HTML_LISTING = "html-listing"
    FEED = "feed"


@dataclass(frozen=True)
class SelectorSet:
    """CSS selectors used to pull article fields out of a listing page.

    Attributes:
        items: Selector for the item containers on the listing page
        title: Selector for the headline inside an item
        link: Selector for the article anchor inside an item
        date: Selector for the date element inside an item
        author: Selector for the byline inside an item, if the site has one
        excerpt: Selector for the teaser text inside an item, if any
    """
    items: str
    title: str
    link: str = "a"
    date: str = "time"
    author: str | None = None
    excerpt: str | None = None


@dataclass(frozen=True)
class ApiSource:
    """A source exposing a structured JSON news endpoint."""
    mode: ClassVar[SourceMode] = SourceMode.API

    name: str
    url: str
    follow_links: bool = True
    body_selector: str | None = None
    max_follow: int | None = None


@dataclass(frozen=True)
class HtmlListingSource:
    """A source scraped from a single HTML listing page."""
    mode: ClassVar[SourceMode] = SourceMode.HTML_LISTING

    name: str
    url: str
    selectors: SelectorSet
    follow_links: bool = False
    body_selector: str | None = None
    max_follow: int | None = None


@dataclass(frozen=True)
class FeedSource:
    """A source publishing an RSS or Atom feed."""
    mode: ClassVar[SourceMode] = SourceMode.FEED

    name: str
    url: str
    follow_links: bool = False
    body_selector: str | None = None
    max_follow: int | None = None


SourceDescriptor = Union[ApiSource, HtmlListingSource, FeedSource]


ESPN_SOURCE = ApiSource(
    name="ESPN",
    url="https://site.api.espn.com/apis/site/v2/sports/football/nfl/news?team=3&limit=50",
    follow_links=True,
    body_selector=(
        '.article-body, [class*="article-body"], [class*="ArticleBody"], '
        '.story__body, [class*="story-body"]'
    ),
)


DEFAULT_SOURCES: list[SourceDescriptor] = [
    FeedSource(
        name="Chicago Bears Official",
        url="https://www.chicagobears.com/rss/news",
    ),
    HtmlListingSource(
        name="AP News",
        url="https://apnews.com/hub/chicago-bears",
        selectors=SelectorSet(
            items='.PageList-items-item, [data-key="feed-card"], .FeedCard, [class*="FeedCard"]',
            title='.Component-headline, [class*="headline"], h1, h2, h3',
            link='a[href*="/article/"]',
            date='.Timestamp, [data-source="timestamp"], time',
            author='.Component-bylines, [class*="byline"]',
            excerpt=".Component-summary, p",
        ),
        follow_links=True,
        body_selector='.RichTextStoryBody, [class*="ArticleBody"], .article-body',
    ),
    # Paywalled: headlines and excerpts only
    HtmlListingSource(
        name="Chicago Tribune",
        url="https://www.chicagotribune.com/sports/chicago-bears/",
        selectors=SelectorSet(
            items='article, .promo, [class*="story-promo"], [class*="article-promo"]',
            title='h2, h3, [class*="promo-title"], [class*="headline"]',
            link="a",
            date='time, [class*="timestamp"], [class*="date"]',
            author='[class*="byline"], [class*="author"]',
            excerpt='p, [class*="summary"], [class*="abstract"]',
        ),
    ),
    HtmlListingSource(
        name="Chicago Sun-Times",
        url="https://chicago.suntimes.com/chicago-bears",
        selectors=SelectorSet(
            items='article, [class*="story"], [class*="post-item"], [class*="feed-item"]',
            title='h2, h3, [class*="title"], [class*="headline"]',
            link="a",
            date='time, [class*="date"], [class*="timestamp"]',
            author='[class*="author"], [class*="byline"]',
            excerpt='p, [class*="excerpt"], [class*="summary"]',
        ),
    ),
    HtmlListingSource(
        name="Crain's Chicago Business",
        url="https://www.chicagobusiness.com/search?q=chicago+bears&f=all",
        selectors=SelectorSet(
            items='article, [class*="search-result"], [class*="story-item"]',
            title='h2, h3, [class*="headline"], [class*="title"]',
            link="a",
            date='time, [class*="date"], [class*="published"]',
            author='[class*="author"], [class*="byline"]',
            excerpt='p, [class*="summary"], [class*="teaser"]',
        ),
    ),
    HtmlListingSource(
        name="The Athletic",
        url="https://www.nytimes.com/athletic/football/nfl/chicago-bears/",
        selectors=SelectorSet(
            items='[data-testid="story-wrapper"], article, [class*="story-item"]',
            title='[data-testid="headline"], h2, h3',
            link="a",
            date='time, [data-testid="todays-date"], [class*="timestamp"]',
            author='[data-testid="byline"], [class*="byline"]',
            excerpt='p, [data-testid="summary"], [class*="summary"]',
        ),
    ),
    FeedSource(
        name="Daily Herald",
        url=(
            "https://www.dailyherald.com/search/?f=rss&t=article&l=25"
            "&s=start_time&sd=desc&k=%22chicago+bears%22"
        ),
    ),
    FeedSource(
        name="670 The Score",
        url="https://670thescore.com/category/chicago-bears/feed/",
    ),
    FeedSource(
        name="Fox 32 Chicago",
        url="https://www.fox32chicago.com/tag/chicago-bears.rss",
    ),
    FeedSource(
        name="Marquee Sports Network",
        url="https://www.marqueesportsnetwork.com/tag/bears/feed/",
    ),
    FeedSource(
        name="CBS Chicago",
        url="https://www.cbsnews.com/chicago/tag/chicago-bears/feed/",
    ),
    FeedSource(
        name="WGN News",
        url="https://wgntv.com/sports/chicago-bears/feed/",
    ),
    FeedSource(
        name="CHGO Sports",
        url="https://chgosports.com/tag/chicago-bears/feed/",
    ),
]


def _optional_int(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"Source '{name}': max_follow must be a non-negative integer")
    return value


def parse_source(data: dict[str, Any]) -> SourceDescriptor:
    """Build a source descriptor from a plain mapping.

    Args:
        data: Mapping with at least ``name``, ``mode`` and ``url`` keys.
              ``html-listing`` sources also need a ``selectors`` mapping
              with ``items`` and ``title``.

    Returns:
        The descriptor variant matching the ``mode`` tag

    Raises:
        ConfigurationError: If a required field is missing or the mode is unknown
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Source entry must be an object, got {type(data).__name__}")

    name = data.get("name")
    url = data.get("url")
    if not name or not isinstance(name, str):
        raise ConfigurationError("Source entry is missing a name")
    if not url or not isinstance(url, str):
        raise ConfigurationError(f"Source '{name}' is missing a url")

    try:
        mode = SourceMode(data.get("mode"))
    except ValueError:
        raise ConfigurationError(
            f"Source '{name}' has unknown mode {data.get('mode')!r}"
        ) from None

    follow_links = bool(data.get("follow_links", mode is SourceMode.API))
    body_selector = data.get("body_selector") or None
    max_follow = _optional_int(data.get("max_follow"), name)

    if follow_links and not body_selector:
        raise ConfigurationError(f"Source '{name}' follows links but has no body_selector")

    if mode is SourceMode.API:
        return ApiSource(
            name=name,
            url=url,
            follow_links=follow_links,
            body_selector=body_selector,
            max_follow=max_follow,
        )
    elif mode is SourceMode.HTML_LISTING:
        raw_selectors = data.get("selectors") or {}
        if not raw_selectors.get("items") or not raw_selectors.get("title"):
            raise ConfigurationError(
                f"Source '{name}' needs 'items' and 'title' selectors"
            )
        selectors = SelectorSet(
            items=raw_selectors["items"],
            title=raw_selectors["title"],
            link=raw_selectors.get("link") or "a",
            date=raw_selectors.get("date") or "time",
            author=raw_selectors.get("author") or None,
            excerpt=raw_selectors.get("excerpt") or None,
        )
        return HtmlListingSource(
            name=name,
            url=url,
            selectors=selectors,
            follow_links=follow_links,
            body_selector=body_selector,
            max_follow=max_follow,
        )
    elif mode is SourceMode.FEED:
        return FeedSource(
            name=name,
            url=url,
            follow_links=follow_links,
            body_selector=body_selector,
            max_follow=max_follow,
        )
    raise ConfigurationError(f"Source '{name}' has unsupported mode {mode.value!r}")


def load_sources(path: str | Path | None = None) -> list[SourceDescriptor]:
    """Load source descriptors from a JSON file, or return the built-in list.

    Args:
        path: Path to a JSON file holding a list of source objects. If empty
              or None, DEFAULT_SOURCES is returned.

    Returns:
        List of source descriptors in file order

    Raises:
        ConfigurationError: If the file cannot be read or an entry is invalid
    """
    if not path:
        return list(DEFAULT_SOURCES)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read sources file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(f"Sources file {path} must contain a list")

    sources = [parse_source(entry) for entry in data]
    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources


def with_builtin_sources(sources: list[SourceDescriptor]) -> list[SourceDescriptor]:
    """Prepend the built-in API source unless a source with its name is configured."""
    if any(source.name == ESPN_SOURCE.name for source in sources):
        return list(sources)
    return [ESPN_SOURCE, *sources]

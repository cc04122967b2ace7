"""Article data models and normalization utilities."""

import hashlib
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from dateutil.parser import ParserError


logger = logging.getLogger(__name__)


# Width of the identifier produced by compute_id
ID_LENGTH = 16

# Tracking parameters to strip from URLs (all lowercase for case-insensitive matching)
TRACKING_PARAMS = frozenset({
    # UTM parameters
    'utm_source', 'utm_medium', 'utm_campaign', 'utm_term', 'utm_content',
    'utm_id', 'utm_source_platform', 'utm_creative_format', 'utm_marketing_tactic',
    # Facebook
    'fbclid', 'fb_action_ids', 'fb_action_types', 'fb_source', 'fb_ref',
    # Google
    'gclid', 'gclsrc', 'dclid',
    # Microsoft/Bing
    'msclkid',
    # Twitter
    'twclid',
    # Mailchimp
    'mc_cid', 'mc_eid',
    # Google Analytics
    '_ga', '_gl',
    'cmpid', 'ncid', 'ocid', 'taid',
})

_WHITESPACE_RE = re.compile(r'\s+')

# RFC-822 zone names that dateutil does not resolve on its own
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ArticleDraft:
    """An article as extracted from a source, before it gets an identifier.

    Attributes:
        title: Headline, never empty
        source: Source label (e.g., "ESPN")
        source_url: Canonical article URL, if one was found
        author: Byline if available
        published_at: Publication time in UTC; None means "treat as recent"
        excerpt: Short teaser text
        content: Body text; the excerpt until enrichment finds more
        scraped_at: When the draft was extracted
        native_id: Identifier assigned by an API source, used when there is no URL
    """
    title: str
    source: str
    source_url: str | None = None
    author: str | None = None
    published_at: datetime | None = None
    excerpt: str | None = None
    content: str = ""
    scraped_at: datetime = field(default_factory=_utcnow)
    native_id: str | None = None


@dataclass
class ArticleRecord:
    """An article with a stable identifier, as persisted in the dataset."""
    id: str
    title: str
    source: str
    source_url: str | None = None
    author: str | None = None
    published_at: datetime | None = None
    excerpt: str | None = None
    content: str = ""
    scraped_at: datetime = field(default_factory=_utcnow)


@dataclass
class Dataset:
    """The merged article set handed to the presentation layer.

    Attributes:
        articles: Records ordered newest first, unique by id
        last_updated: When the dataset was last merged
    """
    articles: list[ArticleRecord] = field(default_factory=list)
    last_updated: datetime | None = None


def normalize_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace to single spaces and trim.

    Example:
        >>> normalize_whitespace("  Bears   win\\n opener ")
        'Bears win opener'
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(' ', text).strip()


def strip_tags(html: str | None) -> str:
    """Remove markup from an HTML fragment and normalize the remaining text."""
    if not html:
        return ""
    if '<' not in html:
        return normalize_whitespace(html)
    soup = BeautifulSoup(html, "lxml")
    return normalize_whitespace(soup.get_text(separator=" "))


def resolve_url(href: str | None, base_url: str) -> str | None:
    """Resolve a link found on a page into an absolute URL.

    Absolute http(s) URLs pass through, protocol-relative URLs gain ``https:``
    and root-relative paths are joined to the origin of ``base_url``. Anything
    else (javascript: links, fragments, bare relative paths) yields None.

    Example:
        >>> resolve_url("/news/story", "https://example.com/hub/bears")
        'https://example.com/news/story'
        >>> resolve_url("javascript:void(0)", "https://example.com/")
    """
    if not href:
        return None

    href = href.strip()
    if href.lower().startswith(('http://', 'https://')):
        return href
    if href.startswith('//'):
        return 'https:' + href
    if href.startswith('/'):
        base = urlparse(base_url or '')
        if not base.scheme or not base.netloc:
            return None
        return f"{base.scheme}://{base.netloc}{href}"
    return None


def normalize_url(url: str) -> str:
    """Strip tracking parameters and normalize URL to canonical form.

    Removes common tracking parameters (utm_*, fbclid, gclid, etc.) and the
    fragment while preserving the path and non-tracking query parameters.

    Example:
        >>> normalize_url("https://example.com/article?utm_source=twitter&id=123")
        'https://example.com/article?id=123'
    """
    if not url:
        return url

    parsed = urlparse(url)

    if not parsed.query and not parsed.fragment:
        return url

    query_params = parse_qs(parsed.query, keep_blank_values=True)
    filtered_params = {
        key: values
        for key, values in query_params.items()
        if key.lower() not in TRACKING_PARAMS
        and not key.lower().startswith('utm_')
    }
    new_query = urlencode(filtered_params, doseq=True) if filtered_params else ''

    return urlunparse((
        parsed.scheme,
        parsed.netloc,
        parsed.path,
        parsed.params,
        new_query,
        '',
    ))


def compute_id(key: str) -> str:
    """Derive a fixed-width identifier from a canonical URL or native id.

    Example:
        >>> len(compute_id("https://example.com/a"))
        16
    """
    return hashlib.md5(key.encode('utf-8')).hexdigest()[:ID_LENGTH]


def parse_date(value: str | datetime | None) -> datetime | None:
    """Parse a timestamp into an aware UTC datetime.

    Uses python-dateutil for flexible parsing of various date formats.
    Naive values are assumed to be UTC. Returns None on parse failure
    instead of raising an exception.

    Example:
        >>> parse_date("2024-01-15T10:30:00Z")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
        >>> parse_date("two hours ago")
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            parsed = date_parser.parse(value, tzinfos=TZINFOS)
        except (ParserError, ValueError, OverflowError) as e:
            logger.debug(f"Failed to parse date '{value}': {e}")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def identity_key(draft: ArticleDraft) -> str | None:
    """Return the key an article's identifier is derived from."""
    if draft.source_url:
        return draft.source_url
    if draft.native_id:
        return draft.native_id
    return None


def draft_to_record(draft: ArticleDraft) -> ArticleRecord | None:
    """Attach a stable identifier to a draft.

    Returns:
        The record, or None when the draft has neither a URL nor a native id
    """
    key = identity_key(draft)
    if key is None:
        return None

    return ArticleRecord(
        id=compute_id(key),
        title=draft.title,
        source=draft.source,
        source_url=draft.source_url,
        author=draft.author,
        published_at=draft.published_at,
        excerpt=draft.excerpt,
        content=draft.content,
        scraped_at=draft.scraped_at,
    )

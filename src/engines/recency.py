"""Recency window checks for article timestamps."""

from datetime import datetime, timedelta, timezone

from src.engines.article_normalizer import parse_date


# Slightly more than a day so a daily run never loses articles near the boundary
DEFAULT_LOOKBACK_HOURS = 26


def cutoff(window_hours: float, now: datetime | None = None) -> datetime:
    """Return the oldest publish time still inside the window (exclusive)."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(hours=window_hours)


def is_recent(
    timestamp: str | datetime | None,
    window_hours: float = DEFAULT_LOOKBACK_HOURS,
    now: datetime | None = None,
) -> bool:
    """Check whether a publish timestamp falls inside the lookback window.

    Missing or unparseable timestamps count as recent, so undated content is
    kept rather than silently dropped.

    Args:
        timestamp: Datetime or date string, or None
        window_hours: Width of the window in hours
        now: Reference time (defaults to the current UTC time)

    Returns:
        True if ``now - timestamp`` is strictly less than the window

    Example:
        >>> is_recent(None, 26)
        True
        >>> is_recent("2001-01-01T00:00:00Z", 26)
        False
    """
    published = parse_date(timestamp)
    if published is None:
        return True

    now = parse_date(now) or datetime.now(timezone.utc)
    return now - published < timedelta(hours=window_hours)

"""Unit tests for the JSON API scraper."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from src.config.settings import Settings
from src.config.sources import ESPN_SOURCE
from src.engines.api_scraper import ApiScraper


def _iso(hours_ago: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(hours=hours_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def _entry(**overrides):
    entry = {
        "id": 41234567,
        "headline": "Bears' defense dominates in 24-17 win",
        "byline": "Courtney Cronin",
        "description": "Chicago forced three turnovers.",
        "story": "<p>The Bears defense forced three turnovers on Sunday.</p>",
        "published": _iso(3),
        "lastModified": _iso(2),
        "links": {"web": {"href": "https://www.espn.com/nfl/story/_/id/41234567/bears-defense"}},
    }
    entry.update(overrides)
    return entry


def _scraper(payload, settings: Settings | None = None) -> ApiScraper:
    gateway = MagicMock()
    gateway.fetch_json.return_value = payload
    return ApiScraper(gateway, settings or Settings())


class TestApiScraper:
    """Tests for mapping API entries onto drafts."""

    def test_maps_fields(self):
        drafts = _scraper({"articles": [_entry()]}).fetch(ESPN_SOURCE)

        assert len(drafts) == 1
        draft = drafts[0]
        assert draft.title == "Bears' defense dominates in 24-17 win"
        assert draft.author == "Courtney Cronin"
        assert draft.source == "ESPN"
        assert draft.source_url == "https://www.espn.com/nfl/story/_/id/41234567/bears-defense"
        assert draft.excerpt == "Chicago forced three turnovers."
        assert draft.content == "The Bears defense forced three turnovers on Sunday."
        assert draft.native_id == "41234567"
        assert draft.published_at is not None

    def test_description_used_when_story_missing(self):
        drafts = _scraper({"articles": [_entry(story=None)]}).fetch(ESPN_SOURCE)

        assert drafts[0].content == "Chicago forced three turnovers."

    def test_stale_entries_filtered(self):
        payload = {"articles": [
            _entry(id=1, published=_iso(40), lastModified=_iso(39)),
            _entry(id=2, published=_iso(1)),
        ]}

        drafts = _scraper(payload).fetch(ESPN_SOURCE)

        assert [d.native_id for d in drafts] == ["2"]

    def test_last_modified_used_when_published_missing(self):
        payload = {"articles": [
            _entry(id=1, published=None, lastModified=_iso(50)),
            _entry(id=2, published=None, lastModified=_iso(5)),
        ]}

        drafts = _scraper(payload).fetch(ESPN_SOURCE)

        assert [d.native_id for d in drafts] == ["2"]

    def test_undated_entries_kept(self):
        payload = {"articles": [
            _entry(id=1, published=None, lastModified=None),
            _entry(id=2, published="sometime last week", lastModified=None),
        ]}

        drafts = _scraper(payload).fetch(ESPN_SOURCE)

        assert [d.native_id for d in drafts] == ["1", "2"]
        assert all(d.published_at is None for d in drafts)

    def test_missing_link_keeps_native_id(self):
        drafts = _scraper({"articles": [_entry(links={})]}).fetch(ESPN_SOURCE)

        assert drafts[0].source_url is None
        assert drafts[0].native_id == "41234567"

    def test_missing_optional_fields(self):
        entry = _entry(byline=None, description=None, story=None)

        drafts = _scraper({"articles": [entry]}).fetch(ESPN_SOURCE)

        assert drafts[0].author is None
        assert drafts[0].excerpt is None
        assert drafts[0].content == ""

    def test_entries_without_headline_skipped(self):
        drafts = _scraper({"articles": [_entry(headline="  ")]}).fetch(ESPN_SOURCE)

        assert drafts == []

    def test_unavailable_endpoint(self):
        assert _scraper(None).fetch(ESPN_SOURCE) == []

    def test_unexpected_shape(self):
        assert _scraper({"headlines": []}).fetch(ESPN_SOURCE) == []
        assert _scraper([1, 2, 3]).fetch(ESPN_SOURCE) == []

    def test_requests_source_url(self):
        scraper = _scraper({"articles": []})

        scraper.fetch(ESPN_SOURCE)

        scraper.gateway.fetch_json.assert_called_once_with(ESPN_SOURCE.url)

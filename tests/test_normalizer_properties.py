"""Property-based tests for text normalization and identifiers."""

from datetime import datetime, timezone, timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from hypothesis import given, settings, strategies as st, assume

from src.engines.article_normalizer import (
    ID_LENGTH,
    TRACKING_PARAMS,
    ArticleDraft,
    compute_id,
    draft_to_record,
    format_timestamp,
    normalize_url,
    normalize_whitespace,
    parse_date,
    resolve_url,
    strip_tags,
)


class TestIdentifierDeterminism:
    """Property tests for compute_id."""

    @given(key=st.text(min_size=1, max_size=300))
    @settings(max_examples=200)
    def test_same_key_same_id(self, key: str):
        """For any key, compute_id SHALL return the same id on every call."""
        assert compute_id(key) == compute_id(key)

    @given(key=st.text(max_size=300))
    @settings(max_examples=200)
    def test_id_has_fixed_width(self, key: str):
        """For any key, the id SHALL be a 16-character lowercase hex token."""
        article_id = compute_id(key)

        assert len(article_id) == ID_LENGTH == 16
        assert all(c in "0123456789abcdef" for c in article_id)

    @given(a=st.text(min_size=1, max_size=100), b=st.text(min_size=1, max_size=100))
    @settings(max_examples=200)
    def test_different_keys_different_ids(self, a: str, b: str):
        """For distinct keys, ids SHALL differ."""
        assume(a != b)
        assert compute_id(a) != compute_id(b)

    def test_known_value_is_stable_across_runs(self):
        assert compute_id("https://s/x") == "e375f9d03926f007"
        assert compute_id("https://example.com/a") == "cd69b81ea00cc279"


class TestNormalizeWhitespace:
    """Property tests for whitespace collapsing."""

    @given(text=st.text(max_size=200))
    @settings(max_examples=100)
    def test_no_runs_or_edges(self, text: str):
        """For any text, the result SHALL have no leading/trailing or doubled whitespace."""
        result = normalize_whitespace(text)

        assert result == result.strip()
        assert "  " not in result
        assert "\n" not in result and "\t" not in result

    @given(text=st.text(max_size=200))
    @settings(max_examples=100)
    def test_idempotent(self, text: str):
        once = normalize_whitespace(text)
        assert normalize_whitespace(once) == once

    def test_none_becomes_empty(self):
        assert normalize_whitespace(None) == ""

    def test_collapses_mixed_whitespace(self):
        assert normalize_whitespace("  Bears \n\t win   opener ") == "Bears win opener"


class TestStripTags:
    """Tests for markup removal."""

    def test_strips_tags_and_collapses_whitespace(self):
        html = "<p>Caleb   Williams</p>\n<p>threw <b>three</b> touchdowns.</p>"

        assert strip_tags(html) == "Caleb Williams threw three touchdowns."

    def test_plain_text_passes_through(self):
        assert strip_tags("  plain   text ") == "plain text"

    def test_empty_input(self):
        assert strip_tags(None) == ""
        assert strip_tags("") == ""


class TestResolveUrl:
    """Tests for link resolution."""

    BASE = "https://apnews.com/hub/chicago-bears"

    def test_absolute_url_passes_through(self):
        url = "https://apnews.com/article/bears-123"
        assert resolve_url(url, self.BASE) == url

    def test_protocol_relative_gains_https(self):
        assert resolve_url("//cdn.example.com/a", self.BASE) == "https://cdn.example.com/a"

    def test_root_relative_joins_origin(self):
        assert resolve_url("/article/bears-123", self.BASE) == "https://apnews.com/article/bears-123"

    def test_surrounding_whitespace_ignored(self):
        assert resolve_url("  /article/x  ", self.BASE) == "https://apnews.com/article/x"

    @pytest.mark.parametrize("href", [
        None,
        "",
        "javascript:void(0)",
        "mailto:desk@example.com",
        "#top",
        "article/relative",
    ])
    def test_unusable_links_yield_none(self, href):
        assert resolve_url(href, self.BASE) is None

    def test_root_relative_without_base_origin(self):
        assert resolve_url("/a", "not a url") is None

    @given(path=st.text(
        alphabet=st.characters(whitelist_categories=("L", "N"), whitelist_characters="-_/"),
        max_size=40,
    ))
    @settings(max_examples=100)
    def test_root_relative_always_absolute(self, path: str):
        """For any root-relative path, the resolved URL SHALL be on the base origin."""
        assume(not path.startswith("/"))
        resolved = resolve_url("/" + path, self.BASE)

        assert resolved == "https://apnews.com/" + path


class TestURLCanonicalization:
    """Property tests for tracking parameter removal."""

    @given(
        tracking_key=st.sampled_from(sorted(TRACKING_PARAMS)),
        value=st.text(alphabet="abc123", min_size=1, max_size=10),
    )
    @settings(max_examples=100)
    def test_tracking_params_removed(self, tracking_key: str, value: str):
        """For any tracking parameter, the canonical URL SHALL not contain it."""
        url = f"https://example.com/story?id=7&{tracking_key}={value}"

        canonical = normalize_url(url)
        params = parse_qs(urlparse(canonical).query)

        assert tracking_key not in params
        assert params["id"] == ["7"]

    def test_url_without_query_unchanged(self):
        url = "https://example.com/story/bears-win"
        assert normalize_url(url) == url

    def test_fragment_removed(self):
        assert normalize_url("https://example.com/a#comments") == "https://example.com/a"


class TestParseDate:
    """Tests for timestamp parsing."""

    def test_iso_with_z(self):
        assert parse_date("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_rfc822(self):
        parsed = parse_date("Mon, 15 Jan 2024 10:30:00 GMT")
        assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        parsed = parse_date("2024-01-15T04:30:00-06:00")
        assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value, hour", [
        ("Mon, 09 Sep 2024 01:13:38 CDT", 6),
        ("Mon, 09 Sep 2024 01:13:38 EST", 6),
        ("Mon, 09 Sep 2024 01:13:38 PDT", 8),
        ("Mon, 09 Sep 2024 01:13:38 MST", 8),
    ])
    def test_us_zone_names(self, value, hour):
        assert parse_date(value) == datetime(2024, 9, 9, hour, 13, 38, tzinfo=timezone.utc)

    def test_naive_assumed_utc(self):
        assert parse_date(datetime(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "TBD", 12345])
    def test_unparseable_returns_none(self, value):
        assert parse_date(value) is None

    def test_format_timestamp(self):
        value = datetime(2024, 1, 15, 10, 30, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-01-15T10:30:05.123Z"

    def test_format_converts_offsets(self):
        value = datetime(2024, 1, 15, 4, 30, tzinfo=timezone(timedelta(hours=-6)))
        assert format_timestamp(value) == "2024-01-15T10:30:00.000Z"

    def test_format_none(self):
        assert format_timestamp(None) is None


class TestDraftToRecord:
    """Tests for identifier assignment."""

    def test_id_from_url(self):
        draft = ArticleDraft(title="Bears win", source="ESPN", source_url="https://s/x", native_id="42")

        record = draft_to_record(draft)

        assert record.id == compute_id("https://s/x")
        assert record.title == "Bears win"

    def test_id_falls_back_to_native_id(self):
        draft = ArticleDraft(title="Bears win", source="ESPN", native_id="42")

        assert draft_to_record(draft).id == compute_id("42")

    def test_no_identity_key(self):
        assert draft_to_record(ArticleDraft(title="Bears win", source="ESPN")) is None

    def test_id_ignores_title_and_excerpt_drift(self):
        a = ArticleDraft(title="Bears win", source="ESPN", source_url="https://s/x", excerpt="one")
        b = ArticleDraft(title="Bears win big", source="ESPN", source_url="https://s/x", excerpt="two")

        assert draft_to_record(a).id == draft_to_record(b).id

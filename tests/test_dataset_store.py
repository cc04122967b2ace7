"""Unit tests for dataset persistence."""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from src.engines.article_normalizer import ArticleRecord, Dataset
from src.engines.dataset_store import (
    DatasetWriteError,
    load_dataset,
    record_from_dict,
    record_to_dict,
    save_dataset,
)


PUBLISHED = datetime(2024, 9, 8, 17, 5, 30, 123000, tzinfo=timezone.utc)
SCRAPED = datetime(2024, 9, 8, 18, 0, tzinfo=timezone.utc)


def _record(**overrides) -> ArticleRecord:
    fields = dict(
        id="cd69b81ea00cc279",
        title="Bears beat Titans in opener",
        source="ESPN",
        source_url="https://example.com/a",
        author="Courtney Cronin",
        published_at=PUBLISHED,
        excerpt="Chicago opened with a win.",
        content="Full story text.",
        scraped_at=SCRAPED,
    )
    fields.update(overrides)
    return ArticleRecord(**fields)


class TestRecordSerialization:
    """Tests for the persisted record shape."""

    def test_camel_case_keys(self):
        data = record_to_dict(_record())

        assert data == {
            "id": "cd69b81ea00cc279",
            "title": "Bears beat Titans in opener",
            "author": "Courtney Cronin",
            "source": "ESPN",
            "sourceUrl": "https://example.com/a",
            "publishedAt": "2024-09-08T17:05:30.123Z",
            "excerpt": "Chicago opened with a win.",
            "content": "Full story text.",
            "scrapedAt": "2024-09-08T18:00:00.000Z",
        }

    def test_absent_values(self):
        data = record_to_dict(_record(source_url=None, author=None, published_at=None,
                                      excerpt=None, content=""))

        assert data["sourceUrl"] == ""
        assert data["author"] is None
        assert data["publishedAt"] is None
        assert data["excerpt"] is None
        assert data["content"] == ""

    def test_content_falls_back_to_excerpt(self):
        assert record_to_dict(_record(content=""))["content"] == "Chicago opened with a win."

    def test_record_from_dict_tolerates_missing_fields(self):
        record = record_from_dict({"id": "abc", "title": "Only the basics"})

        assert record.id == "abc"
        assert record.source == ""
        assert record.source_url is None
        assert record.published_at is None
        assert record.content == ""

    @pytest.mark.parametrize("entry", [
        {"title": "No id"},
        {"id": "abc"},
        {"id": 123, "title": "Numeric id"},
        {"id": "abc", "title": ""},
        "not an object",
        None,
    ])
    def test_record_from_dict_rejects_unusable_entries(self, entry):
        assert record_from_dict(entry) is None


class TestLoadDataset:
    """Tests for load_dataset."""

    def test_missing_file_is_empty(self, tmp_path):
        dataset = load_dataset(tmp_path / "articles.json")

        assert dataset.articles == []
        assert dataset.last_updated is None

    @pytest.mark.parametrize("content", [
        "{not json",
        "",
        "[]",
        '{"articles": "nope"}',
        '{"lastUpdated": "2024-09-08T12:00:00.000Z"}',
    ])
    def test_corrupt_file_is_empty(self, tmp_path, content):
        path = tmp_path / "articles.json"
        path.write_text(content, encoding="utf-8")

        assert load_dataset(path).articles == []

    def test_malformed_entries_skipped(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text(json.dumps({
            "lastUpdated": "2024-09-08T12:00:00.000Z",
            "articles": [
                {"id": "good", "title": "Usable entry", "publishedAt": "2024-09-08T10:00:00.000Z"},
                {"title": "Missing id"},
                42,
            ],
        }), encoding="utf-8")

        dataset = load_dataset(path)

        assert [r.id for r in dataset.articles] == ["good"]
        assert dataset.articles[0].published_at == datetime(2024, 9, 8, 10, tzinfo=timezone.utc)
        assert dataset.last_updated == datetime(2024, 9, 8, 12, tzinfo=timezone.utc)

    def test_unparseable_timestamps_become_none(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text(json.dumps({
            "articles": [{"id": "x", "title": "Odd date", "publishedAt": "sometime"}],
        }), encoding="utf-8")

        assert load_dataset(path).articles[0].published_at is None


class TestSaveDataset:
    """Tests for save_dataset."""

    def test_round_trip(self, tmp_path):
        dataset = Dataset(articles=[_record()], last_updated=SCRAPED)
        path = tmp_path / "public" / "data" / "articles.json"

        written = save_dataset(dataset, path)

        assert written == str(path)
        assert load_dataset(path) == dataset

    def test_file_shape(self, tmp_path):
        path = tmp_path / "articles.json"

        save_dataset(Dataset(articles=[_record()], last_updated=SCRAPED), path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["lastUpdated"] == "2024-09-08T18:00:00.000Z"
        assert data["articles"][0]["sourceUrl"] == "https://example.com/a"

    def test_replaces_existing_file_without_leftovers(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text("old contents", encoding="utf-8")

        save_dataset(Dataset(last_updated=SCRAPED), path)

        assert json.loads(path.read_text(encoding="utf-8"))["articles"] == []
        assert [p.name for p in tmp_path.iterdir()] == ["articles.json"]

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")

        with pytest.raises(DatasetWriteError):
            save_dataset(Dataset(), blocker / "articles.json")

    def test_failed_replace_keeps_previous_file(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text('{"articles": []}', encoding="utf-8")

        with patch("src.engines.dataset_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(DatasetWriteError):
                save_dataset(Dataset(articles=[_record()]), path)

        assert path.read_text(encoding="utf-8") == '{"articles": []}'
        assert [p.name for p in tmp_path.iterdir()] == ["articles.json"]

"""Tests for checkpoint persistence and resume."""

import json

import pytest

from core.registry import Registry
from core.storage import Checkpoint, percent_complete


@pytest.fixture
def checkpoint(tmp_path):
    return Checkpoint(str(tmp_path / "out"), page_size=2)


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")


class TestPercentComplete:

    def test_two_decimals(self):
        assert percent_complete(1, 3) == "33.33%"
        assert percent_complete(3, 3) == "100.00%"

    def test_not_clamped(self):
        assert percent_complete(5, 4) == "125.00%"

    def test_unknown_total(self):
        assert percent_complete(10, None) == "0.00%"
        assert percent_complete(10, 0) == "0.00%"


class TestLoad:

    def test_fresh_start_when_nothing_on_disk(self, checkpoint):
        start, registry, total = checkpoint.load()
        assert start == 0
        assert registry.size() == 0
        assert total is None

    def test_corrupt_progress_means_fresh_start(self, checkpoint, icon, tmp_path):
        checkpoint.save(Registry([icon(1), icon(2)]), 10)
        _write(tmp_path / "out" / ".progress.json", "{not json")

        start, registry, total = checkpoint.load()
        assert (start, registry.size(), total) == (0, 0, None)

    def test_progress_without_registry_keeps_total(self, checkpoint, tmp_path):
        _write(tmp_path / "out" / ".progress.json", {"totalAvailable": 500, "scraped": 40})

        start, registry, total = checkpoint.load()
        assert start == 0
        assert registry.size() == 0
        assert total == 500

    def test_corrupt_registry_keeps_total(self, checkpoint, tmp_path):
        _write(tmp_path / "out" / ".progress.json", {"totalAvailable": 9, "scraped": 4})
        _write(tmp_path / "out" / "icons.json", '{"byId": {"1": ')

        start, registry, total = checkpoint.load()
        assert (start, registry.size(), total) == (0, 0, 9)

    def test_resume_start_page_is_floor(self, tmp_path, icon):
        cp = Checkpoint(str(tmp_path), page_size=80)
        cp.save(Registry([icon(i) for i in range(1, 170)]), 69007)

        start, registry, total = cp.load()
        assert registry.size() == 169
        assert start == 169 // 80
        assert total == 69007

    def test_bad_entries_skipped_not_whole_registry(self, checkpoint, tmp_path):
        _write(tmp_path / "out" / ".progress.json", {"totalAvailable": 10, "scraped": 4})
        _write(tmp_path / "out" / "icons.json", {"byId": {
            "1": {"id": 1, "name": "Sun", "category": "Weather"},
            "2": {"name": "no id in body", "category": "Weather"},
            "abc": {"id": "abc", "name": "bad key"},
            "4": "not an object",
        }})

        start, registry, total = checkpoint.load()
        assert sorted(it.id for it in registry) == [1, 2]
        assert registry.get(2).name == "no id in body"
        assert start == 1
        assert total == 10

    def test_round_trip_preserves_ids_and_fields(self, checkpoint, icon):
        checkpoint.save(Registry([icon(1, name="Sun", category="Weather"), icon(2)]), 2)

        _, registry, _ = checkpoint.load()
        assert 1 in registry and 2 in registry
        assert registry.get(1).name == "Sun"
        assert registry.get(1).category == "Weather"


class TestSave:

    def test_creates_directory_and_both_files(self, tmp_path, icon):
        out = tmp_path / "nested" / "dir"
        cp = Checkpoint(str(out), page_size=80)
        cp.save(Registry([icon(1), icon(2), icon(3)]), 3)

        doc = json.loads((out / "icons.json").read_text())
        progress = json.loads((out / ".progress.json").read_text())

        assert set(doc) == {"scrapedAt", "totalAvailable", "totalScraped", "byId", "byKey", "byCategory"}
        assert doc["totalScraped"] == 3
        assert sorted(doc["byId"]) == ["1", "2", "3"]
        assert progress["scraped"] == 3
        assert progress["totalAvailable"] == 3
        assert progress["percentComplete"] == "100.00%"
        assert progress["lastUpdate"] == doc["scrapedAt"]

    def test_indexes_written(self, checkpoint, icon, tmp_path):
        checkpoint.save(Registry([
            icon(1, name="Hello, World!", category="A"),
            icon(2, category="A"),
            icon(3, category="B"),
        ]), None)

        doc = json.loads((tmp_path / "out" / "icons.json").read_text())
        assert doc["byKey"]["hello_world"]["id"] == 1
        assert len(doc["byCategory"]["A"]) == 2
        assert len(doc["byCategory"]["B"]) == 1
        assert doc["totalAvailable"] is None

    def test_write_failure_propagates(self, tmp_path, icon):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        cp = Checkpoint(str(blocker / "out"))
        with pytest.raises(OSError):
            cp.save(Registry([icon(1)]), 1)

"""Seen tracker tests: batch increments, persistence round trips, storage failures."""

import json
import logging

from gamefeed.persistence import InMemoryPersistence, JsonFilePersistence
from gamefeed.seen_tracker import SeenTracker

from feed_fakes import BrokenPersistence


class TestMarkDisplayed:

    def test_each_distinct_id_increments_once_per_batch(self):
        tracker = SeenTracker()
        tracker.mark_displayed([1, 2, 2, "2"])
        assert tracker.snapshot() == {"1": 1, "2": 1}
        tracker.mark_displayed([2])
        assert tracker.count_of(2) == 2
        assert tracker.count_of("2") == 2
        assert tracker.count_of(99) == 0

    def test_empty_batch_does_not_write(self):
        store = InMemoryPersistence()
        SeenTracker(store).mark_displayed([])
        assert store.load() is None

    def test_counts_survive_reload(self):
        store = InMemoryPersistence()
        SeenTracker(store).mark_displayed([5, 6])
        reloaded = SeenTracker(store)
        assert reloaded.snapshot() == {"5": 1, "6": 1}
        reloaded.mark_displayed([5])
        assert SeenTracker(store).count_of(5) == 2

    def test_snapshot_is_a_copy(self):
        tracker = SeenTracker()
        tracker.mark_displayed([1])
        snap = tracker.snapshot()
        snap["1"] = 50
        assert tracker.count_of(1) == 1

    def test_clear(self):
        store = InMemoryPersistence({"1": 3})
        tracker = SeenTracker(store)
        tracker.clear()
        assert len(tracker) == 0
        assert store.load() == {}


class TestStorageFailures:

    def test_corrupted_document_starts_empty(self, caplog):
        with caplog.at_level(logging.WARNING):
            tracker = SeenTracker(InMemoryPersistence({"1": "many", "2": -4}))
        assert len(tracker) == 0
        assert "LOAD_UNPARSEABLE" in caplog.text

    def test_unreadable_store_starts_empty(self, caplog):
        with caplog.at_level(logging.WARNING):
            tracker = SeenTracker(BrokenPersistence(fail_load=True, fail_save=False))
        assert len(tracker) == 0
        assert "LOAD_FAILED" in caplog.text

    def test_write_failure_keeps_memory_state(self, caplog):
        tracker = SeenTracker(BrokenPersistence(fail_load=False, fail_save=True))
        with caplog.at_level(logging.ERROR):
            tracker.mark_displayed([1])
        assert tracker.count_of(1) == 1
        assert "SAVE_FAILED" in caplog.text


class TestJsonFilePersistence:

    def test_round_trip_on_disk(self, tmp_path):
        path = tmp_path / "nested" / "seen.json"
        tracker = SeenTracker(JsonFilePersistence(path))
        tracker.mark_displayed(["abc", 7])
        assert json.loads(path.read_text()) == {"abc": 1, "7": 1}
        assert SeenTracker(JsonFilePersistence(path)).count_of("abc") == 1

    def test_missing_file_loads_as_none(self, tmp_path):
        assert JsonFilePersistence(tmp_path / "absent.json").load() is None

    def test_invalid_json_is_recovered_by_tracker(self, tmp_path):
        path = tmp_path / "seen.json"
        path.write_text("{not json")
        assert len(SeenTracker(JsonFilePersistence(path))) == 0

"""
Tests for the JSON snapshot store.
Run from project root: pytest tests/test_dataset_store.py -v
"""

import json
import pytest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from zipmarket.models.dataset_store import DatasetStore, SnapshotWriteError


class TestDatasetStore:
    def test_load_absent_returns_none(self, tmp_path):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        assert not store.exists()
        assert store.load() is None

    def test_save_then_load(self, tmp_path, sample_records):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        store.save(sample_records)
        assert store.exists()
        assert store.load() == sample_records

    def test_round_trip_preserves_content(self, tmp_path, sample_records):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        store.save(sample_records)
        first = store.load()
        store.save(first)
        assert store.load() == first

    def test_nulls_written_as_json_null(self, tmp_path, sample_records):
        path = tmp_path / "processed_data.json"
        DatasetStore(str(path)).save(sample_records)
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw[4]["population"] is None
        assert raw[4]["marketPenetration"] is None

    def test_save_overwrites_and_leaves_no_temp_files(self, tmp_path, sample_records):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        store.save(sample_records)
        store.save(sample_records[:1])
        assert len(store.load()) == 1
        assert os.listdir(tmp_path) == ["processed_data.json"]

    def test_nan_is_rejected(self, tmp_path):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        with pytest.raises(SnapshotWriteError):
            store.save([{"zipCode": "10001", "marketPenetration": float("nan")}])
        assert not store.exists()

    def test_unwritable_location(self, tmp_path, sample_records):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = DatasetStore(str(blocker / "processed_data.json"))
        with pytest.raises(SnapshotWriteError):
            store.save(sample_records)

    def test_non_list_snapshot_rejected(self, tmp_path):
        path = tmp_path / "processed_data.json"
        path.write_text('{"data": []}')
        with pytest.raises(ValueError):
            DatasetStore(str(path)).load()

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_snapshot_is_world_readable(self, tmp_path, sample_records):
        store = DatasetStore(str(tmp_path / "processed_data.json"))
        store.save(sample_records)
        assert os.stat(store.path).st_mode & 0o777 == 0o644

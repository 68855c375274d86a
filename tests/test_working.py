"""Tests for the WorkingData buffer."""

import pytest

from kvfork import SnapshotStore, WorkingData


class TestWorkingMapping:
    def test_mapping_ops(self):
        w = WorkingData({"a": 1})
        w["b"] = 2
        del w["a"]
        assert dict(w) == {"b": 2}
        assert len(w) == 1
        assert "b" in w

    def test_non_str_key_rejected(self):
        w = WorkingData()
        with pytest.raises(TypeError):
            w[1] = "x"  # type: ignore

    def test_copies_input(self):
        source = {"a": [1]}
        w = WorkingData(source)
        w["a"].append(2)
        assert source == {"a": [1]}


class TestWorkingBuffer:
    def test_replace(self):
        w = WorkingData({"a": 1})
        w.replace({"b": 2})
        assert dict(w) == {"b": 2}
        w.replace(None)
        assert dict(w) == {}

    def test_snapshot_is_independent(self):
        w = WorkingData({"a": {"b": 1}})
        snap = w.snapshot()
        snap["a"]["b"] = 2
        assert w["a"] == {"b": 1}

    def test_has_changes(self):
        s = SnapshotStore()
        v = s.create({"a": 1}, None, "v")
        w = WorkingData(v.data)
        assert not w.has_changes(v)
        w["a"] = 2
        assert w.has_changes(v)

    def test_changes(self):
        s = SnapshotStore()
        v = s.create({"a": 1, "b": 1}, None, "v")
        w = WorkingData(v.data)
        w["a"] = 2
        del w["b"]
        d = w.changes(v)
        assert d.modified["a"].after == 2
        assert d.removed == {"b": 1}

    def test_changes_without_head(self):
        w = WorkingData({"a": 1})
        assert w.changes(None).added == {"a": 1}

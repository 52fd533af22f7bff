"""Tests for the in-memory analysis storage."""

from datetime import datetime, timezone

from microflow.models import AnalysisRecord, AnalysisResult
from tests.conftest import make_chain


def _make_analysis(analysis_id="an-1", created="2024-03-15T10:00:00Z", score=0):
    return AnalysisRecord(
        analysis_id=analysis_id,
        created_at=datetime.fromisoformat(created.replace("Z", "+00:00")),
        records=make_chain("A", "B", "A"),
        result=AnalysisResult(
            cluster_risk_score=score,
            classification="Low",
            entities_involved=["A", "B"],
            detected_patterns=[],
        ),
    )


class TestMemoryStoreAdd:
    def test_add_and_get(self, store):
        store.add(_make_analysis("an-1"))
        record = store.get("an-1")
        assert record is not None
        assert record.analysis_id == "an-1"

    def test_unknown_id(self, store):
        assert store.get("missing") is None

    def test_same_id_replaces(self, store):
        store.add(_make_analysis("an-1", score=0))
        store.add(_make_analysis("an-1", score=10))
        assert len(store.get_all()) == 1
        assert store.get("an-1").result.cluster_risk_score == 10


class TestMemoryStoreGetAll:
    def test_insertion_order(self, store):
        store.add(_make_analysis("first"))
        store.add(_make_analysis("second"))
        store.add(_make_analysis("third"))
        assert [r.analysis_id for r in store.get_all()] == ["first", "second", "third"]

    def test_get_all_with_since(self, store):
        store.add(_make_analysis("old", created="2024-03-15T10:00:00Z"))
        store.add(_make_analysis("new", created="2024-03-15T14:00:00Z"))
        since = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert [r.analysis_id for r in store.get_all(since=since)] == ["new"]

    def test_get_all_with_until(self, store):
        store.add(_make_analysis("old", created="2024-03-15T10:00:00Z"))
        store.add(_make_analysis("new", created="2024-03-15T14:00:00Z"))
        until = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert [r.analysis_id for r in store.get_all(until=until)] == ["old"]

    def test_get_all_empty(self, store):
        assert store.get_all() == []

    def test_naive_bounds_read_as_utc(self, store):
        store.add(_make_analysis("old", created="2024-03-15T10:00:00Z"))
        store.add(_make_analysis("new", created="2024-03-15T14:00:00Z"))
        assert [r.analysis_id for r in store.get_all(since=datetime(2024, 3, 15, 12, 0))] == ["new"]
        assert [r.analysis_id for r in store.get_all(until=datetime(2024, 3, 15, 12, 0))] == ["old"]

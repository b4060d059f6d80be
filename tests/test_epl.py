from datetime import datetime

import pytest

from rce.core.config import Settings
from rce.epl.processor import SnapshotProcessingLayer
from rce.examples.scenarios import all_examples, late_training_example


def _layer() -> SnapshotProcessingLayer:
    return SnapshotProcessingLayer(Settings().snapshot_schema_path)


def test_epl_accepts_example_snapshots() -> None:
    layer = _layer()
    for raw in all_examples():
        snapshot = layer.ingest(raw)
        assert snapshot.captured_at is not None


def test_epl_converts_snapshot_envelope() -> None:
    snapshot = _layer().ingest(late_training_example())

    assert snapshot.state.score("fuel", 0) == 55.0
    assert snapshot.state.signal("performance", "acwr") == 1.1
    assert snapshot.profile.bed_time == "22:30"
    assert snapshot.profile.goals == ("muscle_gain",)
    assert snapshot.sessions[0].completed is True
    assert snapshot.sessions[0].duration_minutes == 60
    assert snapshot.captured_at == datetime(2026, 3, 2, 21, 0)


def test_epl_minimal_snapshot_uses_defaults() -> None:
    snapshot = _layer().ingest({"domains": {"recovery": {"score": 64}}})

    assert snapshot.profile.wake_time is None
    assert snapshot.sessions == ()
    assert snapshot.captured_at is None
    assert snapshot.state.signal("recovery", "hrv_trend") is None


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"domains": {"fuel": {"score": 140}}},
        {"domains": {"fuel": {"signals": {}}}},
        {"domains": {"fuel": {"score": 50, "signals": {"nested": {"x": 1}}}}},
        {"domains": {}, "profile": {"bed_time": "24:10"}},
        {"domains": {}, "sessions": [{"type": "run"}]},
        {"domains": {}, "sessions": [{"type": "run", "time_of_day": "10:00", "intensity": "extreme"}]},
        {"domains": {}, "unexpected": True},
    ],
)
def test_epl_rejects_invalid_snapshot(raw) -> None:
    with pytest.raises(ValueError, match="Invalid snapshot payload"):
        _layer().ingest(raw)


def test_epl_rejects_unparseable_timestamp() -> None:
    with pytest.raises(ValueError, match="captured_at"):
        _layer().ingest({"domains": {}, "captured_at": "yesterday evening"})

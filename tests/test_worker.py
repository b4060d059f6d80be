from pathlib import Path

from rce.sm.manager import HistoryStore
from worker.loop import run_loop


def test_worker_loop_records_each_example(tmp_path: Path, monkeypatch, capsys) -> None:
    db_url = f"sqlite:///{tmp_path / 'worker.db'}"
    monkeypatch.setenv("RCE_DB_URL", db_url)

    run_loop(iterations=4, sleep_s=0)

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 4
    assert "commander=recovery_red_day" in lines[0]
    assert "commander=fuel_liquid_recovery" in lines[1]
    assert HistoryStore(db_url).decision_count() == 4

import csv
import io
import json
import threading
from datetime import date, time
from pathlib import Path

import pytest

from src.booking_engine.errors import OptimizationCancelledError
from src.booking_engine.models.domain import Job
from src.booking_engine.persistence.filesystem import FileStorage
from src.booking_engine.services.optimization import run_daily_optimizations
from src.booking_engine.services.routing.oracle import HaversineOracle

DAY = date(2026, 3, 2)


def _job(jid: str, lon: float, at: time) -> Job:
    return Job(job_id=jid, latitude=0.0, longitude=lon, scheduled_date=DAY, scheduled_time=at)


def _worker_jobs() -> dict:
    return {
        "detour": [_job("A", 0.0, time(8, 0)), _job("C", 0.5, time(10, 0)), _job("B", 0.25, time(12, 0))],
        "straight": [_job("D", 1.0, time(8, 0)), _job("E", 1.01, time(10, 0))],
        "lonely": [_job("F", 2.0, time(9, 0))],
        "broken": [_job("G", 3.0, time(8, 0)), _job("G", 3.1, time(9, 0))],
    }


def test_daily_run_isolates_worker_outcomes():
    result = run_daily_optimizations(_worker_jobs(), DAY, max_workers=2)

    assert set(result.outcomes) == {"detour", "straight"}
    assert [s.worker_id for s in result.suggestions] == ["detour"]
    assert result.outcomes["straight"].skip_reason == "below_threshold"
    assert set(result.skipped) == {"lonely"}
    assert set(result.failures) == {"broken"}
    assert "unique" in result.failures["broken"]
    assert result.output_dir is None


def test_daily_run_without_workers_is_empty():
    result = run_daily_optimizations({}, DAY)

    assert result.outcomes == {}
    assert result.suggestions == []


def test_daily_run_persists_summary_and_csv(tmp_path: Path):
    result = run_daily_optimizations(
        _worker_jobs(), DAY, HaversineOracle(), persist=True, storage=FileStorage(root=tmp_path)
    )

    assert result.output_dir is not None
    assert result.output_dir.parent == tmp_path / "optimization_runs" / "2026-03-02"
    assert result.output_dir.name.startswith("run_")

    summary = json.loads((result.output_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["day"] == "2026-03-02"
    assert summary["workers"] == 4
    assert summary["suggestions_generated"] == 1
    assert [outcome["worker_id"] for outcome in summary["outcomes"]] == ["detour", "straight"]
    detour = summary["outcomes"][0]
    assert detour["state"] == "pending"
    assert detour["optimized_route"]["job_ids"] == ["A", "B", "C"]
    assert detour["savings"]["time_saved_minutes"] > 15

    rows = list(csv.DictReader(io.StringIO((result.output_dir / "suggestions.csv").read_text(encoding="utf-8"))))
    assert [row["worker_id"] for row in rows] == ["detour", "straight"]
    assert rows[0]["optimized_order"] == "A > B > C"
    assert rows[1]["suggestion_id"] == ""


def test_cancelled_run_raises():
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OptimizationCancelledError):
        run_daily_optimizations(_worker_jobs(), DAY, cancel_event=cancel)

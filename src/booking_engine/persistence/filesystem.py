"""On-disk archive of daily optimization runs.

Each run lands in ``<data_root>/optimization_runs/<day>/run_<HHMMSSffffff>Z/``
with a JSON summary and a CSV table of suggestions.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import settings
from ..schemas.optimization import DailyRunSummary
from ..services.outputs.optimization_formatter import daily_run_to_csv, daily_run_to_json

if TYPE_CHECKING:
    from ..services.optimization.models import DailyRunResult

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "summary.json"
SUGGESTIONS_FILENAME = "suggestions.csv"


class FileStorage:
    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.runs_root = self.root / "optimization_runs"

    def run_directory(self, day: date) -> Path:
        """Create a fresh directory for one run on ``day``."""
        timestamp = datetime.now(timezone.utc).strftime("%H%M%S%fZ")
        path = self.runs_root / day.isoformat() / f"run_{timestamp}"
        path.mkdir(parents=True, exist_ok=False)
        return path

    def save_daily_run(self, result: "DailyRunResult") -> Path:
        run_dir = self.run_directory(result.day)
        with (run_dir / SUMMARY_FILENAME).open("w", encoding="utf-8") as handle:
            json.dump(daily_run_to_json(result), handle, ensure_ascii=False, indent=2)
        with (run_dir / SUGGESTIONS_FILENAME).open("w", encoding="utf-8", newline="") as handle:
            handle.write(daily_run_to_csv(result))
        logger.info(f"Saved optimization run for {result.day} to {run_dir}")
        return run_dir

    def list_runs(self, day: date) -> list[Path]:
        """Run directories for ``day``, oldest first."""
        day_dir = self.runs_root / day.isoformat()
        if not day_dir.is_dir():
            return []
        return sorted(path for path in day_dir.iterdir() if (path / SUMMARY_FILENAME).is_file())

    def load_summary(self, run_dir: Path) -> DailyRunSummary:
        with (run_dir / SUMMARY_FILENAME).open("r", encoding="utf-8") as handle:
            return DailyRunSummary.model_validate(json.load(handle))

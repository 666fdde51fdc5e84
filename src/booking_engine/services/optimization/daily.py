"""Daily optimization run across all workers with approved jobs."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Mapping, Optional, Sequence

from ...config import settings
from ...errors import InsufficientJobsError, OptimizationCancelledError
from ...models.domain import Job
from ...persistence.filesystem import FileStorage
from ..routing.models import RouteOptions
from ..routing.oracle import DistanceOracle
from .models import DailyRunResult
from .workflow import generate_suggestion

logger = logging.getLogger(__name__)


def run_daily_optimizations(
    worker_jobs: Mapping[str, Sequence[Job]],
    day: date,
    oracle: Optional[DistanceOracle] = None,
    options: Optional[RouteOptions] = None,
    *,
    max_workers: Optional[int] = None,
    persist: bool = False,
    storage: Optional[FileStorage] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DailyRunResult:
    """Generate suggestions for every worker's jobs on ``day``.

    Workers have disjoint job sets, so they are optimized concurrently. A failure
    for one worker is logged and recorded without affecting the others.
    """
    result = DailyRunResult(day=day)
    if not worker_jobs:
        logger.info(f"No workers with approved jobs on {day}, nothing to optimize.")
        return result

    logger.info(f"Starting daily route optimization for {len(worker_jobs)} worker(s) on {day}")
    max_workers = max_workers or settings.daily_run_max_workers
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="daily-run") as executor:
        future_to_worker = {
            executor.submit(
                generate_suggestion, worker_id, day, jobs, oracle, options, cancel_event=cancel_event
            ): worker_id
            for worker_id, jobs in worker_jobs.items()
        }
        for future in as_completed(future_to_worker):
            worker_id = future_to_worker[future]
            try:
                result.outcomes[worker_id] = future.result()
            except InsufficientJobsError as e:
                result.skipped[worker_id] = str(e)
                logger.info(f"Skipping worker {worker_id}: {e}")
            except OptimizationCancelledError:
                raise
            except Exception as e:
                result.failures[worker_id] = str(e)
                logger.error(f"Failed to generate optimization for worker {worker_id}: {e}")

    logger.info(
        f"Daily optimization for {day} completed - {len(result.suggestions)} suggestion(s) generated, "
        f"{len(result.skipped)} skipped, {len(result.failures)} failed"
    )

    if persist:
        result.output_dir = (storage or FileStorage()).save_daily_run(result)
    return result

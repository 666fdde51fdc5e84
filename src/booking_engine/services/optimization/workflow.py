"""Suggestion lifecycle: generate, accept (all-or-nothing), reject."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Optional, Sequence

from ...config import settings
from ...errors import InvalidInputError, InvalidTransitionError, PersistenceFailure
from ...models.domain import Job
from ..clustering.geo import cluster_jobs, is_compact_day, split_located
from ..routing.models import Route, RouteOptions
from ..routing.optimizer import build_route, optimize_route, order_by_schedule, prepare_jobs
from ..routing.oracle import DistanceOracle
from ..routing.travel import TravelTimeResolver
from ..savings.calculator import compute_savings
from .models import OptimizationSuggestion, ScheduleAssignment, SuggestionOutcome, SuggestionState

if TYPE_CHECKING:
    from ...persistence.schedule import ScheduleSink

logger = logging.getLogger(__name__)


def generate_suggestion(
    worker_id: str,
    day: date,
    jobs: Sequence[Job],
    oracle: Optional[DistanceOracle] = None,
    options: Optional[RouteOptions] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    min_time_saved_minutes: Optional[float] = None,
) -> SuggestionOutcome:
    """Optimize one worker's day and wrap worthwhile results in a pending suggestion.

    The original (scheduled-order) route and the optimized route are measured
    with one shared resolver, so both totals come from the same per-pair legs.
    Raises InsufficientJobsError when fewer than two jobs are located.
    """
    threshold = settings.min_time_saved_minutes if min_time_saved_minutes is None else min_time_saved_minutes
    located = prepare_jobs(jobs)
    _, unlocated = split_located(jobs)
    clusters = cluster_jobs(located)

    with TravelTimeResolver(oracle, cancel_event=cancel_event) as resolver:
        original = build_route(order_by_schedule(located), resolver)
        if settings.skip_compact_days and is_compact_day(clusters):
            logger.info(f"Worker {worker_id} on {day}: all jobs in one compact cluster, skipping optimization.")
            return SuggestionOutcome(
                worker_id=worker_id,
                day=day,
                original=original,
                optimized=original,
                savings=compute_savings(original, original),
                clusters=clusters,
                unlocated=unlocated,
                skip_reason="compact_day",
            )
        optimized = optimize_route(located, options=options, resolver=resolver)

    savings = compute_savings(original, optimized)
    outcome = SuggestionOutcome(
        worker_id=worker_id,
        day=day,
        original=original,
        optimized=optimized,
        savings=savings,
        clusters=clusters,
        unlocated=unlocated,
    )
    if savings.time_saved_minutes <= threshold:
        outcome.skip_reason = "below_threshold"
        logger.info(
            f"Worker {worker_id} on {day}: optimization saves {savings.time_saved_minutes:.1f} min "
            f"(threshold {threshold:g} min), no suggestion created."
        )
        return outcome

    outcome.suggestion = OptimizationSuggestion(
        worker_id=worker_id,
        day=day,
        original=original,
        optimized=optimized,
        savings=savings,
        clusters=clusters,
    )
    logger.info(
        f"Generated suggestion {outcome.suggestion.suggestion_id} for worker {worker_id} on {day}: "
        f"{savings.time_saved_minutes:.0f} min and {savings.distance_saved_miles:.2f} mi saved."
    )
    return outcome


def compute_schedule(
    route: Route,
    day: date,
    day_start: Optional[time] = None,
    buffer_minutes: Optional[int] = None,
) -> list[ScheduleAssignment]:
    """Walk the route from the day start, adding each job's duration plus the travel buffer.

    Every job keeps ``day`` as its date. Raises InvalidInputError when a job
    would not finish before midnight.
    """

    day_start = day_start or settings.day_start_time
    buffer_minutes = settings.travel_buffer_minutes if buffer_minutes is None else buffer_minutes

    cursor = datetime.combine(day, day_start)
    day_end = datetime.combine(day + timedelta(days=1), time.min)
    assignments: list[ScheduleAssignment] = []
    for job in route.jobs:
        job_end = cursor + timedelta(minutes=job.estimated_duration_minutes)
        if job_end > day_end:
            raise InvalidInputError(
                f"Job {job.job_id} would start at {cursor:%Y-%m-%d %H:%M} and run past the end of {day}; "
                f"the route does not fit in one day."
            )
        assignments.append(ScheduleAssignment(job.job_id, day, cursor.time()))
        cursor = job_end + timedelta(minutes=buffer_minutes)
    return assignments


def apply_schedule(jobs: Sequence[Job], assignments: Sequence[ScheduleAssignment]) -> list[Job]:
    """Return copies of ``jobs`` carrying the accepted times."""

    by_id = {assignment.job_id: assignment for assignment in assignments}
    updated: list[Job] = []
    for job in jobs:
        assignment = by_id.get(job.job_id)
        if assignment is None:
            updated.append(job)
        else:
            updated.append(
                replace(job, scheduled_date=assignment.scheduled_date, scheduled_time=assignment.scheduled_time)
            )
    return updated


def _require_pending(suggestion: OptimizationSuggestion) -> None:
    if not suggestion.is_pending:
        raise InvalidTransitionError(
            f"Suggestion {suggestion.suggestion_id} is already {suggestion.state.value}."
        )


def accept_suggestion(
    suggestion: OptimizationSuggestion,
    sink: "ScheduleSink",
    *,
    day_start: Optional[time] = None,
    buffer_minutes: Optional[int] = None,
) -> list[ScheduleAssignment]:
    """Rewrite every job's time through ``sink`` and mark the suggestion accepted.

    All new times are computed before anything is written. If the sink refuses
    any write (or the commit), staged writes are rolled back, the suggestion
    stays pending and PersistenceFailure is raised. A route that does not fit in
    the day raises InvalidInputError before the sink is touched.
    """
    with suggestion._lock:
        _require_pending(suggestion)
        assignments = compute_schedule(suggestion.optimized, suggestion.day, day_start, buffer_minutes)
        try:
            for assignment in assignments:
                sink.stage(assignment)
            sink.commit()
        except Exception as exc:
            sink.rollback()
            logger.error(f"Failed to apply suggestion {suggestion.suggestion_id}: {exc}")
            raise PersistenceFailure(
                f"Schedule update for suggestion {suggestion.suggestion_id} was rolled back: {exc}"
            ) from exc

        suggestion.schedule = assignments
        suggestion.state = SuggestionState.ACCEPTED
        suggestion.decided_at = datetime.now(timezone.utc)

    logger.info(
        f"Suggestion {suggestion.suggestion_id} accepted for worker {suggestion.worker_id}: "
        f"{len(assignments)} jobs rescheduled."
    )
    return assignments


def reject_suggestion(suggestion: OptimizationSuggestion, reason: Optional[str] = None) -> None:
    with suggestion._lock:
        _require_pending(suggestion)
        suggestion.state = SuggestionState.REJECTED
        suggestion.rejection_reason = reason
        suggestion.decided_at = datetime.now(timezone.utc)
    logger.info(f"Suggestion {suggestion.suggestion_id} rejected for worker {suggestion.worker_id}.")

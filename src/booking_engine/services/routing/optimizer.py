"""Nearest-neighbour route optimization for a single worker's day.

The first job of the day (by scheduled time, then input order) stays first.
Every other stop is chosen greedily by travel time from the current position,
which is a practical heuristic for the handful of stops a worker covers per day.
"""

from __future__ import annotations

import logging
import threading
from datetime import time
from typing import Optional, Sequence

from ...errors import InsufficientJobsError, InvalidInputError
from ...models.domain import Job
from ..clustering.geo import split_located
from .models import Route, RouteOptions
from .oracle import DistanceOracle
from .travel import TravelTimeResolver

logger = logging.getLogger(__name__)


def order_by_schedule(jobs: Sequence[Job]) -> list[Job]:
    """Submission order: scheduled time first, unscheduled jobs last, ties by input order."""

    indexed = list(enumerate(jobs))
    indexed.sort(
        key=lambda item: (
            item[1].scheduled_time is None,
            item[1].scheduled_time or time.min,
            item[0],
        )
    )
    return [job for _, job in indexed]


def build_route(jobs: Sequence[Job], resolver: TravelTimeResolver) -> Route:
    """Build a route that visits ``jobs`` in the given order."""

    pairs = list(zip(jobs, jobs[1:]))
    resolved = resolver.resolve_many(pairs)
    legs = tuple(resolved[(origin.job_id, destination.job_id)] for origin, destination in pairs)
    return Route(
        jobs=tuple(jobs),
        legs=legs,
        total_distance_meters=sum(leg.distance_meters for leg in legs),
        total_duration_seconds=sum(leg.duration_seconds for leg in legs),
        degraded=bool(legs) and all(leg.source == "haversine" for leg in legs),
    )


def prepare_jobs(jobs: Sequence[Job]) -> list[Job]:
    """Drop unlocated jobs and validate what remains for optimization."""

    located, unlocated = split_located(jobs)
    if unlocated:
        logger.info(
            f"Excluding {len(unlocated)} job(s) without coordinates from optimization: "
            f"{', '.join(job.label for job in unlocated)}"
        )
    if len(located) < 2:
        raise InsufficientJobsError(len(located))
    ids = [job.job_id for job in located]
    if len(set(ids)) != len(ids):
        raise InvalidInputError("Job identifiers must be unique within a route.")
    return located


def _nearest_neighbour(ordered: list[Job], resolver: TravelTimeResolver, options: RouteOptions) -> list[Job]:
    start = ordered[0]
    end = ordered[-1] if options.fix_last_stop and len(ordered) > 2 else None
    remaining = [job for job in ordered[1:] if job is not end]

    sequence = [start]
    current = start
    while remaining:
        legs = resolver.resolve_many((current, candidate) for candidate in remaining)
        origin_id = current.job_id
        current = min(
            remaining,
            key=lambda candidate: (legs[(origin_id, candidate.job_id)].duration_seconds, candidate.job_id),
        )
        sequence.append(current)
        remaining.remove(current)

    if end is not None:
        sequence.append(end)
    return sequence


def optimize_route(
    jobs: Sequence[Job],
    oracle: Optional[DistanceOracle] = None,
    options: Optional[RouteOptions] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    resolver: Optional[TravelTimeResolver] = None,
) -> Route:
    """Compute an efficient visiting order for one worker's jobs on one day.

    Args:
        jobs: The day's jobs. Jobs without coordinates are excluded.
        oracle: Travel-time provider. ``None`` means haversine estimates only.
        options: Route options such as pinning the last stop.
        cancel_event: Setting this event aborts the optimization.
        resolver: Shared resolver, so another route built with it (e.g. the
            original order) uses identical per-pair legs.

    Returns:
        A new Route; the input sequence is never modified.

    Raises:
        InsufficientJobsError: fewer than two jobs have coordinates.
        OptimizationCancelledError: ``cancel_event`` was set mid-run.
    """
    options = options or RouteOptions()
    located = prepare_jobs(jobs)
    ordered = order_by_schedule(located)

    owns_resolver = resolver is None
    if resolver is None:
        resolver = TravelTimeResolver(oracle, cancel_event=cancel_event)
    try:
        sequence = _nearest_neighbour(ordered, resolver, options)
        route = build_route(sequence, resolver)
    finally:
        if owns_resolver:
            resolver.close()

    if route.degraded:
        logger.warning(
            f"Route for {len(route.jobs)} jobs was computed from haversine estimates only; "
            f"travel figures are approximate."
        )
    logger.debug(f"Optimized order: {' -> '.join(route.job_ids)}")
    return route

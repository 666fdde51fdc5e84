"""Per-pair travel resolution with bounded parallelism and haversine fallback."""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional

from ...config import settings
from ...errors import OptimizationCancelledError, OracleRateLimitedError
from ...models.domain import Job
from .models import Leg, TravelEstimate
from .oracle import DistanceOracle, haversine_estimate

logger = logging.getLogger(__name__)

PairKey = tuple[str, str]

ATTEMPTS_PER_PAIR = 2


class TravelTimeResolver:
    """Resolve travel legs between jobs, caching the decision made for each pair.

    Each ordered pair is asked of the oracle at most once per resolver: a failed
    call is retried once, and a second failure (or a pair still unanswered when
    its deadline passes) falls back to the haversine estimate. The deadline runs
    from submission, so pairs queued behind busy pool threads are bounded too.
    Whatever was decided is cached, so route totals computed later reuse the
    exact legs seen during search.
    """

    def __init__(
        self,
        oracle: Optional[DistanceOracle] = None,
        *,
        timeout_seconds: float | None = None,
        max_parallel_requests: int | None = None,
        failure_threshold: int | None = None,
        fallback_speed_mph: float | None = None,
        cancel_event: Optional[threading.Event] = None,
        poll_interval: float = 0.02,
    ) -> None:
        self.timeout_seconds = timeout_seconds or settings.oracle_timeout_seconds
        self.max_parallel_requests = max_parallel_requests or settings.oracle_max_parallel_requests
        self.failure_threshold = failure_threshold or settings.oracle_failure_threshold
        self.fallback_speed_mph = fallback_speed_mph or settings.fallback_speed_mph
        self.cancel_event = cancel_event
        self.poll_interval = poll_interval

        self.oracle = oracle
        self._cache: dict[PairKey, Leg] = {}
        self._executor: ThreadPoolExecutor | None = None
        # Oracle calls abandoned at their deadline that still hold a pool thread.
        self._stuck: set[Future] = set()
        self._availability_checked = oracle is None
        self._consecutive_failures = 0
        self._bypassed = oracle is None
        self.oracle_legs = 0
        self.fallback_legs = 0

    def __enter__(self) -> "TravelTimeResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    @property
    def oracle_bypassed(self) -> bool:
        return self._bypassed

    def leg(self, origin: Job, destination: Job) -> Leg:
        return self.resolve_many([(origin, destination)])[(origin.job_id, destination.job_id)]

    def resolve_many(self, pairs: Iterable[tuple[Job, Job]]) -> dict[PairKey, Leg]:
        """Resolve every pair, querying uncached ones concurrently."""

        self._check_cancelled()
        results: dict[PairKey, Leg] = {}
        to_query: dict[PairKey, tuple[Job, Job]] = {}
        for origin, destination in pairs:
            key = (origin.job_id, destination.job_id)
            if key in self._cache:
                results[key] = self._cache[key]
            elif origin.job_id == destination.job_id:
                results[key] = self._remember(Leg(origin.job_id, destination.job_id, 0.0, 0.0, "oracle"))
            else:
                to_query[key] = (origin, destination)

        if not to_query:
            return results
        if not self._availability_checked:
            self._check_availability()
        if self._bypassed:
            for key, (origin, destination) in to_query.items():
                results[key] = self._record(origin, destination, None)
            return results

        results.update(self._query_concurrently(to_query))
        return results

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_parallel_requests, thread_name_prefix="oracle"
            )
        return self._executor

    def _check_availability(self) -> None:
        """Ask the oracle once per resolver whether it can serve, within the call timeout."""

        self._availability_checked = True
        future = self._get_executor().submit(self.oracle.is_available)
        deadline = time.monotonic() + self.timeout_seconds
        while not future.done() and time.monotonic() < deadline:
            self._check_cancelled({future})
            wait([future], timeout=self.poll_interval)

        name = type(self.oracle).__name__
        if not future.done():
            self._abandon(future)
            logger.warning(f"{name} availability check timed out. Using haversine estimates only.")
            self._bypassed = True
        elif future.exception() is not None:
            logger.warning(f"{name} availability check failed: {future.exception()}. Using haversine estimates only.")
            self._bypassed = True
        elif not future.result():
            logger.warning(f"{name} reports itself unavailable. Using haversine estimates only.")
            self._bypassed = True

    def _query_concurrently(self, to_query: dict[PairKey, tuple[Job, Job]]) -> dict[PairKey, Leg]:
        executor = self._get_executor()
        deadline = time.monotonic() + self.timeout_seconds * ATTEMPTS_PER_PAIR
        futures: dict[Future, PairKey] = {
            executor.submit(self._query_oracle, origin, destination): key
            for key, (origin, destination) in to_query.items()
        }
        results: dict[PairKey, Leg] = {}
        pending = set(futures)

        while pending:
            self._check_cancelled(pending)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            done, pending = wait(pending, timeout=min(self.poll_interval, remaining), return_when=FIRST_COMPLETED)
            for future in done:
                origin, destination = to_query[futures[future]]
                results[futures[future]] = self._record(origin, destination, future.result())

        for future in pending:
            self._abandon(future)
            origin, destination = to_query[futures[future]]
            logger.warning(
                f"Oracle call {origin.job_id} -> {destination.job_id} missed its "
                f"{self.timeout_seconds * ATTEMPTS_PER_PAIR:.1f}s deadline, using haversine."
            )
            results[futures[future]] = self._record(origin, destination, None)
        return results

    def _abandon(self, future: Future) -> None:
        """Give up on ``future``; a call already running keeps its thread until it returns."""

        if not future.cancel():
            self._stuck.add(future)
        self._stuck = {stuck for stuck in self._stuck if not stuck.done()}
        if not self._bypassed and len(self._stuck) >= self.max_parallel_requests:
            self._bypassed = True
            logger.warning(
                f"All {self.max_parallel_requests} oracle threads are blocked on unanswered calls. "
                f"Using haversine estimates for the rest of this optimization."
            )

    def _query_oracle(self, origin: Job, destination: Job) -> Optional[TravelEstimate]:
        """Worker body: two attempts, never raises."""
        key = (origin.job_id, destination.job_id)
        for attempt in range(1, ATTEMPTS_PER_PAIR + 1):
            if self._bypassed or (self.cancel_event is not None and self.cancel_event.is_set()):
                return None
            try:
                estimate = self.oracle.get_travel_time(origin.coordinates, destination.coordinates)
            except OracleRateLimitedError as e:
                logger.debug(f"Oracle rate limited {key[0]} -> {key[1]} (attempt {attempt}): {e}")
                continue
            except Exception as e:
                logger.debug(f"Oracle failed {key[0]} -> {key[1]} (attempt {attempt}): {e}")
                continue
            if _is_valid(estimate):
                return estimate
            logger.debug(f"Oracle returned an unusable estimate for {key[0]} -> {key[1]}: {estimate}")
        return None

    def _record(self, origin: Job, destination: Job, estimate: Optional[TravelEstimate]) -> Leg:
        if estimate is None:
            estimate = haversine_estimate(origin.coordinates, destination.coordinates, self.fallback_speed_mph)
            source = "haversine"
            self.fallback_legs += 1
            if not self._bypassed and self.oracle is not None:
                self._consecutive_failures += 1
                if self._consecutive_failures >= self.failure_threshold:
                    self._bypassed = True
                    logger.warning(
                        f"Oracle failed {self._consecutive_failures} pairs in a row. "
                        f"Using haversine estimates for the rest of this optimization."
                    )
        else:
            source = "oracle"
            self.oracle_legs += 1
            self._consecutive_failures = 0
        return self._remember(
            Leg(
                origin_id=origin.job_id,
                destination_id=destination.job_id,
                distance_meters=estimate.distance_meters,
                duration_seconds=estimate.duration_seconds,
                source=source,
            )
        )

    def _remember(self, leg: Leg) -> Leg:
        self._cache[(leg.origin_id, leg.destination_id)] = leg
        return leg

    def _check_cancelled(self, pending: Optional[set[Future]] = None) -> None:
        if self.cancel_event is None or not self.cancel_event.is_set():
            return
        for future in pending or ():
            future.cancel()
        self.close()
        raise OptimizationCancelledError("Route optimization was cancelled before completion.")


def _is_valid(estimate: object) -> bool:
    if not isinstance(estimate, TravelEstimate):
        return False
    values = (estimate.distance_meters, estimate.duration_seconds)
    return all(math.isfinite(value) and value >= 0 for value in values)

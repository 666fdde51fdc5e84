import threading
import time as clock
from collections import Counter
from datetime import time

import pytest

from src.booking_engine.errors import InsufficientJobsError, OptimizationCancelledError, OracleUnavailableError
from src.booking_engine.models.domain import Coordinates, Job
from src.booking_engine.services.geospatial import haversine_miles, miles_to_meters
from src.booking_engine.services.routing.models import RouteOptions, TravelEstimate
from src.booking_engine.services.routing.optimizer import build_route, optimize_route, order_by_schedule
from src.booking_engine.services.routing.oracle import DistanceOracle, HaversineOracle
from src.booking_engine.services.routing.travel import TravelTimeResolver


def _job(jid: str, lat: float | None, lon: float | None, at: time | None = None) -> Job:
    return Job(job_id=jid, latitude=lat, longitude=lon, scheduled_time=at, location=f"Site {jid}")


class ConstantOracle(DistanceOracle):
    def __init__(self, distance_meters: float = 1234.0, duration_seconds: float = 600.0) -> None:
        self.estimate = TravelEstimate(distance_meters, duration_seconds)
        self.calls: Counter = Counter()
        self._lock = threading.Lock()

    def get_travel_time(self, origin, destination):
        with self._lock:
            self.calls[(origin, destination)] += 1
        return self.estimate


class FailingOracle(DistanceOracle):
    def get_travel_time(self, origin, destination):
        raise OracleUnavailableError("provider down")


class PartiallyFailingOracle(HaversineOracle):
    """Fails for trips leaving one specific coordinate."""

    def __init__(self, broken: Coordinates) -> None:
        super().__init__()
        self.broken = broken

    def get_travel_time(self, origin, destination):
        if origin == self.broken:
            raise OracleUnavailableError("no route")
        return super().get_travel_time(origin, destination)


def test_nearest_neighbour_removes_detour():
    a, b, c = _job("A", 0.0, 0.0), _job("B", 0.0, 5.0), _job("C", 0.0, 10.0)

    route = optimize_route([a, c, b])

    assert route.job_ids == ["A", "B", "C"]
    expected = miles_to_meters(haversine_miles(0.0, 0.0, 0.0, 5.0) + haversine_miles(0.0, 5.0, 0.0, 10.0))
    assert route.total_distance_meters == pytest.approx(expected)
    assert route.total_distance_miles == pytest.approx(haversine_miles(0.0, 0.0, 0.0, 10.0), rel=1e-4)

    with TravelTimeResolver(None) as resolver:
        original = build_route([a, c, b], resolver)
    assert original.total_distance_miles == pytest.approx(
        haversine_miles(0.0, 0.0, 0.0, 10.0) + haversine_miles(0.0, 10.0, 0.0, 5.0), rel=1e-4
    )
    assert original.total_distance_meters > route.total_distance_meters


def test_two_jobs_total_equals_single_pair():
    oracle = ConstantOracle(distance_meters=4321.0, duration_seconds=777.0)

    route = optimize_route([_job("A", 1.0, 1.0), _job("B", 1.1, 1.1)], oracle)

    assert route.job_ids == ["A", "B"]
    assert route.total_distance_meters == 4321.0
    assert route.total_duration_seconds == 777.0
    assert not route.degraded


def test_input_sequence_is_not_mutated():
    jobs = [_job("A", 0.0, 0.0), _job("C", 0.0, 10.0), _job("B", 0.0, 5.0)]

    optimize_route(jobs)

    assert [job.job_id for job in jobs] == ["A", "C", "B"]


def test_start_is_earliest_scheduled_job():
    jobs = [
        _job("late", 0.0, 0.0, time(14, 0)),
        _job("early", 0.0, 3.0, time(8, 0)),
        _job("unscheduled", 0.0, 1.0),
    ]

    assert [job.job_id for job in order_by_schedule(jobs)] == ["early", "late", "unscheduled"]
    route = optimize_route(jobs)

    assert route.job_ids[0] == "early"


def test_ties_break_on_smallest_job_id():
    jobs = [_job("m", 0.0, 0.0, time(8, 0)), _job("z", 0.0, 1.0), _job("b", 0.0, 2.0), _job("k", 0.0, 3.0)]

    route = optimize_route(jobs, ConstantOracle())

    assert route.job_ids == ["m", "b", "k", "z"]


def test_fix_last_stop_keeps_original_final_job():
    jobs = [_job("A", 0.0, 0.0), _job("B", 0.0, 1.0), _job("C", 0.0, 5.0), _job("D", 0.0, 2.0)]

    free = optimize_route(jobs)
    pinned = optimize_route(jobs, options=RouteOptions(fix_last_stop=True))

    assert free.job_ids == ["A", "B", "D", "C"]
    assert pinned.job_ids == ["A", "B", "C", "D"]


def test_jobs_without_coordinates_are_excluded():
    jobs = [_job("A", 0.0, 0.0), _job("nowhere", None, None), _job("B", 0.0, 1.0)]

    route = optimize_route(jobs)

    assert route.job_ids == ["A", "B"]


def test_fewer_than_two_located_jobs_is_an_error():
    with pytest.raises(InsufficientJobsError):
        optimize_route([_job("A", 0.0, 0.0), _job("B", None, None)])


def test_single_pair_failure_degrades_only_that_pair():
    broken = Coordinates(0.0, 1.0)
    jobs = [_job("A", 0.0, 0.0), _job("B", 0.0, 1.0), _job("C", 0.0, 2.0)]

    route = optimize_route(jobs, PartiallyFailingOracle(broken))

    assert route.job_ids == ["A", "B", "C"]
    sources = {(leg.origin_id, leg.destination_id): leg.source for leg in route.legs}
    assert sources == {("A", "B"): "oracle", ("B", "C"): "haversine"}
    assert not route.degraded


def test_unavailable_oracle_still_produces_haversine_route():
    jobs = [_job("A", 0.0, 0.0), _job("C", 0.0, 2.0), _job("B", 0.0, 1.0)]

    route = optimize_route(jobs, FailingOracle())

    assert route.job_ids == ["A", "B", "C"]
    assert route.degraded
    assert all(leg.source == "haversine" for leg in route.legs)


def test_totals_reuse_search_legs():
    oracle = ConstantOracle()
    jobs = [_job(str(i), 0.0, float(i)) for i in range(6)]

    route = optimize_route(jobs, oracle)

    assert max(oracle.calls.values()) == 1
    assert route.total_duration_seconds == pytest.approx(sum(leg.duration_seconds for leg in route.legs))
    assert route.total_duration_seconds == pytest.approx(600.0 * 5)


def test_pre_cancelled_optimization_raises():
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OptimizationCancelledError):
        optimize_route([_job("A", 0.0, 0.0), _job("B", 0.0, 1.0)], ConstantOracle(), cancel_event=cancel)


def test_cancellation_aborts_in_flight_oracle_calls():
    release = threading.Event()

    class BlockingOracle(DistanceOracle):
        def get_travel_time(self, origin, destination):
            release.wait(5)
            return TravelEstimate(1.0, 1.0)

    cancel = threading.Event()
    timer = threading.Timer(0.1, cancel.set)
    jobs = [_job("A", 0.0, 0.0), _job("B", 0.0, 1.0), _job("C", 0.0, 2.0)]
    started = clock.monotonic()
    timer.start()
    try:
        with pytest.raises(OptimizationCancelledError):
            optimize_route(jobs, BlockingOracle(), cancel_event=cancel)
    finally:
        release.set()
        timer.cancel()

    assert clock.monotonic() - started < 2.0

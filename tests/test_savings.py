import pytest

from src.booking_engine.models.domain import Job
from src.booking_engine.services.geospatial import METERS_PER_MILE
from src.booking_engine.services.routing.models import Route
from src.booking_engine.services.savings.calculator import (
    SavingsAssumptions,
    compute_savings,
    estimate_fuel_cost,
)

JOBS = (Job(job_id="A", latitude=0.0, longitude=0.0), Job(job_id="B", latitude=0.0, longitude=1.0))


def _route(miles: float, minutes: float) -> Route:
    return Route(
        jobs=JOBS,
        total_distance_meters=miles * METERS_PER_MILE,
        total_duration_seconds=minutes * 60.0,
    )


def test_identical_routes_save_nothing():
    route = _route(20.0, 40.0)

    savings = compute_savings(route, route)

    assert savings.time_saved_seconds == 0
    assert savings.distance_saved_meters == 0
    assert savings.fuel_dollars_saved == 0
    assert savings.carbon_kg_saved == 0
    assert not savings.is_improvement


def test_worse_optimized_route_is_clamped_to_zero():
    savings = compute_savings(_route(10.0, 20.0), _route(15.0, 30.0))

    assert savings.time_saved_seconds == 0
    assert savings.distance_saved_meters == 0
    assert savings.fuel_gallons_saved == 0
    assert savings.carbon_lbs_saved == 0


def test_fuel_and_carbon_follow_saved_miles():
    savings = compute_savings(_route(60.0, 120.0), _route(35.0, 75.0))

    assert savings.time_saved_minutes == pytest.approx(45.0)
    assert savings.distance_saved_miles == pytest.approx(25.0, rel=1e-4)
    assert savings.fuel_gallons_saved == pytest.approx(1.0, rel=1e-4)
    assert savings.fuel_dollars_saved == pytest.approx(3.50, rel=1e-4)
    assert savings.carbon_lbs_saved == pytest.approx(25.0 * 0.89, rel=1e-4)
    assert savings.carbon_kg_saved == pytest.approx(25.0 * 0.89 * 0.453592, rel=1e-4)
    assert savings.is_improvement


def test_time_and_distance_savings_are_independent():
    savings = compute_savings(_route(10.0, 30.0), _route(12.0, 20.0))

    assert savings.time_saved_minutes == pytest.approx(10.0)
    assert savings.distance_saved_meters == 0
    assert savings.is_improvement


def test_custom_assumptions():
    assumptions = SavingsAssumptions(mpg=10.0, gas_price=5.0, co2_lbs_per_mile=1.0, kg_per_lb=0.5)

    savings = compute_savings(_route(30.0, 60.0), _route(10.0, 30.0), assumptions)

    assert savings.fuel_gallons_saved == pytest.approx(2.0, rel=1e-4)
    assert savings.fuel_dollars_saved == pytest.approx(10.0, rel=1e-4)
    assert savings.carbon_kg_saved == pytest.approx(10.0, rel=1e-4)


def test_estimate_fuel_cost_for_whole_route():
    assert estimate_fuel_cost(_route(50.0, 90.0)) == pytest.approx(7.0, rel=1e-4)

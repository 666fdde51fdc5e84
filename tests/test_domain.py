import pytest

from src.booking_engine.errors import InvalidInputError
from src.booking_engine.models.domain import (
    Coordinates,
    Job,
    Requester,
    RequesterTier,
    estimate_duration_minutes,
)
from src.booking_engine.services.geospatial import distance_miles, haversine_miles, meters_to_miles, miles_to_meters


def test_job_defaults_and_coordinates():
    job = Job(job_id="J1", latitude=21.5, longitude=39.2)

    assert job.estimated_duration_minutes == 90
    assert job.coordinates == Coordinates(21.5, 39.2)
    assert job.label == "J1"


def test_job_without_coordinates_is_unlocated():
    job = Job(job_id="J2", location="12 Palm Street")

    assert job.coordinates is None
    assert job.label == "12 Palm Street"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"latitude": 21.5},
        {"longitude": 39.2},
        {"estimated_duration_minutes": 0},
        {"estimated_duration_minutes": -30},
    ],
)
def test_invalid_jobs_are_rejected(kwargs):
    with pytest.raises(InvalidInputError):
        Job(job_id="bad", **kwargs)


def test_requester_tier_is_coerced():
    requester = Requester("r1", "premium", monthly_quota=4, monthly_used=1, performance_score=70)

    assert requester.tier is RequesterTier.PREMIUM


@pytest.mark.parametrize(
    ("quota", "used", "performance"),
    [(-1, 0, 50), (4, -2, 50), (4, 1, 120), (4, 1, -5)],
)
def test_requester_ranges_are_validated(quota, used, performance):
    with pytest.raises(InvalidInputError):
        Requester("r1", "standard", monthly_quota=quota, monthly_used=used, performance_score=performance)


@pytest.mark.parametrize(
    ("complexity", "minutes"),
    [("quick", 45), ("standard", 90), ("complex", 180), (None, 90), ("unheard_of", 90)],
)
def test_estimate_duration_minutes(complexity, minutes):
    assert estimate_duration_minutes(complexity) == minutes


def test_haversine_distances():
    assert haversine_miles(0.0, 0.0, 0.0, 0.0) == 0.0
    # one degree of longitude on the equator
    assert haversine_miles(0.0, 0.0, 0.0, 1.0) == pytest.approx(69.1, abs=0.1)
    assert distance_miles(Coordinates(0.0, 0.0), Coordinates(1.0, 0.0)) == pytest.approx(69.1, abs=0.1)
    assert meters_to_miles(miles_to_meters(12.5)) == pytest.approx(12.5, rel=1e-5)


def test_job_duration_default_follows_settings(monkeypatch):
    from src.booking_engine.config import settings

    monkeypatch.setattr(settings, "default_job_duration_minutes", 60)

    assert Job(job_id="J", latitude=0.0, longitude=0.0).estimated_duration_minutes == 60
    assert Job(job_id="K", estimated_duration_minutes=30).estimated_duration_minutes == 30

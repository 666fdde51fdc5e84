"""Distance oracle contract and the haversine estimate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...config import settings
from ...models.domain import Coordinates
from ..geospatial import distance_miles, miles_to_meters
from .models import TravelEstimate


class DistanceOracle(ABC):
    """Contract for travel distance/time providers."""

    @abstractmethod
    def get_travel_time(self, origin: Coordinates, destination: Coordinates) -> TravelEstimate:
        raise NotImplementedError

    def is_available(self) -> bool:
        return True


def haversine_estimate(
    origin: Coordinates,
    destination: Coordinates,
    speed_mph: float | None = None,
) -> TravelEstimate:
    """Straight-line travel estimate at a constant average speed."""

    speed_mph = speed_mph or settings.fallback_speed_mph
    miles = distance_miles(origin, destination)
    return TravelEstimate(
        distance_meters=miles_to_meters(miles),
        duration_seconds=miles / speed_mph * 3600.0,
    )


class HaversineOracle(DistanceOracle):
    """Offline oracle backed by the haversine estimate."""

    def __init__(self, speed_mph: float | None = None) -> None:
        self.speed_mph = speed_mph or settings.fallback_speed_mph

    def get_travel_time(self, origin: Coordinates, destination: Coordinates) -> TravelEstimate:
        return haversine_estimate(origin, destination, self.speed_mph)

"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Tuple

from ...models.domain import Job
from ..geospatial import meters_to_miles

LegSource = Literal["oracle", "haversine"]


@dataclass(frozen=True, slots=True)
class TravelEstimate:
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class Leg:
    origin_id: str
    destination_id: str
    distance_meters: float
    duration_seconds: float
    source: LegSource


@dataclass(frozen=True, slots=True)
class RouteOptions:
    fix_last_stop: bool = False


@dataclass(frozen=True, slots=True)
class Route:
    """Immutable visiting order for one worker on one day."""

    jobs: Tuple[Job, ...]
    legs: Tuple[Leg, ...] = field(default=())
    total_distance_meters: float = 0.0
    total_duration_seconds: float = 0.0
    degraded: bool = False

    @property
    def job_ids(self) -> list[str]:
        return [job.job_id for job in self.jobs]

    @property
    def total_distance_miles(self) -> float:
        return meters_to_miles(self.total_distance_meters)

    @property
    def total_duration_minutes(self) -> float:
        return self.total_duration_seconds / 60.0

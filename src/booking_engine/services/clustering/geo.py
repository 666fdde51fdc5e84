"""Greedy geographic clustering of a day's jobs.

Clusters are a reporting view: they never decide the visiting order. The
algorithm is a single greedy pass seeded in input order, so membership depends
on which job becomes a seed first. That approximation is accepted here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ...config import settings
from ...models.domain import Job
from ..geospatial import haversine_miles


@dataclass(slots=True)
class Cluster:
    cluster_id: int
    jobs: List[Job] = field(default_factory=list)
    center_latitude: float = 0.0
    center_longitude: float = 0.0
    radius_miles: float = 0.0

    @property
    def job_ids(self) -> list[str]:
        return [job.job_id for job in self.jobs]


def split_located(jobs: Sequence[Job]) -> tuple[list[Job], list[Job]]:
    """Separate jobs with coordinates from the ones that lack them."""

    located = [job for job in jobs if job.coordinates is not None]
    unlocated = [job for job in jobs if job.coordinates is None]
    return located, unlocated


def _centroid(members: Sequence[Job]) -> tuple[float, float]:
    coords = np.array([(job.latitude, job.longitude) for job in members], dtype=float)
    center = coords.mean(axis=0)
    return float(center[0]), float(center[1])


def _radius(members: Sequence[Job], center_lat: float, center_lon: float) -> float:
    if len(members) <= 1:
        return 0.0
    return max(haversine_miles(center_lat, center_lon, job.latitude, job.longitude) for job in members)


def cluster_jobs(jobs: Sequence[Job], radius_miles: float | None = None) -> list[Cluster]:
    """Group jobs whose distance to a seed job is within ``radius_miles``.

    Jobs without coordinates are ignored; use :func:`split_located` to report them.
    """
    radius_miles = settings.cluster_radius_miles if radius_miles is None else radius_miles
    located, _ = split_located(jobs)

    clusters: list[Cluster] = []
    processed: set[int] = set()
    for i, seed in enumerate(located):
        if i in processed:
            continue
        processed.add(i)
        members = [seed]
        for j in range(i + 1, len(located)):
            if j in processed:
                continue
            candidate = located[j]
            distance = haversine_miles(seed.latitude, seed.longitude, candidate.latitude, candidate.longitude)
            if distance <= radius_miles:
                members.append(candidate)
                processed.add(j)

        center_lat, center_lon = _centroid(members)
        clusters.append(
            Cluster(
                cluster_id=len(clusters) + 1,
                jobs=members,
                center_latitude=center_lat,
                center_longitude=center_lon,
                radius_miles=_radius(members, center_lat, center_lon),
            )
        )
    return clusters


def is_compact_day(clusters: Sequence[Cluster], max_radius_miles: float | None = None) -> bool:
    """True when the whole day sits in one cluster no wider than ``max_radius_miles``."""

    max_radius_miles = settings.compact_day_radius_miles if max_radius_miles is None else max_radius_miles
    return len(clusters) == 1 and clusters[0].radius_miles <= max_radius_miles

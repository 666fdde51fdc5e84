"""Serializable optimization outputs."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class LegModel(BaseModel):
    origin_id: str
    destination_id: str
    distance_meters: float
    duration_seconds: float
    source: str


class RouteModel(BaseModel):
    job_ids: List[str]
    total_distance_meters: float
    total_duration_seconds: float
    total_distance_miles: float
    estimated_fuel_cost: float
    degraded: bool = False
    legs: List[LegModel] = Field(default_factory=list)


class SavingsModel(BaseModel):
    time_saved_seconds: float
    time_saved_minutes: int
    distance_saved_meters: float
    distance_saved_miles: float
    fuel_gallons_saved: float
    fuel_dollars_saved: float
    carbon_lbs_saved: float
    carbon_kg_saved: float


class ClusterModel(BaseModel):
    cluster_id: int
    job_ids: List[str]
    center_latitude: float
    center_longitude: float
    radius_miles: float


class ScheduleAssignmentModel(BaseModel):
    job_id: str
    scheduled_date: date
    scheduled_time: str


class SuggestionModel(BaseModel):
    suggestion_id: Optional[str] = None
    worker_id: str
    day: date
    state: Optional[str] = None
    skip_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    original_route: RouteModel
    optimized_route: RouteModel
    savings: SavingsModel
    clusters: List[ClusterModel] = Field(default_factory=list)
    unlocated_jobs: List[str] = Field(default_factory=list)
    schedule: List[ScheduleAssignmentModel] = Field(default_factory=list)


class DailyRunSummary(BaseModel):
    day: date
    workers: int
    suggestions_generated: int
    outcomes: List[SuggestionModel]
    skipped: Dict[str, str] = Field(default_factory=dict)
    failures: Dict[str, str] = Field(default_factory=dict)

"""Serializers for optimization outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import TYPE_CHECKING

from ...schemas.optimization import (
    ClusterModel,
    DailyRunSummary,
    LegModel,
    RouteModel,
    SavingsModel,
    ScheduleAssignmentModel,
    SuggestionModel,
)
from ..clustering.geo import Cluster
from ..routing.models import Route
from ..savings.calculator import Savings, estimate_fuel_cost

if TYPE_CHECKING:
    from ..optimization.models import DailyRunResult, SuggestionOutcome


def route_to_model(route: Route) -> RouteModel:
    return RouteModel(
        job_ids=route.job_ids,
        total_distance_meters=route.total_distance_meters,
        total_duration_seconds=route.total_duration_seconds,
        total_distance_miles=round(route.total_distance_miles, 2),
        estimated_fuel_cost=round(estimate_fuel_cost(route), 2),
        degraded=route.degraded,
        legs=[LegModel(**asdict(leg)) for leg in route.legs],
    )


def savings_to_model(savings: Savings) -> SavingsModel:
    return SavingsModel(
        time_saved_seconds=savings.time_saved_seconds,
        time_saved_minutes=round(savings.time_saved_minutes),
        distance_saved_meters=savings.distance_saved_meters,
        distance_saved_miles=round(savings.distance_saved_miles, 2),
        fuel_gallons_saved=round(savings.fuel_gallons_saved, 2),
        fuel_dollars_saved=round(savings.fuel_dollars_saved, 2),
        carbon_lbs_saved=round(savings.carbon_lbs_saved, 2),
        carbon_kg_saved=round(savings.carbon_kg_saved, 2),
    )


def cluster_to_model(cluster: Cluster) -> ClusterModel:
    return ClusterModel(
        cluster_id=cluster.cluster_id,
        job_ids=cluster.job_ids,
        center_latitude=cluster.center_latitude,
        center_longitude=cluster.center_longitude,
        radius_miles=round(cluster.radius_miles, 3),
    )


def outcome_to_model(outcome: SuggestionOutcome) -> SuggestionModel:
    suggestion = outcome.suggestion
    return SuggestionModel(
        suggestion_id=suggestion.suggestion_id if suggestion else None,
        worker_id=outcome.worker_id,
        day=outcome.day,
        state=suggestion.state.value if suggestion else None,
        skip_reason=outcome.skip_reason,
        created_at=suggestion.created_at if suggestion else None,
        original_route=route_to_model(outcome.original),
        optimized_route=route_to_model(outcome.optimized),
        savings=savings_to_model(outcome.savings),
        clusters=[cluster_to_model(cluster) for cluster in outcome.clusters],
        unlocated_jobs=[job.job_id for job in outcome.unlocated],
        schedule=[
            ScheduleAssignmentModel(
                job_id=assignment.job_id,
                scheduled_date=assignment.scheduled_date,
                scheduled_time=assignment.time_label,
            )
            for assignment in (suggestion.schedule if suggestion else [])
        ],
    )


def daily_run_to_model(result: DailyRunResult) -> DailyRunSummary:
    return DailyRunSummary(
        day=result.day,
        workers=len(result.outcomes) + len(result.skipped) + len(result.failures),
        suggestions_generated=len(result.suggestions),
        outcomes=[outcome_to_model(result.outcomes[worker_id]) for worker_id in sorted(result.outcomes)],
        skipped=result.skipped,
        failures=result.failures,
    )


def daily_run_to_json(result: DailyRunResult) -> dict:
    return daily_run_to_model(result).model_dump(mode="json")


def daily_run_to_csv(result: DailyRunResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "worker_id",
        "day",
        "suggestion_id",
        "skip_reason",
        "original_order",
        "optimized_order",
        "original_miles",
        "optimized_miles",
        "time_saved_min",
        "distance_saved_mi",
        "fuel_dollars_saved",
        "carbon_lbs_saved",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for worker_id in sorted(result.outcomes):
        outcome = result.outcomes[worker_id]
        writer.writerow(
            {
                "worker_id": worker_id,
                "day": outcome.day.isoformat(),
                "suggestion_id": outcome.suggestion.suggestion_id if outcome.suggestion else "",
                "skip_reason": outcome.skip_reason or "",
                "original_order": " > ".join(outcome.original.job_ids),
                "optimized_order": " > ".join(outcome.optimized.job_ids),
                "original_miles": f"{outcome.original.total_distance_miles:.2f}",
                "optimized_miles": f"{outcome.optimized.total_distance_miles:.2f}",
                "time_saved_min": round(outcome.savings.time_saved_minutes),
                "distance_saved_mi": f"{outcome.savings.distance_saved_miles:.2f}",
                "fuel_dollars_saved": f"{outcome.savings.fuel_dollars_saved:.2f}",
                "carbon_lbs_saved": f"{outcome.savings.carbon_lbs_saved:.2f}",
            }
        )
    return buffer.getvalue()

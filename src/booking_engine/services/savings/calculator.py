"""Savings between an original and an optimized route."""

from __future__ import annotations

from dataclasses import dataclass, field

from ...config import settings
from ..geospatial import meters_to_miles
from ..routing.models import Route


@dataclass(frozen=True, slots=True)
class SavingsAssumptions:
    mpg: float = field(default_factory=lambda: settings.assumed_mpg)
    gas_price: float = field(default_factory=lambda: settings.assumed_gas_price)
    co2_lbs_per_mile: float = field(default_factory=lambda: settings.co2_lbs_per_mile)
    kg_per_lb: float = field(default_factory=lambda: settings.kg_per_lb)


@dataclass(frozen=True, slots=True)
class Savings:
    time_saved_seconds: float
    distance_saved_meters: float
    fuel_gallons_saved: float
    fuel_dollars_saved: float
    carbon_lbs_saved: float
    carbon_kg_saved: float

    @property
    def time_saved_minutes(self) -> float:
        return self.time_saved_seconds / 60.0

    @property
    def distance_saved_miles(self) -> float:
        return meters_to_miles(self.distance_saved_meters)

    @property
    def is_improvement(self) -> bool:
        return self.time_saved_seconds > 0 or self.distance_saved_meters > 0


def compute_savings(
    original: Route,
    optimized: Route,
    assumptions: SavingsAssumptions | None = None,
) -> Savings:
    """Clamp every delta at zero; a worse optimized route reports no savings."""

    assumptions = assumptions or SavingsAssumptions()
    time_saved = max(0.0, original.total_duration_seconds - optimized.total_duration_seconds)
    distance_saved = max(0.0, original.total_distance_meters - optimized.total_distance_meters)

    miles_saved = meters_to_miles(distance_saved)
    gallons = miles_saved / assumptions.mpg
    carbon_lbs = miles_saved * assumptions.co2_lbs_per_mile
    return Savings(
        time_saved_seconds=time_saved,
        distance_saved_meters=distance_saved,
        fuel_gallons_saved=gallons,
        fuel_dollars_saved=gallons * assumptions.gas_price,
        carbon_lbs_saved=carbon_lbs,
        carbon_kg_saved=carbon_lbs * assumptions.kg_per_lb,
    )


def estimate_fuel_cost(route: Route, assumptions: SavingsAssumptions | None = None) -> float:
    """Estimated fuel spend in dollars for driving the whole route."""

    assumptions = assumptions or SavingsAssumptions()
    return route.total_distance_miles / assumptions.mpg * assumptions.gas_price

"""Route optimization suggestions and their lifecycle."""

from .daily import run_daily_optimizations
from .models import (
    DailyRunResult,
    OptimizationSuggestion,
    ScheduleAssignment,
    SuggestionOutcome,
    SuggestionState,
)
from .workflow import (
    accept_suggestion,
    apply_schedule,
    compute_schedule,
    generate_suggestion,
    reject_suggestion,
)

__all__ = [
    "DailyRunResult",
    "OptimizationSuggestion",
    "ScheduleAssignment",
    "SuggestionOutcome",
    "SuggestionState",
    "accept_suggestion",
    "apply_schedule",
    "compute_schedule",
    "generate_suggestion",
    "reject_suggestion",
    "run_daily_optimizations",
]

"""Optimization workflow models."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ...models.domain import Job
from ..clustering.geo import Cluster
from ..routing.models import Route
from ..savings.calculator import Savings


class SuggestionState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class ScheduleAssignment:
    job_id: str
    scheduled_date: date
    scheduled_time: time

    @property
    def time_label(self) -> str:
        return self.scheduled_time.strftime("%H:%M")


@dataclass(slots=True)
class OptimizationSuggestion:
    """A proposed route replacement awaiting a single accept/reject decision."""

    worker_id: str
    day: date
    original: Route
    optimized: Route
    savings: Savings
    clusters: List[Cluster] = field(default_factory=list)
    suggestion_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: SuggestionState = SuggestionState.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    schedule: List[ScheduleAssignment] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.state is SuggestionState.PENDING

    @property
    def job_ids(self) -> list[str]:
        return self.optimized.job_ids


@dataclass(slots=True)
class SuggestionOutcome:
    """Everything computed for one worker's day, with or without a suggestion."""

    worker_id: str
    day: date
    original: Route
    optimized: Route
    savings: Savings
    clusters: List[Cluster]
    unlocated: List[Job] = field(default_factory=list)
    suggestion: Optional[OptimizationSuggestion] = None
    skip_reason: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.suggestion is not None


@dataclass(slots=True)
class DailyRunResult:
    day: date
    outcomes: dict[str, SuggestionOutcome] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    output_dir: Optional[Path] = None

    @property
    def suggestions(self) -> list[OptimizationSuggestion]:
        return [outcome.suggestion for outcome in self.outcomes.values() if outcome.suggestion is not None]

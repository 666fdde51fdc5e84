"""Scoring domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .priority import ApprovalDecision


@dataclass(frozen=True, slots=True)
class ScoreEntry:
    category: str
    points: int
    max_points: int
    description: str


@dataclass(slots=True)
class PriorityScore:
    total: int
    breakdown: List[ScoreEntry]
    decision: "ApprovalDecision"

    @property
    def raw_total(self) -> int:
        return sum(entry.points for entry in self.breakdown)

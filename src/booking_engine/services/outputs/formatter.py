"""Serializers for priority scores."""

from __future__ import annotations

from dataclasses import asdict

from ...schemas.scoring import PriorityScoreResponse, ScoreEntryModel
from ..scoring.models import PriorityScore


def priority_score_to_model(score: PriorityScore) -> PriorityScoreResponse:
    return PriorityScoreResponse(
        total=score.total,
        decision=score.decision.value,
        breakdown=[ScoreEntryModel(**asdict(entry)) for entry in score.breakdown],
    )


def priority_score_to_json(score: PriorityScore) -> dict:
    return priority_score_to_model(score).model_dump()

"""Booking priority scoring."""

from .models import PriorityScore, ScoreEntry
from .priority import ApprovalDecision, classify, score_request

__all__ = [
    "ApprovalDecision",
    "PriorityScore",
    "ScoreEntry",
    "classify",
    "score_request",
]

"""Priority score schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ScoreEntryModel(BaseModel):
    category: str
    points: int
    max_points: int = Field(..., ge=0)
    description: str


class PriorityScoreResponse(BaseModel):
    total: int = Field(..., ge=0, le=100)
    decision: str
    breakdown: List[ScoreEntryModel]

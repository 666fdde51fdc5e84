"""Domain models for jobs, requesters and booking requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Union

from ..config import settings
from ..errors import InvalidInputError


class RequesterTier(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    ELITE = "elite"


class ShootCategory(str, Enum):
    PROPERTY = "property"
    PERSONAL = "personal"
    COMPANY_EVENT = "company_event"
    MARKETING_CONTENT = "marketing_content"
    SPECIAL_PROJECT = "special_project"


DURATION_BY_COMPLEXITY: dict[str, int] = {
    "quick": 45,
    "standard": 90,
    "complex": 180,
}


def estimate_duration_minutes(shoot_complexity: Optional[str]) -> int:
    """Estimate how long a shoot takes when the requester did not say."""

    if shoot_complexity is None:
        return settings.default_job_duration_minutes
    return DURATION_BY_COMPLEXITY.get(shoot_complexity, settings.default_job_duration_minutes)


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(slots=True)
class Job:
    """A schedulable unit of field work for one worker."""

    job_id: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    estimated_duration_minutes: Optional[int] = None
    category: Optional[str] = None
    location: str = ""

    def __post_init__(self) -> None:
        if self.estimated_duration_minutes is None:
            self.estimated_duration_minutes = settings.default_job_duration_minutes
        if self.estimated_duration_minutes <= 0:
            raise InvalidInputError(
                f"Job {self.job_id}: estimated duration must be positive, got {self.estimated_duration_minutes}."
            )
        if (self.latitude is None) != (self.longitude is None):
            raise InvalidInputError(f"Job {self.job_id}: latitude and longitude must be given together.")

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)

    @property
    def label(self) -> str:
        """Human identity of the job, falling back to the location text."""
        return self.location or self.job_id


@dataclass(slots=True)
class Requester:
    """The agent or executive submitting booking requests."""

    requester_id: str
    tier: RequesterTier
    monthly_quota: int
    monthly_used: int
    performance_score: float

    def __post_init__(self) -> None:
        try:
            self.tier = RequesterTier(self.tier)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown requester tier '{self.tier}'.") from exc
        if self.monthly_quota < 0 or self.monthly_used < 0:
            raise InvalidInputError("Monthly quota and usage must not be negative.")
        if not 0 <= self.performance_score <= 100:
            raise InvalidInputError(f"Performance score must be within 0-100, got {self.performance_score}.")


@dataclass(slots=True)
class BookingRequest:
    """Incoming service request. Category-specific fields are optional."""

    category: str
    preferred_date: Optional[Union[date, datetime]] = None
    is_flexible: bool = False
    # property
    property_value: Optional[Union[str, float]] = None
    shoot_complexity: Optional[str] = None
    # personal
    personal_shoot_type: Optional[str] = None
    # company_event
    company_event_type: Optional[str] = None
    # marketing_content
    marketing_content_type: Optional[str] = None
    script_status: Optional[str] = None
    # special_project
    project_complexity: Optional[str] = None
    deadline_criticality: Optional[str] = None

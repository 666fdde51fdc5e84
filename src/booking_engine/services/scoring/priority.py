"""Deterministic priority scoring for booking requests.

A request is scored from a category-specific base and a set of common
adjustments (requester tier, monthly usage, advance notice, flexibility and
performance). Every component is recorded in the breakdown, including the
ones that award zero points, so the final number can always be audited.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum
from typing import Callable, Optional

from ...config import settings
from ...errors import InvalidInputError
from ...models.domain import BookingRequest, Requester, RequesterTier, ShootCategory
from .models import PriorityScore, ScoreEntry

PROPERTY_VALUE_POINTS: dict[str, tuple[int, str]] = {
    "under_500k": (5, "Under $500K"),
    "500k_1m": (10, "$500K - $1M"),
    "1m_2m": (20, "$1M - $2M"),
    "over_2m": (25, "$2M+"),
}
COMPLEX_SHOOT_POINTS = 10

PERSONAL_SHOOT_POINTS: dict[str, int] = {
    "headshot": 20,
    "team_photo": 15,
    "personal_branding": 12,
}
PERSONAL_OTHER_POINTS = 8
# No shoot history feed exists yet; every personal request gets the same recency credit.
PERSONAL_RECENCY_STUB_POINTS = 10

COMPANY_EVENT_BASE_POINTS = 90
COMPANY_EVENT_PREMIER_TYPES = frozenset({"conference", "award_ceremony"})
COMPANY_EVENT_TYPE_POINTS = 10

MARKETING_CONTENT_POINTS: dict[str, int] = {
    "promotional": 25,
    "testimonial": 20,
    "social_media": 15,
}
MARKETING_OTHER_POINTS = 12
SCRIPT_STATUS_POINTS: dict[str, int] = {"ready": 10, "in_progress": 5}

SPECIAL_PROJECT_BASE_POINTS = 40
PROJECT_COMPLEXITY_POINTS: dict[str, int] = {"high": 20, "medium": 10, "low": 0}
DEADLINE_POINTS: dict[str, int] = {"urgent": 30, "firm": 15, "flexible": 0}

TIER_POINTS: dict[RequesterTier, int] = {
    RequesterTier.STANDARD: 5,
    RequesterTier.PREMIUM: 10,
    RequesterTier.ELITE: 15,
}
MAX_USAGE_POINTS = 15
MAX_NOTICE_POINTS = 10
FLEXIBILITY_POINTS = 5
MAX_PERFORMANCE_POINTS = 10
COMPANY_EVENT_PERFORMANCE_WEIGHT = 0.3


class ApprovalDecision(str, Enum):
    AUTO_APPROVE = "auto_approve"
    MANAGER_REVIEW = "manager_review"
    AUTO_DECLINE = "auto_decline"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify(score: int) -> ApprovalDecision:
    """Map a final score onto the advisory approval band."""

    if score >= settings.auto_approve_threshold:
        return ApprovalDecision.AUTO_APPROVE
    if score >= settings.manager_review_threshold:
        return ApprovalDecision.MANAGER_REVIEW
    return ApprovalDecision.AUTO_DECLINE


def _property_entries(request: BookingRequest) -> list[ScoreEntry]:
    points, label = _property_value_band(request.property_value)
    complex_points = COMPLEX_SHOOT_POINTS if request.shoot_complexity == "complex" else 0
    return [
        ScoreEntry("Property Value", points, 25, label),
        ScoreEntry(
            "Shoot Complexity",
            complex_points,
            COMPLEX_SHOOT_POINTS,
            f"{request.shoot_complexity} shoot" if request.shoot_complexity else "Not specified",
        ),
    ]


def _property_value_band(value: Optional[str | float]) -> tuple[int, str]:
    if value is None:
        return 0, "Not specified"
    if isinstance(value, str):
        if value not in PROPERTY_VALUE_POINTS:
            raise InvalidInputError(f"Unknown property value band '{value}'.")
        return PROPERTY_VALUE_POINTS[value]
    if value < 500_000:
        band = "under_500k"
    elif value < 1_000_000:
        band = "500k_1m"
    elif value < 2_000_000:
        band = "1m_2m"
    else:
        band = "over_2m"
    return PROPERTY_VALUE_POINTS[band]


def _personal_entries(request: BookingRequest) -> list[ScoreEntry]:
    shoot_type = request.personal_shoot_type
    if shoot_type is None:
        points, description = 0, "Not specified"
    else:
        points = PERSONAL_SHOOT_POINTS.get(shoot_type, PERSONAL_OTHER_POINTS)
        description = f"{shoot_type.replace('_', ' ')} session"
    return [
        ScoreEntry("Business Value", points, 20, description),
        ScoreEntry(
            "Shoot Recency",
            PERSONAL_RECENCY_STUB_POINTS,
            PERSONAL_RECENCY_STUB_POINTS,
            "Fixed credit until shoot history is available",
        ),
    ]


def _company_event_entries(request: BookingRequest) -> list[ScoreEntry]:
    event_type = request.company_event_type
    type_points = COMPANY_EVENT_TYPE_POINTS if event_type in COMPANY_EVENT_PREMIER_TYPES else 0
    return [
        ScoreEntry("Company Event", COMPANY_EVENT_BASE_POINTS, COMPANY_EVENT_BASE_POINTS, "Organizational event base"),
        ScoreEntry(
            "Event Type",
            type_points,
            COMPANY_EVENT_TYPE_POINTS,
            event_type.replace("_", " ") if event_type else "Not specified",
        ),
    ]


def _marketing_entries(request: BookingRequest) -> list[ScoreEntry]:
    content_type = request.marketing_content_type
    if content_type is None:
        content_points, content_desc = 0, "Not specified"
    else:
        content_points = MARKETING_CONTENT_POINTS.get(content_type, MARKETING_OTHER_POINTS)
        content_desc = f"{content_type.replace('_', ' ')} content"
    script_points = SCRIPT_STATUS_POINTS.get(request.script_status or "", 0)
    return [
        ScoreEntry("Content Type", content_points, 25, content_desc),
        ScoreEntry(
            "Script Readiness",
            script_points,
            10,
            f"Script {request.script_status.replace('_', ' ')}" if request.script_status else "Not specified",
        ),
    ]


def _special_project_entries(request: BookingRequest) -> list[ScoreEntry]:
    complexity_points = PROJECT_COMPLEXITY_POINTS.get(request.project_complexity or "", 0)
    deadline_points = DEADLINE_POINTS.get(request.deadline_criticality or "", 0)
    return [
        ScoreEntry("Special Project", SPECIAL_PROJECT_BASE_POINTS, SPECIAL_PROJECT_BASE_POINTS, "Special project base"),
        ScoreEntry(
            "Project Complexity",
            complexity_points,
            20,
            f"{request.project_complexity} complexity" if request.project_complexity else "Not specified",
        ),
        ScoreEntry(
            "Deadline",
            deadline_points,
            30,
            f"{request.deadline_criticality} deadline" if request.deadline_criticality else "Not specified",
        ),
    ]


CATEGORY_RULES: dict[ShootCategory, Callable[[BookingRequest], list[ScoreEntry]]] = {
    ShootCategory.PROPERTY: _property_entries,
    ShootCategory.PERSONAL: _personal_entries,
    ShootCategory.COMPANY_EVENT: _company_event_entries,
    ShootCategory.MARKETING_CONTENT: _marketing_entries,
    ShootCategory.SPECIAL_PROJECT: _special_project_entries,
}


def _tier_entry(requester: Requester, category: ShootCategory) -> ScoreEntry:
    points = TIER_POINTS[requester.tier]
    max_points = TIER_POINTS[RequesterTier.ELITE]
    description = f"{requester.tier.value.capitalize()} tier"
    if category is ShootCategory.COMPANY_EVENT:
        points = round_half_up(points / 2)
        max_points = round_half_up(max_points / 2)
        description += " (halved for organizational events)"
    return ScoreEntry("Requester Tier", points, max_points, description)


def _usage_entry(requester: Requester) -> ScoreEntry:
    if requester.monthly_quota == 0:
        ratio = 1.0
    else:
        ratio = requester.monthly_used / requester.monthly_quota

    if ratio == 0:
        points, desc = 15, "No bookings used this month"
    elif ratio <= 0.25:
        points, desc = 12, "25% or less quota used"
    elif ratio <= 0.5:
        points, desc = 8, "50% or less quota used"
    elif ratio <= 0.75:
        points, desc = 4, "75% or less quota used"
    else:
        points, desc = 0, "Over 75% quota used"
    return ScoreEntry(
        "Monthly Usage",
        points,
        MAX_USAGE_POINTS,
        f"{requester.monthly_used}/{requester.monthly_quota} slots - {desc}",
    )


def _days_in_advance(preferred: date | datetime, now: datetime) -> int:
    if isinstance(preferred, datetime):
        target = preferred
    else:
        target = datetime.combine(preferred, datetime.min.time())
    if target.tzinfo is None and now.tzinfo is not None:
        target = target.replace(tzinfo=now.tzinfo)
    elif target.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=target.tzinfo)
    return math.ceil((target - now).total_seconds() / 86400)


def _notice_entry(request: BookingRequest, now: datetime) -> ScoreEntry:
    if request.preferred_date is None:
        return ScoreEntry("Advance Notice", 0, MAX_NOTICE_POINTS, "Not specified")

    days = _days_in_advance(request.preferred_date, now)
    if days >= 7:
        points, desc = 10, "7+ days advance notice"
    elif days >= 3:
        points, desc = 6, "3-6 days advance notice"
    elif days >= 1:
        points, desc = 3, "1-2 days advance notice"
    else:
        points, desc = 0, "Less than 1 day notice"
    return ScoreEntry("Advance Notice", points, MAX_NOTICE_POINTS, desc)


def _flexibility_entry(request: BookingRequest) -> ScoreEntry:
    if request.is_flexible:
        return ScoreEntry("Flexibility", FLEXIBILITY_POINTS, FLEXIBILITY_POINTS, "Flexible for optimization")
    return ScoreEntry("Flexibility", 0, FLEXIBILITY_POINTS, "Fixed date required")


def _performance_entry(requester: Requester, category: ShootCategory) -> ScoreEntry:
    adjustment = round_half_up((requester.performance_score - 75) / 5)
    adjustment = max(-MAX_PERFORMANCE_POINTS, min(MAX_PERFORMANCE_POINTS, adjustment))
    max_points = MAX_PERFORMANCE_POINTS
    if category is ShootCategory.COMPANY_EVENT:
        adjustment = round_half_up(adjustment * COMPANY_EVENT_PERFORMANCE_WEIGHT)
        max_points = round_half_up(MAX_PERFORMANCE_POINTS * COMPANY_EVENT_PERFORMANCE_WEIGHT)
    sign = "+" if adjustment > 0 else ""
    return ScoreEntry(
        "Performance Score",
        adjustment,
        max_points,
        f"Score: {requester.performance_score:g}/100 ({sign}{adjustment})",
    )


def parse_category(value: str | ShootCategory) -> ShootCategory:
    try:
        return ShootCategory(value)
    except ValueError as exc:
        allowed = ", ".join(category.value for category in ShootCategory)
        raise InvalidInputError(f"Unknown booking category '{value}'. Expected one of: {allowed}.") from exc


def score_request(
    request: BookingRequest,
    requester: Requester,
    *,
    now: Optional[datetime] = None,
) -> PriorityScore:
    """Score a booking request for the given requester.

    Args:
        request: The booking request being submitted.
        requester: Fully populated profile of the submitter.
        now: Reference time for advance-notice computation (defaults to now).

    Returns:
        PriorityScore with the clamped total, the full breakdown and the
        advisory approval decision.

    Raises:
        InvalidInputError: if the category (or a property value band) is unknown.
    """
    category = parse_category(request.category)
    now = now or datetime.now()

    breakdown = CATEGORY_RULES[category](request)
    breakdown.extend(
        [
            _tier_entry(requester, category),
            _usage_entry(requester),
            _notice_entry(request, now),
            _flexibility_entry(request),
            _performance_entry(requester, category),
        ]
    )

    raw_total = sum(entry.points for entry in breakdown)
    total = max(0, min(100, raw_total))
    return PriorityScore(total=total, breakdown=breakdown, decision=classify(total))

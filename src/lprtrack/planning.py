"""
Travel planning ahead of naturalization.

Forward-looking counterparts to the presence and risk calculators:
- calculate_safe_travel_budget: days still available abroad before the
  eligibility date
- assess_upcoming_trip_risk: planned (simulated) trips against that budget
  and the continuous residence thresholds
- project_eligibility_date: when physical presence will be met at the
  historical absence rate
- calculate_milestones: progress toward physical presence and the early
  filing window
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from lprtrack.analytics import days_abroad_by_year
from lprtrack.constants import (
    CONTINUOUS_RESIDENCE_BREAK_DAYS,
    CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS,
    CONTINUOUS_RESIDENCE_WARNING_DAYS,
    DAYS_PER_YEAR,
    PROJECTION_FAR_FUTURE_DATE,
    PROJECTION_HIGH_VARIANCE,
    PROJECTION_MEDIUM_VARIANCE,
    PROJECTION_RECENT_YEARS,
    TRAVEL_BUDGET_CAUTION_DAYS,
    TRAVEL_BUDGET_WARNING_DAYS,
)
from lprtrack.core.models import EligibilityCategory, Trip
from lprtrack.core.presence import calculate_eligibility_dates, required_days_for
from lprtrack.core.trip_days import count_days_abroad
from lprtrack.errors import DateRangeError
from lprtrack.utils.dates import add_days, days_between, inclusive_span
from lprtrack.utils.serialize import to_plain

logger = logging.getLogger(__name__)

Category = Union[EligibilityCategory, str]


class BudgetRiskLevel(Enum):
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"


class TripPlanRiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TripPlanRiskReason(Enum):
    CONTINUOUS_RESIDENCE = "continuous_residence"
    PHYSICAL_PRESENCE = "physical_presence"
    SAFE = "safe"


class ConfidenceLevel(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MilestoneType(Enum):
    PHYSICAL_PRESENCE = "physical_presence"
    EARLY_FILING = "early_filing"


@dataclass
class SafeTravelBudget:
    days_available: int
    until_date: date
    risk_level: BudgetRiskLevel
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class UpcomingTripRisk:
    trip_id: str
    risk_level: TripPlanRiskLevel
    reason: TripPlanRiskReason
    impact_description: str
    recommendation: str
    days_over_warning: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class TravelProjection:
    projected_eligibility_date: date
    average_days_abroad_per_year: int
    confidence_level: ConfidenceLevel
    assumptions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class Milestone:
    type: MilestoneType
    days_remaining: int
    target_date: date
    current_progress: float  # percent, one decimal
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# SAFE TRAVEL BUDGET
# =============================================================================

BUDGET_RECOMMENDATIONS = {
    BudgetRiskLevel.WARNING: (
        "Minimize travel to ensure eligibility requirements are met. "
        "Consider postponing non-essential trips."
    ),
    BudgetRiskLevel.CAUTION: (
        "Travel carefully and track all trips precisely. "
        "Avoid extended international travel."
    ),
    BudgetRiskLevel.SAFE: (
        "You have a comfortable travel budget remaining. "
        "Continue tracking all trips accurately."
    ),
}


def calculate_safe_travel_budget(
    total_days_abroad: int,
    category: Category,
    green_card_date: date,
) -> SafeTravelBudget:
    """
    Days that can still be spent abroad before the eligibility date.

    The allowance is every day from the green card date through the
    eligibility date (inclusive) that is not needed for physical presence.
    """
    required = required_days_for(category)
    eligibility = calculate_eligibility_dates(green_card_date, category).eligibility_date

    max_days_abroad = inclusive_span(green_card_date, eligibility) - required
    available = max(0, max_days_abroad - total_days_abroad)

    if available <= TRAVEL_BUDGET_WARNING_DAYS:
        level = BudgetRiskLevel.WARNING
    elif available <= TRAVEL_BUDGET_CAUTION_DAYS:
        level = BudgetRiskLevel.CAUTION
    else:
        level = BudgetRiskLevel.SAFE

    return SafeTravelBudget(
        days_available=available,
        until_date=eligibility,
        risk_level=level,
        recommendation=BUDGET_RECOMMENDATIONS[level],
    )


# =============================================================================
# UPCOMING TRIPS
# =============================================================================

def _classify_planned_trip(span: int, cumulative: int, available: int) -> Tuple[Any, ...]:
    if span >= CONTINUOUS_RESIDENCE_BREAK_DAYS:
        return (
            TripPlanRiskLevel.CRITICAL,
            TripPlanRiskReason.CONTINUOUS_RESIDENCE,
            "This trip would break continuous residence and reset your naturalization timeline",
            "Cancel or significantly shorten this trip to maintain eligibility",
        )
    if span >= CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS:
        return (
            TripPlanRiskLevel.HIGH,
            TripPlanRiskReason.CONTINUOUS_RESIDENCE,
            "This trip creates a presumption of breaking continuous residence",
            "Shorten trip to under 180 days and prepare documentation to prove ties to USA",
        )
    if span >= CONTINUOUS_RESIDENCE_WARNING_DAYS:
        return (
            TripPlanRiskLevel.MEDIUM,
            TripPlanRiskReason.CONTINUOUS_RESIDENCE,
            "This trip approaches the continuous residence warning threshold",
            "Consider shortening trip to maintain a safety buffer",
        )
    if cumulative > available:
        return (
            TripPlanRiskLevel.MEDIUM,
            TripPlanRiskReason.PHYSICAL_PRESENCE,
            "This trip would exceed your safe travel budget for maintaining physical presence",
            "Postpone or shorten this trip to ensure eligibility requirements are met",
        )
    return (
        TripPlanRiskLevel.LOW,
        TripPlanRiskReason.SAFE,
        "This trip poses minimal risk to your naturalization timeline",
        "Trip appears safe for naturalization requirements",
    )


def assess_upcoming_trip_risk(
    upcoming_trips: Iterable[Trip],
    current_total_days_abroad: int,
    category: Category,
    green_card_date: date,
) -> List[UpcomingTripRisk]:
    """
    Rate each planned trip in order.

    Only simulated trips with an id are rated. Each trip's days abroad are
    added to the running total before it is checked against the travel
    budget, so later trips see the cost of earlier ones. Thresholds use the
    trip's calendar span (both travel days included).
    """
    budget = calculate_safe_travel_budget(current_total_days_abroad, category, green_card_date)
    cumulative = 0
    assessments: List[UpcomingTripRisk] = []

    for trip in upcoming_trips:
        if not trip.is_simulated or not trip.id or not trip.is_valid:
            continue

        days = count_days_abroad(trip)
        cumulative += days
        span = inclusive_span(trip.departure_date, trip.return_date)
        level, reason, impact, recommendation = _classify_planned_trip(
            span, cumulative, budget.days_available
        )
        assessments.append(UpcomingTripRisk(
            trip_id=trip.id,
            risk_level=level,
            reason=reason,
            impact_description=impact,
            recommendation=recommendation,
            days_over_warning=(
                days - CONTINUOUS_RESIDENCE_WARNING_DAYS
                if days >= CONTINUOUS_RESIDENCE_WARNING_DAYS else None
            ),
        ))

    logger.debug(f"Rated {len(assessments)} planned trips against a budget of {budget.days_available} days")
    return assessments


# =============================================================================
# ELIGIBILITY PROJECTION
# =============================================================================

def _projection_confidence(yearly: List[int]) -> ConfidenceLevel:
    recent = yearly[-PROJECTION_RECENT_YEARS:]
    variance = float(np.var(recent)) if recent else 0.0
    if variance > PROJECTION_HIGH_VARIANCE or len(yearly) < PROJECTION_RECENT_YEARS:
        return ConfidenceLevel.LOW
    if variance > PROJECTION_MEDIUM_VARIANCE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def project_eligibility_date(
    trips: Iterable[Trip],
    total_days_in_usa: int,
    category: Category,
    green_card_date: date,
    current_date: date,
) -> TravelProjection:
    """
    Project when the physical presence requirement will be met.

    The share of days spent abroad since the green card date is assumed to
    hold from current_date on. Confidence comes from the variance of days
    abroad over the last three calendar years: above 900 (or fewer than
    three years of history) is low, above 400 is medium.

    Raises:
        DateRangeError: If current_date is before green_card_date.
    """
    if current_date < green_card_date:
        raise DateRangeError(
            f"Current date {current_date} is before the green card date {green_card_date}",
            field="currentDate",
        )

    trips = list(trips)
    required = required_days_for(category)
    remaining = max(0, required - total_days_in_usa)
    days_since = inclusive_span(green_card_date, current_date)
    absence_rate = (days_since - total_days_in_usa) / days_since

    if remaining == 0:
        return TravelProjection(
            projected_eligibility_date=current_date,
            average_days_abroad_per_year=_round_half_up(absence_rate * DAYS_PER_YEAR),
            confidence_level=ConfidenceLevel.HIGH,
            assumptions=["Physical presence requirement already met"],
        )

    if absence_rate >= 1:
        return TravelProjection(
            projected_eligibility_date=date(*PROJECTION_FAR_FUTURE_DATE),
            average_days_abroad_per_year=DAYS_PER_YEAR,
            confidence_level=ConfidenceLevel.LOW,
            assumptions=["100% historical absence rate makes eligibility impossible at current rate"],
        )

    days_needed = math.ceil(remaining / (1 - absence_rate))
    projected = add_days(current_date, days_needed)

    if not trips:
        return TravelProjection(
            projected_eligibility_date=projected,
            average_days_abroad_per_year=0,
            confidence_level=ConfidenceLevel.LOW,
            assumptions=["No travel history available for projection"],
        )

    yearly = days_abroad_by_year(trips, green_card_date, current_date)["days_abroad"].tolist()
    assumptions = [
        f"Based on {_round_half_up(absence_rate * 100)}% historical absence rate",
        "Assuming similar travel patterns continue",
    ]
    if len(yearly) < PROJECTION_RECENT_YEARS:
        assumptions.append("Limited historical data available")

    return TravelProjection(
        projected_eligibility_date=projected,
        average_days_abroad_per_year=_round_half_up(absence_rate * DAYS_PER_YEAR),
        confidence_level=_projection_confidence(yearly),
        assumptions=assumptions,
    )


# =============================================================================
# MILESTONES
# =============================================================================

def calculate_milestones(
    total_days_in_usa: int,
    category: Category,
    green_card_date: date,
    current_date: date,
) -> List[Milestone]:
    """Physical presence progress, then the early filing window."""
    required = required_days_for(category)
    remaining = max(0, required - total_days_in_usa)
    percent = min(100.0, max(0, total_days_in_usa) / required * 100)

    presence = Milestone(
        type=MilestoneType.PHYSICAL_PRESENCE,
        days_remaining=remaining,
        target_date=add_days(current_date, remaining),
        current_progress=_round_half_up(percent * 10) / 10,
        description=(
            f"{remaining} days until physical presence requirement met"
            if remaining else "Physical presence requirement met!"
        ),
    )

    opens = calculate_eligibility_dates(green_card_date, category).earliest_filing_date
    if current_date < opens:
        days_until = days_between(opens, current_date)
        wait = days_between(opens, green_card_date)
        elapsed = max(0, days_between(current_date, green_card_date))
        filing = Milestone(
            type=MilestoneType.EARLY_FILING,
            days_remaining=days_until,
            target_date=opens,
            current_progress=_round_half_up(elapsed / wait * 1000) / 10,
            description=f"{days_until} days until early filing window opens",
        )
    else:
        filing = Milestone(
            type=MilestoneType.EARLY_FILING,
            days_remaining=0,
            target_date=opens,
            current_progress=100.0,
            description="Early filing window is now open!",
        )

    return [presence, filing]

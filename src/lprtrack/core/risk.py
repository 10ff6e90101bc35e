"""
Continuous-residence and abandonment risk assessor.

Risk levels are a pure function of a single absence length, looked up in
ordered (min_days, level) tables. Two tracks are kept deliberately apart:

    Continuous residence (naturalization): 150 approaching, 180 at_risk,
        365 broken. A reentry permit never relaxes these.
    LPR status (green card abandonment): 150 warning, 180 presumption,
        330 high_risk, 365 automatic_loss. A valid reentry permit replaces
        these with the 730-day permit window.

Usage:
    from lprtrack.core.risk import assess_lpr_status_risk

    assessment = assess_lpr_status_risk(trips, current_date=date(2024, 6, 1))
    assessment.overall_risk  # LPRRiskLevel.WARNING
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from lprtrack.constants import (
    CONTINUOUS_RESIDENCE_BREAK_DAYS,
    CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS,
    CONTINUOUS_RESIDENCE_WARNING_DAYS,
    CUMULATIVE_YEARLY_WARNING_DAYS,
    LPR_AUTOMATIC_LOSS_DAYS,
    LPR_HIGH_RISK_DAYS,
    LPR_PRESUMPTION_DAYS,
    LPR_WARNING_DAYS,
    REENTRY_PERMIT_EXPIRY_WARNING_DAYS,
    REENTRY_PERMIT_MAX_DAYS,
    REENTRY_PERMIT_WARNING_DAYS,
)
from lprtrack.core.models import (
    ContinuousResidenceImpact,
    ContinuousResidenceRisk,
    GreenCardRiskResult,
    LongestTrip,
    LPRRiskLevel,
    PhysicalPresenceImpact,
    ReentryPermit,
    ReentryPermitProtection,
    RiskAssessment,
    Trip,
    TripRiskAssessment,
)
from lprtrack.core.trip_days import days_abroad_simple, filter_real_trips
from lprtrack.utils.dates import days_between

logger = logging.getLogger(__name__)


# =============================================================================
# THRESHOLD TABLES
# =============================================================================

@dataclass(frozen=True)
class Threshold:
    """
    One row of a risk table.

    Attributes:
        min_days: Smallest absence (inclusive) that reaches this level.
        level: Risk level assigned.
        message: Human-readable explanation.
        next_threshold: Day count of the next, more severe level. None for
            the most severe row (days until next threshold is then 0).
    """
    min_days: int
    level: Union[ContinuousResidenceRisk, LPRRiskLevel]
    message: str
    next_threshold: Optional[int] = None


# Rows are ordered most severe first; classify() returns the first match.
CONTINUOUS_RESIDENCE_TABLE: Tuple[Threshold, ...] = (
    Threshold(
        CONTINUOUS_RESIDENCE_BREAK_DAYS,
        ContinuousResidenceRisk.BROKEN,
        "Continuous residence has been broken. The naturalization clock restarts.",
    ),
    Threshold(
        CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS,
        ContinuousResidenceRisk.AT_RISK,
        "Creates a rebuttable presumption that continuous residence was broken.",
        CONTINUOUS_RESIDENCE_BREAK_DAYS,
    ),
    Threshold(
        CONTINUOUS_RESIDENCE_WARNING_DAYS,
        ContinuousResidenceRisk.APPROACHING,
        "Approaching the 180-day continuous residence threshold.",
        CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS,
    ),
    Threshold(
        0,
        ContinuousResidenceRisk.NONE,
        "No impact on continuous residence",
        CONTINUOUS_RESIDENCE_WARNING_DAYS,
    ),
)

LPR_STATUS_TABLE: Tuple[Threshold, ...] = (
    Threshold(
        LPR_AUTOMATIC_LOSS_DAYS,
        LPRRiskLevel.AUTOMATIC_LOSS,
        "Risk of automatic loss of permanent resident status.",
    ),
    Threshold(
        LPR_HIGH_RISK_DAYS,
        LPRRiskLevel.HIGH_RISK,
        "Your green card is at serious risk. Return immediately.",
        LPR_AUTOMATIC_LOSS_DAYS,
    ),
    Threshold(
        LPR_PRESUMPTION_DAYS,
        LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT,
        "Creates rebuttable presumption of abandoning permanent residence.",
        LPR_HIGH_RISK_DAYS,
    ),
    Threshold(
        LPR_WARNING_DAYS,
        LPRRiskLevel.WARNING,
        "Extended absence detected. Maintain strong ties to the U.S.",
        LPR_PRESUMPTION_DAYS,
    ),
    Threshold(
        0,
        LPRRiskLevel.NONE,
        "No risk to permanent resident status",
        LPR_WARNING_DAYS,
    ),
)

# With a valid permit, loss starts strictly after the 730-day window.
PERMIT_STATUS_TABLE: Tuple[Threshold, ...] = (
    Threshold(
        REENTRY_PERMIT_MAX_DAYS + 1,
        LPRRiskLevel.AUTOMATIC_LOSS,
        "Exceeded 2-year reentry permit protection period.",
    ),
    Threshold(
        REENTRY_PERMIT_WARNING_DAYS,
        LPRRiskLevel.APPROACHING_PERMIT_LIMIT,
        "Approaching 2-year reentry permit limit. Plan return soon.",
        REENTRY_PERMIT_MAX_DAYS,
    ),
    Threshold(
        0,
        LPRRiskLevel.PROTECTED_BY_PERMIT,
        "Protected by reentry permit. Valid for up to 2 years.",
        REENTRY_PERMIT_MAX_DAYS,
    ),
)


def classify(days: int, table: Sequence[Threshold]) -> Threshold:
    """Return the first (most severe) row whose min_days the absence reaches."""
    for row in table:
        if days >= row.min_days:
            return row
    return table[-1]


def _days_until_next(days: int, row: Threshold) -> int:
    if row.next_threshold is None:
        return 0
    return row.next_threshold - days


def classify_continuous_residence(days_abroad: int) -> ContinuousResidenceRisk:
    return classify(days_abroad, CONTINUOUS_RESIDENCE_TABLE).level


def calculate_green_card_abandonment_risk(
    days_abroad: int,
    has_reentry_permit: bool = False,
) -> GreenCardRiskResult:
    """
    LPR-status risk for a single absence.

    Args:
        days_abroad: Length of the absence in days.
        has_reentry_permit: Whether a valid, unexpired permit covers the trip.

    Returns:
        GreenCardRiskResult with level, days until the next level and message.
    """
    table = PERMIT_STATUS_TABLE if has_reentry_permit else LPR_STATUS_TABLE
    row = classify(days_abroad, table)
    return GreenCardRiskResult(
        risk_level=row.level,
        days_until_next_threshold=_days_until_next(days_abroad, row),
        message=row.message,
    )


# =============================================================================
# PREDICATES
# =============================================================================

def approaches_continuous_residence_risk(days_abroad: int) -> bool:
    return CONTINUOUS_RESIDENCE_WARNING_DAYS <= days_abroad < CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS


def breaks_continuous_residence(days_abroad: int) -> bool:
    return days_abroad >= CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS


def approaches_green_card_loss(days_abroad: int) -> bool:
    return LPR_HIGH_RISK_DAYS <= days_abroad < LPR_AUTOMATIC_LOSS_DAYS


def risks_automatic_green_card_loss(days_abroad: int, has_reentry_permit: bool = False) -> bool:
    if has_reentry_permit:
        return days_abroad > REENTRY_PERMIT_MAX_DAYS
    return days_abroad >= LPR_AUTOMATIC_LOSS_DAYS


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

RECOMMENDATIONS: Dict[LPRRiskLevel, List[str]] = {
    LPRRiskLevel.AUTOMATIC_LOSS: [
        "Your green card is likely considered abandoned",
        "You will need to apply for a returning resident visa (SB-1)",
        "Consult with an immigration attorney before attempting to return",
        "Prepare extensive documentation of ties to the U.S.",
    ],
    LPRRiskLevel.HIGH_RISK: [
        "URGENT: Return to the U.S. immediately",
        "Risk of automatic loss of green card is imminent",
        "Seek legal representation before attempting reentry",
        "Apply for a reentry permit if you must travel again",
    ],
    LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT: [
        "Prepare evidence to overcome presumption of abandonment",
        "Consult with an immigration attorney immediately",
        "Consider applying for a reentry permit for future travel",
        "Document all ties to the United States",
    ],
    LPRRiskLevel.WARNING: [
        "Maintain strong ties to the U.S. (employment, home, family)",
        "Keep documentation of your U.S. connections",
        "Consider shorter trips in the future",
    ],
}

REENTRY_PERMIT_REQUIRED_LEVELS = {
    LPRRiskLevel.AUTOMATIC_LOSS,
    LPRRiskLevel.HIGH_RISK,
    LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT,
}


def recommendations_for(risk_level: LPRRiskLevel) -> List[str]:
    """Fresh copy of the recommendations for a level (empty when none apply)."""
    return list(RECOMMENDATIONS.get(risk_level, []))


def cumulative_travel_recommendations(total_days_abroad: int) -> List[str]:
    return [
        f"You have spent {total_days_abroad} days abroad this year",
        "Frequent extended travel may indicate abandonment of residence",
        "Consider reducing travel frequency and duration",
        "Maintain strong evidence of U.S. ties",
    ]


# =============================================================================
# SINGLE-TRIP ASSESSMENT
# =============================================================================

# (warnings, recommendations) added for each continuous-residence level
CONTINUOUS_RESIDENCE_ADVICE: Dict[ContinuousResidenceRisk, Tuple[List[str], List[str]]] = {
    ContinuousResidenceRisk.BROKEN: (
        ["Continuous residence has been definitively broken."],
        ["Your naturalization timeline has been reset"],
    ),
    ContinuousResidenceRisk.AT_RISK: (
        ["This trip may reset your citizenship eligibility timeline."],
        ["Return immediately to minimize impact on continuous residence"],
    ),
    ContinuousResidenceRisk.APPROACHING: (
        ["Your trip is approaching 180 days. Plan your return to protect your continuous residence."],
        ["Consider returning before 180 days to avoid presumption of breaking continuous residence"],
    ),
}

# (warnings, recommendations) added for each LPR-status level
LPR_STATUS_ADVICE: Dict[LPRRiskLevel, Tuple[List[str], List[str]]] = {
    LPRRiskLevel.AUTOMATIC_LOSS: (
        ["Urgent: This extended absence may result in loss of your permanent resident status."],
        [
            "Seek immediate legal representation",
            "You may need to apply for a returning resident visa (SB-1)",
        ],
    ),
    LPRRiskLevel.HIGH_RISK: (
        ["Your trip is approaching one year. Your green card may be at risk."],
        [
            "Return IMMEDIATELY - approaching automatic loss of LPR status",
            "Do NOT exceed 365 days under any circumstances",
            "Seek immediate legal counsel",
        ],
    ),
    LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT: (
        ["Creates rebuttable presumption of abandoning permanent residence."],
        [
            "Prepare evidence to overcome presumption of abandonment",
            "Consult with an immigration attorney",
        ],
    ),
    LPRRiskLevel.WARNING: (
        ["Extended absence detected. Maintain strong ties to the U.S."],
        ["Keep evidence of U.S. ties (employment, home, family)"],
    ),
    LPRRiskLevel.PROTECTED_BY_PERMIT: (
        ["Your reentry permit protects your LPR status for this trip."],
        [
            "Reentry permit protects green card but not continuous residence for naturalization",
            "Consider shorter trips if maintaining citizenship timeline is important",
        ],
    ),
    LPRRiskLevel.APPROACHING_PERMIT_LIMIT: (
        ["Approaching maximum 2-year reentry permit protection"],
        [
            "Plan your return to the U.S. soon",
            "Do not exceed 730 days abroad even with permit",
        ],
    ),
}


def assess_trip_risk(
    trip: Trip,
    current_date: date,
    reentry_permit: Optional[ReentryPermit] = None,
) -> TripRiskAssessment:
    """
    Assess one trip against every legal threshold.

    The permit counts only if it is still valid on the trip's return date.
    Continuous-residence risk ignores the permit entirely.

    Args:
        trip: Trip to assess (real or simulated).
        current_date: Date the assessment is made.
        reentry_permit: Permit held by the resident, if any.

    Returns:
        TripRiskAssessment with per-track impacts, warnings and recommendations.
    """
    days_abroad = days_abroad_simple(trip)
    has_permit = reentry_permit is not None and reentry_permit.is_valid_on(trip.return_date)

    presence_impact = PhysicalPresenceImpact(
        days_deducted_from_eligibility=days_abroad,
        affects_naturalization_timeline=days_abroad > 0,
        message=(
            f"This trip deducts {days_abroad} days from your physical presence requirement"
            if days_abroad > 0 else "No impact on physical presence"
        ),
    )

    cr_row = classify(days_abroad, CONTINUOUS_RESIDENCE_TABLE)
    cr_impact = ContinuousResidenceImpact(
        risk=cr_row.level,
        breaks_requirement=breaks_continuous_residence(days_abroad),
        resets_eligibility_clock=cr_row.level == ContinuousResidenceRisk.BROKEN,
        days_until_break=max(0, CONTINUOUS_RESIDENCE_BREAK_DAYS - days_abroad),
        message=cr_row.message,
    )

    lpr_risk = calculate_green_card_abandonment_risk(days_abroad, has_permit)

    warnings: List[str] = []
    recommendations: List[str] = []
    cr_warnings, cr_recommendations = CONTINUOUS_RESIDENCE_ADVICE.get(cr_row.level, ([], []))
    warnings.extend(cr_warnings)
    recommendations.extend(cr_recommendations)

    lpr_warnings, lpr_recommendations = LPR_STATUS_ADVICE.get(lpr_risk.risk_level, ([], []))
    warnings.extend(lpr_warnings)
    if lpr_risk.risk_level == LPRRiskLevel.HIGH_RISK and cr_row.level == ContinuousResidenceRisk.AT_RISK:
        warnings.append("Continuous residence presumption already broken.")
    recommendations.extend(lpr_recommendations)

    return TripRiskAssessment(
        trip_id=trip.id,
        days_abroad=days_abroad,
        physical_presence_impact=presence_impact,
        continuous_residence_impact=cr_impact,
        lpr_status_risk=lpr_risk,
        overall_risk_level=lpr_risk.risk_level,
        has_reentry_permit=has_permit,
        assessment_date=current_date,
        warnings=warnings,
        recommendations=recommendations,
    )


# =============================================================================
# TRIP HISTORY ASSESSMENT
# =============================================================================

@dataclass
class TripMetrics:
    current_year_trips: List[Trip]
    total_days_abroad_current_year: int
    longest_trip: Optional[Trip]
    max_days: int


def calculate_trip_metrics(trips: Iterable[Trip], current_date: date) -> TripMetrics:
    """
    Current-year totals and the longest trip.

    A trip belongs to the current year when it departed in current_date's
    calendar year. Ties for longest keep the earliest trip in input order.
    """
    trips = list(trips)
    current_year_trips = [t for t in trips if t.departure_date.year == current_date.year]
    total_current_year = sum(days_abroad_simple(t) for t in current_year_trips)

    longest: Optional[Trip] = None
    max_days = 0
    for trip in trips:
        days = days_abroad_simple(trip)
        if days > max_days:
            max_days = days
            longest = trip

    return TripMetrics(
        current_year_trips=current_year_trips,
        total_days_abroad_current_year=total_current_year,
        longest_trip=longest,
        max_days=max_days,
    )


def assess_lpr_status_risk(
    trips: Iterable[Trip],
    current_date: date,
    reentry_permit: Optional[ReentryPermit] = None,
    include_simulated: bool = False,
) -> RiskAssessment:
    """
    Risk of losing permanent resident status across a travel history.

    The longest single absence sets the level. Permit-protected levels are
    reported as overall "none". Independently, more than 180 cumulative
    days abroad in the current calendar year raises "none" to "warning".

    Args:
        trips: Travel history.
        current_date: Defines the current calendar year and permit validity.
        reentry_permit: Permit held by the resident, if any.
        include_simulated: Mix simulated trips into the aggregation.

    Returns:
        RiskAssessment with overall level, longest trip and recommendations.
    """
    trips = filter_real_trips(trips, include_simulated)
    metrics = calculate_trip_metrics(trips, current_date)

    result = RiskAssessment(
        overall_risk=LPRRiskLevel.NONE,
        longest_trip=LongestTrip(
            trip=metrics.longest_trip or (trips[0] if trips else None),
            days_abroad=metrics.max_days,
            risk_level=LPRRiskLevel.NONE,
        ),
        current_year_trips=len(metrics.current_year_trips),
        total_days_abroad_current_year=metrics.total_days_abroad_current_year,
    )
    if metrics.longest_trip is None:
        return result

    has_permit = reentry_permit is not None and reentry_permit.is_valid_on(current_date)
    risk = calculate_green_card_abandonment_risk(metrics.max_days, has_permit)

    if risk.risk_level in (LPRRiskLevel.PROTECTED_BY_PERMIT, LPRRiskLevel.APPROACHING_PERMIT_LIMIT):
        level = LPRRiskLevel.NONE
    else:
        level = risk.risk_level
    result.longest_trip.risk_level = level
    result.overall_risk = level

    result.recommendations = recommendations_for(risk.risk_level)
    result.requires_reentry_permit = risk.risk_level in REENTRY_PERMIT_REQUIRED_LEVELS

    if metrics.total_days_abroad_current_year > CUMULATIVE_YEARLY_WARNING_DAYS:
        if risk.risk_level == LPRRiskLevel.NONE:
            result.recommendations.extend(
                cumulative_travel_recommendations(metrics.total_days_abroad_current_year)
            )
        if result.overall_risk == LPRRiskLevel.NONE:
            result.overall_risk = LPRRiskLevel.WARNING
            logger.info(
                f"Cumulative {metrics.total_days_abroad_current_year} days abroad in "
                f"{current_date.year} raised overall risk to warning"
            )

    logger.debug(f"LPR status risk: {result.overall_risk.value} (longest {metrics.max_days} days)")
    return result


# =============================================================================
# REENTRY PERMIT PROTECTION
# =============================================================================

def reentry_permit_protection(
    trip_duration_days: int,
    reentry_permit: Optional[ReentryPermit],
    current_date: date,
) -> ReentryPermitProtection:
    """
    Whether a permit protects LPR status for a trip of the given length.

    An expired permit protects nothing. A permit within 60 days of expiry
    still protects but carries a warning.
    """
    result = ReentryPermitProtection(
        provides_protection=False,
        days_protected=0,
        days_until_expiry=None,
    )

    if reentry_permit is None or not reentry_permit.has_permit:
        result.warnings.append("No reentry permit on file")
        return result

    if reentry_permit.expiration_date is not None:
        days_left = days_between(reentry_permit.expiration_date, current_date)
        result.days_until_expiry = days_left
        if days_left < 0:
            result.warnings.append("Reentry permit has expired. It no longer provides protection.")
            return result
        if days_left <= REENTRY_PERMIT_EXPIRY_WARNING_DAYS:
            result.warnings.append(
                f"Reentry permit expires in {days_left} days. Plan your return accordingly."
            )

    result.days_protected = REENTRY_PERMIT_MAX_DAYS
    if trip_duration_days <= REENTRY_PERMIT_MAX_DAYS:
        result.provides_protection = True
    else:
        result.warnings.append("Trip duration exceeds maximum 2-year reentry permit protection")

    return result

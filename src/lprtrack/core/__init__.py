"""
lprtrack core: day counting, presence aggregation and risk assessment.

Layer Architecture:
    Calendar utilities (lprtrack.utils.dates)
                ↓
    Trip day-counter:     count_days_abroad, count_days_abroad_in_period
                ↓
    Presence aggregator:  calculate_physical_presence → calculate_presence_status
                ↓
    Risk assessor:        assess_trip_risk, assess_lpr_status_risk
                ↓
    Max trip calculator:  calculate_maximum_trip_duration

    LPR status reader:    assess_lpr_status_advanced (pattern, presumption, score)

Usage:
    from lprtrack.core import (
        Trip,
        calculate_physical_presence,
        calculate_presence_status,
        assess_lpr_status_risk,
    )
"""

from lprtrack.core.models import (
    # Enums
    EligibilityCategory,
    Gender,
    PresenceStatusLevel,
    ContinuousResidenceRisk,
    LPRRiskLevel,
    LimitingFactor,
    LPRStatusType,
    I751Status,
    N470Status,
    LPRStatusOutcome,
    # Inputs
    Trip,
    ReentryPermit,
    LPRProfile,
    # Results
    PresenceCalculation,
    PresenceStatus,
    EligibilityDates,
    ContinuousResidenceWarning,
    GreenCardRiskResult,
    PhysicalPresenceImpact,
    ContinuousResidenceImpact,
    TripRiskAssessment,
    LongestTrip,
    RiskAssessment,
    ReentryPermitProtection,
    MaximumTripDurationResult,
    PatternOfNonResidence,
    RebuttablePresumption,
    LPRStatusRiskFactors,
    AdvancedLPRAssessment,
)
from lprtrack.core.trip_days import (
    count_days_abroad,
    count_days_abroad_excluding_travel,
    count_days_abroad_in_period,
    count_days_abroad_in_year,
    days_abroad_simple,
    raw_trip_length,
    collect_days_abroad,
    filter_real_trips,
)
from lprtrack.core.presence import (
    resolve_category,
    required_days_for,
    calculate_physical_presence,
    calculate_presence_status,
    calculate_eligibility_dates,
    is_eligible_for_early_filing,
    check_continuous_residence,
)
from lprtrack.core.risk import (
    Threshold,
    CONTINUOUS_RESIDENCE_TABLE,
    LPR_STATUS_TABLE,
    PERMIT_STATUS_TABLE,
    RECOMMENDATIONS,
    classify,
    classify_continuous_residence,
    calculate_green_card_abandonment_risk,
    approaches_continuous_residence_risk,
    breaks_continuous_residence,
    approaches_green_card_loss,
    risks_automatic_green_card_loss,
    assess_trip_risk,
    calculate_trip_metrics,
    assess_lpr_status_risk,
    reentry_permit_protection,
)
from lprtrack.core.max_trip import (
    calculate_maximum_trip_duration,
    calculate_maximum_trip_duration_with_exemptions,
)
from lprtrack.core.lpr_status import (
    analyze_pattern_of_non_residence,
    calculate_rebuttable_presumption,
    calculate_lpr_risk_factors,
    determine_lpr_status,
    generate_lpr_suggestions,
    assess_lpr_status_advanced,
)

__all__ = [
    # Enums
    "EligibilityCategory",
    "Gender",
    "PresenceStatusLevel",
    "ContinuousResidenceRisk",
    "LPRRiskLevel",
    "LimitingFactor",
    "LPRStatusType",
    "I751Status",
    "N470Status",
    "LPRStatusOutcome",
    # Inputs
    "Trip",
    "ReentryPermit",
    "LPRProfile",
    # Results
    "PresenceCalculation",
    "PresenceStatus",
    "EligibilityDates",
    "ContinuousResidenceWarning",
    "GreenCardRiskResult",
    "PhysicalPresenceImpact",
    "ContinuousResidenceImpact",
    "TripRiskAssessment",
    "LongestTrip",
    "RiskAssessment",
    "ReentryPermitProtection",
    "MaximumTripDurationResult",
    "PatternOfNonResidence",
    "RebuttablePresumption",
    "LPRStatusRiskFactors",
    "AdvancedLPRAssessment",
    # Day counting
    "count_days_abroad",
    "count_days_abroad_excluding_travel",
    "count_days_abroad_in_period",
    "count_days_abroad_in_year",
    "days_abroad_simple",
    "raw_trip_length",
    "collect_days_abroad",
    "filter_real_trips",
    # Presence
    "resolve_category",
    "required_days_for",
    "calculate_physical_presence",
    "calculate_presence_status",
    "calculate_eligibility_dates",
    "is_eligible_for_early_filing",
    "check_continuous_residence",
    # Risk
    "Threshold",
    "CONTINUOUS_RESIDENCE_TABLE",
    "LPR_STATUS_TABLE",
    "PERMIT_STATUS_TABLE",
    "RECOMMENDATIONS",
    "classify",
    "classify_continuous_residence",
    "calculate_green_card_abandonment_risk",
    "approaches_continuous_residence_risk",
    "breaks_continuous_residence",
    "approaches_green_card_loss",
    "risks_automatic_green_card_loss",
    "assess_trip_risk",
    "calculate_trip_metrics",
    "assess_lpr_status_risk",
    "reentry_permit_protection",
    # Max trip
    "calculate_maximum_trip_duration",
    "calculate_maximum_trip_duration_with_exemptions",
    # Advanced LPR status
    "analyze_pattern_of_non_residence",
    "calculate_rebuttable_presumption",
    "calculate_lpr_risk_factors",
    "determine_lpr_status",
    "generate_lpr_suggestions",
    "assess_lpr_status_advanced",
]

"""
Advanced LPR status assessment.

Where assess_lpr_status_risk looks at the single longest absence, this
module reads the whole history the way an officer at the border would:

    Pattern of non-residence: share of time abroad, yearly average, and how
        briefly the resident comes back between trips.
    Rebuttable presumption: a 180-364 day absence presumes abandonment
        unless evidence of U.S. ties is provided.
    Risk factors: weighted flags summed into a score that, together with
        the presumption, yields maintained / at_risk / presumed_abandoned /
        abandoned.

Suggestions are assembled from the outcome, the resident's I-751 and N-470
state and any reentry permit.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from lprtrack.constants import (
    CONDITIONAL_CARD_YEARS,
    DAYS_PER_YEAR,
    LPR_AUTOMATIC_LOSS_DAYS,
    LPR_PRESUMPTION_DAYS,
    PATTERN_FREQUENT_TRIPS,
    PATTERN_MAX_DAYS_ABROAD_PER_YEAR,
    PATTERN_MAX_PERCENT_ABROAD,
    PATTERN_SHORT_RETURN_DAYS,
    PATTERN_SHORT_STAY_DAYS,
    REENTRY_PERMIT_RENEWAL_NOTICE_DAYS,
    REMOVAL_FILING_WINDOW_DAYS,
    RISK_SCORE_ABANDONED,
    RISK_SCORE_AT_RISK,
    RISK_WEIGHT_CURRENTLY_ABROAD,
    RISK_WEIGHT_EXPIRED_PERMIT,
    RISK_WEIGHT_PATTERN,
    RISK_WEIGHT_PENDING_I751,
    RISK_WEIGHT_PRESUMPTION,
    SUGGEST_N470_SCORE,
    SUGGEST_REENTRY_PERMIT_SCORE,
)
from lprtrack.core.models import (
    AdvancedLPRAssessment,
    I751Status,
    LPRStatusOutcome,
    LPRStatusRiskFactors,
    LPRStatusType,
    N470Status,
    PatternOfNonResidence,
    RebuttablePresumption,
    ReentryPermit,
    Trip,
)
from lprtrack.core.trip_days import count_days_abroad, days_abroad_simple
from lprtrack.errors import DateRangeError
from lprtrack.utils.dates import add_years, days_between, sub_days

logger = logging.getLogger(__name__)


def _usable_trips(trips: Iterable[Trip]) -> List[Trip]:
    return [trip for trip in trips if not trip.is_simulated and trip.is_valid]


def _check_period(lpr_start_date: date, current_date: date) -> None:
    if current_date < lpr_start_date:
        raise DateRangeError(
            f"Current date {current_date} is before the LPR start date {lpr_start_date}",
            field="currentDate",
        )


# =============================================================================
# PATTERN OF NON-RESIDENCE
# =============================================================================

def analyze_pattern_of_non_residence(
    trips: Iterable[Trip],
    lpr_start_date: date,
    current_date: date,
) -> PatternOfNonResidence:
    """
    Measure how much of the period since the green card was spent abroad.

    A trip belongs to the period when it returns after lpr_start_date and
    departs before current_date; its full days abroad are counted. A pattern
    exists when any of these holds:
    - more than half the period abroad
    - more than 180 days abroad per year on average
    - more than five trips with a return stay under 30 days
    - every stay between trips under 90 days (needs two or more trips)

    Raises:
        DateRangeError: If current_date is before lpr_start_date.
    """
    _check_period(lpr_start_date, current_date)

    period_days = days_between(current_date, lpr_start_date)
    years_covered = period_days / DAYS_PER_YEAR

    ordered = sorted(_usable_trips(trips), key=lambda t: t.departure_date)
    in_period = [
        t for t in ordered
        if t.return_date > lpr_start_date and t.departure_date < current_date
    ]
    total_abroad = sum(count_days_abroad(t) for t in in_period)

    stays = [
        max(0, days_between(nxt.departure_date, prev.return_date) - 1)
        for prev, nxt in zip(in_period, in_period[1:])
    ]
    longest_stay = max(stays, default=0)
    shortest_return = min(stays, default=0)

    percentage = total_abroad / period_days * 100 if period_days > 0 else 0.0
    avg_per_year = total_abroad / years_covered if years_covered > 0 else 0.0

    has_pattern = (
        percentage > PATTERN_MAX_PERCENT_ABROAD
        or avg_per_year > PATTERN_MAX_DAYS_ABROAD_PER_YEAR
        or (len(in_period) > PATTERN_FREQUENT_TRIPS and shortest_return < PATTERN_SHORT_RETURN_DAYS)
        or (bool(stays) and longest_stay < PATTERN_SHORT_STAY_DAYS)
    )

    return PatternOfNonResidence(
        total_days_abroad=total_abroad,
        number_of_trips=len(in_period),
        years_covered=years_covered,
        percentage_time_abroad=percentage,
        avg_days_abroad_per_year=avg_per_year,
        longest_stay_in_usa=longest_stay,
        shortest_return_to_usa=shortest_return,
        has_pattern=has_pattern,
    )


# =============================================================================
# REBUTTABLE PRESUMPTION
# =============================================================================

def calculate_rebuttable_presumption(
    trips: Iterable[Trip],
    current_date: date,
    evidence_provided: bool = False,
) -> RebuttablePresumption:
    """
    Presumption of abandonment from the longest absence.

    Applies for 180-364 days abroad. days_since_last_return is None while
    any trip is still open on current_date or when the resident returned
    today.
    """
    trips = _usable_trips(trips)
    max_days = max((days_abroad_simple(t) for t in trips), default=0)

    since: Optional[int] = None
    if trips and all(t.return_date <= current_date for t in trips):
        since = min(days_between(current_date, t.return_date) for t in trips) or None

    applies = LPR_PRESUMPTION_DAYS <= max_days < LPR_AUTOMATIC_LOSS_DAYS
    if applies:
        reason = f"Absence of {max_days} days creates rebuttable presumption of abandonment"
    elif max_days >= LPR_AUTOMATIC_LOSS_DAYS:
        reason = f"Absence of {max_days} days likely results in automatic loss of LPR status"
    else:
        reason = None

    return RebuttablePresumption(
        applies=applies,
        max_days_abroad=max_days,
        days_since_last_return=since,
        evidence_provided=evidence_provided,
        reason=reason,
    )


# =============================================================================
# RISK FACTORS AND OUTCOME
# =============================================================================

def last_trip(trips: Iterable[Trip]) -> Optional[Trip]:
    """Trip with the latest return date; the first one wins a tie."""
    return max(_usable_trips(trips), key=lambda t: t.return_date, default=None)


def calculate_lpr_risk_factors(
    trips: Iterable[Trip],
    current_date: date,
    pattern: PatternOfNonResidence,
    presumption: RebuttablePresumption,
    reentry_permit: Optional[ReentryPermit] = None,
    i751_status: I751Status = I751Status.NOT_APPLICABLE,
) -> LPRStatusRiskFactors:
    latest = last_trip(trips)
    currently_abroad = (
        latest is not None and latest.departure_date < current_date < latest.return_date
    )
    expired_permit = (
        reentry_permit is not None
        and reentry_permit.has_permit
        and reentry_permit.expiration_date is not None
        and reentry_permit.expiration_date < current_date
    )
    pending_i751 = i751_status == I751Status.PENDING

    weighted = (
        (pattern.has_pattern, RISK_WEIGHT_PATTERN),
        (presumption.applies, RISK_WEIGHT_PRESUMPTION),
        (currently_abroad, RISK_WEIGHT_CURRENTLY_ABROAD),
        (expired_permit, RISK_WEIGHT_EXPIRED_PERMIT),
        (pending_i751, RISK_WEIGHT_PENDING_I751),
    )
    return LPRStatusRiskFactors(
        has_pattern_of_non_residence=pattern.has_pattern,
        has_rebuttable_presumption=presumption.applies,
        currently_abroad=currently_abroad,
        has_expired_reentry_permit=expired_permit,
        has_pending_i751=pending_i751,
        total_risk_score=sum(weight for flag, weight in weighted if flag),
    )


def determine_lpr_status(
    risk_factors: LPRStatusRiskFactors,
    presumption: RebuttablePresumption,
    has_valid_permit: bool,
) -> LPRStatusOutcome:
    """
    Outcome in order of severity.

    An absence of a year or more is abandonment regardless of score. An
    unrebutted presumption counts only when no valid permit covers it.
    """
    if presumption.max_days_abroad >= LPR_AUTOMATIC_LOSS_DAYS:
        return LPRStatusOutcome.ABANDONED
    if risk_factors.total_risk_score >= RISK_SCORE_ABANDONED:
        return LPRStatusOutcome.ABANDONED
    if presumption.applies and not presumption.evidence_provided and not has_valid_permit:
        return LPRStatusOutcome.PRESUMED_ABANDONED
    if risk_factors.total_risk_score >= RISK_SCORE_AT_RISK:
        return LPRStatusOutcome.AT_RISK
    return LPRStatusOutcome.MAINTAINED


# =============================================================================
# SUGGESTIONS
# =============================================================================

def _conditional_suggestions(
    lpr_type: LPRStatusType,
    i751_status: I751Status,
    lpr_start_date: date,
    current_date: date,
) -> List[str]:
    if lpr_type != LPRStatusType.CONDITIONAL or i751_status != I751Status.NOT_APPLICABLE:
        return []

    window_end = add_years(lpr_start_date, CONDITIONAL_CARD_YEARS)
    window_start = sub_days(window_end, REMOVAL_FILING_WINDOW_DAYS)
    if current_date > window_end:
        return [
            "URGENT: Your conditional green card may have expired",
            "Consult an immigration attorney about late I-751 filing",
        ]
    if window_start < current_date < window_end:
        return [
            "You are within the I-751 filing window",
            "File Form I-751 to remove conditions on your green card",
        ]
    return []


def _permit_suggestions(
    reentry_permit: Optional[ReentryPermit],
    risk_factors: LPRStatusRiskFactors,
    current_date: date,
) -> List[str]:
    if reentry_permit is None or not reentry_permit.has_permit:
        if risk_factors.total_risk_score >= SUGGEST_REENTRY_PERMIT_SCORE:
            return ["Consider applying for a reentry permit before future long trips"]
        return []

    if reentry_permit.expiration_date is None:
        return []
    days_left = days_between(reentry_permit.expiration_date, current_date)
    if 0 <= days_left <= REENTRY_PERMIT_RENEWAL_NOTICE_DAYS:
        return [
            f"Reentry permit expires in {days_left} days",
            "Plan to return before expiration or apply for renewal",
        ]
    return []


def generate_lpr_suggestions(
    status: LPRStatusOutcome,
    risk_factors: LPRStatusRiskFactors,
    lpr_type: LPRStatusType,
    i751_status: I751Status,
    n470_status: N470Status,
    reentry_permit: Optional[ReentryPermit],
    lpr_start_date: date,
    current_date: date,
) -> List[str]:
    suggestions = _conditional_suggestions(lpr_type, i751_status, lpr_start_date, current_date)

    if n470_status == N470Status.APPROVED:
        suggestions += [
            "N-470 exemption protects your continuous residence",
            "Continue to maintain ties to the US and meet physical presence requirements",
        ]
    elif status == LPRStatusOutcome.ABANDONED:
        suggestions += [
            "Your LPR status appears to be abandoned",
            "Apply for SB-1 Returning Resident Visa before attempting to return",
            "Consult with an immigration attorney immediately",
        ]
        return suggestions

    if status == LPRStatusOutcome.PRESUMED_ABANDONED:
        suggestions += [
            "Prepare strong evidence to overcome presumption of abandonment",
            "Document all US ties: property, employment, family, taxes",
            "Consider hiring an immigration attorney before your next entry",
        ]
    if risk_factors.has_pattern_of_non_residence:
        suggestions += [
            "Your travel pattern suggests non-residence",
            "Spend more continuous time in the US",
            "Maintain stronger US ties and documentation",
        ]

    suggestions += _permit_suggestions(reentry_permit, risk_factors, current_date)

    if n470_status == N470Status.NONE and (
        risk_factors.currently_abroad
        or risk_factors.total_risk_score >= SUGGEST_N470_SCORE
        or status != LPRStatusOutcome.MAINTAINED
    ):
        suggestions.append("If employed by qualifying US entity abroad, consider N-470 application")

    if status == LPRStatusOutcome.AT_RISK:
        suggestions += [
            "Limit future trips to under 6 months",
            "Maintain strong evidence of US residence",
        ]
    return suggestions


# =============================================================================
# FULL ASSESSMENT
# =============================================================================

def assess_lpr_status_advanced(
    trips: Iterable[Trip],
    lpr_start_date: date,
    current_date: date,
    lpr_type: LPRStatusType = LPRStatusType.PERMANENT,
    i751_status: I751Status = I751Status.NOT_APPLICABLE,
    n470_status: N470Status = N470Status.NONE,
    reentry_permit: Optional[ReentryPermit] = None,
    evidence_provided: bool = False,
) -> AdvancedLPRAssessment:
    """
    Read a travel history against every abandonment rule at once.

    Args:
        trips: Travel history. Simulated and reversed trips are ignored; a
            trip still under way is given its planned return date.
        lpr_start_date: Green card date.
        current_date: Date of the assessment.
        lpr_type: Permanent or conditional resident.
        i751_status: Removal-of-conditions filing state.
        n470_status: N-470 (preserve residence) application state.
        reentry_permit: Permit held by the resident, if any.
        evidence_provided: The resident has evidence rebutting the
            presumption of abandonment.

    Returns:
        AdvancedLPRAssessment with outcome, the three analyses and
        suggestions.

    Raises:
        DateRangeError: If current_date is before lpr_start_date.
    """
    trips = _usable_trips(trips)
    pattern = analyze_pattern_of_non_residence(trips, lpr_start_date, current_date)
    presumption = calculate_rebuttable_presumption(trips, current_date, evidence_provided)
    factors = calculate_lpr_risk_factors(
        trips, current_date, pattern, presumption, reentry_permit, i751_status
    )

    has_valid_permit = reentry_permit is not None and reentry_permit.is_valid_on(current_date)
    status = determine_lpr_status(factors, presumption, has_valid_permit)
    suggestions = generate_lpr_suggestions(
        status,
        factors,
        lpr_type,
        i751_status,
        n470_status,
        reentry_permit,
        lpr_start_date,
        current_date,
    )

    latest = last_trip(trips)
    logger.debug(
        f"Advanced LPR assessment: {status.value} (score {factors.total_risk_score}, "
        f"{pattern.number_of_trips} trips)"
    )
    return AdvancedLPRAssessment(
        current_status=status,
        lpr_type=lpr_type,
        i751_status=i751_status,
        n470_status=n470_status,
        has_reentry_permit=has_valid_permit,
        last_entry_date=latest.return_date if latest else None,
        pattern_analysis=pattern,
        rebuttable_presumption=presumption,
        risk_factors=factors,
        suggestions=suggestions,
    )

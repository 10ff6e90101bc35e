"""
Maximum safe trip duration.

Inverts the risk thresholds: given the trips already taken, how many more
days can be spent abroad before the closest of three limits is reached?

    physical presence     (period * 365 - required) - days used - buffer
    continuous residence  149 (one day below the 150-day warning)
    LPR status            149, or 669 with a valid reentry permit

The smallest wins and is reported as the limiting factor. Physical
presence wins ties.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Union

from lprtrack.config import DEFAULT_CONFIG, EngineConfig
from lprtrack.constants import (
    CONTINUOUS_RESIDENCE_WARNING_DAYS,
    DAYS_PER_YEAR,
    ELIGIBILITY_YEARS,
    LPR_MARGIN_WARNING_DAYS,
    MAX_SAFE_CONTINUOUS_RESIDENCE_DAYS,
    MAX_SAFE_LPR_DAYS,
    MAX_SAFE_PERMIT_DAYS,
    N470_MAX_PROTECTED_DAYS,
    PERMIT_MARGIN_WARNING_DAYS,
    PHYSICAL_PRESENCE_MARGIN_WARNING_DAYS,
)
from lprtrack.core.models import (
    EligibilityCategory,
    LimitingFactor,
    MaximumTripDurationResult,
    ReentryPermit,
    Trip,
)
from lprtrack.core.presence import required_days_for, resolve_category
from lprtrack.core.trip_days import days_abroad_simple, filter_real_trips

logger = logging.getLogger(__name__)

WARNING_ALREADY_AT_RISK = [
    "You already have trips that put your continuous residence at risk",
    "Consult with an immigration attorney before any additional travel",
]
WARNING_PERMIT_SCOPE = (
    "Reentry permit protects LPR status but does not protect continuous residence for naturalization"
)
WARNING_PHYSICAL_PRESENCE = "You are approaching your physical presence limit for naturalization"
WARNING_PERMIT_LIMIT = "You are approaching the maximum reentry permit protection period"
WARNING_LPR_INTENT = "Extended absence may raise questions about permanent resident intent"
WARNINGS_N470 = [
    "N-470 exemption protects continuous residence but not physical presence",
    "You must still meet physical presence requirements for naturalization",
]


def has_risky_trips(trips: Iterable[Trip]) -> bool:
    """True when any trip already reaches the continuous-residence warning level."""
    return any(days_abroad_simple(t) >= CONTINUOUS_RESIDENCE_WARNING_DAYS for t in trips)


def total_days_abroad_since(trips: Iterable[Trip], green_card_date: date) -> int:
    """Days abroad on trips that ended after the green card date."""
    return sum(days_abroad_simple(t) for t in trips if t.return_date > green_card_date)


def _select_limiting_factor(result: MaximumTripDurationResult, has_permit: bool) -> None:
    pp = result.physical_presence_safety_days
    cr = result.continuous_residence_safety_days
    lpr = result.lpr_status_safety_days

    if pp <= cr and pp <= lpr:
        result.maximum_days = pp
        result.limiting_factor = LimitingFactor.PHYSICAL_PRESENCE
        if pp < PHYSICAL_PRESENCE_MARGIN_WARNING_DAYS:
            result.warnings.append(WARNING_PHYSICAL_PRESENCE)
    elif cr <= lpr:
        result.maximum_days = cr
        result.limiting_factor = LimitingFactor.CONTINUOUS_RESIDENCE_APPROACHING
    elif has_permit:
        result.maximum_days = lpr
        result.limiting_factor = LimitingFactor.REENTRY_PERMIT_APPROACHING_LIMIT
        if lpr < PERMIT_MARGIN_WARNING_DAYS:
            result.warnings.append(WARNING_PERMIT_LIMIT)
    else:
        result.maximum_days = lpr
        result.limiting_factor = LimitingFactor.LPR_STATUS_WARNING
        if lpr < LPR_MARGIN_WARNING_DAYS:
            result.warnings.append(WARNING_LPR_INTENT)


def calculate_maximum_trip_duration(
    existing_trips: Iterable[Trip],
    green_card_date: date,
    category: Union[EligibilityCategory, str],
    current_date: date,
    reentry_permit: Optional[ReentryPermit] = None,
    config: Optional[EngineConfig] = None,
) -> MaximumTripDurationResult:
    """
    Longest additional trip that keeps every status safe.

    Args:
        existing_trips: Trips already taken (simulated trips are ignored).
        green_card_date: Start of the naturalization period.
        category: "three_year" or "five_year".
        current_date: Date of the query; decides permit validity.
        reentry_permit: Permit held by the resident, if any.
        config: Supplies the physical-presence safety buffer.

    Returns:
        MaximumTripDurationResult naming the limiting factor. If any existing
        trip already reaches 150 days abroad the result is 0 days with
        limiting factor "already_at_risk".

    Raises:
        DomainValidationError: If category is not a known eligibility path.
    """
    config = config or DEFAULT_CONFIG
    category = resolve_category(category)
    trips = filter_real_trips(existing_trips)

    result = MaximumTripDurationResult(
        maximum_days=0,
        limiting_factor=LimitingFactor.PHYSICAL_PRESENCE,
        physical_presence_safety_days=0,
        continuous_residence_safety_days=0,
        lpr_status_safety_days=0,
    )

    if has_risky_trips(trips):
        result.limiting_factor = LimitingFactor.ALREADY_AT_RISK
        result.warnings.extend(WARNING_ALREADY_AT_RISK)
        logger.info("Existing travel already puts continuous residence at risk")
        return result

    days_in_period = ELIGIBILITY_YEARS[category.value] * DAYS_PER_YEAR
    allowable_absence = days_in_period - required_days_for(category)
    remaining = allowable_absence - total_days_abroad_since(trips, green_card_date)

    has_permit = reentry_permit is not None and reentry_permit.is_valid_on(current_date)

    result.physical_presence_safety_days = max(0, remaining - config.physical_presence_buffer_days)
    result.continuous_residence_safety_days = MAX_SAFE_CONTINUOUS_RESIDENCE_DAYS
    result.lpr_status_safety_days = MAX_SAFE_PERMIT_DAYS if has_permit else MAX_SAFE_LPR_DAYS

    if has_permit:
        result.warnings.append(WARNING_PERMIT_SCOPE)

    _select_limiting_factor(result, has_permit)
    logger.debug(
        f"Maximum safe trip: {result.maximum_days} days "
        f"(limited by {result.limiting_factor.value})"
    )
    return result


def calculate_maximum_trip_duration_with_exemptions(
    existing_trips: Iterable[Trip],
    green_card_date: date,
    category: Union[EligibilityCategory, str],
    current_date: date,
    reentry_permit: Optional[ReentryPermit] = None,
    n470_approved: bool = False,
    config: Optional[EngineConfig] = None,
) -> MaximumTripDurationResult:
    """
    Maximum safe trip when an approved N-470 preserves continuous residence.

    The N-470 lifts the continuous-residence limit to 730 days; the limiting
    factor is then re-selected between physical presence and LPR status.
    """
    result = calculate_maximum_trip_duration(
        existing_trips,
        green_card_date,
        category,
        current_date,
        reentry_permit,
        config,
    )
    if not n470_approved or result.limiting_factor == LimitingFactor.ALREADY_AT_RISK:
        return result

    has_permit = reentry_permit is not None and reentry_permit.is_valid_on(current_date)
    result.continuous_residence_safety_days = N470_MAX_PROTECTED_DAYS

    # Margin warnings are re-derived by the second selection
    margin_warnings = {WARNING_PHYSICAL_PRESENCE, WARNING_PERMIT_LIMIT, WARNING_LPR_INTENT}
    warnings: List[str] = [w for w in result.warnings if w not in margin_warnings]
    result.warnings = warnings + WARNINGS_N470
    _select_limiting_factor(result, has_permit)
    return result

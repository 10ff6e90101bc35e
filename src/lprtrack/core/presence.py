"""
Physical presence aggregator.

Merges a travel history into days in the U.S. vs. days abroad over an
interval, then measures that against the naturalization requirement:
- calculate_physical_presence: deduplicated day counting across trips
- calculate_presence_status: progress toward 548 / 913 days
- calculate_eligibility_dates: N-400 eligibility and early filing dates
- check_continuous_residence: per-trip warnings for long absences
"""

import logging
from datetime import date
from typing import Iterable, List, Set, Union

from lprtrack.constants import (
    CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS,
    CONTINUOUS_RESIDENCE_WARNING_DAYS,
    EARLY_FILING_WINDOW_DAYS,
    ELIGIBILITY_YEARS,
    REQUIRED_PRESENCE_DAYS,
)
from lprtrack.core.models import (
    ContinuousResidenceWarning,
    EligibilityCategory,
    EligibilityDates,
    PresenceCalculation,
    PresenceStatus,
    PresenceStatusLevel,
    Trip,
)
from lprtrack.core.trip_days import collect_days_abroad, raw_trip_length
from lprtrack.errors import DomainValidationError
from lprtrack.utils.dates import add_years, inclusive_span, sub_days

logger = logging.getLogger(__name__)


def resolve_category(category: Union[EligibilityCategory, str]) -> EligibilityCategory:
    """
    Accept an EligibilityCategory or its string value.

    Raises:
        DomainValidationError: If the value names no known category.
    """
    if isinstance(category, EligibilityCategory):
        return category
    try:
        return EligibilityCategory(category)
    except ValueError:
        raise DomainValidationError(
            f"Unknown eligibility category: {category!r}",
            field="eligibilityCategory",
            details={"allowed": [c.value for c in EligibilityCategory]},
        ) from None


def required_days_for(category: Union[EligibilityCategory, str]) -> int:
    return REQUIRED_PRESENCE_DAYS[resolve_category(category).value]


# =============================================================================
# DAY COUNTING
# =============================================================================

def calculate_physical_presence(
    trips: Iterable[Trip],
    start_date: date,
    end_date: date,
) -> PresenceCalculation:
    """
    Count days in the U.S. and abroad over [start_date, end_date].

    Overlapping trips never count a day twice. Simulated trips and trips
    whose return precedes departure are ignored. An inverted interval
    yields the zero vector rather than an error.

    Args:
        trips: Travel history.
        start_date: First day of the interval (inclusive).
        end_date: Last day of the interval (inclusive).

    Returns:
        PresenceCalculation where in_usa + abroad equals the interval length.
    """
    if start_date > end_date:
        return PresenceCalculation(total_days_in_usa=0, total_days_abroad=0)

    total_days = inclusive_span(start_date, end_date)
    days_abroad: Set[str] = set()

    for trip in trips:
        if trip.is_simulated or not trip.is_valid:
            continue
        if trip.return_date < start_date or trip.departure_date > end_date:
            continue
        collect_days_abroad(trip, start_date, end_date, days_abroad)

    total_abroad = len(days_abroad)
    result = PresenceCalculation(
        total_days_in_usa=max(0, total_days - total_abroad),
        total_days_abroad=total_abroad,
    )
    logger.debug(
        f"Presence {start_date}..{end_date}: {result.total_days_in_usa} in USA, "
        f"{result.total_days_abroad} abroad"
    )
    return result


# =============================================================================
# STATUS
# =============================================================================

def calculate_presence_status(
    total_days_in_usa: int,
    category: Union[EligibilityCategory, str],
) -> PresenceStatus:
    """
    Progress toward the physical-presence requirement.

    Percentage is rounded to one decimal and capped at 100; days remaining
    never goes negative. Negative inputs are treated as zero.
    """
    required = required_days_for(category)
    days = max(0, total_days_in_usa)

    percentage = min(100.0, round(days / required * 100, 1))
    remaining = max(0, required - days)
    status = (
        PresenceStatusLevel.REQUIREMENT_MET if days >= required
        else PresenceStatusLevel.ON_TRACK
    )
    return PresenceStatus(
        required_days=required,
        percentage_complete=percentage,
        days_remaining=remaining,
        status=status,
    )


def calculate_eligibility_dates(
    green_card_date: date,
    category: Union[EligibilityCategory, str],
) -> EligibilityDates:
    """
    N-400 eligibility date and earliest filing date.

    The eligibility date is the day before the 3rd/5th anniversary of the
    green card date. When the anniversary had to be clamped (a Feb 29 card
    in a non-leap target year) the clamped Feb 28 is used as is. Filing may
    start 90 days earlier.

    Example:
        >>> calculate_eligibility_dates(date(2020, 1, 15), "five_year")
        EligibilityDates(eligibility_date=datetime.date(2025, 1, 14),
                         earliest_filing_date=datetime.date(2024, 10, 16))
    """
    years = ELIGIBILITY_YEARS[resolve_category(category).value]
    anniversary = add_years(green_card_date, years)

    if anniversary.day != green_card_date.day:
        eligibility = anniversary
    else:
        eligibility = sub_days(anniversary, 1)

    return EligibilityDates(
        eligibility_date=eligibility,
        earliest_filing_date=sub_days(eligibility, EARLY_FILING_WINDOW_DAYS),
    )


def is_eligible_for_early_filing(
    green_card_date: date,
    category: Union[EligibilityCategory, str],
    as_of: date,
) -> bool:
    dates = calculate_eligibility_dates(green_card_date, category)
    return as_of >= dates.earliest_filing_date


# =============================================================================
# CONTINUOUS RESIDENCE WARNINGS
# =============================================================================

def check_continuous_residence(trips: Iterable[Trip]) -> List[ContinuousResidenceWarning]:
    """
    Flag trips long enough to threaten continuous residence.

    Uses the plain difference between return and departure dates. Simulated
    trips and trips without an id are skipped.
    """
    warnings: List[ContinuousResidenceWarning] = []

    for trip in trips:
        if trip.is_simulated or not trip.id:
            continue

        days_abroad = raw_trip_length(trip)
        if days_abroad >= CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS:
            warnings.append(ContinuousResidenceWarning(
                trip_id=trip.id,
                days_abroad=days_abroad,
                message=(
                    f"This trip of {days_abroad} days exceeds "
                    f"{CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS} days and may break continuous residence"
                ),
                severity="high",
            ))
        elif days_abroad >= CONTINUOUS_RESIDENCE_WARNING_DAYS:
            warnings.append(ContinuousResidenceWarning(
                trip_id=trip.id,
                days_abroad=days_abroad,
                message=(
                    f"This trip of {days_abroad} days is approaching the "
                    f"{CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS}-day limit for continuous residence"
                ),
                severity="medium",
            ))

    return warnings

"""
Validated entry points.

Every public calculation has a safe_* counterpart here that takes raw
input (ISO date strings, enum values, dicts with camelCase or snake_case
keys, or the engine's own dataclasses), validates it with the pydantic
models in lprtrack.schemas.inputs, and returns a Result instead of
raising:

    result = safe_calculate_presence_status(913, "five_year")
    if not result.success:
        print(result.error.code, result.error.field)

Validation failures carry the path of the offending field
("trips.0.returnDate"). Compliance results are returned whole or not at
all.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from lprtrack.analytics import (
    annual_travel_summary,
    calculate_travel_streaks,
    country_statistics,
    days_abroad_by_year,
)
from lprtrack.compliance.coordinator import (
    calculate_comprehensive_compliance,
    get_active_compliance_items,
    get_priority_compliance_items,
    get_upcoming_deadlines,
)
from lprtrack.compliance.green_card_renewal import calculate_green_card_renewal_status
from lprtrack.compliance.models import ComplianceReport, ComprehensiveComplianceStatus
from lprtrack.compliance.removal_of_conditions import calculate_removal_of_conditions_status
from lprtrack.compliance.selective_service import calculate_selective_service_status
from lprtrack.compliance.tax_filing import calculate_tax_reminder_status
from lprtrack.config import EngineConfig
from lprtrack.core.lpr_status import analyze_pattern_of_non_residence, assess_lpr_status_advanced
from lprtrack.core.max_trip import (
    calculate_maximum_trip_duration,
    calculate_maximum_trip_duration_with_exemptions,
)
from lprtrack.core.models import LPRProfile, ReentryPermit, Trip
from lprtrack.core.presence import (
    calculate_eligibility_dates,
    calculate_physical_presence,
    calculate_presence_status,
    check_continuous_residence,
)
from lprtrack.core.risk import (
    assess_lpr_status_risk,
    assess_trip_risk,
    calculate_green_card_abandonment_risk,
)
from lprtrack.core.trip_days import (
    count_days_abroad,
    count_days_abroad_in_period,
    count_days_abroad_in_year,
)
from lprtrack.errors import (
    CalculationError,
    ComplianceCalculationError,
    DateRangeError,
    DomainValidationError,
    LPRStatusError,
    LPRTrackError,
    Result,
    combine_results,
    err,
    map_result,
    ok,
)
from lprtrack.planning import (
    assess_upcoming_trip_risk,
    calculate_milestones,
    calculate_safe_travel_budget,
    project_eligibility_date,
)
from lprtrack.schemas.inputs import (
    AbandonmentRiskRequest,
    AdvancedLPRStatusRequest,
    AnalyticsRequest,
    AnnualSummaryRequest,
    ComplianceRequest,
    DeadlinesRequest,
    EligibilityRequest,
    LPRStatusRiskRequest,
    MaximumTripRequest,
    MilestonesRequest,
    PatternRequest,
    PresenceRequest,
    PresenceStatusRequest,
    ProjectionRequest,
    RemovalOfConditionsRequest,
    RenewalRequest,
    SelectiveServiceRequest,
    StreaksRequest,
    TaxReminderRequest,
    TravelBudgetRequest,
    TripDaysRequest,
    TripRiskRequest,
    TripsRequest,
    UpcomingTripRiskRequest,
)

logger = logging.getLogger(__name__)

# pydantic error types that mean "well-formed but out of bounds"
RANGE_ERROR_TYPES = {
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
}


# =============================================================================
# ERROR CONVERSION
# =============================================================================

def _field_path(loc: Sequence[Any], own_field: Optional[str] = None) -> Optional[str]:
    parts = [str(part) for part in loc]
    if own_field and (not parts or parts[-1] != own_field):
        parts.append(own_field)
    return ".".join(parts) or None


def validation_error_to_lprtrack(exc: ValidationError) -> LPRTrackError:
    """
    Convert a pydantic ValidationError into the engine's error taxonomy.

    The first reported problem decides the error type and field; every
    problem is listed under details["errors"].
    """
    problems = exc.errors()
    summary = [
        {"field": _field_path(p["loc"]), "type": p["type"], "message": p["msg"]}
        for p in problems
    ]
    first = problems[0]
    cause = first.get("ctx", {}).get("error")

    if isinstance(cause, LPRTrackError):
        details = dict(cause.details)
        details["errors"] = summary
        return type(cause)(
            cause.message,
            field=_field_path(first["loc"], cause.field),
            details=details,
        )

    error_cls = DateRangeError if first["type"] in RANGE_ERROR_TYPES else DomainValidationError
    return error_cls(first["msg"], field=_field_path(first["loc"]), details={"errors": summary})


def _raw(value: Any) -> Any:
    """
    Engine dataclasses become camelCase dicts so pydantic can re-validate
    them and report field paths in the same style as API input.
    """
    if isinstance(value, (Trip, ReentryPermit, LPRProfile)):
        return {to_camel(key): item for key, item in value.to_dict().items()}
    if isinstance(value, (list, tuple)):
        return [_raw(item) for item in value]
    return value


def _run(
    name: str,
    schema: Type[BaseModel],
    raw: Dict[str, Any],
    compute: Callable[[Any], Any],
    failure: Type[CalculationError] = CalculationError,
) -> Result:
    try:
        request = schema.model_validate({to_camel(key): _raw(value) for key, value in raw.items()})
    except ValidationError as exc:
        error = validation_error_to_lprtrack(exc)
        logger.debug(f"{name}: rejected input ({error.code} at {error.field})")
        return err(error, operation=name)

    try:
        return ok(compute(request))
    except LPRTrackError as exc:
        logger.debug(f"{name}: {exc.code} {exc.message}")
        return err(exc, operation=name)
    except (OverflowError, ValueError) as exc:
        # date arithmetic stepped outside years 1..9999
        logger.warning(f"{name}: date out of range: {exc}")
        return err(
            DateRangeError(f"Date out of supported range: {exc}", details={"cause": str(exc)}),
            operation=name,
        )
    except ArithmeticError as exc:
        logger.warning(f"{name}: calculation failed: {exc}")
        return err(failure(str(exc)), operation=name)


def _permit(request: Any) -> Optional[ReentryPermit]:
    if request.reentry_permit is None:
        return None
    return request.reentry_permit.to_permit()


def _trips(inputs: Sequence[Any]) -> List[Trip]:
    return [item.to_trip() for item in inputs]


# =============================================================================
# TRIP DAYS
# =============================================================================

def safe_count_days_abroad(
    trip: Any,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> Result:
    return _run(
        "count_days_abroad",
        TripDaysRequest,
        {
            "trip": trip,
            "include_departure_day": include_departure_day,
            "include_return_day": include_return_day,
        },
        lambda r: count_days_abroad(
            r.trip.to_trip(), r.include_departure_day, r.include_return_day
        ),
    )


def safe_count_days_abroad_in_period(
    trip: Any,
    period_start: Any,
    period_end: Any,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> Result:
    return _run(
        "count_days_abroad_in_period",
        TripDaysRequest,
        {
            "trip": trip,
            "period_start": period_start,
            "period_end": period_end,
            "include_departure_day": include_departure_day,
            "include_return_day": include_return_day,
        },
        lambda r: count_days_abroad_in_period(
            r.trip.to_trip(),
            r.period_start,
            r.period_end,
            r.include_departure_day,
            r.include_return_day,
        ),
    )


def safe_count_days_abroad_in_year(
    trip: Any,
    year: Any,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> Result:
    return _run(
        "count_days_abroad_in_year",
        TripDaysRequest,
        {
            "trip": trip,
            "year": year,
            "include_departure_day": include_departure_day,
            "include_return_day": include_return_day,
        },
        lambda r: count_days_abroad_in_year(
            r.trip.to_trip(), r.year, r.include_departure_day, r.include_return_day
        ),
    )


# =============================================================================
# PRESENCE
# =============================================================================

def safe_calculate_physical_presence(trips: Any, start_date: Any, end_date: Any) -> Result:
    """Unlike the core function, a reversed range is a DateRangeError here."""
    return _run(
        "calculate_physical_presence",
        PresenceRequest,
        {"trips": trips, "start_date": start_date, "end_date": end_date},
        lambda r: calculate_physical_presence(_trips(r.trips), r.start_date, r.end_date),
    )


def safe_calculate_presence_status(total_days_in_usa: Any, category: Any) -> Result:
    return _run(
        "calculate_presence_status",
        PresenceStatusRequest,
        {"total_days_in_usa": total_days_in_usa, "category": category},
        lambda r: calculate_presence_status(r.total_days_in_usa, r.category),
    )


def safe_calculate_eligibility_dates(green_card_date: Any, category: Any) -> Result:
    return _run(
        "calculate_eligibility_dates",
        EligibilityRequest,
        {"green_card_date": green_card_date, "category": category},
        lambda r: calculate_eligibility_dates(r.green_card_date, r.category),
    )


def safe_check_continuous_residence(trips: Any) -> Result:
    return _run(
        "check_continuous_residence",
        TripsRequest,
        {"trips": trips},
        lambda r: check_continuous_residence(_trips(r.trips)),
    )


# =============================================================================
# RISK
# =============================================================================

def safe_calculate_green_card_abandonment_risk(
    days_abroad: Any,
    has_reentry_permit: Any = False,
) -> Result:
    return _run(
        "calculate_green_card_abandonment_risk",
        AbandonmentRiskRequest,
        {"days_abroad": days_abroad, "has_reentry_permit": has_reentry_permit},
        lambda r: calculate_green_card_abandonment_risk(r.days_abroad, r.has_reentry_permit),
        LPRStatusError,
    )


def safe_assess_trip_risk(trip: Any, current_date: Any, reentry_permit: Any = None) -> Result:
    return _run(
        "assess_trip_risk",
        TripRiskRequest,
        {"trip": trip, "current_date": current_date, "reentry_permit": reentry_permit},
        lambda r: assess_trip_risk(r.trip.to_trip(), r.current_date, _permit(r)),
        LPRStatusError,
    )


def safe_assess_lpr_status_risk(
    trips: Any,
    current_date: Any,
    reentry_permit: Any = None,
    include_simulated: bool = False,
) -> Result:
    return _run(
        "assess_lpr_status_risk",
        LPRStatusRiskRequest,
        {
            "trips": trips,
            "current_date": current_date,
            "reentry_permit": reentry_permit,
            "include_simulated": include_simulated,
        },
        lambda r: assess_lpr_status_risk(
            _trips(r.trips), r.current_date, _permit(r), r.include_simulated
        ),
        LPRStatusError,
    )


def safe_calculate_maximum_trip_duration(
    existing_trips: Any,
    green_card_date: Any,
    category: Any,
    current_date: Any,
    reentry_permit: Any = None,
    n470_approved: bool = False,
    config: Optional[EngineConfig] = None,
) -> Result:
    """Routes to the N-470 variant when n470_approved is set."""

    def compute(r: MaximumTripRequest):
        args = (
            _trips(r.existing_trips),
            r.green_card_date,
            r.category,
            r.current_date,
            _permit(r),
        )
        if r.n470_approved:
            return calculate_maximum_trip_duration_with_exemptions(
                *args, n470_approved=True, config=config
            )
        return calculate_maximum_trip_duration(*args, config=config)

    return _run(
        "calculate_maximum_trip_duration",
        MaximumTripRequest,
        {
            "existing_trips": existing_trips,
            "green_card_date": green_card_date,
            "category": category,
            "current_date": current_date,
            "reentry_permit": reentry_permit,
            "n470_approved": n470_approved,
        },
        compute,
    )


# =============================================================================
# COMPLIANCE AREAS
# =============================================================================

def safe_calculate_removal_of_conditions_status(
    is_conditional_resident: Any,
    green_card_date: Any,
    current_date: Any,
    filing_status: Any = None,
) -> Result:
    return _run(
        "calculate_removal_of_conditions_status",
        RemovalOfConditionsRequest,
        {
            "is_conditional_resident": is_conditional_resident,
            "green_card_date": green_card_date,
            "current_date": current_date,
            "filing_status": filing_status,
        },
        lambda r: calculate_removal_of_conditions_status(
            r.is_conditional_resident, r.green_card_date, r.current_date, r.filing_status
        ),
        ComplianceCalculationError,
    )


def safe_calculate_green_card_renewal_status(expiration_date: Any, current_date: Any) -> Result:
    return _run(
        "calculate_green_card_renewal_status",
        RenewalRequest,
        {"expiration_date": expiration_date, "current_date": current_date},
        lambda r: calculate_green_card_renewal_status(r.expiration_date, r.current_date),
        ComplianceCalculationError,
    )


def safe_calculate_selective_service_status(
    birth_date: Any,
    gender: Any,
    is_registered: Any,
    current_date: Any,
) -> Result:
    return _run(
        "calculate_selective_service_status",
        SelectiveServiceRequest,
        {
            "birth_date": birth_date,
            "gender": gender,
            "is_registered": is_registered,
            "current_date": current_date,
        },
        lambda r: calculate_selective_service_status(
            r.birth_date, r.gender, r.is_registered, r.current_date
        ),
        ComplianceCalculationError,
    )


def safe_calculate_tax_reminder_status(
    trips: Any,
    reminder_dismissed: Any,
    current_date: Any,
) -> Result:
    return _run(
        "calculate_tax_reminder_status",
        TaxReminderRequest,
        {"trips": trips, "reminder_dismissed": reminder_dismissed, "current_date": current_date},
        lambda r: calculate_tax_reminder_status(
            _trips(r.trips), r.reminder_dismissed, r.current_date
        ),
        ComplianceCalculationError,
    )


# =============================================================================
# COORDINATOR
# =============================================================================

def safe_calculate_comprehensive_compliance(
    profile: Any,
    trips: Any,
    current_date: Any,
    filing_status: Any = None,
) -> Result:
    """
    All four compliance areas, or an error.

    Args:
        profile: LPRProfile or a dict of profile fields.
        trips: Trips or trip dicts.
        current_date: Shared evaluation date.
        filing_status: Optional I-751 "filed" / "approved" override.

    Returns:
        Ok(ComprehensiveComplianceStatus) or Err naming the failed field.
        A partially computed status is never returned.
    """
    return _run(
        "calculate_comprehensive_compliance",
        ComplianceRequest,
        {
            "profile": profile,
            "trips": trips,
            "current_date": current_date,
            "filing_status": filing_status,
        },
        lambda r: calculate_comprehensive_compliance(
            r.profile.to_profile(), _trips(r.trips), r.current_date, r.filing_status
        ),
        ComplianceCalculationError,
    )


def _check_status(compliance: Any) -> Optional[ComplianceCalculationError]:
    if isinstance(compliance, ComprehensiveComplianceStatus):
        return None
    return ComplianceCalculationError(
        f"Expected ComprehensiveComplianceStatus, got {type(compliance).__name__}",
        field="compliance",
    )


def safe_get_active_compliance_items(
    compliance: Any,
    config: Optional[EngineConfig] = None,
) -> Result:
    error = _check_status(compliance)
    if error is not None:
        return err(error, operation="get_active_compliance_items")
    return ok(get_active_compliance_items(compliance, config))


def safe_get_priority_compliance_items(
    compliance: Any,
    config: Optional[EngineConfig] = None,
) -> Result:
    error = _check_status(compliance)
    if error is not None:
        return err(error, operation="get_priority_compliance_items")
    return ok(get_priority_compliance_items(compliance, config))


def safe_get_upcoming_deadlines(
    compliance: Any,
    current_date: Any,
    horizon_days: Any = None,
) -> Result:
    error = _check_status(compliance)
    if error is not None:
        return err(error, operation="get_upcoming_deadlines")
    return _run(
        "get_upcoming_deadlines",
        DeadlinesRequest,
        {"current_date": current_date, "horizon_days": horizon_days},
        lambda r: get_upcoming_deadlines(compliance, r.current_date, r.horizon_days),
        ComplianceCalculationError,
    )


def safe_full_compliance_report(
    profile: Any,
    trips: Any,
    current_date: Any,
    filing_status: Any = None,
    reentry_permit: Any = None,
    horizon_days: Any = None,
    config: Optional[EngineConfig] = None,
) -> Result:
    """
    Compliance status, derived item lists and travel risk in one Result.

    Chains the safe wrappers; the first failure is returned as is.
    horizon_days falls back to config.upcoming_deadline_horizon_days.
    """
    status_result = safe_calculate_comprehensive_compliance(
        profile, trips, current_date, filing_status
    )
    if not status_result.success:
        return status_result

    status: ComprehensiveComplianceStatus = status_result.data
    if horizon_days is None and config is not None:
        horizon_days = config.upcoming_deadline_horizon_days

    parts = combine_results([
        safe_get_active_compliance_items(status, config),
        safe_get_priority_compliance_items(status, config),
        safe_get_upcoming_deadlines(status, current_date, horizon_days),
        safe_assess_lpr_status_risk(trips, current_date, reentry_permit),
    ])
    return map_result(
        parts,
        lambda values: ComplianceReport(
            status=status,
            active_items=values[0],
            priority_items=values[1],
            upcoming_deadlines=values[2],
            risk=values[3],
        ),
    )


# =============================================================================
# ANALYTICS
# =============================================================================

def safe_days_abroad_by_year(trips: Any, start_date: Any, end_date: Any) -> Result:
    return _run(
        "days_abroad_by_year",
        AnalyticsRequest,
        {"trips": trips, "start_date": start_date, "end_date": end_date},
        lambda r: days_abroad_by_year(_trips(r.trips), r.start_date, r.end_date),
    )


def safe_country_statistics(trips: Any) -> Result:
    return _run(
        "country_statistics",
        TripsRequest,
        {"trips": trips},
        lambda r: country_statistics(_trips(r.trips)),
    )


def safe_annual_travel_summary(
    trips: Any,
    year: Any,
    compare_with_previous_year: bool = True,
) -> Result:
    """The comparison year is taken from the same trip history."""

    def compute(r: AnnualSummaryRequest):
        history = _trips(r.trips)
        previous = history if r.compare_with_previous_year else None
        return annual_travel_summary(history, r.year, previous)

    return _run(
        "annual_travel_summary",
        AnnualSummaryRequest,
        {
            "trips": trips,
            "year": year,
            "compare_with_previous_year": compare_with_previous_year,
        },
        compute,
    )


def safe_calculate_travel_streaks(trips: Any, green_card_date: Any, current_date: Any) -> Result:
    return _run(
        "calculate_travel_streaks",
        StreaksRequest,
        {"trips": trips, "green_card_date": green_card_date, "current_date": current_date},
        lambda r: calculate_travel_streaks(_trips(r.trips), r.green_card_date, r.current_date),
    )


# =============================================================================
# PLANNING
# =============================================================================

def safe_calculate_safe_travel_budget(
    total_days_abroad: Any,
    category: Any,
    green_card_date: Any,
) -> Result:
    return _run(
        "calculate_safe_travel_budget",
        TravelBudgetRequest,
        {
            "total_days_abroad": total_days_abroad,
            "category": category,
            "green_card_date": green_card_date,
        },
        lambda r: calculate_safe_travel_budget(r.total_days_abroad, r.category, r.green_card_date),
    )


def safe_assess_upcoming_trip_risk(
    upcoming_trips: Any,
    current_total_days_abroad: Any,
    category: Any,
    green_card_date: Any,
) -> Result:
    return _run(
        "assess_upcoming_trip_risk",
        UpcomingTripRiskRequest,
        {
            "upcoming_trips": upcoming_trips,
            "current_total_days_abroad": current_total_days_abroad,
            "category": category,
            "green_card_date": green_card_date,
        },
        lambda r: assess_upcoming_trip_risk(
            _trips(r.upcoming_trips), r.current_total_days_abroad, r.category, r.green_card_date
        ),
    )


def safe_project_eligibility_date(
    trips: Any,
    total_days_in_usa: Any,
    category: Any,
    green_card_date: Any,
    current_date: Any,
) -> Result:
    return _run(
        "project_eligibility_date",
        ProjectionRequest,
        {
            "trips": trips,
            "total_days_in_usa": total_days_in_usa,
            "category": category,
            "green_card_date": green_card_date,
            "current_date": current_date,
        },
        lambda r: project_eligibility_date(
            _trips(r.trips), r.total_days_in_usa, r.category, r.green_card_date, r.current_date
        ),
    )


def safe_calculate_milestones(
    total_days_in_usa: Any,
    category: Any,
    green_card_date: Any,
    current_date: Any,
) -> Result:
    return _run(
        "calculate_milestones",
        MilestonesRequest,
        {
            "total_days_in_usa": total_days_in_usa,
            "category": category,
            "green_card_date": green_card_date,
            "current_date": current_date,
        },
        lambda r: calculate_milestones(
            r.total_days_in_usa, r.category, r.green_card_date, r.current_date
        ),
    )


# =============================================================================
# ADVANCED LPR STATUS
# =============================================================================

def safe_analyze_pattern_of_non_residence(
    trips: Any,
    lpr_start_date: Any,
    current_date: Any,
) -> Result:
    return _run(
        "analyze_pattern_of_non_residence",
        PatternRequest,
        {"trips": trips, "lpr_start_date": lpr_start_date, "current_date": current_date},
        lambda r: analyze_pattern_of_non_residence(
            _trips(r.trips), r.lpr_start_date, r.current_date
        ),
        LPRStatusError,
    )


def safe_assess_lpr_status_advanced(
    trips: Any,
    lpr_start_date: Any,
    current_date: Any,
    lpr_type: Any = "permanent",
    i751_status: Any = "not_applicable",
    n470_status: Any = "none",
    reentry_permit: Any = None,
    evidence_provided: Any = False,
) -> Result:
    """
    Pattern, presumption and risk-factor assessment.

    Args:
        trips: Trips or trip dicts.
        lpr_start_date: Green card date.
        current_date: Date of the assessment.
        lpr_type: "permanent" or "conditional".
        i751_status: "not_applicable", "pending", "approved" or "denied".
        n470_status: "none", "pending" or "approved".
        reentry_permit: ReentryPermit or a permit dict.
        evidence_provided: Evidence rebutting abandonment is on hand.

    Returns:
        Ok(AdvancedLPRAssessment) or Err naming the failed field.
    """
    return _run(
        "assess_lpr_status_advanced",
        AdvancedLPRStatusRequest,
        {
            "trips": trips,
            "lpr_start_date": lpr_start_date,
            "current_date": current_date,
            "lpr_type": lpr_type,
            "i751_status": i751_status,
            "n470_status": n470_status,
            "reentry_permit": reentry_permit,
            "evidence_provided": evidence_provided,
        },
        lambda r: assess_lpr_status_advanced(
            _trips(r.trips),
            r.lpr_start_date,
            r.current_date,
            lpr_type=r.lpr_type,
            i751_status=r.i751_status,
            n470_status=r.n470_status,
            reentry_permit=_permit(r),
            evidence_provided=r.evidence_provided,
        ),
        LPRStatusError,
    )

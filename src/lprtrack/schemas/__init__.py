"""
Input schemas for the validated entry points.

Pydantic models that parse raw API-style input (ISO date strings,
camelCase keys, enum values) into the dataclasses used by the engine.
"""

from lprtrack.schemas.inputs import (
    InputModel,
    TripInput,
    ReentryPermitInput,
    ProfileInput,
    TripDaysRequest,
    PresenceRequest,
    PresenceStatusRequest,
    EligibilityRequest,
    TripsRequest,
    AbandonmentRiskRequest,
    TripRiskRequest,
    LPRStatusRiskRequest,
    MaximumTripRequest,
    RemovalOfConditionsRequest,
    RenewalRequest,
    SelectiveServiceRequest,
    TaxReminderRequest,
    ComplianceRequest,
    DeadlinesRequest,
    AnalyticsRequest,
    AnnualSummaryRequest,
    TravelBudgetRequest,
    UpcomingTripRiskRequest,
    ProjectionRequest,
    MilestonesRequest,
    StreaksRequest,
    PatternRequest,
    AdvancedLPRStatusRequest,
)

__all__ = [
    # Entities
    "InputModel",
    "TripInput",
    "ReentryPermitInput",
    "ProfileInput",
    # Requests
    "TripDaysRequest",
    "PresenceRequest",
    "PresenceStatusRequest",
    "EligibilityRequest",
    "TripsRequest",
    "AbandonmentRiskRequest",
    "TripRiskRequest",
    "LPRStatusRiskRequest",
    "MaximumTripRequest",
    "RemovalOfConditionsRequest",
    "RenewalRequest",
    "SelectiveServiceRequest",
    "TaxReminderRequest",
    "ComplianceRequest",
    "DeadlinesRequest",
    "AnalyticsRequest",
    "AnnualSummaryRequest",
    "TravelBudgetRequest",
    "UpcomingTripRiskRequest",
    "ProjectionRequest",
    "MilestonesRequest",
    "StreaksRequest",
    "PatternRequest",
    "AdvancedLPRStatusRequest",
]

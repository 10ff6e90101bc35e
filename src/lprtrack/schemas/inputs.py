"""
Pydantic models for raw input at the API boundary.

Each model accepts camelCase keys (as sent by API clients) or snake_case
field names, parses dates strictly as YYYY-MM-DD, and converts into the
frozen dataclasses the core calculations take. Validation failures are
turned into typed errors by lprtrack.safe.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

from lprtrack.compliance.models import RemovalStatus
from lprtrack.core.models import (
    EligibilityCategory,
    Gender,
    I751Status,
    LPRProfile,
    LPRStatusType,
    N470Status,
    ReentryPermit,
    Trip,
)
from lprtrack.errors import DateRangeError
from lprtrack.utils.dates import coerce_date

MIN_TAX_YEAR = 1900
MAX_TAX_YEAR = 2100


def _iso_date(value: Any) -> Any:
    if value is None:
        return None
    return coerce_date(value)


class InputModel(BaseModel):
    """Base for every boundary model: camelCase aliases, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class TripInput(InputModel):
    id: str = ""
    user_id: str = ""
    departure_date: date
    return_date: date
    is_simulated: bool = False
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("departure_date", "return_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_order(self) -> "TripInput":
        if self.return_date < self.departure_date:
            raise DateRangeError(
                f"Return date {self.return_date} is before departure date {self.departure_date}",
                field="returnDate",
            )
        return self

    def to_trip(self) -> Trip:
        return Trip(
            id=self.id,
            user_id=self.user_id,
            departure_date=self.departure_date,
            return_date=self.return_date,
            is_simulated=self.is_simulated,
            location=self.location,
        )


class ReentryPermitInput(InputModel):
    has_permit: bool = False
    expiration_date: Optional[date] = None

    @field_validator("expiration_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    def to_permit(self) -> ReentryPermit:
        return ReentryPermit(has_permit=self.has_permit, expiration_date=self.expiration_date)


class ProfileInput(InputModel):
    green_card_date: date
    green_card_expiration_date: date
    birth_date: date
    gender: Gender
    is_conditional_resident: bool = False
    is_selective_service_registered: bool = False
    tax_reminder_dismissed: bool = False
    eligibility_category: EligibilityCategory = EligibilityCategory.FIVE_YEAR

    @field_validator("green_card_date", "green_card_expiration_date", "birth_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_dates(self) -> "ProfileInput":
        if self.green_card_expiration_date < self.green_card_date:
            raise DateRangeError(
                "Green card expiration date is before the green card date",
                field="greenCardExpirationDate",
            )
        if self.birth_date > self.green_card_date:
            raise DateRangeError(
                "Birth date is after the green card date",
                field="birthDate",
            )
        return self

    def to_profile(self) -> LPRProfile:
        return LPRProfile(
            green_card_date=self.green_card_date,
            green_card_expiration_date=self.green_card_expiration_date,
            birth_date=self.birth_date,
            gender=self.gender,
            is_conditional_resident=self.is_conditional_resident,
            is_selective_service_registered=self.is_selective_service_registered,
            tax_reminder_dismissed=self.tax_reminder_dismissed,
            eligibility_category=self.eligibility_category,
        )


# =============================================================================
# PER-CALCULATION REQUESTS
# =============================================================================

class TripDaysRequest(InputModel):
    """Days abroad for one trip, optionally clipped to a period or a year."""
    trip: TripInput
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    year: Optional[int] = Field(default=None, ge=MIN_TAX_YEAR, le=MAX_TAX_YEAR)
    include_departure_day: bool = True
    include_return_day: bool = True

    @field_validator("period_start", "period_end", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_period(self) -> "TripDaysRequest":
        if (self.period_start is None) != (self.period_end is None):
            raise DateRangeError(
                "Provide both period_start and period_end, or neither",
                field="periodEnd",
            )
        if self.period_start is not None and self.period_start > self.period_end:
            raise DateRangeError(
                f"Period start {self.period_start} is after period end {self.period_end}",
                field="periodStart",
            )
        return self


class PresenceRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    start_date: date
    end_date: date

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_range(self) -> "PresenceRequest":
        if self.start_date > self.end_date:
            raise DateRangeError(
                f"Start date {self.start_date} is after end date {self.end_date}",
                field="startDate",
            )
        return self


class PresenceStatusRequest(InputModel):
    total_days_in_usa: StrictInt = Field(..., ge=0)
    category: EligibilityCategory


class EligibilityRequest(InputModel):
    green_card_date: date
    category: EligibilityCategory

    @field_validator("green_card_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class TripsRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)


class AbandonmentRiskRequest(InputModel):
    days_abroad: StrictInt = Field(..., ge=0)
    has_reentry_permit: bool = False


class TripRiskRequest(InputModel):
    trip: TripInput
    current_date: date
    reentry_permit: Optional[ReentryPermitInput] = None

    @field_validator("current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class LPRStatusRiskRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    current_date: date
    reentry_permit: Optional[ReentryPermitInput] = None
    include_simulated: bool = False

    @field_validator("current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class MaximumTripRequest(InputModel):
    existing_trips: List[TripInput] = Field(default_factory=list)
    green_card_date: date
    category: EligibilityCategory
    current_date: date
    reentry_permit: Optional[ReentryPermitInput] = None
    n470_approved: bool = False

    @field_validator("green_card_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class RemovalOfConditionsRequest(InputModel):
    is_conditional_resident: bool
    green_card_date: date
    current_date: date
    filing_status: Optional[RemovalStatus] = None

    @field_validator("green_card_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class RenewalRequest(InputModel):
    expiration_date: date
    current_date: date

    @field_validator("expiration_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class SelectiveServiceRequest(InputModel):
    birth_date: date
    gender: Gender
    is_registered: bool = False
    current_date: date

    @field_validator("birth_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_birth(self) -> "SelectiveServiceRequest":
        if self.birth_date > self.current_date:
            raise DateRangeError("Birth date is in the future", field="birthDate")
        return self


class TaxReminderRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    reminder_dismissed: bool = False
    current_date: date

    @field_validator("current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class ComplianceRequest(InputModel):
    """Everything the coordinator needs for one compliance snapshot."""
    profile: ProfileInput
    trips: List[TripInput] = Field(default_factory=list)
    current_date: date
    filing_status: Optional[RemovalStatus] = None

    @field_validator("current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class DeadlinesRequest(InputModel):
    current_date: date
    horizon_days: Optional[int] = Field(default=None, ge=0)

    @field_validator("current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class AnalyticsRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    start_date: date
    end_date: date

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_range(self) -> "AnalyticsRequest":
        if self.start_date > self.end_date:
            raise DateRangeError(
                f"Start date {self.start_date} is after end date {self.end_date}",
                field="startDate",
            )
        return self


class AnnualSummaryRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    year: int = Field(..., ge=MIN_TAX_YEAR, le=MAX_TAX_YEAR)
    compare_with_previous_year: bool = True


# =============================================================================
# PLANNING AND ADVANCED LPR STATUS
# =============================================================================

def _check_not_before(start: date, current: date) -> None:
    if current < start:
        raise DateRangeError(
            f"Current date {current} is before the green card date {start}",
            field="currentDate",
        )


class TravelBudgetRequest(InputModel):
    total_days_abroad: StrictInt = Field(..., ge=0)
    category: EligibilityCategory
    green_card_date: date

    @field_validator("green_card_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class UpcomingTripRiskRequest(InputModel):
    """Planned trips; only those marked isSimulated are rated."""
    upcoming_trips: List[TripInput] = Field(default_factory=list)
    current_total_days_abroad: StrictInt = Field(..., ge=0)
    category: EligibilityCategory
    green_card_date: date

    @field_validator("green_card_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class ProjectionRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    total_days_in_usa: StrictInt = Field(..., ge=0)
    category: EligibilityCategory
    green_card_date: date
    current_date: date

    @field_validator("green_card_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_range(self) -> "ProjectionRequest":
        _check_not_before(self.green_card_date, self.current_date)
        return self


class MilestonesRequest(InputModel):
    total_days_in_usa: StrictInt = Field(..., ge=0)
    category: EligibilityCategory
    green_card_date: date
    current_date: date

    @field_validator("green_card_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)


class StreaksRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    green_card_date: date
    current_date: date

    @field_validator("green_card_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_range(self) -> "StreaksRequest":
        _check_not_before(self.green_card_date, self.current_date)
        return self


class PatternRequest(InputModel):
    trips: List[TripInput] = Field(default_factory=list)
    lpr_start_date: date
    current_date: date

    @field_validator("lpr_start_date", "current_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @model_validator(mode="after")
    def _check_range(self) -> "PatternRequest":
        _check_not_before(self.lpr_start_date, self.current_date)
        return self


class AdvancedLPRStatusRequest(PatternRequest):
    lpr_type: LPRStatusType = LPRStatusType.PERMANENT
    i751_status: I751Status = I751Status.NOT_APPLICABLE
    n470_status: N470Status = N470Status.NONE
    reentry_permit: Optional[ReentryPermitInput] = None
    evidence_provided: bool = False

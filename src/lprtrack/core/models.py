"""
Core Types: Trips, Profiles and Derived Risk Records.

Inputs are caller-owned and immutable for the duration of a call:
- Trip: one absence from the U.S. (real or simulated "what-if")
- ReentryPermit: extends LPR-status protection, never continuous residence
- LPRProfile: green card, identity and reminder flags

Everything else here is derived: created fresh per call, returned as a
plain value and never cached by the engine.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from lprtrack.errors import TripValidationError
from lprtrack.utils.dates import DateLike, coerce_date
from lprtrack.utils.serialize import to_plain


# =============================================================================
# ENUMS
# =============================================================================

class EligibilityCategory(Enum):
    """Naturalization path."""
    THREE_YEAR = "three_year"         # Married to a U.S. citizen
    FIVE_YEAR = "five_year"           # General provision


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class PresenceStatusLevel(Enum):
    """Progress toward the physical-presence requirement."""
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    REQUIREMENT_MET = "requirement_met"


class ContinuousResidenceRisk(Enum):
    """Naturalization track. A reentry permit never changes this."""
    NONE = "none"
    APPROACHING = "approaching"       # 150-179 days
    AT_RISK = "at_risk"               # 180-364 days, rebuttable presumption
    BROKEN = "broken"                 # 365+ days


class LPRRiskLevel(Enum):
    """Green card (abandonment) track."""
    NONE = "none"
    WARNING = "warning"                                        # 150-179 days
    PRESUMPTION_OF_ABANDONMENT = "presumption_of_abandonment"  # 180-329 days
    HIGH_RISK = "high_risk"                                    # 330-364 days
    AUTOMATIC_LOSS = "automatic_loss"                          # 365+ days
    PROTECTED_BY_PERMIT = "protected_by_permit"                # Permit, < 670 days
    APPROACHING_PERMIT_LIMIT = "approaching_permit_limit"      # Permit, 670-730 days


class LPRStatusType(Enum):
    PERMANENT = "permanent"
    CONDITIONAL = "conditional"       # Two-year card, I-751 pending or due


class I751Status(Enum):
    NOT_APPLICABLE = "not_applicable"  # Nothing filed (or not conditional)
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class N470Status(Enum):
    """Application to preserve residence for naturalization purposes."""
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"


class LPRStatusOutcome(Enum):
    """Overall reading of a travel history against abandonment rules."""
    MAINTAINED = "maintained"
    AT_RISK = "at_risk"
    PRESUMED_ABANDONED = "presumed_abandoned"
    ABANDONED = "abandoned"


class LimitingFactor(Enum):
    """Which requirement caps the next safe trip."""
    PHYSICAL_PRESENCE = "physical_presence"
    CONTINUOUS_RESIDENCE_APPROACHING = "continuous_residence_approaching"
    LPR_STATUS_WARNING = "lpr_status_warning"
    REENTRY_PERMIT_APPROACHING_LIMIT = "reentry_permit_approaching_limit"
    ALREADY_AT_RISK = "already_at_risk"


# =============================================================================
# INPUTS
# =============================================================================

def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present; accepts camelCase and snake_case."""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class Trip:
    """
    One absence from the United States.

    departure_date and return_date are calendar dates; return_date is
    expected to be on or after departure_date. Reversed trips are not
    rejected here: day counters floor them at zero and the presence
    aggregator skips them.
    """
    id: str
    user_id: str
    departure_date: date
    return_date: date
    is_simulated: bool = False
    location: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.return_date >= self.departure_date

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trip":
        """
        Build from an API-style dict (ISO date strings, camelCase or snake_case).

        Raises:
            TripValidationError: If either date is missing.
            DateFormatError: If a date is not a valid YYYY-MM-DD string.
        """
        for keys in (("departureDate", "departure_date"), ("returnDate", "return_date")):
            if _pick(data, *keys) is None:
                raise TripValidationError(f"Trip is missing {keys[0]}", field=keys[0])
        return cls(
            id=str(_pick(data, "id", default="")),
            user_id=str(_pick(data, "userId", "user_id", default="")),
            departure_date=coerce_date(
                _pick(data, "departureDate", "departure_date"), "departureDate"
            ),
            return_date=coerce_date(_pick(data, "returnDate", "return_date"), "returnDate"),
            is_simulated=bool(_pick(data, "isSimulated", "is_simulated", default=False)),
            location=_pick(data, "location"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass(frozen=True)
class ReentryPermit:
    """Reentry permit (Form I-327) held by the resident."""
    has_permit: bool
    expiration_date: Optional[date] = None

    def is_valid_on(self, day: date) -> bool:
        """Held and not expired on the given day; no expiry means valid."""
        if not self.has_permit:
            return False
        return self.expiration_date is None or self.expiration_date >= day

    @classmethod
    def none(cls) -> "ReentryPermit":
        return cls(has_permit=False)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass(frozen=True)
class LPRProfile:
    """Profile inputs consumed by the compliance calculators."""
    green_card_date: date
    green_card_expiration_date: date
    birth_date: date
    gender: Gender
    is_conditional_resident: bool = False
    is_selective_service_registered: bool = False
    tax_reminder_dismissed: bool = False
    eligibility_category: EligibilityCategory = EligibilityCategory.FIVE_YEAR

    @classmethod
    def build(
        cls,
        green_card_date: DateLike,
        green_card_expiration_date: DateLike,
        birth_date: DateLike,
        gender: str,
        is_conditional_resident: bool = False,
        is_selective_service_registered: bool = False,
        tax_reminder_dismissed: bool = False,
        eligibility_category: str = "five_year",
    ) -> "LPRProfile":
        """Convenience constructor taking ISO strings and enum values."""
        return cls(
            green_card_date=coerce_date(green_card_date, "greenCardDate"),
            green_card_expiration_date=coerce_date(
                green_card_expiration_date, "greenCardExpirationDate"
            ),
            birth_date=coerce_date(birth_date, "birthDate"),
            gender=Gender(gender),
            is_conditional_resident=is_conditional_resident,
            is_selective_service_registered=is_selective_service_registered,
            tax_reminder_dismissed=tax_reminder_dismissed,
            eligibility_category=EligibilityCategory(eligibility_category),
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


# =============================================================================
# PRESENCE RESULTS
# =============================================================================

@dataclass
class PresenceCalculation:
    """Days in the U.S. vs. abroad over an inclusive interval."""
    total_days_in_usa: int
    total_days_abroad: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PresenceStatus:
    required_days: int
    percentage_complete: float
    days_remaining: int
    status: PresenceStatusLevel

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class EligibilityDates:
    eligibility_date: date
    earliest_filing_date: date

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class ContinuousResidenceWarning:
    trip_id: str
    days_abroad: int
    message: str
    severity: str  # "high" or "medium"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# RISK RESULTS
# =============================================================================

@dataclass
class GreenCardRiskResult:
    risk_level: LPRRiskLevel
    days_until_next_threshold: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class PhysicalPresenceImpact:
    days_deducted_from_eligibility: int
    affects_naturalization_timeline: bool
    message: str


@dataclass
class ContinuousResidenceImpact:
    risk: ContinuousResidenceRisk
    breaks_requirement: bool
    resets_eligibility_clock: bool
    days_until_break: int
    message: str


@dataclass
class TripRiskAssessment:
    """Single-trip assessment across every legal threshold."""
    trip_id: str
    days_abroad: int
    physical_presence_impact: PhysicalPresenceImpact
    continuous_residence_impact: ContinuousResidenceImpact
    lpr_status_risk: GreenCardRiskResult
    overall_risk_level: LPRRiskLevel
    has_reentry_permit: bool
    assessment_date: date
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def continuous_residence_risk(self) -> ContinuousResidenceRisk:
        return self.continuous_residence_impact.risk

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class LongestTrip:
    trip: Optional[Trip]
    days_abroad: int
    risk_level: LPRRiskLevel


@dataclass
class RiskAssessment:
    """Risk of losing permanent resident status across a trip history."""
    overall_risk: LPRRiskLevel
    longest_trip: LongestTrip
    current_year_trips: int
    total_days_abroad_current_year: int
    recommendations: List[str] = field(default_factory=list)
    requires_reentry_permit: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class ReentryPermitProtection:
    provides_protection: bool
    days_protected: int
    days_until_expiry: Optional[int]
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class MaximumTripDurationResult:
    maximum_days: int
    limiting_factor: LimitingFactor
    physical_presence_safety_days: int
    continuous_residence_safety_days: int
    lpr_status_safety_days: int
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


# =============================================================================
# ADVANCED LPR STATUS RESULTS
# =============================================================================

@dataclass
class PatternOfNonResidence:
    """
    Travel pattern since the green card date.

    Stays are the days spent in the U.S. between consecutive trips, travel
    days excluded. Both stay fields are 0 when fewer than two trips fall in
    the period.
    """
    total_days_abroad: int
    number_of_trips: int
    years_covered: float
    percentage_time_abroad: float
    avg_days_abroad_per_year: float
    longest_stay_in_usa: int
    shortest_return_to_usa: int
    has_pattern: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RebuttablePresumption:
    applies: bool
    max_days_abroad: int
    days_since_last_return: Optional[int]
    evidence_provided: bool = False
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LPRStatusRiskFactors:
    has_pattern_of_non_residence: bool
    has_rebuttable_presumption: bool
    currently_abroad: bool
    has_expired_reentry_permit: bool
    has_pending_i751: bool
    total_risk_score: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AdvancedLPRAssessment:
    """Pattern, presumption and risk-factor reading of a travel history."""
    current_status: LPRStatusOutcome
    lpr_type: LPRStatusType
    i751_status: I751Status
    n470_status: N470Status
    has_reentry_permit: bool
    last_entry_date: Optional[date]
    pattern_analysis: PatternOfNonResidence
    rebuttable_presumption: RebuttablePresumption
    risk_factors: LPRStatusRiskFactors
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

"""
Compliance status records.

One status per statutory area plus the aggregate produced by the
coordinator. All are derived per call and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from lprtrack.core.models import RiskAssessment
from lprtrack.utils.serialize import to_plain


# =============================================================================
# ENUMS
# =============================================================================

class RemovalStatus(Enum):
    """Form I-751 filing state."""
    NOT_YET = "not_yet"               # Before the 90-day window
    IN_WINDOW = "in_window"           # Window open, not filed
    FILED = "filed"                   # Caller-supplied override
    APPROVED = "approved"             # Caller-supplied override
    OVERDUE = "overdue"               # Window closed, not filed


class RenewalStatus(Enum):
    """Form I-90 renewal state for a 10-year card."""
    VALID = "valid"
    RENEWAL_RECOMMENDED = "renewal_recommended"
    RENEWAL_URGENT = "renewal_urgent"
    EXPIRED = "expired"


class SelectiveServiceState(Enum):
    NOT_APPLICABLE = "not_applicable"
    MUST_REGISTER = "must_register"
    REGISTERED = "registered"
    AGED_OUT = "aged_out"


class TaxDeadlineType(Enum):
    STANDARD = "standard"                     # April 15
    ABROAD_EXTENSION = "abroad_extension"     # June 15, automatic when abroad
    OCTOBER_EXTENSION = "october_extension"   # October 15, Form 4868


class Priority(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class ComplianceItemType(Enum):
    REMOVAL_OF_CONDITIONS = "removal_of_conditions"
    GREEN_CARD_RENEWAL = "green_card_renewal"
    SELECTIVE_SERVICE = "selective_service"
    TAX_FILING = "tax_filing"


# =============================================================================
# PER-AREA STATUS
# =============================================================================

@dataclass
class RemovalOfConditionsStatus:
    """
    I-751 status for a conditional resident.

    Non-conditional residents get applies=False with no window dates.
    days_until_window is None once the window is open or closed;
    days_until_deadline is None once the window end has passed.
    """
    applies: bool
    green_card_date: date
    filing_window_start: Optional[date]
    filing_window_end: Optional[date]
    current_status: RemovalStatus
    days_until_window: Optional[int]
    days_until_deadline: Optional[int]

    @classmethod
    def not_applicable(cls, green_card_date: date) -> "RemovalOfConditionsStatus":
        return cls(
            applies=False,
            green_card_date=green_card_date,
            filing_window_start=None,
            filing_window_end=None,
            current_status=RemovalStatus.NOT_YET,
            days_until_window=None,
            days_until_deadline=None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class GreenCardRenewalStatus:
    expiration_date: date
    renewal_window_start: date
    current_status: RenewalStatus
    months_until_expiration: int
    is_in_renewal_window: bool

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class SelectiveServiceStatus:
    applies: bool
    registration_required: bool
    registration_deadline: Optional[date]
    is_registered: bool
    current_status: SelectiveServiceState

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class TaxReminderStatus:
    """
    Tax filing reminder.

    next_deadline is the unadjusted April 15 of the upcoming filing season;
    actual_deadline is the applicable deadline after weekend and holiday
    adjustment, and days_until_deadline counts to it.
    """
    next_deadline: date
    days_until_deadline: int
    is_abroad_during_tax_season: bool
    reminder_dismissed: bool
    applicable_deadline: TaxDeadlineType
    actual_deadline: date

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class ExtensionInfo:
    automatic_extension: bool
    extension_deadline: str
    requires_form: bool
    form_number: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


# =============================================================================
# AGGREGATES
# =============================================================================

@dataclass
class ComprehensiveComplianceStatus:
    """All four areas, computed together against one current date."""
    removal_of_conditions: RemovalOfConditionsStatus
    green_card_renewal: GreenCardRenewalStatus
    selective_service: SelectiveServiceStatus
    tax_reminder: TaxReminderStatus

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class ActiveComplianceItem:
    type: ComplianceItemType
    description: str
    urgency: Priority


@dataclass
class PriorityComplianceItem:
    type: ComplianceItemType
    description: str
    deadline: date
    priority: Priority


@dataclass
class UpcomingDeadline:
    type: ComplianceItemType
    description: str
    date: date
    days_remaining: int


@dataclass
class ComplianceReport:
    """Compliance status plus derived item lists and travel risk."""
    status: ComprehensiveComplianceStatus
    active_items: List[ActiveComplianceItem] = field(default_factory=list)
    priority_items: List[PriorityComplianceItem] = field(default_factory=list)
    upcoming_deadlines: List[UpcomingDeadline] = field(default_factory=list)
    risk: Optional[RiskAssessment] = None

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

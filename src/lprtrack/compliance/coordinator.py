"""
Compliance coordinator.

Runs the four deadline calculators against one shared current date and
derives three views from the combined status:

    active items      every area that currently needs action, with urgency
    priority items    the time-critical subset, sorted priority -> deadline -> type
    upcoming          every deadline not yet passed, sorted by date

build_compliance_report adds the travel-risk assessment on top.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Union

from lprtrack.compliance.green_card_renewal import calculate_green_card_renewal_status
from lprtrack.compliance.models import (
    ActiveComplianceItem,
    ComplianceItemType,
    ComplianceReport,
    ComprehensiveComplianceStatus,
    GreenCardRenewalStatus,
    Priority,
    PriorityComplianceItem,
    RemovalOfConditionsStatus,
    RemovalStatus,
    RenewalStatus,
    SelectiveServiceStatus,
    TaxReminderStatus,
    UpcomingDeadline,
)
from lprtrack.compliance.removal_of_conditions import calculate_removal_of_conditions_status
from lprtrack.compliance.selective_service import calculate_selective_service_status
from lprtrack.compliance.tax_filing import calculate_tax_reminder_status
from lprtrack.config import DEFAULT_CONFIG, EngineConfig
from lprtrack.constants import COMPLIANCE_TYPE_ORDER, PRIORITY_ORDER
from lprtrack.core.models import LPRProfile, ReentryPermit, Trip
from lprtrack.core.risk import assess_lpr_status_risk
from lprtrack.utils.dates import days_between

logger = logging.getLogger(__name__)


# =============================================================================
# MESSAGES
# =============================================================================

ACTIVE_ITEM_MESSAGES = {
    ComplianceItemType.REMOVAL_OF_CONDITIONS: "File Form I-751 to remove conditions on residence",
    ComplianceItemType.GREEN_CARD_RENEWAL: "Renew your green card",
    ComplianceItemType.SELECTIVE_SERVICE: "Register with Selective Service System",
    ComplianceItemType.TAX_FILING: "File your US tax return",
}

PRIORITY_REMOVAL_OVERDUE = "Overdue: File Form I-751 immediately"
PRIORITY_GREEN_CARD_EXPIRED = "Green card expired - renew immediately"
PRIORITY_GREEN_CARD_EXPIRING = "Green card expiring soon - renew urgently"
PRIORITY_SELECTIVE_SERVICE = "Must register with Selective Service"
PRIORITY_TAX_ABROAD = "File taxes - you will be abroad during deadline"

DEADLINE_DESCRIPTIONS = {
    ComplianceItemType.REMOVAL_OF_CONDITIONS: "Remove conditions on residence",
    ComplianceItemType.GREEN_CARD_RENEWAL: "Green card expires",
    ComplianceItemType.SELECTIVE_SERVICE: "Register with Selective Service",
    ComplianceItemType.TAX_FILING: "File US tax return",
}

RENEWAL_URGENCY = {
    RenewalStatus.EXPIRED: Priority.CRITICAL,
    RenewalStatus.RENEWAL_URGENT: Priority.HIGH,
    RenewalStatus.RENEWAL_RECOMMENDED: Priority.MEDIUM,
}


# =============================================================================
# COMPREHENSIVE STATUS
# =============================================================================

def calculate_comprehensive_compliance(
    profile: LPRProfile,
    trips: Iterable[Trip],
    current_date: date,
    filing_status: Optional[Union[RemovalStatus, str]] = None,
) -> ComprehensiveComplianceStatus:
    """
    Compute all four compliance areas against one current date.

    Non-conditional residents get a removal-of-conditions record with
    applies=False instead of None, so the aggregate is always complete.
    Any failure propagates; a partial aggregate is never returned.
    """
    removal = calculate_removal_of_conditions_status(
        profile.is_conditional_resident,
        profile.green_card_date,
        current_date,
        filing_status,
    )
    if removal is None:
        removal = RemovalOfConditionsStatus.not_applicable(profile.green_card_date)

    return ComprehensiveComplianceStatus(
        removal_of_conditions=removal,
        green_card_renewal=calculate_green_card_renewal_status(
            profile.green_card_expiration_date, current_date
        ),
        selective_service=calculate_selective_service_status(
            profile.birth_date,
            profile.gender,
            profile.is_selective_service_registered,
            current_date,
        ),
        tax_reminder=calculate_tax_reminder_status(
            list(trips), profile.tax_reminder_dismissed, current_date
        ),
    )


# =============================================================================
# ACTIVE ITEMS
# =============================================================================

def tax_filing_urgency(
    days_until_deadline: int,
    is_abroad: bool,
    config: Optional[EngineConfig] = None,
) -> Priority:
    config = config or DEFAULT_CONFIG
    if days_until_deadline <= config.tax_critical_days:
        return Priority.CRITICAL
    if days_until_deadline <= config.tax_high_days:
        return Priority.HIGH
    if days_until_deadline <= config.tax_priority_days:
        return Priority.HIGH if is_abroad else Priority.MEDIUM
    return Priority.LOW


def _active_removal(status: RemovalOfConditionsStatus) -> Optional[ActiveComplianceItem]:
    if not status.applies or status.current_status not in (RemovalStatus.IN_WINDOW, RemovalStatus.OVERDUE):
        return None
    urgency = Priority.CRITICAL if status.current_status == RemovalStatus.OVERDUE else Priority.HIGH
    item_type = ComplianceItemType.REMOVAL_OF_CONDITIONS
    return ActiveComplianceItem(item_type, ACTIVE_ITEM_MESSAGES[item_type], urgency)


def _active_renewal(status: GreenCardRenewalStatus) -> Optional[ActiveComplianceItem]:
    if status.current_status not in RENEWAL_URGENCY:
        return None
    item_type = ComplianceItemType.GREEN_CARD_RENEWAL
    return ActiveComplianceItem(
        item_type, ACTIVE_ITEM_MESSAGES[item_type], RENEWAL_URGENCY[status.current_status]
    )


def _active_selective_service(status: SelectiveServiceStatus) -> Optional[ActiveComplianceItem]:
    if not status.applies or not status.registration_required:
        return None
    item_type = ComplianceItemType.SELECTIVE_SERVICE
    return ActiveComplianceItem(item_type, ACTIVE_ITEM_MESSAGES[item_type], Priority.HIGH)


def _active_tax(status: TaxReminderStatus, config: EngineConfig) -> Optional[ActiveComplianceItem]:
    if status.reminder_dismissed or status.days_until_deadline > config.tax_priority_days:
        return None
    item_type = ComplianceItemType.TAX_FILING
    urgency = tax_filing_urgency(
        status.days_until_deadline, status.is_abroad_during_tax_season, config
    )
    return ActiveComplianceItem(item_type, ACTIVE_ITEM_MESSAGES[item_type], urgency)


def get_active_compliance_items(
    compliance: ComprehensiveComplianceStatus,
    config: Optional[EngineConfig] = None,
) -> List[ActiveComplianceItem]:
    """Areas requiring action now, in fixed area order."""
    config = config or DEFAULT_CONFIG
    candidates = [
        _active_removal(compliance.removal_of_conditions),
        _active_renewal(compliance.green_card_renewal),
        _active_selective_service(compliance.selective_service),
        _active_tax(compliance.tax_reminder, config),
    ]
    return [item for item in candidates if item is not None]


# =============================================================================
# PRIORITY ITEMS
# =============================================================================

def priority_sort_key(item: PriorityComplianceItem):
    return (
        PRIORITY_ORDER[item.priority.value],
        item.deadline,
        COMPLIANCE_TYPE_ORDER[item.type.value],
    )


def sort_priority_items(items: Iterable[PriorityComplianceItem]) -> List[PriorityComplianceItem]:
    """Critical first, then earliest deadline, then fixed type order."""
    return sorted(items, key=priority_sort_key)


def get_priority_compliance_items(
    compliance: ComprehensiveComplianceStatus,
    config: Optional[EngineConfig] = None,
) -> List[PriorityComplianceItem]:
    """
    Time-critical items: overdue I-751, urgent or expired card, required
    Selective Service registration, and tax filing while abroad.
    """
    config = config or DEFAULT_CONFIG
    items: List[PriorityComplianceItem] = []

    removal = compliance.removal_of_conditions
    if removal.applies and removal.current_status == RemovalStatus.OVERDUE:
        items.append(PriorityComplianceItem(
            type=ComplianceItemType.REMOVAL_OF_CONDITIONS,
            description=PRIORITY_REMOVAL_OVERDUE,
            deadline=removal.filing_window_end,
            priority=Priority.CRITICAL,
        ))

    renewal = compliance.green_card_renewal
    if renewal.current_status == RenewalStatus.EXPIRED:
        items.append(PriorityComplianceItem(
            type=ComplianceItemType.GREEN_CARD_RENEWAL,
            description=PRIORITY_GREEN_CARD_EXPIRED,
            deadline=renewal.expiration_date,
            priority=Priority.CRITICAL,
        ))
    elif renewal.current_status == RenewalStatus.RENEWAL_URGENT:
        items.append(PriorityComplianceItem(
            type=ComplianceItemType.GREEN_CARD_RENEWAL,
            description=PRIORITY_GREEN_CARD_EXPIRING,
            deadline=renewal.expiration_date,
            priority=Priority.HIGH,
        ))

    selective = compliance.selective_service
    if selective.applies and selective.registration_required and selective.registration_deadline:
        items.append(PriorityComplianceItem(
            type=ComplianceItemType.SELECTIVE_SERVICE,
            description=PRIORITY_SELECTIVE_SERVICE,
            deadline=selective.registration_deadline,
            priority=Priority.HIGH,
        ))

    tax = compliance.tax_reminder
    if (
        not tax.reminder_dismissed
        and tax.days_until_deadline <= config.tax_priority_days
        and tax.is_abroad_during_tax_season
    ):
        items.append(PriorityComplianceItem(
            type=ComplianceItemType.TAX_FILING,
            description=PRIORITY_TAX_ABROAD,
            deadline=tax.actual_deadline,
            priority=Priority.HIGH,
        ))

    return sort_priority_items(items)


# =============================================================================
# UPCOMING DEADLINES
# =============================================================================

def get_upcoming_deadlines(
    compliance: ComprehensiveComplianceStatus,
    current_date: date,
    horizon_days: Optional[int] = None,
) -> List[UpcomingDeadline]:
    """
    Deadlines that have not yet passed, sorted by date.

    Args:
        compliance: Status from calculate_comprehensive_compliance.
        current_date: Deadlines before this date are dropped.
        horizon_days: If set, only deadlines within this many days are kept.
    """
    deadlines: List[UpcomingDeadline] = []

    removal = compliance.removal_of_conditions
    if removal.applies and removal.days_until_deadline is not None:
        deadlines.append(UpcomingDeadline(
            type=ComplianceItemType.REMOVAL_OF_CONDITIONS,
            description=DEADLINE_DESCRIPTIONS[ComplianceItemType.REMOVAL_OF_CONDITIONS],
            date=removal.filing_window_end,
            days_remaining=removal.days_until_deadline,
        ))

    renewal = compliance.green_card_renewal
    if renewal.expiration_date > current_date:
        deadlines.append(UpcomingDeadline(
            type=ComplianceItemType.GREEN_CARD_RENEWAL,
            description=DEADLINE_DESCRIPTIONS[ComplianceItemType.GREEN_CARD_RENEWAL],
            date=renewal.expiration_date,
            days_remaining=days_between(renewal.expiration_date, current_date),
        ))

    selective = compliance.selective_service
    if (
        selective.registration_required
        and selective.registration_deadline is not None
        and selective.registration_deadline > current_date
    ):
        deadlines.append(UpcomingDeadline(
            type=ComplianceItemType.SELECTIVE_SERVICE,
            description=DEADLINE_DESCRIPTIONS[ComplianceItemType.SELECTIVE_SERVICE],
            date=selective.registration_deadline,
            days_remaining=days_between(selective.registration_deadline, current_date),
        ))

    tax = compliance.tax_reminder
    if not tax.reminder_dismissed and tax.actual_deadline > current_date:
        deadlines.append(UpcomingDeadline(
            type=ComplianceItemType.TAX_FILING,
            description=DEADLINE_DESCRIPTIONS[ComplianceItemType.TAX_FILING],
            date=tax.actual_deadline,
            days_remaining=tax.days_until_deadline,
        ))

    if horizon_days is not None:
        deadlines = [d for d in deadlines if d.days_remaining <= horizon_days]

    return sorted(deadlines, key=lambda d: d.date)


# =============================================================================
# REPORT
# =============================================================================

def build_compliance_report(
    profile: LPRProfile,
    trips: Iterable[Trip],
    current_date: date,
    filing_status: Optional[Union[RemovalStatus, str]] = None,
    reentry_permit: Optional[ReentryPermit] = None,
    config: Optional[EngineConfig] = None,
) -> ComplianceReport:
    """
    Full compliance report: status, derived item lists and travel risk.

    Args:
        profile: Resident profile.
        trips: Travel history (simulated trips are excluded from risk).
        current_date: Shared evaluation date for every area.
        filing_status: Optional I-751 "filed" / "approved" override.
        reentry_permit: Permit held by the resident, if any.
        config: Reminder thresholds and upcoming-deadline horizon.

    Returns:
        ComplianceReport.
    """
    config = config or DEFAULT_CONFIG
    trips = list(trips)

    status = calculate_comprehensive_compliance(profile, trips, current_date, filing_status)
    report = ComplianceReport(
        status=status,
        active_items=get_active_compliance_items(status, config),
        priority_items=get_priority_compliance_items(status, config),
        upcoming_deadlines=get_upcoming_deadlines(
            status, current_date, config.upcoming_deadline_horizon_days
        ),
        risk=assess_lpr_status_risk(trips, current_date, reentry_permit),
    )
    logger.info(
        f"Compliance report for {current_date}: {len(report.active_items)} active, "
        f"{len(report.priority_items)} priority, {len(report.upcoming_deadlines)} upcoming"
    )
    return report

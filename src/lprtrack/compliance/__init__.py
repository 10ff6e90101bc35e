"""
Statutory deadline calculators and the compliance coordinator.

Submodules:
    removal_of_conditions: Form I-751 filing window for conditional residents
    green_card_renewal: Form I-90 renewal window for 10-year cards
    selective_service: Registration requirement for men aged 18-25
    tax_filing: April 15 / June 15 / October 15 deadlines with adjustment
    coordinator: Aggregate status, active/priority items, upcoming deadlines
"""

from lprtrack.compliance.models import (
    RemovalStatus,
    RenewalStatus,
    SelectiveServiceState,
    TaxDeadlineType,
    Priority,
    ComplianceItemType,
    RemovalOfConditionsStatus,
    GreenCardRenewalStatus,
    SelectiveServiceStatus,
    TaxReminderStatus,
    ExtensionInfo,
    ComprehensiveComplianceStatus,
    ActiveComplianceItem,
    PriorityComplianceItem,
    UpcomingDeadline,
    ComplianceReport,
)
from lprtrack.compliance.removal_of_conditions import (
    get_filing_window,
    get_removal_of_conditions_deadline,
    is_in_filing_window,
    days_until_filing_window,
    calculate_removal_of_conditions_status,
)
from lprtrack.compliance.green_card_renewal import (
    get_renewal_window_start,
    months_until_expiration,
    is_in_renewal_window,
    calculate_green_card_renewal_status,
    get_renewal_urgency,
)
from lprtrack.compliance.selective_service import (
    resolve_gender,
    age_in_years,
    is_selective_service_required,
    get_registration_deadline,
    days_until_registration_deadline,
    days_until_aged_out,
    calculate_selective_service_status,
)
from lprtrack.compliance.tax_filing import (
    base_deadline_for_year,
    get_next_tax_deadline,
    get_actual_tax_deadline,
    get_october_extension_deadline,
    get_tax_season_range,
    is_tax_season,
    will_be_abroad_during_tax_season,
    get_extension_info,
    calculate_tax_reminder_status,
)
from lprtrack.compliance.coordinator import (
    calculate_comprehensive_compliance,
    tax_filing_urgency,
    get_active_compliance_items,
    sort_priority_items,
    get_priority_compliance_items,
    get_upcoming_deadlines,
    build_compliance_report,
)

__all__ = [
    # Enums
    "RemovalStatus",
    "RenewalStatus",
    "SelectiveServiceState",
    "TaxDeadlineType",
    "Priority",
    "ComplianceItemType",
    # Records
    "RemovalOfConditionsStatus",
    "GreenCardRenewalStatus",
    "SelectiveServiceStatus",
    "TaxReminderStatus",
    "ExtensionInfo",
    "ComprehensiveComplianceStatus",
    "ActiveComplianceItem",
    "PriorityComplianceItem",
    "UpcomingDeadline",
    "ComplianceReport",
    # Removal of conditions
    "get_filing_window",
    "get_removal_of_conditions_deadline",
    "is_in_filing_window",
    "days_until_filing_window",
    "calculate_removal_of_conditions_status",
    # Green card renewal
    "get_renewal_window_start",
    "months_until_expiration",
    "is_in_renewal_window",
    "calculate_green_card_renewal_status",
    "get_renewal_urgency",
    # Selective service
    "resolve_gender",
    "age_in_years",
    "is_selective_service_required",
    "get_registration_deadline",
    "days_until_registration_deadline",
    "days_until_aged_out",
    "calculate_selective_service_status",
    # Tax filing
    "base_deadline_for_year",
    "get_next_tax_deadline",
    "get_actual_tax_deadline",
    "get_october_extension_deadline",
    "get_tax_season_range",
    "is_tax_season",
    "will_be_abroad_during_tax_season",
    "get_extension_info",
    "calculate_tax_reminder_status",
    # Coordinator
    "calculate_comprehensive_compliance",
    "tax_filing_urgency",
    "get_active_compliance_items",
    "sort_priority_items",
    "get_priority_compliance_items",
    "get_upcoming_deadlines",
    "build_compliance_report",
]

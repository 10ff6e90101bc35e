from dataclasses import replace
from datetime import date

import pytest

from lprtrack.compliance.coordinator import (
    build_compliance_report,
    calculate_comprehensive_compliance,
    get_active_compliance_items,
    get_priority_compliance_items,
    get_upcoming_deadlines,
    sort_priority_items,
    tax_filing_urgency,
)
from lprtrack.compliance.models import (
    ComplianceItemType,
    Priority,
    PriorityComplianceItem,
    RemovalStatus,
    RenewalStatus,
    SelectiveServiceState,
)
from lprtrack.config import EngineConfig
from lprtrack.core.models import Gender, LPRProfile, LPRRiskLevel

TODAY = date(2024, 4, 1)


@pytest.fixture
def overdue_profile():
    """Conditional resident past the I-751 window with an expired card."""
    return LPRProfile(
        green_card_date=date(2022, 3, 1),
        green_card_expiration_date=date(2024, 3, 1),
        birth_date=date(2005, 6, 1),
        gender=Gender.MALE,
        is_conditional_resident=True,
    )


@pytest.fixture
def settled_profile():
    return LPRProfile(
        green_card_date=date(2020, 1, 1),
        green_card_expiration_date=date(2030, 1, 1),
        birth_date=date(1985, 7, 4),
        gender=Gender.FEMALE,
    )


class TestComprehensiveCompliance:

    def test_all_areas_share_current_date(self, overdue_profile):
        status = calculate_comprehensive_compliance(overdue_profile, [], TODAY)
        assert status.removal_of_conditions.current_status == RemovalStatus.OVERDUE
        assert status.green_card_renewal.current_status == RenewalStatus.EXPIRED
        assert status.selective_service.current_status == SelectiveServiceState.MUST_REGISTER
        assert status.tax_reminder.days_until_deadline == 14

    def test_non_conditional_gets_placeholder(self, settled_profile):
        status = calculate_comprehensive_compliance(settled_profile, [], TODAY)
        assert not status.removal_of_conditions.applies
        assert status.removal_of_conditions.filing_window_end is None


class TestActiveItems:

    def test_overdue_profile(self, overdue_profile):
        status = calculate_comprehensive_compliance(overdue_profile, [], TODAY)
        items = get_active_compliance_items(status)
        assert [(i.type, i.urgency) for i in items] == [
            (ComplianceItemType.REMOVAL_OF_CONDITIONS, Priority.CRITICAL),
            (ComplianceItemType.GREEN_CARD_RENEWAL, Priority.CRITICAL),
            (ComplianceItemType.SELECTIVE_SERVICE, Priority.HIGH),
            (ComplianceItemType.TAX_FILING, Priority.HIGH),
        ]

    def test_settled_profile_has_nothing_active(self, settled_profile):
        status = calculate_comprehensive_compliance(settled_profile, [], date(2024, 6, 1))
        assert get_active_compliance_items(status) == []

    def test_dismissed_tax_reminder(self, overdue_profile):
        profile = replace(overdue_profile, tax_reminder_dismissed=True)
        status = calculate_comprehensive_compliance(profile, [], TODAY)
        types = [i.type for i in get_active_compliance_items(status)]
        assert ComplianceItemType.TAX_FILING not in types

    def test_tax_window_from_config(self, settled_profile):
        status = calculate_comprehensive_compliance(settled_profile, [], date(2024, 3, 1))
        assert get_active_compliance_items(status) == []
        items = get_active_compliance_items(status, EngineConfig(tax_priority_days=60))
        assert [(i.type, i.urgency) for i in items] == [(ComplianceItemType.TAX_FILING, Priority.MEDIUM)]


@pytest.mark.parametrize("days,abroad,priority", [
    (0, False, Priority.CRITICAL),
    (7, False, Priority.CRITICAL),
    (8, False, Priority.HIGH),
    (14, False, Priority.HIGH),
    (15, False, Priority.MEDIUM),
    (15, True, Priority.HIGH),
    (30, False, Priority.MEDIUM),
    (31, False, Priority.LOW),
])
def test_tax_filing_urgency(days, abroad, priority):
    assert tax_filing_urgency(days, abroad) == priority


class TestPriorityItems:

    def test_overdue_profile_order(self, overdue_profile):
        status = calculate_comprehensive_compliance(overdue_profile, [], TODAY)
        items = get_priority_compliance_items(status)
        assert [i.type for i in items] == [
            ComplianceItemType.GREEN_CARD_RENEWAL,
            ComplianceItemType.REMOVAL_OF_CONDITIONS,
            ComplianceItemType.SELECTIVE_SERVICE,
        ]
        assert items[0].description == "Green card expired - renew immediately"
        assert items[2].deadline == date(2023, 6, 1)

    def test_sort_priority_then_deadline_then_type(self):
        items = [
            PriorityComplianceItem(ComplianceItemType.TAX_FILING, "tax", date(2024, 4, 15), Priority.HIGH),
            PriorityComplianceItem(ComplianceItemType.GREEN_CARD_RENEWAL, "renew", date(2024, 6, 1), Priority.CRITICAL),
            PriorityComplianceItem(ComplianceItemType.SELECTIVE_SERVICE, "register", date(2024, 4, 15), Priority.HIGH),
            PriorityComplianceItem(ComplianceItemType.REMOVAL_OF_CONDITIONS, "i-751", date(2024, 5, 1), Priority.CRITICAL),
        ]
        ordered = sort_priority_items(items)
        assert [i.description for i in ordered] == ["i-751", "renew", "register", "tax"]


class TestUpcomingDeadlines:

    def test_passed_deadlines_dropped(self, overdue_profile):
        status = calculate_comprehensive_compliance(overdue_profile, [], TODAY)
        deadlines = get_upcoming_deadlines(status, TODAY)
        assert [(d.type, d.days_remaining) for d in deadlines] == [(ComplianceItemType.TAX_FILING, 14)]

    def test_sorted_by_date(self, settled_profile):
        current = date(2024, 6, 1)
        status = calculate_comprehensive_compliance(settled_profile, [], current)
        deadlines = get_upcoming_deadlines(status, current)
        assert [d.date for d in deadlines] == [date(2025, 4, 15), date(2030, 1, 1)]

    def test_horizon(self, overdue_profile):
        status = calculate_comprehensive_compliance(overdue_profile, [], TODAY)
        assert get_upcoming_deadlines(status, TODAY, horizon_days=10) == []
        assert len(get_upcoming_deadlines(status, TODAY, horizon_days=14)) == 1


class TestComplianceReport:

    def test_report(self, overdue_profile):
        report = build_compliance_report(overdue_profile, [], TODAY)
        assert len(report.active_items) == 4
        assert len(report.priority_items) == 3
        assert len(report.upcoming_deadlines) == 1
        assert report.risk.overall_risk == LPRRiskLevel.NONE

    def test_config_horizon(self, overdue_profile):
        config = EngineConfig(upcoming_deadline_horizon_days=7)
        report = build_compliance_report(overdue_profile, [], TODAY, config=config)
        assert report.upcoming_deadlines == []

    def test_to_dict(self, overdue_profile):
        payload = build_compliance_report(overdue_profile, [], TODAY).to_dict()
        assert payload["status"]["removal_of_conditions"]["current_status"] == "overdue"
        assert payload["active_items"][0] == {
            "type": "removal_of_conditions",
            "description": "File Form I-751 to remove conditions on residence",
            "urgency": "critical",
        }
        assert payload["risk"]["overall_risk"] == "none"

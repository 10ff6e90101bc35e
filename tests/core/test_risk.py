"""
Risk assessor tests: threshold boundaries on both tracks, permit handling,
and aggregation over a trip history.
"""

from datetime import date, timedelta

import pytest

from lprtrack.core.models import ContinuousResidenceRisk, LPRRiskLevel, ReentryPermit, Trip
from lprtrack.core.risk import (
    CONTINUOUS_RESIDENCE_TABLE,
    LPR_STATUS_TABLE,
    PERMIT_STATUS_TABLE,
    RECOMMENDATIONS,
    approaches_continuous_residence_risk,
    approaches_green_card_loss,
    assess_lpr_status_risk,
    assess_trip_risk,
    breaks_continuous_residence,
    calculate_green_card_abandonment_risk,
    calculate_trip_metrics,
    classify_continuous_residence,
    reentry_permit_protection,
    risks_automatic_green_card_loss,
)


def _trip_abroad(days_abroad, trip_id="t1", start=date(2024, 1, 10), **kwargs):
    """Trip with exactly days_abroad days between the travel days."""
    return Trip(trip_id, "u1", start, start + timedelta(days=days_abroad + 1), **kwargs)


@pytest.mark.parametrize("days,level,until_next", [
    (0, LPRRiskLevel.NONE, 150),
    (149, LPRRiskLevel.NONE, 1),
    (150, LPRRiskLevel.WARNING, 30),
    (179, LPRRiskLevel.WARNING, 1),
    (180, LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT, 150),
    (329, LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT, 1),
    (330, LPRRiskLevel.HIGH_RISK, 35),
    (364, LPRRiskLevel.HIGH_RISK, 1),
    (365, LPRRiskLevel.AUTOMATIC_LOSS, 0),
    (900, LPRRiskLevel.AUTOMATIC_LOSS, 0),
])
def test_abandonment_thresholds(days, level, until_next):
    result = calculate_green_card_abandonment_risk(days)
    assert result.risk_level == level
    assert result.days_until_next_threshold == until_next


@pytest.mark.parametrize("days,level", [
    (400, LPRRiskLevel.PROTECTED_BY_PERMIT),
    (669, LPRRiskLevel.PROTECTED_BY_PERMIT),
    (670, LPRRiskLevel.APPROACHING_PERMIT_LIMIT),
    (730, LPRRiskLevel.APPROACHING_PERMIT_LIMIT),
    (731, LPRRiskLevel.AUTOMATIC_LOSS),
])
def test_permit_thresholds(days, level):
    assert calculate_green_card_abandonment_risk(days, has_reentry_permit=True).risk_level == level


@pytest.mark.parametrize("days,risk", [
    (149, ContinuousResidenceRisk.NONE),
    (150, ContinuousResidenceRisk.APPROACHING),
    (179, ContinuousResidenceRisk.APPROACHING),
    (180, ContinuousResidenceRisk.AT_RISK),
    (364, ContinuousResidenceRisk.AT_RISK),
    (365, ContinuousResidenceRisk.BROKEN),
])
def test_continuous_residence_thresholds(days, risk):
    assert classify_continuous_residence(days) == risk


@pytest.mark.parametrize("table,level_type", [
    (CONTINUOUS_RESIDENCE_TABLE, ContinuousResidenceRisk),
    (LPR_STATUS_TABLE, LPRRiskLevel),
    (PERMIT_STATUS_TABLE, LPRRiskLevel),
])
def test_tables_hold_one_enum_each(table, level_type):
    assert all(isinstance(row.level, level_type) for row in table)
    assert [row.min_days for row in table] == sorted((row.min_days for row in table), reverse=True)
    assert table[-1].min_days == 0


def test_predicates():
    assert approaches_continuous_residence_risk(150)
    assert not approaches_continuous_residence_risk(180)
    assert breaks_continuous_residence(180)
    assert not breaks_continuous_residence(179)
    assert approaches_green_card_loss(330)
    assert not approaches_green_card_loss(365)
    assert risks_automatic_green_card_loss(365)
    assert not risks_automatic_green_card_loss(364)
    assert not risks_automatic_green_card_loss(730, has_reentry_permit=True)
    assert risks_automatic_green_card_loss(731, has_reentry_permit=True)


class TestAssessTripRisk:

    def test_presumption_trip(self):
        result = assess_trip_risk(_trip_abroad(200), date(2024, 9, 1))
        assert result.days_abroad == 200
        assert result.overall_risk_level == LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT
        assert result.continuous_residence_risk == ContinuousResidenceRisk.AT_RISK
        assert result.continuous_residence_impact.breaks_requirement
        assert not result.continuous_residence_impact.resets_eligibility_clock
        assert result.continuous_residence_impact.days_until_break == 165
        assert "This trip may reset your citizenship eligibility timeline." in result.warnings
        assert result.physical_presence_impact.days_deducted_from_eligibility == 200
        assert result.assessment_date == date(2024, 9, 1)

    def test_permit_protects_status_but_not_residence(self):
        trip = _trip_abroad(340)
        permit = ReentryPermit(True, trip.return_date + timedelta(days=30))
        result = assess_trip_risk(trip, date(2025, 1, 1), permit)
        assert result.has_reentry_permit
        assert result.overall_risk_level == LPRRiskLevel.PROTECTED_BY_PERMIT
        assert result.continuous_residence_risk == ContinuousResidenceRisk.AT_RISK

    def test_permit_expired_before_return(self):
        trip = _trip_abroad(340)
        permit = ReentryPermit(True, trip.return_date - timedelta(days=1))
        result = assess_trip_risk(trip, date(2025, 1, 1), permit)
        assert not result.has_reentry_permit
        assert result.overall_risk_level == LPRRiskLevel.HIGH_RISK
        assert "Continuous residence presumption already broken." in result.warnings

    def test_broken_residence_resets_clock(self):
        result = assess_trip_risk(_trip_abroad(400), date(2025, 6, 1))
        assert result.continuous_residence_risk == ContinuousResidenceRisk.BROKEN
        assert result.continuous_residence_impact.resets_eligibility_clock
        assert result.continuous_residence_impact.days_until_break == 0
        assert result.overall_risk_level == LPRRiskLevel.AUTOMATIC_LOSS

    def test_same_day_trip(self):
        trip = Trip("t1", "u1", date(2024, 3, 1), date(2024, 3, 1))
        result = assess_trip_risk(trip, date(2024, 3, 2))
        assert result.days_abroad == 0
        assert result.physical_presence_impact.message == "No impact on physical presence"
        assert not result.physical_presence_impact.affects_naturalization_timeline
        assert result.warnings == []

    def test_serializes(self):
        payload = assess_trip_risk(_trip_abroad(160), date(2024, 9, 1)).to_dict()
        assert payload["overall_risk_level"] == "warning"
        assert payload["continuous_residence_impact"]["risk"] == "approaching"
        assert payload["assessment_date"] == "2024-09-01"


class TestAssessLPRStatusRisk:

    def test_empty_history(self):
        result = assess_lpr_status_risk([], date(2024, 6, 1))
        assert result.overall_risk == LPRRiskLevel.NONE
        assert result.longest_trip.trip is None
        assert result.longest_trip.days_abroad == 0
        assert result.recommendations == []

    def test_longest_trip_sets_level(self):
        trips = [_trip_abroad(20, "short"), _trip_abroad(200, "long", start=date(2023, 2, 1))]
        result = assess_lpr_status_risk(trips, date(2024, 6, 1))
        assert result.overall_risk == LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT
        assert result.longest_trip.trip.id == "long"
        assert result.requires_reentry_permit
        assert result.recommendations == RECOMMENDATIONS[LPRRiskLevel.PRESUMPTION_OF_ABANDONMENT]

    def test_valid_permit_reports_none(self):
        permit = ReentryPermit(True, date(2026, 1, 1))
        trips = [_trip_abroad(200, start=date(2023, 1, 10))]
        result = assess_lpr_status_risk(trips, date(2024, 9, 1), permit)
        assert result.overall_risk == LPRRiskLevel.NONE
        assert result.longest_trip.risk_level == LPRRiskLevel.NONE
        assert not result.requires_reentry_permit
        assert result.recommendations == []

    def test_cumulative_days_raise_warning(self):
        trips = [
            _trip_abroad(100, "a", start=date(2024, 1, 10)),
            _trip_abroad(100, "b", start=date(2024, 6, 1)),
        ]
        result = assess_lpr_status_risk(trips, date(2024, 12, 1))
        assert result.total_days_abroad_current_year == 200
        assert result.current_year_trips == 2
        assert result.overall_risk == LPRRiskLevel.WARNING
        assert "You have spent 200 days abroad this year" in result.recommendations

    def test_cumulative_days_in_other_year_ignored(self):
        trips = [
            _trip_abroad(100, "a", start=date(2023, 1, 10)),
            _trip_abroad(100, "b", start=date(2023, 6, 1)),
        ]
        result = assess_lpr_status_risk(trips, date(2024, 12, 1))
        assert result.overall_risk == LPRRiskLevel.NONE

    def test_simulated_trips_excluded_by_default(self):
        trips = [_trip_abroad(400, "sim", is_simulated=True)]
        assert assess_lpr_status_risk(trips, date(2025, 6, 1)).overall_risk == LPRRiskLevel.NONE
        included = assess_lpr_status_risk(trips, date(2025, 6, 1), include_simulated=True)
        assert included.overall_risk == LPRRiskLevel.AUTOMATIC_LOSS

    def test_ties_keep_first_trip(self):
        trips = [_trip_abroad(50, "first"), _trip_abroad(50, "second", start=date(2024, 5, 1))]
        metrics = calculate_trip_metrics(trips, date(2024, 12, 1))
        assert metrics.longest_trip.id == "first"
        assert metrics.max_days == 50


class TestReentryPermitProtection:

    def test_no_permit(self):
        result = reentry_permit_protection(100, None, date(2024, 1, 1))
        assert not result.provides_protection
        assert result.warnings == ["No reentry permit on file"]

    def test_expiring_soon(self):
        permit = ReentryPermit(True, date(2024, 1, 31))
        result = reentry_permit_protection(100, permit, date(2024, 1, 1))
        assert result.provides_protection
        assert result.days_protected == 730
        assert result.days_until_expiry == 30
        assert "Reentry permit expires in 30 days" in result.warnings[0]

    def test_expired(self):
        permit = ReentryPermit(True, date(2023, 12, 31))
        result = reentry_permit_protection(100, permit, date(2024, 1, 1))
        assert not result.provides_protection
        assert result.days_until_expiry == -1

    def test_trip_longer_than_window(self):
        permit = ReentryPermit(True, date(2027, 1, 1))
        result = reentry_permit_protection(800, permit, date(2024, 1, 1))
        assert not result.provides_protection
        assert result.warnings == ["Trip duration exceeds maximum 2-year reentry permit protection"]

from datetime import date, timedelta

from lprtrack.config import EngineConfig
from lprtrack.core.max_trip import (
    WARNING_ALREADY_AT_RISK,
    WARNING_PERMIT_SCOPE,
    WARNING_PHYSICAL_PRESENCE,
    WARNINGS_N470,
    calculate_maximum_trip_duration,
    calculate_maximum_trip_duration_with_exemptions,
    has_risky_trips,
    total_days_abroad_since,
)
from lprtrack.core.models import LimitingFactor, ReentryPermit, Trip

GREEN_CARD = date(2020, 1, 1)
TODAY = date(2024, 6, 1)


def _trip_abroad(days_abroad, trip_id, start, **kwargs):
    return Trip(trip_id, "u1", start, start + timedelta(days=days_abroad + 1), **kwargs)


def _heavy_history():
    """Six 140-day trips: 840 days abroad, all below the warning level."""
    return [
        _trip_abroad(140, f"t{i}", date(2020 + i // 2, 1 + 6 * (i % 2), 5))
        for i in range(6)
    ]


class TestMaximumTripDuration:

    def test_no_trips_limited_by_continuous_residence(self):
        result = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY)
        assert result.physical_presence_safety_days == 882
        assert result.continuous_residence_safety_days == 149
        assert result.lpr_status_safety_days == 149
        assert result.maximum_days == 149
        assert result.limiting_factor == LimitingFactor.CONTINUOUS_RESIDENCE_APPROACHING
        assert result.warnings == []

    def test_three_year_allowance(self):
        result = calculate_maximum_trip_duration([], GREEN_CARD, "three_year", TODAY)
        assert result.physical_presence_safety_days == 517

    def test_physical_presence_limits_heavy_traveller(self):
        result = calculate_maximum_trip_duration(_heavy_history(), GREEN_CARD, "five_year", TODAY)
        assert result.physical_presence_safety_days == 42
        assert result.maximum_days == 42
        assert result.limiting_factor == LimitingFactor.PHYSICAL_PRESENCE
        assert result.warnings == [WARNING_PHYSICAL_PRESENCE]

    def test_trips_before_green_card_ignored(self):
        old = _trip_abroad(100, "old", date(2019, 1, 1))
        assert total_days_abroad_since([old], GREEN_CARD) == 0

    def test_simulated_trips_ignored(self):
        trips = [_trip_abroad(200, "sim", date(2022, 1, 1), is_simulated=True)]
        result = calculate_maximum_trip_duration(trips, GREEN_CARD, "five_year", TODAY)
        assert result.limiting_factor == LimitingFactor.CONTINUOUS_RESIDENCE_APPROACHING

    def test_already_at_risk(self):
        trips = [_trip_abroad(150, "long", date(2022, 1, 1))]
        assert has_risky_trips(trips)
        result = calculate_maximum_trip_duration(trips, GREEN_CARD, "five_year", TODAY)
        assert result.maximum_days == 0
        assert result.limiting_factor == LimitingFactor.ALREADY_AT_RISK
        assert result.warnings == WARNING_ALREADY_AT_RISK

    def test_permit_raises_lpr_limit_only(self):
        permit = ReentryPermit(True, date(2025, 6, 1))
        result = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY, permit)
        assert result.lpr_status_safety_days == 669
        assert result.continuous_residence_safety_days == 149
        assert result.limiting_factor == LimitingFactor.CONTINUOUS_RESIDENCE_APPROACHING
        assert WARNING_PERMIT_SCOPE in result.warnings

    def test_expired_permit_ignored(self):
        permit = ReentryPermit(True, date(2024, 5, 31))
        result = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY, permit)
        assert result.lpr_status_safety_days == 149
        assert result.warnings == []

    def test_buffer_from_config(self):
        config = EngineConfig(physical_presence_buffer_days=0)
        result = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY, config=config)
        assert result.physical_presence_safety_days == 912

    def test_serializes(self):
        payload = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY).to_dict()
        assert payload["limiting_factor"] == "continuous_residence_approaching"
        assert payload["maximum_days"] == 149


class TestN470Exemption:

    def test_not_approved_matches_base(self):
        base = calculate_maximum_trip_duration([], GREEN_CARD, "five_year", TODAY)
        same = calculate_maximum_trip_duration_with_exemptions([], GREEN_CARD, "five_year", TODAY)
        assert same == base

    def test_with_permit_limited_by_permit(self):
        permit = ReentryPermit(True, date(2026, 6, 1))
        result = calculate_maximum_trip_duration_with_exemptions(
            [], GREEN_CARD, "five_year", TODAY, permit, n470_approved=True,
        )
        assert result.continuous_residence_safety_days == 730
        assert result.maximum_days == 669
        assert result.limiting_factor == LimitingFactor.REENTRY_PERMIT_APPROACHING_LIMIT
        assert result.warnings == [WARNING_PERMIT_SCOPE] + WARNINGS_N470

    def test_without_permit_limited_by_lpr_status(self):
        result = calculate_maximum_trip_duration_with_exemptions(
            [], GREEN_CARD, "five_year", TODAY, n470_approved=True,
        )
        assert result.maximum_days == 149
        assert result.limiting_factor == LimitingFactor.LPR_STATUS_WARNING

    def test_margin_warning_not_duplicated(self):
        result = calculate_maximum_trip_duration_with_exemptions(
            _heavy_history(), GREEN_CARD, "five_year", TODAY, n470_approved=True,
        )
        assert result.limiting_factor == LimitingFactor.PHYSICAL_PRESENCE
        assert result.warnings.count(WARNING_PHYSICAL_PRESENCE) == 1

    def test_already_at_risk_not_lifted(self):
        trips = [_trip_abroad(200, "long", date(2022, 1, 1))]
        result = calculate_maximum_trip_duration_with_exemptions(
            trips, GREEN_CARD, "five_year", TODAY, n470_approved=True,
        )
        assert result.limiting_factor == LimitingFactor.ALREADY_AT_RISK
        assert result.maximum_days == 0

from datetime import date, timedelta

import pytest

from lprtrack.core.models import Trip
from lprtrack.errors import DateRangeError
from lprtrack.planning import (
    BudgetRiskLevel,
    ConfidenceLevel,
    MilestoneType,
    TripPlanRiskLevel,
    TripPlanRiskReason,
    assess_upcoming_trip_risk,
    calculate_milestones,
    calculate_safe_travel_budget,
    project_eligibility_date,
)

GREEN_CARD = date(2020, 1, 15)


def _plan(departure, return_, trip_id="p1", simulated=True):
    return Trip(trip_id, "u1", departure, return_, is_simulated=simulated)


class TestSafeTravelBudget:

    @pytest.mark.parametrize("days_abroad,available,level", [
        (100, 814, BudgetRiskLevel.SAFE),
        (824, 90, BudgetRiskLevel.CAUTION),
        (830, 84, BudgetRiskLevel.CAUTION),
        (884, 30, BudgetRiskLevel.WARNING),
        (1000, 0, BudgetRiskLevel.WARNING),
    ])
    def test_levels(self, days_abroad, available, level):
        budget = calculate_safe_travel_budget(days_abroad, "five_year", GREEN_CARD)
        assert budget.days_available == available
        assert budget.risk_level == level
        assert budget.until_date == date(2025, 1, 14)

    def test_recommendation_text(self):
        budget = calculate_safe_travel_budget(884, "five_year", GREEN_CARD)
        assert budget.recommendation.startswith("Minimize travel")


class TestUpcomingTripRisk:

    @pytest.mark.parametrize("departure,return_,level,over", [
        (date(2024, 1, 1), date(2024, 12, 31), TripPlanRiskLevel.CRITICAL, 214),
        (date(2024, 9, 1), date(2025, 2, 28), TripPlanRiskLevel.HIGH, 29),
        (date(2024, 1, 1), date(2024, 5, 29), TripPlanRiskLevel.MEDIUM, None),
        (date(2024, 1, 1), date(2024, 1, 20), TripPlanRiskLevel.LOW, None),
    ])
    def test_span_thresholds(self, departure, return_, level, over):
        [risk] = assess_upcoming_trip_risk([_plan(departure, return_)], 100, "five_year", GREEN_CARD)
        assert risk.risk_level == level
        assert risk.days_over_warning == over

    def test_high_risk_text(self):
        [risk] = assess_upcoming_trip_risk(
            [_plan(date(2024, 9, 1), date(2025, 2, 28))], 100, "five_year", GREEN_CARD
        )
        assert risk.reason == TripPlanRiskReason.CONTINUOUS_RESIDENCE
        assert risk.impact_description == "This trip creates a presumption of breaking continuous residence"

    def test_running_total_exhausts_budget(self):
        trips = [
            _plan(date(2024, 3, 1), date(2024, 3, 25), "first"),
            _plan(date(2024, 5, 1), date(2024, 5, 12), "second"),
        ]
        risks = assess_upcoming_trip_risk(trips, 884, "five_year", GREEN_CARD)
        assert [(r.trip_id, r.risk_level, r.reason) for r in risks] == [
            ("first", TripPlanRiskLevel.LOW, TripPlanRiskReason.SAFE),
            ("second", TripPlanRiskLevel.MEDIUM, TripPlanRiskReason.PHYSICAL_PRESENCE),
        ]

    def test_only_named_planned_trips(self):
        trips = [
            _plan(date(2024, 3, 1), date(2024, 3, 25), "real", simulated=False),
            _plan(date(2024, 3, 1), date(2024, 3, 25), ""),
            _plan(date(2024, 4, 10), date(2024, 4, 1), "reversed"),
        ]
        assert assess_upcoming_trip_risk(trips, 100, "five_year", GREEN_CARD) == []


class TestProjection:

    GREEN_CARD = date(2022, 1, 1)
    TODAY = date(2024, 12, 31)

    def _summers(self, days_by_year):
        # a June trip of the given days abroad in each year
        return [
            Trip(f"y{year}", "u1", date(year, 6, 1), date(year, 6, 1) + timedelta(days=days + 1))
            for year, days in days_by_year.items() if days
        ]

    def test_projected_date(self):
        trips = self._summers({2022: 20, 2023: 20, 2024: 20})
        projection = project_eligibility_date(trips, 800, "five_year", self.GREEN_CARD, self.TODAY)
        assert projection.projected_eligibility_date == date(2025, 6, 4)
        assert projection.average_days_abroad_per_year == 99
        assert projection.confidence_level == ConfidenceLevel.HIGH
        assert projection.assumptions == [
            "Based on 27% historical absence rate",
            "Assuming similar travel patterns continue",
        ]

    @pytest.mark.parametrize("recent_days,confidence", [
        (50, ConfidenceLevel.MEDIUM),    # variance 555.6
        (100, ConfidenceLevel.LOW),      # variance 2222.2
    ])
    def test_confidence_from_variance(self, recent_days, confidence):
        trips = self._summers({2024: recent_days})
        projection = project_eligibility_date(trips, 800, "five_year", self.GREEN_CARD, self.TODAY)
        assert projection.confidence_level == confidence

    def test_short_history_is_low_confidence(self):
        trips = self._summers({2024: 20})
        projection = project_eligibility_date(trips, 500, "five_year", date(2023, 6, 1), self.TODAY)
        assert projection.confidence_level == ConfidenceLevel.LOW
        assert projection.assumptions[-1] == "Limited historical data available"

    def test_no_history(self):
        projection = project_eligibility_date([], 800, "five_year", self.GREEN_CARD, self.TODAY)
        assert projection.projected_eligibility_date == date(2025, 6, 4)
        assert projection.average_days_abroad_per_year == 0
        assert projection.confidence_level == ConfidenceLevel.LOW
        assert projection.assumptions == ["No travel history available for projection"]

    def test_requirement_already_met(self):
        projection = project_eligibility_date([], 913, "five_year", self.GREEN_CARD, self.TODAY)
        assert projection.projected_eligibility_date == self.TODAY
        assert projection.average_days_abroad_per_year == 61
        assert projection.confidence_level == ConfidenceLevel.HIGH

    def test_never_present(self):
        projection = project_eligibility_date([], 0, "five_year", self.GREEN_CARD, self.TODAY)
        assert projection.projected_eligibility_date == date(2099, 12, 31)
        assert projection.average_days_abroad_per_year == 365

    def test_current_before_green_card(self):
        with pytest.raises(DateRangeError) as exc_info:
            project_eligibility_date([], 0, "five_year", self.TODAY, self.GREEN_CARD)
        assert exc_info.value.field == "currentDate"


class TestMilestones:

    def test_in_progress(self):
        presence, filing = calculate_milestones(456, "five_year", GREEN_CARD, date(2022, 1, 15))
        assert presence.type == MilestoneType.PHYSICAL_PRESENCE
        assert presence.days_remaining == 457
        assert presence.current_progress == 49.9
        assert presence.description == "457 days until physical presence requirement met"

        assert filing.type == MilestoneType.EARLY_FILING
        assert filing.days_remaining == 1005
        assert filing.target_date == date(2024, 10, 16)
        assert filing.current_progress == 42.1
        assert filing.description == "1005 days until early filing window opens"

    def test_all_reached(self):
        today = date(2025, 1, 20)
        presence, filing = calculate_milestones(913, "five_year", GREEN_CARD, today)
        assert (presence.days_remaining, presence.target_date, presence.current_progress) == (0, today, 100.0)
        assert presence.description == "Physical presence requirement met!"
        assert (filing.days_remaining, filing.current_progress) == (0, 100.0)
        assert filing.description == "Early filing window is now open!"

    def test_to_dict(self):
        payload = calculate_milestones(0, "three_year", GREEN_CARD, GREEN_CARD)[0].to_dict()
        assert payload["type"] == "physical_presence"
        assert payload["days_remaining"] == 548

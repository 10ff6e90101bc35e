from datetime import date

import pytest

from lprtrack.analytics import (
    annual_travel_summary,
    calculate_travel_streaks,
    country_statistics,
    days_abroad_by_year,
    travel_trend,
    trips_frame,
)
from lprtrack.core.models import Trip
from lprtrack.errors import DateRangeError


@pytest.fixture
def history():
    return [
        Trip("a", "u1", date(2023, 3, 1), date(2023, 3, 11), location="France"),
        Trip("b", "u1", date(2023, 6, 1), date(2023, 6, 26), location="Japan"),
        Trip("c", "u1", date(2023, 12, 25), date(2024, 1, 5), location="France"),
    ]


class TestTripsFrame:

    def test_columns_and_days(self, history):
        df = trips_frame(history)
        assert df["days_abroad"].tolist() == [9, 24, 10]
        assert df["departure_year"].tolist() == [2023, 2023, 2023]

    def test_excludes_simulated_and_reversed(self):
        trips = [
            Trip("sim", "u1", date(2023, 1, 1), date(2023, 1, 20), is_simulated=True),
            Trip("rev", "u1", date(2023, 2, 10), date(2023, 2, 1)),
            Trip("ok", "u1", date(2023, 3, 1), date(2023, 3, 5)),
        ]
        df = trips_frame(trips)
        assert df["trip_id"].tolist() == ["ok"]
        assert df["location"].tolist() == ["Unknown"]

    def test_empty(self):
        assert trips_frame([]).empty


class TestDaysAbroadByYear:

    def test_year_split(self, history):
        df = days_abroad_by_year(history, date(2023, 1, 1), date(2024, 12, 31))
        assert df.to_dict("records") == [
            {"year": 2023, "days_abroad": 39, "trip_count": 3},
            {"year": 2024, "days_abroad": 4, "trip_count": 0},
        ]

    def test_clipped_to_start(self, history):
        df = days_abroad_by_year(history, date(2023, 6, 10), date(2023, 12, 31))
        assert df["days_abroad"].tolist() == [16 + 6]

    def test_no_trips(self):
        df = days_abroad_by_year([], date(2022, 5, 1), date(2023, 5, 1))
        assert df["days_abroad"].tolist() == [0, 0]

    def test_reversed_range(self, history):
        with pytest.raises(DateRangeError):
            days_abroad_by_year(history, date(2024, 1, 1), date(2023, 1, 1))


class TestCountryStatistics:

    def test_sorted_by_days(self, history):
        stats = country_statistics(history)
        assert stats["country"].tolist() == ["Japan", "France"]
        france = stats.iloc[1]
        assert france["total_days"] == 19
        assert france["trip_count"] == 2
        assert france["average_duration"] == 10
        assert france["last_visited"] == date(2024, 1, 5)

    def test_empty(self):
        assert list(country_statistics([]).columns) == [
            "country", "total_days", "trip_count", "average_duration", "last_visited",
        ]


class TestAnnualSummary:

    def test_year_with_travel(self, history):
        summary = annual_travel_summary(history, 2023, history)
        assert summary.total_days_abroad == 43
        assert summary.total_trips == 3
        assert summary.longest_trip.destination == "Japan"
        assert summary.longest_trip.duration == 24
        assert summary.top_destinations == [
            {"country": "Japan", "days": 24},
            {"country": "France", "days": 19},
        ]
        assert summary.compared_to_last_year.days_change == 43
        assert summary.compared_to_last_year.trips_change == 3
        assert summary.compared_to_last_year.trend == "more_travel"

    def test_empty_year(self, history):
        summary = annual_travel_summary(history, 2024, history)
        assert summary.total_trips == 0
        assert summary.longest_trip is None
        assert summary.top_destinations == []
        assert summary.compared_to_last_year.trend == "less_travel"

    def test_without_comparison(self, history):
        assert annual_travel_summary(history, 2023).compared_to_last_year is None

    def test_to_dict(self, history):
        payload = annual_travel_summary(history, 2023).to_dict()
        assert payload["longest_trip"]["departure_date"] == "2023-06-01"
        assert payload["compared_to_last_year"] is None


@pytest.mark.parametrize("change,trend", [
    (20, "similar"),
    (-20, "similar"),
    (21, "more_travel"),
    (-21, "less_travel"),
])
def test_travel_trend(change, trend):
    assert travel_trend(change) == trend


class TestTravelStreaks:

    def test_longest_first(self, history):
        streaks = calculate_travel_streaks(history, date(2023, 1, 1), date(2024, 1, 31))
        assert [s.duration for s in streaks] == [181, 81, 59, 26]
        assert [s.description for s in streaks] == [
            "Presence in USA for 181 days",
            "Presence in USA for 81 days",
            "Initial presence in USA for 59 days",
            "Current presence in USA for 26 days",
        ]
        assert (streaks[0].start_date, streaks[0].end_date) == (date(2023, 6, 27), date(2023, 12, 24))

    def test_no_trips(self):
        streaks = calculate_travel_streaks([], date(2024, 1, 1), date(2024, 1, 31))
        assert len(streaks) == 1
        assert streaks[0].description == "Continuous presence in USA for 31 days"

    def test_departure_on_green_card_date(self):
        trips = [Trip("a", "u1", date(2023, 3, 1), date(2023, 3, 11))]
        streaks = calculate_travel_streaks(trips, date(2023, 3, 1), date(2023, 3, 20))
        assert [s.description for s in streaks] == ["Current presence in USA for 9 days"]

    def test_back_to_back_trips_leave_no_gap(self):
        trips = [
            Trip("a", "u1", date(2023, 3, 1), date(2023, 3, 11)),
            Trip("b", "u1", date(2023, 3, 12), date(2023, 3, 20)),
        ]
        streaks = calculate_travel_streaks(trips, date(2023, 3, 1), date(2023, 3, 20))
        assert streaks == []

    def test_overlapping_trip_keeps_latest_return(self):
        trips = [
            Trip("a", "u1", date(2024, 1, 1), date(2024, 1, 20)),
            Trip("b", "u1", date(2024, 1, 10), date(2024, 1, 15)),
        ]
        streaks = calculate_travel_streaks(trips, date(2024, 1, 1), date(2024, 1, 31))
        assert [(s.start_date, s.duration) for s in streaks] == [(date(2024, 1, 21), 11)]

    def test_reversed_range(self):
        with pytest.raises(DateRangeError) as exc_info:
            calculate_travel_streaks([], date(2024, 2, 1), date(2024, 1, 1))
        assert exc_info.value.field == "currentDate"

    def test_to_dict(self):
        streak = calculate_travel_streaks([], date(2024, 1, 1), date(2024, 1, 2))[0]
        assert streak.to_dict()["start_date"] == "2024-01-01"

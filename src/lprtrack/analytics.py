"""
Travel analytics over a trip history.

Builds pandas DataFrames from trips so summaries can be grouped, sorted
and exported the same way as any other tabular output:
- trips_frame: one row per real trip with days abroad
- days_abroad_by_year: days abroad falling in each calendar year
- country_statistics: totals per destination
- annual_travel_summary: one year's totals compared with the year before
- calculate_travel_streaks: periods of presence between trips

Simulated trips and trips returning before they depart are excluded
everywhere. Days abroad follow the USCIS rule: departure and return days
count as days present in the U.S.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from lprtrack.constants import (
    TOP_DESTINATIONS_LIMIT,
    TRAVEL_TREND_SIGNIFICANT_DAYS,
    UNKNOWN_LOCATION,
)
from lprtrack.core.models import Trip
from lprtrack.core.trip_days import count_days_abroad
from lprtrack.errors import DateRangeError
from lprtrack.utils.serialize import to_plain

logger = logging.getLogger(__name__)

TRIP_COLUMNS = [
    "trip_id",
    "location",
    "departure_date",
    "return_date",
    "days_abroad",
    "departure_year",
]


def trips_frame(trips: Iterable[Trip]) -> pd.DataFrame:
    """
    One row per real, well-formed trip.

    Columns: trip_id, location (missing -> "Unknown"), departure_date and
    return_date (datetime64), days_abroad, departure_year.
    """
    rows = [
        {
            "trip_id": trip.id,
            "location": trip.location or UNKNOWN_LOCATION,
            "departure_date": trip.departure_date,
            "return_date": trip.return_date,
            "days_abroad": count_days_abroad(trip),
            "departure_year": trip.departure_date.year,
        }
        for trip in trips
        if not trip.is_simulated and trip.is_valid
    ]
    df = pd.DataFrame(rows, columns=TRIP_COLUMNS)
    df["departure_date"] = pd.to_datetime(df["departure_date"])
    df["return_date"] = pd.to_datetime(df["return_date"])
    df["days_abroad"] = df["days_abroad"].astype(int)
    return df


def days_abroad_in_window(df: pd.DataFrame, window_start: date, window_end: date) -> pd.Series:
    """
    Days abroad per trip row that fall inside [window_start, window_end].

    A travel day is subtracted only if it lies inside the window, so a trip
    crossing the window edge keeps the edge day as abroad.
    """
    ws = pd.Timestamp(window_start)
    we = pd.Timestamp(window_end)
    dep = df["departure_date"]
    ret = df["return_date"]

    start = dep.where(dep >= ws, ws)
    end = ret.where(ret <= we, we)
    span = (end - start).dt.days + 1

    travel_days = dep.between(ws, we).astype(int) + ret.between(ws, we).astype(int)
    days = (span - travel_days).clip(lower=0)

    counted = (ret >= ws) & (dep <= we) & (dep != ret)
    return days.where(counted, 0).astype(int)


def days_abroad_by_year(
    trips: Iterable[Trip],
    start_date: date,
    end_date: date,
) -> pd.DataFrame:
    """
    Days abroad in each calendar year between two dates.

    The first and last years are clipped to start_date and end_date. A trip
    is counted in trip_count for the year it departed, provided it has days
    abroad in that year.

    Args:
        trips: Travel history.
        start_date: Usually the green card date.
        end_date: Usually the current date.

    Returns:
        DataFrame with columns year, days_abroad, trip_count.

    Raises:
        DateRangeError: If start_date is after end_date.
    """
    if start_date > end_date:
        raise DateRangeError(
            f"start date {start_date} is after end date {end_date}",
            field="startDate",
        )

    df = trips_frame(trips)
    rows: List[Dict[str, int]] = []

    for year in range(start_date.year, end_date.year + 1):
        window_start = max(start_date, date(year, 1, 1))
        window_end = min(end_date, date(year, 12, 31))

        if df.empty:
            rows.append({"year": year, "days_abroad": 0, "trip_count": 0})
            continue

        days = days_abroad_in_window(df, window_start, window_end)
        trip_count = int(((df["departure_year"] == year) & (days > 0)).sum())
        rows.append({"year": year, "days_abroad": int(days.sum()), "trip_count": trip_count})

    return pd.DataFrame(rows, columns=["year", "days_abroad", "trip_count"])


def country_statistics(trips: Iterable[Trip]) -> pd.DataFrame:
    """
    Per-destination totals, most days abroad first.

    Returns:
        DataFrame with columns country, total_days, trip_count,
        average_duration (rounded half up) and last_visited (latest return).
    """
    df = trips_frame(trips)
    columns = ["country", "total_days", "trip_count", "average_duration", "last_visited"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    grouped = (
        df.groupby("location", sort=True)
        .agg(
            total_days=("days_abroad", "sum"),
            trip_count=("trip_id", "count"),
            last_visited=("return_date", "max"),
        )
        .reset_index()
        .rename(columns={"location": "country"})
    )
    grouped["average_duration"] = np.floor(
        grouped["total_days"] / grouped["trip_count"] + 0.5
    ).astype(int)
    grouped["last_visited"] = grouped["last_visited"].dt.date

    grouped = grouped.sort_values("total_days", ascending=False, kind="mergesort")
    return grouped[columns].reset_index(drop=True)


# =============================================================================
# ANNUAL SUMMARY
# =============================================================================

@dataclass
class LongestTripSummary:
    destination: str
    duration: int
    departure_date: date
    return_date: date


@dataclass
class YearComparison:
    days_change: int
    trips_change: int
    trend: str  # "more_travel", "less_travel" or "similar"


@dataclass
class AnnualTravelSummary:
    year: int
    total_days_abroad: int
    total_trips: int
    longest_trip: Optional[LongestTripSummary]
    top_destinations: List[Dict[str, Any]] = field(default_factory=list)
    compared_to_last_year: Optional[YearComparison] = None

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


def travel_trend(days_change: int) -> str:
    if days_change > TRAVEL_TREND_SIGNIFICANT_DAYS:
        return "more_travel"
    if days_change < -TRAVEL_TREND_SIGNIFICANT_DAYS:
        return "less_travel"
    return "similar"


def _year_rows(trips: Iterable[Trip], year: int) -> pd.DataFrame:
    df = trips_frame(trips)
    return df[df["departure_year"] == year].reset_index(drop=True)


def annual_travel_summary(
    trips: Iterable[Trip],
    year: int,
    previous_year_trips: Optional[Iterable[Trip]] = None,
) -> AnnualTravelSummary:
    """
    Summary of trips departing in one calendar year.

    Args:
        trips: Travel history.
        year: Calendar year to summarize.
        previous_year_trips: History to compare against (its trips departing
            in year - 1). No comparison is made when omitted.

    Returns:
        AnnualTravelSummary with totals, longest trip and top destinations.
    """
    year_df = _year_rows(trips, year)
    total_days = int(year_df["days_abroad"].sum())

    longest = None
    if not year_df.empty:
        # idxmax returns the first row on ties
        row = year_df.loc[year_df["days_abroad"].idxmax()]
        longest = LongestTripSummary(
            destination=row["location"],
            duration=int(row["days_abroad"]),
            departure_date=row["departure_date"].date(),
            return_date=row["return_date"].date(),
        )

    top = (
        year_df.groupby("location", sort=False)["days_abroad"].sum()
        .sort_values(ascending=False, kind="mergesort")
        .head(TOP_DESTINATIONS_LIMIT)
    )
    top_destinations = [
        {"country": country, "days": int(days)} for country, days in top.items()
    ]

    comparison = None
    if previous_year_trips is not None:
        prev_df = _year_rows(previous_year_trips, year - 1)
        days_change = total_days - int(prev_df["days_abroad"].sum())
        comparison = YearComparison(
            days_change=days_change,
            trips_change=len(year_df) - len(prev_df),
            trend=travel_trend(days_change),
        )

    logger.debug(f"Annual summary {year}: {len(year_df)} trips, {total_days} days abroad")
    return AnnualTravelSummary(
        year=year,
        total_days_abroad=total_days,
        total_trips=len(year_df),
        longest_trip=longest,
        top_destinations=top_destinations,
        compared_to_last_year=comparison,
    )


# =============================================================================
# TRAVEL STREAKS
# =============================================================================

@dataclass
class TravelStreak:
    """Unbroken run of days in the U.S., travel days excluded."""
    start_date: date
    end_date: date
    duration: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


def _streak(start: pd.Timestamp, end: pd.Timestamp, label: str) -> TravelStreak:
    duration = (end - start).days + 1
    return TravelStreak(
        start_date=start.date(),
        end_date=end.date(),
        duration=duration,
        description=f"{label} for {duration} days",
    )


def calculate_travel_streaks(
    trips: Iterable[Trip],
    green_card_date: date,
    current_date: date,
) -> List[TravelStreak]:
    """
    Periods of presence in the U.S. between trips, longest first.

    Streaks run from the green card date to the first departure, between
    each return and the next departure, and from the last return to
    current_date. Travel days are not part of a streak. Ties keep
    chronological order.

    Raises:
        DateRangeError: If green_card_date is after current_date.
    """
    if green_card_date > current_date:
        raise DateRangeError(
            f"current date {current_date} is before green card date {green_card_date}",
            field="currentDate",
        )

    one_day = pd.Timedelta(days=1)
    start = pd.Timestamp(green_card_date)
    end = pd.Timestamp(current_date)

    df = trips_frame(trips).sort_values("departure_date", kind="mergesort").reset_index(drop=True)
    if df.empty:
        return [_streak(start, end, "Continuous presence in USA")]

    streaks: List[TravelStreak] = []

    first_departure = df["departure_date"].iloc[0]
    if first_departure > start:
        streaks.append(_streak(start, first_departure - one_day, "Initial presence in USA"))

    gaps = pd.DataFrame({
        "start": df["return_date"] + one_day,
        "end": df["departure_date"].shift(-1) - one_day,
    }).dropna()
    for row in gaps[gaps["end"] >= gaps["start"]].itertuples(index=False):
        streaks.append(_streak(row.start, row.end, "Presence in USA"))

    last_return = df["return_date"].max()
    if last_return < end:
        streaks.append(_streak(last_return + one_day, end, "Current presence in USA"))

    streaks.sort(key=lambda s: s.duration, reverse=True)
    logger.debug(f"Found {len(streaks)} presence streaks across {len(df)} trips")
    return streaks

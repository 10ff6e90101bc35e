"""
Trip day-counter.

Counts days abroad for a single trip. USCIS treats the departure and
return days as days present in the United States, so by default both are
excluded from the inclusive span:

    departure 2024-01-01, return 2024-01-10 -> 10-day span, 8 days abroad

Both travel-day flags can be switched off for the raw-duration variant,
where the whole inclusive span counts as abroad.
"""

from datetime import date, timedelta
from typing import Iterable, List, Set

from lprtrack.core.models import Trip
from lprtrack.utils.dates import days_between, format_date, inclusive_span


def _count_span(
    start: date,
    end: date,
    include_departure_day: bool,
    include_return_day: bool,
) -> int:
    if start == end:
        return 0

    days = inclusive_span(start, end)
    if include_departure_day:
        days -= 1
    if include_return_day:
        days -= 1
    return max(0, days)


def count_days_abroad(
    trip: Trip,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> int:
    """
    Days abroad for one trip.

    Args:
        trip: The trip to count.
        include_departure_day: Treat the departure day as a day present in
            the U.S. (subtracted from the span).
        include_return_day: Treat the return day as a day present in the U.S.

    Returns:
        Days abroad, never negative. Same-day trips are always 0.
    """
    return _count_span(
        trip.departure_date,
        trip.return_date,
        include_departure_day,
        include_return_day,
    )


def count_days_abroad_excluding_travel(trip: Trip) -> int:
    """Raw inclusive duration: every calendar day of the trip counts."""
    return count_days_abroad(trip, include_departure_day=False, include_return_day=False)


def count_days_abroad_in_period(
    trip: Trip,
    period_start: date,
    period_end: date,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> int:
    """
    Days abroad for the part of a trip inside [period_start, period_end].

    The trip is clipped to the window before the travel-day rule is
    applied. Trips that do not intersect the window count 0.
    """
    if trip.return_date < period_start or trip.departure_date > period_end:
        return 0

    start = max(trip.departure_date, period_start)
    end = min(trip.return_date, period_end)
    if start > end:
        return 0
    return _count_span(start, end, include_departure_day, include_return_day)


def count_days_abroad_in_year(
    trip: Trip,
    year: int,
    include_departure_day: bool = True,
    include_return_day: bool = True,
) -> int:
    return count_days_abroad_in_period(
        trip,
        date(year, 1, 1),
        date(year, 12, 31),
        include_departure_day,
        include_return_day,
    )


def days_abroad_simple(trip: Trip) -> int:
    """
    Whole days between departure and return, minus one.

    This is the formula used by the LPR-status and trip-metrics track. It
    agrees with count_days_abroad for every valid multi-day trip.
    """
    return max(0, days_between(trip.return_date, trip.departure_date) - 1)


def raw_trip_length(trip: Trip) -> int:
    """
    Whole days between departure and return with no travel-day adjustment.

    Used by the continuous-residence warning check, which measures the
    plain difference of the two dates.
    """
    return days_between(trip.return_date, trip.departure_date)


def collect_days_abroad(
    trip: Trip,
    period_start: date,
    period_end: date,
    days: Set[str],
) -> None:
    """
    Add the ISO dates abroad for a trip inside a window to a shared set.

    Travel days count as present, with two window-edge exceptions: a trip
    already under way at period_start marks period_start itself as abroad,
    and a trip still abroad after period_end marks period_end as abroad.
    """
    count_start = max(trip.departure_date, period_start)
    count_end = min(trip.return_date, period_end)
    if count_start >= count_end:
        return

    current = count_start if trip.departure_date < period_start else count_start + timedelta(days=1)
    extends_past_end = trip.return_date > period_end

    while current < count_end or (current == count_end and extends_past_end):
        days.add(format_date(current))
        current += timedelta(days=1)


def filter_real_trips(trips: Iterable[Trip], include_simulated: bool = False) -> List[Trip]:
    """Drop simulated trips unless explicitly requested."""
    if include_simulated:
        return list(trips)
    return [trip for trip in trips if not trip.is_simulated]

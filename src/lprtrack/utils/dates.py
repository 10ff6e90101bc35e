"""
Calendar utilities for lprtrack.

All arithmetic operates on datetime.date values, so day counts never
drift across a daylight-saving boundary. This module provides:
- Strict YYYY-MM-DD parsing and formatting
- Leap-year-aware year and month arithmetic (anniversaries, month clamping)
- Whole-day, whole-month and whole-year differences
- Weekend and April 16 holiday shifting for tax deadlines
"""

import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import Iterator, Optional, Union

from lprtrack.constants import TAX_HOLIDAY
from lprtrack.errors import DateFormatError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]

SATURDAY = 5
SUNDAY = 6
FRIDAY = 4


# =============================================================================
# PARSING / FORMATTING
# =============================================================================

def parse_date(value: str, field: Optional[str] = None) -> date:
    """
    Parse a strict YYYY-MM-DD string into a date.

    Args:
        value: Date string. No time component or surrounding whitespace.
        field: Name of the input field, carried on the error.

    Returns:
        The calendar date.

    Raises:
        DateFormatError: If the string does not match the pattern, names a
            day that does not exist (2023-02-29, 2024-04-31) or a year
            outside 1..9999.

    Example:
        >>> parse_date("2024-02-29")
        datetime.date(2024, 2, 29)
    """
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise DateFormatError(
            f"Invalid date format: {value!r} (expected YYYY-MM-DD)",
            field=field,
            details={"value": value},
        )

    year, month, day = (int(part) for part in value.split("-"))
    if not MINYEAR <= year <= MAXYEAR:
        raise DateFormatError(
            f"Year out of range: {value}",
            field=field,
            details={"value": value},
        )
    if not 1 <= month <= 12 or not 1 <= day <= days_in_month(year, month):
        raise DateFormatError(
            f"Invalid calendar date: {value}",
            field=field,
            details={"value": value},
        )
    return date(year, month, day)


def coerce_date(value: DateLike, field: Optional[str] = None) -> date:
    """Accept a date or an ISO string; anything else is a format error."""
    # datetime is a date subclass; keep only the calendar part
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    return parse_date(value, field)


def format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


# =============================================================================
# CALENDAR FACTS
# =============================================================================

def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


# =============================================================================
# ARITHMETIC
# =============================================================================

def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def sub_days(value: date, days: int) -> date:
    return value - timedelta(days=days)


def add_years(value: date, years: int) -> date:
    """
    Anniversary arithmetic: Feb 29 lands on Feb 28 in a non-leap target year.

    Example:
        >>> add_years(date(2024, 2, 29), 5)
        datetime.date(2029, 2, 28)
    """
    year = value.year + years
    day = min(value.day, days_in_month(year, value.month))
    return date(year, value.month, day)


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, days_in_month(year, month))
    return date(year, month, day)


def sub_months(value: date, months: int) -> date:
    return add_months(value, -months)


def days_between(later: date, earlier: date) -> int:
    """Signed whole days from earlier to later."""
    return (later - earlier).days


def inclusive_span(start: date, end: date) -> int:
    """Number of calendar days in [start, end], counting both ends."""
    return (end - start).days + 1


def months_between(later: date, earlier: date) -> int:
    """
    Whole calendar months between two dates, truncated toward zero.

    A month is complete once the same day-of-month (clamped to month end)
    has been reached: 2024-01-15 to 2024-03-01 is one month.
    """
    sign = 1
    if later < earlier:
        later, earlier, sign = earlier, later, -1

    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if months > 0 and add_months(earlier, months) > later:
        months -= 1
    return sign * months


def years_between(later: date, earlier: date) -> int:
    """Whole years elapsed; the anniversary day itself completes the year."""
    years = later.year - earlier.year
    if (later.month, later.day) < (earlier.month, earlier.day):
        years -= 1
    return years


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in [start, end]; nothing when start is after end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive interval overlap."""
    return a_start <= b_end and a_end >= b_start


# =============================================================================
# BUSINESS DAYS
# =============================================================================

def next_business_day(value: date) -> date:
    """Move a Saturday or Sunday forward to the following Monday."""
    if value.weekday() == SATURDAY:
        return value + timedelta(days=2)
    if value.weekday() == SUNDAY:
        return value + timedelta(days=1)
    return value


def adjust_tax_deadline(value: date) -> date:
    """
    Shift a tax deadline past weekends and the April 16 holiday.

    The weekend shift is applied first. For April dates the holiday is then
    honored:
    - landing on April 16 moves to April 17
    - a Friday April 15 moves to Monday April 18
    - landing on April 17 when April 16 was a Sunday (holiday observed on
      Monday) moves to Tuesday April 18

    Example:
        >>> adjust_tax_deadline(date(2023, 4, 15))  # Saturday
        datetime.date(2023, 4, 18)
    """
    adjusted = next_business_day(value)

    holiday_month, holiday_day = TAX_HOLIDAY
    if adjusted.month != holiday_month:
        return adjusted

    if adjusted.day == holiday_day:
        return adjusted + timedelta(days=1)

    if adjusted.day == holiday_day - 1 and adjusted.weekday() == FRIDAY:
        return adjusted + timedelta(days=3)

    holiday = date(adjusted.year, holiday_month, holiday_day)
    if adjusted.day == holiday_day + 1 and holiday.weekday() == SUNDAY:
        return adjusted + timedelta(days=1)

    return adjusted
